"""Run-length token compression for the value strings of one branch.

A run of identical values is written either literally (``1_1_1``) or as a
run token (``1~3``, or ``~3`` for a run of empty values), whichever is
shorter once joined with the token separator.
"""

from itertools import groupby
from typing import List, Optional, Sequence

from buildlink import base62
from buildlink.exceptions import CountMismatchError, InvalidDigitError

TOKEN_SEPARATOR = "_"
RUN_MARK = "~"
MIN_RUN = 2


def encode_count(count: int) -> str:
    """Decimal below 10, base62 from 10 on (the two agree on single digits)."""
    if count < 10:
        return str(count)
    return base62.encode(count)


def decode_count(text: str) -> int:
    """Parse a run count written by encode_count."""
    return base62.decode(text)


def rle_is_shorter(value_length: int, count: int) -> bool:
    """Whether ``count`` copies of a value of ``value_length`` chars should become a run token.

    Ties go to the run token only for the empty value, where ``~n`` carries
    no value characters at all.
    """
    plain_length = value_length * count + (count - 1)
    rle_length = value_length + len(RUN_MARK) + len(encode_count(count))
    if value_length == 0:
        return rle_length <= plain_length
    return rle_length < plain_length


def compress(values: Sequence[str]) -> List[str]:
    tokens = []
    for value, run in groupby(values):
        count = sum(1 for _ in run)
        if count > 1 and rle_is_shorter(len(value), count):
            tokens.append(f"{value}{RUN_MARK}{encode_count(count)}")
        else:
            tokens.extend([value] * count)
    return tokens


def expand(tokens: Sequence[str], limit: Optional[int] = None) -> List[str]:
    """Inverse of compress. Malformed run tokens raise BuildCodeError subclasses.

    With ``limit`` set, expansion stops with CountMismatchError as soon as it
    would produce more than ``limit`` values.
    """
    values = []
    for token in tokens:
        if RUN_MARK not in token:
            count = 1
        else:
            value, _, count_text = token.partition(RUN_MARK)
            if RUN_MARK in count_text:
                raise InvalidDigitError(RUN_MARK, token)
            count = decode_count(count_text)
            if count < MIN_RUN:
                raise CountMismatchError("run length", f">= {MIN_RUN}", count)
        if limit is not None and len(values) + count > limit:
            raise CountMismatchError("value", limit, f"more than {limit}")
        if count == 1:
            values.append(token)
        else:
            values.extend([value] * count)
    return values
