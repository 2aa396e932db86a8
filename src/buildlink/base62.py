"""Conversion between non-negative integers and base62 strings.

Symbol values: 0-9 are the digits, 10-35 are ``a``-``z`` and 36-61 are
``A``-``Z``. Every symbol is safe in a URL path segment without escaping.
"""

import string

from buildlink.exceptions import InvalidDigitError

ALPHABET = string.digits + string.ascii_lowercase + string.ascii_uppercase
BASE = len(ALPHABET)

_VALUES = {char: value for value, char in enumerate(ALPHABET)}


def encode(n: int) -> str:
    """Return the base62 representation of ``n`` (``"0"`` for zero)."""
    if n < 0:
        raise ValueError(f"Cannot base62-encode negative value {n}")
    if n == 0:
        return ALPHABET[0]
    digits = []
    while n:
        n, rem = divmod(n, BASE)
        digits.append(ALPHABET[rem])
    return "".join(reversed(digits))


def decode(s: str) -> int:
    """Parse a base62 string, raising InvalidDigitError on foreign characters."""
    if not s:
        raise InvalidDigitError("", s)
    n = 0
    for char in s:
        value = _VALUES.get(char)
        if value is None:
            raise InvalidDigitError(char, s)
        n = n * BASE + value
    return n
