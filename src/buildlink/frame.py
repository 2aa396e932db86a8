"""Serialization of branch-grouped level arrays into a build code, and back.

Frame layout::

    <tree count>-<tree>-<tree>...[-o<owned>]
    tree   := 3-<branch>-<branch>-<branch>
    branch := "" | <value count>_<token>_<token>...
    token  := <value> | <value>~<run> | ~<run>

Trailing zero levels, empty branches inside a tree and trailing empty trees
are left out; the parser pads them back. Tree and branch counts are always
declared and always checked.
"""

from itertools import groupby
from typing import List, Sequence, Set, Tuple

from buildlink import base62, rle
from buildlink.exceptions import (
    AlphabetError, BuildCodeError, CountMismatchError, IncompleteFrameError
)

MAX_TREES = 3
BRANCH_COUNT = 3
FRAME_SEPARATOR = "-"
TOKEN_SEPARATOR = rle.TOKEN_SEPARATOR
RUN_MARK = rle.RUN_MARK
OWNED_MARK = "o"
EMPTY_FRAME = f"0{FRAME_SEPARATOR}"
FRAME_ALPHABET = frozenset(base62.ALPHABET + FRAME_SEPARATOR + TOKEN_SEPARATOR + RUN_MARK)

TREE_SCOPE = "tree"
BRANCH_SCOPE = "branch"

TreeLevels = List[List[int]]


def empty_trees() -> List[TreeLevels]:
    return [[[] for _ in range(BRANCH_COUNT)] for _ in range(MAX_TREES)]


#
# Serializer
#

def serialize_branch(levels: Sequence[int]) -> str:
    """Serialize one branch; all-zero branches become the empty string."""
    end = len(levels)
    while end and not levels[end - 1]:
        end -= 1
    if not end:
        return ""
    values = [base62.encode(level) if level else "" for level in levels[:end]]
    tokens = rle.compress(values)
    return TOKEN_SEPARATOR.join([base62.encode(end)] + tokens)


def _serialize_tree(branches: Sequence[Sequence[int]]) -> Tuple[str, bool]:
    """Return the tree text and whether it carries any level at all."""
    if len(branches) != BRANCH_COUNT:
        raise ValueError(f"A tree has exactly {BRANCH_COUNT} branches, got {len(branches)}")
    parts = [serialize_branch(levels) for levels in branches]
    text = FRAME_SEPARATOR.join([str(BRANCH_COUNT)] + parts)
    return text, any(parts)


def _repeat_trees(tree_texts: Sequence[str]) -> List[str]:
    """Collapse runs of identical trees into ``<tree>-~<run>`` where that is shorter."""
    segments = []
    for text, run in groupby(tree_texts):
        count = sum(1 for _ in run)
        plain_length = len(text) * count + (count - 1)
        run_segment = f"{RUN_MARK}{rle.encode_count(count)}"
        if count > 1 and len(text) + 1 + len(run_segment) < plain_length:
            segments.extend([text, run_segment])
        else:
            segments.extend([text] * count)
    return segments


def serialize(trees: Sequence[Sequence[Sequence[int]]], owned: int = 0,
              repeat_trees: bool = False) -> str:
    """Serialize up to three trees of three branches each plus the owned amount.

    With ``repeat_trees`` identical consecutive trees are written once followed
    by a ``~<run>`` segment when that saves characters.
    """
    if len(trees) > MAX_TREES:
        raise ValueError(f"At most {MAX_TREES} trees can be serialized, got {len(trees)}")
    if owned < 0:
        raise ValueError(f"Owned amount must not be negative, got {owned}")

    serialized = [_serialize_tree(branches) for branches in trees]
    last = max((i for i, (_, has_levels) in enumerate(serialized) if has_levels), default=-1)
    owned_suffix = f"{FRAME_SEPARATOR}{OWNED_MARK}{base62.encode(owned)}" if owned else ""

    if last < 0:
        return EMPTY_FRAME + owned_suffix

    tree_texts = [text for text, _ in serialized[:last + 1]]
    segments = _repeat_trees(tree_texts) if repeat_trees else tree_texts
    return FRAME_SEPARATOR.join([base62.encode(last + 1)] + segments) + owned_suffix


#
# Parser
#

def tilde_scope(text: str, index: int) -> str:
    """Tell whether the ``~`` at ``text[index]`` repeats a tree or a branch token.

    The nearest separator before it decides: ``-`` means a tree repeat,
    ``_`` means a run token inside a branch.
    """
    if text[index] != RUN_MARK:
        raise ValueError(f"No {RUN_MARK!r} at position {index} of {text!r}")
    for char in reversed(text[:index]):
        if char == FRAME_SEPARATOR:
            return TREE_SCOPE
        if char == TOKEN_SEPARATOR:
            return BRANCH_SCOPE
    raise BuildCodeError(f"{RUN_MARK!r} at position {index} follows no separator")


def _tree_repeat_segments(code: str) -> Set[int]:
    """Indices of the ``-``-delimited segments that are tree repeats."""
    repeats = set()
    for index, char in enumerate(code):
        if char != RUN_MARK or tilde_scope(code, index) != TREE_SCOPE:
            continue
        if code[index - 1] != FRAME_SEPARATOR:
            raise BuildCodeError(f"Tree repeat at position {index} does not start a segment")
        repeats.add(code.count(FRAME_SEPARATOR, 0, index))
    return repeats


def _is_owned_segment(segment: str) -> bool:
    return (segment.startswith(OWNED_MARK)
            and TOKEN_SEPARATOR not in segment
            and RUN_MARK not in segment)


def parse_branch(text: str) -> List[int]:
    """Parse one branch string into its (possibly trailing-truncated) levels."""
    if not text:
        return []
    head, sep, body = text.partition(TOKEN_SEPARATOR)
    declared = base62.decode(head)
    if not sep:
        raise IncompleteFrameError(f"Branch {text!r} declares {declared} values but has no tokens")
    values = rle.expand(body.split(TOKEN_SEPARATOR), limit=declared)
    if len(values) != declared:
        raise CountMismatchError("value", declared, len(values))
    if not values[-1]:
        raise BuildCodeError(f"Branch {text!r} ends in a zero level")
    return [base62.decode(value) if value else 0 for value in values]


def parse(code: str) -> Tuple[List[TreeLevels], int]:
    """Parse a build code into ``(trees, owned)``.

    ``trees`` always holds three trees of three branch level lists. Anything
    the serializer would not have produced raises a BuildCodeError subclass.
    """
    for char in code:
        if char not in FRAME_ALPHABET:
            raise AlphabetError(char)
    if not code:
        raise IncompleteFrameError("Build code is empty")

    repeats = _tree_repeat_segments(code)
    segments = code.split(FRAME_SEPARATOR)

    owned = 0
    if len(segments) > 1 and _is_owned_segment(segments[-1]):
        owned = base62.decode(segments.pop()[len(OWNED_MARK):])
        if not owned:
            raise BuildCodeError("A zero owned amount must be left out")

    if segments == EMPTY_FRAME.split(FRAME_SEPARATOR):
        return empty_trees(), owned

    tree_count = base62.decode(segments[0])
    if tree_count > MAX_TREES:
        raise CountMismatchError("tree", f"0..{MAX_TREES}", tree_count)
    if not tree_count:
        raise BuildCodeError(f"An empty build is written as {EMPTY_FRAME!r}")

    trees: List[TreeLevels] = []
    pos = 1
    after_repeat = False
    while len(trees) < tree_count:
        if pos >= len(segments):
            raise IncompleteFrameError(f"Declared {tree_count} trees, found {len(trees)}")
        if pos in repeats:
            if not trees or after_repeat:
                raise BuildCodeError(f"Tree repeat in segment {pos} follows no tree")
            run = rle.decode_count(segments[pos][len(RUN_MARK):])
            if run < rle.MIN_RUN:
                raise CountMismatchError("tree run", f">= {rle.MIN_RUN}", run)
            if len(trees) + run - 1 > tree_count:
                raise CountMismatchError("tree", tree_count, len(trees) + run - 1)
            trees.extend([[list(levels) for levels in trees[-1]] for _ in range(run - 1)])
            after_repeat = True
            pos += 1
            continue

        branch_count = base62.decode(segments[pos])
        if branch_count != BRANCH_COUNT:
            raise CountMismatchError("branch", BRANCH_COUNT, branch_count)
        branch_texts = segments[pos + 1:pos + 1 + BRANCH_COUNT]
        if len(branch_texts) < BRANCH_COUNT:
            raise IncompleteFrameError(
                f"Tree {len(trees)} declares {BRANCH_COUNT} branches, found {len(branch_texts)}")
        trees.append([parse_branch(text) for text in branch_texts])
        after_repeat = False
        pos += 1 + BRANCH_COUNT

    if pos < len(segments):
        if pos in repeats:
            raise CountMismatchError("tree", tree_count, "more")
        raise CountMismatchError("segment", pos, len(segments))
    if not any(trees[-1]):
        raise BuildCodeError(f"Last declared tree {tree_count - 1} has no levels")

    while len(trees) < MAX_TREES:
        trees.append([[] for _ in range(BRANCH_COUNT)])
    return trees, owned
