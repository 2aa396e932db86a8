"""Build codec facade: sparse per-node levels <-> build code strings"""

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Sequence

from buildlink import frame
from buildlink.branches import ORPHAN_FALLBACK, Branch, BranchClassifier, NodeDefinition
from buildlink.exceptions import BuildCodeError, CountMismatchError
from buildlink.schema import DEFAULT_NODES, DEFAULT_ROOTS

TREE_COUNT = frame.MAX_TREES


def _empty_trees() -> List[Dict[str, int]]:
    return [{} for _ in range(TREE_COUNT)]


@dataclass
class BuildState:
    """Levels of the three trees (missing node = level 0) and the owned amount."""

    trees: List[Dict[str, int]] = field(default_factory=_empty_trees)
    owned: int = 0

    def __post_init__(self):
        if len(self.trees) != TREE_COUNT:
            raise ValueError(f"A build has exactly {TREE_COUNT} trees, got {len(self.trees)}")
        if self.owned < 0:
            raise ValueError(f"Owned amount must not be negative, got {self.owned}")

    def level(self, tree: int, node_id: str) -> int:
        return self.trees[tree].get(node_id, 0)

    def same_levels(self, other: "BuildState") -> bool:
        """Compare two builds, treating a missing node and an explicit 0 as equal."""
        if self.owned != other.owned:
            return False
        for mine, theirs in zip(self.trees, other.trees):
            for node_id in set(mine) | set(theirs):
                if mine.get(node_id, 0) != theirs.get(node_id, 0):
                    return False
        return True

    def to_dict(self) -> dict:
        return {"trees": [dict(tree) for tree in self.trees], "owned": self.owned}

    @classmethod
    def from_dict(cls, data: dict) -> "BuildState":
        trees = data.get("trees") or _empty_trees()
        return cls([{str(k): int(v) for k, v in tree.items()} for tree in trees],
                   int(data.get("owned", 0)))


class BuildCodec:
    """Encodes and decodes builds for one node definition list.

    Applications that serve several schema versions need one codec per
    version; a code is only meaningful to the codec that produced it.
    """

    def __init__(self, nodes: Sequence[NodeDefinition] = DEFAULT_NODES,
                 roots: Sequence[str] = DEFAULT_ROOTS,
                 orphan_policy: str = ORPHAN_FALLBACK,
                 repeat_trees: bool = False):
        self.classifier = BranchClassifier(nodes, roots, orphan_policy)
        self.repeat_trees = repeat_trees

    def _branch_arrays(self, levels: Dict[str, int]) -> List[List[int]]:
        members = self.classifier.members
        arrays = [[0] * len(members[branch]) for branch in Branch]
        for node_id, level in levels.items():
            if not level:
                continue
            if node_id not in self.classifier:
                logging.warning("Skipping unknown node %s (level %s)", node_id, level)
                continue
            branch, position = self.classifier.locate(node_id)
            arrays[branch][position] = level
        return arrays

    def encode(self, state: BuildState) -> str:
        trees = [self._branch_arrays(levels) for levels in state.trees]
        return frame.serialize(trees, state.owned, repeat_trees=self.repeat_trees)

    def decode_or_raise(self, code: str) -> BuildState:
        """Decode a build code, raising a BuildCodeError subclass on failure."""
        trees, owned = frame.parse(code)
        state = []
        for tree in trees:
            levels = {}
            for branch, values in zip(Branch, tree):
                members = self.classifier.members[branch]
                if len(values) > len(members):
                    raise CountMismatchError(f"{branch.name.lower()} branch value",
                                             len(members), len(values))
                for node_id, level in zip(members, values):
                    if level:
                        levels[node_id] = level
            state.append(levels)
        return BuildState(state, owned)

    def decode(self, code: str) -> Optional[BuildState]:
        """Decode a build code, or return None if it is not one."""
        try:
            return self.decode_or_raise(code)
        except BuildCodeError as e:
            logging.debug("Rejected build code %r: %s", code, e)
            return None

    def validate(self, state: BuildState) -> List[str]:
        """List the levels this schema does not allow (unknown nodes, out of range levels)."""
        problems = []
        for index, levels in enumerate(state.trees):
            for node_id, level in levels.items():
                if node_id not in self.classifier:
                    problems.append(f"tree {index}: unknown node {node_id}")
                    continue
                max_level = self.classifier.node(node_id).max_level
                if not 0 <= level <= max_level:
                    problems.append(f"tree {index}: {node_id} level {level} not in 0..{max_level}")
        return problems


@lru_cache(maxsize=None)
def default_codec() -> BuildCodec:
    """Process-wide codec for the built-in node definitions, built on first use."""
    return BuildCodec()


def encode(state: BuildState) -> str:
    """Encode a build with the default codec."""
    return default_codec().encode(state)


def decode(code: str) -> Optional[BuildState]:
    """Decode a build code with the default codec, None if it is not one."""
    return default_codec().decode(code)
