"""Grouping of tree nodes into the three fixed branches"""

import enum
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Sequence, Tuple

from buildlink.exceptions import OrphanNodeError, SchemaError

ORPHAN_FALLBACK = "fallback"
ORPHAN_STRICT = "strict"
ORPHAN_POLICIES = (ORPHAN_FALLBACK, ORPHAN_STRICT)


class Branch(enum.IntEnum):
    """The three branches of every tree, in serialization order."""

    YELLOW = 0
    ORANGE = 1
    BLUE = 2


@dataclass(frozen=True)
class NodeDefinition:
    """Static definition of one skill node."""

    id: str
    max_level: int
    parents: Tuple[str, ...] = ()

    @property
    def parent(self) -> Optional[str]:
        """The parent that decides branch membership (the first declared one)."""
        return self.parents[0] if self.parents else None


class BranchClassifier:
    """Immutable branch membership table for one node definition list.

    Each node belongs to the branch of the root its first-parent chain reaches.
    Positions inside a branch follow the order of the node list, so the same
    list has to be used to encode and to decode a build code.
    """

    def __init__(self, nodes: Iterable[NodeDefinition], roots: Sequence[str],
                 orphan_policy: str = ORPHAN_FALLBACK):
        if orphan_policy not in ORPHAN_POLICIES:
            raise ValueError(f"Unknown orphan policy {orphan_policy!r}")
        if len(roots) != len(Branch):
            raise SchemaError(f"Expected {len(Branch)} branch roots, got {len(roots)}")

        self._nodes: Tuple[NodeDefinition, ...] = tuple(nodes)
        by_id: Dict[str, NodeDefinition] = {}
        for node in self._nodes:
            if node.id in by_id:
                raise SchemaError(f"Duplicate node id {node.id!r}")
            by_id[node.id] = node
        for root in roots:
            if root not in by_id:
                raise SchemaError(f"Branch root {root!r} is not a defined node")

        resolved = {root: Branch(i) for i, root in enumerate(roots)}
        for node in self._nodes:
            if node.id not in resolved:
                self._resolve(node.id, by_id, resolved, orphan_policy)

        members = {branch: [] for branch in Branch}
        positions = {}
        for node in self._nodes:
            branch_members = members[resolved[node.id]]
            positions[node.id] = len(branch_members)
            branch_members.append(node.id)

        self._by_id = MappingProxyType(by_id)
        self._branch_of = MappingProxyType(resolved)
        self._position_of = MappingProxyType(positions)
        self._members = MappingProxyType({b: tuple(ids) for b, ids in members.items()})

    @staticmethod
    def _resolve(node_id, by_id, resolved, orphan_policy):
        """Walk the first-parent chain of node_id and record the branch for the whole chain."""
        chain = []
        seen = set()
        current = node_id
        while current not in resolved:
            if current in seen:
                raise SchemaError(f"Parent chain of {node_id!r} loops through {current!r}")
            seen.add(current)
            chain.append(current)
            parent = by_id[current].parent
            if parent is None:
                if orphan_policy == ORPHAN_STRICT:
                    raise OrphanNodeError(node_id)
                logging.warning("Node %s reaches no branch root, assigning %s",
                                node_id, Branch.YELLOW.name)
                branch = Branch.YELLOW
                break
            if parent not in by_id:
                raise SchemaError(f"Node {current!r} has unknown parent {parent!r}")
            current = parent
        else:
            branch = resolved[current]
        for member in chain:
            resolved[member] = branch

    @property
    def nodes(self) -> Tuple[NodeDefinition, ...]:
        return self._nodes

    @property
    def branch_of(self) -> Mapping[str, Branch]:
        return self._branch_of

    @property
    def members(self) -> Mapping[Branch, Tuple[str, ...]]:
        return self._members

    def node(self, node_id: str) -> NodeDefinition:
        return self._by_id[node_id]

    def locate(self, node_id: str) -> Tuple[Branch, int]:
        """Return the branch of node_id and its position inside that branch."""
        return self._branch_of[node_id], self._position_of[node_id]

    def __contains__(self, node_id) -> bool:
        return node_id in self._by_id


def classify(nodes: Iterable[NodeDefinition], roots: Sequence[str],
             orphan_policy: str = ORPHAN_FALLBACK) -> BranchClassifier:
    """Build the branch table for a node list."""
    return BranchClassifier(nodes, roots, orphan_policy)
