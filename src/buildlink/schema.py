"""Node definitions: the built-in skill tree shape and loading one from JSON."""

import json
from pathlib import Path
from typing import List, Sequence, Tuple

from buildlink.branches import NodeDefinition
from buildlink.exceptions import SchemaError

# One branch of the tree shape shared by all three trees. The two "slot"
# nodes hold the tree-specific skills.
#   (name, max level, parent names)
_YELLOW = (
    ("attack_boost", 100, ()),
    ("hp_boost", 100, ("attack_boost",)),
    ("defense_boost", 100, ("attack_boost",)),
    ("slot_1", 100, ("hp_boost",)),
    ("ignore_dodge", 100, ("hp_boost",)),
    ("slot_2", 100, ("defense_boost",)),
    ("dodge", 100, ("defense_boost",)),
    ("global_def", 50, ("slot_1", "ignore_dodge")),
    ("global_hp", 50, ("slot_2", "dodge")),
    ("final_damage_boost", 1, ("global_def", "global_hp")),
)
_ORANGE = (
    ("defense_boost", 100, ()),
    ("hp_boost", 100, ("defense_boost",)),
    ("attack_boost", 100, ("defense_boost",)),
    ("dodge", 100, ("hp_boost",)),
    ("slot_1", 100, ("hp_boost",)),
    ("ignore_dodge", 100, ("attack_boost",)),
    ("slot_2", 100, ("attack_boost",)),
    ("global_hp", 50, ("dodge", "slot_1")),
    ("global_atk", 50, ("ignore_dodge", "slot_2")),
    ("final_damage_boost", 1, ("global_hp", "global_atk")),
)
_BLUE = (
    ("hp_boost", 100, ()),
    ("attack_boost", 100, ("hp_boost",)),
    ("defense_boost", 100, ("hp_boost",)),
    ("dodge", 100, ("attack_boost",)),
    ("slot_1", 100, ("attack_boost",)),
    ("ignore_dodge", 100, ("defense_boost",)),
    ("slot_2", 100, ("defense_boost",)),
    ("global_atk", 50, ("dodge", "slot_1")),
    ("global_def", 50, ("ignore_dodge", "slot_2")),
    ("final_damage_boost", 1, ("global_atk", "global_def")),
)


def _branch_nodes(prefix: str, rows) -> List[NodeDefinition]:
    return [
        NodeDefinition(f"{prefix}.{name}", max_level, tuple(f"{prefix}.{p}" for p in parents))
        for name, max_level, parents in rows
    ]


DEFAULT_NODES: Tuple[NodeDefinition, ...] = tuple(
    _branch_nodes("yellow", _YELLOW) + _branch_nodes("orange", _ORANGE) + _branch_nodes("blue", _BLUE)
)
DEFAULT_ROOTS: Tuple[str, str, str] = ("yellow.attack_boost", "orange.defense_boost", "blue.hp_boost")


def node_from_dict(entry: dict) -> NodeDefinition:
    """Build a NodeDefinition from ``{"id", "maxLevel", "parent"}``; parent may be a string or a list."""
    try:
        node_id = entry["id"]
        max_level = entry["maxLevel"]
    except (KeyError, TypeError) as e:
        raise SchemaError(f"Node definition {entry!r} is missing {e}") from e
    parent = entry.get("parent")
    if parent is None:
        parents = ()
    elif isinstance(parent, str):
        parents = (parent,)
    else:
        parents = tuple(parent)
    if not isinstance(max_level, int) or max_level < 0:
        raise SchemaError(f"Node {node_id!r} has invalid maxLevel {max_level!r}")
    return NodeDefinition(str(node_id), max_level, tuple(str(p) for p in parents))


def load_nodes(path: Path) -> Tuple[Tuple[NodeDefinition, ...], Sequence[str]]:
    """Load ``{"roots": [a, b, c], "nodes": [...]}`` from a JSON file."""
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    try:
        roots = tuple(data["roots"])
        entries = data["nodes"]
    except (KeyError, TypeError) as e:
        raise SchemaError(f"Node file {path} is missing {e}") from e
    return tuple(node_from_dict(entry) for entry in entries), roots
