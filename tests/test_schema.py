import json

import pytest

from buildlink.exceptions import SchemaError
from buildlink.schema import load_nodes, node_from_dict


def test_node_from_dict_parent_forms():
    assert node_from_dict({"id": "a", "maxLevel": 5}).parents == ()
    assert node_from_dict({"id": "b", "maxLevel": 5, "parent": "a"}).parents == ("a",)
    assert node_from_dict({"id": "c", "maxLevel": 1, "parent": ["a", "b"]}).parent == "a"


@pytest.mark.parametrize("entry", [
    {"maxLevel": 5},
    {"id": "a"},
    {"id": "a", "maxLevel": -1},
    {"id": "a", "maxLevel": "ten"},
])
def test_node_from_dict_rejects_bad_entries(entry):
    with pytest.raises(SchemaError):
        node_from_dict(entry)


def test_load_nodes(tmp_path):
    path = tmp_path / "nodes.json"
    path.write_text(json.dumps({
        "roots": ["a", "b", "c"],
        "nodes": [
            {"id": "a", "maxLevel": 100},
            {"id": "b", "maxLevel": 100},
            {"id": "c", "maxLevel": 100},
            {"id": "a1", "maxLevel": 50, "parent": "a"},
        ],
    }), encoding="utf-8")
    nodes, roots = load_nodes(path)
    assert roots == ("a", "b", "c")
    assert [n.id for n in nodes] == ["a", "b", "c", "a1"]
    assert nodes[3].max_level == 50


def test_load_nodes_requires_roots(tmp_path):
    path = tmp_path / "nodes.json"
    path.write_text(json.dumps({"nodes": []}), encoding="utf-8")
    with pytest.raises(SchemaError):
        load_nodes(path)
