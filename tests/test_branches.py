import logging

import pytest

from buildlink.branches import Branch, BranchClassifier, NodeDefinition, classify
from buildlink.exceptions import OrphanNodeError, SchemaError
from buildlink.schema import DEFAULT_NODES, DEFAULT_ROOTS

ROOTS = ("a", "b", "c")


def node(node_id, *parents, max_level=10):
    return NodeDefinition(node_id, max_level, tuple(parents))


NODES = [
    node("a"),
    node("a1", "a"),
    node("b"),
    node("b1", "b"),
    node("c"),
    node("c1", "c", "a"),
    node("a2", "a1"),
    node("c2", "c1"),
]


def test_members_follow_node_order():
    classifier = classify(NODES, ROOTS)
    assert classifier.members[Branch.YELLOW] == ("a", "a1", "a2")
    assert classifier.members[Branch.ORANGE] == ("b", "b1")
    assert classifier.members[Branch.BLUE] == ("c", "c1", "c2")


def test_first_parent_decides_branch():
    classifier = classify(NODES, ROOTS)
    assert classifier.branch_of["c1"] is Branch.BLUE
    assert classifier.locate("c2") == (Branch.BLUE, 2)
    assert classifier.locate("a2") == (Branch.YELLOW, 2)


def test_parent_declared_after_child():
    nodes = [node("x2", "x1"), node("a"), node("b"), node("c"), node("x1", "b")]
    classifier = classify(nodes, ROOTS)
    assert classifier.members[Branch.ORANGE] == ("x2", "b", "x1")


def test_tables_are_read_only():
    classifier = classify(NODES, ROOTS)
    with pytest.raises(TypeError):
        classifier.branch_of["a"] = Branch.BLUE
    with pytest.raises(TypeError):
        classifier.members[Branch.YELLOW] = ()


def test_orphan_falls_back_to_yellow(caplog):
    nodes = NODES + [node("lost"), node("lost_child", "lost")]
    with caplog.at_level(logging.WARNING):
        classifier = classify(nodes, ROOTS)
    assert classifier.branch_of["lost"] is Branch.YELLOW
    assert classifier.branch_of["lost_child"] is Branch.YELLOW
    assert classifier.members[Branch.YELLOW][-2:] == ("lost", "lost_child")
    assert "reaches no branch root" in caplog.text


def test_orphan_is_an_error_in_strict_mode():
    with pytest.raises(OrphanNodeError) as info:
        classify(NODES + [node("lost")], ROOTS, orphan_policy="strict")
    assert info.value.node_id == "lost"


def test_unknown_orphan_policy():
    with pytest.raises(ValueError):
        BranchClassifier(NODES, ROOTS, orphan_policy="ignore")


@pytest.mark.parametrize("nodes, roots", [
    (NODES + [node("p", "q"), node("q", "p")], ROOTS),
    (NODES + [node("p", "nowhere")], ROOTS),
    (NODES + [node("a1", "b")], ROOTS),
    (NODES, ("a", "b", "missing")),
    (NODES, ("a", "b")),
])
def test_invalid_schemas(nodes, roots):
    with pytest.raises(SchemaError):
        classify(nodes, roots)


def test_default_schema_has_ten_nodes_per_branch():
    classifier = classify(DEFAULT_NODES, DEFAULT_ROOTS, orphan_policy="strict")
    for branch in Branch:
        assert len(classifier.members[branch]) == 10
    assert classifier.members[Branch.BLUE][0] == "blue.hp_boost"
    assert classifier.branch_of["orange.final_damage_boost"] is Branch.ORANGE
    assert classifier.node("yellow.global_def").max_level == 50
