"""Tests for hierarchical auto-layout."""

from uuid import uuid4

from questionnaire_core import NodeType, add_connection, auto_arrange, build_node_levels
from questionnaire_core.layout import level_start_x


def _pos(node):
    return (node.position.x, node.position.y)


def test_two_children_are_centered_on_second_level(empty_flowchart, make_node):
    fc = empty_flowchart
    start = make_node(NodeType.START, x=999, y=999)
    b = make_node(NodeType.QUESTION, "B")
    c = make_node(NodeType.QUESTION, "C")
    fc.nodes.extend([start, b, c])
    add_connection(fc, start.id, b.id)
    add_connection(fc, start.id, c.id)

    auto_arrange(fc)

    assert _pos(start) == (400, 50)
    assert _pos(b) == (300, 200)
    assert _pos(c) == (500, 200)


def test_level_start_x():
    assert level_start_x(1) == 400
    assert level_start_x(2) == 300
    assert level_start_x(4) == 100


def test_unreachable_nodes_keep_position(decision_flowchart, make_node):
    fc, _ = decision_flowchart
    orphan = make_node(NodeType.ACTION, "Orphan", x=12, y=34)
    fc.nodes.append(orphan)

    auto_arrange(fc)

    assert _pos(orphan) == (12, 34)


def test_no_start_node_is_noop(empty_flowchart, make_node):
    q = make_node(NodeType.QUESTION, x=5, y=6)
    empty_flowchart.nodes.append(q)

    auto_arrange(empty_flowchart)

    assert _pos(q) == (5, 6)


def test_layout_is_deterministic(decision_flowchart):
    fc, _ = decision_flowchart

    auto_arrange(fc)
    first = [_pos(n) for n in fc.nodes]
    auto_arrange(fc)

    assert [_pos(n) for n in fc.nodes] == first


def test_node_stays_at_first_discovered_level(empty_flowchart, make_node):
    # Start -> A -> B and Start -> B: B is found at level 1 via the direct edge
    fc = empty_flowchart
    start = make_node(NodeType.START)
    a = make_node(NodeType.QUESTION, "A")
    b = make_node(NodeType.QUESTION, "B")
    fc.nodes.extend([start, a, b])
    add_connection(fc, start.id, a.id)
    add_connection(fc, a.id, b.id)
    add_connection(fc, start.id, b.id)

    assert build_node_levels(fc, start) == [[start.id], [a.id, b.id]]


def test_cycles_terminate(decision_flowchart):
    fc, nodes = decision_flowchart
    add_connection(fc, nodes["end_no"].id, nodes["start"].id)

    levels = build_node_levels(fc, nodes["start"])

    assert levels == [
        [nodes["start"].id],
        [nodes["decision"].id],
        [nodes["end_yes"].id, nodes["end_no"].id],
    ]


def test_dangling_target_is_skipped(decision_flowchart):
    fc, nodes = decision_flowchart
    add_connection(fc, nodes["start"].id, uuid4())

    auto_arrange(fc)

    # Only the decision node is positioned on level 1
    assert _pos(nodes["decision"]) == (400, 200)
    assert _pos(nodes["end_yes"]) == (300, 350)
    assert _pos(nodes["end_no"]) == (500, 350)
