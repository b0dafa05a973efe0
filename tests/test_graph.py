"""Tests for graph mutation (create, add, remove, cascade)."""

import random
from uuid import uuid4

from questionnaire_core import (
    InputType,
    NodeType,
    add_connection,
    add_node,
    add_node_at_random,
    create_flowchart,
    remove_connection,
    remove_node,
)
from questionnaire_core.graph import random_position


def test_create_flowchart_seeds_start_and_end():
    fc = create_flowchart("Intake", author="alice")

    assert fc.name == "Intake"
    assert fc.author == "alice"
    assert fc.description == "New questionnaire flowchart"
    assert fc.version == 1
    assert [(n.type, n.question_text) for n in fc.nodes] == [
        (NodeType.START, "Start"),
        (NodeType.END, "End"),
    ]
    start, end = fc.nodes
    assert (start.position.x, start.position.y) == (400, 50)
    assert (end.position.x, end.position.y) == (400, 400)
    assert fc.connections == []


def test_create_flowchart_defaults_author_to_os_user(monkeypatch):
    monkeypatch.setattr("questionnaire_core.graph.getpass.getuser", lambda: "bob")
    assert create_flowchart("Intake").author == "bob"


def test_add_node_uses_type_defaults(empty_flowchart):
    decision = add_node(empty_flowchart, NodeType.DECISION, 10, 20)
    question = add_node(empty_flowchart, NodeType.QUESTION, 0, 0)
    action = add_node(empty_flowchart, NodeType.ACTION, 0, 0)

    assert decision.question_text == "New Decision"
    assert decision.input_type == InputType.YES_NO
    assert (decision.size.width, decision.size.height) == (180, 100)
    assert (decision.position.x, decision.position.y) == (10, 20)
    assert question.question_text == "New Question"
    assert question.input_type == InputType.FREE_TEXT
    assert action.question_text == "New Action"
    assert action.input_type == InputType.NONE
    assert empty_flowchart.nodes == [decision, question, action]


def test_random_placement_is_reproducible_with_seed(empty_flowchart):
    a = add_node_at_random(empty_flowchart, NodeType.QUESTION, random.Random(42))
    b = add_node_at_random(empty_flowchart, NodeType.QUESTION, random.Random(42))

    assert (a.position.x, a.position.y) == (b.position.x, b.position.y)


def test_random_position_stays_in_canvas_window():
    rng = random.Random(7)
    for _ in range(200):
        x, y = random_position(rng)
        assert 100 <= x < 600
        assert 100 <= y < 500


def test_remove_node_cascades_to_connections(decision_flowchart):
    fc, nodes = decision_flowchart
    decision_id = nodes["decision"].id

    assert remove_node(fc, decision_id) is True

    assert fc.get_node(decision_id) is None
    assert len(fc.nodes) == 3
    for conn in fc.connections:
        assert decision_id not in (conn.source_node_id, conn.target_node_id)
    assert fc.connections == []


def test_remove_unknown_node_is_noop(decision_flowchart):
    fc, _ = decision_flowchart
    before = fc.model_copy(deep=True)

    assert remove_node(fc, uuid4()) is False
    assert fc == before


def test_add_connection_allows_dangling_endpoints(empty_flowchart):
    conn = add_connection(empty_flowchart, uuid4(), uuid4(), "Yes")

    assert conn.condition_label == "Yes"
    assert empty_flowchart.connections == [conn]


def test_remove_connection(decision_flowchart):
    fc, _ = decision_flowchart
    conn = fc.connections[1]

    assert remove_connection(fc, conn.id) is True
    assert fc.get_connection(conn.id) is None
    assert len(fc.connections) == 2
    assert remove_connection(fc, conn.id) is False
