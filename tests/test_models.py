"""Tests for the flowchart data model."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from questionnaire_core import (
    InputType,
    NodeSize,
    NodeType,
    QuestionnaireConnection,
    QuestionnaireFlowchart,
    QuestionnaireNode,
)


@pytest.mark.parametrize("node_type,expected", [
    (NodeType.START, (120, 60)),
    (NodeType.QUESTION, (160, 80)),
    (NodeType.DECISION, (180, 100)),
    (NodeType.ACTION, (140, 70)),
    (NodeType.END, (120, 60)),
])
def test_default_size_depends_on_type(node_type, expected):
    node = QuestionnaireNode(type=node_type)
    assert (node.size.width, node.size.height) == expected


def test_explicit_size_overrides_default():
    node = QuestionnaireNode(type=NodeType.START, size=NodeSize(width=10, height=20))
    assert (node.size.width, node.size.height) == (10, 20)


def test_size_must_be_positive():
    with pytest.raises(ValidationError):
        NodeSize(width=0, height=10)


def test_node_id_is_immutable():
    node = QuestionnaireNode(type=NodeType.QUESTION)
    with pytest.raises(ValidationError):
        node.id = uuid4()


def test_ids_are_unique_per_instance():
    assert QuestionnaireNode().id != QuestionnaireNode().id


def test_center():
    node = QuestionnaireNode(type=NodeType.QUESTION, position={"x": 100, "y": 50})
    assert node.center() == (180, 90)


def test_enum_values_are_type_names():
    assert NodeType.START.value == "Start"
    assert InputType.MULTIPLE_CHOICE.value == "MultipleChoice"
    assert InputType.NONE.value == "None"


def test_json_dict_uses_camel_case(decision_flowchart):
    fc, _ = decision_flowchart
    data = fc.to_json_dict()

    assert "lastModifiedDate" in data
    node = data["nodes"][0]
    assert node["questionText"] == "Start"
    assert node["inputType"] == "None"
    conn = data["connections"][1]
    assert conn["conditionLabel"] == "Yes"
    assert "sourceNodeId" in conn


def test_json_dict_round_trip_preserves_ids(decision_flowchart):
    fc, nodes = decision_flowchart
    restored = QuestionnaireFlowchart.from_json_dict(fc.to_json_dict())

    assert restored.id == fc.id
    assert [n.id for n in restored.nodes] == [n.id for n in fc.nodes]
    assert restored.get_node(nodes["decision"].id).question_text == "Are you over 18?"


def test_snake_case_input_accepted():
    source, target = uuid4(), uuid4()
    conn = QuestionnaireConnection(source_node_id=source, target_node_id=target)
    assert conn.condition_label is None
    assert conn.logic.skipped_node_ids == []


def test_lookup_helpers(decision_flowchart):
    fc, nodes = decision_flowchart

    assert fc.find_start_node() is nodes["start"]
    assert fc.get_node(uuid4()) is None
    assert fc.get_connection(fc.connections[0].id) is fc.connections[0]
    assert [c.condition_label for c in fc.outgoing(nodes["decision"].id)] == ["Yes", "No"]


def test_find_start_node_returns_first_match(empty_flowchart):
    first = QuestionnaireNode(type=NodeType.START, question_text="A")
    second = QuestionnaireNode(type=NodeType.START, question_text="B")
    empty_flowchart.nodes.extend([first, second])
    assert empty_flowchart.find_start_node() is first
