"""Shared fixtures for flowchart engine tests."""

from typing import Callable

import pytest

from questionnaire_core import (
    InputType,
    NodeType,
    QuestionnaireFlowchart,
    QuestionnaireNode,
    add_connection,
    add_node,
)
from questionnaire_core.models import NodePosition


@pytest.fixture
def empty_flowchart() -> QuestionnaireFlowchart:
    """A flowchart with no nodes or connections."""
    return QuestionnaireFlowchart(name="Test Questionnaire", author="tester")


@pytest.fixture
def make_node() -> Callable[..., QuestionnaireNode]:
    """Factory for nodes with explicit text, input type and position."""
    def _make(
        node_type: NodeType,
        text: str = "",
        input_type: InputType = InputType.NONE,
        x: float = 0,
        y: float = 0,
        **kwargs,
    ) -> QuestionnaireNode:
        return QuestionnaireNode(
            type=node_type,
            question_text=text or node_type.value,
            input_type=input_type,
            position=NodePosition(x=x, y=y),
            **kwargs,
        )
    return _make


@pytest.fixture
def decision_flowchart(empty_flowchart):
    """Start -> Decision -> {End "Yes", End "No"}.

    Returns the flowchart and a dict of its nodes by role.
    """
    fc = empty_flowchart
    start = add_node(fc, NodeType.START, 400, 50)
    decision = add_node(fc, NodeType.DECISION, 400, 200)
    decision.question_text = "Are you over 18?"
    end_yes = add_node(fc, NodeType.END, 300, 400)
    end_yes.question_text = "Eligible"
    end_no = add_node(fc, NodeType.END, 500, 400)
    end_no.question_text = "Not eligible"

    add_connection(fc, start.id, decision.id)
    add_connection(fc, decision.id, end_yes.id, "Yes")
    add_connection(fc, decision.id, end_no.id, "No")

    return fc, {"start": start, "decision": decision, "end_yes": end_yes, "end_no": end_no}


@pytest.fixture
def generated_payload() -> dict:
    """A well-formed generated-flowchart document as the assistant returns it."""
    return {
        "nodes": [
            {
                "id": "11111111-1111-1111-1111-111111111111",
                "type": "Start",
                "questionText": "Start",
                "inputType": "None",
                "choiceOptions": None,
                "position": {"x": 400, "y": 50},
                "size": {"width": 120, "height": 60},
            },
            {
                "id": "22222222-2222-2222-2222-222222222222",
                "type": "Question",
                "questionText": "Preferred contact method?",
                "inputType": "MultipleChoice",
                "choiceOptions": ["Phone", "Email", "Mail"],
                "position": {"x": 400, "y": 200},
                "size": {"width": 160, "height": 80},
            },
            {
                "id": "33333333-3333-3333-3333-333333333333",
                "type": "End",
                "questionText": "Done",
                "inputType": "None",
                "position": {"x": 400, "y": 350},
                "size": {"width": 120, "height": 60},
            },
        ],
        "connections": [
            {
                "id": "aaaaaaaa-aaaa-aaaa-aaaa-aaaaaaaaaaaa",
                "sourceId": "11111111-1111-1111-1111-111111111111",
                "targetId": "22222222-2222-2222-2222-222222222222",
                "conditionLabel": None,
            },
            {
                "id": "bbbbbbbb-bbbb-bbbb-bbbb-bbbbbbbbbbbb",
                "sourceId": "22222222-2222-2222-2222-222222222222",
                "targetId": "33333333-3333-3333-3333-333333333333",
                "conditionLabel": "Any",
            },
        ],
    }
