"""
Graph mutation API - build and edit flowcharts programmatically.

Every function here mutates only the flowchart passed in. Referential
integrity is deliberately not enforced on insert (connections may dangle
while a flowchart is being assembled); `validation.validate_flowchart`
reports such problems instead.
"""

import getpass
import random
from typing import Optional
from uuid import UUID

from .logging_utils import get_logger
from .models import (
    InputType,
    NodePosition,
    NodeType,
    QuestionnaireConnection,
    QuestionnaireFlowchart,
    QuestionnaireNode,
    default_size_for,
)

logger = get_logger(__name__)

DEFAULT_TEXTS: dict[NodeType, str] = {
    NodeType.START: "Start",
    NodeType.END: "End",
    NodeType.DECISION: "New Decision",
    NodeType.QUESTION: "New Question",
    NodeType.ACTION: "New Action",
}
FALLBACK_TEXT = "New Node"

DEFAULT_INPUT_TYPES: dict[NodeType, InputType] = {
    NodeType.DECISION: InputType.YES_NO,
    NodeType.QUESTION: InputType.FREE_TEXT,
}

# Seed positions for a new flowchart
START_POSITION = (400.0, 50.0)
END_POSITION = (400.0, 400.0)

# Canvas window used for ad hoc placement: x in [100, 600), y in [100, 500)
RANDOM_ORIGIN = (100.0, 100.0)
RANDOM_SPAN = (500, 400)


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return ""


def create_flowchart(name: str, author: Optional[str] = None) -> QuestionnaireFlowchart:
    """
    Create a new flowchart seeded with a Start and an End node.

    Args:
        name: Flowchart name
        author: Author name (defaults to the current OS user)

    Returns:
        The new flowchart
    """
    flowchart = QuestionnaireFlowchart(
        name=name,
        description="New questionnaire flowchart",
        author=author if author is not None else _current_user(),
    )
    for node_type, (x, y) in ((NodeType.START, START_POSITION), (NodeType.END, END_POSITION)):
        flowchart.nodes.append(QuestionnaireNode(
            type=node_type,
            question_text=DEFAULT_TEXTS[node_type],
            input_type=InputType.NONE,
            position=NodePosition(x=x, y=y),
            size=default_size_for(node_type),
        ))

    logger.debug("Created flowchart %s (%s)", flowchart.id, name)
    return flowchart


def add_node(
    flowchart: QuestionnaireFlowchart,
    node_type: NodeType,
    x: float,
    y: float,
) -> QuestionnaireNode:
    """Append a node with the default text, input type and size for its type."""
    node = QuestionnaireNode(
        type=node_type,
        question_text=DEFAULT_TEXTS.get(node_type, FALLBACK_TEXT),
        input_type=DEFAULT_INPUT_TYPES.get(node_type, InputType.NONE),
        position=NodePosition(x=x, y=y),
        size=default_size_for(node_type),
    )
    flowchart.nodes.append(node)
    logger.debug("Added %s node %s at (%s, %s)", node_type.value, node.id, x, y)
    return node


def random_position(rng: random.Random) -> tuple[float, float]:
    """Pick an ad hoc canvas position using the caller's generator."""
    return (
        RANDOM_ORIGIN[0] + rng.randrange(RANDOM_SPAN[0]),
        RANDOM_ORIGIN[1] + rng.randrange(RANDOM_SPAN[1]),
    )


def add_node_at_random(
    flowchart: QuestionnaireFlowchart,
    node_type: NodeType,
    rng: random.Random,
) -> QuestionnaireNode:
    """Add a node at a position drawn from `rng` (seed it for reproducible placement)."""
    x, y = random_position(rng)
    return add_node(flowchart, node_type, x, y)


def remove_node(flowchart: QuestionnaireFlowchart, node_id: UUID) -> bool:
    """
    Remove a node and every connection that starts or ends at it.

    Returns:
        True if a node was removed, False if the id was unknown (no-op)
    """
    node = flowchart.get_node(node_id)
    if node is None:
        return False

    flowchart.nodes.remove(node)
    before = len(flowchart.connections)
    flowchart.connections = [
        c for c in flowchart.connections
        if c.source_node_id != node_id and c.target_node_id != node_id
    ]
    logger.debug(
        "Removed node %s and %d connection(s)",
        node_id, before - len(flowchart.connections),
    )
    return True


def add_connection(
    flowchart: QuestionnaireFlowchart,
    source_id: UUID,
    target_id: UUID,
    label: str = "",
) -> QuestionnaireConnection:
    """Append a connection. Endpoints are not checked here."""
    connection = QuestionnaireConnection(
        source_node_id=source_id,
        target_node_id=target_id,
        condition_label=label,
    )
    flowchart.connections.append(connection)
    logger.debug("Added connection %s: %s -> %s", connection.id, source_id, target_id)
    return connection


def remove_connection(flowchart: QuestionnaireFlowchart, connection_id: UUID) -> bool:
    """Remove a connection. Returns False (no-op) if the id is unknown."""
    connection = flowchart.get_connection(connection_id)
    if connection is None:
        return False

    flowchart.connections.remove(connection)
    logger.debug("Removed connection %s", connection_id)
    return True
