"""
Flowchart validation - Check questionnaires for structural and logical issues.

Provides validation that can be used by the HTTP service, the CLI and any
other caller holding a flowchart. Validation never mutates the flowchart and
never raises for an invalid one; problems are reported in the result.
"""

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING
from uuid import UUID

from .logging_utils import get_logger
from .models import InputType, NodeType

if TYPE_CHECKING:
    from .models import QuestionnaireFlowchart, QuestionnaireNode

logger = get_logger(__name__)

MIN_CHOICE_OPTIONS = 2


@dataclass
class ValidationResult:
    """Outcome of validating a flowchart.

    Errors make the flowchart invalid; warnings (e.g. unreachable nodes)
    are informational and never affect `is_valid`.
    """
    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "isValid": self.is_valid,
            "errors": list(self.errors),
            "warnings": list(self.warnings),
        }


def validate_node(node: "QuestionnaireNode") -> list[str]:
    """Check a single node's configuration."""
    errors: list[str] = []

    if not node.question_text or not node.question_text.strip():
        errors.append(f"Node {node.id}: Question text is required")

    if node.type == NodeType.DECISION and node.input_type == InputType.NONE:
        errors.append(f"Node {node.id}: Decision nodes must have an input type")

    if (node.input_type == InputType.MULTIPLE_CHOICE
            and len(node.choice_options or []) < MIN_CHOICE_OPTIONS):
        errors.append(f"Node {node.id}: Multiple choice questions must have at least 2 options")

    return errors


def find_reachable_nodes(flowchart: "QuestionnaireFlowchart") -> set[UUID]:
    """
    Find every node id reachable from the (first) Start node.

    Breadth-first over outgoing connections; each id is visited once, so
    cycles terminate. Returns an empty set when there is no Start node.
    Ids reached through dangling connections are included as-is.
    """
    start = flowchart.find_start_node()
    if start is None:
        return set()

    adjacency: dict[UUID, list[UUID]] = {}
    for conn in flowchart.connections:
        adjacency.setdefault(conn.source_node_id, []).append(conn.target_node_id)

    reachable: set[UUID] = {start.id}
    queue = deque([start.id])
    while queue:
        current = queue.popleft()
        for target in adjacency.get(current, []):
            if target not in reachable:
                reachable.add(target)
                queue.append(target)

    return reachable


def validate_flowchart(flowchart: "QuestionnaireFlowchart") -> ValidationResult:
    """
    Validate a flowchart and return a categorized report.

    Checks for:
    - Invalid node configuration (empty text, Decision without input type,
      multiple choice with fewer than 2 options) - ERROR
    - Missing or duplicate Start node - ERROR
    - Missing End node - ERROR
    - Connections whose source/target node does not exist - ERROR
    - Nodes not reachable from Start - WARNING

    Args:
        flowchart: The flowchart to validate

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    for node in flowchart.nodes:
        result.errors.extend(validate_node(node))

    start_count = sum(1 for n in flowchart.nodes if n.type == NodeType.START)
    if start_count == 0:
        result.errors.append("Flowchart must have a Start node")
    elif start_count > 1:
        result.errors.append("Flowchart should have only one Start node")

    if not any(n.type == NodeType.END for n in flowchart.nodes):
        result.errors.append("Flowchart must have at least one End node")

    node_ids = {n.id for n in flowchart.nodes}
    for conn in flowchart.connections:
        if conn.source_node_id not in node_ids:
            result.errors.append(f"Connection {conn.id}: Source node not found")
        if conn.target_node_id not in node_ids:
            result.errors.append(f"Connection {conn.id}: Target node not found")

    reachable = find_reachable_nodes(flowchart)
    for node in flowchart.nodes:
        if node.type != NodeType.START and node.id not in reachable:
            result.warnings.append(f"Node '{node.question_text}' is not reachable from Start")

    result.is_valid = not result.errors
    logger.info(
        "Validated flowchart %s: %d error(s), %d warning(s)",
        flowchart.id, len(result.errors), len(result.warnings),
    )
    return result


def validation_summary(result: ValidationResult) -> dict:
    """
    Create a summary of a validation result.

    Args:
        result: Validation result

    Returns:
        Dictionary with counts and overall validity
    """
    return {
        "total": len(result.errors) + len(result.warnings),
        "errors": len(result.errors),
        "warnings": len(result.warnings),
        "valid": result.is_valid,
    }
