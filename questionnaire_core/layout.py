"""
Hierarchical auto-layout for questionnaire flowcharts.

Nodes are grouped into levels by a breadth-first walk from the Start node
and laid out top-to-bottom, each level centered on a fixed reference width.
Layout functions modify node positions in-place.
"""

from collections import deque
from typing import TYPE_CHECKING
from uuid import UUID

from .logging_utils import get_logger
from .models import NodePosition

if TYPE_CHECKING:
    from .models import QuestionnaireFlowchart, QuestionnaireNode

logger = get_logger(__name__)


# Default layout parameters
START_X = 100
START_Y = 50
VERTICAL_SPACING = 150
HORIZONTAL_SPACING = 200
REFERENCE_WIDTH = 800


def build_node_levels(
    flowchart: "QuestionnaireFlowchart",
    start_node: "QuestionnaireNode",
) -> list[list[UUID]]:
    """
    Group node ids into levels by BFS from the start node.

    Level 0 holds only the start node. A node is placed at the level where
    it is first discovered; later discoveries through other parents do not
    move it, even when that path is longer.

    Args:
        flowchart: Flowchart to walk
        start_node: Root of the walk

    Returns:
        Levels in order, each a list of node ids in discovery order
    """
    levels: list[list[UUID]] = []
    visited: set[UUID] = {start_node.id}
    queue: deque[tuple[UUID, int]] = deque([(start_node.id, 0)])

    while queue:
        node_id, level = queue.popleft()
        while len(levels) <= level:
            levels.append([])
        levels[level].append(node_id)

        for conn in flowchart.outgoing(node_id):
            if conn.target_node_id not in visited:
                visited.add(conn.target_node_id)
                queue.append((conn.target_node_id, level + 1))

    return levels


def level_start_x(count: int) -> float:
    """X coordinate of the first node in a level holding `count` nodes."""
    total_width = count * HORIZONTAL_SPACING
    return START_X + (REFERENCE_WIDTH - total_width) / 2


def auto_arrange(flowchart: "QuestionnaireFlowchart") -> None:
    """
    Position every node reachable from Start in a top-down hierarchy.

    Level L sits at y = 50 + L * 150 and its nodes are spaced 200 apart,
    centered on the reference width. Unreachable nodes keep their position.
    Does nothing when the flowchart has no Start node.
    """
    start_node = flowchart.find_start_node()
    if start_node is None:
        logger.info("Auto-arrange skipped: flowchart %s has no Start node", flowchart.id)
        return

    levels = build_node_levels(flowchart, start_node)
    node_map: dict[UUID, "QuestionnaireNode"] = {}
    for node in flowchart.nodes:
        node_map.setdefault(node.id, node)

    moved = 0
    for level, node_ids in enumerate(levels):
        # Dangling connection targets have nothing to position
        nodes = [node_map[i] for i in node_ids if i in node_map]
        y = START_Y + level * VERTICAL_SPACING
        first_x = level_start_x(len(nodes))
        for idx, node in enumerate(nodes):
            node.position = NodePosition(x=first_x + idx * HORIZONTAL_SPACING, y=y)
            moved += 1

    logger.info("Auto-arranged %d node(s) over %d level(s)", moved, len(levels))
