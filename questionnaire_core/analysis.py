"""
Flowchart analysis - Structural summaries of questionnaires.

Produces the same figures the assistant's validation report carries in its
`summary` block (totals, decision points, end points), plus per-node
connection counts, so local results can be compared with the assistant's.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from .models import NodeType
from .validation import find_reachable_nodes

if TYPE_CHECKING:
    from .models import QuestionnaireFlowchart


@dataclass
class NodeConnectionInfo:
    """Connection information for a single node."""
    node_id: UUID
    label: str
    incoming: int = 0   # Connections pointing to this node
    outgoing: int = 0   # Connections leaving this node

    @property
    def total(self) -> int:
        return self.incoming + self.outgoing


@dataclass
class FlowchartSummary:
    """Structural summary of a flowchart."""
    name: str
    total_nodes: int
    total_connections: int
    decision_points: int
    end_points: int
    nodes_by_type: dict[str, int]
    unreachable_count: int
    dead_ends: list[NodeConnectionInfo]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "totalNodes": self.total_nodes,
            "totalConnections": self.total_connections,
            "decisionPoints": self.decision_points,
            "endPoints": self.end_points,
            "nodesByType": self.nodes_by_type,
            "unreachableCount": self.unreachable_count,
            "deadEnds": [
                {"id": str(n.node_id), "label": n.label, "incoming": n.incoming}
                for n in self.dead_ends
            ],
        }


def calculate_node_connections(flowchart: "QuestionnaireFlowchart") -> dict[UUID, NodeConnectionInfo]:
    """
    Calculate connection counts for all nodes.

    Connections to unknown node ids are ignored.
    """
    connections: dict[UUID, NodeConnectionInfo] = {}
    for node in flowchart.nodes:
        connections.setdefault(node.id, NodeConnectionInfo(node_id=node.id, label=node.question_text))

    for conn in flowchart.connections:
        if conn.source_node_id in connections:
            connections[conn.source_node_id].outgoing += 1
        if conn.target_node_id in connections:
            connections[conn.target_node_id].incoming += 1

    return connections


def summarize_flowchart(flowchart: "QuestionnaireFlowchart") -> FlowchartSummary:
    """
    Generate a structural summary of a flowchart.

    Dead ends are non-End nodes with no outgoing connection: a respondent
    reaching one never gets to an End node.
    """
    type_counts: dict[str, int] = defaultdict(int)
    for node in flowchart.nodes:
        type_counts[node.type.value] += 1

    connections = calculate_node_connections(flowchart)
    node_types = {node.id: node.type for node in flowchart.nodes}
    dead_ends = [
        info for node_id, info in connections.items()
        if info.outgoing == 0 and node_types[node_id] != NodeType.END
    ]

    reachable = find_reachable_nodes(flowchart)
    unreachable = sum(
        1 for node in flowchart.nodes
        if node.type != NodeType.START and node.id not in reachable
    )

    return FlowchartSummary(
        name=flowchart.name,
        total_nodes=len(flowchart.nodes),
        total_connections=len(flowchart.connections),
        decision_points=type_counts.get(NodeType.DECISION.value, 0),
        end_points=type_counts.get(NodeType.END.value, 0),
        nodes_by_type=dict(type_counts),
        unreachable_count=unreachable,
        dead_ends=dead_ends,
    )
