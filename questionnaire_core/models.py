"""
Core data models for questionnaire flowcharts.

These models define the canonical schema for a flowchart:
- Nodes (Start, Question, Decision, Action, End) with geometry
- Connections between nodes carrying a condition label and skip logic
- Flowchart-level metadata (name, author, timestamps, version)

Field Naming Convention:
- Python attributes are snake_case (`question_text`, `source_node_id`)
- JSON serialization outputs camelCase (`questionText`, `sourceNodeId`),
  which is the spelling of the persisted document
- Both spellings are accepted on input
"""

from datetime import datetime
from enum import Enum
from typing import Optional, Any
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class NodeType(str, Enum):
    """Logical role of a node in the questionnaire."""
    START = "Start"        # Entry point
    QUESTION = "Question"  # Generic question
    DECISION = "Decision"  # Yes/No or multi-choice branch
    ACTION = "Action"      # Instruction or outcome
    END = "End"            # Terminal point


class InputType(str, Enum):
    """How a question is answered."""
    NONE = "None"                      # Start, End, Action nodes
    YES_NO = "YesNo"
    MULTIPLE_CHOICE = "MultipleChoice"
    FREE_TEXT = "FreeText"
    DATE = "Date"
    NUMBER = "Number"


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class NodePosition(_CamelModel):
    """Top-left corner of a node on the canvas."""
    x: float = 0.0
    y: float = 0.0


class NodeSize(_CamelModel):
    """Node dimensions."""
    width: float = Field(gt=0)
    height: float = Field(gt=0)


# Default sizes per node type; anything unlisted falls back to DEFAULT_NODE_SIZE
NODE_SIZES: dict[NodeType, tuple[float, float]] = {
    NodeType.START: (120, 60),
    NodeType.QUESTION: (160, 80),
    NodeType.DECISION: (180, 100),
    NodeType.ACTION: (140, 70),
    NodeType.END: (120, 60),
}
DEFAULT_NODE_SIZE: tuple[float, float] = (140, 70)


def default_size_for(node_type: NodeType) -> NodeSize:
    """Return a fresh NodeSize with the default dimensions for a node type."""
    width, height = NODE_SIZES.get(node_type, DEFAULT_NODE_SIZE)
    return NodeSize(width=width, height=height)


class QuestionnaireNode(_CamelModel):
    """A single node in the questionnaire flowchart."""
    id: UUID = Field(default_factory=uuid4, frozen=True)
    type: NodeType = NodeType.QUESTION
    question_text: str = ""
    input_type: InputType = InputType.NONE
    choice_options: list[str] = Field(default_factory=list)  # only meaningful for MultipleChoice
    position: Optional[NodePosition] = Field(default_factory=NodePosition)
    size: Optional[NodeSize] = None  # filled from NODE_SIZES when omitted
    notes: Optional[str] = None

    @model_validator(mode="after")
    def _apply_default_size(self) -> "QuestionnaireNode":
        if self.size is None:
            self.size = default_size_for(self.type)
        return self

    def center(self) -> tuple[float, float]:
        """Get the center point of the node."""
        return (
            self.position.x + self.size.width / 2,
            self.position.y + self.size.height / 2,
        )

    def has_geometry(self) -> bool:
        return self.position is not None and self.size is not None


class SkipLogic(_CamelModel):
    """
    Skip rule attached to a connection.

    Purely descriptive: the condition is never evaluated here.
    """
    condition: Optional[str] = None  # e.g. "answer == 'Yes'"
    skipped_node_ids: list[UUID] = Field(default_factory=list)


class QuestionnaireConnection(_CamelModel):
    """A directed transition between two nodes."""
    id: UUID = Field(default_factory=uuid4, frozen=True)
    source_node_id: UUID
    target_node_id: UUID
    condition_label: Optional[str] = None  # "Yes", "No", "Option A", ...
    logic: SkipLogic = Field(default_factory=SkipLogic)


class QuestionnaireFlowchart(_CamelModel):
    """
    The complete questionnaire flowchart.
    This is what gets saved to/loaded from JSON files.
    """
    id: UUID = Field(default_factory=uuid4, frozen=True)
    name: str = "Untitled Questionnaire"
    description: str = ""
    author: str = ""
    created_date: datetime = Field(default_factory=datetime.now)
    last_modified_date: datetime = Field(default_factory=datetime.now)
    version: int = 1
    nodes: list[QuestionnaireNode] = Field(default_factory=list)
    connections: list[QuestionnaireConnection] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to a JSON-serializable dict using the persisted field names."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_json_dict(cls, data: dict[str, Any]) -> "QuestionnaireFlowchart":
        """Create a flowchart from a persisted JSON dict."""
        return cls.model_validate(data)

    def get_node(self, node_id: UUID) -> Optional[QuestionnaireNode]:
        """Get a node by ID (first match)."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_connection(self, connection_id: UUID) -> Optional[QuestionnaireConnection]:
        """Get a connection by ID (first match)."""
        for connection in self.connections:
            if connection.id == connection_id:
                return connection
        return None

    def find_start_node(self) -> Optional[QuestionnaireNode]:
        """Return the first Start node, if any."""
        for node in self.nodes:
            if node.type == NodeType.START:
                return node
        return None

    def outgoing(self, node_id: UUID) -> list[QuestionnaireConnection]:
        """Connections leaving a node, in insertion order."""
        return [c for c in self.connections if c.source_node_id == node_id]


# --- API Request Models ---

class CreateNodeRequest(BaseModel):
    """Request to create a new node (random placement when x/y are omitted)."""
    type: NodeType
    x: Optional[float] = None
    y: Optional[float] = None


class CreateConnectionRequest(BaseModel):
    """Request to create a new connection."""
    source_id: UUID
    target_id: UUID
    label: str = ""
