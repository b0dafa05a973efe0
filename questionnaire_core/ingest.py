"""
Assistant output ingestion.

The natural-language assistant returns JSON documents; this module converts
them into engine objects. Conversion is strict: a malformed GUID or an
unknown type name is reported as a `FlowchartIngestionError` naming the
offending field instead of being defaulted.
"""

import json
import re
from typing import Any, Optional, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .exceptions import FlowchartIngestionError
from .logging_utils import get_logger
from .models import (
    InputType,
    NodePosition,
    NodeSize,
    NodeType,
    QuestionnaireConnection,
    QuestionnaireFlowchart,
    QuestionnaireNode,
)
from .validation import ValidationResult

logger = get_logger(__name__)

GENERATED_NAME = "AI Generated Flowchart"
GENERATED_DESCRIPTION = "Generated by AI Assistant"

_FENCED_BLOCK = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)


# --- Assistant schema (camelCase on the wire) ---

class _AssistantModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GeneratedPosition(_AssistantModel):
    x: float
    y: float


class GeneratedSize(_AssistantModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class GeneratedNode(_AssistantModel):
    id: UUID
    type: NodeType
    questionText: str = ""
    inputType: InputType
    choiceOptions: Optional[list[str]] = None
    position: GeneratedPosition
    size: GeneratedSize

    @field_validator("questionText", mode="before")
    @classmethod
    def _none_text(cls, value: Any) -> Any:
        return "" if value is None else value


class GeneratedConnection(_AssistantModel):
    id: UUID
    sourceId: UUID
    targetId: UUID
    conditionLabel: Optional[str] = None


class GeneratedFlowchart(_AssistantModel):
    nodes: list[GeneratedNode] = Field(default_factory=list)
    connections: list[GeneratedConnection] = Field(default_factory=list)


class AssistantIssue(_AssistantModel):
    nodeId: Optional[str] = None
    severity: str = "Warning"
    category: str = ""
    message: str = ""
    suggestion: str = ""


class AssistantValidationReport(_AssistantModel):
    isValid: bool = False
    errors: list[AssistantIssue] = Field(default_factory=list)
    suggestions: list[str] = Field(default_factory=list)


# --- Helpers ---

def _field_path(loc: tuple) -> str:
    """Render a pydantic error location as `nodes[2].type`."""
    path = ""
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path += f".{part}" if path else str(part)
    return path


def _ingestion_error(exc: ValidationError) -> FlowchartIngestionError:
    first = exc.errors()[0]
    return FlowchartIngestionError(message=first["msg"], field=_field_path(first["loc"]) or None)


def extract_json_payload(text: str) -> Any:
    """
    Pull the JSON document out of assistant text.

    Accepts bare JSON or JSON inside a fenced code block.
    """
    candidates = [m.group(1) for m in _FENCED_BLOCK.finditer(text)] + [text]
    last_error: Optional[json.JSONDecodeError] = None
    for candidate in candidates:
        try:
            return json.loads(candidate.strip())
        except json.JSONDecodeError as exc:
            last_error = exc
    raise FlowchartIngestionError(message=f"Response is not valid JSON: {last_error}")


def _as_payload(data: Union[str, bytes, dict]) -> dict:
    if isinstance(data, bytes):
        try:
            data = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise FlowchartIngestionError(message=f"Response is not valid UTF-8: {e}") from e
    if isinstance(data, str):
        data = extract_json_payload(data)
    if not isinstance(data, dict):
        raise FlowchartIngestionError(message="Expected a JSON object")
    return data


# --- Conversions ---

def flowchart_from_generation(data: Union[str, bytes, dict]) -> QuestionnaireFlowchart:
    """
    Convert a generated-flowchart document into a flowchart.

    Args:
        data: Parsed JSON object, or the raw assistant text

    Returns:
        A new flowchart named "AI Generated Flowchart"

    Raises:
        FlowchartIngestionError: on any malformed id, unknown enum name or
            missing required field
    """
    payload = _as_payload(data)
    try:
        generated = GeneratedFlowchart.model_validate(payload)
    except ValidationError as exc:
        raise _ingestion_error(exc) from exc

    flowchart = QuestionnaireFlowchart(name=GENERATED_NAME, description=GENERATED_DESCRIPTION)
    for node in generated.nodes:
        flowchart.nodes.append(QuestionnaireNode(
            id=node.id,
            type=node.type,
            question_text=node.questionText,
            input_type=node.inputType,
            choice_options=list(node.choiceOptions or []),
            position=NodePosition(x=node.position.x, y=node.position.y),
            size=NodeSize(width=node.size.width, height=node.size.height),
        ))

    for conn in generated.connections:
        flowchart.connections.append(QuestionnaireConnection(
            id=conn.id,
            source_node_id=conn.sourceId,
            target_node_id=conn.targetId,
            condition_label=conn.conditionLabel,
        ))

    logger.info(
        "Ingested generated flowchart: %d node(s), %d connection(s)",
        len(flowchart.nodes), len(flowchart.connections),
    )
    return flowchart


def validation_from_report(data: Union[str, bytes, dict]) -> ValidationResult:
    """
    Convert an assistant validation report into a ValidationResult.

    Issues with severity "Error" become errors; every other severity becomes
    a warning. Each is rendered as "{category}: {message} - {suggestion}".
    """
    payload = _as_payload(data)
    try:
        report = AssistantValidationReport.model_validate(payload)
    except ValidationError as exc:
        raise _ingestion_error(exc) from exc

    result = ValidationResult(is_valid=report.isValid)
    for issue in report.errors:
        text = f"{issue.category}: {issue.message} - {issue.suggestion}"
        if issue.severity == "Error":
            result.errors.append(text)
        else:
            result.warnings.append(text)
    return result
