"""
JSON persistence for flowcharts.

The saved document is a direct serialization of the flowchart model
(camelCase keys, nodes and connections as arrays). There is no migration
logic beyond the plain `version` field.
"""

import json
from pathlib import Path

from pydantic import ValidationError

from .exceptions import FlowchartIngestionError
from .logging_utils import get_logger
from .models import QuestionnaireFlowchart

logger = get_logger(__name__)


def flowchart_to_json(flowchart: QuestionnaireFlowchart) -> str:
    """Serialize a flowchart to an indented JSON string."""
    return json.dumps(flowchart.to_json_dict(), indent=2)


def flowchart_from_json(text: str) -> QuestionnaireFlowchart:
    """
    Parse a persisted flowchart document.

    Raises:
        FlowchartIngestionError: if the text is not JSON or does not match
            the flowchart schema
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise FlowchartIngestionError(message=f"Invalid JSON: {e}") from e

    if not isinstance(data, dict):
        raise FlowchartIngestionError(message="Flowchart document must be a JSON object")

    try:
        return QuestionnaireFlowchart.from_json_dict(data)
    except ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first["loc"]) or None
        raise FlowchartIngestionError(message=first["msg"], field=field) from e


def save_flowchart(flowchart: QuestionnaireFlowchart, file_path: str | Path) -> Path:
    """Write a flowchart to a JSON file, creating parent directories."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(flowchart_to_json(flowchart))

    logger.info("Saved flowchart %s to %s", flowchart.id, path)
    return path


def load_flowchart(file_path: str | Path) -> QuestionnaireFlowchart:
    """Load a flowchart from a JSON file."""
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Flowchart file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise FlowchartIngestionError(message=f"File is not valid UTF-8: {e}") from e
    flowchart = flowchart_from_json(text)

    logger.info("Loaded flowchart %s from %s", flowchart.id, path)
    return flowchart
