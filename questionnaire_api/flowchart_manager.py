"""
Flowchart Manager - Session state for the flowchart HTTP service.

This module implements:
- Single flowchart state management (one flowchart open at a time)
- JSON file persistence with a default directory for relative paths
- Change callbacks so embedding code can react to mutations
- Thin delegation of every operation to questionnaire_core
"""

import random
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union
from uuid import UUID

from questionnaire_core import graph
from questionnaire_core.analysis import FlowchartSummary, summarize_flowchart
from questionnaire_core.drawio import export_to_drawio, validate_export
from questionnaire_core.exceptions import NoFlowchartOpenError
from questionnaire_core.ingest import flowchart_from_generation
from questionnaire_core.layout import auto_arrange
from questionnaire_core.logging_utils import get_logger
from questionnaire_core.models import (
    NodeType,
    QuestionnaireConnection,
    QuestionnaireFlowchart,
    QuestionnaireNode,
)
from questionnaire_core.persistence import load_flowchart, save_flowchart
from questionnaire_core.validation import ValidationResult, validate_flowchart

logger = get_logger(__name__)


class FlowchartManager:
    """
    Manages a single flowchart's state and persistence.

    Mutations mark the flowchart dirty and notify registered callbacks;
    saving clears the dirty flag and stamps `last_modified_date`.
    """

    def __init__(self, base_dir: Optional[Path] = None, rng: Optional[random.Random] = None):
        self._flowchart: Optional[QuestionnaireFlowchart] = None
        self._file_path: Optional[Path] = None
        self._base_dir = base_dir
        self._dirty = False  # True if unsaved changes exist
        self._rng = rng or random.Random()
        self._on_change_callbacks: list[Callable[[], None]] = []

    # --- Properties ---

    @property
    def flowchart(self) -> Optional[QuestionnaireFlowchart]:
        """Get the current flowchart."""
        return self._flowchart

    @property
    def file_path(self) -> Optional[Path]:
        """Get the current file path."""
        return self._file_path

    @property
    def is_dirty(self) -> bool:
        """Check if there are unsaved changes."""
        return self._dirty

    def _require(self) -> QuestionnaireFlowchart:
        if self._flowchart is None:
            raise NoFlowchartOpenError(message="No flowchart open")
        return self._flowchart

    def _resolve(self, file_path: Union[str, Path]) -> Path:
        path = Path(file_path).expanduser()
        if not path.is_absolute() and self._base_dir is not None:
            path = self._base_dir / path
        return path

    # --- Change Callbacks ---

    def on_change(self, callback: Callable[[], None]):
        """Register a callback for flowchart changes."""
        self._on_change_callbacks.append(callback)

    def _changed(self, dirty: bool = True):
        if dirty:
            self._dirty = True
        for callback in self._on_change_callbacks:
            callback()

    # --- File Operations ---

    def new_flowchart(self, name: str = "Untitled Questionnaire", author: Optional[str] = None) -> QuestionnaireFlowchart:
        """Create a new flowchart seeded with Start and End nodes."""
        self._flowchart = graph.create_flowchart(name, author=author)
        self._file_path = None
        self._dirty = False
        self._changed(dirty=False)
        return self._flowchart

    def open_flowchart(self, file_path: Union[str, Path]) -> QuestionnaireFlowchart:
        """Open a flowchart from a JSON file."""
        path = self._resolve(file_path)
        self._flowchart = load_flowchart(path)
        self._file_path = path
        self._dirty = False
        self._changed(dirty=False)
        return self._flowchart

    def replace_flowchart(self, flowchart: QuestionnaireFlowchart) -> QuestionnaireFlowchart:
        """Make an externally built flowchart the current one (unsaved)."""
        self._flowchart = flowchart
        self._file_path = None
        self._changed()
        return flowchart

    def ingest_generated(self, payload: Union[str, dict]) -> QuestionnaireFlowchart:
        """Replace the current flowchart with an assistant-generated one."""
        return self.replace_flowchart(flowchart_from_generation(payload))

    def save_flowchart(self, file_path: Optional[Union[str, Path]] = None) -> Path:
        """
        Save the flowchart to a JSON file.

        If file_path is provided, save to that path (Save As).
        Otherwise, save to the current file_path.
        """
        flowchart = self._require()

        if file_path:
            path = self._resolve(file_path)
        elif self._file_path:
            path = self._file_path
        else:
            raise ValueError("No file path specified and no current file path")

        flowchart.last_modified_date = datetime.now()
        save_flowchart(flowchart, path)
        self._file_path = path
        self._dirty = False
        return path

    # --- Node / Connection Operations ---

    def add_node(self, node_type: NodeType, x: Optional[float] = None, y: Optional[float] = None) -> QuestionnaireNode:
        """Add a node; without coordinates it is placed at a random canvas position."""
        flowchart = self._require()
        if x is None or y is None:
            node = graph.add_node_at_random(flowchart, node_type, self._rng)
        else:
            node = graph.add_node(flowchart, node_type, x, y)
        self._changed()
        return node

    def remove_node(self, node_id: UUID) -> bool:
        """Remove a node and its connections. Unknown ids are a no-op."""
        removed = graph.remove_node(self._require(), node_id)
        if removed:
            self._changed()
        return removed

    def add_connection(self, source_id: UUID, target_id: UUID, label: str = "") -> QuestionnaireConnection:
        """Add a connection between two nodes."""
        connection = graph.add_connection(self._require(), source_id, target_id, label)
        self._changed()
        return connection

    def remove_connection(self, connection_id: UUID) -> bool:
        """Remove a connection. Unknown ids are a no-op."""
        removed = graph.remove_connection(self._require(), connection_id)
        if removed:
            self._changed()
        return removed

    # --- Analysis, Layout & Export ---

    def validate(self) -> ValidationResult:
        return validate_flowchart(self._require())

    def auto_arrange(self) -> QuestionnaireFlowchart:
        flowchart = self._require()
        if flowchart.find_start_node() is None:
            return flowchart
        auto_arrange(flowchart)
        self._changed()
        return flowchart

    def export_drawio(self) -> tuple[str, list[str]]:
        """Export to draw.io XML; also returns the pre-flight issues."""
        flowchart = self._require()
        issues = validate_export(flowchart)
        if issues:
            logger.warning("Exporting flowchart %s with %d issue(s)", flowchart.id, len(issues))
        return export_to_drawio(flowchart), issues

    def export_issues(self) -> list[str]:
        return validate_export(self._require())

    def summarize(self) -> FlowchartSummary:
        return summarize_flowchart(self._require())

    def get_state(self) -> dict:
        """Get the current state for API responses."""
        return {
            "flowchart": self._flowchart.to_json_dict() if self._flowchart else None,
            "file_path": str(self._file_path) if self._file_path else None,
            "is_dirty": self._dirty,
        }
