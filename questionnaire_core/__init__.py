"""
Questionnaire Flowchart Core - Models, validation, layout, and draw.io export.

This module provides the flowchart graph engine used by both the HTTP
service and the CLI, ensuring a single source of truth for flowchart logic.
"""

from .models import (
    # Enums
    NodeType,
    InputType,
    # Core models
    NodePosition,
    NodeSize,
    SkipLogic,
    QuestionnaireNode,
    QuestionnaireConnection,
    QuestionnaireFlowchart,
    default_size_for,
    # API request models
    CreateNodeRequest,
    CreateConnectionRequest,
)

from .exceptions import QuestionnaireError, FlowchartIngestionError, NoFlowchartOpenError
from .graph import (
    create_flowchart,
    add_node,
    add_node_at_random,
    remove_node,
    add_connection,
    remove_connection,
)
from .validation import validate_flowchart, find_reachable_nodes, ValidationResult, validation_summary
from .layout import auto_arrange, build_node_levels
from .drawio import export_to_drawio, validate_export, write_drawio
from .ingest import flowchart_from_generation, validation_from_report
from .persistence import save_flowchart, load_flowchart
from .analysis import summarize_flowchart

__all__ = [
    # Enums
    "NodeType",
    "InputType",
    # Models
    "NodePosition",
    "NodeSize",
    "SkipLogic",
    "QuestionnaireNode",
    "QuestionnaireConnection",
    "QuestionnaireFlowchart",
    "default_size_for",
    "CreateNodeRequest",
    "CreateConnectionRequest",
    # Errors
    "QuestionnaireError",
    "FlowchartIngestionError",
    "NoFlowchartOpenError",
    # Graph mutation
    "create_flowchart",
    "add_node",
    "add_node_at_random",
    "remove_node",
    "add_connection",
    "remove_connection",
    # Validation
    "validate_flowchart",
    "find_reachable_nodes",
    "ValidationResult",
    "validation_summary",
    # Layout
    "auto_arrange",
    "build_node_levels",
    # Export
    "export_to_drawio",
    "validate_export",
    "write_drawio",
    # Ingestion & persistence
    "flowchart_from_generation",
    "validation_from_report",
    "save_flowchart",
    "load_flowchart",
    # Analysis
    "summarize_flowchart",
]
