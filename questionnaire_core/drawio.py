"""
Draw.io export - Convert flowcharts to diagrams.net XML documents.

The document layout follows what app.diagrams.net writes for an
uncompressed file:

    mxfile
      diagram
        mxGraphModel
          root
            mxCell id="0"                 (required boilerplate)
            mxCell id="1" parent="0"      (required boilerplate)
            mxCell vertex="1" ...         (one per node)
            mxCell edge="1" ...           (one per connection)

Edges carry advisory source/target points derived from the relative
placement of the two node boxes so the viewer routes them sensibly.
"""

import re
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from pathlib import Path
from typing import TYPE_CHECKING, Optional

from lxml import etree

from .logging_utils import get_logger
from .models import NodeType

if TYPE_CHECKING:
    from .models import QuestionnaireConnection, QuestionnaireFlowchart, QuestionnaireNode

logger = get_logger(__name__)


DRAWIO_HOST = "app.diagrams.net"
DRAWIO_AGENT = "Epic Flowchart Builder"
DRAWIO_VERSION = "1.0.0"
GRID_SIZE = 10
PAGE_WIDTH = 850
PAGE_HEIGHT = 1100
DEFAULT_DIAGRAM_NAME = "Questionnaire"

NODE_STYLES: dict[NodeType, str] = {
    NodeType.START:
        "ellipse;whiteSpace=wrap;html=1;fillColor=#d5e8d4;strokeColor=#82b366;fontSize=12;fontStyle=1",
    NodeType.DECISION:
        "rhombus;whiteSpace=wrap;html=1;fillColor=#fff2cc;strokeColor=#d6b656;fontSize=11",
    NodeType.QUESTION:
        "rounded=1;whiteSpace=wrap;html=1;fillColor=#dae8fc;strokeColor=#6c8ebf;fontSize=11",
    NodeType.ACTION:
        "rounded=0;whiteSpace=wrap;html=1;fillColor=#e1d5e7;strokeColor=#9673a6;fontSize=11",
    NodeType.END:
        "ellipse;whiteSpace=wrap;html=1;fillColor=#f8cecc;strokeColor=#b85450;fontSize=12;fontStyle=1",
}
FALLBACK_NODE_STYLE = "rounded=0;whiteSpace=wrap;html=1;fillColor=#ffffff;strokeColor=#000000;fontSize=11"

EDGE_BASE_STYLE = "edgeStyle=orthogonalEdgeStyle;rounded=0;orthogonalLoop=1;jettySize=auto;html=1;"
EDGE_LABEL_STYLE = "labelBackgroundColor=#ffffff;fontSize=10;fontColor=#000000;"
EDGE_STROKES: dict[str, str] = {
    "yes": "strokeColor=#82b366;",
    "no": "strokeColor=#b85450;",
}
DEFAULT_EDGE_STROKE = "strokeColor=#000000;"

# Characters XML 1.0 cannot carry at all (lxml refuses them), including lone surrogates
_INVALID_XML_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


# --- Formatting helpers ---

def _xml_text(text: Optional[str]) -> str:
    return _INVALID_XML_CHARS.sub("", text or "")


def _format_int(value: float) -> str:
    """Round half away from zero and render without a decimal point."""
    return str(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _format_number(value: float) -> str:
    """Render a coordinate, dropping a trailing `.0`."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _format_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


# --- Styles ---

def node_style(node_type: NodeType) -> str:
    """Get the draw.io style string for a node type."""
    return NODE_STYLES.get(node_type, FALLBACK_NODE_STYLE)


def edge_style(connection: "QuestionnaireConnection") -> str:
    """
    Get the draw.io style string for a connection.

    "Yes" branches are green and "No" branches red (case-insensitive,
    surrounding whitespace ignored); everything else is black.
    """
    label = connection.condition_label or ""
    style = EDGE_BASE_STYLE
    if label.strip():
        style += EDGE_LABEL_STYLE
    style += EDGE_STROKES.get(label.strip().lower(), DEFAULT_EDGE_STROKE)
    return style


# --- Routing geometry ---

def exit_point(source: "QuestionnaireNode", target: "QuestionnaireNode") -> tuple[float, float]:
    """
    Pick the side of `source` an edge towards `target` should leave from.

    Priority: bottom, right, left, with top as the fallback when the target
    sits roughly above or overlaps the source.
    """
    source_cx, source_cy = source.center()
    target_cx, target_cy = target.center()
    pos, size = source.position, source.size

    if target_cy > source_cy + size.height / 2:
        return (source_cx, pos.y + size.height)
    if target_cx > source_cx + size.width / 2:
        return (pos.x + size.width, source_cy)
    if target_cx < source_cx - size.width / 2:
        return (pos.x, source_cy)
    return (source_cx, pos.y)


def entry_point(source: "QuestionnaireNode", target: "QuestionnaireNode") -> tuple[float, float]:
    """
    Pick the side of `target` an edge from `source` should enter.

    Priority: top, left, right, with bottom as the fallback.
    """
    source_cx, source_cy = source.center()
    target_cx, target_cy = target.center()
    pos, size = target.position, target.size

    if source_cy < target_cy - size.height / 2:
        return (target_cx, pos.y)
    if source_cx < target_cx - size.width / 2:
        return (pos.x, target_cy)
    if source_cx > target_cx + size.width / 2:
        return (pos.x + size.width, target_cy)
    return (target_cx, pos.y + size.height)


# --- Document construction ---

def _node_cell(root: etree._Element, node: "QuestionnaireNode") -> None:
    cell = etree.SubElement(root, "mxCell", {
        "id": str(node.id),
        "value": _xml_text(node.question_text),
        "style": node_style(node.type),
        "vertex": "1",
        "parent": "1",
    })
    geometry: dict[str, str] = {}
    if node.position is not None:
        geometry["x"] = _format_int(node.position.x)
        geometry["y"] = _format_int(node.position.y)
    if node.size is not None:
        geometry["width"] = _format_int(node.size.width)
        geometry["height"] = _format_int(node.size.height)
    geometry["as"] = "geometry"
    etree.SubElement(cell, "mxGeometry", geometry)


def _edge_cell(
    root: etree._Element,
    connection: "QuestionnaireConnection",
    flowchart: "QuestionnaireFlowchart",
) -> None:
    cell = etree.SubElement(root, "mxCell", {
        "id": str(connection.id),
        "value": _xml_text(connection.condition_label),
        "style": edge_style(connection),
        "edge": "1",
        "parent": "1",
        "source": str(connection.source_node_id),
        "target": str(connection.target_node_id),
    })
    geometry = etree.SubElement(cell, "mxGeometry", {"relative": "1", "as": "geometry"})

    source = flowchart.get_node(connection.source_node_id)
    target = flowchart.get_node(connection.target_node_id)
    if source is None or target is None:
        logger.debug("Edge %s has a missing endpoint; routing points omitted", connection.id)
        return
    if not (source.has_geometry() and target.has_geometry()):
        return

    for role, (x, y) in (
        ("sourcePoint", exit_point(source, target)),
        ("targetPoint", entry_point(source, target)),
    ):
        etree.SubElement(geometry, "mxPoint", {
            "as": role,
            "x": _format_number(x),
            "y": _format_number(y),
        })


def build_drawio_tree(
    flowchart: "QuestionnaireFlowchart",
    modified: Optional[datetime] = None,
) -> etree._Element:
    """Build the `mxfile` element tree for a flowchart."""
    mxfile = etree.Element("mxfile", {
        "host": DRAWIO_HOST,
        "modified": _format_timestamp(modified or datetime.now()),
        "agent": DRAWIO_AGENT,
        "version": DRAWIO_VERSION,
        "type": "device",
    })
    diagram = etree.SubElement(mxfile, "diagram", {
        "name": _xml_text(flowchart.name) or DEFAULT_DIAGRAM_NAME,
        "id": str(flowchart.id),
    })
    model = etree.SubElement(diagram, "mxGraphModel", {
        "dx": "1000",
        "dy": "1000",
        "grid": "1",
        "gridSize": str(GRID_SIZE),
        "guides": "1",
        "tooltips": "1",
        "connect": "1",
        "arrows": "1",
        "fold": "1",
        "page": "1",
        "pageScale": "1",
        "pageWidth": str(PAGE_WIDTH),
        "pageHeight": str(PAGE_HEIGHT),
    })
    root = etree.SubElement(model, "root")

    # Default parent cells required by draw.io
    etree.SubElement(root, "mxCell", {"id": "0"})
    etree.SubElement(root, "mxCell", {"id": "1", "parent": "0"})

    for node in flowchart.nodes:
        _node_cell(root, node)
    for connection in flowchart.connections:
        _edge_cell(root, connection, flowchart)

    return mxfile


def export_to_drawio(
    flowchart: "QuestionnaireFlowchart",
    modified: Optional[datetime] = None,
) -> str:
    """
    Export a flowchart to a draw.io compatible XML document.

    Args:
        flowchart: Flowchart to export
        modified: Timestamp for the `modified` attribute (defaults to now)

    Returns:
        The XML document as a string
    """
    tree = build_drawio_tree(flowchart, modified)
    logger.info(
        "Exported flowchart %s to draw.io (%d node(s), %d connection(s))",
        flowchart.id, len(flowchart.nodes), len(flowchart.connections),
    )
    return etree.tostring(tree, pretty_print=True, encoding="unicode")


def write_drawio(
    flowchart: "QuestionnaireFlowchart",
    file_path: str | Path,
    modified: Optional[datetime] = None,
) -> Path:
    """Export a flowchart and write it to `file_path` as UTF-8."""
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(export_to_drawio(flowchart, modified), encoding="utf-8")
    return path


def validate_export(flowchart: "QuestionnaireFlowchart") -> list[str]:
    """
    Pre-flight check for export.

    Reports duplicate node ids, connections pointing at unknown nodes and
    nodes lacking geometry. Advisory only: export works regardless.
    """
    issues: list[str] = []

    node_ids = set()
    for node in flowchart.nodes:
        if node.id in node_ids:
            issues.append(f"Duplicate node ID: {node.id}")
        node_ids.add(node.id)

    for conn in flowchart.connections:
        if conn.source_node_id not in node_ids:
            issues.append(f"Connection {conn.id} references invalid source: {conn.source_node_id}")
        if conn.target_node_id not in node_ids:
            issues.append(f"Connection {conn.id} references invalid target: {conn.target_node_id}")

    for node in flowchart.nodes:
        if node.position is None:
            issues.append(f"Node {node.id} has no position defined")
        if node.size is None:
            issues.append(f"Node {node.id} has no size defined")

    return issues
