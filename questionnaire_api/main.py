"""
Questionnaire Flowchart Backend - FastAPI Application

This is the main entry point for the flowchart HTTP service.
It provides:
- REST API for flowchart operations (new/open/save, nodes, connections)
- Validation, auto-layout and structural summary endpoints
- draw.io XML export with the export pre-flight issues
- Ingestion of assistant-generated flowchart JSON
"""
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Optional, Union
from uuid import UUID

from fastapi import Body, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import Response
from pydantic import BaseModel

from questionnaire_core import (
    CreateConnectionRequest,
    CreateNodeRequest,
    FlowchartIngestionError,
    NoFlowchartOpenError,
    validation_summary,
)
from questionnaire_core.logging_utils import configure_logging, get_logger
from questionnaire_api.flowchart_manager import FlowchartManager

FLOWCHART_DIR = Path(os.environ.get(
    "QUESTIONNAIRE_FLOWCHART_DIR",
    str(Path.home() / "flowcharts"),
))
LOG_LEVEL = os.environ.get("QUESTIONNAIRE_LOG_LEVEL", "INFO")
JSON_LOGS = os.environ.get("QUESTIONNAIRE_JSON_LOGS") == "1"
API_HOST = os.environ.get("QUESTIONNAIRE_API_HOST", "127.0.0.1")
API_PORT = int(os.environ.get("QUESTIONNAIRE_API_PORT", "8766"))

logger = get_logger(__name__)

flowchart_manager = FlowchartManager(base_dir=FLOWCHART_DIR)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup/shutdown tasks."""
    configure_logging(level=LOG_LEVEL, json_logs=JSON_LOGS)
    logger.info("Flowchart service starting; relative paths resolve under %s", FLOWCHART_DIR)
    yield


# --- FastAPI App ---

app = FastAPI(
    title="Questionnaire Flowchart API",
    description="Backend API for building and exporting questionnaire flowcharts",
    version="1.0.0",
    lifespan=lifespan
)

# CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "http://127.0.0.1:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _current():
    """Return the open flowchart or fail with 400."""
    if flowchart_manager.flowchart is None:
        raise HTTPException(status_code=400, detail="No flowchart open")
    return flowchart_manager.flowchart


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "open": flowchart_manager.flowchart is not None}


# --- Flowchart State ---

@app.get("/api/flowchart")
async def get_flowchart():
    """Get the current flowchart state."""
    return flowchart_manager.get_state()


# --- File Operations ---

@app.post("/api/flowchart/new")
async def new_flowchart(
    name: str = Query(default="Untitled Questionnaire"),
    author: Optional[str] = Query(default=None),
):
    """Create a new flowchart with Start and End nodes."""
    flowchart = flowchart_manager.new_flowchart(name=name, author=author)
    return {"success": True, "flowchart": flowchart.to_json_dict()}


class OpenFlowchartRequest(BaseModel):
    file_path: str


@app.post("/api/flowchart/open")
async def open_flowchart(request: OpenFlowchartRequest):
    """Open a flowchart from a JSON file."""
    try:
        flowchart = flowchart_manager.open_flowchart(request.file_path)
        return {
            "success": True,
            "flowchart": flowchart.to_json_dict(),
            "file_path": str(flowchart_manager.file_path)
        }
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FlowchartIngestionError as e:
        raise HTTPException(status_code=422, detail=str(e))


class SaveFlowchartRequest(BaseModel):
    file_path: Optional[str] = None


@app.post("/api/flowchart/save")
async def save_flowchart(request: SaveFlowchartRequest):
    """Save the flowchart to a JSON file."""
    try:
        path = flowchart_manager.save_flowchart(request.file_path)
        return {"success": True, "file_path": str(path)}
    except (NoFlowchartOpenError, ValueError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except OSError as e:
        raise HTTPException(status_code=500, detail=f"Failed to save: {e}")


@app.post("/api/flowchart/ingest")
async def ingest_flowchart(payload: Union[dict[str, Any], str] = Body(...)):
    """Replace the current flowchart with an assistant-generated one."""
    try:
        flowchart = flowchart_manager.ingest_generated(payload)
    except FlowchartIngestionError as e:
        raise HTTPException(status_code=422, detail={"message": e.message, "field": e.field})
    return {"success": True, "flowchart": flowchart.to_json_dict()}


# --- Node Operations ---

@app.post("/api/nodes")
async def create_node(request: CreateNodeRequest):
    """Create a new node."""
    _current()
    node = flowchart_manager.add_node(request.type, request.x, request.y)
    return {"success": True, "node": node.model_dump(mode="json", by_alias=True)}


@app.delete("/api/nodes/{node_id}")
async def delete_node(node_id: UUID):
    """Delete a node and its connections. Deleting an unknown id is a no-op."""
    _current()
    removed = flowchart_manager.remove_node(node_id)
    return {"success": True, "removed": removed}


# --- Connection Operations ---

@app.post("/api/connections")
async def create_connection(request: CreateConnectionRequest):
    """Create a new connection (endpoints are checked by validation, not here)."""
    _current()
    connection = flowchart_manager.add_connection(request.source_id, request.target_id, request.label)
    return {"success": True, "connection": connection.model_dump(mode="json", by_alias=True)}


@app.delete("/api/connections/{connection_id}")
async def delete_connection(connection_id: UUID):
    """Delete a connection. Deleting an unknown id is a no-op."""
    _current()
    removed = flowchart_manager.remove_connection(connection_id)
    return {"success": True, "removed": removed}


# --- Validation, Layout & Analysis ---

@app.get("/api/flowchart/validate")
async def validate_current_flowchart():
    """
    Validate the current flowchart.

    Returns errors, warnings and a summary.
    """
    _current()
    result = flowchart_manager.validate()
    return {
        "success": True,
        "result": result.to_dict(),
        "summary": validation_summary(result)
    }


@app.post("/api/flowchart/arrange")
async def arrange_flowchart():
    """Auto-arrange nodes in a top-down hierarchy from the Start node."""
    _current()
    flowchart = flowchart_manager.auto_arrange()
    return {"success": True, "flowchart": flowchart.to_json_dict()}


@app.get("/api/flowchart/summary")
async def summarize_current_flowchart():
    """Get a structural summary of the current flowchart."""
    _current()
    return {"success": True, "summary": flowchart_manager.summarize().to_dict()}


# --- Export ---

@app.get("/api/flowchart/export/check")
async def check_export():
    """Run the export pre-flight check without exporting."""
    _current()
    issues = flowchart_manager.export_issues()
    return {"success": True, "issues": issues}


@app.get("/api/flowchart/export/drawio")
async def export_drawio():
    """
    Export the current flowchart as a draw.io document.

    Pre-flight issues never block the export; their count is reported in
    the X-Export-Issues header.
    """
    _current()
    xml, issues = flowchart_manager.export_drawio()
    return Response(
        content=xml,
        media_type="application/xml",
        headers={"X-Export-Issues": str(len(issues))},
    )


# --- Run with uvicorn ---

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
