#!/usr/bin/env python3
"""Questionnaire flowchart CLI - runs the flowchart engine over JSON files."""

import argparse
import json
import os
import random
import sys
from datetime import datetime
from pathlib import Path
from uuid import UUID

from questionnaire_core import (
    NodeType,
    QuestionnaireError,
    add_connection,
    add_node,
    add_node_at_random,
    auto_arrange,
    create_flowchart,
    flowchart_from_generation,
    load_flowchart,
    remove_connection,
    remove_node,
    save_flowchart,
    summarize_flowchart,
    validate_export,
    validate_flowchart,
    validation_summary,
    write_drawio,
)
from questionnaire_core.logging_utils import configure_logging

LOG_LEVEL = os.environ.get("QUESTIONNAIRE_LOG_LEVEL", "INFO")
JSON_LOGS = os.environ.get("QUESTIONNAIRE_JSON_LOGS") == "1"


def _json_out(data, code=0):
    print(json.dumps(data))
    sys.exit(code)


def _error_out(message):
    _json_out({"status": "error", "error": message}, code=1)


def _save(flowchart, file_path):
    """Stamp the modified date and write the flowchart back."""
    flowchart.last_modified_date = datetime.now()
    return save_flowchart(flowchart, file_path)


def _node_type(value):
    try:
        return NodeType(value)
    except ValueError:
        choices = ", ".join(t.value for t in NodeType)
        raise argparse.ArgumentTypeError(f"invalid node type {value!r} (choose from {choices})")


def _read_input(path):
    """Read raw bytes; decoding is left to the ingestion step."""
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


# ── Flowcharts ───────────────────────────────────────────────────────────────

def cmd_new(args):
    flowchart = create_flowchart(args.name, author=args.author)
    path = _save(flowchart, args.file)
    _json_out({"status": "created", "file_path": str(path), "flowchart": flowchart.to_json_dict()})


def cmd_ingest(args):
    flowchart = flowchart_from_generation(_read_input(args.input))
    path = _save(flowchart, args.file)
    _json_out({
        "status": "ingested",
        "file_path": str(path),
        "nodes": len(flowchart.nodes),
        "connections": len(flowchart.connections),
    })


# ── Nodes & Connections ──────────────────────────────────────────────────────

def cmd_add_node(args):
    flowchart = load_flowchart(args.file)
    if args.x is None or args.y is None:
        node = add_node_at_random(flowchart, args.type, random.Random(args.seed))
    else:
        node = add_node(flowchart, args.type, args.x, args.y)
    _save(flowchart, args.file)
    _json_out({"status": "added", "node": node.model_dump(mode="json", by_alias=True)})


def cmd_remove_node(args):
    flowchart = load_flowchart(args.file)
    removed = remove_node(flowchart, args.node_id)
    if removed:
        _save(flowchart, args.file)
    _json_out({"status": "removed" if removed else "not_found", "removed": removed})


def cmd_connect(args):
    flowchart = load_flowchart(args.file)
    connection = add_connection(flowchart, args.source, args.target, args.label)
    _save(flowchart, args.file)
    _json_out({"status": "connected", "connection": connection.model_dump(mode="json", by_alias=True)})


def cmd_disconnect(args):
    flowchart = load_flowchart(args.file)
    removed = remove_connection(flowchart, args.connection_id)
    if removed:
        _save(flowchart, args.file)
    _json_out({"status": "removed" if removed else "not_found", "removed": removed})


# ── Analysis & Layout ────────────────────────────────────────────────────────

def cmd_validate(args):
    result = validate_flowchart(load_flowchart(args.file))
    _json_out({"status": "ok", "result": result.to_dict(), "summary": validation_summary(result)})


def cmd_arrange(args):
    flowchart = load_flowchart(args.file)
    auto_arrange(flowchart)
    path = _save(flowchart, args.output or args.file)
    _json_out({"status": "arranged", "file_path": str(path)})


def cmd_summarize(args):
    summary = summarize_flowchart(load_flowchart(args.file))
    _json_out({"status": "ok", "summary": summary.to_dict()})


# ── Export ───────────────────────────────────────────────────────────────────

def cmd_check_export(args):
    issues = validate_export(load_flowchart(args.file))
    _json_out({"status": "ok", "issues": issues})


def cmd_export(args):
    flowchart = load_flowchart(args.file)
    issues = validate_export(flowchart)
    output = args.output or str(Path(args.file).with_suffix(".drawio"))
    path = write_drawio(flowchart, output)
    _json_out({"status": "exported", "file_path": str(path), "issues": issues})


def main(argv=None):
    parser = argparse.ArgumentParser(description="Questionnaire flowchart CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    # Flowcharts
    p = sub.add_parser("new")
    p.add_argument("--file", required=True)
    p.add_argument("--name", default="Untitled Questionnaire")
    p.add_argument("--author", default=None)

    p = sub.add_parser("ingest")
    p.add_argument("--input", required=True, help="Assistant response file, or - for stdin")
    p.add_argument("--file", required=True)

    # Nodes
    p = sub.add_parser("add-node")
    p.add_argument("--file", required=True)
    p.add_argument("--type", type=_node_type, required=True)
    p.add_argument("--x", type=float, default=None)
    p.add_argument("--y", type=float, default=None)
    p.add_argument("--seed", type=int, default=None, help="Seed for random placement")

    p = sub.add_parser("remove-node")
    p.add_argument("--file", required=True)
    p.add_argument("--node-id", type=UUID, required=True)

    # Connections
    p = sub.add_parser("connect")
    p.add_argument("--file", required=True)
    p.add_argument("--source", type=UUID, required=True)
    p.add_argument("--target", type=UUID, required=True)
    p.add_argument("--label", default="")

    p = sub.add_parser("disconnect")
    p.add_argument("--file", required=True)
    p.add_argument("--connection-id", type=UUID, required=True)

    # Analysis & Layout
    p = sub.add_parser("validate")
    p.add_argument("--file", required=True)

    p = sub.add_parser("arrange")
    p.add_argument("--file", required=True)
    p.add_argument("--output", default=None)

    p = sub.add_parser("summarize")
    p.add_argument("--file", required=True)

    # Export
    p = sub.add_parser("check-export")
    p.add_argument("--file", required=True)

    p = sub.add_parser("export")
    p.add_argument("--file", required=True)
    p.add_argument("--output", default=None)

    args = parser.parse_args(argv)
    configure_logging(level=LOG_LEVEL, json_logs=JSON_LOGS)

    cmd_map = {
        "new": cmd_new,
        "ingest": cmd_ingest,
        "add-node": cmd_add_node,
        "remove-node": cmd_remove_node,
        "connect": cmd_connect,
        "disconnect": cmd_disconnect,
        "validate": cmd_validate,
        "arrange": cmd_arrange,
        "summarize": cmd_summarize,
        "check-export": cmd_check_export,
        "export": cmd_export,
    }
    try:
        cmd_map[args.command](args)
    except (QuestionnaireError, OSError) as e:
        _error_out(str(e))


if __name__ == "__main__":
    main()
