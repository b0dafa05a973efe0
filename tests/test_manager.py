"""Tests for the single-flowchart manager."""

import json
import logging
import random

import pytest

from questionnaire_core import NodeType, NoFlowchartOpenError
from questionnaire_core.logging_utils import JsonLogFormatter
from questionnaire_api.flowchart_manager import FlowchartManager


@pytest.fixture
def manager(tmp_path) -> FlowchartManager:
    return FlowchartManager(base_dir=tmp_path, rng=random.Random(1))


def test_requires_open_flowchart(manager):
    with pytest.raises(NoFlowchartOpenError):
        manager.add_node(NodeType.QUESTION)
    with pytest.raises(NoFlowchartOpenError):
        manager.save_flowchart("x.json")


def test_change_callbacks_and_dirty_flag(manager):
    calls = []
    manager.on_change(lambda: calls.append(manager.is_dirty))

    manager.new_flowchart("Intake")
    manager.add_node(NodeType.ACTION, 10, 20)
    manager.remove_node(manager.flowchart.nodes[-1].id)

    assert calls == [False, True, True]
    assert manager.is_dirty is True


def test_unknown_removal_does_not_notify(manager):
    manager.new_flowchart("Intake")
    calls = []
    manager.on_change(lambda: calls.append(1))

    assert manager.remove_connection(manager.flowchart.nodes[0].id) is False
    assert calls == []
    assert manager.is_dirty is False


def test_save_stamps_modified_date_and_resolves_relative_paths(manager, tmp_path):
    flowchart = manager.new_flowchart("Intake")
    created = flowchart.last_modified_date

    path = manager.save_flowchart("sub/intake.json")

    assert path == tmp_path / "sub" / "intake.json"
    assert flowchart.last_modified_date >= created
    assert manager.file_path == path
    assert manager.save_flowchart() == path


def test_ingest_replaces_flowchart(manager, generated_payload):
    manager.new_flowchart("Old")

    flowchart = manager.ingest_generated(generated_payload)

    assert manager.flowchart is flowchart
    assert manager.file_path is None
    assert manager.is_dirty is True


def test_export_returns_issues(manager):
    manager.new_flowchart("Intake")
    xml, issues = manager.export_drawio()

    assert xml.startswith("<mxfile")
    assert issues == []


def test_json_log_formatter_includes_extra_fields():
    record = logging.makeLogRecord({
        "name": "questionnaire_core.test",
        "levelname": "INFO",
        "msg": "Saved %s",
        "args": ("intake",),
        "flowchart_id": "abc",
    })

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload == {
        "level": "INFO",
        "logger": "questionnaire_core.test",
        "message": "Saved intake",
        "flowchart_id": "abc",
    }


def test_arrange_without_start_leaves_flowchart_clean(manager):
    manager.new_flowchart("Intake")
    manager.save_flowchart("intake.json")
    manager.remove_node(manager.flowchart.find_start_node().id)
    manager.save_flowchart()
    calls = []
    manager.on_change(lambda: calls.append(1))

    manager.auto_arrange()

    assert manager.is_dirty is False
    assert calls == []


def test_arrange_with_start_marks_dirty(manager):
    manager.new_flowchart("Intake")

    manager.auto_arrange()

    assert manager.is_dirty is True
