from __future__ import annotations

import json
from pathlib import Path

from selector_engine.graph.evaluation_mirror import EvaluationMirror
from selector_engine.graph.models.graph_document import write_graph_document
from selector_engine.graph.models.graph_model import GraphModel
from selector_engine.nodes.parameter_selector_node import INPUT_PORT_NAME, ParameterSelectorNode
from selector_engine.params.parameter_wrapper import ParameterWrapper
from tools.inspect_selections import inspect_document, main


def _write_document(path: Path) -> None:
    graph = GraphModel(graph_id="graph_tool")
    mirror = EvaluationMirror()
    source = graph.add_node("Select Model Element", "Selection", [], ["element"])
    connected = ParameterSelectorNode.create(graph, mirror)
    connected.set_active(ParameterWrapper("Type | Mark", "TYPE_MARK"))
    graph.add_edge(source.id, "element", connected.node_id, INPUT_PORT_NAME)
    ParameterSelectorNode.create(graph, mirror)
    write_graph_document(graph, path)


def test_inspect_document_lists_each_selector(tmp_path: Path) -> None:
    path = tmp_path / "graph.xml"
    _write_document(path)

    rows = inspect_document(path)

    assert [row["node_id"] for row in rows] == ["node_2", "node_4"]
    assert rows[0]["raw"] == "Type | Mark+TYPE_MARK"
    assert rows[0]["canonical_key"] == "TYPE_MARK"
    assert rows[0]["output"] == "TYPE_MARK"
    assert rows[1]["raw"] == ""
    assert rows[1]["canonical_key"] is None
    assert rows[1]["connected"] is False
    assert rows[1]["output"] is None


def test_main_prints_json(tmp_path: Path, capsys) -> None:
    path = tmp_path / "graph.xml"
    _write_document(path)

    assert main([str(path), "--json"]) == 0

    rows = json.loads(capsys.readouterr().out)
    assert rows[0]["display_name"] == "Type | Mark"


def test_main_reports_broken_document(tmp_path: Path, capsys) -> None:
    path = tmp_path / "broken.xml"
    path.write_text("not xml", encoding="utf-8")

    assert main([str(path)]) == 2
    assert "文档无法加载" in capsys.readouterr().err
