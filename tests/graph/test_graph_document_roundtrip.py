from __future__ import annotations

from pathlib import Path

import pytest

from selector_engine.graph.evaluation_mirror import EvaluationMirror
from selector_engine.graph.models.graph_document import (
    GraphDocumentError,
    read_graph_document,
    write_graph_document,
)
from selector_engine.graph.models.graph_model import GraphModel
from selector_engine.nodes.parameter_selector_node import (
    INPUT_PORT_NAME,
    NODE_TYPE_NAME,
    ParameterSelectorNode,
    make_parameter_selector_factory,
)
from selector_engine.params.element_model import Element, Parameter
from selector_engine.params.parameter_wrapper import ParameterWrapper


def _factories(mirror: EvaluationMirror) -> dict:
    return {NODE_TYPE_NAME: make_parameter_selector_factory(mirror)}


def _saved_graph(tmp_path: Path) -> Path:
    graph = GraphModel(graph_id="graph_doc", graph_name="参数图")
    mirror = EvaluationMirror()
    source = graph.add_node("Select Model Element", "Selection", [], ["element"], pos=(10.0, 20.0))
    selector = ParameterSelectorNode.create(graph, mirror, pos=(200.0, 20.0))
    graph.add_edge(source.id, "element", selector.node_id, INPUT_PORT_NAME)

    element = Element(id=1)
    element.add_parameter(Parameter.built_in("Comments", "COMMENTS_BIP"))
    mirror.record(graph.get_output_identifier(source.id, "element"), element)
    selector.populate()

    path = tmp_path / "graph.xml"
    write_graph_document(graph, path)
    return path


def test_selection_survives_save_and_reload(tmp_path: Path) -> None:
    path = _saved_graph(tmp_path)
    assert "Instance | Comments+COMMENTS_BIP" in path.read_text(encoding="utf-8")

    graph = read_graph_document(path, _factories(EvaluationMirror()))

    selectors = [node.behavior for node in graph.nodes.values() if node.behavior is not None]
    assert len(selectors) == 1
    selector = selectors[0]
    assert selector.active == ParameterWrapper("Instance | Comments", "COMMENTS_BIP")
    # 重新加载时不做参数发现：候选列表为空，但选择与输出保持
    assert selector.candidates == ()
    assert selector.is_input_connected() is True
    assert graph.nodes["node_1"].pos == (10.0, 20.0)


def test_reloaded_graph_generates_fresh_ids_after_loaded_ones(tmp_path: Path) -> None:
    graph = read_graph_document(_saved_graph(tmp_path), _factories(EvaluationMirror()))

    node = graph.add_node("新节点", "测试", [], [])

    assert node.id not in {"node_1", "node_2", "edge_3"}


def test_poisoned_selection_text_loads_as_no_selection(tmp_path: Path) -> None:
    path = _saved_graph(tmp_path)
    text = path.read_text(encoding="utf-8").replace("Instance | Comments+COMMENTS_BIP", "None+None")
    path.write_text(text, encoding="utf-8")

    graph = read_graph_document(path, _factories(EvaluationMirror()))

    selector = graph.nodes["node_2"].behavior
    assert selector.active is None


def test_unknown_node_type_is_a_document_error(tmp_path: Path) -> None:
    path = _saved_graph(tmp_path)
    with pytest.raises(GraphDocumentError):
        read_graph_document(path, {})


def test_invalid_xml_is_a_document_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.xml"
    path.write_text("<Workspace><Elements>", encoding="utf-8")

    with pytest.raises(GraphDocumentError) as exc_info:
        read_graph_document(path)
    assert exc_info.value.path == path


def test_missing_file_is_not_swallowed(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        read_graph_document(tmp_path / "missing.xml")
