from __future__ import annotations

import ast
import xml.etree.ElementTree as ET
from typing import Callable, List, Optional, Tuple

from selector_engine.graph.evaluation_mirror import EvaluationMirror
from selector_engine.graph.models.graph_model import ConnectorChangedEvent, GraphModel, NodeModel, PortModel
from selector_engine.params.host_interfaces import DocumentContext, ElementLike
from selector_engine.params.output_emitter import emit_output
from selector_engine.params.parameter_codec import encode_selection, restore_selection
from selector_engine.params.parameter_discovery import ParameterDiscovery
from selector_engine.params.parameter_wrapper import ParameterWrapper
from selector_engine.params.selection_state import Listener, SelectionPhase, SelectionState
from selector_engine.utils.logging.logger import log_info


NODE_TYPE_NAME = "ParameterSelectorNode"
NODE_NAME = "Get BipParameter Name"
NODE_CATEGORY = "archilab.Revit.Parameter"
NODE_DESCRIPTION = "Allows you to select a BuiltInParameter name for use with GetBuiltInParameter node."

INPUT_PORT_NAME = "Element"
INPUT_PORT_DESCRIPTION = "Input element."
OUTPUT_PORT_NAME = "bipName"
OUTPUT_PORT_DESCRIPTION = "Name of the BuiltInParameter selected."

# 存档中保存选中项的子元素标签
PARAM_WRAPPER_TAG = "paramWrapper"


class ParameterSelectorNode:
    """“选择内置参数名”节点：一个元素输入端口，一个参数名输出端口。

    职责划分：
    - 连线变化由 GraphModel 的连线监听送达，转换为 `SelectionState.on_connectivity_changed`；
    - 上游元素通过 EvaluationMirror 读取上游输出变量的求值结果（集合值不参与发现）；
    - 类型元素通过显式注入的 DocumentContext 解析；
    - 求值时只读取当前状态生成一条赋值语句，不做参数发现。
    """

    type_name = NODE_TYPE_NAME

    def __init__(
        self,
        graph: GraphModel,
        model: NodeModel,
        mirror: EvaluationMirror,
        document: Optional[DocumentContext] = None,
    ) -> None:
        self._graph = graph
        self.model = model
        self._mirror = mirror
        self._discovery = ParameterDiscovery(document)
        self.state = SelectionState(resolver=self, discovery=self._discovery)

        self._node_modified_listeners: List[Listener] = []
        self._modified_count: int = 0

        model.behavior = self
        self.state.add_modified_listener(self._on_selection_modified)
        self._graph.add_connector_listener(model.id, INPUT_PORT_NAME, self._on_connectors_changed)

    @classmethod
    def create(
        cls,
        graph: GraphModel,
        mirror: EvaluationMirror,
        document: Optional[DocumentContext] = None,
        *,
        pos: Tuple[float, float] = (0.0, 0.0),
        node_id: str = "",
    ) -> "ParameterSelectorNode":
        model = graph.add_node(
            title=NODE_NAME,
            category=NODE_CATEGORY,
            input_names=[INPUT_PORT_NAME],
            output_names=[OUTPUT_PORT_NAME],
            pos=pos,
            node_id=node_id,
        )
        model.description = NODE_DESCRIPTION
        model.inputs = [PortModel(name=INPUT_PORT_NAME, is_input=True, description=INPUT_PORT_DESCRIPTION)]
        model.outputs = [PortModel(name=OUTPUT_PORT_NAME, is_input=False, description=OUTPUT_PORT_DESCRIPTION)]
        model._rebuild_port_maps()
        return cls(graph, model, mirror, document)

    def detach(self) -> None:
        """从节点图解除监听（节点删除时调用）。"""
        self._graph.remove_connector_listener(self.model.id, INPUT_PORT_NAME, self._on_connectors_changed)
        self.state.remove_modified_listener(self._on_selection_modified)
        self.model.behavior = None

    # ===== 便捷访问 =====

    @property
    def node_id(self) -> str:
        return self.model.id

    @property
    def candidates(self) -> Tuple[ParameterWrapper, ...]:
        return self.state.candidates

    @property
    def active(self) -> Optional[ParameterWrapper]:
        return self.state.active

    @property
    def phase(self) -> SelectionPhase:
        return self.state.phase

    @property
    def modified_count(self) -> int:
        return self._modified_count

    @property
    def output_identifier(self) -> str:
        return self.model.get_ast_identifier_for_output_index(0)

    def set_document(self, document: Optional[DocumentContext]) -> None:
        self._discovery.set_document(document)

    def populate(self) -> bool:
        return self.state.populate()

    def set_active(self, choice: Optional[ParameterWrapper]) -> None:
        self.state.set_active(choice)

    def add_refresh_listener(self, listener: Listener) -> None:
        self.state.add_refresh_listener(listener)

    def remove_refresh_listener(self, listener: Listener) -> None:
        self.state.remove_refresh_listener(listener)

    def add_node_modified_listener(self, listener: Listener) -> None:
        """节点被标记为已修改（需要重新求值）时通知宿主。"""
        self._node_modified_listeners.append(listener)

    def remove_node_modified_listener(self, listener: Listener) -> None:
        if listener in self._node_modified_listeners:
            self._node_modified_listeners.remove(listener)

    # ===== UpstreamResolver =====

    def is_input_connected(self) -> bool:
        return self._graph.has_port_connections(self.model.id, INPUT_PORT_NAME, is_input=True)

    def resolve_input_element(self) -> Optional[ElementLike]:
        edges = self._graph.get_input_edges(self.model.id, INPUT_PORT_NAME)
        if not edges:
            return None
        edge = edges[0]
        identifier = self._graph.get_output_identifier(edge.src_node, edge.src_port)
        mirror_data = self._mirror.get_mirror(identifier)
        if mirror_data is None:
            return None
        if mirror_data.is_collection:
            log_info("[ParamSelector] 上游 {} 为集合值，不做参数发现", identifier)
            return None
        return mirror_data.data

    # ===== 事件 =====

    def _on_connectors_changed(self, event: ConnectorChangedEvent) -> None:
        self.state.on_connectivity_changed(self.is_input_connected())

    def _on_selection_modified(self) -> None:
        self._modified_count += 1
        for listener in list(self._node_modified_listeners):
            listener()

    # ===== 表达式树 =====

    def build_output_ast(self, input_ast_nodes: Optional[List[ast.expr]] = None) -> List[ast.stmt]:
        return emit_output(self.is_input_connected(), self.state.active, self.output_identifier)

    # ===== 文档读写 =====

    def serialize_core(self, node_element: ET.Element) -> None:
        wrapper = ET.SubElement(node_element, PARAM_WRAPPER_TAG)
        wrapper.text = encode_selection(self.state.active)

    def deserialize_core(self, node_element: ET.Element) -> None:
        wrapper = node_element.find(PARAM_WRAPPER_TAG)
        if wrapper is None:
            return
        self.state.restore_active(restore_selection(wrapper.text or ""))


def make_parameter_selector_factory(
    mirror: EvaluationMirror,
    document: Optional[DocumentContext] = None,
) -> Callable[[GraphModel, str, Tuple[float, float]], NodeModel]:
    """供 graph_document 加载时重建参数选择节点的工厂。"""

    def _factory(graph: GraphModel, node_id: str, pos: Tuple[float, float]) -> NodeModel:
        return ParameterSelectorNode.create(graph, mirror, document, pos=pos, node_id=node_id).model

    return _factory
