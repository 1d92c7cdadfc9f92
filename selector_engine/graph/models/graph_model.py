from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Tuple

from selector_engine.graph.utils.ast_factory import output_identifier_name


ConnectorAction = Literal["add", "remove"]


@dataclass
class PortModel:
    name: str
    is_input: bool
    description: str = ""
    type_name: str = "var"


@dataclass(frozen=True)
class ConnectorChangedEvent:
    """输入端口连线集合变化（新增或移除一条连线）。"""

    action: ConnectorAction
    edge: "EdgeModel"


ConnectorListener = Callable[[ConnectorChangedEvent], None]


class NodeBehavior(Protocol):
    """自定义节点的行为对象：参与表达式树生成与文档读写。"""

    type_name: str

    def build_output_ast(self, input_ast_nodes: List[Any]) -> List[Any]: ...

    def serialize_core(self, node_element: Any) -> None: ...

    def deserialize_core(self, node_element: Any) -> None: ...


@dataclass
class NodeModel:
    id: str
    title: str
    category: str
    inputs: List[PortModel] = field(default_factory=list)
    outputs: List[PortModel] = field(default_factory=list)
    pos: Tuple[float, float] = (0.0, 0.0)
    description: str = ""
    # 自定义节点行为（参数选择节点等）；普通节点为 None
    behavior: Optional[NodeBehavior] = field(default=None, repr=False, compare=False)

    # 端口映射缓存（O(1) 查询）
    _out_port_index_map: Optional[Dict[str, int]] = field(default=None, repr=False, compare=False)

    def __post_init__(self) -> None:
        self._out_port_index_map = None

    @property
    def outPortIndexMap(self) -> Dict[str, int]:
        if self._out_port_index_map is None:
            self._out_port_index_map = {port.name: idx for idx, port in enumerate(self.outputs or [])}
        return self._out_port_index_map

    def _rebuild_port_maps(self) -> None:
        self._out_port_index_map = {port.name: idx for idx, port in enumerate(self.outputs or [])}

    def get_output_index(self, port_name: str) -> int:
        index = self.outPortIndexMap.get(port_name)
        if index is None:
            raise KeyError(f"节点 {self.id} 不存在输出端口: {port_name}")
        return index

    def get_ast_identifier_for_output_index(self, output_index: int) -> str:
        """输出端口在表达式树中的变量名。"""
        return output_identifier_name(self.id, output_index)


@dataclass
class EdgeModel:
    id: str
    src_node: str
    src_port: str
    dst_node: str
    dst_port: str


class GraphModel:
    def __init__(self, graph_id: str = "", graph_name: str = "", description: str = "") -> None:
        self.graph_id = graph_id
        self.graph_name = graph_name
        self.description = description
        self.nodes: Dict[str, NodeModel] = {}
        self.edges: Dict[str, EdgeModel] = {}
        # 连线版本号：用于让依赖 edges 的缓存具备可靠失效条件
        self._edges_revision: int = 0
        self._next_id = 1
        # (节点ID, 输入端口名) -> 连线变化监听器
        self._connector_listeners: Dict[Tuple[str, str], List[ConnectorListener]] = {}

        if not self.graph_id:
            self.graph_id = datetime.now().strftime("graph_%Y%m%d_%H%M%S_%f")

    def gen_id(self, prefix: str) -> str:
        new_id = f"{prefix}_{self._next_id}"
        self._next_id += 1
        return new_id

    def reserve_id(self, existing_id: str) -> None:
        """加载文档时登记已有 ID，避免之后 gen_id 生成重复 ID。"""
        _, _, suffix = str(existing_id).rpartition("_")
        if suffix.isdigit():
            self._next_id = max(self._next_id, int(suffix) + 1)

    # -------- 变更版本号（用于缓存失效）--------
    def _touch_edges_revision(self) -> None:
        self._edges_revision += 1

    def get_edges_revision(self) -> int:
        return int(self._edges_revision)

    # -------- 节点 --------
    def add_node(
        self,
        title: str,
        category: str,
        input_names: List[str],
        output_names: List[str],
        pos=(0.0, 0.0),
        *,
        node_id: str = "",
    ) -> NodeModel:
        if node_id:
            self.reserve_id(node_id)
        else:
            node_id = self.gen_id("node")
        if node_id in self.nodes:
            raise ValueError(f"节点ID重复: {node_id}")
        node = NodeModel(id=node_id, title=title, category=category, pos=pos)
        node.inputs = [PortModel(name=name, is_input=True) for name in input_names]
        node.outputs = [PortModel(name=name, is_input=False) for name in output_names]
        self.nodes[node_id] = node
        node._rebuild_port_maps()
        return node

    def remove_node(self, node_id: str) -> None:
        if node_id not in self.nodes:
            return
        to_del = [eid for eid, e in self.edges.items() if e.src_node == node_id or e.dst_node == node_id]
        for eid in to_del:
            self.remove_edge(eid)
        self.nodes.pop(node_id, None)
        for key in [key for key in self._connector_listeners if key[0] == node_id]:
            self._connector_listeners.pop(key, None)

    # -------- 连线 --------
    def add_edge(self, src_node: str, src_port: str, dst_node: str, dst_port: str, *, edge_id: str = "") -> EdgeModel:
        if src_node not in self.nodes or dst_node not in self.nodes:
            raise KeyError(f"连线端点节点不存在: {src_node} -> {dst_node}")
        if edge_id:
            self.reserve_id(edge_id)
        else:
            edge_id = self.gen_id("edge")
        edge = EdgeModel(id=edge_id, src_node=src_node, src_port=src_port, dst_node=dst_node, dst_port=dst_port)
        self.edges[edge_id] = edge
        self._touch_edges_revision()
        self._notify_connector_changed(ConnectorChangedEvent(action="add", edge=edge))
        return edge

    def remove_edge(self, edge_id: str) -> Optional[EdgeModel]:
        edge = self.edges.pop(edge_id, None)
        if edge is None:
            return None
        self._touch_edges_revision()
        self._notify_connector_changed(ConnectorChangedEvent(action="remove", edge=edge))
        return edge

    def get_input_edges(self, node_id: str, port_name: str) -> List[EdgeModel]:
        return [
            edge for edge in self.edges.values()
            if edge.dst_node == node_id and edge.dst_port == port_name
        ]

    def has_port_connections(self, node_id: str, port_name: str, is_input: bool) -> bool:
        """检查指定端口是否有连线"""
        for edge in self.edges.values():
            if is_input:
                if edge.dst_node == node_id and edge.dst_port == port_name:
                    return True
            else:
                if edge.src_node == node_id and edge.src_port == port_name:
                    return True
        return False

    def remove_port_connections(self, node_id: str, port_name: str, is_input: bool) -> List[str]:
        """删除指定端口的所有连线，返回被删除的边ID列表"""
        to_del = []
        for edge_id, edge in self.edges.items():
            if is_input:
                if edge.dst_node == node_id and edge.dst_port == port_name:
                    to_del.append(edge_id)
            else:
                if edge.src_node == node_id and edge.src_port == port_name:
                    to_del.append(edge_id)
        for edge_id in to_del:
            self.remove_edge(edge_id)
        return to_del

    def get_output_identifier(self, node_id: str, port_name: str) -> str:
        node = self.nodes[node_id]
        return node.get_ast_identifier_for_output_index(node.get_output_index(port_name))

    # -------- 连线变化监听 --------
    def add_connector_listener(self, node_id: str, port_name: str, listener: ConnectorListener) -> None:
        self._connector_listeners.setdefault((str(node_id), str(port_name)), []).append(listener)

    def remove_connector_listener(self, node_id: str, port_name: str, listener: ConnectorListener) -> None:
        listeners = self._connector_listeners.get((str(node_id), str(port_name)))
        if listeners and listener in listeners:
            listeners.remove(listener)

    def _notify_connector_changed(self, event: ConnectorChangedEvent) -> None:
        listeners = self._connector_listeners.get((event.edge.dst_node, event.edge.dst_port))
        for listener in list(listeners or []):
            listener(event)
