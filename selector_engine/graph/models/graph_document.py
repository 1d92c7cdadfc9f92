"""节点图 XML 文档读写

文档结构：

    <Workspace id="..." name="..." description="...">
      <Elements>
        <Node id="node_1" type="ParameterSelectorNode" title="..." category="..." x="0" y="0">
          <Port name="Element" direction="in"/>
          <Port name="bipName" direction="out"/>
          <paramWrapper>Instance | Comments+COMMENTS_BIP</paramWrapper>
        </Node>
      </Elements>
      <Connectors>
        <Connector id="edge_3" start="node_2" start_port="element" end="node_1" end_port="Element"/>
      </Connectors>
    </Workspace>

自定义节点（带 behavior）通过 `serialize_core` / `deserialize_core` 追加/读取自身子元素；
普通节点按 <Port> 列表原样重建。加载顺序为“先节点、后连线”，
因此节点先恢复存档中的选择，再收到连线新增通知。
"""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, Optional, Tuple

from selector_engine.graph.models.graph_model import GraphModel, NodeModel
from selector_engine.utils.logging.logger import log_debug


PLAIN_NODE_TYPE = "NodeModel"

NodeFactory = Callable[[GraphModel, str, Tuple[float, float]], NodeModel]


class GraphDocumentError(Exception):
    """文档结构错误（XML 无法解析、缺少必需属性、未知节点类型等）"""
    def __init__(self, message: str, path: Optional[Path] = None):
        self.message = message
        self.path = path
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.path is not None:
            return f"{self.path}: {self.message}"
        return self.message


def serialize_graph(graph: GraphModel) -> ET.Element:
    root = ET.Element(
        "Workspace",
        {"id": graph.graph_id, "name": graph.graph_name, "description": graph.description},
    )
    elements = ET.SubElement(root, "Elements")
    for node in graph.nodes.values():
        type_name = node.behavior.type_name if node.behavior is not None else PLAIN_NODE_TYPE
        node_element = ET.SubElement(
            elements,
            "Node",
            {
                "id": node.id,
                "type": type_name,
                "title": node.title,
                "category": node.category,
                "x": repr(float(node.pos[0])),
                "y": repr(float(node.pos[1])),
            },
        )
        for port in node.inputs:
            ET.SubElement(node_element, "Port", {"name": port.name, "direction": "in"})
        for port in node.outputs:
            ET.SubElement(node_element, "Port", {"name": port.name, "direction": "out"})
        if node.behavior is not None:
            node.behavior.serialize_core(node_element)

    connectors = ET.SubElement(root, "Connectors")
    for edge in graph.edges.values():
        ET.SubElement(
            connectors,
            "Connector",
            {
                "id": edge.id,
                "start": edge.src_node,
                "start_port": edge.src_port,
                "end": edge.dst_node,
                "end_port": edge.dst_port,
            },
        )
    log_debug("GRAPH_DOCUMENT_VERBOSE", "[GraphDocument] 序列化: 节点 {} 个, 连线 {} 条", len(graph.nodes), len(graph.edges))
    return root


def _require(element: ET.Element, attribute: str) -> str:
    value = element.get(attribute)
    if value is None:
        raise GraphDocumentError(f"<{element.tag}> 缺少属性 {attribute}")
    return value


def deserialize_graph(root: ET.Element, node_factories: Optional[Dict[str, NodeFactory]] = None) -> GraphModel:
    """从 XML 根元素重建节点图。

    Args:
        root: <Workspace> 元素
        node_factories: 自定义节点类型名 -> 工厂（负责创建节点并挂接 behavior）
    """
    if root.tag != "Workspace":
        raise GraphDocumentError(f"根元素应为 <Workspace>，实际为 <{root.tag}>")
    factories = dict(node_factories or {})

    graph = GraphModel(
        graph_id=root.get("id", ""),
        graph_name=root.get("name", ""),
        description=root.get("description", ""),
    )

    for node_element in root.iterfind("Elements/Node"):
        node_id = _require(node_element, "id")
        type_name = node_element.get("type", PLAIN_NODE_TYPE)
        pos = (float(node_element.get("x", "0")), float(node_element.get("y", "0")))

        if type_name == PLAIN_NODE_TYPE:
            ports = node_element.findall("Port")
            graph.add_node(
                title=node_element.get("title", ""),
                category=node_element.get("category", ""),
                input_names=[_require(p, "name") for p in ports if p.get("direction") == "in"],
                output_names=[_require(p, "name") for p in ports if p.get("direction") == "out"],
                pos=pos,
                node_id=node_id,
            )
            continue

        factory = factories.get(type_name)
        if factory is None:
            raise GraphDocumentError(f"未注册的节点类型: {type_name}（节点 {node_id}）")
        node = factory(graph, node_id, pos)
        if node.behavior is not None:
            node.behavior.deserialize_core(node_element)

    for connector in root.iterfind("Connectors/Connector"):
        try:
            graph.add_edge(
                _require(connector, "start"),
                _require(connector, "start_port"),
                _require(connector, "end"),
                _require(connector, "end_port"),
                edge_id=connector.get("id", ""),
            )
        except KeyError as exc:
            raise GraphDocumentError(f"连线引用了不存在的节点: {exc}") from exc

    log_debug("GRAPH_DOCUMENT_VERBOSE", "[GraphDocument] 反序列化: 节点 {} 个, 连线 {} 条", len(graph.nodes), len(graph.edges))
    return graph


def write_graph_document(graph: GraphModel, path: Path) -> None:
    tree = ET.ElementTree(serialize_graph(graph))
    ET.indent(tree)
    path.parent.mkdir(parents=True, exist_ok=True)
    tree.write(path, encoding="utf-8", xml_declaration=True)


def read_graph_document(path: Path, node_factories: Optional[Dict[str, NodeFactory]] = None) -> GraphModel:
    """读取 XML 文档。文件不存在等文件系统错误直接抛出；XML 语法错误转为 GraphDocumentError。"""
    try:
        tree = ET.parse(path)
    except ET.ParseError as exc:
        raise GraphDocumentError(f"XML 解析失败: {exc}", path=path) from exc
    return deserialize_graph(tree.getroot(), node_factories)
