from __future__ import annotations

"""
参数选择节点存档检查脚本

读取节点图 XML 文档，列出每个参数选择节点：
- 存档中的 paramWrapper 原文；
- 加载后实际恢复的选择（无法解析的存档按“未选择”处理）；
- 当前连线状态下该节点输出的值（未连接或未选择时为 None）。

使用示例（在项目根目录执行）：
  python -X utf8 -m tools.inspect_selections path/to/graph.xml
  python -X utf8 -m tools.inspect_selections path/to/graph.xml --json
"""

import argparse
import json
import sys
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, Dict, List

from selector_engine.graph.evaluation_mirror import EvaluationMirror
from selector_engine.graph.models.graph_document import GraphDocumentError, read_graph_document
from selector_engine.graph.utils.ast_factory import NOT_EXTRACTABLE, collect_assignments
from selector_engine.nodes.parameter_selector_node import (
    NODE_TYPE_NAME,
    PARAM_WRAPPER_TAG,
    ParameterSelectorNode,
    make_parameter_selector_factory,
)


def inspect_document(path: Path) -> List[Dict[str, Any]]:
    graph = read_graph_document(path, {NODE_TYPE_NAME: make_parameter_selector_factory(EvaluationMirror())})

    raw_by_node_id: Dict[str, Any] = {}
    for node_element in ET.parse(path).getroot().iterfind("Elements/Node"):
        if node_element.get("type") != NODE_TYPE_NAME:
            continue
        wrapper = node_element.find(PARAM_WRAPPER_TAG)
        raw_by_node_id[node_element.get("id", "")] = None if wrapper is None else (wrapper.text or "")

    rows: List[Dict[str, Any]] = []
    for node in graph.nodes.values():
        behavior = node.behavior
        if not isinstance(behavior, ParameterSelectorNode):
            continue
        assignments = collect_assignments(behavior.build_output_ast([]))
        output_value = assignments[0][1] if assignments else None
        active = behavior.active
        rows.append(
            {
                "node_id": node.id,
                "raw": raw_by_node_id.get(node.id),
                "display_name": active.display_name if active is not None else None,
                "canonical_key": active.canonical_key if active is not None else None,
                "connected": behavior.is_input_connected(),
                "output": None if output_value is NOT_EXTRACTABLE else output_value,
            }
        )
    return rows


def _print_table(rows: List[Dict[str, Any]]) -> None:
    if not rows:
        print("未找到参数选择节点")
        return
    for row in rows:
        print(f"[{row['node_id']}] 存档: {row['raw']!r}")
        if row["canonical_key"] is None:
            print("    选择: <未选择>")
        else:
            print(f"    选择: {row['display_name']} ({row['canonical_key']})")
        print(f"    连接: {'是' if row['connected'] else '否'}  输出: {row['output']!r}")


def main(argv: List[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="列出节点图文档中参数选择节点的存档选择与输出")
    parser.add_argument("document", type=Path, help="节点图 XML 文档路径")
    parser.add_argument("--json", action="store_true", help="以 JSON 输出")
    args = parser.parse_args(argv)

    try:
        rows = inspect_document(args.document)
    except GraphDocumentError as exc:
        print(f"文档无法加载: {exc}", file=sys.stderr)
        return 2

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
    else:
        _print_table(rows)
    return 0


if __name__ == "__main__":
    sys.exit(main())
