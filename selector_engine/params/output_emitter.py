from __future__ import annotations

import ast
from typing import List, Optional

from selector_engine.graph.utils.ast_factory import (
    build_assignment,
    build_identifier,
    build_null_node,
    build_string_node,
)
from selector_engine.params.parameter_wrapper import ParameterWrapper


def emit_output(
    is_input_connected: bool,
    active: Optional[ParameterWrapper],
    output_identifier: str,
) -> List[ast.stmt]:
    """节点唯一输出端口的赋值语句。

    - 输入未连接或未选中：`<output> = None`
    - 否则：`<output> = "<canonical_key>"`

    纯函数：不做参数发现，也不读写任何外部状态。
    """
    target = build_identifier(output_identifier)
    if not is_input_connected or active is None:
        return [build_assignment(target, build_null_node())]
    return [build_assignment(target, build_string_node(active.canonical_key))]
