"""AST 构造工具

节点在每次求值时向节点图的表达式树贡献赋值语句；这里集中提供
赋值/空值/字符串字面量节点的构造、输出标识符命名以及常量回读。
"""
from __future__ import annotations

import ast
from typing import Any, Iterable, List


class _NotExtractable:
    """哨兵：表示无法静态提取常量值"""
    pass


NOT_EXTRACTABLE = _NotExtractable()


def output_identifier_name(node_id: str, output_index: int) -> str:
    """节点某个输出端口在表达式树中的变量名（如 `var_node_3_0`）。"""
    safe_node_id = "".join(ch if (ch.isalnum() or ch == "_") else "_" for ch in str(node_id))
    return f"var_{safe_node_id}_{int(output_index)}"


def build_identifier(name: str) -> ast.Name:
    return ast.Name(id=str(name), ctx=ast.Load())


def build_null_node() -> ast.Constant:
    return ast.Constant(value=None)


def build_string_node(text: str) -> ast.Constant:
    return ast.Constant(value=str(text))


def build_assignment(target: ast.Name, value: ast.expr) -> ast.Assign:
    """构造 `target = value`；target 的上下文统一改写为 Store。"""
    store_target = ast.Name(id=target.id, ctx=ast.Store())
    return ast.Assign(targets=[store_target], value=value)


def build_module(statements: Iterable[ast.stmt]) -> ast.Module:
    """把若干语句包装成可 compile 的模块（补全行号信息）。"""
    module = ast.Module(body=list(statements), type_ignores=[])
    return ast.fix_missing_locations(module)


def extract_constant_value(node: ast.AST) -> Any:
    """提取字面量常量；非常量返回 NOT_EXTRACTABLE。"""
    if isinstance(node, ast.Constant):
        return node.value
    return NOT_EXTRACTABLE


def collect_assignments(statements: Iterable[ast.stmt]) -> List[tuple]:
    """返回 `[(变量名, 常量值或 NOT_EXTRACTABLE), ...]`，仅处理单目标赋值。"""
    results: List[tuple] = []
    for stmt in statements:
        if isinstance(stmt, ast.Assign) and len(stmt.targets) == 1 and isinstance(stmt.targets[0], ast.Name):
            results.append((stmt.targets[0].id, extract_constant_value(stmt.value)))
    return results
