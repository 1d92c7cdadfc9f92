from __future__ import annotations

import ast

from selector_engine.graph.utils.ast_factory import build_module, collect_assignments
from selector_engine.params.output_emitter import emit_output
from selector_engine.params.parameter_wrapper import ParameterWrapper


_COMMENTS = ParameterWrapper("Instance | Comments", "COMMENTS_BIP")


def _evaluate(statements) -> dict:
    namespace: dict = {}
    exec(compile(build_module(statements), "<graph>", "exec"), namespace)
    return namespace


def test_disconnected_input_emits_null_regardless_of_selection() -> None:
    for active in (None, _COMMENTS):
        statements = emit_output(False, active, "var_node_1_0")
        assert collect_assignments(statements) == [("var_node_1_0", None)]


def test_connected_without_selection_emits_null() -> None:
    statements = emit_output(True, None, "var_node_1_0")
    assert collect_assignments(statements) == [("var_node_1_0", None)]


def test_connected_with_selection_emits_canonical_key_string_literal() -> None:
    statements = emit_output(True, _COMMENTS, "var_node_1_0")

    assert len(statements) == 1
    assert isinstance(statements[0], ast.Assign)
    assert isinstance(statements[0].value, ast.Constant)
    assert collect_assignments(statements) == [("var_node_1_0", "COMMENTS_BIP")]


def test_emitted_statement_compiles_and_evaluates() -> None:
    namespace = _evaluate(emit_output(True, _COMMENTS, "var_node_1_0"))
    assert namespace["var_node_1_0"] == "COMMENTS_BIP"

    namespace = _evaluate(emit_output(False, _COMMENTS, "var_node_1_0"))
    assert namespace["var_node_1_0"] is None
