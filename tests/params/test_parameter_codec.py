from __future__ import annotations

import pytest

from selector_engine.params.parameter_codec import decode_selection, encode_selection, restore_selection
from selector_engine.params.parameter_wrapper import UNRESOLVED_PARAMETER, ParameterWrapper


def test_encode_present_and_absent_selection() -> None:
    assert encode_selection(ParameterWrapper("Instance | Comments", "COMMENTS_BIP")) == "Instance | Comments+COMMENTS_BIP"
    assert encode_selection(None) == ""


@pytest.mark.parametrize(
    "wrapper",
    [
        ParameterWrapper("Instance | Comments", "COMMENTS_BIP"),
        ParameterWrapper("Type | 类型标记", "TYPE_MARK"),
        ParameterWrapper("Type | Width (mm)", "WALL_ATTR_WIDTH_PARAM"),
    ],
)
def test_decode_inverts_encode_for_separator_free_fields(wrapper: ParameterWrapper) -> None:
    assert decode_selection(encode_selection(wrapper)) == wrapper


def test_decode_persisted_type_parameter() -> None:
    assert decode_selection("Type | Mark+TYPE_MARK") == ParameterWrapper("Type | Mark", "TYPE_MARK")


@pytest.mark.parametrize("raw", ["", "malformed", None, 42])
def test_decode_malformed_input_returns_sentinel_without_raising(raw) -> None:
    decoded = decode_selection(raw)
    assert decoded is UNRESOLVED_PARAMETER
    assert decoded.is_unresolved


@pytest.mark.parametrize("raw", ["Instance | A+", "+KEY", "+"])
def test_decode_empty_field_returns_sentinel(raw: str) -> None:
    assert decode_selection(raw) is UNRESOLVED_PARAMETER
    assert restore_selection(raw) is None


def test_decode_uses_first_two_fields_when_separator_repeats() -> None:
    # 分隔符不转义：多余字段被丢弃
    assert decode_selection("Instance | A+B+KEY") == ParameterWrapper("Instance | A", "B")


def test_restore_selection_discards_empty_and_unresolved_text() -> None:
    assert restore_selection("") is None
    assert restore_selection(None) is None
    assert restore_selection("malformed") is None
    # 旧版本写出的哨兵文本也按未选择处理
    assert restore_selection("None+None") is None


def test_restore_selection_logs_warning_for_malformed_text(capsys) -> None:
    restore_selection("no-separator")

    captured = capsys.readouterr()
    assert "[WARN" in captured.out
    assert "no-separator" in captured.out


def test_restore_selection_installs_decoded_wrapper() -> None:
    assert restore_selection("Type | Mark+TYPE_MARK") == ParameterWrapper("Type | Mark", "TYPE_MARK")


def test_wrapper_rejects_none_fields() -> None:
    with pytest.raises(ValueError):
        ParameterWrapper(None, "KEY")  # type: ignore[arg-type]


def test_wrapper_scope_factory_formats_display_name() -> None:
    wrapper = ParameterWrapper.for_scope("Type", "Mark", "TYPE_MARK")
    assert wrapper.display_name == "Type | Mark"
    assert str(wrapper) == "Type | Mark"
