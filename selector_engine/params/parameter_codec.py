from __future__ import annotations

from typing import Optional

from selector_engine.params.parameter_wrapper import UNRESOLVED_PARAMETER, ParameterWrapper
from selector_engine.utils.logging.logger import log_info, log_warn


# 分隔符不做转义：显示名或规范键中含 "+" 时解码会错位（保持既有存档格式）。
FIELD_SEPARATOR = "+"


def encode_selection(active: Optional[ParameterWrapper]) -> str:
    """当前选中项 -> `"<display_name>+<canonical_key>"`；未选中时为空串。"""
    if active is None:
        return ""
    return f"{active.display_name}{FIELD_SEPARATOR}{active.canonical_key}"


def decode_selection(raw: object) -> ParameterWrapper:
    """存档文本 -> ParameterWrapper。

    取 split 后的前两个字段；字段不足、任一字段为空或输入不是字符串时
    返回 UNRESOLVED_PARAMETER，从不抛出异常。
    """
    if not isinstance(raw, str):
        return UNRESOLVED_PARAMETER
    fields = raw.split(FIELD_SEPARATOR)
    if len(fields) < 2 or not fields[0] or not fields[1]:
        return UNRESOLVED_PARAMETER
    return ParameterWrapper(display_name=fields[0], canonical_key=fields[1])


def restore_selection(raw: Optional[str]) -> Optional[ParameterWrapper]:
    """加载路径的组合规则：空文本与哨兵都视为“未选择”，返回 None。"""
    if raw is None or raw == "":
        return None
    decoded = decode_selection(raw)
    if decoded.is_unresolved:
        log_warn("[ParamSelector] 存档中的参数选择无法解析，已按未选择处理: {!r}", raw)
        return None
    log_info("[ParamSelector] 恢复参数选择: {} ({})", decoded.display_name, decoded.canonical_key)
    return decoded
