"""参数发现：把元素（及其类型元素）的参数集合转换为有序的 ParameterWrapper 列表。

规则：
1. 遍历实例参数：存储类型不为 None 且为内部定义（有内置参数标识）的参数，
   生成 `"Instance | <参数名>"`；
2. 元素支持指定类型时，经由显式传入的文档上下文解析类型元素，
   对其重复第 1 步生成 `"Type | <参数名>"`；解析不到类型元素则静默跳过；
3. 实例在前、类型在后拼接，再按 display_name 升序（序数比较，稳定排序）。

重名不去重：两个作用域下的同名参数靠 canonical_key 区分。
"""

from __future__ import annotations

from typing import List, Optional

from selector_engine.params.host_interfaces import DocumentContext, ElementLike
from selector_engine.params.parameter_wrapper import INSTANCE_SCOPE, TYPE_SCOPE, ParameterWrapper
from selector_engine.utils.logging.logger import log_info


class ParameterDiscoveryError(RuntimeError):
    """宿主无法提供参数集合时抛出。

    说明：失败不会被伪装成“没有参数”的空列表，
    由 populate() 的调用方决定是否保留之前的候选列表。
    """

    def __init__(self, message: str, scope: Optional[str] = None):
        self.message = message
        self.scope = scope
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.scope:
            return f"[{self.scope}] {self.message}"
        return self.message


def _has_value(storage_type: object) -> bool:
    """按枚举成员名判断：宿主各自的存储类型枚举中名为 None 的成员视为无值。"""
    if storage_type is None:
        return False
    name = getattr(storage_type, "name", storage_type)
    return str(name).strip().lower() != "none"


def collect_scope_parameters(element: ElementLike, scope: str) -> List[ParameterWrapper]:
    """枚举单个元素的参数（不排序）。"""
    items: List[ParameterWrapper] = []
    try:
        for parameter in element.parameters:
            if not _has_value(parameter.storage_type):
                continue
            definition = parameter.definition
            built_in_parameter = getattr(definition, "built_in_parameter", None)
            if built_in_parameter is None:
                continue
            items.append(ParameterWrapper.for_scope(scope, definition.name, str(built_in_parameter)))
    except ParameterDiscoveryError:
        raise
    except Exception as exc:
        raise ParameterDiscoveryError(f"无法枚举元素参数: {exc}", scope=scope) from exc
    return items


def resolve_type_element(element: ElementLike, document: Optional[DocumentContext]) -> Optional[ElementLike]:
    """解析元素的类型元素；元素不支持类型、无文档上下文或查找不到时返回 None。"""
    if document is None:
        return None
    if not element.can_have_type_assigned():
        return None
    try:
        return document.get_element(element.get_type_id())
    except Exception as exc:
        raise ParameterDiscoveryError(f"无法解析类型元素: {exc}", scope=TYPE_SCOPE) from exc


def discover_parameters(element: ElementLike, document: Optional[DocumentContext]) -> List[ParameterWrapper]:
    """返回元素实例参数 + 类型参数，按 display_name 升序排列。"""
    items = collect_scope_parameters(element, INSTANCE_SCOPE)
    instance_count = len(items)

    type_element = resolve_type_element(element, document)
    if type_element is not None:
        items.extend(collect_scope_parameters(type_element, TYPE_SCOPE))

    log_info(
        "[ParamSelector] discover: instance={} type={} (type_element={})",
        instance_count,
        len(items) - instance_count,
        "yes" if type_element is not None else "no",
    )
    return sorted(items, key=lambda item: item.display_name)


class ParameterDiscovery:
    """绑定文档上下文的参数发现器（供 SelectionState 注入）。"""

    def __init__(self, document: Optional[DocumentContext]) -> None:
        self._document = document

    @property
    def document(self) -> Optional[DocumentContext]:
        return self._document

    def set_document(self, document: Optional[DocumentContext]) -> None:
        self._document = document

    def __call__(self, element: ElementLike) -> List[ParameterWrapper]:
        return discover_parameters(element, self._document)
