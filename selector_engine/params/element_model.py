"""内存版元素对象模型

为参数选择节点提供一个可直接使用的宿主对象模型实现：
元素（实例/类型）、参数、参数定义与“当前文档”。
测试、演示窗口与命令行工具都基于它构造上游元素。
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional


class StorageType(str, Enum):
    NONE = "None"
    INTEGER = "Integer"
    DOUBLE = "Double"
    STRING = "String"
    ELEMENT_ID = "ElementId"


@dataclass(frozen=True)
class ParameterDefinition:
    name: str
    # 内置参数的枚举名（如 "COMMENTS_BIP"）；共享/项目参数为 None
    built_in_parameter: Optional[str] = None


@dataclass
class Parameter:
    definition: ParameterDefinition
    storage_type: StorageType = StorageType.STRING
    value: Any = None

    @classmethod
    def built_in(
        cls,
        name: str,
        built_in_parameter: str,
        *,
        storage_type: StorageType = StorageType.STRING,
        value: Any = None,
    ) -> "Parameter":
        return cls(
            definition=ParameterDefinition(name=name, built_in_parameter=built_in_parameter),
            storage_type=storage_type,
            value=value,
        )

    @classmethod
    def shared(cls, name: str, *, storage_type: StorageType = StorageType.STRING, value: Any = None) -> "Parameter":
        return cls(definition=ParameterDefinition(name=name), storage_type=storage_type, value=value)


@dataclass
class Element:
    id: int
    name: str = ""
    parameter_list: List[Parameter] = field(default_factory=list)
    # 类型元素 ID；None 表示该元素不支持指定类型（类型元素本身也是 None）
    type_id: Optional[int] = None

    @property
    def parameters(self) -> Iterator[Parameter]:
        return iter(self.parameter_list)

    def can_have_type_assigned(self) -> bool:
        return self.type_id is not None

    def get_type_id(self) -> Optional[int]:
        return self.type_id

    def add_parameter(self, parameter: Parameter) -> Parameter:
        self.parameter_list.append(parameter)
        return parameter


class Document:
    """按 ID 索引元素的“当前文档”。"""

    def __init__(self, title: str = "") -> None:
        self.title = title
        self._elements: Dict[int, Element] = {}
        self._next_id = 1

    def new_element(self, name: str = "", *, type_id: Optional[int] = None) -> Element:
        element = Element(id=self._next_id, name=name, type_id=type_id)
        self._next_id += 1
        self._elements[element.id] = element
        return element

    def get_element(self, element_id: Any) -> Optional[Element]:
        if element_id is None:
            return None
        return self._elements.get(element_id)
