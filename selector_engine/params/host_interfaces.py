"""参数选择节点与外部宿主之间的窄接口。

宿主对象模型（元素/参数/文档）与节点图求值结果都不属于本包，
这里只约定节点实际会读取的那几个成员。
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Protocol


class ParameterDefinitionLike(Protocol):
    name: str
    # 内部定义的参数才有稳定标识；外部/共享参数为 None
    built_in_parameter: Optional[str]


class ParameterLike(Protocol):
    definition: ParameterDefinitionLike

    # 宿主自己的存储类型枚举；成员名为 None（不区分大小写）表示无值
    @property
    def storage_type(self) -> Any: ...


class ElementLike(Protocol):
    @property
    def parameters(self) -> Iterable[ParameterLike]: ...

    def can_have_type_assigned(self) -> bool: ...

    def get_type_id(self) -> Any: ...


class DocumentContext(Protocol):
    """“当前文档”：按元素 ID 查找元素（用于解析类型元素）。"""

    def get_element(self, element_id: Any) -> Optional[ElementLike]: ...


class UpstreamResolver(Protocol):
    """返回输入端口当前连接的上游元素；无求值结果/集合值/未连接时返回 None。"""

    def is_input_connected(self) -> bool: ...

    def resolve_input_element(self) -> Optional[ElementLike]: ...
