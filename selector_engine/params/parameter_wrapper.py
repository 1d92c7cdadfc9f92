from __future__ import annotations

from dataclasses import dataclass


INSTANCE_SCOPE = "Instance"
TYPE_SCOPE = "Type"
SCOPE_SEPARATOR = " | "


@dataclass(frozen=True)
class ParameterWrapper:
    """参数选择项：显示名 + 规范键（如 `("Instance | Comments", "COMMENTS_BIP")`）。

    - display_name：`"<作用域> | <参数名>"`，作用域为 Instance / Type；
    - canonical_key：与显示语言无关的稳定标识（内置参数枚举名）。

    相等性由二者共同决定：同名参数在实例与类型两个作用域下互不相等。
    """

    display_name: str
    canonical_key: str

    def __post_init__(self) -> None:
        if self.display_name is None or self.canonical_key is None:
            raise ValueError("ParameterWrapper 的 display_name 与 canonical_key 均不可为 None")

    @classmethod
    def for_scope(cls, scope: str, parameter_name: str, canonical_key: str) -> "ParameterWrapper":
        return cls(
            display_name=f"{scope}{SCOPE_SEPARATOR}{parameter_name}",
            canonical_key=str(canonical_key),
        )

    @property
    def is_unresolved(self) -> bool:
        return self == UNRESOLVED_PARAMETER

    def __str__(self) -> str:
        return self.display_name


# 哨兵：反序列化失败时返回；调用方必须将其视为“未选择”，不得写入 active。
UNRESOLVED_PARAMETER = ParameterWrapper(display_name="None", canonical_key="None")
