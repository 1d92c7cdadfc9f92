"""节点图求值结果镜像

宿主每次求值后把各输出变量的值写入这里；参数选择节点通过
上游输出端口的 AST 变量名查询（“求值并读取”能力）。
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


_COLLECTION_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class MirrorData:
    data: Any
    is_collection: bool

    @classmethod
    def from_value(cls, value: Any) -> "MirrorData":
        return cls(data=value, is_collection=isinstance(value, _COLLECTION_TYPES))


class EvaluationMirror:
    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}

    def record(self, identifier: str, value: Any) -> None:
        self._values[str(identifier)] = value

    def record_namespace(self, namespace: Dict[str, Any]) -> int:
        """批量写入一次求值后的命名空间（仅收录 `var_` 前缀的输出变量）。"""
        count = 0
        for name, value in namespace.items():
            if name.startswith("var_"):
                self._values[name] = value
                count += 1
        return count

    def get_mirror(self, identifier: str) -> Optional[MirrorData]:
        """返回求值结果；该变量尚未求值时返回 None。"""
        if identifier not in self._values:
            return None
        return MirrorData.from_value(self._values[identifier])
