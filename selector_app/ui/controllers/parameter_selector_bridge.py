from __future__ import annotations

from typing import Optional

from PyQt6 import QtCore

from selector_engine.nodes.parameter_selector_node import ParameterSelectorNode
from selector_engine.params.parameter_discovery import ParameterDiscoveryError
from selector_engine.params.parameter_wrapper import ParameterWrapper
from selector_engine.utils.logging.logger import log_error


class ParameterSelectorBridge(QtCore.QObject):
    """Qt 桥接：把参数选择节点的无参通知转换为 Qt 信号，并在 UI 边界处理发现失败。

    - 节点（纯逻辑）只暴露回调注册，不依赖 Qt；
    - 连线变化 -> `refresh_requested`（界面据此关闭/刷新下拉列表）；
    - 选中项变化 -> `selection_modified`；
    - 参数发现失败 -> 记录错误并发射 `discovery_failed(message)`，候选列表保持原样。
    """

    refresh_requested = QtCore.pyqtSignal()
    selection_modified = QtCore.pyqtSignal()
    discovery_failed = QtCore.pyqtSignal(str)

    def __init__(self, node: ParameterSelectorNode, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._node = node
        self._node.add_refresh_listener(self._on_refresh_requested)
        self._node.add_node_modified_listener(self._on_selection_modified)

    @property
    def node(self) -> ParameterSelectorNode:
        return self._node

    def request_populate(self) -> bool:
        """重新填充候选列表；失败时返回 False（不向 Qt 事件循环抛出异常）。"""
        try:
            return self._node.populate()
        except ParameterDiscoveryError as exc:
            log_error("[ParamSelector] 参数发现失败（节点 {}）: {}", self._node.node_id, exc)
            self.discovery_failed.emit(str(exc))
            return False

    def choose(self, choice: Optional[ParameterWrapper]) -> None:
        self._node.set_active(choice)

    def dispose(self) -> None:
        self._node.remove_refresh_listener(self._on_refresh_requested)
        self._node.remove_node_modified_listener(self._on_selection_modified)

    def _on_refresh_requested(self) -> None:
        self.refresh_requested.emit()

    def _on_selection_modified(self) -> None:
        self.selection_modified.emit()
