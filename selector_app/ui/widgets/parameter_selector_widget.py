"""参数选择下拉框。

交互约定：
- 展开下拉列表时才重新发现参数（参数发现较重，不随连线事件同步执行）；
- 连线变化时收起已展开的列表并按当前状态重建条目；
- 用户选择条目后写回节点（节点随之标记为已修改）；
- 存档恢复但不在候选列表中的选择仍以单独条目显示在首位。
"""

from __future__ import annotations

from typing import List, Optional

from PyQt6 import QtCore, QtWidgets

from selector_app.ui.controllers.parameter_selector_bridge import ParameterSelectorBridge
from selector_engine.configs.settings import settings
from selector_engine.nodes.parameter_selector_node import ParameterSelectorNode
from selector_engine.params.parameter_wrapper import ParameterWrapper


class ParameterSelectorWidget(QtWidgets.QComboBox):
    """参数选择节点的内嵌下拉框。"""

    # 用户通过界面改变选择时发射，参数为规范键
    parameter_chosen = QtCore.pyqtSignal(str)

    def __init__(self, node: ParameterSelectorNode, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent)
        self._bridge = ParameterSelectorBridge(node, parent=self)
        self._is_loading: bool = False
        self._last_error: str = ""

        self.setMaxVisibleItems(int(settings.SELECTOR_VIEW_MAX_VISIBLE_ITEMS))
        self.setSizeAdjustPolicy(QtWidgets.QComboBox.SizeAdjustPolicy.AdjustToContents)

        self._bridge.refresh_requested.connect(self._on_refresh_requested)
        self._bridge.selection_modified.connect(self.reload_items)
        self._bridge.discovery_failed.connect(self._on_discovery_failed)
        self.activated.connect(self._on_item_activated)

        self.reload_items()

    @property
    def bridge(self) -> ParameterSelectorBridge:
        return self._bridge

    @property
    def last_error(self) -> str:
        return self._last_error

    def item_wrappers(self) -> List[ParameterWrapper]:
        return [self.itemData(index) for index in range(self.count())]

    def current_wrapper(self) -> Optional[ParameterWrapper]:
        if self.currentIndex() < 0:
            return None
        return self.itemData(self.currentIndex())

    def _index_of(self, wrapper: ParameterWrapper) -> int:
        for index in range(self.count()):
            if self.itemData(index) == wrapper:
                return index
        return -1

    def refresh_candidates(self) -> None:
        """重新发现参数并重建条目（展开列表前调用）。"""
        if self._bridge.request_populate():
            self._last_error = ""
        self.reload_items()

    def reload_items(self) -> None:
        """按节点当前状态重建条目（不做参数发现）。"""
        node = self._bridge.node
        candidates = list(node.candidates)
        active = node.active

        self._is_loading = True
        self.blockSignals(True)
        self.clear()
        if active is not None and active not in candidates:
            self.addItem(active.display_name, active)
        for wrapper in candidates:
            self.addItem(wrapper.display_name, wrapper)

        if active is None:
            self.setCurrentIndex(-1)
        else:
            self.setCurrentIndex(self._index_of(active))
        self.blockSignals(False)
        self._is_loading = False

    def showPopup(self) -> None:
        self.refresh_candidates()
        super().showPopup()

    def _on_refresh_requested(self) -> None:
        self.hidePopup()
        self.reload_items()

    def _on_discovery_failed(self, message: str) -> None:
        self._last_error = str(message)
        self.setToolTip(self._last_error)

    def _on_item_activated(self, index: int) -> None:
        if self._is_loading or index < 0:
            return
        wrapper = self.itemData(index)
        if not isinstance(wrapper, ParameterWrapper):
            return
        if wrapper == self._bridge.node.active:
            return
        self._bridge.choose(wrapper)
        self.parameter_chosen.emit(wrapper.canonical_key)
