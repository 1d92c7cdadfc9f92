from __future__ import annotations

from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

from selector_engine.configs.settings import settings
from selector_engine.params.host_interfaces import ElementLike, UpstreamResolver
from selector_engine.params.parameter_wrapper import ParameterWrapper
from selector_engine.utils.logging.logger import log_info


DiscoveryCallable = Callable[[ElementLike], Sequence[ParameterWrapper]]
Listener = Callable[[], None]


class SelectionPhase(str, Enum):
    EMPTY = "empty"
    POPULATED = "populated"
    SELECTED = "selected"
    STALE = "stale"


class SelectionState:
    """参数选择节点的候选列表与当前选中项（纯逻辑，不依赖 Qt）。

    设计边界：
    - 连线变化只做“失效 + 通知”，不在事件回调里做参数发现；
      重新填充由外层显式调用 `populate()` 触发；
    - 断开输入时候选列表与选中项一并清空，避免界面继续显示已失效的选择；
    - `active` 可以不在 `candidates` 中（从存档恢复的选择不做存在性校验），
      但绝不会是 UNRESOLVED_PARAMETER 哨兵；
    - 每次断开都会推进代数；`populate()` 在提交结果前复核代数与连接状态，
      过期的发现结果不会在清空之后“复活”候选列表。
    """

    def __init__(self, resolver: UpstreamResolver, discovery: DiscoveryCallable) -> None:
        self._resolver = resolver
        self._discovery = discovery

        self._candidates: Tuple[ParameterWrapper, ...] = ()
        self._active: Optional[ParameterWrapper] = None
        self._populated: bool = False
        self._disconnect_generation: int = 0

        self._refresh_listeners: List[Listener] = []
        self._modified_listeners: List[Listener] = []

    # ===== 只读视图 =====

    @property
    def candidates(self) -> Tuple[ParameterWrapper, ...]:
        return self._candidates

    @property
    def active(self) -> Optional[ParameterWrapper]:
        return self._active

    @property
    def phase(self) -> SelectionPhase:
        if self._active is None:
            return SelectionPhase.POPULATED if self._populated else SelectionPhase.EMPTY
        if self._active in self._candidates:
            return SelectionPhase.SELECTED
        return SelectionPhase.STALE

    # ===== 监听 =====

    def add_refresh_listener(self, listener: Listener) -> None:
        """连线变化时的无参通知（界面据此刷新或关闭下拉列表）。"""
        self._refresh_listeners.append(listener)

    def remove_refresh_listener(self, listener: Listener) -> None:
        if listener in self._refresh_listeners:
            self._refresh_listeners.remove(listener)

    def add_modified_listener(self, listener: Listener) -> None:
        """选中项变化时的无参通知（节点据此标记为已修改并触发重新求值）。"""
        self._modified_listeners.append(listener)

    def remove_modified_listener(self, listener: Listener) -> None:
        if listener in self._modified_listeners:
            self._modified_listeners.remove(listener)

    def _notify(self, listeners: List[Listener]) -> None:
        for listener in list(listeners):
            listener()

    # ===== 事件入口 =====

    def on_connectivity_changed(self, now_connected: bool) -> None:
        if not now_connected:
            self._disconnect_generation += 1
            self._candidates = ()
            self._populated = False
            self._active = None
            log_info("[ParamSelector] 输入已断开：清空候选列表与选中项")
            self._notify(self._modified_listeners)
        else:
            log_info("[ParamSelector] 输入连线变化：等待重新填充")
        self._notify(self._refresh_listeners)

    def populate(self) -> bool:
        """重新发现参数并整体替换候选列表。

        Returns:
            是否提交了新的候选列表（未连接/无求值结果/集合值/结果已过期时为 False）。

        参数发现失败（ParameterDiscoveryError）直接向上抛出，候选列表保持不变。
        """
        generation = self._disconnect_generation
        if not self._resolver.is_input_connected():
            return False

        element = self._resolver.resolve_input_element()
        if element is None:
            log_info("[ParamSelector] populate: 上游无可用元素（未求值或为集合），跳过")
            return False

        items = tuple(self._discovery(element))

        if generation != self._disconnect_generation or not self._resolver.is_input_connected():
            log_info("[ParamSelector] populate: 发现期间输入已断开，丢弃结果")
            return False

        self._candidates = items
        self._populated = True
        log_info("[ParamSelector] populate: 候选参数 {} 项", len(items))

        if self._active is None and items and settings.PARAM_SELECTOR_AUTO_SELECT_FIRST:
            self._active = items[0]
            self._notify(self._modified_listeners)
        return True

    def set_active(self, choice: Optional[ParameterWrapper]) -> None:
        """用户显式选择：无条件替换选中项，并通知节点已修改。"""
        if choice is not None and choice.is_unresolved:
            raise ValueError("不能将 UNRESOLVED_PARAMETER 设为选中项")
        self._active = choice
        self._notify(self._modified_listeners)

    def restore_active(self, choice: Optional[ParameterWrapper]) -> bool:
        """加载路径：安装从存档解码的选择，不触发“已修改”。

        None 与哨兵均视为未选择，保持当前状态不变。
        """
        if choice is None or choice.is_unresolved:
            return False
        self._active = choice
        return True
