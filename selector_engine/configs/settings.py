"""全局设置模块 - 控制参数选择节点的行为和调试选项

集中式配置：所有设置项都是大写的类属性，可直接读取/修改，
也可以通过 JSON 文件持久化。

使用方法：
    from selector_engine.configs.settings import settings
    from selector_engine.utils.logging.logger import log_info

    if settings.PARAM_SELECTOR_VERBOSE:
        log_info("调试信息")

    settings.set_config_path(workspace_root)
    settings.load()
    settings.save()
"""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from selector_engine.utils.logging.logger import log_info, log_warn

SETTINGS_FILENAME = "user_settings.json"


class Settings:
    """全局设置类

    所有设置项都是类属性，可以直接访问和修改。
    """

    # ========== 调试选项 ==========

    # 参数选择节点的详细日志（连线变化、参数发现、反序列化降级等）
    # 控制 `selector_engine.utils.logging.logger.log_info` 是否输出
    # 默认 False（关闭），仅保留 warn/error
    PARAM_SELECTOR_VERBOSE: bool = False

    # 节点图 XML 文档读写的详细日志
    GRAPH_DOCUMENT_VERBOSE: bool = False

    # ========== 选择行为 ==========

    # 参数列表重新填充后，若当前没有选中项，是否自动选中排序后的第一项
    # True：默认行为（与节点原始语义一致）
    # False：保持未选中，直到用户显式选择
    PARAM_SELECTOR_AUTO_SELECT_FIRST: bool = True

    # ========== 界面 ==========

    # 参数下拉框一次可见的最大行数
    SELECTOR_VIEW_MAX_VISIBLE_ITEMS: int = 20

    # ========== 路径 ==========

    # 运行时缓存根目录（相对于 workspace 的路径，或绝对路径）。
    # 设置文件固定存放在 `<RUNTIME_CACHE_ROOT>/user_settings.json`。
    RUNTIME_CACHE_ROOT: str = "selector_app/runtime/cache"

    # 配置文件路径（由 set_config_path 显式注入）
    _config_file: Optional[Path] = None
    _workspace_root: Optional[Path] = None

    def __repr__(self) -> str:
        """返回所有设置的字符串表示"""
        return f"Settings({self._get_all_settings()})"

    @classmethod
    def set_config_path(cls, workspace_path: Path):
        """设置配置文件路径

        Args:
            workspace_path: 工作空间根目录
        """
        cache_root = Path(cls.RUNTIME_CACHE_ROOT)
        if not cache_root.is_absolute():
            cache_root = workspace_path / cache_root
        config_file = cache_root / SETTINGS_FILENAME

        log_info(
            "[BOOT][Settings] set_config_path: workspace_path={} -> config_file={}",
            workspace_path,
            config_file,
        )
        cls._config_file = config_file
        cls._workspace_root = workspace_path.resolve()

    def _get_all_settings(self) -> Dict[str, Any]:
        """获取所有设置项的字典

        注意：从实例获取属性，以支持实例属性覆盖类属性的情况
        """
        return {
            key: getattr(self, key)
            for key in dir(self.__class__)
            if not key.startswith('_') and key.isupper()
        }

    def save(self) -> bool:
        """保存设置到配置文件

        Returns:
            是否保存成功
        """
        config_file = self.__class__._config_file
        if config_file is None:
            log_warn("配置文件路径未设置，无法保存设置")
            return False

        config_file.parent.mkdir(parents=True, exist_ok=True)
        with open(config_file, 'w', encoding='utf-8') as file:
            json.dump(self._get_all_settings(), file, indent=2, ensure_ascii=False)
        return True

    def load(self) -> bool:
        """从配置文件加载设置

        未设置路径或文件不存在时使用类默认值；
        JSON 解析错误直接抛出，不在此处吞掉。

        Returns:
            是否加载成功
        """
        config_file = self.__class__._config_file
        if config_file is None:
            log_info("[BOOT][Settings] load: _config_file 未设置，跳过加载，使用类默认值")
            return False

        if not config_file.exists():
            log_info("[BOOT][Settings] load: 配置文件不存在（{}），跳过加载，使用类默认值", config_file)
            return False

        with open(config_file, 'r', encoding='utf-8') as file:
            settings_dict = json.load(file)

        applied_count = 0
        for key, value in settings_dict.items():
            if hasattr(self.__class__, key) and key.isupper():
                setattr(self, key, value)
                applied_count += 1

        log_info("[BOOT][Settings] load: 配置加载完成，共应用 {} 个键", applied_count)
        return True

    def reset_to_defaults(self):
        """重置所有设置为默认值（同时清除实例层覆盖）"""
        for key in list(vars(self)):
            if key.isupper():
                delattr(self, key)
        cls = self.__class__
        cls.PARAM_SELECTOR_VERBOSE = False
        cls.GRAPH_DOCUMENT_VERBOSE = False
        cls.PARAM_SELECTOR_AUTO_SELECT_FIRST = True
        cls.SELECTOR_VIEW_MAX_VISIBLE_ITEMS = 20
        cls.RUNTIME_CACHE_ROOT = "selector_app/runtime/cache"
        log_info("已重置所有设置为默认值")


# 全局设置实例
settings = Settings()
