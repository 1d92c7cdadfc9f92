from __future__ import annotations

import os
import sys
from pathlib import Path

# 确保项目根目录在 sys.path 中，便于在 pytest 下稳定导入 `selector_engine`、`selector_app`、`tools`。
PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT_STR = str(PROJECT_ROOT)
if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

# Qt 测试在无显示环境下运行。
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from selector_engine.configs.settings import settings  # noqa: E402

settings.set_config_path(PROJECT_ROOT)
settings.load()
