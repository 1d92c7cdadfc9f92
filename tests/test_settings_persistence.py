from __future__ import annotations

import json
from pathlib import Path

from selector_engine.configs.settings import Settings, settings
from selector_engine.utils.logging.logger import log_info


def test_settings_save_and_load_roundtrip(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(Settings, "_config_file", None)
    monkeypatch.setattr(Settings, "_workspace_root", None)
    Settings.set_config_path(tmp_path)

    local_settings = Settings()
    local_settings.SELECTOR_VIEW_MAX_VISIBLE_ITEMS = 7
    assert local_settings.save() is True

    config_file = tmp_path / "selector_app/runtime/cache/user_settings.json"
    saved = json.loads(config_file.read_text(encoding="utf-8"))
    assert saved["SELECTOR_VIEW_MAX_VISIBLE_ITEMS"] == 7
    assert saved["PARAM_SELECTOR_AUTO_SELECT_FIRST"] is True

    reloaded = Settings()
    assert reloaded.load() is True
    assert reloaded.SELECTOR_VIEW_MAX_VISIBLE_ITEMS == 7


def test_load_without_config_file_uses_defaults(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setattr(Settings, "_config_file", tmp_path / "absent.json")

    assert Settings().load() is False


def test_save_without_config_path_warns(monkeypatch, capsys) -> None:
    monkeypatch.setattr(Settings, "_config_file", None)

    assert Settings().save() is False
    assert "[WARN" in capsys.readouterr().out


def test_log_info_is_gated_by_verbose_setting(monkeypatch, capsys) -> None:
    monkeypatch.setattr(settings, "PARAM_SELECTOR_VERBOSE", False)
    log_info("静默 {}", 1)
    assert capsys.readouterr().out == ""

    monkeypatch.setattr(settings, "PARAM_SELECTOR_VERBOSE", True)
    log_info("输出 {}", 2)
    assert "[INFO" in capsys.readouterr().out


def test_reset_to_defaults_drops_instance_overrides(monkeypatch) -> None:
    monkeypatch.setattr(Settings, "SELECTOR_VIEW_MAX_VISIBLE_ITEMS", 5)
    monkeypatch.setattr(Settings, "RUNTIME_CACHE_ROOT", "elsewhere/cache")
    local_settings = Settings()
    local_settings.PARAM_SELECTOR_AUTO_SELECT_FIRST = False

    local_settings.reset_to_defaults()

    assert local_settings.PARAM_SELECTOR_AUTO_SELECT_FIRST is True
    assert local_settings.SELECTOR_VIEW_MAX_VISIBLE_ITEMS == 20
    assert local_settings.RUNTIME_CACHE_ROOT == "selector_app/runtime/cache"
