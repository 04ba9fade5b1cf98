import json
import logging
from pathlib import Path

import pytest
from PySide6.QtCore import QSettings

from pastel.app import key_bindings as kb
from pastel.app.app_settings_manager import APP_NAME, ORG_DOMAIN


@pytest.fixture
def config_path(tmp_path: Path):
    """ keybindings.json を一時作成 """
    cfg = tmp_path / "settings"
    cfg.mkdir(parents=True, exist_ok=True)
    defaults = {
        "delete": ["Delete", "Backspace"],
        "nudge_up": "ArrowUp",
    }
    path = cfg / "keybindings.json"
    path.write_text(json.dumps(defaults), encoding="utf-8")
    return path


def test_package_defaults_are_loaded(tmp_settings):
    bindings = kb.KeyBindings()
    assert bindings.keys_for("delete") == ["Delete", "Backspace"]
    assert bindings.command_for("ArrowLeft") == "nudge_left"
    assert bindings.command_for("r") == "tool_rectangle"
    assert bindings.warnings == []


def test_string_and_list_defaults(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    assert bindings.commands() == ["delete", "nudge_up"]
    assert bindings.keys_for("nudge_up") == ["ArrowUp"]
    assert bindings.command_for("Backspace") == "delete"
    assert bindings.command_for("F1") is None


def test_trigger_runs_callback(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    called = {"delete": 0}

    def cb():
        called["delete"] += 1

    bindings.add_callback("delete", cb)
    assert bindings.trigger("Backspace") is True
    assert bindings.trigger("Delete") is True
    assert called["delete"] == 2


def test_unbound_and_unregistered_keys(tmp_settings, config_path, caplog):
    bindings = kb.KeyBindings(config_path)
    assert bindings.trigger("F1") is False
    with caplog.at_level(logging.WARNING, logger=kb.__name__):
        assert bindings.trigger("ArrowUp") is False
    assert "not registered" in caplog.text


def test_add_callback_unknown_command(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    with pytest.raises(KeyError):
        bindings.add_callback("nonexistent", lambda: None)


def test_development_mode_raises(tmp_settings, config_path):
    """開発モードでは例外を再送出する"""
    bindings = kb.KeyBindings(config_path, dev_mode=True)

    def bad():
        raise RuntimeError("boom")

    bindings.add_callback("delete", bad)
    with pytest.raises(RuntimeError):
        bindings.trigger("Delete")


def test_production_mode_swallows_and_continues(tmp_settings, config_path, caplog):
    """本番モードでは例外を握りつぶして継続する"""
    bindings = kb.KeyBindings(config_path)

    def bad():
        raise ValueError("bad")

    bindings.add_callback("delete", bad)
    with caplog.at_level(logging.ERROR, logger=kb.__name__):
        assert bindings.trigger("Delete") is False
    assert "Error in key binding callback: delete" in caplog.text


def test_update_binding_conflict(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    assert bindings.update_binding("nudge_up", "Backspace") is False
    assert bindings.update_binding("missing", "x") is False
    assert bindings.update_binding("nudge_up", []) is False
    assert bindings.keys_for("nudge_up") == ["ArrowUp"]


def test_update_binding_is_persisted(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    assert bindings.update_binding("nudge_up", ["w", "k"]) is True
    assert bindings.command_for("w") == "nudge_up"
    assert bindings.command_for("ArrowUp") is None

    again = kb.KeyBindings(config_path)
    assert again.keys_for("nudge_up") == ["w", "k"]


def test_user_overrides_are_loaded(tmp_settings, config_path):
    s = QSettings(ORG_DOMAIN, APP_NAME)
    s.setValue("keybindings/delete", "x")
    bindings = kb.KeyBindings(config_path)
    assert bindings.keys_for("delete") == ["x"]


def test_reset_to_default(tmp_settings, config_path):
    bindings = kb.KeyBindings(config_path)
    bindings.update_binding("delete", ["d"])
    bindings.reset_to_default()
    assert bindings.keys_for("delete") == ["Delete", "Backspace"]
    assert kb.KeyBindings(config_path).keys_for("delete") == ["Delete", "Backspace"]


def test_missing_defaults_file(tmp_settings, tmp_path):
    bindings = kb.KeyBindings(tmp_path / "missing.json")
    assert bindings.commands() == []
    assert bindings.warnings
