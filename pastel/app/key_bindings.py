import logging

from pathlib import Path
from typing import Callable, Optional
from PySide6.QtCore import QSettings

from pastel.app.app_settings_manager import APP_NAME, ORG_DOMAIN
from pastel.utils import json_loader
from pastel.utils.resource_paths import keybindings_json_path


logger = logging.getLogger(__name__)


def _as_key_list(value) -> list[str]:
    """QSettings returns a single-item list as a plain string."""
    if value is None:
        return []
    if isinstance(value, str):
        return [k.strip() for k in value.split(",") if k.strip()]
    return [str(k) for k in value if str(k)]


class KeyBindings:
    """
    Map key names to editor commands.
    -------------------------
    1) `keybindings.json` (package default) + user overrides in QSettings under `keybindings/*`.
    2) Key names follow the DOM `KeyboardEvent.key` values ("Delete", "ArrowUp", "r").
    add_callback: Add a callback function for a command.
    trigger: Run the command bound to a key.
    update_binding: Update the keys for a command.
    reset_to_default: Reset all bindings to default.
    --------------------------
    - A key belongs to at most one command; update_binding refuses conflicts.
    - Callback errors are logged. In development mode they are re-raised.
    """
    def __init__(self, config_path: Optional[Path] = None,
                 settings: Optional[QSettings] = None,
                 dev_mode: bool = False):
        self.config_path = config_path or keybindings_json_path()
        self._settings = settings or QSettings(ORG_DOMAIN, APP_NAME)
        self.dev_mode = dev_mode
        self.warnings: list[str] = []

        self._callbacks: dict[str, Callable[[], None]] = {}
        self._defaults = self._load_default_bindings()
        self._bindings: dict[str, list[str]] = {}
        self._load_user_overrides()

        logger.debug("KeyBindings initialized: %d commands", len(self._bindings))

    def _load_default_bindings(self) -> dict[str, list[str]]:
        """
        Load the default bindings from `keybindings.json`.
        File format example:
        {
            "delete": ["Delete", "Backspace"],
            "nudge_up": ["ArrowUp"]
        }
        :return: dict[str, list[str]]
        """
        logger.debug("Loading default key bindings: %s", self.config_path)
        data = json_loader.read_json_dict(self.config_path, warnings=self.warnings, logger=logger)
        if data is None:
            return {}
        return {cmd: _as_key_list(keys) for cmd, keys in data.items()}

    def _load_user_overrides(self) -> None:
        """
        Override default bindings with user-defined bindings.
        """
        self._bindings = {}
        for cmd, default_keys in self._defaults.items():
            user_keys = _as_key_list(self._settings.value(f"keybindings/{cmd}", None))
            self._bindings[cmd] = user_keys or list(default_keys)

    # 参照
    def commands(self) -> list[str]:
        return list(self._bindings)

    def keys_for(self, cmd: str) -> list[str]:
        return list(self._bindings.get(cmd, []))

    def command_for(self, key: str) -> str | None:
        for cmd, keys in self._bindings.items():
            if key in keys:
                return cmd
        return None

    # 実行
    def add_callback(self, command_name: str, callback: Callable[[], None]) -> None:
        """
        Add a callback function for a command.
        :param command_name: Command name (e.g., "delete").
        :param callback: Callback function. (e.g., editor.delete_selected)
        :return:
        """
        if command_name not in self._bindings:
            raise KeyError(f"Command '{command_name}' not found in key bindings.")
        self._callbacks[command_name] = callback

    def trigger(self, key: str) -> bool:
        """
        Run the callback bound to a key.
        :param key: Key name (e.g., "ArrowUp")
        :return: True if a callback ran without error
        """
        cmd = self.command_for(key)
        if cmd is None:
            return False
        cb = self._callbacks.get(cmd)
        if cb is None:
            logger.warning("Command '%s' is not registered.", cmd)
            return False

        logger.debug("Key triggered: %s -> %s.%s", key,
                     getattr(cb, "__module__", ""), getattr(cb, "__qualname__", repr(cb)))
        try:
            cb()
        except Exception:
            logger.exception("Error in key binding callback: %s", cmd)
            if self.dev_mode:
                raise
            return False
        return True

    # 変更
    def update_binding(self, cmd: str, keys: list[str] | str) -> bool:
        new_keys = _as_key_list(keys)
        if cmd not in self._bindings or not new_keys:
            return False
        for other, other_keys in self._bindings.items():
            if other != cmd and set(new_keys) & set(other_keys):
                logger.info("Key binding conflict: %s already used by %s", new_keys, other)
                return False
        self._bindings[cmd] = new_keys
        self._settings.setValue(f"keybindings/{cmd}", new_keys)
        return True

    def reset_to_default(self) -> None:
        self._settings.remove("keybindings")
        self._load_user_overrides()
