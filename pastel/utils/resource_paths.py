from __future__ import annotations

import sys
from pathlib import Path


def app_base_dir() -> Path:
    """
    Return base directory for bundled resources

    - In PyInstaller onefile/onedir: use sys._MEIPASS (temporary extraction dir).
    - In development: use the package directory (where `settings/` exists).
    """
    if getattr(sys, "frozen", False) and hasattr(sys, "_MEIPASS"):
        return Path(sys._MEIPASS) / "pastel"  # type: ignore[attr-defined]
    # pastel/utils/resource_paths.py -> parents[1] is the package directory.
    return Path(__file__).resolve().parents[1]


def settings_dir() -> Path:
    """Return the directory for settings files (e.g., keybindings.json)."""
    return app_base_dir() / "settings"


def keybindings_json_path() -> Path:
    return settings_dir() / "keybindings.json"
