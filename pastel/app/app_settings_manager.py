from __future__ import annotations
from dataclasses import dataclass, asdict, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict
from PySide6.QtCore import QSettings
import logging

from pastel.core.editor_config import (
    DEFAULT_CANVAS_HEIGHT, DEFAULT_CANVAS_WIDTH, DEFAULT_MIN_SIZE, DEFAULT_NUDGE_STEP, EditorConfig,
)

logger = logging.getLogger(__name__)

ORG_DOMAIN = "PastelDesign.org"
APP_NAME = "Pastel"


class RunMode(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    VERBOSE = "verbose"

    def __str__(self):
        return self.value
    def __repr__(self):
        return self.value


# ----------------------
# デフォルト設定
# ----------------------
DEFAULTS: Dict[str, Any] = {
    "general": {
        "run_mode": RunMode.PRODUCTION.value,
        "logging_level": "INFO",  # "DEBUG", "INFO", "WARNING", "ERROR"
    },
    "canvas": {
        "width": DEFAULT_CANVAS_WIDTH,
        "height": DEFAULT_CANVAS_HEIGHT,
        "min_size": DEFAULT_MIN_SIZE,
        "nudge_step": DEFAULT_NUDGE_STEP,
    },
    "storage": {
        "path": str(Path.home() / ".pastel" / "design.json"),
    },
}

SECTIONS = tuple(DEFAULTS)

# ---------------------
# Data model
# ---------------------
@dataclass
class GeneralConfig:
    run_mode: RunMode = RunMode.PRODUCTION
    logging_level: str = "INFO"

@dataclass
class CanvasConfig:
    width: int = DEFAULT_CANVAS_WIDTH
    height: int = DEFAULT_CANVAS_HEIGHT
    min_size: float = DEFAULT_MIN_SIZE
    nudge_step: float = DEFAULT_NUDGE_STEP

@dataclass
class StorageConfig:
    path: str = DEFAULTS["storage"]["path"]

@dataclass
class AppSettingsData:
    general: GeneralConfig = field(default_factory=GeneralConfig)
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

# ----------------------
# Utility
# ----------------------
def _validate_run_mode(v: Any) -> RunMode:
    if isinstance(v, RunMode):
        return v
    mode = str(v).strip().lower()
    try:
        return RunMode(mode)
    except ValueError:
        return RunMode(DEFAULTS["general"]["run_mode"])

def _validate_logging_level(v: str) -> str:
    v = str(v).upper()
    return v if v in ("DEBUG", "INFO", "WARNING", "ERROR") else "INFO"

def _validate_range(v: Any, low: float, high: float, default: float, cast=float):
    try:
        f = cast(float(v))
    except (TypeError, ValueError):
        return default
    return f if (low <= f <= high) else default

def _validate_canvas_side(v: Any, default: int) -> int:
    return _validate_range(v, 1, 10000, default, cast=int)

def _validate_min_size(v: Any) -> float:
    return _validate_range(v, 1, 500, DEFAULT_MIN_SIZE)

def _validate_nudge_step(v: Any) -> float:
    return _validate_range(v, 1, 100, DEFAULT_NUDGE_STEP)

def _validate_storage_path(v: Any) -> str:
    s = str(v).strip()
    return s if s else DEFAULTS["storage"]["path"]


# ---------------------
# AppSettingManager
# ---------------------
class AppSettingsManager:
    """
    Application settings layered over the in-code DEFAULTS.

    Values read from QSettings are validated; out-of-range values fall back
    to the defaults. set_* writes to QSettings immediately.
    """
    def __init__(self, org_domain: str = ORG_DOMAIN, app_name: str = APP_NAME):
        self._settings = QSettings(org_domain, app_name)
        self._data = self._load_effective()

    # 読み取り
    @property
    def data(self) -> AppSettingsData:
        return self._data

    @property
    def run_mode(self) -> RunMode:
        return self._data.general.run_mode

    @property
    def dev_mode(self) -> bool:
        return self.run_mode is RunMode.DEVELOPMENT

    @property
    def logging_level(self) -> str:
        return self._data.general.logging_level

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self._data.canvas.width, self._data.canvas.height

    @property
    def min_size(self) -> float:
        return self._data.canvas.min_size

    @property
    def nudge_step(self) -> float:
        return self._data.canvas.nudge_step

    @property
    def storage_path(self) -> Path:
        return Path(self._data.storage.path).expanduser()

    def editor_config(self) -> EditorConfig:
        """Qt-free configuration for the scene and the interaction engine."""
        c = self._data.canvas
        return EditorConfig(
            min_size=c.min_size,
            nudge_step=c.nudge_step,
            canvas_width=c.width,
            canvas_height=c.height,
        )

    # 書き込み
    def set_run_mode(self, v: str | RunMode) -> None:
        mode = _validate_run_mode(v)
        self._settings.setValue("general/run_mode", mode.value)
        self._data.general.run_mode = mode

    def set_logging_level(self, v: str) -> None:
        level = _validate_logging_level(v)
        self._settings.setValue("general/logging_level", level)
        self._data.general.logging_level = level

    def set_canvas_size(self, width: int, height: int) -> None:
        w = _validate_canvas_side(width, DEFAULT_CANVAS_WIDTH)
        h = _validate_canvas_side(height, DEFAULT_CANVAS_HEIGHT)
        self._settings.setValue("canvas/width", w)
        self._settings.setValue("canvas/height", h)
        self._data.canvas.width, self._data.canvas.height = w, h

    def set_min_size(self, v: float) -> None:
        size = _validate_min_size(v)
        self._settings.setValue("canvas/min_size", size)
        self._data.canvas.min_size = size

    def set_nudge_step(self, v: float) -> None:
        step = _validate_nudge_step(v)
        self._settings.setValue("canvas/nudge_step", step)
        self._data.canvas.nudge_step = step

    def set_storage_path(self, v: str | Path) -> None:
        path = _validate_storage_path(v)
        self._settings.setValue("storage/path", path)
        self._data.storage.path = path

    # Reset
    def reset_all_to_default(self) -> None:
        """ユーザー設定を全削除（キー割り当ては別管理）"""
        for section in SECTIONS:
            self._settings.remove(section)
        self._data = self._load_effective()

    def reset_section(self, section: str) -> None:
        """特定のセクションのみを規定値へ"""
        if section not in SECTIONS:
            raise ValueError(f"Invalid section: {section}")
        self._settings.remove(section)
        self._data = self._load_effective()

    def to_dict(self) -> dict[str, Any]:
        data = {
            "general": asdict(self._data.general),
            "canvas": asdict(self._data.canvas),
            "storage": asdict(self._data.storage),
        }
        data["general"]["run_mode"] = self._data.general.run_mode.value
        return data

    # ---------- 内部実装 ---------------
    def _load_effective(self) -> AppSettingsData:
        """DEFAULTS をベースに QSettings の上書きを反映、検証、モデル化"""
        merged = self._apply_qsettings_overrides(DEFAULTS)
        return self._make_model_from(merged)

    def _apply_qsettings_overrides(self, base: dict[str, Any]) -> dict[str, Any]:
        """
        Read the dict based settings and apply QSettings overrides.
        :param base:
        :return: apply QSettings overrides
        """
        merged: dict[str, Any] = {}
        for section in SECTIONS:
            values = dict(base.get(section, {}))
            for key in values:
                v = self._settings.value(f"{section}/{key}", None)
                if v is not None:
                    values[key] = v
            merged[section] = values
        return merged

    def _make_model_from(self, merged: dict[str, Any]) -> AppSettingsData:
        """
        making model from merged dict and returning merged AppSettingsData
        :param merged:
        :return: merged AppSettingsData
        """
        g = merged.get("general", {})
        c = merged.get("canvas", {})
        s = merged.get("storage", {})
        return AppSettingsData(
            general=GeneralConfig(
                run_mode=_validate_run_mode(g.get("run_mode", DEFAULTS["general"]["run_mode"])),
                logging_level=_validate_logging_level(g.get("logging_level", DEFAULTS["general"]["logging_level"])),
            ),
            canvas=CanvasConfig(
                width=_validate_canvas_side(c.get("width"), DEFAULT_CANVAS_WIDTH),
                height=_validate_canvas_side(c.get("height"), DEFAULT_CANVAS_HEIGHT),
                min_size=_validate_min_size(c.get("min_size")),
                nudge_step=_validate_nudge_step(c.get("nudge_step")),
            ),
            storage=StorageConfig(
                path=_validate_storage_path(s.get("path", DEFAULTS["storage"]["path"])),
            ),
        )
