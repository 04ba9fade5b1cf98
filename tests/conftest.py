import itertools
from pathlib import Path

import pytest
from PySide6.QtCore import QSettings

from pastel.app.app_settings_manager import APP_NAME, ORG_DOMAIN
from pastel.core.editor_config import EditorConfig
from pastel.core.scene import Scene


@pytest.fixture
def tmp_settings(tmp_path: Path):
    """QSettings を INI + 一時フォルダに切り替え、テスト間の汚染を防ぐ。"""
    QSettings.setDefaultFormat(QSettings.IniFormat)
    QSettings.setPath(QSettings.IniFormat, QSettings.UserScope, str(tmp_path / "qsettings"))
    s = QSettings(ORG_DOMAIN, APP_NAME)
    s.clear()
    yield s
    s.clear()


@pytest.fixture
def config() -> EditorConfig:
    return EditorConfig()


@pytest.fixture
def scene(config) -> Scene:
    """Scene with predictable ids: el_1, el_2, ..."""
    counter = itertools.count(1)
    return Scene(config, id_factory=lambda: f"el_{next(counter)}")


class MemoryStore:
    """SceneStore keeping checkpoints in memory."""

    def __init__(self, initial=None):
        self.initial = initial
        self.saved = []

    def save(self, elements):
        self.saved.append([e.copy() for e in elements])

    def load(self):
        return self.initial

    @property
    def last(self):
        return self.saved[-1] if self.saved else None


class FailingStore:
    def __init__(self):
        self.save_calls = 0

    def save(self, elements):
        self.save_calls += 1
        raise OSError("disk full")

    def load(self):
        raise OSError("unreadable")


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()
