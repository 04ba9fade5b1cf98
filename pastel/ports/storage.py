"""
Persistence port and its stores.

A store checkpoints the full, ordered element list and hands it back once at
startup. Stores never touch the Scene; they receive copies.

- ``JsonFileStore``: a UTF-8 JSON file; broken files are quarantined.
- ``QSettingsStore``: the JSON text under one QSettings key, the desktop
  analogue of a browser's local storage.
- ``CheckpointWriter``: wraps another store and saves on a worker thread so
  input handling never waits on I/O.
"""
from __future__ import annotations

import json
import logging
import queue
import threading
from pathlib import Path
from typing import Protocol, Sequence

from PySide6.QtCore import QSettings

from pastel.core.element import Element
from pastel.ports.serialization import elements_from_records, elements_to_records
from pastel.utils import json_loader
from pastel.utils.log_util import log_io

logger = logging.getLogger(__name__)

STORAGE_KEY = "pastel_design_elements"


class SceneStore(Protocol):
    def save(self, elements: Sequence[Element]) -> None: ...

    def load(self) -> list[Element] | None: ...


class JsonFileStore:
    """
    Scene checkpoints in a JSON file.

    ``load()`` returns None when the file is absent or unusable; the reason
    is appended to ``warnings`` and logged.
    """

    def __init__(self, path: Path | str, *, quarantine_broken: bool = True, indent: int | None = 2):
        self.path = Path(path).expanduser()
        self.quarantine_broken = quarantine_broken
        self.indent = indent
        self.warnings: list[str] = []

    def __repr__(self) -> str:
        return f"JsonFileStore({str(self.path)!r})"

    @log_io(mask=("elements",))
    def save(self, elements: Sequence[Element]) -> None:
        json_loader.write_json(self.path, elements_to_records(elements), indent=self.indent)

    @log_io()
    def load(self) -> list[Element] | None:
        data = json_loader.read_json(
            self.path,
            quarantine_broken=self.quarantine_broken,
            warnings=self.warnings,
            logger=logger,
            missing_ok=True,
        )
        if data is None:
            return None
        if not isinstance(data, list):
            msg = f"Saved scene in {self.path} is not a list; starting empty"
            self.warnings.append(msg)
            logger.warning(msg)
            return None
        return elements_from_records(data, warnings=self.warnings)


class QSettingsStore:
    """Scene checkpoints stored as JSON text under a QSettings key."""

    def __init__(self,
                 org_domain: str = "PastelDesign.org",
                 app_name: str = "Pastel",
                 key: str = STORAGE_KEY,
                 settings: QSettings | None = None):
        self._settings = settings or QSettings(org_domain, app_name)
        self.key = key
        self.warnings: list[str] = []

    @log_io(mask=("elements",))
    def save(self, elements: Sequence[Element]) -> None:
        self._settings.setValue(self.key, json.dumps(elements_to_records(elements)))
        self._settings.sync()

    @log_io()
    def load(self) -> list[Element] | None:
        text = self._settings.value(self.key, None)
        if text is None:
            return None
        try:
            data = json.loads(str(text))
        except json.JSONDecodeError as e:
            msg = f"Failed to parse saved scene under '{self.key}': ({e})"
            self.warnings.append(msg)
            logger.warning(msg)
            return None
        if not isinstance(data, list):
            msg = f"Saved scene under '{self.key}' is not a list; starting empty"
            self.warnings.append(msg)
            logger.warning(msg)
            return None
        return elements_from_records(data, warnings=self.warnings)

    def clear(self) -> None:
        self._settings.remove(self.key)


_STOP = object()


class CheckpointWriter:
    """
    Save checkpoints on a worker thread.

    ``save()`` copies the elements and returns immediately. When several
    checkpoints are queued, only the latest is written. Failures are logged
    and counted, never raised.

    Usage:
        writer = CheckpointWriter(JsonFileStore(path))
        writer.save(scene.elements_in_z_order())
        writer.stop()  # flushes pending checkpoints
    """

    def __init__(self, store: SceneStore):
        self._store = store
        self._queue: queue.Queue = queue.Queue()
        self._stopped = False
        self.failures = 0
        self._thread = threading.Thread(target=self._run, name="pastel-checkpoint", daemon=True)
        self._thread.start()

    @property
    def store(self) -> SceneStore:
        return self._store

    def save(self, elements: Sequence[Element]) -> None:
        snapshot = [e.copy() for e in elements]
        if self._stopped:
            logger.warning("CheckpointWriter stopped; saving synchronously")
            self._write(snapshot)
            return
        self._queue.put(snapshot)

    def load(self) -> list[Element] | None:
        return self._store.load()

    def flush(self) -> None:
        """Block until every queued checkpoint has been handled."""
        self._queue.join()

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        self._queue.put(_STOP)
        self._thread.join()

    def _run(self) -> None:
        while True:
            items = [self._queue.get()]
            while True:
                try:
                    items.append(self._queue.get_nowait())
                except queue.Empty:
                    break

            pending = [i for i in items if i is not _STOP]
            try:
                if pending:
                    if len(pending) > 1:
                        logger.debug("Coalesced %d checkpoints", len(pending))
                    self._write(pending[-1])
            finally:
                for _ in items:
                    self._queue.task_done()

            if len(pending) != len(items):
                return

    def _write(self, elements: list[Element]) -> None:
        try:
            self._store.save(elements)
        except Exception:
            self.failures += 1
            logger.exception("Checkpoint save failed (%s)", self._store)
