from __future__ import annotations

from datetime import datetime
import json
import os
from pathlib import Path
from typing import Any, Optional


class JsonLoadError(RuntimeError):
    """Raised when strict JSON loading fails (dev/CI)."""


def _fail(
        msg: str,
        *,
        strict: bool,
        warnings: list[str],
        logger: Any = None,
        exc: Exception | None = None,
        level: str = "warning",
) -> None:
    """Centralized failure handler: records a human-readable warning message, logs it
    at the requested level (optional with exception context), and raises
    JsonLoadError when strict=True. Returns None in non-strict mode to indicate fallback.
    """
    if strict:
        raise JsonLoadError(msg) from exc
    warnings.append(msg)
    if logger is not None:
        if exc is not None and level == "exception":
            logger.exception(msg)
        else:
            log = getattr(logger, level, logger.warning)
            log(msg)
    return None


def _read_text(path: Path) -> str:
    """Read the entire file as UTF-8 text. Any I/O errors are propagated to the caller."""
    return path.read_text(encoding="utf-8")


def _quarantine(path: Path, *, logger: Any = None) -> str:
    """Rename a broken JSON file to a timestamped .broken-YYYYmmdd-HHMMSS suffix
    for diagnostics and return the new path as a string.
    """
    ts = datetime.now().strftime("%Y%m%d-%H%M%S")
    broken = path.with_suffix(f".broken-{ts}")
    path.rename(broken)
    if logger is not None:
        logger.warning(f"Broken JSON quarantined to {broken}")
    return str(broken)


def read_json(
        path: Path,
        *,
        strict: bool = False,
        quarantine_broken: bool = False,
        warnings: list[str],
        logger: Any = None,
        missing_ok: bool = False,
) -> Optional[Any]:
    """
    Read a JSON file and return the decoded value.

    Behavior:
    - strict=True: missing/broken -> raise JsonLoadError
    - strict=False: return None and record warnings (and log if logger given)
    - missing_ok=True: a missing file returns None silently (first start)
    - quarantine_broken=True: rename broken file to .broken-YYYYmmdd-HHMMSS
    """
    try:
        text = _read_text(path)
    except FileNotFoundError as e:
        if missing_ok and not strict:
            return None
        return _fail(f"JSON file missing: {path}",
                     strict=strict, warnings=warnings, logger=logger, exc=e)
    except Exception as e:
        return _fail(f"Failed to read JSON from {path}: ({e})",
                     strict=strict, warnings=warnings, logger=logger, exc=e,
                     level="exception")

    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        msg = f"Failed to parse JSON from {path}: ({e})"
        if quarantine_broken:
            try:
                quarantined = _quarantine(path, logger=logger)
                msg += f" -> quarantined to {quarantined}"
            except Exception as qe:
                return _fail(msg, strict=strict, warnings=warnings, logger=logger, exc=qe,
                             level="exception")
        return _fail(msg, strict=strict, warnings=warnings, logger=logger, exc=e)


def read_json_dict(
        path: Path,
        *,
        strict: bool = False,
        warnings: list[str],
        logger: Any = None,
) -> Optional[dict[str, Any]]:
    """Read a JSON file whose top-level value must be an object."""
    data = read_json(path, strict=strict, warnings=warnings, logger=logger)
    if data is None:
        return None
    if not isinstance(data, dict):
        return _fail(f"JSON must be an object at top-level: {path}",
                     strict=strict, warnings=warnings, logger=logger, level="error")
    return data


def write_json(path: Path, data: Any, *, indent: int | None = None) -> None:
    """
    Write JSON through a temporary file and replace the target.

    A crash mid-write leaves the previous file intact.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=indent, ensure_ascii=False), encoding="utf-8")
    os.replace(tmp, path)
