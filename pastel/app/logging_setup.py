from __future__ import annotations

import logging
import logging.config
import os
import queue
import sys
import traceback
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

import faulthandler

from pastel.app.app_settings_manager import AppSettingsManager, RunMode
from pastel.utils.log_util import level_from_name


def default_log_dir(app_name: str) -> Path:
    base = Path.home() / f".{app_name.lower()}" / "logs"
    base.mkdir(parents=True, exist_ok=True)
    return base


def build_config(app_name: str,
                 root_level: int | str | None = None,
                 console_level: int | str | None = None,
                 log_dir: Path | None = None) -> dict:
    """Build a logging config dict."""
    root_level = level_from_name(root_level or os.getenv("PASTEL_LOG_LEVEL", "INFO"))
    console_level = level_from_name(console_level, default=logging.INFO)
    log_dir = log_dir or default_log_dir(app_name)
    log_file = str(log_dir / f"{app_name}.log")

    fmt = "%(asctime)s.%(msecs)03dZ %(levelname)s %(process)d %(threadName)s %(name)s %(message)s"
    datefmt = "%Y-%m-%dT%H:%M:%S"
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": fmt, "datefmt": datefmt,
            },
        },
        "handlers": {
            # キューを使う
            "queue": {"class": "logging.handlers.QueueHandler", "queue": queue.Queue(-1)},
            "console": {"class": "logging.StreamHandler", "formatter": "standard",
                        "level": logging.getLevelName(console_level)},
        },
        "root": {"level": logging.getLevelName(root_level), "handlers": ["queue", "console"]},
        # キュー先でファイルに書き込む
        "_file_settings": {
            "filename": log_file,
            "maxBytes": 1024 * 1024 * 5,
            "backupCount": int(os.getenv("PASTEL_LOG_BACKUP_COUNT", 5)),
            "encoding": "utf-8",
            "format": fmt,
            "datefmt": datefmt
        },
    }


class LogSystem:
    """QueueListener を持つ薄いラッパ"""
    def __init__(self, app_name: str,
                 root_level: int | str | None = None,
                 console_level: int | str | None = None,
                 log_dir: Path | None = None):
        # dictConfig は _file_settings を知らないので取り除いて渡す
        cfg = build_config(app_name, root_level, console_level, log_dir)
        file_settings = cfg.pop("_file_settings")
        logging.config.dictConfig(cfg)

        # dictConfigでは QueueHandler の queue取得が面倒なので探す
        qh: QueueHandler | None = None
        self._console_handler: logging.Handler | None = None
        for h in logging.getLogger().handlers:
            if qh is None and isinstance(h, QueueHandler):
                qh = h
            elif self._console_handler is None and isinstance(h, logging.StreamHandler):
                self._console_handler = h
        if qh is None:
            raise RuntimeError("QueueHandler not found.")

        # ファイル側ハンドラを準備する
        self._file_handler = RotatingFileHandler(
            file_settings["filename"],
            maxBytes=file_settings["maxBytes"],
            backupCount=file_settings["backupCount"],
            encoding=file_settings["encoding"],
        )
        self._file_handler.setFormatter(logging.Formatter(file_settings["format"], file_settings["datefmt"]))
        self.log_file = Path(file_settings["filename"])

        self.listener = QueueListener(qh.queue, self._file_handler, respect_handler_level=True)
        self.listener.start()

    @classmethod
    def from_levels(cls, app_name: str, root_level: int | str, console_level: int | str,
                    log_dir: Path | None = None) -> "LogSystem":
        return cls(app_name, root_level=root_level, console_level=console_level, log_dir=log_dir)

    def apply_levels(self, root_level: int, console_level: int | None = None, file_level: int | None = None) -> None:
        """起動後にログレベルを更新する"""
        logging.getLogger().setLevel(root_level)
        if self._console_handler is not None and console_level is not None:
            self._console_handler.setLevel(console_level)
        if file_level is not None:
            self._file_handler.setLevel(file_level)

    def stop(self):
        self.listener.stop()
        self._file_handler.close()


def apply_logging_policy(logs: LogSystem, settings: AppSettingsManager) -> None:
    """環境に応じて、ログの出力レベルを切り替える"""
    mode = settings.run_mode

    if mode == RunMode.DEVELOPMENT or mode == RunMode.VERBOSE:
        root = logging.DEBUG
        console = logging.DEBUG
        file = logging.DEBUG
    else:
        root = level_from_name(settings.logging_level)
        console = max(root, logging.WARNING)
        file = root

    logs.apply_levels(root_level=root, console_level=console, file_level=file)


def setup_startup_logging(app_name: str, log_dir: Path | None = None) -> Path:
    """
    Crash and uncaught exception logging.
    Call after LogSystem so the excepthook output reaches the file.
    - faulthandler (crash logging)
    - uncaught exception logging
    :return: crash log path
    """
    log_dir = log_dir or default_log_dir(app_name)
    crash_file = log_dir / f"{app_name}.crash.log"

    root = logging.getLogger()
    try:
        f = open(crash_file, "w", encoding="utf-8")
        faulthandler.enable(file=f)
        # Prevent GC keeping reference to the file object.
        root._pastel_crash_fh = f
    except OSError:
        logging.getLogger(__name__).exception("Failed to enable faulthandler: %s", crash_file)

    # logging uncaught exception
    def _excepthook(exc_type, exc, tb):
        logging.critical(
            "Uncaught exception: \n%s",
            "".join(traceback.format_exception(exc_type, exc, tb)),
        )

    sys.excepthook = _excepthook

    logging.info("=================================================")
    logging.info("%s starting...", app_name)
    logging.info("sys.executable=%s", sys.executable)
    logging.info("cwd=%s", os.getcwd())
    logging.info("crash_file=%s", crash_file)
    logging.info("=================================================")
    return crash_file
