import argparse
import logging
import sys
from pathlib import Path

from pastel.app.app_settings_manager import AppSettingsManager
from pastel.app.editor import Editor
from pastel.app.logging_setup import LogSystem, apply_logging_policy, setup_startup_logging
from pastel.ports.storage import JsonFileStore, QSettingsStore

logger = logging.getLogger(__name__)

APP_NAME = "pastel"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, description="Pastel design editor tools")
    parser.add_argument("--store", type=Path, default=None,
                        help="saved scene (default: storage/path setting)")
    parser.add_argument("--qsettings", action="store_true",
                        help="read the scene saved in the QSettings scope instead of a file")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("layers", help="list layers, topmost first")

    p_export = sub.add_parser("export", help="export the saved scene")
    p_export.add_argument("format", choices=("json", "html"))
    p_export.add_argument("output", help="output file, or '-' for stdout")
    return parser


def run(args: argparse.Namespace, settings: AppSettingsManager) -> int:
    """
    Run one CLI command against the saved scene.
    :param args: parsed arguments
    :param settings: application settings
    :return: exit code
    """
    if args.qsettings:
        store = QSettingsStore()
    else:
        store = JsonFileStore(args.store or settings.storage_path)
    editor = Editor(store=store, config=settings.editor_config(), dev_mode=settings.dev_mode)
    editor.start()
    for w in store.warnings:
        print(f"warning: {w}", file=sys.stderr)

    if args.command == "layers":
        entries = editor.layers()
        for i, entry in enumerate(entries):
            print(f"{len(entries) - i:>3} {entry.icon} {entry.name:<10} {entry.element_id}")
        return 0

    text = editor.export_json() if args.format == "json" else editor.export_html()
    if args.output == "-":
        sys.stdout.write(text)
    else:
        out = Path(args.output)
        out.write_text(text, encoding="utf-8")
        logger.info("Exported %s to %s", args.format, out)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    settings_mgr = AppSettingsManager()
    logs = LogSystem(APP_NAME, root_level=settings_mgr.logging_level)
    apply_logging_policy(logs, settings_mgr)
    setup_startup_logging(APP_NAME)
    try:
        rc = run(args, settings_mgr)
        logger.info("App exit (rc=%s)", rc)
        return rc
    finally:
        logs.stop()


if __name__ == "__main__":
    sys.exit(main())
