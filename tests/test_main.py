import json

import pytest

from pastel.app.app_settings_manager import AppSettingsManager
from pastel.core.element import RectangleElement, TextElement
from pastel.main import build_parser, run
from pastel.ports.storage import JsonFileStore, QSettingsStore


@pytest.fixture
def store_path(tmp_path):
    path = tmp_path / "design.json"
    JsonFileStore(path).save([
        RectangleElement(id="r1", x=0, y=0, width=100, height=100, z_index=1),
        TextElement(id="t1", x=10, y=10, width=200, height=60, z_index=2, content="Headline text"),
    ])
    return path


@pytest.fixture
def settings(tmp_settings):
    return AppSettingsManager()


def test_layers_lists_topmost_first(settings, store_path, capsys):
    args = build_parser().parse_args(["--store", str(store_path), "layers"])
    assert run(args, settings) == 0
    lines = capsys.readouterr().out.splitlines()
    assert len(lines) == 2
    assert "Headline t" in lines[0] and "t1" in lines[0]
    assert "Rectangle" in lines[1] and "r1" in lines[1]


def test_export_json_to_file(settings, store_path, tmp_path):
    out = tmp_path / "out.json"
    args = build_parser().parse_args(["--store", str(store_path), "export", "json", str(out)])
    assert run(args, settings) == 0
    records = json.loads(out.read_text(encoding="utf-8"))
    assert [r["id"] for r in records] == ["r1", "t1"]


def test_export_html_to_stdout(settings, store_path, capsys):
    settings.set_canvas_size(1024, 768)
    args = build_parser().parse_args(["--store", str(store_path), "export", "html", "-"])
    assert run(args, settings) == 0
    out = capsys.readouterr().out
    assert out.startswith("<!DOCTYPE html>")
    assert "width:1024px; height:768px" in out
    assert "Headline text" in out


def test_broken_store_starts_empty(settings, tmp_path, capsys):
    path = tmp_path / "design.json"
    path.write_text("not json", encoding="utf-8")
    args = build_parser().parse_args(["--store", str(path), "layers"])
    assert run(args, settings) == 0
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "warning:" in captured.err


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_layers_from_qsettings(settings, capsys):
    QSettingsStore().save([RectangleElement(id="q1", x=0, y=0, width=50, height=50, z_index=1)])
    args = build_parser().parse_args(["--qsettings", "layers"])
    assert run(args, settings) == 0
    assert "q1" in capsys.readouterr().out
