import logging

import pytest

from pastel.app.editor import Editor
from pastel.app.key_bindings import KeyBindings
from pastel.controllers.events import Target
from pastel.core.editor_config import EditorConfig
from pastel.core.element import ElementKind, RectangleElement, TextElement
from pastel.core.states.interaction_session import Handle, InteractionMode, Tool
from pastel.ports.projection import RecordingProjection
from pastel.ports.storage import CheckpointWriter

from conftest import FailingStore, MemoryStore


@pytest.fixture
def projection():
    return RecordingProjection()


@pytest.fixture
def make_editor(tmp_settings, scene, projection, memory_store):
    def _make(**kwargs):
        kwargs.setdefault("scene", scene)
        kwargs.setdefault("projection", projection)
        kwargs.setdefault("store", memory_store)
        kwargs.setdefault("key_bindings", KeyBindings(settings=tmp_settings,
                                                      dev_mode=kwargs.get("dev_mode", False)))
        editor = Editor(**kwargs)
        editor.start()
        projection.clear()
        return editor
    return _make


@pytest.fixture
def editor(make_editor):
    return make_editor()


def test_start_loads_saved_scene(tmp_settings, projection):
    saved = [
        TextElement(id="b", x=0, y=0, width=100, height=30, z_index=2),
        RectangleElement(id="a", x=0, y=0, width=100, height=30, z_index=1),
    ]
    editor = Editor(projection=projection, store=MemoryStore(saved),
                    key_bindings=KeyBindings(settings=tmp_settings))
    editor.start()
    assert [e.id for e in editor.scene.elements_in_z_order()] == ["a", "b"]
    assert projection.calls == [("rebuild", ["a", "b"], None)]


def test_start_with_nothing_saved(editor):
    assert len(editor.scene) == 0


def test_start_survives_load_failure(tmp_settings, projection, caplog):
    editor = Editor(projection=projection, store=FailingStore(),
                    key_bindings=KeyBindings(settings=tmp_settings))
    with caplog.at_level(logging.ERROR):
        editor.start()
    assert len(editor.scene) == 0
    assert "Failed to load saved scene" in caplog.text


def test_create_rebuilds_and_checkpoints(editor, projection, memory_store):
    editor.set_tool(Tool.RECTANGLE)
    editor.pointer_down(200, 150)
    (rect,) = editor.scene.elements_in_z_order()
    assert projection.calls == [
        ("rebuild", [rect.id], rect.id),
        ("selection_changed", rect.id),
    ]
    assert [e.id for e in memory_store.last] == [rect.id]
    assert editor.session.tool is Tool.SELECT


def test_drag_uses_partial_updates_and_checkpoints_on_release(editor, projection, memory_store):
    rect = editor.scene.create_element(ElementKind.RECTANGLE, 100, 100)
    editor.scene.drain_effects()

    # hit test picks the element under the pointer
    editor.pointer_down(120, 120)
    editor.pointer_move(130, 125)
    editor.pointer_move(140, 130)
    assert memory_store.saved == []
    assert projection.names() == ["element_changed", "element_changed"]
    assert projection.calls[-1] == ("element_changed", rect.id, True)

    editor.pointer_up()
    assert memory_store.last[0].x == 120
    assert memory_store.last[0].y == 110


def test_pointer_down_on_empty_canvas_deselects(editor, projection):
    editor.scene.create_element(ElementKind.RECTANGLE, 0, 0)
    editor.scene.drain_effects()
    editor.pointer_down(700, 500)
    assert editor.scene.selected_id is None
    assert projection.calls == [("selection_changed", None)]


def test_resize_through_handle(editor):
    rect = editor.scene.create_element(ElementKind.RECTANGLE, 100, 100)
    editor.pointer_down(250, 200, Target.on_handle(rect.id, Handle.SE))
    editor.pointer_move(280, 220)
    editor.pointer_up()
    assert (rect.width, rect.height) == (180, 120)


def test_mode_callbacks(editor):
    rect = editor.scene.create_element(ElementKind.RECTANGLE, 0, 0)
    seen = []
    editor.add_mode_callback(lambda old, new: seen.append((old, new)))
    editor.add_mode_callback(lambda old, new: 1 / 0)

    editor.pointer_down(10, 10, Target.element(rect.id))
    editor.pointer_up()
    assert seen == [
        (InteractionMode.NONE, InteractionMode.DRAGGING),
        (InteractionMode.DRAGGING, InteractionMode.NONE),
    ]


def test_keys(editor, memory_store):
    rect = editor.scene.create_element(ElementKind.RECTANGLE, 100, 100)

    assert editor.key_pressed("ArrowUp") is True
    assert (rect.x, rect.y) == (100, 95)
    assert editor.key_pressed("ArrowRight")
    assert rect.x == 105
    assert len(memory_store.saved) == 2

    # typing into a property field never moves or deletes elements
    assert editor.key_pressed("Backspace", text_input_focused=True) is False
    assert rect.id in editor.scene

    assert editor.key_pressed("Backspace") is True
    assert len(editor.scene) == 0
    assert editor.key_pressed("F13") is False


def test_tool_keys(editor):
    editor.key_pressed("t")
    assert editor.session.tool is Tool.TEXT
    editor.key_pressed("v")
    assert editor.session.tool is Tool.SELECT


def test_custom_nudge_step(make_editor):
    editor = make_editor(config=EditorConfig(nudge_step=10), scene=None)
    rect = editor.scene.create_element(ElementKind.TEXT, 0, 0)
    editor.key_arrow("down")
    assert rect.y == 10
    editor.key_arrow("left", step=1)
    assert rect.x == -1


def test_panel_commands(editor, projection, memory_store):
    first = editor.scene.create_element(ElementKind.RECTANGLE, 0, 0)
    second = editor.scene.create_element(ElementKind.TEXT, 0, 0)
    editor.scene.drain_effects()

    editor.edit_properties(content="Title", color="#222222", rotation=-90)
    assert (second.content, second.text_color, second.rotation) == ("Title", "#222222", 270)
    assert editor.properties()["content"] == "Title"

    editor.move_layer_down()
    assert [layer.element_id for layer in editor.layers()] == [first.id, second.id]
    editor.move_layer_up()
    assert editor.layers()[0].element_id == second.id

    editor.select_layer(first.id)
    assert editor.layers()[1].active is True
    editor.delete_selected()
    assert first.id not in editor.scene
    assert [e.id for e in memory_store.last] == [second.id]


def test_save_failure_is_logged_not_raised(make_editor, caplog):
    store = FailingStore()
    editor = make_editor(store=store)
    with caplog.at_level(logging.ERROR):
        editor.set_tool(Tool.TEXT)
        editor.pointer_down(0, 0)
    assert len(editor.scene) == 1
    assert store.save_calls == 1
    assert editor.checkpoint() is False
    assert "Checkpoint failed" in caplog.text


class BrokenProjection(RecordingProjection):
    def rebuild(self, elements, selected_id):
        raise RuntimeError("render failed")


def test_projection_failure_is_logged_in_production(make_editor, caplog):
    projection = BrokenProjection()
    editor = make_editor(projection=projection)
    with caplog.at_level(logging.ERROR):
        editor.set_tool(Tool.RECTANGLE)
        editor.pointer_down(100, 100)
    # the remaining effects are still delivered
    assert projection.names() == ["selection_changed"]
    assert "Projection failed" in caplog.text


def test_projection_failure_raises_in_dev_mode(make_editor):
    with pytest.raises(RuntimeError):
        make_editor(projection=BrokenProjection(), dev_mode=True)


def test_export(editor):
    editor.set_tool(Tool.TEXT)
    editor.pointer_down(10, 10)
    assert '"type": "text"' in editor.export_json()
    assert "Hello World" in editor.export_html()


def test_edit_properties_ignores_out_of_range_number(editor, memory_store):
    rect = editor.scene.create_element(ElementKind.RECTANGLE, 0, 0)
    editor.edit_properties(x=10**400, y=25)
    assert (rect.x, rect.y) == (0, 25)
    assert memory_store.last[0].y == 25


def test_background_saves_use_worker_thread(make_editor, memory_store):
    editor = make_editor(background_saves=True)
    assert isinstance(editor.store, CheckpointWriter)
    assert editor.store.store is memory_store

    editor.set_tool(Tool.RECTANGLE)
    editor.pointer_down(200, 150)
    editor.key_arrow("right")
    editor.stop()

    (rect,) = editor.scene.elements_in_z_order()
    assert memory_store.last[0].id == rect.id
    assert memory_store.last[0].x == rect.x
