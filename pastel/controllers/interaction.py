"""
Interaction state machine - turns input events into scene mutations.

``apply(event, scene, session, config)`` runs one event to completion and
returns the next session plus the effects the host must deliver to the
projection and persistence ports. The scene is mutated in place and only
through its own operations, so invariants hold after every intermediate
frame of a gesture.

States: idle, dragging, resizing(handle), rotating.
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from pastel.controllers.events import (
    DeleteSelected, Direction, EditProperties, KeyArrow, KeyDelete, MoveLayer, PointerDown,
    PointerMove, PointerUp, SelectLayer, SetTool, TargetKind,
)
from pastel.core import geometry_utils
from pastel.core.editor_config import DEFAULT_RECT_HEIGHT, DEFAULT_RECT_WIDTH, EditorConfig
from pastel.core.effects import Checkpoint, Effect
from pastel.core.element import ElementKind, GeometryUpdate, RectangleUpdate, TextUpdate
from pastel.core.scene import Scene
from pastel.core.states.interaction_session import (
    Handle, InteractionMode, InteractionSession, Tool,
)

logger = logging.getLogger(__name__)

# (width sign, height sign) applied to the local-frame delta
_RESIZE_SIGNS: dict[Handle, tuple[int, int]] = {
    Handle.NW: (-1, -1),
    Handle.NE: (1, -1),
    Handle.SW: (-1, 1),
    Handle.SE: (1, 1),
}

Transition = Callable[[Any, Scene, InteractionSession, EditorConfig], tuple[InteractionSession, bool]]


def apply(event: Any,
          scene: Scene,
          session: InteractionSession,
          config: EditorConfig | None = None) -> tuple[InteractionSession, list[Effect]]:
    """
    Apply one input event.

    :param event: One of the events in ``pastel.controllers.events``
    :param scene: Scene to mutate
    :param session: Current interaction session
    :param config: Editor configuration (defaults to the scene's)
    :return: (next session, effects to deliver in order)
    """
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported event: {event!r}")

    config = config or scene.config
    next_session, checkpoint = handler(event, scene, session, config)

    if next_session.mode is not session.mode:
        logger.debug("Interaction mode changed from %s -> %s",
                     session.mode.name, next_session.mode.name)

    effects = scene.drain_effects()
    if checkpoint:
        effects.append(Checkpoint())
    return next_session, effects


# ----------------------
# Pointer
# ----------------------
def _on_pointer_down(event: PointerDown, scene: Scene, session: InteractionSession,
                     config: EditorConfig) -> tuple[InteractionSession, bool]:
    origin = (float(event.x), float(event.y))
    target = event.target

    if target.kind is TargetKind.HANDLE:
        element = scene.get(target.element_id) if target.element_id else None
        if element is None or element.id != scene.selected_id or target.handle is None:
            logger.debug("Handle press ignored: %s", target)
            return session.cleared(), False
        mode = InteractionMode.RESIZING if target.handle.is_resize else InteractionMode.ROTATING
        return session.begin(mode, origin, element, target.handle), False

    kind = session.tool.creates
    if kind is not None:
        x, y = config.to_artboard(*origin)
        if kind is ElementKind.RECTANGLE:
            # center the default box on the pointer
            x -= DEFAULT_RECT_WIDTH / 2
            y -= DEFAULT_RECT_HEIGHT / 2
        scene.create_element(kind, x, y)
        return InteractionSession(tool=Tool.SELECT), True

    if target.kind is TargetKind.ELEMENT and target.element_id in scene:
        scene.select_element(target.element_id)
        return session.begin(InteractionMode.DRAGGING, origin, scene.get(target.element_id)), False

    scene.select_element(None)
    return session.begin(InteractionMode.NONE, origin, None), False


def _on_pointer_move(event: PointerMove, scene: Scene, session: InteractionSession,
                     config: EditorConfig) -> tuple[InteractionSession, bool]:
    snapshot = session.snapshot
    if session.is_idle or snapshot is None or session.pointer_origin is None:
        return session, False

    ox, oy = session.pointer_origin
    dx, dy = event.x - ox, event.y - oy

    if session.mode is InteractionMode.DRAGGING:
        update = GeometryUpdate(x=snapshot.x + dx, y=snapshot.y + dy)

    elif session.mode is InteractionMode.RESIZING:
        # Size changes in the local frame; x/y are not re-anchored, so a
        # rotated element drifts while it is resized.
        local_dx, local_dy = geometry_utils.rotate_vector(dx, dy, -snapshot.rotation)
        sign_w, sign_h = _RESIZE_SIGNS[session.handle]
        update = GeometryUpdate(width=snapshot.width + sign_w * local_dx,
                                height=snapshot.height + sign_h * local_dy)

    else:
        cx, cy = config.to_screen(*geometry_utils.element_center(snapshot))
        update = GeometryUpdate(rotation=geometry_utils.angle_of_point(cx, cy, event.x, event.y))

    scene.update_element(snapshot.id, update)
    return session, False


def _on_pointer_up(event: PointerUp, scene: Scene, session: InteractionSession,
                   config: EditorConfig) -> tuple[InteractionSession, bool]:
    return session.cleared(), not session.is_idle


# ----------------------
# Keyboard and commands
# ----------------------
def _on_delete(event: KeyDelete | DeleteSelected, scene: Scene, session: InteractionSession,
               config: EditorConfig) -> tuple[InteractionSession, bool]:
    selected_id = scene.selected_id
    if selected_id is None:
        return session, False
    return session, scene.delete_element(selected_id)


def _on_key_arrow(event: KeyArrow, scene: Scene, session: InteractionSession,
                  config: EditorConfig) -> tuple[InteractionSession, bool]:
    element = scene.selected
    if element is None:
        return session, False
    step = config.nudge_step if event.step is None else event.step
    ux, uy = Direction(event.direction).unit
    update = GeometryUpdate(x=element.x + ux * step, y=element.y + uy * step)
    return session, scene.update_element(element.id, update)


def _on_set_tool(event: SetTool, scene: Scene, session: InteractionSession,
                 config: EditorConfig) -> tuple[InteractionSession, bool]:
    tool = Tool(event.tool)
    logger.debug("Tool: %s", tool)
    return session.with_tool(tool), False


def _on_edit_properties(event: EditProperties, scene: Scene, session: InteractionSession,
                        config: EditorConfig) -> tuple[InteractionSession, bool]:
    element = scene.selected
    if element is None:
        return session, False

    geometry = event.geometry().changes()
    if element.kind is ElementKind.TEXT:
        update = TextUpdate(**geometry, text_color=event.color,
                            content=event.content, font_size=event.font_size)
    else:
        if event.content is not None or event.font_size is not None:
            logger.debug("Text fields ignored for rectangle %s", element.id)
        update = RectangleUpdate(**geometry, fill_color=event.color)

    if not update.changes():
        return session, False
    return session, scene.update_element(element.id, update)


def _on_move_layer(event: MoveLayer, scene: Scene, session: InteractionSession,
                   config: EditorConfig) -> tuple[InteractionSession, bool]:
    selected_id = scene.selected_id
    if selected_id is None:
        return session, False
    return session, scene.reorder(selected_id, event.direction)


def _on_select_layer(event: SelectLayer, scene: Scene, session: InteractionSession,
                     config: EditorConfig) -> tuple[InteractionSession, bool]:
    scene.select_element(event.element_id)
    return session, False


_HANDLERS: dict[type, Transition] = {
    PointerDown: _on_pointer_down,
    PointerMove: _on_pointer_move,
    PointerUp: _on_pointer_up,
    KeyDelete: _on_delete,
    DeleteSelected: _on_delete,
    KeyArrow: _on_key_arrow,
    SetTool: _on_set_tool,
    EditProperties: _on_edit_properties,
    MoveLayer: _on_move_layer,
    SelectLayer: _on_select_layer,
}
