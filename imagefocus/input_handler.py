"""Input router - document/window listeners active while the overlay is
engaged, plus the handlers bound to page images and overlay controls.

Keyboard input is mapped to commands; wheel and pointer input drive the
geometry engine directly.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, List

if TYPE_CHECKING:
    from .controller import ImageFocus

from .commands import Command, CloseOverlay, command_for_key
from .dom import Element, Event, ImageElement
from .overlay import Registration
from .view_math import apply_pan, apply_wheel_zoom, is_pannable
from .config import (
    KEYS_HANDLED,
    MOUSE_BUTTON_PRIMARY,
    NO_FILTER,
    SLIDESHOW_BUTTON_CLASS,
    HELP_OVERLAY_CLASS,
)
from .logging import log

_CONTROLS_SELECTOR = f".{SLIDESHOW_BUTTON_CLASS}, .{HELP_OVERLAY_CLASS}"


class InputRouter:
    """Dispatches overlay input to the focus state machine and geometry."""

    def __init__(self, app: "ImageFocus"):
        self.app = app

    @property
    def ctx(self):
        return self.app.ctx

    def listeners(self) -> List[Registration]:
        """Registrations held for the duration of an overlay session."""
        document = self.ctx.document
        window = document.window
        return [
            (window, "wheel", self.on_wheel),
            (window, "mousedown", self.on_mouse_down),
            (window, "mousemove", self.on_mouse_move),
            (window, "mouseup", self.on_mouse_up),
            (document, "keyup", self.on_key_up),
        ]

    def execute(self, cmd: Command) -> bool:
        if not cmd.can_execute(self.app):
            log(f"[INPUT] {type(cmd).__name__} not applicable", level=3)
            return False
        return cmd.execute(self.app)

    def _in_controls(self, target) -> bool:
        return isinstance(target, Element) and target.closest(_CONTROLS_SELECTOR) is not None

    def _is_root(self, target) -> bool:
        document = self.ctx.document
        return target is document or target is document.window

    # ─── Keyboard ────────────────────────────────────────────────────────

    def on_key_up(self, event: Event) -> None:
        if event.key not in KEYS_HANDLED or not self.ctx.state.engaged:
            return
        event.prevent_default()
        log(f"[INPUT] keyup {event.key!r}", level=3)
        cmd = command_for_key(event.key)
        if cmd is not None:
            self.execute(cmd)

    # ─── Wheel zoom ──────────────────────────────────────────────────────

    def on_wheel(self, event: Event) -> None:
        event.prevent_default()
        st = self.ctx.state
        if st.clone is None or st.transform is None:
            return
        clone = st.clone
        transform = apply_wheel_zoom(
            st.transform,
            clone.natural_width, clone.natural_height,
            self.ctx.viewport,
            event.delta_y,
            (event.client_x, event.client_y),
        )
        self.app.focus.apply_transform(transform)

    # ─── Pointer ─────────────────────────────────────────────────────────

    def on_mouse_down(self, event: Event) -> None:
        if event.button != MOUSE_BUTTON_PRIMARY:
            return
        event.prevent_default()

        st = self.ctx.state
        t = st.transform
        if st.clone is None or t is None or event.target is not st.clone:
            return
        if not is_pannable(t.width, t.height, self.ctx.viewport):
            return

        log(f"[INPUT] Pan start at ({event.client_x:.0f},{event.client_y:.0f})", level=2)
        st.pan.start_pan(event.client_x, event.client_y, t.left, t.top, t.filter)
        self.app.focus.apply_transform(t.with_filter(NO_FILTER))

    def on_mouse_move(self, event: Event) -> None:
        st = self.ctx.state
        self.app.lifecycle.note_mouse_moved(event.target)

        if st.pan.active and st.transform is not None:
            left, top = apply_pan(st.pan.start_offset, st.pan.start_cursor,
                                  (event.client_x, event.client_y))
            self.app.focus.apply_transform(st.transform.moved_to(left, top))

    def on_mouse_up(self, event: Event) -> None:
        st = self.ctx.state
        if st.pan.end_pan() and st.transform is not None:
            self.app.focus.apply_transform(st.transform.with_filter(st.pan.saved_filter))

        if event.button != MOUSE_BUTTON_PRIMARY:
            return
        # Releases over the slideshow buttons or help panel are theirs
        if self._in_controls(event.target):
            return

        clone = st.clone
        t = st.transform
        if clone is None or t is None:
            return

        on_root = self._is_root(event.target)
        if (event.target is clone or on_root) and is_pannable(t.width, t.height, self.ctx.viewport):
            # End of a pan over an oversized image
            return
        if not on_root:
            self.execute(CloseOverlay())

    def on_double_click(self, event: Event) -> None:
        if self._in_controls(event.target):
            return
        self.execute(CloseOverlay())

    # ─── Page & controls ─────────────────────────────────────────────────

    def on_image_clicked(self, event: Event) -> None:
        image = event.current_target
        if isinstance(image, ImageElement):
            log(f"[INPUT] Image clicked: {image.src or image!r}", level=2)
            self.app.focus.focus(image)

    def on_slideshow_button(self, event: Event) -> None:
        button = event.current_target
        if not isinstance(button, Element):
            return
        forward = button.has_class("next")
        log(f"[INPUT] Slideshow button: {'next' if forward else 'previous'}", level=2)
        self.app.gallery.focus_adjacent(forward)
        self.app.lifecycle.cancel_hide_ui_timer()
