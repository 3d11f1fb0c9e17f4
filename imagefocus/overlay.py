"""Overlay lifecycle - the singleton overlay element, engagement and the
chrome auto-hide timer.

Listener attachment follows acquire-on-enter / release-on-exit: ``enter()``
registers the input router's window/document listeners through a
``ListenerHandle`` and ``exit()`` disposes it.
"""

from __future__ import annotations
from typing import Callable, List, Optional, Tuple

from .context import FocusContext
from .dom import Element, EventTarget, Listener
from .errors import OverlayMissingError
from .config import (
    OVERLAY_ID,
    HELP_OVERLAY_CLASS, IMAGE_NUMBER_CLASS, SLIDESHOW_BUTTONS_CLASS,
    SLIDESHOW_BUTTON_CLASS, CAPTION_CLASS,
    CLASS_ENGAGED, CLASS_SLIDESHOW, CLASS_HIDDEN,
    HELP_TEXT_SLIDESHOW, HELP_TEXT,
    HIDE_UI_TIMER_MS,
    EVENT_OVERLAY_APPEARED, EVENT_OVERLAY_DISAPPEARED,
)
from .logging import log

Registration = Tuple[EventTarget, str, Listener]


class ListenerHandle:
    """Disposable set of event listener registrations.

    Listeners are attached on construction and removed by ``dispose()``
    (idempotent), or on leaving a ``with`` block.
    """

    def __init__(self, registrations: List[Registration]):
        self._registrations = list(registrations)
        self._disposed = False
        for target, type, listener in self._registrations:
            target.add_event_listener(type, listener)

    @property
    def disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        for target, type, listener in self._registrations:
            target.remove_event_listener(type, listener)

    def __enter__(self) -> ListenerHandle:
        return self

    def __exit__(self, *exc) -> None:
        self.dispose()


def build_overlay_element(document) -> Element:
    """Create the overlay element and append it to the document body."""
    overlay = Element("div", attrs={"id": OVERLAY_ID})

    help_panel = Element("div", [HELP_OVERLAY_CLASS])
    help_panel.append(Element("p", ["slideshow-help-text"], text=HELP_TEXT_SLIDESHOW))
    for line in HELP_TEXT:
        help_panel.append(Element("p", text=line))

    buttons = Element("div", [SLIDESHOW_BUTTONS_CLASS])
    buttons.append(
        Element("button", [SLIDESHOW_BUTTON_CLASS, "previous"],
                {"type": "button", "tabindex": "-1", "title": "Previous image"}),
        Element("button", [SLIDESHOW_BUTTON_CLASS, "next"],
                {"type": "button", "tabindex": "-1", "title": "Next image"}),
    )

    overlay.append(
        help_panel,
        Element("div", [IMAGE_NUMBER_CLASS]),
        buttons,
        Element("div", [CAPTION_CLASS]),
    )
    document.body.append(overlay)
    return overlay


class OverlayLifecycle:
    """Engages and disengages the overlay; owns the chrome auto-hide timer."""

    def __init__(self, ctx: FocusContext, listeners: Callable[[], List[Registration]]):
        self.ctx = ctx
        self._listeners = listeners

    # ─── Overlay parts ───────────────────────────────────────────────────

    @property
    def overlay(self) -> Element:
        if self.ctx.state.overlay is None:
            raise OverlayMissingError("Overlay used before setup()")
        return self.ctx.state.overlay

    def part(self, selector: str) -> Element:
        el = self.overlay.query_selector(selector)
        if el is None:
            raise OverlayMissingError(f"Overlay has no {selector!r} element")
        return el

    @property
    def previous_button(self) -> Element:
        return self.part(f".{SLIDESHOW_BUTTON_CLASS}.previous")

    @property
    def next_button(self) -> Element:
        return self.part(f".{SLIDESHOW_BUTTON_CLASS}.next")

    @property
    def caption(self) -> Element:
        return self.part(f".{CAPTION_CLASS}")

    def chrome_parts(self) -> List[Element]:
        """Elements hidden together when the chrome auto-hides."""
        return (self.overlay.query_selector_all(f".{SLIDESHOW_BUTTON_CLASS}")
                + [self.part(f".{HELP_OVERLAY_CLASS}"),
                   self.part(f".{IMAGE_NUMBER_CLASS}"),
                   self.caption])

    # ─── Engagement ──────────────────────────────────────────────────────

    def enter(self) -> None:
        st = self.ctx.state
        if st.engaged:
            return
        log("[OVERLAY] Enter")

        st.engaged = True
        st.listeners = ListenerHandle(self._listeners())

        # Keys and wheel must not scroll the page underneath
        self.ctx.scheduler.call_soon(lambda: self.ctx.env.set_page_scrolling(False))

        if not self.ctx.env.is_mobile():
            self._arm_hide_ui_timer()

        self.project()
        self.ctx.bus.fire(EVENT_OVERLAY_APPEARED)

    def exit(self) -> None:
        st = self.ctx.state
        if not st.engaged:
            return
        log("[OVERLAY] Exit")

        if st.listeners is not None:
            st.listeners.dispose()
            st.listeners = None
        st.pan.end_pan()

        self.ctx.scheduler.call_soon(lambda: self.ctx.env.set_page_scrolling(True))
        self.cancel_hide_ui_timer()

        st.engaged = False
        self.project()
        self.ctx.bus.fire(EVENT_OVERLAY_DISAPPEARED)

    # ─── Chrome auto-hide ────────────────────────────────────────────────

    def hide_ui(self) -> None:
        log("[OVERLAY] Hide UI", level=3)
        self.ctx.state.chrome.hide()
        self.project()

    def unhide_ui(self) -> None:
        log("[OVERLAY] Unhide UI", level=3)
        self.ctx.state.chrome.unhide()
        self.project()
        if not self.ctx.env.is_mobile():
            self._arm_hide_ui_timer()

    def cancel_hide_ui_timer(self) -> None:
        st = self.ctx.state
        if st.hide_ui_timer is not None:
            self.ctx.scheduler.cancel(st.hide_ui_timer)
            st.hide_ui_timer = None

    def _arm_hide_ui_timer(self, delay_ms: float = HIDE_UI_TIMER_MS) -> None:
        self.cancel_hide_ui_timer()
        self.ctx.state.hide_ui_timer = self.ctx.scheduler.call_later(
            delay_ms / 1000.0, self._hide_ui_timer_expired)

    def _hide_ui_timer_expired(self) -> None:
        st = self.ctx.state
        st.hide_ui_timer = None
        since_move_ms = (self.ctx.scheduler.now() - st.mouse_last_moved_at) * 1000.0
        log(f"[OVERLAY] Hide timer expired, {since_move_ms:.0f}ms since last move", level=3)
        if since_move_ms < HIDE_UI_TIMER_MS:
            self._arm_hide_ui_timer(HIDE_UI_TIMER_MS - since_move_ms)
        else:
            self.hide_ui()
            self.cancel_hide_ui_timer()

    def note_mouse_moved(self, target: Optional[EventTarget]) -> None:
        """Pointer moved while engaged.

        Over the overlay backdrop or the clone the chrome is shown and the
        idle clock restarts; over anything else (controls, help, caption)
        the timer is cancelled so the chrome stays up.
        """
        st = self.ctx.state
        if target is not st.clone and target is not st.overlay:
            self.cancel_hide_ui_timer()
            return
        if st.hide_ui_timer is None:
            self.unhide_ui()
        st.mouse_last_moved_at = self.ctx.scheduler.now()

    # ─── Projection ──────────────────────────────────────────────────────

    def project(self) -> None:
        """Push overlay state into the overlay element's classes/attributes."""
        st = self.ctx.state
        chrome = st.chrome
        overlay = self.overlay

        overlay.toggle_class(CLASS_ENGAGED, st.engaged)
        overlay.toggle_class(CLASS_SLIDESHOW, chrome.slideshow)
        for el in self.chrome_parts():
            el.toggle_class(CLASS_HIDDEN, chrome.hidden)

        self.previous_button.disabled = chrome.previous_disabled
        self.next_button.disabled = chrome.next_disabled

        number = self.part(f".{IMAGE_NUMBER_CLASS}")
        number.text = "" if chrome.image_number is None else str(chrome.image_number)
        number.set_attribute("data-number-of-images", chrome.number_of_images)
