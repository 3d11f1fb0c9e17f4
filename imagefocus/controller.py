"""ImageFocus - wires the overlay components to a document.

Usage:
    focus = ImageFocus(document, bus=bus, env=env, scheduler=scheduler)
    focus.setup()
    bus.fire(EVENT_CONTENT_INJECTED, {"container": document.body, "document": document})
    focus.focus_image_specified_by_url()
"""

from __future__ import annotations
from typing import Any, Dict, List, Optional

from .content import ContentClassifier, process_images_within
from .context import FocusContext
from .deeplink import is_slide_fragment, parse_slide_fragment
from .dom import Document, Element, Event, ImageElement
from .environment import Environment
from .events import NotificationCenter
from .focus import FocusStateMachine
from .gallery import GalleryNavigator
from .input_handler import InputRouter
from .overlay import OverlayLifecycle, build_overlay_element
from .scheduler import Scheduler
from .state import OverlayState
from .config import (
    SLIDESHOW_BUTTON_CLASS,
    SLIDESHOW_ACCESS_KEY,
    EVENT_CONTENT_INJECTED,
    EVENT_HASH_CHANGED,
    EVENT_IMAGES_PROCESSED,
    EVENT_SETUP_COMPLETE,
)
from .logging import log


class ImageFocus:
    """Click-to-focus image overlay for one document."""

    def __init__(self, document: Document,
                 bus: Optional[NotificationCenter] = None,
                 env: Optional[Environment] = None,
                 scheduler: Optional[Scheduler] = None,
                 classifier: Optional[ContentClassifier] = None):
        self.ctx = FocusContext(
            document=document,
            bus=bus or NotificationCenter(),
            env=env or Environment(),
            scheduler=scheduler or Scheduler(),
        )
        self.classifier = classifier or ContentClassifier()

        self.router = InputRouter(self)
        self.lifecycle = OverlayLifecycle(self.ctx, self.router.listeners)
        self.gallery = GalleryNavigator(self.ctx, self.lifecycle, self.classifier.content_images)
        self.focus = FocusStateMachine(self.ctx, self.lifecycle, self.gallery)

        self.gallery.focus_image = self.focus.focus
        self.focus.double_click = self.router.on_double_click

    @property
    def state(self) -> OverlayState:
        return self.ctx.state

    @property
    def document(self) -> Document:
        return self.ctx.document

    # ─── Lifecycle ───────────────────────────────────────────────────────

    def setup(self) -> None:
        """Create the overlay and subscribe to page notifications."""
        log("[SETUP] ImageFocus setup")
        st = self.state
        st.overlay = build_overlay_element(self.document)

        for button in st.overlay.query_selector_all(f".{SLIDESHOW_BUTTON_CLASS}"):
            button.add_event_listener("click", self.router.on_slideshow_button)

        # Chrome starts hidden
        self.lifecycle.hide_ui()

        self.document.window.add_event_listener("orientationchange", self._on_orientation_change)
        self.ctx.bus.add_handler(EVENT_CONTENT_INJECTED, self._on_content_injected)
        self.ctx.bus.add_handler(EVENT_HASH_CHANGED, self._on_hash_changed)

        self.ctx.bus.fire(EVENT_SETUP_COMPLETE)

    def reset(self) -> None:
        """Close any open overlay session."""
        if self.state.engaged:
            self.focus.exit()

    def dispose(self) -> None:
        """Close the overlay, remove it and drop all subscriptions."""
        self.reset()
        self.document.window.remove_event_listener("orientationchange", self._on_orientation_change)
        self.ctx.bus.remove_handler(EVENT_CONTENT_INJECTED, self._on_content_injected)
        self.ctx.bus.remove_handler(EVENT_HASH_CHANGED, self._on_hash_changed)
        if self.state.overlay is not None:
            self.state.overlay.remove()
            self.state.overlay = None
        self.state.reset()
        log("[SETUP] ImageFocus disposed")

    # ─── Content ─────────────────────────────────────────────────────────

    def process_images_within(self, container: Element) -> List[ImageElement]:
        return process_images_within(container, self.classifier, self.router.on_image_clicked)

    def _on_content_injected(self, info: Dict[str, Any]) -> None:
        container = info.get("container")
        document = info.get("document")
        if container is None:
            return
        self.process_images_within(container)

        if document is self.document:
            self.gallery.update_image_count()
            images = self.gallery.gallery_images()
            if images:
                images[0].access_key = SLIDESHOW_ACCESS_KEY

        self.ctx.bus.fire(EVENT_IMAGES_PROCESSED, {"container": container, "document": document})

    # ─── Deep links ──────────────────────────────────────────────────────

    def focus_image_specified_by_url(self) -> None:
        """Focus the gallery image named by a ``#if_slide_N`` fragment."""
        fragment = self.document.location.hash
        if not is_slide_fragment(fragment):
            return
        log(f"[LINK] Fragment {fragment!r} requests a slide", level=2)
        self.ctx.env.do_when_page_loaded(
            lambda: self._focus_slide(self.document.location.hash))

    def _focus_slide(self, fragment: str) -> None:
        number = parse_slide_fragment(fragment)
        count = self.gallery.count
        if number is None or not (0 < number <= count):
            log(f"[LINK] Ignoring {fragment!r} ({count} gallery images)")
            return
        self.focus.focus(self.gallery.gallery_images()[number - 1])

    def _on_hash_changed(self, info: Dict[str, Any]) -> None:
        self.focus_image_specified_by_url()

    def _on_orientation_change(self, event: Event) -> None:
        self.ctx.scheduler.call_soon(self.focus.reset_focused_image_position)
