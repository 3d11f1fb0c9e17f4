"""Application - desktop host main loop.

The Application renders a page into a raylib window and feeds the image
focus controller the same events a browser would:
- raylib input → document events (mouse, wheel, keys, resize)
- scheduler pumping (deferred work, chrome auto-hide)
- page layout, scrolling and scroll lock
- rendering (via Renderer)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple
import os
import tempfile
import traceback

from .controller import ImageFocus
from .dom import Document, Element, Event, EventTarget, ImageElement, Window
from .environment import Environment
from .errors import PageLoadError
from .events import NotificationCenter
from .image_utils import convert_for_texture, is_supported_image
from .layout import (
    ChromeLayout, PageLayout,
    caption_width, layout_chrome, layout_page, max_scroll, scroll_to_reveal, wrap_text,
)
from .math_utils import clamp, distance
from .page_loader import ImageDecoder, load_page
from .renderer import Renderer, get_renderer
from .rl_compat import rl, load_texture, is_texture_valid
from .scheduler import Scheduler
from .types import Viewport
from .view_math import clone_rect
from .config import (
    TARGET_FPS, WINDOW_TITLE, WINDOW_W, WINDOW_H,
    PAGE_SCROLL_STEP, CHROME_FADE_MS,
    DOUBLE_CLICK_TIME_MS, DOUBLE_CLICK_DISTANCE,
    KEY_NAMES, KEY_TOGGLE_HUD, KEY_SCROLL_UP, KEY_SCROLL_DOWN,
    EVENT_CONTENT_INJECTED, EVENT_HASH_CHANGED,
    HELP_OVERLAY_CLASS, IMAGE_NUMBER_CLASS, FONT_SIZE,
)
from .logging import log, now, increment_frame, get_frame

# raylib mouse button → DOM button number
_MOUSE_BUTTONS = ((0, 0), (1, 2), (2, 1))


class HostEnvironment(Environment):
    """Environment backed by the application's page view."""

    def __init__(self, app: "Application"):
        super().__init__(mobile=False, page_loaded=False)
        self.app = app

    def reveal_element(self, element: Element, center: bool = True) -> None:
        super().reveal_element(element, center)
        self.app.reveal(element, center)

    def set_page_scrolling(self, enabled: bool) -> None:
        super().set_page_scrolling(enabled)
        log(f"[APP] Page scrolling {'enabled' if enabled else 'locked'}", level=2)


@dataclass
class Application:
    """
    Desktop host for one page.

    Usage:
        app = Application()
        if app.initialize("page.html", "#if_slide_2"):
            app.run()
    """

    renderer: Renderer = field(default_factory=get_renderer)
    bus: NotificationCenter = field(default_factory=NotificationCenter)
    scheduler: Scheduler = field(default_factory=Scheduler)
    running: bool = False
    show_hud: bool = False

    document: Optional[Document] = None
    focus: Optional[ImageFocus] = None
    env: Optional[HostEnvironment] = None

    layout: PageLayout = field(default_factory=PageLayout)
    layout_dirty: bool = True
    scroll: float = 0.0
    chrome_alpha: float = 0.0

    textures: Dict[str, Any] = field(default_factory=dict)
    failed_paths: Set[str] = field(default_factory=set)
    convert_dir: Optional[tempfile.TemporaryDirectory] = None

    # Pointer tracking
    last_mouse: Tuple[float, float] = (-1.0, -1.0)
    last_click_time: float = 0.0
    last_click_pos: Tuple[float, float] = (0.0, 0.0)

    # ─── Setup ───────────────────────────────────────────────────────────

    def initialize(self, page_path: str, fragment: str = "") -> bool:
        """
        Open the window, load the page and set up image focus.

        Returns True if initialization successful.
        """
        log(f"[INIT] Creating window: {WINDOW_W}x{WINDOW_H}")
        rl.SetConfigFlags(rl.FLAG_WINDOW_RESIZABLE | getattr(rl, 'FLAG_MSAA_4X_HINT', 0))
        try:
            rl.InitWindow(WINDOW_W, WINDOW_H, WINDOW_TITLE)
        except TypeError:
            rl.InitWindow(WINDOW_W, WINDOW_H, WINDOW_TITLE.encode('utf-8'))
        rl.SetExitKey(0)
        rl.SetTargetFPS(TARGET_FPS)

        try:
            self.document = load_page(page_path, window=Window(WINDOW_W, WINDOW_H))
        except PageLoadError as e:
            log(f"[INIT][ERR] {e}")
            rl.CloseWindow()
            return False

        self.convert_dir = tempfile.TemporaryDirectory(prefix="imagefocus-")
        for image in self.document.query_selector_all("img"):
            image.add_event_listener("load", self._on_image_load)
        self.document.window.add_event_listener("resize", self._on_resize)

        self.env = HostEnvironment(self)
        self.focus = ImageFocus(self.document, bus=self.bus, env=self.env,
                                scheduler=self.scheduler)
        self.focus.setup()
        self.bus.fire(EVENT_CONTENT_INJECTED,
                      {"container": self.document.body, "document": self.document})
        self.relayout()
        self.env.mark_page_loaded()

        if fragment:
            self.navigate_to_fragment(fragment)

        log("[INIT] Application initialized")
        return True

    def navigate_to_fragment(self, fragment: str) -> None:
        """Set the document fragment as a navigation would."""
        self.document.location.hash = fragment
        self.bus.fire(EVENT_HASH_CHANGED, {"hash": fragment})

    # ─── Main loop ───────────────────────────────────────────────────────

    def run(self) -> None:
        """Run the main loop."""
        self.running = True
        log("[APP] Starting main loop")

        try:
            while self.running:
                self._frame()
        except Exception as e:
            log(f"[APP][CRITICAL] Unhandled exception: {e!r}")
            log(f"[APP][CRITICAL] Traceback:\n{traceback.format_exc()}")
        finally:
            self._cleanup()

    def _frame(self) -> None:
        """Execute a single frame."""
        if rl.WindowShouldClose():
            self.running = False
            return

        # 1. Window size
        if rl.IsWindowResized():
            self.document.window.resize(rl.GetScreenWidth(), rl.GetScreenHeight())

        # 2. Input → document events
        self._poll_mouse()
        self._poll_keys()

        # 3. Deferred work and timers
        self.scheduler.run_due()

        # 4. Update
        self._update_chrome_alpha()
        if self.layout_dirty:
            self.relayout()
        self._decode_visible_images()

        # 5. Render
        self.renderer.draw_frame(self)

        # 6. Frame bookkeeping
        increment_frame()

    def stop(self) -> None:
        """Stop the main loop."""
        self.running = False

    # ─── Page view ───────────────────────────────────────────────────────

    @property
    def viewport(self) -> Viewport:
        return self.document.window.viewport

    def relayout(self) -> None:
        self.layout = layout_page(self.document.body, self.viewport)
        self.scroll = clamp(self.scroll, 0.0, max_scroll(self.layout, self.viewport))
        self.layout_dirty = False

    def reveal(self, element: Element, center: bool = True) -> None:
        if self.layout_dirty:
            self.relayout()
        box = self.layout.box_for(element)
        if box is None:
            return
        self.scroll = scroll_to_reveal(box.rect, self.scroll, self.viewport,
                                       self.layout.height, center)

    def scroll_by(self, dy: float) -> None:
        if not self.env.page_scrolling_enabled:
            return
        self.scroll = clamp(self.scroll + dy, 0.0, max_scroll(self.layout, self.viewport))

    def _on_image_load(self, event: Event) -> None:
        self.layout_dirty = True

    def _on_resize(self, event: Event) -> None:
        self.layout_dirty = True

    def _decode_visible_images(self) -> None:
        for box in self.layout.visible(self.scroll, self.viewport):
            image = box.element
            if isinstance(image, ImageElement) and not image.decoded:
                path = self._path_for(image)
                if path is None or path in self.failed_paths:
                    continue
                try:
                    image.request_decode()
                except Exception as e:
                    log(f"[APP][ERR] Decode failed for {os.path.basename(path)}: {e!r}")
                if not image.decoded:
                    self.failed_paths.add(path)

    # ─── Chrome ──────────────────────────────────────────────────────────

    def help_lines(self) -> List[str]:
        st = self.focus.state
        panel = self.focus.lifecycle.part(f".{HELP_OVERLAY_CLASS}")
        return [p.text_content for p in panel.children
                if st.chrome.slideshow or not p.has_class("slideshow-help-text")]

    def caption_lines(self) -> List[str]:
        text = self.focus.lifecycle.caption.text_content
        return wrap_text(text, caption_width(self.viewport), FONT_SIZE)

    def chrome_layout(self) -> ChromeLayout:
        return layout_chrome(self.viewport, self.help_lines(), self.caption_lines())

    def _update_chrome_alpha(self) -> None:
        st = self.focus.state
        target = 1.0 if st.engaged and not st.chrome.hidden else 0.0
        step = (1.0 / (CHROME_FADE_MS / 1000.0)) / TARGET_FPS
        self.chrome_alpha += clamp(target - self.chrome_alpha, -step, step)

    # ─── Hit testing ─────────────────────────────────────────────────────

    def hit_test(self, x: float, y: float) -> EventTarget:
        """Event target under a viewport point."""
        st = self.focus.state
        if not st.engaged:
            return self.layout.hit_test(x, y + self.scroll) or self.document.body

        if not st.chrome.hidden:
            part = self._chrome_part_at(x, y)
            if part is not None:
                return part
        if st.clone is not None and st.transform is not None:
            if clone_rect(st.transform, self.viewport).contains(x, y):
                return st.clone
        return st.overlay

    def _chrome_part_at(self, x: float, y: float) -> Optional[Element]:
        st = self.focus.state
        lifecycle = self.focus.lifecycle
        name = self.chrome_layout().hit(x, y)
        if name in ("previous", "next"):
            if not st.chrome.slideshow:
                return None
            return lifecycle.previous_button if name == "previous" else lifecycle.next_button
        if name == "help":
            return lifecycle.part(f".{HELP_OVERLAY_CLASS}")
        if name == "counter" and st.chrome.slideshow and st.chrome.counter_text:
            return lifecycle.part(f".{IMAGE_NUMBER_CLASS}")
        if name == "caption" and self.caption_lines():
            return lifecycle.caption
        return None

    # ─── Input ───────────────────────────────────────────────────────────

    def _dispatch(self, type: str, target: EventTarget, x: float, y: float, **kw) -> Event:
        event = Event(type, client_x=x, client_y=y, **kw)
        target.dispatch_event(event)
        return event

    def _poll_mouse(self) -> None:
        mouse = rl.GetMousePosition()
        x, y = float(mouse.x), float(mouse.y)

        if (x, y) != self.last_mouse:
            self.last_mouse = (x, y)
            self._dispatch("mousemove", self.hit_test(x, y), x, y)

        for rl_button, button in _MOUSE_BUTTONS:
            if rl.IsMouseButtonPressed(rl_button):
                self._dispatch("mousedown", self.hit_test(x, y), x, y, button=button)
            if rl.IsMouseButtonReleased(rl_button):
                self._release(x, y, button)

        wheel = rl.GetMouseWheelMove()
        if wheel != 0.0:
            event = self._dispatch("wheel", self.hit_test(x, y), x, y, delta_y=-wheel * 100.0)
            if not event.default_prevented:
                self.scroll_by(-wheel * PAGE_SCROLL_STEP)

    def _release(self, x: float, y: float, button: int) -> None:
        # One hit test serves mouseup, click and dblclick so a click cannot
        # land on the page after the overlay closes on mouseup
        target = self.hit_test(x, y)
        self._dispatch("mouseup", target, x, y, button=button)
        if button != 0:
            return
        if isinstance(target, Element) and target.disabled:
            return
        self._dispatch("click", target, x, y, button=button)
        if self.detect_double_click(x, y):
            self._dispatch("dblclick", target, x, y, button=button)

    def detect_double_click(self, x: float, y: float) -> bool:
        t = now()
        if (t - self.last_click_time) < (DOUBLE_CLICK_TIME_MS / 1000.0):
            if distance(x, y, *self.last_click_pos) < DOUBLE_CLICK_DISTANCE:
                self.last_click_time = 0.0
                return True
        self.last_click_time = t
        self.last_click_pos = (x, y)
        return False

    def _poll_keys(self) -> None:
        if rl.IsKeyPressed(KEY_TOGGLE_HUD):
            self.show_hud = not self.show_hud

        for code, name in KEY_NAMES.items():
            if rl.IsKeyReleased(code):
                self.document.dispatch_event(Event("keyup", key=name))

        if not self.focus.state.engaged:
            if rl.IsKeyPressed(KEY_SCROLL_DOWN):
                self.scroll_by(PAGE_SCROLL_STEP)
            if rl.IsKeyPressed(KEY_SCROLL_UP):
                self.scroll_by(-PAGE_SCROLL_STEP)

    # ─── Textures ────────────────────────────────────────────────────────

    def _path_for(self, image: ImageElement) -> Optional[str]:
        decoder = self.document.image_decoder
        if isinstance(decoder, ImageDecoder):
            return decoder.path_for(image)
        return None

    def texture_for(self, image: ImageElement) -> Optional[Any]:
        """Texture for a decoded image, loaded on first use."""
        if not image.decoded:
            return None
        path = self._path_for(image)
        if path is None or path in self.failed_paths:
            return None
        tex = self.textures.get(path)
        if tex is not None:
            return tex

        load_path = path
        if not is_supported_image(path):
            load_path = convert_for_texture(path, self.convert_dir.name)
        tex = load_texture(load_path) if load_path else None
        if tex is None or not is_texture_valid(tex):
            log(f"[TEX][ERR] Cannot load texture for {os.path.basename(path)}")
            self.failed_paths.add(path)
            return None
        log(f"[TEX] Loaded {os.path.basename(path)} ({tex.width}x{tex.height})", level=2)
        self.textures[path] = tex
        return tex

    # ─── Cleanup ─────────────────────────────────────────────────────────

    def _cleanup(self) -> None:
        """Clean up resources."""
        log("[APP] Starting cleanup")
        if self.focus is not None:
            self.focus.dispose()

        for tex in self.textures.values():
            try:
                rl.UnloadTexture(tex)
            except Exception as e:
                log(f"[APP][ERR] UnloadTexture failed: {e!r}")
        self.textures.clear()

        if self.convert_dir is not None:
            self.convert_dir.cleanup()

        log("[APP] Closing window")
        rl.CloseWindow()
        log(f"[APP] Cleanup complete, frames={get_frame()}")
