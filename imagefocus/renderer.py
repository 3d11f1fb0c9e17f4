"""Renderer - handles all drawing operations.

The Renderer is a pure drawing layer that only reads the document, the
overlay state and the host's layout and draws to screen. It does not modify
state - all state changes happen in the application's update step.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .app import Application

from .rl_compat import (
    rl, RL_VERSION,
    make_rect as RL_Rect, make_vec2 as RL_V2, make_color as RL_Color,
    draw_text as RL_DrawText, measure_text as RL_MeasureText,
    is_texture_valid,
)
from .dom import ImageElement
from .layout import Box, line_height
from .types import Rect
from .view_math import clone_rect
from .config import (
    OVERLAY_BG_COLOR, PAGE_BG_COLOR, PAGE_TEXT_COLOR,
    CHROME_TEXT_COLOR, CHROME_DISABLED_COLOR,
    SHADOW_COLOR, SHADOW_OFFSET,
    NO_FILTER, FONT_SIZE, HELP_PANEL_MARGIN, CLASS_LAST_FOCUSED,
)

_PLACEHOLDER_COLOR = (200, 200, 200, 255)
_PANEL_COLOR = (0, 0, 0, 150)
_FOCUSED_OUTLINE_COLOR = (70, 110, 200, 255)


@dataclass
class Renderer:
    """
    Handles all drawing operations.

    Usage:
        renderer = Renderer()
        renderer.draw_frame(app)
    """

    def begin_frame(self) -> None:
        """Begin a new frame."""
        rl.BeginDrawing()

    def end_frame(self) -> None:
        """End the current frame."""
        rl.EndDrawing()

    # ═══════════════════════════════════════════════════════════════════════
    # Page
    # ═══════════════════════════════════════════════════════════════════════

    def draw_page(self, app: "Application") -> None:
        """Draw the visible part of the page column."""
        rl.ClearBackground(RL_Color(PAGE_BG_COLOR))
        for box in app.layout.visible(app.scroll, app.viewport):
            if isinstance(box.element, ImageElement):
                self._draw_page_image(app, box)
            else:
                self._draw_text_box(app, box)

    def _draw_page_image(self, app: "Application", box: Box) -> None:
        r = box.rect
        y = r.y - app.scroll
        tex = app.texture_for(box.element)
        if tex is not None:
            self.draw_texture_in(tex, Rect(r.x, y, r.width, r.height))
        else:
            rl.DrawRectangle(int(r.x), int(y), int(r.width), int(r.height),
                             RL_Color(_PLACEHOLDER_COLOR))
        if box.element.has_class(CLASS_LAST_FOCUSED):
            rl.DrawRectangleLines(int(r.x) - 2, int(y) - 2, int(r.width) + 4, int(r.height) + 4,
                                  RL_Color(_FOCUSED_OUTLINE_COLOR))

    def _draw_text_box(self, app: "Application", box: Box) -> None:
        y = box.rect.y - app.scroll
        lh = line_height(box.font_size)
        for line in box.lines:
            RL_DrawText(line, box.rect.x, y + (lh - box.font_size) / 2, box.font_size,
                        RL_Color(PAGE_TEXT_COLOR))
            y += lh

    def draw_texture_in(self, tex: Any, dst: Rect, alpha: float = 1.0) -> None:
        """Draw a whole texture stretched into ``dst``."""
        if not is_texture_valid(tex):
            return
        rl.DrawTexturePro(
            tex,
            RL_Rect(0, 0, tex.width, tex.height),
            RL_Rect(dst.x, dst.y, dst.width, dst.height),
            RL_V2(0, 0), 0.0, RL_Color((255, 255, 255, 255), alpha)
        )

    # ═══════════════════════════════════════════════════════════════════════
    # Overlay
    # ═══════════════════════════════════════════════════════════════════════

    def draw_overlay(self, app: "Application") -> None:
        """Dim the page and draw the focused clone at its transform."""
        st = app.focus.state
        if not st.engaged:
            return
        vp = app.viewport
        rl.DrawRectangle(0, 0, int(vp.width), int(vp.height), RL_Color(OVERLAY_BG_COLOR))

        if st.clone is None or st.transform is None or st.transform.width <= 0:
            return
        rect = clone_rect(st.transform, vp)
        if st.transform.filter and st.transform.filter != NO_FILTER:
            rl.DrawRectangle(int(rect.x + SHADOW_OFFSET), int(rect.y + SHADOW_OFFSET),
                             int(rect.width), int(rect.height), RL_Color(SHADOW_COLOR))
        tex = app.texture_for(st.clone)
        if tex is not None:
            self.draw_texture_in(tex, rect)
        else:
            rl.DrawRectangle(int(rect.x), int(rect.y), int(rect.width), int(rect.height),
                             RL_Color(_PLACEHOLDER_COLOR))

    # ═══════════════════════════════════════════════════════════════════════
    # Chrome
    # ═══════════════════════════════════════════════════════════════════════

    def draw_chrome(self, app: "Application") -> None:
        """Draw the slideshow buttons, counter, help panel and caption."""
        st = app.focus.state
        alpha = app.chrome_alpha
        if not st.engaged or alpha < 0.01:
            return
        chrome = st.chrome
        lay = app.chrome_layout()

        if chrome.slideshow:
            self._draw_nav_button(lay.previous, False, chrome.previous_disabled, alpha)
            self._draw_nav_button(lay.next, True, chrome.next_disabled, alpha)

        counter = chrome.counter_text if chrome.slideshow else ""
        if counter:
            w = RL_MeasureText(counter, FONT_SIZE)
            RL_DrawText(counter, lay.counter.x + (lay.counter.width - w) / 2, lay.counter.y,
                        FONT_SIZE, RL_Color(CHROME_TEXT_COLOR, alpha))

        self._draw_panel(lay.help, app.help_lines(), alpha, HELP_PANEL_MARGIN)
        self._draw_panel(lay.caption, app.caption_lines(), alpha, 0, centered=True)

    def _draw_nav_button(self, r: Rect, forward: bool, disabled: bool, alpha: float) -> None:
        rl.DrawRectangle(int(r.x), int(r.y), int(r.width), int(r.height),
                         RL_Color(_PANEL_COLOR, alpha))
        color = RL_Color(CHROME_DISABLED_COLOR if disabled else CHROME_TEXT_COLOR, alpha)
        cx, cy = r.center
        size = r.width * 0.3
        tip = cx + size * 0.5 if forward else cx - size * 0.5
        tail = cx - size * 0.5 if forward else cx + size * 0.5
        rl.DrawLineEx(RL_V2(tail, cy - size), RL_V2(tip, cy), 3.0, color)
        rl.DrawLineEx(RL_V2(tip, cy), RL_V2(tail, cy + size), 3.0, color)

    def _draw_panel(self, r: Rect, lines, alpha: float, padding: float,
                    centered: bool = False) -> None:
        if not lines:
            return
        rl.DrawRectangle(int(r.x), int(r.y), int(r.width), int(r.height),
                         RL_Color(_PANEL_COLOR, alpha))
        lh = line_height(FONT_SIZE)
        y = r.y + padding
        for line in lines:
            x = r.x + padding
            if centered:
                x = r.x + (r.width - RL_MeasureText(line, FONT_SIZE)) / 2
            RL_DrawText(line, x, y + (lh - FONT_SIZE) / 2, FONT_SIZE,
                        RL_Color(CHROME_TEXT_COLOR, alpha))
            y += lh

    def draw_hud(self, app: "Application") -> None:
        """Draw debug HUD."""
        if not app.show_hud:
            return
        st = app.focus.state
        t = st.transform
        lines = [
            f"RL={RL_VERSION} scroll={app.scroll:.0f}/{app.layout.height:.0f}",
            f"engaged={st.engaged} mode={st.mode.name} hash={app.document.location.hash!r}",
            (f"transform={t.width:.0f}x{t.height:.0f} @({t.left:.0f},{t.top:.0f})"
             if t is not None else "transform=None"),
        ]
        y = int(app.viewport.height) - 24 * len(lines) - 12
        for line in lines:
            RL_DrawText(line, 12, y, 16, rl.GRAY)
            y += 24

    # ═══════════════════════════════════════════════════════════════════════
    # Convenience methods
    # ═══════════════════════════════════════════════════════════════════════

    def draw_all(self, app: "Application") -> None:
        """Draw everything in correct order."""
        self.draw_page(app)
        self.draw_overlay(app)
        self.draw_chrome(app)
        self.draw_hud(app)

    def draw_frame(self, app: "Application") -> None:
        """Complete frame: begin, draw all, end."""
        self.begin_frame()
        self.draw_all(app)
        self.end_frame()


# Singleton instance
_default_renderer: Optional[Renderer] = None


def get_renderer() -> Renderer:
    """Get the default renderer instance."""
    global _default_renderer
    if _default_renderer is None:
        _default_renderer = Renderer()
    return _default_renderer
