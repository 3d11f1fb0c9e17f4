"""Layout - page column boxes and overlay chrome rectangles.

Pure geometry shared by the desktop host's hit testing and renderer; no
raylib calls here.
"""

from __future__ import annotations
import textwrap
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from .dom import Element, ImageElement
from .math_utils import clamp
from .types import Rect, Viewport
from .config import (
    OVERLAY_ID,
    PAGE_MARGIN, PAGE_COLUMN_W, PAGE_BLOCK_SPACING, PAGE_TEXT_LINE_H,
    NAV_BTN_W, NAV_BTN_H, NAV_BTN_MARGIN,
    HELP_PANEL_W, HELP_PANEL_MARGIN, CAPTION_MARGIN,
    FONT_SIZE,
)

TEXT_BLOCK_SIZES: Dict[str, int] = {
    "h1": 32, "h2": 26, "h3": 22, "h4": FONT_SIZE,
    "p": FONT_SIZE, "li": FONT_SIZE, "figcaption": 18,
    "blockquote": FONT_SIZE, "pre": 18, "dt": FONT_SIZE, "dd": FONT_SIZE,
}
# Average glyph width relative to font size for the default font
CHAR_WIDTH_RATIO = 0.55
# Aspect ratio assumed for images whose size is not known yet
PLACEHOLDER_ASPECT = 0.5


def wrap_text(text: str, width: float, font_size: int = FONT_SIZE) -> List[str]:
    """Greedy word wrap for a column ``width`` pixels wide."""
    chars = max(1, int(width / (font_size * CHAR_WIDTH_RATIO)))
    text = " ".join(text.split())
    return textwrap.wrap(text, width=chars) if text else []


def line_height(font_size: int) -> float:
    return max(PAGE_TEXT_LINE_H, font_size * 1.5)


def image_display_size(image: ImageElement, column_w: float) -> Tuple[float, float]:
    """In-page size: natural size scaled down to fit the column."""
    if not image.decoded:
        return (column_w, column_w * PLACEHOLDER_ASPECT)
    w, h = image.natural_width, image.natural_height
    if w <= column_w:
        return (float(w), float(h))
    scale = column_w / w
    return (column_w, h * scale)


@dataclass
class Box:
    """One laid-out block in page coordinates."""
    element: Element
    rect: Rect
    lines: Tuple[str, ...] = ()
    font_size: int = FONT_SIZE


@dataclass
class PageLayout:
    """Result of laying out a page into a single column."""
    boxes: List[Box] = field(default_factory=list)
    height: float = 0.0

    def box_for(self, element: Element) -> Optional[Box]:
        for box in self.boxes:
            if box.element is element:
                return box
        return None

    def hit_test(self, px: float, py: float) -> Optional[Element]:
        """Topmost element at a page-coordinate point."""
        # Images are laid out after their enclosing text blocks
        for box in reversed(self.boxes):
            if box.rect.contains(px, py):
                return box.element
        return None

    def visible(self, scroll: float, viewport: Viewport) -> List[Box]:
        top, bottom = scroll, scroll + viewport.height
        return [b for b in self.boxes if b.rect.bottom >= top and b.rect.y <= bottom]


class _PageFlow:
    def __init__(self, viewport: Viewport, column_w: float, margin: float):
        self.column_w = max(1.0, min(column_w, viewport.width - 2 * margin))
        self.x = max(margin, (viewport.width - self.column_w) / 2.0)
        self.y = float(margin)
        self.layout = PageLayout()

    def add(self, box: Box) -> None:
        self.layout.boxes.append(box)
        self.y = box.rect.bottom + PAGE_BLOCK_SPACING

    def walk(self, parent: Element) -> None:
        for child in parent.children:
            if child.id == OVERLAY_ID:
                continue
            if isinstance(child, ImageElement):
                self.image(child)
            elif child.tag in TEXT_BLOCK_SIZES:
                self.text(child)
            else:
                self.walk(child)

    def image(self, image: ImageElement) -> None:
        w, h = image_display_size(image, self.column_w)
        x = self.x + (self.column_w - w) / 2.0
        self.add(Box(image, Rect(x, self.y, w, h)))

    def text(self, block: Element) -> None:
        size = TEXT_BLOCK_SIZES[block.tag]
        lines = wrap_text(block.text_content, self.column_w, size)
        if lines:
            h = len(lines) * line_height(size)
            self.add(Box(block, Rect(self.x, self.y, self.column_w, h), tuple(lines), size))
        # Inline images inside text blocks flow below the text
        for image in block.query_selector_all("img"):
            if isinstance(image, ImageElement):
                self.image(image)


def layout_page(body: Element, viewport: Viewport,
                column_w: float = PAGE_COLUMN_W, margin: float = PAGE_MARGIN) -> PageLayout:
    """Lay out ``body`` as a centered single column."""
    flow = _PageFlow(viewport, column_w, margin)
    flow.walk(body)
    flow.layout.height = flow.y + margin
    return flow.layout


def max_scroll(layout: PageLayout, viewport: Viewport) -> float:
    return max(0.0, layout.height - viewport.height)


def scroll_to_reveal(rect: Rect, scroll: float, viewport: Viewport,
                     content_height: float, center: bool = True) -> float:
    """Scroll position that brings ``rect`` (page coordinates) into view."""
    limit = max(0.0, content_height - viewport.height)
    if center:
        target = rect.y + rect.height / 2.0 - viewport.height / 2.0
    elif rect.y < scroll:
        target = rect.y
    elif rect.bottom > scroll + viewport.height:
        target = rect.bottom - viewport.height
    else:
        target = scroll
    return clamp(target, 0.0, limit)


# ─── Overlay chrome ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class ChromeLayout:
    """Viewport rectangles of the overlay chrome."""
    previous: Rect
    next: Rect
    counter: Rect
    help: Rect
    caption: Rect

    def hit(self, px: float, py: float) -> Optional[str]:
        """Name of the chrome part under a point, if any."""
        for name in ("previous", "next", "counter", "help", "caption"):
            if getattr(self, name).contains(px, py):
                return name
        return None


def caption_width(viewport: Viewport) -> float:
    """Caption band width: the viewport minus both slideshow buttons."""
    return max(0.0, viewport.width - 2 * (CAPTION_MARGIN + NAV_BTN_MARGIN + NAV_BTN_W))


def layout_chrome(viewport: Viewport, help_lines: Sequence[str],
                  caption_lines: Sequence[str]) -> ChromeLayout:
    vw, vh = viewport.width, viewport.height
    line_h = line_height(FONT_SIZE)

    nav_y = (vh - NAV_BTN_H) / 2.0
    previous = Rect(NAV_BTN_MARGIN, nav_y, NAV_BTN_W, NAV_BTN_H)
    next_ = Rect(vw - NAV_BTN_MARGIN - NAV_BTN_W, nav_y, NAV_BTN_W, NAV_BTN_H)

    counter_w = 8 * FONT_SIZE
    counter = Rect((vw - counter_w) / 2.0, HELP_PANEL_MARGIN, counter_w, line_h)

    help_w = min(HELP_PANEL_W, vw - 2 * HELP_PANEL_MARGIN)
    help_h = len(help_lines) * line_h + 2 * HELP_PANEL_MARGIN
    help_ = Rect(vw - HELP_PANEL_MARGIN - help_w, HELP_PANEL_MARGIN, help_w, help_h)

    caption_w = caption_width(viewport)
    caption_h = len(caption_lines) * line_h
    caption = Rect((vw - caption_w) / 2.0, vh - CAPTION_MARGIN - caption_h, caption_w, caption_h)

    return ChromeLayout(previous, next_, counter, help_, caption)
