from __future__ import annotations

import pytest

from imagefocus import config
from imagefocus.dom import ImageElement
from imagefocus.layout import (
    caption_width,
    image_display_size,
    layout_chrome,
    layout_page,
    line_height,
    max_scroll,
    scroll_to_reveal,
    wrap_text,
)
from imagefocus.page_loader import parse_html
from imagefocus.types import Rect, Viewport

VIEWPORT = Viewport(1280, 800)

PAGE = """
<h1>Title</h1>
<p>Intro text with an inline image <img src="inline.png"> after it.</p>
<figure><img src="big.png"><figcaption>Caption</figcaption></figure>
<div id="image-focus-overlay"><p>overlay chrome</p></div>
"""


def _page():
    document, images = parse_html(PAGE)
    inline, big = images
    inline.mark_decoded(200, 100)
    big.mark_decoded(1600, 800)
    return document, inline, big


def test_wrap_text_respects_column_width():
    lines = wrap_text("word " * 40, width=110, font_size=20)
    assert all(len(line) <= 10 for line in lines)
    assert " ".join(lines) == " ".join(["word"] * 40)
    assert wrap_text("   ", 300) == []


def test_image_display_size_scales_to_column():
    img = ImageElement("x.png")
    assert image_display_size(img, 720) == (720, 360)
    img.mark_decoded(300, 200)
    assert image_display_size(img, 720) == (300.0, 200.0)
    img.mark_decoded(1440, 900)
    assert image_display_size(img, 720) == (720, 450.0)


def test_page_is_laid_out_as_a_centered_column():
    document, inline, big = _page()
    layout = layout_page(document.body, VIEWPORT)
    tags = [box.element.tag for box in layout.boxes]
    assert tags == ["h1", "p", "img", "img", "figcaption"]

    column_x = (1280 - config.PAGE_COLUMN_W) / 2.0
    assert all(box.rect.x >= column_x for box in layout.boxes)
    ys = [box.rect.y for box in layout.boxes]
    assert ys == sorted(ys)

    big_box = layout.box_for(big)
    assert (big_box.rect.width, big_box.rect.height) == (config.PAGE_COLUMN_W, 360.0)
    assert layout.box_for(inline).rect.y > layout.boxes[1].rect.y
    assert layout.height == pytest.approx(layout.boxes[-1].rect.bottom
                                          + config.PAGE_BLOCK_SPACING + config.PAGE_MARGIN)


def test_overlay_element_is_not_part_of_the_page():
    document, _, _ = _page()
    layout = layout_page(document.body, VIEWPORT)
    assert "overlay chrome" not in [" ".join(box.lines) for box in layout.boxes]


def test_hit_test_prefers_images_over_enclosing_text():
    document, inline, big = _page()
    layout = layout_page(document.body, VIEWPORT)
    cx, cy = layout.box_for(big).rect.center
    assert layout.hit_test(cx, cy) is big
    assert layout.hit_test(5, 5) is None


def test_narrow_viewport_shrinks_the_column():
    document, _, big = _page()
    layout = layout_page(document.body, Viewport(400, 800))
    assert layout.box_for(big).rect.width == 400 - 2 * config.PAGE_MARGIN


def test_visible_boxes_follow_scroll():
    document, inline, big = _page()
    layout = layout_page(document.body, Viewport(1280, 200))
    assert layout.boxes[0] in layout.visible(0, Viewport(1280, 200))
    assert layout.boxes[0] not in layout.visible(layout.height - 100, Viewport(1280, 200))


def test_scroll_to_reveal_centers_and_clamps():
    vp = Viewport(1280, 800)
    rect = Rect(0, 1500, 100, 200)
    assert scroll_to_reveal(rect, 0, vp, 5000) == 1200
    assert scroll_to_reveal(Rect(0, 10, 100, 100), 400, vp, 5000) == 0
    assert scroll_to_reveal(Rect(0, 4900, 100, 100), 0, vp, 5000) == 4200


def test_scroll_to_reveal_minimal_move():
    vp = Viewport(1280, 800)
    assert scroll_to_reveal(Rect(0, 100, 10, 10), 500, vp, 5000, center=False) == 100
    assert scroll_to_reveal(Rect(0, 1400, 10, 100), 500, vp, 5000, center=False) == 700
    assert scroll_to_reveal(Rect(0, 600, 10, 100), 500, vp, 5000, center=False) == 500


def test_max_scroll_never_negative():
    document, _, _ = _page()
    layout = layout_page(document.body, Viewport(1280, 5000))
    assert max_scroll(layout, Viewport(1280, 5000)) == 0.0


def test_chrome_layout_hit_testing():
    chrome = layout_chrome(VIEWPORT, ["a", "b", "c"], ["caption line"])
    assert chrome.hit(*chrome.previous.center) == "previous"
    assert chrome.hit(*chrome.next.center) == "next"
    assert chrome.hit(*chrome.help.center) == "help"
    assert chrome.hit(*chrome.caption.center) == "caption"
    assert chrome.hit(640, 400) is None
    assert chrome.previous.x < chrome.caption.x
    assert chrome.caption.right < chrome.next.x
    assert chrome.help.height == 3 * line_height(config.FONT_SIZE) + 2 * config.HELP_PANEL_MARGIN


def test_caption_band_leaves_room_for_buttons():
    assert caption_width(VIEWPORT) == 1280 - 2 * (config.CAPTION_MARGIN + config.NAV_BTN_MARGIN
                                                   + config.NAV_BTN_W)
    assert caption_width(Viewport(100, 100)) == 0.0
