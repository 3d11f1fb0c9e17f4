from __future__ import annotations

import os

import pytest
from PIL import Image

from imagefocus.dom import ImageElement
from imagefocus.errors import PageLoadError
from imagefocus.image_utils import (
    convert_for_texture,
    decode_image_size,
    is_supported_image,
    probe_image_dimensions,
    resolve_src,
)
from imagefocus.page_loader import ImageDecoder, load_page, parse_html


def _write_image(path, size, fmt=None):
    Image.new("RGB", size, (200, 40, 40)).save(str(path), fmt)
    return str(path)


# ─── Image files ─────────────────────────────────────────────────────────

def test_probe_reads_png_and_jpeg_headers(tmp_path):
    png = _write_image(tmp_path / "a.png", (64, 32))
    jpg = _write_image(tmp_path / "b.jpg", (30, 90))
    assert probe_image_dimensions(png) == (64, 32)
    assert probe_image_dimensions(jpg) == (30, 90)


def test_probe_gives_up_on_other_formats(tmp_path):
    bmp = _write_image(tmp_path / "c.bmp", (10, 10))
    assert probe_image_dimensions(bmp) is None
    assert probe_image_dimensions(str(tmp_path / "missing.png")) is None


def test_decode_falls_back_to_pillow(tmp_path):
    gif = _write_image(tmp_path / "d.gif", (17, 23))
    assert decode_image_size(gif) == (17, 23)


def test_decode_reports_unreadable_files(tmp_path):
    bogus = tmp_path / "e.png"
    bogus.write_bytes(b"not an image")
    assert decode_image_size(str(bogus)) is None


def test_resolve_src(tmp_path):
    base = str(tmp_path)
    assert resolve_src(base, "img/a.png") == os.path.join(base, "img", "a.png")
    assert resolve_src(base, "img/a%20b.png") == os.path.join(base, "img", "a b.png")
    assert resolve_src(base, "/abs/x.png") == os.path.normpath("/abs/x.png")
    assert resolve_src(base, "https://example.com/a.png") is None
    assert resolve_src(base, "data:image/png;base64,AAAA") is None
    assert resolve_src(base, "") is None


def test_supported_extensions():
    assert is_supported_image("photo.JPG")
    assert is_supported_image("chart.png")
    assert not is_supported_image("photo.webp")


def test_convert_for_texture_writes_png(tmp_path):
    src = _write_image(tmp_path / "f.tiff", (12, 8))
    out_dir = tmp_path / "out"
    out_dir.mkdir()
    out = convert_for_texture(src, str(out_dir))
    assert out is not None and out.endswith(".png")
    with Image.open(out) as img:
        assert img.size == (12, 8)
        assert img.mode == "RGBA"
    assert convert_for_texture(src, str(out_dir)) == out


def test_convert_for_texture_reports_failure(tmp_path):
    bogus = tmp_path / "g.webp"
    bogus.write_bytes(b"garbage")
    assert convert_for_texture(str(bogus), str(tmp_path)) is None


# ─── Markup ──────────────────────────────────────────────────────────────

def test_parse_builds_tree_under_body():
    document, images = parse_html(
        "<html><head><title>T</title><style>p {}</style></head>"
        "<body class='page'><div id='main'><p>Hello <em>there</em> world"
        "<img src='a.png' alt='A'>!</p></div><script>var x = '<img src=no.png>';</script>"
        "</body></html>")
    assert document.body.has_class("page")
    main = document.get_element_by_id("main")
    p = main.children[0]
    em, img = p.children
    assert p.text == "Hello "
    assert em.text == "there" and em.tail == " world"
    assert img.tail == "!"
    assert [i.src for i in images] == ["a.png"]
    assert isinstance(img, ImageElement) and img.get_attribute("alt") == "A"
    assert p.text_content == "Hello there world!"


def test_parse_tolerates_unclosed_and_stray_tags():
    document, _ = parse_html("<div><p>one<p>two</span></div><p>three")
    div = document.body.children[0]
    assert div.tag == "div"
    assert document.body.children[-1].text == "three"


def test_parse_decodes_character_references():
    document, _ = parse_html("<p>a &amp; b &lt; c</p>")
    assert document.body.children[0].text == "a & b < c"


def test_parse_accepts_valueless_body_class():
    document, _ = parse_html("<html><body class data-theme><p>x</p></body></html>")
    assert document.body.classes == set()
    assert document.body.get_attribute("data-theme") == ""
    assert document.body.children[0].text == "x"


# ─── Pages on disk ───────────────────────────────────────────────────────

def test_load_page_decodes_eager_images_only(tmp_path):
    _write_image(tmp_path / "eager.png", (120, 80))
    _write_image(tmp_path / "lazy.png", (50, 50))
    page = tmp_path / "page.html"
    page.write_text('<figure><img src="eager.png" loading="eager"></figure>'
                    '<figure><img src="lazy.png"></figure>', encoding="utf-8")

    document = load_page(str(page), fragment="#if_slide_2")
    eager, lazy = document.query_selector_all("img")
    assert (eager.natural_width, eager.natural_height) == (120, 80)
    assert not lazy.decoded
    assert document.location.hash == "#if_slide_2"

    lazy.request_decode()
    assert lazy.decoded


def test_load_page_raises_for_missing_file(tmp_path):
    with pytest.raises(PageLoadError):
        load_page(str(tmp_path / "nope.html"))


def test_decoder_skips_remote_and_missing_images(tmp_path):
    document, images = parse_html('<img src="https://example.com/x.png"><img src="gone.png">')
    document.image_decoder = ImageDecoder(str(tmp_path))
    for image in images:
        image.request_decode()
        assert not image.decoded
