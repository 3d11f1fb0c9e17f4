from __future__ import annotations

import pytest

from imagefocus.dom import Document, Element, Event, ImageElement, Window
from imagefocus.errors import SelectorError
from imagefocus.selectors import Selector


def _tree():
    doc = Document()
    main = Element("div", ["markdownBody"], {"id": "markdownBody"})
    figure = Element("figure", ["image-focus-not"])
    img = ImageElement("a.png")
    figure.append(img)
    link = Element("a", attrs={"href": "#"})
    linked = ImageElement("b.png")
    link.append(linked)
    main.append(figure, link)
    doc.body.append(main)
    return doc, main, figure, img, linked


def test_selector_matches_descendants_and_compounds():
    doc, main, figure, img, linked = _tree()
    assert img.matches(".markdownBody figure img")
    assert not linked.matches(".markdownBody figure img")
    assert figure.matches("figure.image-focus-not")
    assert main.matches("div#markdownBody.markdownBody")
    assert linked.matches("span, a img")


def test_selector_suffixed_adds_class_to_subject():
    sel = Selector.parse(".markdownBody figure img, p img").suffixed("focusable")
    assert str(sel) == ".markdownBody figure img.focusable, p img.focusable"


@pytest.mark.parametrize("text", ["", "a > b", "img[src]", "a,,b"])
def test_unsupported_selectors_raise(text):
    with pytest.raises(SelectorError):
        Selector.parse(text)


def test_selector_error_is_a_value_error():
    with pytest.raises(ValueError):
        Selector.parse("div:hover")


def test_closest_and_query_selector_all_in_document_order():
    doc, main, figure, img, linked = _tree()
    assert img.closest("figure") is figure
    assert img.closest("a") is None
    assert doc.query_selector_all("img") == [img, linked]
    assert doc.get_element_by_id("markdownBody") is main


def test_class_attribute_becomes_class_set():
    el = Element("p", attrs={"class": "one two", "title": "t"})
    assert el.classes == {"one", "two"}
    assert "class" not in el.attrs


def test_events_bubble_to_window_and_report_prevent_default():
    doc, main, figure, img, linked = _tree()
    seen = []
    img.add_event_listener("click", lambda e: seen.append(("img", e.current_target)))
    doc.window.add_event_listener("click", lambda e: (seen.append(("window", e.target)),
                                                       e.prevent_default()))
    ok = img.dispatch_event(Event("click"))
    assert seen == [("img", img), ("window", img)]
    assert ok is False


def test_stop_propagation_halts_bubbling():
    doc, main, figure, img, linked = _tree()
    seen = []
    figure.add_event_listener("click", lambda e: e.stop_propagation())
    doc.add_event_listener("click", lambda e: seen.append(e))
    img.dispatch_event(Event("click"))
    assert seen == []


def test_listeners_are_deduplicated_and_once_listeners_fire_once():
    el = Element("div")
    calls = []

    def listener(event):
        calls.append(event.type)

    el.add_event_listener("x", listener)
    el.add_event_listener("x", listener)
    assert el.listener_count("x") == 1
    el.remove_event_listener("x", listener)
    el.add_event_listener("x", listener, once=True)
    el.dispatch_event(Event("x"))
    el.dispatch_event(Event("x"))
    assert calls == ["x"]


def test_wrap_moves_element_and_tail_into_wrapper():
    p = Element("p", text="before ")
    img = ImageElement("a.png")
    img.tail = " after"
    p.append(img)
    wrapper = img.wrap("span", ["image-wrapper"])
    assert p.children == [wrapper]
    assert wrapper.children == [img]
    assert wrapper.tail == " after" and img.tail == ""
    assert p.text_content == "before  after"


def test_clone_copies_attributes_but_not_listeners():
    img = ImageElement("a.png", ["focusable"], {"title": "T"})
    img.add_event_listener("click", lambda e: None)
    img.mark_decoded(40, 30)
    copy = img.clone()
    assert isinstance(copy, ImageElement)
    assert copy.src == "a.png" and copy.title == "T" and copy.has_class("focusable")
    assert (copy.natural_width, copy.natural_height) == (40, 30)
    assert copy.listener_count("click") == 0
    copy.add_class("extra")
    assert not img.has_class("extra")


def test_outer_html_escapes_and_handles_void_tags():
    p = Element("p", text="a < b")
    p.append(Element("em", text="x"), ImageElement("i.png"))
    assert p.outer_html == '<p>a &lt; b<em>x</em><img src="i.png"></p>'


def test_image_decode_waiters_run_after_load():
    doc = Document()
    img = ImageElement("a.png")
    doc.body.append(img)
    order = []
    img.add_event_listener("load", lambda e: order.append("load"))
    img.when_decoded(lambda: order.append("waiter"))
    doc.image_decoder = lambda image: image.mark_decoded(10, 20)
    img.request_decode()
    assert img.decoded
    assert order == ["load", "waiter"]
    img.when_decoded(lambda: order.append("immediate"))
    assert order[-1] == "immediate"


def test_detached_image_cannot_request_decode():
    img = ImageElement("a.png")
    img.request_decode()
    assert not img.decoded


def test_window_resize_fires_orientationchange_on_flip():
    win = Window(1280, 800)
    seen = []
    win.add_event_listener("resize", lambda e: seen.append("resize"))
    win.add_event_listener("orientationchange", lambda e: seen.append("orientation"))
    win.resize(1000, 700)
    assert seen == ["resize"]
    win.resize(700, 1000)
    assert seen == ["resize", "resize", "orientation"]
    assert win.is_portrait


def test_location_replace_hash_normalizes_empty_fragment():
    doc = Document(hash="#top")
    doc.location.replace_hash("#")
    assert doc.location.hash == ""
    doc.location.replace_hash("#if_slide_2")
    assert doc.location.hash == "#if_slide_2"
