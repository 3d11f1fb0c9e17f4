from __future__ import annotations

from conftest import SAMPLE_PAGE, FakeDecoder, image_by_src
from imagefocus import config
from imagefocus.content import ContentClassifier
from imagefocus.controller import ImageFocus
from imagefocus.dom import Document, Window
from imagefocus.environment import Environment
from imagefocus.events import NotificationCenter
from imagefocus.page_loader import parse_html
from imagefocus.scheduler import ManualClock, Scheduler


def _standalone(hash=""):
    """A document and focus controller with their own bus."""
    document, _ = parse_html(SAMPLE_PAGE, Document(window=Window(1280, 800), hash=hash))
    document.image_decoder = FakeDecoder()
    bus = NotificationCenter()
    app = ImageFocus(document, bus=bus, env=Environment(), scheduler=Scheduler(ManualClock()))
    app.setup()
    bus.fire(config.EVENT_CONTENT_INJECTED, {"container": document.body, "document": document})
    return app


# ─── Content processing ──────────────────────────────────────────────────

def test_images_are_classified(app, document):
    def classes(src):
        return image_by_src(document, src).classes

    for src in ("one.png", "three.png", "five.png"):
        assert {config.CLASS_FOCUSABLE, config.CLASS_GALLERY_IMAGE} <= classes(src)
    for src in ("thumb.png", "note.png"):
        assert config.CLASS_FOCUSABLE in classes(src)
        assert config.CLASS_GALLERY_IMAGE not in classes(src)
    for src in ("linked.png", "opted-out.png"):
        assert config.CLASS_FOCUSABLE not in classes(src)


def test_focusable_figure_images_are_wrapped(app, document):
    one = image_by_src(document, "one.png")
    assert one.parent.tag == "span"
    assert one.parent.has_class(config.CLASS_IMAGE_WRAPPER)
    assert one.parent.parent.tag == "figure"
    assert image_by_src(document, "linked.png").parent.tag == "a"


def test_processing_again_does_not_double_wrap_or_rebind(app, bus, document):
    bus.fire(config.EVENT_CONTENT_INJECTED, {"container": document.body, "document": document})
    one = image_by_src(document, "one.png")
    assert not one.parent.parent.has_class(config.CLASS_IMAGE_WRAPPER)
    assert one.listener_count("click") == 1
    assert app.gallery.count == 5


def test_first_gallery_image_gets_access_key(app, gallery):
    assert gallery[0].access_key == config.SLIDESHOW_ACCESS_KEY
    assert all(img.access_key == "" for img in gallery[1:])


def test_injection_reports_processed_container(app, document, events):
    processed = [info for name, info in events.events if name == config.EVENT_IMAGES_PROCESSED]
    assert len(processed) == 1
    assert processed[0]["container"] is document.body
    assert processed[0]["document"] is document


def test_counter_total_follows_injection(app):
    assert app.state.chrome.number_of_images == 5
    number = app.lifecycle.part(f".{config.IMAGE_NUMBER_CLASS}")
    assert number.get_attribute("data-number-of-images") == "5"


def test_nothing_is_focusable_before_injection(make_app, document):
    app = make_app(document, inject=False)
    assert app.gallery.count == 0
    assert not image_by_src(document, "one.png").has_class(config.CLASS_FOCUSABLE)


def test_injected_fragment_of_another_document_keeps_count(app, bus, make_document):
    other = make_document()
    bus.fire(config.EVENT_CONTENT_INJECTED, {"container": other.body, "document": other})
    assert app.state.chrome.number_of_images == 5
    assert image_by_src(other, "two.png").has_class(config.CLASS_FOCUSABLE)


def test_custom_classifier_selectors(bus, env, scheduler, document):
    classifier = ContentClassifier.from_selectors(
        content_images="#markdownBody img",
        excluded_containers=".footnotes",
        gallery_test=lambda image: image.closest("a") is None)
    assert str(classifier.focusable_images) == "#markdownBody img.focusable"

    app = ImageFocus(document, bus=bus, env=env, scheduler=scheduler, classifier=classifier)
    app.setup()
    focusable = app.process_images_within(document.body)
    srcs = [img.src for img in focusable]
    assert "linked.png" in srcs and "opted-out.png" in srcs
    assert "note.png" not in srcs
    assert not image_by_src(document, "linked.png").has_class(config.CLASS_GALLERY_IMAGE)
    assert document.query_selector_all(classifier.focusable_images) == focusable


# ─── Deep links ──────────────────────────────────────────────────────────

def test_slide_fragment_focuses_gallery_image(make_app, make_document):
    document = make_document(hash="#if_slide_3")
    app = make_app(document)
    app.focus_image_specified_by_url()
    gallery = app.gallery.gallery_images()
    assert app.state.focused_image is gallery[2]
    assert document.location.hash == "#if_slide_3"
    assert app.lifecycle.part(f".{config.IMAGE_NUMBER_CLASS}").text == "3"

    app.focus.exit()
    assert document.location.hash == ""


def test_out_of_range_or_malformed_slides_are_ignored(make_app, make_document):
    for fragment in ("#if_slide_0", "#if_slide_6", "#if_slide_two", "#intro"):
        document = make_document(hash=fragment)
        app = make_app(document)
        app.focus_image_specified_by_url()
        assert not app.state.engaged
        assert document.location.hash == fragment
        app.dispose()


def test_deep_link_waits_for_page_load(make_app, make_document, env):
    env.page_loaded = False
    document = make_document(hash="#if_slide_2")
    app = make_app(document)
    app.focus_image_specified_by_url()
    assert not app.state.engaged

    env.mark_page_loaded()
    assert app.state.focused_image is app.gallery.gallery_images()[1]


def test_hash_change_notification_focuses_slide(app, bus, gallery, document):
    document.location.hash = "#if_slide_4"
    bus.fire(config.EVENT_HASH_CHANGED)
    assert app.state.focused_image is gallery[3]


def test_focused_slide_link_round_trips():
    first = _standalone()
    gallery = first.gallery.gallery_images()
    first.focus.focus(gallery[3])
    link = first.document.location.hash
    assert link == "#if_slide_4"

    second = _standalone(hash=link)
    second.focus_image_specified_by_url()
    focused = second.state.focused_image
    assert focused is not None
    assert focused.src == gallery[3].src
    assert second.gallery.current_index() == 3


# ─── Lifecycle ───────────────────────────────────────────────────────────

def test_reset_closes_an_open_session(app, gallery):
    app.focus.focus(gallery[0])
    app.reset()
    assert not app.state.engaged
    app.reset()
    assert not app.state.engaged


def test_dispose_removes_overlay_and_subscriptions(app, bus, gallery, document):
    app.focus.focus(gallery[1])
    app.dispose()
    assert document.get_element_by_id(config.OVERLAY_ID) is None
    assert app.state.overlay is None
    assert bus.handler_count(config.EVENT_CONTENT_INJECTED) == 0
    assert bus.handler_count(config.EVENT_HASH_CHANGED) == 0
    assert document.window.listener_count("orientationchange") == 0
    assert document.window.listener_count("wheel") == 0
