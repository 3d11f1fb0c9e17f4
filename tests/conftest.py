from __future__ import annotations

from typing import Dict, List, Tuple

import pytest

from imagefocus.controller import ImageFocus
from imagefocus.dom import Event, ImageElement, Window
from imagefocus.environment import Environment
from imagefocus.events import NotificationCenter
from imagefocus.page_loader import parse_html
from imagefocus.scheduler import ManualClock, Scheduler
from imagefocus.dom import Document
from imagefocus import config

SAMPLE_PAGE = """
<div id="markdownBody" class="markdownBody">
  <h1>Sample</h1>
  <figure><img src="one.png" width="800" height="600"><figcaption>First <em>figure</em></figcaption></figure>
  <p>Some text between figures.</p>
  <figure><img src="two.png" title="Second image"></figure>
  <figure><img src="three.png"></figure>
  <figure><img src="four.png"></figure>
  <figure><img src="five.png"></figure>
  <figure><a href="elsewhere.html"><img src="linked.png"></a></figure>
  <figure class="image-focus-not"><img src="opted-out.png"></figure>
  <figure><img src="thumb.png" class="page-thumbnail"></figure>
  <section class="footnotes"><figure><img src="note.png" title="Footnote image"></figure></section>
</div>
"""

GALLERY_SRCS = ["one.png", "two.png", "three.png", "four.png", "five.png"]


class FakeDecoder:
    """Image decoder with fixed sizes; ``deferred`` sources wait for ``flush``."""

    def __init__(self, sizes: Dict[str, Tuple[int, int]] = None, default=(1600, 1200)):
        self.sizes = dict(sizes or {})
        self.default = default
        self.deferred: set = set()
        self.pending: List[ImageElement] = []
        self.requests: List[str] = []

    def __call__(self, image: ImageElement) -> None:
        self.requests.append(image.src)
        if image.src in self.deferred:
            self.pending.append(image)
            return
        image.mark_decoded(*self.sizes.get(image.src, self.default))

    def flush(self) -> None:
        pending, self.pending = self.pending, []
        for image in pending:
            image.mark_decoded(*self.sizes.get(image.src, self.default))


class EventLog:
    """Records every notification fired on a bus."""

    def __init__(self, bus: NotificationCenter):
        self.events: List[Tuple[str, dict]] = []
        for name in (config.EVENT_SETUP_COMPLETE, config.EVENT_IMAGES_PROCESSED,
                     config.EVENT_IMAGE_FOCUSED, config.EVENT_IMAGE_UNFOCUSED,
                     config.EVENT_OVERLAY_APPEARED, config.EVENT_OVERLAY_DISAPPEARED):
            bus.add_handler(name, lambda info, name=name: self.events.append((name, info)))

    def names(self) -> List[str]:
        return [name for name, _ in self.events]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def clock():
    return ManualClock(start=100.0)


@pytest.fixture
def scheduler(clock):
    return Scheduler(clock)


@pytest.fixture
def bus():
    return NotificationCenter()


@pytest.fixture
def env():
    return Environment()


@pytest.fixture
def decoder():
    return FakeDecoder()


@pytest.fixture
def make_document(decoder):
    def _make(markup: str = SAMPLE_PAGE, hash: str = "", size=(1280, 800)) -> Document:
        document, _ = parse_html(markup, Document(window=Window(*size), hash=hash))
        document.image_decoder = decoder
        return document
    return _make


@pytest.fixture
def document(make_document):
    return make_document()


@pytest.fixture
def events(bus):
    return EventLog(bus)


@pytest.fixture
def make_app(bus, env, scheduler, events):
    def _make(document: Document, inject: bool = True) -> ImageFocus:
        app = ImageFocus(document, bus=bus, env=env, scheduler=scheduler)
        app.setup()
        if inject:
            bus.fire(config.EVENT_CONTENT_INJECTED,
                     {"container": document.body, "document": document})
        return app
    return _make


@pytest.fixture
def app(make_app, document):
    return make_app(document)


@pytest.fixture
def gallery(app):
    return app.gallery.gallery_images()


def image_by_src(document: Document, src: str) -> ImageElement:
    return next(img for img in document.query_selector_all("img")
                if isinstance(img, ImageElement) and img.src == src)


def key_up(document: Document, key: str) -> Event:
    event = Event("keyup", key=key)
    document.dispatch_event(event)
    return event


def click(target, x: float = 0.0, y: float = 0.0, button: int = 0) -> None:
    """mouseup followed by click, as a browser delivers a primary click."""
    target.dispatch_event(Event("mouseup", client_x=x, client_y=y, button=button))
    if button == 0:
        target.dispatch_event(Event("click", client_x=x, client_y=y, button=button))
