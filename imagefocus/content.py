"""Content classification - which images are focusable and which belong to
the gallery - and per-container processing after content injection."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List

from .dom import Element, ImageElement, Listener
from .selectors import Selector, SelectorLike, as_selector
from .config import (
    CONTENT_IMAGES_SELECTOR,
    EXCLUDED_CONTAINERS_SELECTOR,
    MAIN_CONTENT_SELECTOR,
    FOOTNOTES_SELECTOR,
    PAGE_THUMBNAIL_CLASS,
    CLASS_FOCUSABLE,
    CLASS_GALLERY_IMAGE,
    CLASS_IMAGE_WRAPPER,
)
from .logging import log


def default_gallery_inclusion_test(image: Element) -> bool:
    """Main content region, not a footnote, not a page thumbnail."""
    return (image.closest(MAIN_CONTENT_SELECTOR) is not None
            and image.closest(FOOTNOTES_SELECTOR) is None
            and not image.has_class(PAGE_THUMBNAIL_CLASS))


@dataclass
class ContentClassifier:
    """Selector-based classification rules."""
    content_images: Selector = field(default_factory=lambda: as_selector(CONTENT_IMAGES_SELECTOR))
    excluded_containers: Selector = field(
        default_factory=lambda: as_selector(EXCLUDED_CONTAINERS_SELECTOR))
    gallery_test: Callable[[Element], bool] = default_gallery_inclusion_test

    @classmethod
    def from_selectors(cls, content_images: SelectorLike = CONTENT_IMAGES_SELECTOR,
                       excluded_containers: SelectorLike = EXCLUDED_CONTAINERS_SELECTOR,
                       gallery_test: Callable[[Element], bool] = default_gallery_inclusion_test
                       ) -> ContentClassifier:
        return cls(as_selector(content_images), as_selector(excluded_containers), gallery_test)

    @property
    def focusable_images(self) -> Selector:
        return self.content_images.suffixed(CLASS_FOCUSABLE)

    def candidates(self, container: Element) -> List[ImageElement]:
        return [el for el in container.query_selector_all(self.content_images)
                if isinstance(el, ImageElement)]

    def is_excluded(self, image: Element) -> bool:
        return image.closest(self.excluded_containers) is not None


def process_images_within(container: Element, classifier: ContentClassifier,
                          on_click: Listener) -> List[ImageElement]:
    """Classify the images inside ``container`` and make them clickable.

    Marks focusable images (and gallery members among them), binds
    ``on_click`` to each focusable image and wraps focusable images that sit
    inside a figure in an ``image-wrapper`` span. Safe to run again on the
    same container.

    Returns:
        The focusable images found, in document order.
    """
    focusable: List[ImageElement] = []
    gallery = 0
    for image in classifier.candidates(container):
        if classifier.is_excluded(image):
            continue
        image.add_class(CLASS_FOCUSABLE)
        if classifier.gallery_test(image):
            image.add_class(CLASS_GALLERY_IMAGE)
            gallery += 1
        focusable.append(image)

    for image in focusable:
        image.add_event_listener("click", on_click)

    for image in focusable:
        if image.closest("figure") is None:
            continue
        parent = image.parent
        if parent is not None and parent.tag == "span" and parent.has_class(CLASS_IMAGE_WRAPPER):
            continue
        image.wrap("span", [CLASS_IMAGE_WRAPPER, CLASS_FOCUSABLE])

    log(f"[CONTENT] Processed {container!r}: {len(focusable)} focusable, {gallery} in gallery")
    return focusable
