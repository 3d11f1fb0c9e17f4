"""Gallery navigator - ordered gallery images, current index, next/previous."""

from __future__ import annotations
from typing import Callable, List, Optional

from .context import FocusContext
from .dom import ImageElement
from .overlay import OverlayLifecycle
from .selectors import SelectorLike, as_selector
from .config import (
    CONTENT_IMAGES_SELECTOR,
    CLASS_GALLERY_IMAGE,
    CLASS_FOCUSED,
)
from .logging import log


def preload_image(image: ImageElement) -> None:
    """Force an image to load fully (no-op if already decoded)."""
    if image.natural_width > 0:
        return
    image.set_attribute("loading", "eager")
    image.set_attribute("decoding", "sync")
    image.request_decode()


class GalleryNavigator:
    """Index and navigation over gallery-eligible images in document order.

    The index is never stored; it is recomputed from the ``focused`` marker
    on every query.
    """

    def __init__(self, ctx: FocusContext, lifecycle: OverlayLifecycle,
                 content_images_selector: SelectorLike = CONTENT_IMAGES_SELECTOR):
        self.ctx = ctx
        self.lifecycle = lifecycle
        self.gallery_selector = as_selector(content_images_selector).suffixed(CLASS_GALLERY_IMAGE)
        # Set by the controller: focuses an image
        self.focus_image: Optional[Callable[[ImageElement], None]] = None

    def gallery_images(self) -> List[ImageElement]:
        return [el for el in self.ctx.document.query_selector_all(self.gallery_selector)
                if isinstance(el, ImageElement)]

    @property
    def count(self) -> int:
        return len(self.gallery_images())

    def current_index(self) -> Optional[int]:
        """Position of the focused gallery image, or None."""
        for i, image in enumerate(self.gallery_images()):
            if image.has_class(CLASS_FOCUSED):
                return i
        return None

    def image_at(self, index: int) -> Optional[ImageElement]:
        images = self.gallery_images()
        if 0 <= index < len(images):
            return images[index]
        return None

    def focus_adjacent(self, forward: bool = True) -> bool:
        """Focus the next (or previous) gallery image. No wraparound.

        Returns True if focus moved.
        """
        current = self.current_index()
        if current is None:
            log("[GALLERY] No gallery image focused, ignoring navigation", level=2)
            return False
        target = self.image_at(current + (1 if forward else -1))
        if target is None:
            log(f"[GALLERY] At boundary ({current}), ignoring navigation", level=2)
            return False
        log(f"[GALLERY] {'Next' if forward else 'Previous'}: {current} -> "
            f"{current + (1 if forward else -1)}")
        if self.focus_image is not None:
            self.focus_image(target)
        return True

    def sync_controls(self, index: int) -> None:
        """Reflect the focused position in the buttons and counter."""
        chrome = self.ctx.state.chrome
        count = self.count
        chrome.previous_disabled = (index == 0)
        chrome.next_disabled = (index == count - 1)
        chrome.image_number = index + 1
        chrome.number_of_images = count
        self.lifecycle.project()

    def preload_neighbors(self, index: int) -> None:
        """Decode the gallery images right before and after ``index``."""
        images = self.gallery_images()
        if index > 0:
            preload_image(images[index - 1])
        if index < len(images) - 1:
            preload_image(images[index + 1])

    def update_image_count(self) -> int:
        """Refresh the "of N" total shown next to the counter."""
        count = self.count
        self.ctx.state.chrome.number_of_images = count
        self.lifecycle.project()
        return count
