"""Focus state machine - focusing and unfocusing images in the overlay.

States are Unfocused and Focused (single image or gallery member). Focusing
engages the overlay, renders a clone of the image into it, fits the clone
to the viewport and keeps the location fragment in sync for gallery
images; exiting restores the fragment and disengages the overlay.
"""

from __future__ import annotations
from typing import Optional

from .context import FocusContext
from .deeplink import is_slide_fragment, slide_fragment
from .dom import Element, ImageElement, Listener
from .gallery import GalleryNavigator
from .overlay import OverlayLifecycle
from .types import FocusMode, ZoomTransform
from .view_math import compute_fit_transform, cursor_for
from .config import (
    CLASS_FOCUSABLE, CLASS_GALLERY_IMAGE, CLASS_FOCUSED, CLASS_LAST_FOCUSED,
    DROP_SHADOW_FILTER,
    SLIDESHOW_ACCESS_KEY,
    EVENT_IMAGE_FOCUSED, EVENT_IMAGE_UNFOCUSED,
)
from .logging import log


def _px(value: float) -> str:
    return f"{value:g}px"


class FocusStateMachine:
    """Orchestrates focus, unfocus and exit for one overlay."""

    def __init__(self, ctx: FocusContext, lifecycle: OverlayLifecycle,
                 gallery: GalleryNavigator):
        self.ctx = ctx
        self.lifecycle = lifecycle
        self.gallery = gallery
        # Set by the controller: closes the overlay on double-click
        self.double_click: Optional[Listener] = None

    # ─── Transitions ─────────────────────────────────────────────────────

    def focus(self, image: ImageElement) -> None:
        """Open ``image`` in the overlay, replacing any focused image."""
        st = self.ctx.state
        log(f"[FOCUS] Focus {image.src or image!r}")

        self.lifecycle.enter()
        self.lifecycle.unhide_ui()
        self.unfocus()

        image.add_class(CLASS_FOCUSED)
        in_gallery = image.has_class(CLASS_GALLERY_IMAGE)
        st.focused_image = image
        st.mode = FocusMode.GALLERY if in_gallery else FocusMode.SINGLE

        if in_gallery:
            self._forget_last_focused()
            index = self.gallery.current_index()
            if index is not None:
                self.gallery.sync_controls(index)
                self._write_slide_fragment(index)
                self.gallery.preload_neighbors(index)
        else:
            st.chrome.image_number = None

        self.ctx.env.reveal_element(image, True)

        clone = self._make_clone(image)
        st.clone = clone
        st.transform = ZoomTransform(filter=clone.style["filter"])
        self.lifecycle.overlay.append(clone)

        self.reset_focused_image_position()

        if self.double_click is not None:
            clone.add_event_listener("dblclick", self.double_click)

        st.chrome.slideshow = in_gallery
        self.set_caption()
        self.lifecycle.project()

        self.ctx.bus.fire(EVENT_IMAGE_FOCUSED, {"image": image})

    def unfocus(self) -> None:
        """Discard the clone and clear the focused image, if any."""
        st = self.ctx.state

        if st.clone is not None:
            st.clone.remove()
            st.clone = None
            st.transform = None
        st.pan.end_pan()

        if st.focused_image is not None:
            image = st.focused_image
            log(f"[FOCUS] Unfocus {image.src or image!r}", level=2)
            image.remove_class(CLASS_FOCUSED)
            st.focused_image = None
            st.mode = FocusMode.UNFOCUSED
            self.ctx.bus.fire(EVENT_IMAGE_UNFOCUSED, {"image": image})

    def exit(self) -> None:
        """User-initiated close of the overlay."""
        st = self.ctx.state
        image = st.focused_image
        log("[FOCUS] Exit")

        if image is not None and image.has_class(CLASS_GALLERY_IMAGE):
            # Remember the slide so the access key can reopen it
            image.remove_class(CLASS_FOCUSED)
            image.add_class(CLASS_LAST_FOCUSED)
            image.access_key = SLIDESHOW_ACCESS_KEY
            st.last_focused = image

            location = self.ctx.document.location
            if is_slide_fragment(location.hash):
                location.replace_hash(st.saved_fragment or "")
                st.saved_fragment = None

        self.unfocus()
        self.lifecycle.exit()

    # ─── Clone geometry ──────────────────────────────────────────────────

    def reset_focused_image_position(self, use_self: bool = False) -> None:
        """Apply the fit transform to the clone.

        If the intrinsic size is not known yet, the fit is retried once the
        clone has decoded.
        """
        st = self.ctx.state
        clone = st.clone
        if clone is None or st.transform is None:
            return

        source = clone if use_self or st.focused_image is None else st.focused_image
        if not source.decoded:
            log("[FOCUS] Natural size unknown, deferring fit until decoded", level=2)

            def retry() -> None:
                if st.clone is clone:
                    self.reset_focused_image_position(use_self=True)

            clone.when_decoded(retry)
            clone.request_decode()
            return

        fit = compute_fit_transform(source.natural_width, source.natural_height,
                                    self.ctx.viewport, filter=st.transform.filter)
        log(f"[FOCUS] Fit {source.natural_width}x{source.natural_height} -> "
            f"{fit.width:g}x{fit.height:g}", level=2)
        self.apply_transform(fit)

    def apply_transform(self, transform: ZoomTransform) -> None:
        """Make ``transform`` current and project it onto the clone."""
        st = self.ctx.state
        clone = st.require_clone()
        st.transform = transform
        clone.style.update({
            "width": _px(transform.width),
            "height": _px(transform.height),
            "left": _px(transform.left),
            "top": _px(transform.top),
            "filter": transform.filter,
        })
        self.set_cursor()

    def set_cursor(self) -> None:
        """"move" cursor iff the clone can be panned."""
        st = self.ctx.state
        clone = st.require_clone()
        clone.style["cursor"] = cursor_for(st.transform, self.ctx.viewport)

    # ─── Caption ─────────────────────────────────────────────────────────

    def set_caption(self) -> None:
        """Fill the caption from the enclosing figure, else the title."""
        st = self.ctx.state
        caption = self.lifecycle.caption
        for child in list(caption.children):
            child.remove()
        caption.text = ""

        image = st.focused_image
        figure = image.closest("figure") if image is not None else None
        figcaption = figure.query_selector("figcaption") if figure is not None else None

        if figcaption is not None:
            nodes = [child.clone() for child in figcaption.children]
            if figcaption.query_selector("p") is not None:
                caption.text = figcaption.text
                caption.append(*nodes)
            else:
                paragraph = Element("p", text=figcaption.text)
                paragraph.append(*nodes)
                caption.append(paragraph)
        elif image is not None and image.title != "":
            caption.append(Element("p", text=image.title))

        st.chrome.caption_html = caption.inner_html or None

    # ─── Helpers ─────────────────────────────────────────────────────────

    def _make_clone(self, image: ImageElement) -> ImageElement:
        clone = image.clone(deep=True)
        clone.tail = ""
        clone.remove_attribute("width")
        clone.remove_attribute("height")
        clone.remove_attribute("accesskey")
        clone.remove_class(CLASS_FOCUSABLE, CLASS_GALLERY_IMAGE, CLASS_FOCUSED, CLASS_LAST_FOCUSED)
        clone.style = {"filter": image.style.get("filter", "") + DROP_SHADOW_FILTER}
        return clone

    def _forget_last_focused(self) -> None:
        for el in self.ctx.document.query_selector_all(f"img.{CLASS_LAST_FOCUSED}"):
            el.remove_class(CLASS_LAST_FOCUSED)
            el.remove_attribute("accesskey")
        self.ctx.state.last_focused = None

    def _write_slide_fragment(self, index: int) -> None:
        location = self.ctx.document.location
        if not is_slide_fragment(location.hash):
            self.ctx.state.saved_fragment = location.hash
        location.replace_hash(slide_fragment(index + 1))
        log(f"[LINK] Fragment -> {location.hash}", level=2)
