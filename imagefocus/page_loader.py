"""Page loading - parse an HTML file into a Document with image decoding."""

from __future__ import annotations
import os
from html.parser import HTMLParser
from typing import List, Optional, Tuple

from .dom import Document, Element, ImageElement, Window
from .errors import PageLoadError
from .image_utils import decode_image_size, resolve_src
from .logging import log

_VOID_TAGS = frozenset({"img", "br", "hr", "input", "meta", "link", "source", "wbr"})
_SKIPPED_TAGS = frozenset({"head", "script", "style", "template"})


class ImageDecoder:
    """Resolves image sources against the page directory and decodes sizes."""

    def __init__(self, base_dir: str):
        self.base_dir = base_dir

    def path_for(self, image: ImageElement) -> Optional[str]:
        return resolve_src(self.base_dir, image.src)

    def __call__(self, image: ImageElement) -> None:
        path = self.path_for(image)
        if path is None:
            log(f"[PAGE] Cannot decode non-local image {image.src!r}", level=2)
            return
        dims = decode_image_size(path)
        if dims is None:
            return
        log(f"[PAGE] Decoded {os.path.basename(path)}: {dims[0]}x{dims[1]}", level=3)
        image.mark_decoded(*dims)


class _TreeBuilder(HTMLParser):
    """Builds elements under ``document.body`` from HTML markup."""

    def __init__(self, document: Document):
        super().__init__(convert_charrefs=True)
        self.document = document
        self.stack: List[Element] = [document.body]
        self.skip_depth = 0
        self.images: List[ImageElement] = []

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        if self.skip_depth or tag in _SKIPPED_TAGS:
            if tag not in _VOID_TAGS:
                self.skip_depth += 1
            return
        if tag in ("html", "body"):
            if tag == "body":
                self.document.body.attrs.update({k: v or "" for k, v in attrs if k != "class"})
                self.document.body.add_class(*(dict(attrs).get("class") or "").split())
            return

        el = self.document.create_element(tag, **{k: (v if v is not None else "") for k, v in attrs})
        self.stack[-1].append(el)
        if isinstance(el, ImageElement):
            self.images.append(el)
        if tag not in _VOID_TAGS:
            self.stack.append(el)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self.handle_starttag(tag, attrs)
        if tag not in _VOID_TAGS and not self.skip_depth and tag not in ("html", "body"):
            self.handle_endtag(tag)

    def handle_endtag(self, tag: str) -> None:
        if self.skip_depth:
            if tag not in _VOID_TAGS:
                self.skip_depth -= 1
            return
        if tag in ("html", "body") or tag in _VOID_TAGS:
            return
        # Close up to the matching open element; stray end tags are ignored
        for i in range(len(self.stack) - 1, 0, -1):
            if self.stack[i].tag == tag:
                del self.stack[i:]
                return

    def handle_data(self, data: str) -> None:
        if self.skip_depth:
            return
        parent = self.stack[-1]
        if parent.children:
            parent.children[-1].tail += data
        else:
            parent.text += data


def parse_html(markup: str, document: Optional[Document] = None) -> Tuple[Document, List[ImageElement]]:
    """Parse markup into ``document`` (a new one by default)."""
    document = document or Document()
    builder = _TreeBuilder(document)
    builder.feed(markup)
    builder.close()
    return document, builder.images


def load_page(path: str, fragment: str = "", window: Optional[Window] = None) -> Document:
    """Load an HTML page from disk.

    Images marked ``loading="eager"`` are decoded immediately; the others
    are decoded on demand through ``document.image_decoder``.

    Raises:
        PageLoadError: if the file cannot be read.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            markup = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise PageLoadError(f"Cannot read page {path}: {e}") from e

    document = Document(window=window, hash=fragment)
    document.image_decoder = ImageDecoder(os.path.dirname(os.path.abspath(path)))
    document, images = parse_html(markup, document)

    eager = [img for img in images if img.get_attribute("loading") == "eager"]
    for image in eager:
        image.request_decode()

    log(f"[PAGE] Loaded {os.path.basename(path)}: {len(images)} images, {len(eager)} eager")
    return document
