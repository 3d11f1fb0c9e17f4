"""In-memory hypertext document model.

A small DOM: elements with attributes, classes and inline style, event
targets with bubbling (element → ancestors → document → window), a window
with a viewport size and a location with a fragment.
"""

from __future__ import annotations
import html
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

from .selectors import SelectorLike, as_selector
from .types import Viewport

Listener = Callable[["Event"], Any]

# Elements serialized without a closing tag
_VOID_TAGS = frozenset({"img", "br", "hr", "input", "meta", "link", "source"})


@dataclass
class Event:
    """A dispatched input or lifecycle event."""
    type: str
    target: Optional["EventTarget"] = None
    current_target: Optional["EventTarget"] = None
    client_x: float = 0.0
    client_y: float = 0.0
    button: int = 0
    delta_y: float = 0.0
    key: str = ""
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


class EventTarget:
    """Object that can receive events and hold listeners."""

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    def add_event_listener(self, type: str, listener: Listener, once: bool = False) -> None:
        regs = self._listeners.setdefault(type, [])
        if any(fn == listener for fn, _ in regs):
            return
        regs.append((listener, once))

    def remove_event_listener(self, type: str, listener: Listener) -> None:
        regs = self._listeners.get(type, [])
        self._listeners[type] = [(fn, once) for fn, once in regs if fn != listener]

    def listener_count(self, type: str) -> int:
        return len(self._listeners.get(type, []))

    def parent_target(self) -> Optional["EventTarget"]:
        """Next target in the bubbling path."""
        return None

    def _invoke(self, event: Event) -> None:
        for fn, once in list(self._listeners.get(event.type, [])):
            if once:
                self.remove_event_listener(event.type, fn)
            fn(event)

    def dispatch_event(self, event: Event) -> bool:
        """Dispatch ``event`` from this target, bubbling upward.

        Returns False if a listener called ``prevent_default()``.
        """
        if event.target is None:
            event.target = self
        node: Optional[EventTarget] = self
        while node is not None and not event.propagation_stopped:
            event.current_target = node
            node._invoke(event)
            node = node.parent_target()
        event.current_target = None
        return not event.default_prevented


class Element(EventTarget):
    """A document element."""

    def __init__(self, tag: str, classes: Iterable[str] = (),
                 attrs: Optional[Dict[str, str]] = None, text: str = ""):
        super().__init__()
        self.tag = tag.lower()
        self.attrs: Dict[str, str] = dict(attrs or {})
        self.classes = set(classes)
        if "class" in self.attrs:
            self.classes.update(self.attrs.pop("class").split())
        self.style: Dict[str, str] = {}
        self.text = text
        self.tail = ""  # text following this element inside its parent
        self.children: List[Element] = []
        self.parent: Optional[Element] = None

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        cls = "".join("." + c for c in sorted(self.classes))
        return f"<{self.tag}{ident}{cls}>"

    # ─── Attributes & classes ────────────────────────────────────────────

    @property
    def id(self) -> Optional[str]:
        return self.attrs.get("id")

    def get_attribute(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.attrs.get(name, default)

    def set_attribute(self, name: str, value: Any) -> None:
        self.attrs[name] = str(value)

    def remove_attribute(self, name: str) -> None:
        self.attrs.pop(name, None)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, *names: str) -> None:
        self.classes.update(names)

    def remove_class(self, *names: str) -> None:
        self.classes.difference_update(names)

    def toggle_class(self, name: str, force: Optional[bool] = None) -> bool:
        """Toggle a class; with ``force`` set it on (True) or off (False)."""
        on = (name not in self.classes) if force is None else force
        if on:
            self.classes.add(name)
        else:
            self.classes.discard(name)
        return on

    @property
    def disabled(self) -> bool:
        return "disabled" in self.attrs

    @disabled.setter
    def disabled(self, value: bool) -> None:
        if value:
            self.attrs["disabled"] = ""
        else:
            self.attrs.pop("disabled", None)

    @property
    def access_key(self) -> str:
        return self.attrs.get("accesskey", "")

    @access_key.setter
    def access_key(self, value: str) -> None:
        self.attrs["accesskey"] = value

    # ─── Tree ────────────────────────────────────────────────────────────

    def append(self, *children: Element) -> Element:
        """Append children (moving them if already attached). Returns self."""
        for child in children:
            child.remove()
            child.parent = self
            self.children.append(child)
        return self

    def remove(self) -> None:
        """Detach from the parent, if any."""
        if self.parent is not None:
            self.parent.children.remove(self)
            self.parent = None

    def replace_with(self, other: Element) -> None:
        parent = self.parent
        if parent is None:
            return
        other.remove()
        idx = parent.children.index(self)
        parent.children[idx] = other
        other.parent = parent
        self.parent = None

    def wrap(self, tag: str, classes: Iterable[str] = ()) -> Element:
        """Wrap this element in a new element and return the wrapper."""
        wrapper = Element(tag, classes)
        self.replace_with(wrapper)
        wrapper.tail, self.tail = self.tail, ""
        wrapper.append(self)
        return wrapper

    def iter_descendants(self) -> Iterator[Element]:
        """Descendants in document (pre-)order, excluding self."""
        stack = list(reversed(self.children))
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def contains(self, other: Optional[Element]) -> bool:
        """Inclusive descendant test."""
        node = other
        while node is not None:
            if node is self:
                return True
            node = node.parent
        return False

    @property
    def root(self) -> Element:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def document(self) -> Optional[Document]:
        """Owning document, or None while detached."""
        root = self.root
        return root if isinstance(root, Document) else None

    def parent_target(self) -> Optional[EventTarget]:
        return self.parent

    # ─── Queries ─────────────────────────────────────────────────────────

    def matches(self, selector: SelectorLike) -> bool:
        return as_selector(selector).matches(self)

    def closest(self, selector: SelectorLike) -> Optional[Element]:
        return as_selector(selector).closest(self)

    def query_selector_all(self, selector: SelectorLike) -> List[Element]:
        return as_selector(selector).select_all(self)

    def query_selector(self, selector: SelectorLike) -> Optional[Element]:
        sel = as_selector(selector)
        return next((el for el in self.iter_descendants() if sel.matches(el)), None)

    # ─── Copy & serialization ────────────────────────────────────────────

    def clone(self, deep: bool = True) -> Element:
        """Copy attributes, classes, style and text; listeners are not copied."""
        copy = self._shallow_copy()
        copy.tail = self.tail
        if deep:
            for child in self.children:
                copy.append(child.clone(deep=True))
        return copy

    def _shallow_copy(self) -> Element:
        copy = Element(self.tag, self.classes, self.attrs, self.text)
        copy.style = dict(self.style)
        return copy

    @property
    def text_content(self) -> str:
        return self.text + "".join(c.text_content + c.tail for c in self.children)

    @property
    def inner_html(self) -> str:
        return html.escape(self.text, quote=False) + "".join(
            c.outer_html + html.escape(c.tail, quote=False) for c in self.children)

    @property
    def outer_html(self) -> str:
        attrs = dict(self.attrs)
        if self.classes:
            attrs["class"] = " ".join(sorted(self.classes))
        attr_text = "".join(
            f' {k}="{html.escape(v)}"' if v != "" else f" {k}"
            for k, v in attrs.items()
        )
        if self.tag in _VOID_TAGS:
            return f"<{self.tag}{attr_text}>"
        return f"<{self.tag}{attr_text}>{self.inner_html}</{self.tag}>"


class ImageElement(Element):
    """An ``img`` element with intrinsic size and a decode signal."""

    def __init__(self, src: str = "", classes: Iterable[str] = (),
                 attrs: Optional[Dict[str, str]] = None):
        super().__init__("img", classes, attrs)
        if src:
            self.attrs["src"] = src
        self.natural_width = 0
        self.natural_height = 0
        self._decode_waiters: List[Callable[[], None]] = []

    @property
    def src(self) -> str:
        return self.attrs.get("src", "")

    @property
    def title(self) -> str:
        return self.attrs.get("title", "")

    @property
    def decoded(self) -> bool:
        return self.natural_width > 0 and self.natural_height > 0

    def mark_decoded(self, width: int, height: int) -> None:
        """Record the intrinsic size and fire ``load``."""
        self.natural_width = int(width)
        self.natural_height = int(height)
        waiters, self._decode_waiters = self._decode_waiters, []
        self.dispatch_event(Event("load"))
        for callback in waiters:
            callback()

    def when_decoded(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` once the intrinsic size is known."""
        if self.decoded:
            callback()
        else:
            self._decode_waiters.append(callback)

    def request_decode(self) -> None:
        """Ask the document's image decoder to load this image."""
        if self.decoded:
            return
        doc = self.document
        if doc is not None and doc.image_decoder is not None:
            doc.image_decoder(self)

    def _shallow_copy(self) -> Element:
        copy = ImageElement(classes=self.classes, attrs=self.attrs)
        copy.style = dict(self.style)
        copy.natural_width = self.natural_width
        copy.natural_height = self.natural_height
        return copy


class Window(EventTarget):
    """Browser window: viewport size and top of the bubbling path."""

    def __init__(self, inner_width: float = 1280, inner_height: float = 800):
        super().__init__()
        self.inner_width = inner_width
        self.inner_height = inner_height

    @property
    def viewport(self) -> Viewport:
        return Viewport(self.inner_width, self.inner_height)

    @property
    def is_portrait(self) -> bool:
        return self.inner_height > self.inner_width

    def resize(self, width: float, height: float) -> None:
        """Change the viewport size; fires ``resize`` and, when the
        orientation flips, ``orientationchange``."""
        was_portrait = self.is_portrait
        self.inner_width = width
        self.inner_height = height
        self.dispatch_event(Event("resize"))
        if self.is_portrait != was_portrait:
            self.dispatch_event(Event("orientationchange"))


class Location:
    """Document location; only the fragment is modelled."""

    def __init__(self, hash: str = ""):
        self.hash = hash

    def replace_hash(self, fragment: str) -> None:
        """Rewrite the fragment without firing a change notification."""
        self.hash = "" if fragment in ("", "#") else fragment


class Document(Element):
    """Root element (``html``) with a body, a window and a location."""

    def __init__(self, window: Optional[Window] = None, hash: str = ""):
        super().__init__("html")
        self.window = window or Window()
        self.location = Location(hash)
        self.body = Element("body")
        self.append(self.body)
        self.image_decoder: Optional[Callable[[ImageElement], None]] = None

    def parent_target(self) -> Optional[EventTarget]:
        return self.window

    def get_element_by_id(self, ident: str) -> Optional[Element]:
        return next((el for el in self.iter_descendants() if el.id == ident), None)

    def create_element(self, tag: str, classes: Iterable[str] = (), **attrs: str) -> Element:
        if tag.lower() == "img":
            return ImageElement(classes=classes, attrs=attrs)
        return Element(tag, classes, attrs)
