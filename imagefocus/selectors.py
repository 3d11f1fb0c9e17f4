"""Minimal CSS selector matcher for document classification.

Supports what the classification rules need: type selectors, ``#id``,
``.class``, compound selectors (``figure.image-focus-not``), the descendant
combinator (whitespace) and comma-separated selector lists.
"""

from __future__ import annotations
import re
from dataclasses import dataclass
from functools import lru_cache
from typing import TYPE_CHECKING, FrozenSet, List, Optional, Tuple, Union

from .errors import SelectorError

if TYPE_CHECKING:
    from .dom import Element

_COMPOUND_RE = re.compile(r"^(?P<tag>\*|[A-Za-z][\w-]*)?(?P<rest>(?:[.#][\w-]+)*)$")
_SIMPLE_RE = re.compile(r"([.#])([\w-]+)")


@dataclass(frozen=True)
class Compound:
    """A compound selector: optional tag, optional id, any number of classes."""
    tag: Optional[str] = None
    id: Optional[str] = None
    classes: FrozenSet[str] = frozenset()

    @classmethod
    def parse(cls, text: str) -> Compound:
        m = _COMPOUND_RE.match(text)
        if not m or not text:
            raise SelectorError(f"Unsupported selector: {text!r}")
        tag = m.group("tag")
        ident = None
        classes = set()
        for kind, name in _SIMPLE_RE.findall(m.group("rest")):
            if kind == "#":
                ident = name
            else:
                classes.add(name)
        return cls(
            tag=None if tag in (None, "*") else tag.lower(),
            id=ident,
            classes=frozenset(classes),
        )

    def matches(self, el: "Element") -> bool:
        if self.tag is not None and el.tag != self.tag:
            return False
        if self.id is not None and el.id != self.id:
            return False
        return self.classes <= el.classes

    def with_class(self, name: str) -> Compound:
        return Compound(self.tag, self.id, self.classes | {name})

    def __str__(self) -> str:
        out = self.tag or ""
        if self.id:
            out += "#" + self.id
        out += "".join("." + c for c in sorted(self.classes))
        return out or "*"


@dataclass(frozen=True)
class ComplexSelector:
    """Compounds joined by descendant combinators, outermost first."""
    parts: Tuple[Compound, ...]

    def matches(self, el: "Element") -> bool:
        if not self.parts[-1].matches(el):
            return False
        node = el.parent
        for part in reversed(self.parts[:-1]):
            while node is not None and not part.matches(node):
                node = node.parent
            if node is None:
                return False
            node = node.parent
        return True

    def __str__(self) -> str:
        return " ".join(str(p) for p in self.parts)


@dataclass(frozen=True)
class Selector:
    """A selector list: matches if any alternative matches."""
    alternatives: Tuple[ComplexSelector, ...]

    @classmethod
    def parse(cls, text: str) -> Selector:
        return _parse_cached(text)

    def matches(self, el: "Element") -> bool:
        return any(alt.matches(el) for alt in self.alternatives)

    def closest(self, el: "Element") -> Optional["Element"]:
        """Nearest inclusive ancestor matching this selector."""
        node: Optional["Element"] = el
        while node is not None:
            if self.matches(node):
                return node
            node = node.parent
        return None

    def select_all(self, root: "Element") -> List["Element"]:
        """Matching descendants of ``root`` in document order."""
        return [el for el in root.iter_descendants() if self.matches(el)]

    def suffixed(self, class_name: str) -> Selector:
        """Same selector with a class added to the subject of each alternative."""
        return Selector(tuple(
            ComplexSelector(alt.parts[:-1] + (alt.parts[-1].with_class(class_name),))
            for alt in self.alternatives
        ))

    def __str__(self) -> str:
        return ", ".join(str(a) for a in self.alternatives)


@lru_cache(maxsize=128)
def _parse_cached(text: str) -> Selector:
    alternatives = []
    for chunk in text.split(","):
        words = chunk.split()
        if not words:
            raise SelectorError(f"Empty selector in {text!r}")
        alternatives.append(ComplexSelector(tuple(Compound.parse(w) for w in words)))
    return Selector(tuple(alternatives))


SelectorLike = Union[str, Selector]


def as_selector(selector: SelectorLike) -> Selector:
    """Accept either a selector string or a parsed Selector."""
    return selector if isinstance(selector, Selector) else Selector.parse(selector)
