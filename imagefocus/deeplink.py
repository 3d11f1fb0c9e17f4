"""Slide fragments - the location fragment encoding of a gallery position."""

from __future__ import annotations
import re
from typing import Optional

from .config import SLIDE_FRAGMENT_PREFIX

_SLIDE_RE = re.compile(re.escape(SLIDE_FRAGMENT_PREFIX) + r"([0-9]+)")


def is_slide_fragment(fragment: str) -> bool:
    """Check if a fragment uses the slide prefix (well-formed or not)."""
    return fragment.startswith(SLIDE_FRAGMENT_PREFIX)


def parse_slide_fragment(fragment: str) -> Optional[int]:
    """1-based slide number encoded in ``fragment``, or None if malformed."""
    m = _SLIDE_RE.fullmatch(fragment)
    return int(m.group(1)) if m else None


def slide_fragment(number: int) -> str:
    """Fragment for a 1-based slide number."""
    return f"{SLIDE_FRAGMENT_PREFIX}{number}"
