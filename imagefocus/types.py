"""Core data types for imagefocus."""

from __future__ import annotations
from dataclasses import dataclass, replace
from enum import IntEnum
from typing import Tuple


class FocusMode(IntEnum):
    """Focus state of the overlay."""
    UNFOCUSED = 0
    SINGLE = 1    # Focused image is not part of the gallery
    GALLERY = 2   # Focused image is a gallery member


@dataclass(frozen=True)
class Viewport:
    """Viewport (window inner) size in pixels."""
    width: float
    height: float

    @property
    def center(self) -> Tuple[float, float]:
        """Viewport center point."""
        return (self.width / 2.0, self.height / 2.0)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned box in viewport coordinates."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Box center point."""
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    def contains(self, px: float, py: float) -> bool:
        """Check if a point lies within the box (edges included)."""
        return self.x <= px <= self.right and self.y <= py <= self.bottom


@dataclass(frozen=True)
class ZoomTransform:
    """Displayed size and position of the focused clone.

    ``left``/``top`` are offsets from the clone's default (centered)
    position, not absolute coordinates.
    """
    filter: str = ""
    width: float = 0.0
    height: float = 0.0
    left: float = 0.0
    top: float = 0.0

    def with_filter(self, value: str) -> ZoomTransform:
        """Copy with a different filter."""
        return replace(self, filter=value)

    def moved_to(self, left: float, top: float) -> ZoomTransform:
        """Copy with different position offsets."""
        return replace(self, left=left, top=top)

    def resized(self, width: float, height: float) -> ZoomTransform:
        """Copy with a different displayed size."""
        return replace(self, width=width, height=height)
