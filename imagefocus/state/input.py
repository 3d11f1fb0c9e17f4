"""Input state - pointer panning of the focused clone."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass
class PanState:
    """State for an in-progress drag of an oversized clone."""
    active: bool = False
    start_cursor: Tuple[float, float] = (0.0, 0.0)
    start_offset: Tuple[float, float] = (0.0, 0.0)
    saved_filter: str = ""

    def start_pan(self, mouse_x: float, mouse_y: float,
                  offset_x: float, offset_y: float, saved_filter: str) -> None:
        """Start panning operation."""
        self.active = True
        self.start_cursor = (mouse_x, mouse_y)
        self.start_offset = (offset_x, offset_y)
        self.saved_filter = saved_filter

    def end_pan(self) -> bool:
        """End panning operation. Returns True if was panning."""
        was_panning = self.active
        self.active = False
        return was_panning
