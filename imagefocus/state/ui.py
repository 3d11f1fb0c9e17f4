"""UI state - overlay chrome (caption, slideshow controls, counter, help)."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional


@dataclass
class ChromeState:
    """What the overlay chrome should show.

    The overlay element's classes and attributes are a projection of this.
    """
    hidden: bool = True
    slideshow: bool = False
    caption_html: Optional[str] = None
    image_number: Optional[int] = None  # 1-based
    number_of_images: int = 0
    previous_disabled: bool = False
    next_disabled: bool = False

    @property
    def counter_text(self) -> str:
        """Counter label, e.g. "3 of 5"."""
        if self.image_number is None:
            return ""
        if self.number_of_images:
            return f"{self.image_number} of {self.number_of_images}"
        return str(self.image_number)

    def hide(self) -> None:
        self.hidden = True

    def unhide(self) -> None:
        self.hidden = False
