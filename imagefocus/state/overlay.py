"""Overlay state - the single focus session shared by all components."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from ..errors import NotFocusedError
from ..types import FocusMode, ZoomTransform
from ..scheduler import TimerHandle
from .input import PanState
from .ui import ChromeState

if TYPE_CHECKING:
    from ..dom import Element, ImageElement
    from ..overlay import ListenerHandle


@dataclass
class OverlayState:
    """State of the image focus overlay.

    ``engaged`` is true exactly while an image is focused. Everything else
    except ``overlay``, ``saved_fragment``, ``last_focused`` and the chrome
    counters is only meaningful while engaged.
    """
    overlay: Optional["Element"] = None
    engaged: bool = False
    mode: FocusMode = FocusMode.UNFOCUSED
    focused_image: Optional["ImageElement"] = None
    clone: Optional["ImageElement"] = None
    transform: Optional[ZoomTransform] = None
    saved_fragment: Optional[str] = None
    last_focused: Optional["ImageElement"] = None
    hide_ui_timer: Optional[TimerHandle] = None
    mouse_last_moved_at: float = 0.0
    listeners: Optional["ListenerHandle"] = None
    pan: PanState = field(default_factory=PanState)
    chrome: ChromeState = field(default_factory=ChromeState)

    @property
    def is_gallery(self) -> bool:
        return self.mode == FocusMode.GALLERY

    def require_clone(self) -> "ImageElement":
        """The rendered clone; raises if nothing is focused."""
        if self.clone is None or self.transform is None:
            raise NotFocusedError("No image is focused")
        return self.clone

    def reset(self) -> None:
        """Drop the focus session, keeping the overlay element and counters."""
        self.engaged = False
        self.mode = FocusMode.UNFOCUSED
        self.focused_image = None
        self.clone = None
        self.transform = None
        self.hide_ui_timer = None
        self.listeners = None
        self.pan = PanState()
