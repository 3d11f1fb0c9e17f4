"""State management submodules for imagefocus."""

from .input import PanState
from .ui import ChromeState
from .overlay import OverlayState

__all__ = [
    'PanState',
    'ChromeState',
    'OverlayState',
]
