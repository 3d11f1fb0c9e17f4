"""Shared collaborators handed to every image focus component."""

from __future__ import annotations
from dataclasses import dataclass, field

from .dom import Document
from .environment import Environment
from .events import NotificationCenter
from .scheduler import Scheduler
from .state import OverlayState
from .types import Viewport


@dataclass
class FocusContext:
    """Document, services and the overlay state of one page."""
    document: Document
    bus: NotificationCenter = field(default_factory=NotificationCenter)
    env: Environment = field(default_factory=Environment)
    scheduler: Scheduler = field(default_factory=Scheduler)
    state: OverlayState = field(default_factory=OverlayState)

    @property
    def viewport(self) -> Viewport:
        return self.document.window.viewport
