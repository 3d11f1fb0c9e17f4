"""Command Pattern for overlay keyboard actions.

Commands encapsulate actions that can be triggered by various inputs.
Each command has an execute() method and optional can_execute() for guards.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .controller import ImageFocus

from .config import KEYS_CLOSE, KEYS_RESET, KEYS_NEXT, KEYS_PREV
from .logging import log


class Command(ABC):
    """Base class for all commands."""

    @abstractmethod
    def execute(self, app: "ImageFocus") -> bool:
        """Execute the command. Returns True if action was taken."""
        pass

    def can_execute(self, app: "ImageFocus") -> bool:
        """Check if command can be executed. Override for guards."""
        return True


# ═══════════════════════════════════════════════════════════════════════════
# Overlay Commands
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class CloseOverlay(Command):
    """Close the overlay, remembering the gallery position."""

    def can_execute(self, app: "ImageFocus") -> bool:
        return app.state.engaged

    def execute(self, app: "ImageFocus") -> bool:
        if not self.can_execute(app):
            return False
        log("[CMD] CloseOverlay", level=2)
        app.focus.exit()
        return True


@dataclass
class ResetFocusedImage(Command):
    """Return the focused image to its fit size and position."""

    def can_execute(self, app: "ImageFocus") -> bool:
        return app.state.clone is not None

    def execute(self, app: "ImageFocus") -> bool:
        if not self.can_execute(app):
            return False
        log("[CMD] ResetFocusedImage", level=2)
        app.focus.reset_focused_image_position()
        return True


# ═══════════════════════════════════════════════════════════════════════════
# Navigation Commands
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class FocusNextImage(Command):
    """Focus the next gallery image."""

    def can_execute(self, app: "ImageFocus") -> bool:
        return app.state.is_gallery

    def execute(self, app: "ImageFocus") -> bool:
        if not self.can_execute(app):
            return False
        return app.gallery.focus_adjacent(forward=True)


@dataclass
class FocusPreviousImage(Command):
    """Focus the previous gallery image."""

    def can_execute(self, app: "ImageFocus") -> bool:
        return app.state.is_gallery

    def execute(self, app: "ImageFocus") -> bool:
        if not self.can_execute(app):
            return False
        return app.gallery.focus_adjacent(forward=False)


def command_for_key(key: str) -> Optional[Command]:
    """Map a key name to its overlay command, or None if unhandled."""
    if key in KEYS_CLOSE:
        return CloseOverlay()
    if key in KEYS_RESET:
        return ResetFocusedImage()
    if key in KEYS_NEXT:
        return FocusNextImage()
    if key in KEYS_PREV:
        return FocusPreviousImage()
    return None
