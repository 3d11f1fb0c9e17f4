"""Page environment services consumed by the image focus core.

Hosts subclass ``Environment`` to hook scrolling into their page view.
"""

from __future__ import annotations
from typing import Callable, List, Optional, TYPE_CHECKING

from .logging import log

if TYPE_CHECKING:
    from .dom import Element


class Environment:
    """Default environment: records calls, runs load callbacks in order."""

    def __init__(self, mobile: bool = False, page_loaded: bool = True):
        self.mobile = mobile
        self.page_loaded = page_loaded
        self.page_scrolling_enabled = True
        self.last_revealed: Optional["Element"] = None
        self._load_callbacks: List[Callable[[], None]] = []

    def is_mobile(self) -> bool:
        """Touch/mobile environment (the overlay UI never auto-hides there)."""
        return self.mobile

    def reveal_element(self, element: "Element", center: bool = True) -> None:
        """Scroll the base page so ``element`` is visible."""
        self.last_revealed = element

    def set_page_scrolling(self, enabled: bool) -> None:
        """Enable or disable scrolling of the base page."""
        self.page_scrolling_enabled = enabled

    def do_when_page_loaded(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` now if the page is loaded, else once it is."""
        if self.page_loaded:
            callback()
        else:
            self._load_callbacks.append(callback)

    def mark_page_loaded(self) -> None:
        """Flag the page as loaded and flush pending callbacks."""
        if self.page_loaded:
            return
        self.page_loaded = True
        callbacks, self._load_callbacks = self._load_callbacks, []
        log(f"[ENV] Page loaded, running {len(callbacks)} deferred callback(s)", level=2)
        for callback in callbacks:
            callback()
