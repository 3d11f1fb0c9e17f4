"""Notification center - named events with dict payloads."""

from __future__ import annotations
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from .logging import log

Handler = Callable[[Dict[str, Any]], None]


@dataclass
class _Registration:
    handler: Handler
    once: bool = False


class NotificationCenter:
    """Page-wide publish/subscribe bus.

    Handlers run synchronously in registration order. A handler that raises
    is logged and skipped; the remaining handlers still run.
    """

    def __init__(self):
        self._handlers: Dict[str, List[_Registration]] = {}

    def add_handler(self, name: str, handler: Handler, once: bool = False) -> None:
        """Register a handler for an event name (duplicates are ignored)."""
        regs = self._handlers.setdefault(name, [])
        if any(r.handler == handler for r in regs):
            return
        regs.append(_Registration(handler, once))

    def remove_handler(self, name: str, handler: Handler) -> bool:
        """Unregister a handler. Returns True if it was registered."""
        regs = self._handlers.get(name, [])
        for i, r in enumerate(regs):
            if r.handler == handler:
                del regs[i]
                return True
        return False

    def handler_count(self, name: str) -> int:
        return len(self._handlers.get(name, []))

    def fire(self, name: str, info: Optional[Dict[str, Any]] = None) -> None:
        """Fire an event, passing ``info`` (or an empty dict) to each handler."""
        payload = dict(info) if info else {}
        log(f"[EVENT] {name}", level=3)
        for reg in list(self._handlers.get(name, [])):
            if reg.once:
                self.remove_handler(name, reg.handler)
            try:
                reg.handler(payload)
            except Exception as e:
                log(f"[EVENT][ERR] Handler for {name} failed: {e!r}")
                log(f"[EVENT][ERR] Traceback:\n{traceback.format_exc()}")
