"""Logging utilities with timing, frame tracking and verbosity levels."""

from __future__ import annotations
import sys
import time
from typing import Optional

from .config import LOG_LEVEL


class Logger:
    """Application logger with timestamps and frame counts."""

    def __init__(self, level: int = LOG_LEVEL):
        self._start_time: float = time.perf_counter()
        self._frame: int = 0
        self.level: int = level

    @property
    def frame(self) -> int:
        """Current frame number."""
        return self._frame

    def increment_frame(self) -> None:
        """Increment frame counter."""
        self._frame += 1

    @property
    def elapsed(self) -> float:
        """Seconds since logger was created."""
        return time.perf_counter() - self._start_time

    def enabled_for(self, level: int) -> bool:
        """Check whether messages of this level are written."""
        return level <= self.level

    def log(self, msg: str, level: int = 1) -> None:
        """Log a message with timestamp and frame number.

        Messages above the logger's verbosity level are dropped.
        """
        if not self.enabled_for(level):
            return
        line = f"[{self.elapsed:7.3f}s F{self._frame:06d}] {msg}\n"
        try:
            sys.stdout.write(line)
            sys.stdout.flush()
        except Exception:
            try:
                sys.stderr.write(line)
                sys.stderr.flush()
            except Exception:
                pass


# Global logger instance
_logger: Optional[Logger] = None


def get_logger() -> Logger:
    """Get or create the global logger instance."""
    global _logger
    if _logger is None:
        _logger = Logger()
    return _logger


def set_level(level: int) -> None:
    """Change the global verbosity level."""
    get_logger().level = level


def log(msg: str, level: int = 1) -> None:
    """Log a message using the global logger."""
    get_logger().log(msg, level)


def get_frame() -> int:
    """Get current frame count."""
    return get_logger().frame


def increment_frame() -> None:
    """Increment frame counter."""
    get_logger().increment_frame()


# Time utilities
def now() -> float:
    """Get current time in seconds (high precision)."""
    return time.perf_counter()
