"""Raylib compatibility layer - abstracts differences between raylibpy and python-raylib."""

from __future__ import annotations
from typing import Any, Sequence

# Try to import raylib
try:
    import raylibpy as rl
    RL_VERSION = "raylibpy"
except Exception:
    import raylib as rl
    RL_VERSION = "python-raylib"


def make_rect(x: float, y: float, w: float, h: float) -> Any:
    """Create a raylib Rectangle compatible with the current binding."""
    if hasattr(rl, 'Rectangle'):
        try:
            return rl.Rectangle(x, y, w, h)
        except Exception:
            pass
    r = rl.ffi.new("Rectangle *")
    r[0].x, r[0].y = float(x), float(y)
    r[0].width, r[0].height = float(w), float(h)
    return r[0]


def make_vec2(x: float, y: float) -> Any:
    """Create a raylib Vector2 compatible with the current binding."""
    if hasattr(rl, 'Vector2'):
        try:
            return rl.Vector2(x, y)
        except Exception:
            pass
    v = rl.ffi.new("Vector2 *")
    v[0].x, v[0].y = float(x), float(y)
    return v[0]


def make_color(rgba: Sequence[int], alpha: float = 1.0) -> Any:
    """Create a raylib Color from an (r, g, b, a) tuple, scaling alpha."""
    r, g, b, a = (int(c) for c in rgba)
    a = max(0, min(255, int(a * alpha)))
    ctor = getattr(rl, "Color", None)
    if ctor:
        try:
            return ctor(r, g, b, a)
        except Exception:
            pass
    return (r, g, b, a)


def draw_text(text: str, x: int, y: int, size: int, color: Any) -> None:
    """Draw text with encoding fallback."""
    try:
        rl.DrawText(text, int(x), int(y), size, color)
    except TypeError:
        rl.DrawText(text.encode('utf-8'), int(x), int(y), size, color)


def measure_text(text: str, size: int) -> int:
    """Measure text width with encoding fallback."""
    try:
        return rl.MeasureText(text, size)
    except TypeError:
        return rl.MeasureText(text.encode('utf-8'), size)


def load_texture(path: str) -> Any:
    """Load a texture with encoding fallback."""
    try:
        return rl.LoadTexture(path)
    except TypeError:
        return rl.LoadTexture(path.encode('utf-8'))


def set_window_title(title: str) -> None:
    try:
        rl.SetWindowTitle(title)
    except TypeError:
        rl.SetWindowTitle(title.encode('utf-8'))


def is_texture_valid(tex: Any) -> bool:
    """Check if texture is valid and loaded."""
    return (getattr(tex, 'id', 0) or 0) > 0


__all__ = [
    'rl',
    'RL_VERSION',
    'make_rect',
    'make_vec2',
    'make_color',
    'draw_text',
    'measure_text',
    'load_texture',
    'set_window_title',
    'is_texture_valid',
]
