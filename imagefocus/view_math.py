"""Pure view calculation functions - no side effects, no state mutation.

All positions are in viewport coordinates. The focused clone is laid out
centered in the viewport; a ``ZoomTransform`` stores its displayed size and
its offset (``left``/``top``) from that centered position.
"""

from __future__ import annotations
import math
from typing import Tuple

from .types import Rect, Viewport, ZoomTransform
from .config import (
    SHRINK_RATIO,
    MIN_ZOOMABLE_SIZE,
    WHEEL_FACTOR_DIVISOR,
    RECENTER_NUDGE_FRACTION,
    NO_FILTER,
    CURSOR_MOVE,
)
from .logging import log


def compute_fit_size(
    natural_w: int,
    natural_h: int,
    viewport_w: float,
    viewport_h: float,
    ratio: float = SHRINK_RATIO
) -> Tuple[int, int]:
    """Compute the displayed size that fits an image into the viewport.

    Images smaller than the shrunk viewport keep their natural size; larger
    ones are scaled down proportionally.

    Args:
        natural_w: Intrinsic image width in pixels (must be > 0).
        natural_h: Intrinsic image height in pixels (must be > 0).
        viewport_w: Viewport width in pixels.
        viewport_h: Viewport height in pixels.
        ratio: Fraction of the viewport the image may occupy.

    Returns:
        (width, height) rounded to whole pixels.
    """
    width_scale = min(1.0, viewport_w * ratio / natural_w)
    height_scale = min(1.0, viewport_h * ratio / natural_h)
    scale = min(width_scale, height_scale)
    return (round(natural_w * scale), round(natural_h * scale))


def compute_fit_transform(
    natural_w: int,
    natural_h: int,
    viewport: Viewport,
    filter: str = "",
    ratio: float = SHRINK_RATIO
) -> ZoomTransform:
    """Fit transform: fitted size, position offsets cleared."""
    w, h = compute_fit_size(natural_w, natural_h, viewport.width, viewport.height, ratio)
    return ZoomTransform(filter=filter, width=w, height=h, left=0.0, top=0.0)


def clone_rect(transform: ZoomTransform, viewport: Viewport) -> Rect:
    """On-screen box of the clone for a given transform."""
    return Rect(
        x=(viewport.width - transform.width) / 2.0 + transform.left,
        y=(viewport.height - transform.height) / 2.0 + transform.top,
        width=transform.width,
        height=transform.height,
    )


def is_pannable(width: float, height: float, viewport: Viewport) -> bool:
    """Check if a displayed size reaches the viewport edge in some dimension."""
    return height >= viewport.height or width >= viewport.width


def exceeds_viewport(rect: Rect, viewport: Viewport) -> bool:
    """Check if a box is strictly larger than the viewport in some dimension."""
    return rect.width > viewport.width or rect.height > viewport.height


def cursor_for(transform: ZoomTransform, viewport: Viewport) -> str:
    """Cursor affordance for the clone: "move" when it can be dragged."""
    return CURSOR_MOVE if is_pannable(transform.width, transform.height, viewport) else ""


def wheel_zoom_factor(width: float, height: float, delta_y: float) -> float:
    """Resize factor for one wheel tick.

    Tiny clones are not shrunk any further; zooming in is always allowed.
    """
    if (height > MIN_ZOOMABLE_SIZE and width > MIN_ZOOMABLE_SIZE) or delta_y < 0:
        return 1.0 + math.sqrt(abs(delta_y)) / WHEEL_FACTOR_DIVISOR
    return 1.0


def choose_zoom_origin(
    before: Rect,
    cursor: Tuple[float, float],
    delta_y: float,
    viewport: Viewport,
    oversized: bool
) -> Tuple[float, float]:
    """Pick the screen point that stays fixed while zooming.

    Priority:
        1. The cursor, if the clone exceeds the viewport and the cursor is
           over the clone.
        2. The viewport center, when zooming out.
        3. The clone's center, when zooming in.

    Args:
        before: Clone box before resizing.
        cursor: Pointer position.
        delta_y: Wheel delta (negative zooms in).
        viewport: Viewport size.
        oversized: Whether the resized clone exceeds the viewport.
    """
    if oversized and before.contains(cursor[0], cursor[1]):
        return (float(cursor[0]), float(cursor[1]))
    if delta_y > 0:
        return viewport.center
    return before.center


def anchor_offset(
    transform: ZoomTransform,
    before: Rect,
    after: Rect,
    origin: Tuple[float, float],
    factor: float,
    zoom_in: bool
) -> ZoomTransform:
    """Reposition a resized clone so the point under ``origin`` stays put."""
    ox, oy = origin
    off_x = before.x - ox
    off_y = before.y - oy
    if zoom_in:
        target_x, target_y = ox + off_x * factor, oy + off_y * factor
    else:
        target_x, target_y = ox + off_x / factor, oy + off_y / factor
    dx = after.x - target_x
    dy = after.y - target_y
    return transform.moved_to(transform.left - dx, transform.top - dy)


def nudge_toward_center(
    transform: ZoomTransform,
    viewport: Viewport,
    fraction: float = RECENTER_NUDGE_FRACTION
) -> ZoomTransform:
    """Move the clone a fraction of the way toward the viewport center."""
    cx, cy = clone_rect(transform, viewport).center
    vcx, vcy = viewport.center
    return transform.moved_to(
        transform.left + (vcx - cx) * fraction,
        transform.top + (vcy - cy) * fraction,
    )


def apply_wheel_zoom(
    transform: ZoomTransform,
    natural_w: int,
    natural_h: int,
    viewport: Viewport,
    delta_y: float,
    cursor: Tuple[float, float]
) -> ZoomTransform:
    """Compute the clone transform after one wheel tick.

    Only the width is scaled explicitly; the height follows the image's
    natural aspect ratio. The filter is removed while measuring and
    restored on the result.

    Args:
        transform: Current clone transform.
        natural_w: Intrinsic image width.
        natural_h: Intrinsic image height.
        viewport: Viewport size.
        delta_y: Wheel delta (negative zooms in).
        cursor: Pointer position at the time of the wheel event.

    Returns:
        New ZoomTransform.
    """
    saved_filter = transform.filter
    t = transform.with_filter(NO_FILTER)

    before = clone_rect(t, viewport)
    factor = wheel_zoom_factor(t.width, t.height, delta_y)
    zoom_in = delta_y < 0

    new_w = t.width * factor if zoom_in else t.width / factor
    if natural_w > 0 and natural_h > 0:
        new_h = new_w * natural_h / natural_w
    else:
        new_h = t.height * (new_w / t.width) if t.width else t.height
    t = t.resized(new_w, new_h)

    after = clone_rect(t, viewport)
    oversized = exceeds_viewport(after, viewport)
    origin = choose_zoom_origin(before, cursor, delta_y, viewport, oversized)
    t = anchor_offset(t, before, after, origin, factor, zoom_in)

    if not oversized:
        t = nudge_toward_center(t, viewport)

    log(f"[ZOOM] dy={delta_y:+.1f} factor={factor:.4f} "
        f"size={t.width:.1f}x{t.height:.1f} offset=({t.left:.1f},{t.top:.1f})", level=3)
    return t.with_filter(saved_filter)


def apply_pan(
    start_offset: Tuple[float, float],
    start_cursor: Tuple[float, float],
    cursor: Tuple[float, float]
) -> Tuple[float, float]:
    """Offsets for a 1:1 drag from ``start_cursor`` to ``cursor``."""
    return (
        start_offset[0] + cursor[0] - start_cursor[0],
        start_offset[1] + cursor[1] - start_cursor[1],
    )
