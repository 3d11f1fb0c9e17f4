"""Image utilities - probing, decoding and source resolution helpers."""

from __future__ import annotations
import os
import struct
from typing import Optional, Tuple
from urllib.parse import unquote, urlparse

from PIL import Image

from .config import IMG_EXTS
from .logging import log


def probe_image_dimensions(filepath: str) -> Optional[Tuple[int, int]]:
    """Quickly read image dimensions from file header without loading the full image.

    Args:
        filepath: Path to image file.

    Returns:
        Tuple of (width, height) or None if unable to determine.
    """
    ext = os.path.splitext(filepath)[1].lower()
    try:
        with open(filepath, 'rb') as f:
            header = f.read(64 * 1024)

        if ext in ('.jpg', '.jpeg'):
            return _probe_jpeg(header)
        elif ext == '.png':
            return _probe_png(header)
    except OSError:
        pass
    return None


def _probe_jpeg(data: bytes) -> Optional[Tuple[int, int]]:
    """Extract dimensions from JPEG header."""
    i = 0
    while i + 9 < len(data):
        if data[i] == 0xFF:
            marker = data[i + 1]
            # SOF markers contain dimensions
            if marker in (0xC0, 0xC1, 0xC2, 0xC3):
                height = struct.unpack('>H', data[i + 5:i + 7])[0]
                width = struct.unpack('>H', data[i + 7:i + 9])[0]
                return (width, height)
            elif marker not in (0x00, 0xFF, 0xD8) and i + 3 < len(data):
                seg_len = struct.unpack('>H', data[i + 2:i + 4])[0]
                i += 2 + seg_len
            else:
                i += 1
        else:
            i += 1
    return None


def _probe_png(data: bytes) -> Optional[Tuple[int, int]]:
    """Extract dimensions from PNG header."""
    if len(data) < 24 or data[:8] != b'\x89PNG\r\n\x1a\n':
        return None
    width = struct.unpack('>I', data[16:20])[0]
    height = struct.unpack('>I', data[20:24])[0]
    return (width, height)


def decode_image_size(filepath: str) -> Optional[Tuple[int, int]]:
    """Intrinsic size of an image file.

    Uses the header probe for PNG/JPEG and Pillow for everything else (or
    when the probe fails).
    """
    dims = probe_image_dimensions(filepath)
    if dims and dims[0] > 0 and dims[1] > 0:
        return dims
    try:
        with Image.open(filepath) as img:
            return img.size
    except (OSError, ValueError) as e:
        log(f"[IMAGE][ERR] Cannot decode {filepath}: {e!r}")
        return None


def resolve_src(base_dir: str, src: str) -> Optional[str]:
    """Map an ``img`` ``src`` to a local file path, or None for remote URLs."""
    if not src:
        return None
    parsed = urlparse(src)
    if parsed.scheme in ('http', 'https', 'data'):
        return None
    path = unquote(parsed.path) if parsed.scheme in ('', 'file') else src
    if not os.path.isabs(path):
        path = os.path.join(base_dir, path)
    return os.path.normpath(path)


def is_supported_image(filepath: str) -> bool:
    """Check if file has a supported image extension."""
    ext = os.path.splitext(filepath)[1].lower()
    return ext in IMG_EXTS


def convert_for_texture(filepath: str, out_dir: str) -> Optional[str]:
    """Re-encode an image raylib cannot read (webp, tiff, ...) as PNG.

    Returns:
        Path of the PNG written into ``out_dir``, or None on failure.
    """
    name = os.path.splitext(os.path.basename(filepath))[0]
    out = os.path.join(out_dir, f"{name}-{abs(hash(filepath)):x}.png")
    if os.path.exists(out):
        return out
    try:
        with Image.open(filepath) as img:
            img.convert('RGBA').save(out, 'PNG')
    except (OSError, ValueError) as e:
        log(f"[IMAGE][ERR] Cannot convert {filepath}: {e!r}")
        return None
    log(f"[IMAGE] Converted {os.path.basename(filepath)} to PNG", level=2)
    return out
