"""Exceptions for contract violations.

Interactive operations never raise on user input; these only signal
programming errors (calling an operation whose precondition does not hold).
"""

from __future__ import annotations


class ImageFocusError(Exception):
    """Base class for imagefocus errors."""


class NotFocusedError(ImageFocusError):
    """A clone-relative operation was invoked while no image is focused."""


class OverlayMissingError(ImageFocusError):
    """The overlay element is used before setup() created it."""


class PageLoadError(ImageFocusError):
    """A page file could not be read or parsed."""


class SelectorError(ImageFocusError, ValueError):
    """A selector string uses syntax the matcher does not support."""
