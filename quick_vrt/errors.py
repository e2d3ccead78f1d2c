"""Error taxonomy for capture, diff, and command-line failures."""

from __future__ import annotations


class VRTError(Exception):
    """Base class for all quick-vrt errors."""


class NavigationError(VRTError):
    """A page failed to load within the navigation timeout."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Navigation to {url} failed"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class ScreenshotError(VRTError):
    """A full-page screenshot failed even after the retry."""

    def __init__(self, url: str, reason: str = ""):
        self.url = url
        self.reason = reason
        message = f"Screenshot of {url} failed after retry"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class DecodeError(VRTError):
    """An image file is missing, unreadable, or corrupt."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        message = f"Could not decode image {path}"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class UsageError(VRTError):
    """Malformed command-line input, pairs file entry, or missing argument."""


class DimensionMismatchWarning(UserWarning):
    """Two screenshots differ in size; the diff reconciled their geometry."""
