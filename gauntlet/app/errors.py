"""Stage-flow exception types."""

from __future__ import annotations


class CapturePermissionDenied(PermissionError):
    """Capture-device access was refused or timed out."""


class CaptureUnavailable(RuntimeError):
    """No capture device is present on this host."""
