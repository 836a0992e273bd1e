"""Public runtime exception types."""

from __future__ import annotations


class UnknownStatePathError(KeyError):
    """Raised when assigning a path outside the state record's closed path set."""

    def __init__(self, path: str) -> None:
        super().__init__(path)
        self.path = path

    def __str__(self) -> str:
        return f"unknown state path: {self.path!r}"


class MissingAnchorError(LookupError):
    """Raised when a required surface (visual anchor) is not registered."""

    def __init__(self, anchor_ids: tuple[str, ...]) -> None:
        super().__init__(", ".join(anchor_ids))
        self.anchor_ids = anchor_ids


__all__ = ["MissingAnchorError", "UnknownStatePathError"]
