"""Error types raised by the WordSmith core."""

from __future__ import annotations


class EmptyWordError(ValueError):
    """The search word is empty or whitespace only."""


class ServiceError(RuntimeError):
    """The collocation service call failed or returned unusable output."""


class StorageError(RuntimeError):
    """The persisted history slot could not be read or written."""
