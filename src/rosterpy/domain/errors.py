"""Domain error definitions."""

from __future__ import annotations


class RosterpyError(Exception):
    """Base class for errors raised by explicit user-driven operations."""


class MemberEditError(RosterpyError, ValueError):
    """Raised when an explicit roster edit names an unknown or protected field."""


class UnknownEntityError(RosterpyError, LookupError):
    """Raised when a user choice references an entity that does not exist."""


class RecordExtractionError(RosterpyError, ValueError):
    """Raised when a pasted export row carries no usable cells."""
