"""Exceptions raised along the DDR message pipeline."""

from __future__ import annotations

from typing import Optional


class DDRError(RuntimeError):
    """Base class for failures that abort handling of a single message."""


class DecodeError(DDRError):
    """Raised when an inbound body is not a valid uplink envelope."""


class ParseError(DDRError):
    """Raised when a DDR request carries an unusable coordinate."""

    def __init__(self, message: str, *, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class DDRLookupError(DDRError):
    """Raised when the DDR service cannot be reached or answers garbage."""


class BuildError(DDRError):
    """Raised when a DDR service answer cannot be encoded as a downlink."""


class RouteError(DDRError):
    """Raised when no downlink topic can be derived from an uplink topic."""
