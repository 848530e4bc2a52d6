"""
Failure types for the map preparation pipeline.

Every error records the operation that failed and the identifier it failed
on (geocode, map id, path or URL) so a log line is enough to diagnose it.
"""

from __future__ import annotations

from typing import Optional


class MapPrepError(Exception):
    """Base class for all map preparation failures."""

    def __init__(self, operation: str, identifier: str, detail: Optional[str] = None):
        self.operation = operation
        self.identifier = identifier
        self.detail = detail
        message = f"{operation} failed for '{identifier}'"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class CredentialMissing(MapPrepError):
    """An API key required by an external service is not configured."""


class LookupFailure(MapPrepError):
    """A geocode could not be converted to coordinates."""


class CacheCorrupt(MapPrepError):
    """The persisted location cache exists but cannot be parsed."""


class InsufficientPoints(MapPrepError):
    """A viewport was requested for zero points."""


class DegenerateViewport(MapPrepError):
    """The bounding box has no extent along one axis."""


class InvalidMarkerLabel(MapPrepError):
    """A point's title cannot produce a single-character marker label."""


class DownloadFailure(MapPrepError):
    """A remote resource could not be fetched."""


class WriteFailure(MapPrepError):
    """A local file could not be written."""


class MapSpecError(MapPrepError):
    """A map specification document is malformed."""
