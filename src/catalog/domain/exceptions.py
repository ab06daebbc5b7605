"""Domain-level exceptions.

Every failure that crosses the service boundary is a CatalogError carrying
a machine-readable ``kind`` and an ordered list of messages, so callers can
branch on the kind without string matching. The CLI layer catches the base
class uniformly and displays the joined messages.

A missing product, variant or image is NOT an exception: lookups return
``None`` and the caller maps that to its own "not found" response.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    VALIDATION = "VALIDATION"
    INVARIANT = "INVARIANT"
    STORAGE = "STORAGE"
    REMOTE = "REMOTE"


class CatalogError(Exception):
    """Base class for all catalog errors."""

    kind: ErrorKind

    def __init__(self, errors: str | list[str]) -> None:
        if isinstance(errors, str):
            errors = [errors]
        self.errors: list[str] = list(errors)
        super().__init__("; ".join(self.errors))


class ValidationError(CatalogError):
    """Input failed shape or range rules."""

    kind = ErrorKind.VALIDATION


class InvariantViolation(CatalogError):
    """A business rule of the aggregate would be broken."""

    kind = ErrorKind.INVARIANT


class StorageFailure(CatalogError):
    """The backing file could not be read or written."""

    kind = ErrorKind.STORAGE


class RemoteCatalogError(CatalogError):
    """The remote commerce platform rejected or failed a request."""

    kind = ErrorKind.REMOTE
