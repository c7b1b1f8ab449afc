from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class RowError:
    """One violation found on a draft row (row is 0-based)."""

    row: int
    field: str
    message: str


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, errors: Optional[Sequence[RowError]] = None):
        super().__init__(message)
        self.errors: list[RowError] = list(errors or [])


class NotFoundError(DomainError):
    """Raised when the record an action targets does not exist."""


class PersistenceError(DomainError):
    """Raised when the storage layer rejects a write; nothing was applied."""
