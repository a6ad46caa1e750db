"""Exception hierarchy for the listings core."""

from dataclasses import dataclass
from typing import List


@dataclass
class FieldError:
    """A single validation problem located by a dotted field path."""

    path: str
    message: str

    def to_dict(self) -> dict:
        return {"path": self.path, "message": self.message}


class MarketplaceError(Exception):
    """Base exception for all marketplace errors."""


class ValidationFailed(MarketplaceError):
    """Raised when a payload violates the property schema."""

    def __init__(self, errors: List[FieldError]):
        self.errors = errors
        super().__init__(f"Validation failed with {len(errors)} error(s)")


class NotFound(MarketplaceError):
    """Raised when a referenced property or user does not exist or is hidden."""


class Conflict(MarketplaceError):
    """Raised when a uniqueness constraint rejects a write."""


class GenerationExhausted(MarketplaceError):
    """Raised when identifier generation runs out of attempts."""


class StorageError(MarketplaceError):
    """Raised when the storage engine fails; the original error is chained."""
