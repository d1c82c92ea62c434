"""
Validation gate for listing registry operations.

Pure, testable checks on the size and value bounds that form part of the
registry's external contract. Each check raises a RegistryError with a stable
error kind; none of them touch the database.

Bounds (V1):
- tags: at most 10 entries
- collaborator permission list: at most 5 entries
- metadata: at most 500 characters
- description: at most 1000 characters
- location: at most 100 characters
- update notes: at most 200 characters
- quantity: strictly positive
"""

from __future__ import annotations

import enum
from typing import Any, Dict, Optional, Sequence

MAX_TAGS = 10
MAX_COLLABORATOR_PERMISSIONS = 5
MAX_METADATA_LEN = 500
MAX_DESCRIPTION_LEN = 1000
MAX_LOCATION_LEN = 100
MAX_UPDATE_NOTES_LEN = 200

PERMISSION_UPDATE = "update"
PERMISSION_CANCEL = "cancel"


class ErrorKind(str, enum.Enum):
    """Stable error kinds returned by registry operations."""

    UNAUTHORIZED = "Unauthorized"
    INVALID_LISTING = "InvalidListing"
    ALREADY_EXISTS = "AlreadyExists"
    INVALID_PARAM = "InvalidParam"
    PAUSED = "Paused"
    EXPIRED = "Expired"
    MAX_TAGS_EXCEEDED = "MaxTagsExceeded"
    MAX_COLLABORATORS_EXCEEDED = "MaxCollaboratorsExceeded"
    NOT_OWNER = "NotOwner"
    INVALID_STATUS = "InvalidStatus"

    @property
    def numeric_code(self) -> int:
        """Legacy numeric code (100-109) used by existing deployments."""
        return _NUMERIC_CODES[self]


_NUMERIC_CODES = {kind: 100 + index for index, kind in enumerate(ErrorKind)}


class RegistryError(Exception):
    """
    Raised when a registry operation is rejected.

    Attributes:
        code: Stable error kind for programmatic handling
        message: Human-readable error description
    """

    def __init__(self, code: ErrorKind, message: str):
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for JSON serialization."""
        return {
            "error": "registry_violation",
            "code": self.code.value,
            "numeric_code": self.code.numeric_code,
            "message": self.message,
        }


def _check_length(field: str, value: Optional[str], limit: int) -> None:
    if value is not None and len(value) > limit:
        raise RegistryError(
            ErrorKind.INVALID_PARAM,
            f"{field} is {len(value)} characters; maximum is {limit}",
        )


def validate_quantity(quantity: int) -> None:
    """Quantities must be strictly positive."""
    if quantity <= 0:
        raise RegistryError(
            ErrorKind.INVALID_PARAM,
            f"quantity must be greater than zero, got {quantity}",
        )


def validate_tags(tags: Sequence[str]) -> None:
    """Validate tag list size."""
    if len(tags) > MAX_TAGS:
        raise RegistryError(
            ErrorKind.MAX_TAGS_EXCEEDED,
            f"{len(tags)} tags supplied; maximum is {MAX_TAGS}",
        )


def validate_listing_text(
    *,
    location: Optional[str] = None,
    description: Optional[str] = None,
    metadata: Optional[str] = None,
) -> None:
    """Validate the bounded free-text fields of a listing."""
    _check_length("description", description, MAX_DESCRIPTION_LEN)
    _check_length("location", location, MAX_LOCATION_LEN)
    _check_length("metadata", metadata, MAX_METADATA_LEN)


def validate_new_listing(
    *,
    quantity: int,
    tags: Sequence[str],
    location: str,
    description: str,
    metadata: Optional[str],
) -> None:
    """
    Validate creation inputs.

    Checks run in a fixed order so that a request violating several bounds
    always reports the same error kind: quantity, tags, then text lengths.

    Raises:
        RegistryError: If any bound is violated
    """
    validate_quantity(quantity)
    validate_tags(tags)
    validate_listing_text(
        location=location, description=description, metadata=metadata
    )


def validate_listing_changes(
    *,
    quantity: Optional[int],
    location: Optional[str],
    description: Optional[str],
    metadata: Optional[str],
    notes: str,
) -> None:
    """Validate the supplied fields of a partial update and its notes."""
    if quantity is not None:
        validate_quantity(quantity)
    validate_listing_text(
        location=location, description=description, metadata=metadata
    )
    _check_length("notes", notes, MAX_UPDATE_NOTES_LEN)


def validate_expiration(expiration: Optional[int], now: int) -> None:
    """A new expiration must lie strictly in the future."""
    if expiration is not None and expiration <= now:
        raise RegistryError(
            ErrorKind.EXPIRED,
            f"expiration {expiration} is not after current height {now}",
        )


def validate_permissions(permissions: Sequence[str]) -> None:
    """Validate the size of a collaborator permission list."""
    if len(permissions) > MAX_COLLABORATOR_PERMISSIONS:
        raise RegistryError(
            ErrorKind.MAX_COLLABORATORS_EXCEEDED,
            f"{len(permissions)} permissions supplied; "
            f"maximum is {MAX_COLLABORATOR_PERMISSIONS}",
        )
