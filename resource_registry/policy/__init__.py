"""Validation gate and error kinds for registry operations."""

from .listing_gate import (
    MAX_COLLABORATOR_PERMISSIONS,
    MAX_DESCRIPTION_LEN,
    MAX_LOCATION_LEN,
    MAX_METADATA_LEN,
    MAX_TAGS,
    MAX_UPDATE_NOTES_LEN,
    PERMISSION_CANCEL,
    PERMISSION_UPDATE,
    ErrorKind,
    RegistryError,
)

__all__ = [
    "MAX_COLLABORATOR_PERMISSIONS",
    "MAX_DESCRIPTION_LEN",
    "MAX_LOCATION_LEN",
    "MAX_METADATA_LEN",
    "MAX_TAGS",
    "MAX_UPDATE_NOTES_LEN",
    "PERMISSION_CANCEL",
    "PERMISSION_UPDATE",
    "ErrorKind",
    "RegistryError",
]
