"""
Resource Listing Registry

Shared ledger of surplus resource listings with access-controlled mutation,
collaborator delegation, verification and audit history.
"""

import importlib.metadata

__version__ = importlib.metadata.version("resource-registry")

from .policy import ErrorKind, RegistryError
from .registry import ListingRegistry, OpenDirectory, StaticDirectory

__all__ = [
    "ErrorKind",
    "ListingRegistry",
    "OpenDirectory",
    "RegistryError",
    "StaticDirectory",
]
