"""
Database package for the Resource Listing Registry.
"""

from .audit_models import ListingUpdateModel
from .base import Base, get_db, get_engine, get_session_local
from .models import (
    ListingCategoryModel,
    ListingCollaboratorModel,
    ListingModel,
    ListingVerificationModel,
    RegistryStateModel,
)

__all__ = [
    "Base",
    "get_db",
    "get_engine",
    "get_session_local",
    "ListingCategoryModel",
    "ListingCollaboratorModel",
    "ListingModel",
    "ListingUpdateModel",
    "ListingVerificationModel",
    "RegistryStateModel",
]
