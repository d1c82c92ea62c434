"""
SQLAlchemy models for the Resource Listing Registry.

Every table shares the ``listing_id`` identifier space. The listing row owns
the lifecycle state; categories, collaborator grants and verifications are
satellite rows whose existence depends on the listing.
"""

from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from .base import Base

listing_status_enum = Enum(
    "active",
    "cancelled",
    "sold",
    "pending",
    name="listing_status",
)

# Single row holding the process-wide admin gate and counters.
REGISTRY_STATE_ID = 1


class RegistryStateModel(Base):
    """Admin gate, listing id counter and ledger height."""

    __tablename__ = "registry_state"

    id = Column(Integer, primary_key=True, default=REGISTRY_STATE_ID)
    paused = Column(Boolean, nullable=False, default=False)
    admin = Column(String(128), nullable=False)
    next_listing_id = Column(Integer, nullable=False, default=1)
    block_height = Column(Integer, nullable=False, default=0)

    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
        onupdate=func.now(),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "paused": self.paused,
            "admin": self.admin,
            "next_listing_id": self.next_listing_id,
            "block_height": self.block_height,
        }


class ListingModel(Base):
    """Authoritative record for one surplus resource listing."""

    __tablename__ = "listings"

    listing_id = Column(Integer, primary_key=True, autoincrement=False)
    owner = Column(String(128), nullable=False, index=True)

    # Resource facts
    resource_type = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    unit = Column(String, nullable=False)
    location = Column(String(100), nullable=False, default="")
    expiration = Column(Integer, nullable=True)
    price = Column(Integer, nullable=True)
    description = Column(Text, nullable=False, default="")
    # "metadata" is reserved on declarative classes
    listing_metadata = Column("metadata", Text, nullable=True)

    status = Column(listing_status_enum, nullable=False, default="active", index=True)

    # Ledger heights
    created_at = Column(Integer, nullable=False)
    last_updated = Column(Integer, nullable=False)

    # Number of audit entries appended so far; next update_id is this + 1
    update_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_listings_owner_status", "owner", "status"),
        Index("ix_listings_resource_type", "resource_type"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "listing_id": self.listing_id,
            "owner": self.owner,
            "resource_type": self.resource_type,
            "quantity": self.quantity,
            "unit": self.unit,
            "location": self.location,
            "expiration": self.expiration,
            "price": self.price,
            "description": self.description,
            "status": self.status,
            "created_at": self.created_at,
            "last_updated": self.last_updated,
            "metadata": self.listing_metadata,
        }


class ListingCategoryModel(Base):
    """Classification of a listing (1:1)."""

    __tablename__ = "listing_categories"

    listing_id = Column(
        Integer, ForeignKey("listings.listing_id"), primary_key=True
    )
    category = Column(String, nullable=False, default="")
    tags = Column(JSON, nullable=False, default=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "listing_id": self.listing_id,
            "category": self.category,
            "tags": list(self.tags or []),
        }


class ListingCollaboratorModel(Base):
    """Permissions delegated to one principal over one listing."""

    __tablename__ = "listing_collaborators"

    listing_id = Column(
        Integer, ForeignKey("listings.listing_id"), primary_key=True
    )
    principal = Column(String(128), primary_key=True)
    role = Column(String, nullable=False, default="")
    permissions = Column(JSON, nullable=False, default=list)
    added_at = Column(Integer, nullable=False)

    __table_args__ = (
        Index("ix_listing_collaborators_principal", "principal"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "listing_id": self.listing_id,
            "principal": self.principal,
            "role": self.role,
            "permissions": list(self.permissions or []),
            "added_at": self.added_at,
        }


class ListingVerificationModel(Base):
    """Latest third-party attestation for a listing."""

    __tablename__ = "listing_verifications"

    listing_id = Column(
        Integer, ForeignKey("listings.listing_id"), primary_key=True
    )
    verified_by = Column(String(128), nullable=False)
    verification_notes = Column(Text, nullable=False, default="")
    verified_at = Column(Integer, nullable=False)

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "listing_id": self.listing_id,
            "verified_by": self.verified_by,
            "verification_notes": self.verification_notes,
            "verified_at": self.verified_at,
        }
