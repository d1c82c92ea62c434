"""
Listing Registry V1 request and record schemas.

Request models only enforce types. Size bounds are checked by the policy gate
so that every violation surfaces with its registry error kind rather than a
generic validation error.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, constr


class ListingStatus(str, Enum):
    """Lifecycle state of a listing."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    # Reserved for escrow settlement; never set by the registry itself
    SOLD = "sold"
    PENDING = "pending"


# =============================================================================
# Requests
# =============================================================================


class ListingCreateV1(BaseModel):
    """Payload for creating a listing."""

    resource_type: str
    quantity: int
    unit: str
    location: str = ""
    expiration: Optional[int] = None
    price: Optional[int] = None
    description: str = ""
    category: str = ""
    tags: List[str] = Field(default_factory=list)
    metadata: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "resource_type": "food",
                "quantity": 1000,
                "unit": "kg",
                "location": "New York",
                "expiration": 200,
                "price": 500,
                "description": "Surplus canned goods",
                "category": "essentials",
                "tags": ["non-perishable", "donation"],
                "metadata": '{"quality": "high"}',
            }
        }
    )


class ListingUpdateV1(BaseModel):
    """Partial update; omitted fields keep their current value."""

    quantity: Optional[int] = None
    location: Optional[str] = None
    expiration: Optional[int] = None
    price: Optional[int] = None
    description: Optional[str] = None
    metadata: Optional[str] = None
    notes: str = ""


class CollaboratorCreateV1(BaseModel):
    """Grant of delegated permissions to a principal."""

    collaborator: constr(min_length=1, max_length=128)
    role: str = ""
    permissions: List[str] = Field(default_factory=list)


class VerificationCreateV1(BaseModel):
    """Third-party attestation about a listing."""

    notes: str = ""


class AdminTransferV1(BaseModel):
    """Replacement admin identity."""

    new_admin: constr(min_length=1, max_length=128)


# =============================================================================
# Records
# =============================================================================


class ListingRecord(BaseModel):
    """Snapshot of a listing."""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    listing_id: int
    owner: str
    resource_type: str
    quantity: int
    unit: str
    location: str
    expiration: Optional[int] = None
    price: Optional[int] = None
    description: str
    status: ListingStatus
    created_at: int
    last_updated: int
    metadata: Optional[str] = Field(default=None, validation_alias="listing_metadata")


class CategoryRecord(BaseModel):
    """Classification of a listing."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    category: str
    tags: List[str]


class CollaboratorRecord(BaseModel):
    """Delegated permission grant."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    principal: str
    role: str
    permissions: List[str]
    added_at: int


class UpdateRecord(BaseModel):
    """Audit log entry for one listing update."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    update_id: int
    updater: str
    notes: str
    timestamp: int
    changes: List[Dict[str, Any]] = Field(default_factory=list)


class VerificationRecord(BaseModel):
    """Latest verification of a listing."""

    model_config = ConfigDict(from_attributes=True)

    listing_id: int
    verified_by: str
    verification_notes: str
    verified_at: int


class RegistryStateRecord(BaseModel):
    """Admin gate and counters."""

    model_config = ConfigDict(from_attributes=True)

    paused: bool
    admin: str
    next_listing_id: int
    block_height: int
