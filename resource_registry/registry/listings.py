"""
Listing lifecycle: creation, partial update and cancellation.

States are ``active`` and ``cancelled``; cancellation is terminal. ``sold``
and ``pending`` exist in the schema for escrow settlement but are never
entered here.
"""

from typing import Optional

from sqlalchemy.orm import Session

from ..db.audit_models import ListingUpdateModel
from ..db.audit_service import ListingAuditService, diff_fields
from ..db.models import ListingCategoryModel, ListingModel
from ..policy import PERMISSION_CANCEL, PERMISSION_UPDATE, ErrorKind, RegistryError
from ..policy.listing_gate import (
    validate_expiration,
    validate_listing_changes,
    validate_new_listing,
)
from ..schemas.listing_v1 import ListingCreateV1, ListingStatus, ListingUpdateV1
from .admin_gate import AdminGate
from .permissions import CollaboratorService

# Update payload field -> ListingModel attribute, where they differ
_ATTRIBUTE_FOR_FIELD = {"metadata": "listing_metadata"}


class ListingService:
    """Service for listing records and their classification."""

    def __init__(
        self,
        db: Session,
        gate: AdminGate,
        collaborators: CollaboratorService,
        audit: ListingAuditService,
    ):
        self.db = db
        self.gate = gate
        self.collaborators = collaborators
        self.audit = audit

    def get(self, listing_id: int) -> Optional[ListingModel]:
        return self.db.get(ListingModel, listing_id)

    def get_category(self, listing_id: int) -> Optional[ListingCategoryModel]:
        return self.db.get(ListingCategoryModel, listing_id)

    def require(self, listing_id: int, for_update: bool = False) -> ListingModel:
        listing = self.db.get(ListingModel, listing_id, with_for_update=for_update)
        if listing is None:
            raise RegistryError(
                ErrorKind.INVALID_LISTING, f"listing {listing_id} does not exist"
            )
        return listing

    def create(self, caller: str, listing: ListingCreateV1) -> ListingModel:
        """Store a new active listing and its classification.

        Raises:
            RegistryError: Paused, InvalidParam or MaxTagsExceeded
        """
        self.gate.require_not_paused()
        validate_new_listing(
            quantity=listing.quantity,
            tags=listing.tags,
            location=listing.location,
            description=listing.description,
            metadata=listing.metadata,
        )

        now = self.gate.now()
        db_listing = ListingModel(
            listing_id=self.gate.allocate_listing_id(),
            owner=caller,
            resource_type=listing.resource_type,
            quantity=listing.quantity,
            unit=listing.unit,
            location=listing.location,
            expiration=listing.expiration,
            price=listing.price,
            description=listing.description,
            listing_metadata=listing.metadata,
            status=ListingStatus.ACTIVE.value,
            created_at=now,
            last_updated=now,
            update_count=0,
        )
        self.db.add(db_listing)
        # Parent row must exist before the category row references it
        self.db.flush()
        self.db.add(
            ListingCategoryModel(
                listing_id=db_listing.listing_id,
                category=listing.category,
                tags=list(listing.tags),
            )
        )
        self.db.flush()
        return db_listing

    def update(
        self, caller: str, listing_id: int, update: ListingUpdateV1
    ) -> ListingUpdateModel:
        """Apply the supplied fields and append an audit entry.

        Raises:
            RegistryError: Paused, InvalidListing, Unauthorized, InvalidStatus,
                Expired or InvalidParam
        """
        self.gate.require_not_paused()
        listing = self.require(listing_id, for_update=True)
        self.collaborators.require_permission(listing, caller, PERMISSION_UPDATE)
        self._require_active(listing)

        now = self.gate.now()
        validate_expiration(update.expiration, now)
        validate_listing_changes(
            quantity=update.quantity,
            location=update.location,
            description=update.description,
            metadata=update.metadata,
            notes=update.notes,
        )

        supplied = update.model_dump(exclude_none=True, exclude={"notes"})
        changes = diff_fields(listing.to_dict(), supplied)
        for field, value in supplied.items():
            setattr(listing, _ATTRIBUTE_FOR_FIELD.get(field, field), value)
        listing.last_updated = now

        return self.audit.record_update(
            listing,
            updater=caller,
            notes=update.notes,
            timestamp=now,
            changes=changes,
        )

    def cancel(self, caller: str, listing_id: int) -> ListingModel:
        """Move an active listing to the terminal ``cancelled`` state.

        Raises:
            RegistryError: Paused, InvalidListing, Unauthorized or InvalidStatus
        """
        self.gate.require_not_paused()
        listing = self.require(listing_id, for_update=True)
        self.collaborators.require_permission(listing, caller, PERMISSION_CANCEL)
        self._require_active(listing)

        listing.status = ListingStatus.CANCELLED.value
        listing.last_updated = self.gate.now()
        self.db.flush()
        return listing

    @staticmethod
    def _require_active(listing: ListingModel) -> None:
        if listing.status != ListingStatus.ACTIVE.value:
            raise RegistryError(
                ErrorKind.INVALID_STATUS,
                f"listing {listing.listing_id} is {listing.status}, not active",
            )
