"""Third-party verification of listings."""

from typing import Optional

from sqlalchemy.orm import Session

from ..db.models import ListingModel, ListingVerificationModel
from ..policy import ErrorKind, RegistryError
from .admin_gate import AdminGate


class VerificationService:
    """Keeps the latest verification per listing; later calls overwrite."""

    def __init__(self, db: Session, gate: AdminGate):
        self.db = db
        self.gate = gate

    def get(self, listing_id: int) -> Optional[ListingVerificationModel]:
        return self.db.get(ListingVerificationModel, listing_id)

    def verify(
        self, caller: str, listing_id: int, notes: str
    ) -> ListingVerificationModel:
        self.gate.require_not_paused()

        listing = self.db.get(ListingModel, listing_id)
        if listing is None:
            raise RegistryError(
                ErrorKind.INVALID_LISTING, f"listing {listing_id} does not exist"
            )
        if listing.owner == caller:
            raise RegistryError(
                ErrorKind.UNAUTHORIZED, "owners cannot verify their own listing"
            )

        record = self.get(listing_id)
        if record is None:
            record = ListingVerificationModel(listing_id=listing_id)
            self.db.add(record)
        record.verified_by = caller
        record.verification_notes = notes
        record.verified_at = self.gate.now()
        self.db.flush()
        return record
