"""
Audit Log Service.

Appends and queries listing update history. Update ids are taken from the
listing's own ``update_count`` counter rather than by counting rows, so
appending is O(1) and the sequence cannot skip or repeat within a
transaction.
"""

from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy.orm import Session

from .audit_models import ListingUpdateModel
from .models import ListingModel


def diff_fields(
    before: Mapping[str, Any], after: Mapping[str, Any]
) -> List[Dict[str, Any]]:
    """Return ``{"field", "old", "new"}`` entries for keys whose value changed.

    Keys are reported in the order they appear in ``after``.
    """
    changes = []
    for field, new in after.items():
        old = before.get(field)
        if old != new:
            changes.append({"field": field, "old": old, "new": new})
    return changes


class ListingAuditService:
    """Service for the append-only listing update log.

    Usage:
        audit = ListingAuditService(db_session)
        audit.record_update(listing, updater="ngo_1", notes="Quantity reduced",
                            timestamp=height, changes=changes)

    The caller owns the transaction; entries are flushed, never committed here.
    """

    def __init__(self, db: Session):
        self.db = db

    def record_update(
        self,
        listing: ListingModel,
        updater: str,
        notes: str,
        timestamp: int,
        changes: Optional[List[Dict[str, Any]]] = None,
    ) -> ListingUpdateModel:
        """Append one entry for ``listing`` and advance its counter.

        Args:
            listing: The listing being updated (must be attached to the session)
            updater: Identity that performed the update
            notes: Free-text notes supplied with the update
            timestamp: Ledger height of the update
            changes: Field deltas, as produced by diff_fields()

        Returns:
            The created ListingUpdateModel
        """
        listing.update_count = (listing.update_count or 0) + 1
        entry = ListingUpdateModel(
            listing_id=listing.listing_id,
            update_id=listing.update_count,
            updater=updater,
            notes=notes,
            timestamp=timestamp,
            changes=list(changes or []),
        )

        self.db.add(entry)
        self.db.flush()
        return entry

    # Query methods

    def get_update(
        self, listing_id: int, update_id: int
    ) -> Optional[ListingUpdateModel]:
        """Get a single entry by its (listing, sequence) key."""
        return self.db.get(ListingUpdateModel, (listing_id, update_id))

    def query_by_listing(
        self,
        listing_id: int,
        limit: int = 100,
        offset: int = 0,
    ) -> List[ListingUpdateModel]:
        """Get the history of a listing, oldest first."""
        return (
            self.db.query(ListingUpdateModel)
            .filter(ListingUpdateModel.listing_id == listing_id)
            .order_by(ListingUpdateModel.update_id)
            .offset(offset)
            .limit(limit)
            .all()
        )
