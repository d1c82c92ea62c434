"""
Audit Log Database Models.

Append-only history of listing updates. Each entry is keyed by the listing
and a per-listing sequence number starting at 1, and records who changed
what at which ledger height.
"""

from typing import Any, Dict

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from .base import Base


class ListingUpdateModel(Base):
    """One update event applied to a listing.

    Rows are never modified or deleted once written. ``changes`` holds a list
    of ``{"field", "old", "new"}`` deltas for the fields that changed.
    """

    __tablename__ = "listing_updates"

    listing_id = Column(
        Integer, ForeignKey("listings.listing_id"), primary_key=True
    )
    update_id = Column(Integer, primary_key=True, autoincrement=False)

    # Who performed the update
    updater = Column(String(128), nullable=False, index=True)

    notes = Column(Text, nullable=False, default="")

    # Ledger height of the update
    timestamp = Column(Integer, nullable=False)

    changes = Column(JSON, nullable=False, default=list)

    # Wall-clock time the row was written
    recorded_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=func.now(),
    )

    __table_args__ = (
        Index("ix_listing_updates_listing_ts", "listing_id", "timestamp"),
    )

    def to_dict(self) -> Dict[str, Any]:
        """Convert model to dictionary."""
        return {
            "listing_id": self.listing_id,
            "update_id": self.update_id,
            "updater": self.updater,
            "notes": self.notes,
            "timestamp": self.timestamp,
            "changes": list(self.changes or []),
        }
