"""
Collaborator grants and the permission check built on them.

Ownership implies every permission. A grant only carries the permissions it
lists. Grants cannot be updated or revoked; adding one for a principal that
already holds a grant on the same listing is rejected.
"""

from typing import List, Optional, Sequence

from sqlalchemy.orm import Session

from ..db.models import ListingCollaboratorModel, ListingModel
from ..policy import ErrorKind, RegistryError
from ..policy.listing_gate import validate_permissions
from .admin_gate import AdminGate


class CollaboratorService:
    """Service for delegated permissions over listings."""

    def __init__(self, db: Session, gate: AdminGate):
        self.db = db
        self.gate = gate

    def get_grant(
        self, listing_id: int, principal: str
    ) -> Optional[ListingCollaboratorModel]:
        return self.db.get(ListingCollaboratorModel, (listing_id, principal))

    def list_grants(self, listing_id: int) -> List[ListingCollaboratorModel]:
        return (
            self.db.query(ListingCollaboratorModel)
            .filter(ListingCollaboratorModel.listing_id == listing_id)
            .order_by(
                ListingCollaboratorModel.added_at,
                ListingCollaboratorModel.principal,
            )
            .all()
        )

    def has_permission(self, listing_id: int, caller: str, permission: str) -> bool:
        """True if ``caller`` owns the listing or holds a grant listing ``permission``.

        A missing listing yields False rather than an error.
        """
        listing = self.db.get(ListingModel, listing_id)
        if listing is None:
            return False
        return self._allows(listing, caller, permission)

    def require_permission(
        self, listing: ListingModel, caller: str, permission: str
    ) -> None:
        if not self._allows(listing, caller, permission):
            raise RegistryError(
                ErrorKind.UNAUTHORIZED,
                f"{caller} lacks '{permission}' permission on listing "
                f"{listing.listing_id}",
            )

    def _allows(self, listing: ListingModel, caller: str, permission: str) -> bool:
        if listing.owner == caller:
            return True
        grant = self.get_grant(listing.listing_id, caller)
        return grant is not None and permission in (grant.permissions or [])

    def add(
        self,
        caller: str,
        listing_id: int,
        collaborator: str,
        role: str,
        permissions: Sequence[str],
    ) -> ListingCollaboratorModel:
        """Grant ``permissions`` on a listing to ``collaborator``.

        Raises:
            RegistryError: Paused, InvalidListing, NotOwner,
                MaxCollaboratorsExceeded or AlreadyExists
        """
        self.gate.require_not_paused()

        listing = self.db.get(ListingModel, listing_id)
        if listing is None:
            raise RegistryError(
                ErrorKind.INVALID_LISTING, f"listing {listing_id} does not exist"
            )
        if listing.owner != caller:
            raise RegistryError(
                ErrorKind.NOT_OWNER,
                f"only the owner of listing {listing_id} may add collaborators",
            )
        validate_permissions(permissions)
        if self.get_grant(listing_id, collaborator) is not None:
            raise RegistryError(
                ErrorKind.ALREADY_EXISTS,
                f"{collaborator} already collaborates on listing {listing_id}",
            )

        grant = ListingCollaboratorModel(
            listing_id=listing_id,
            principal=collaborator,
            role=role,
            permissions=list(permissions),
            added_at=self.gate.now(),
        )
        self.db.add(grant)
        self.db.flush()
        return grant
