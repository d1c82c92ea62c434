"""
Listing Registry facade.

Every public operation runs as one atomic step: a process-wide lock is held
for the duration of a single database transaction, which commits when the
operation succeeds and rolls back on any error. Mutations also lock the
registry state row (BEGIN IMMEDIATE on SQLite), so writers in other processes
sharing the database are serialized too. Mutations advance the ledger height
as their last step, so a rejected call leaves no trace at all.

Usage:
    registry = ListingRegistry(get_session_local())
    listing_id = registry.create_listing("ngo_1", "food", 1000, "kg", "New York")
    registry.update_listing("ngo_1", listing_id, quantity=500, notes="Half gone")
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, TypeVar

import structlog
from sqlalchemy.orm import Session, sessionmaker

from ..config import get_settings
from ..db.audit_service import ListingAuditService
from ..policy import RegistryError
from ..schemas.listing_v1 import (
    CategoryRecord,
    CollaboratorRecord,
    ListingCreateV1,
    ListingRecord,
    ListingUpdateV1,
    RegistryStateRecord,
    UpdateRecord,
    VerificationRecord,
)
from .admin_gate import AdminGate
from .directory import OpenDirectory, OrganizationDirectory
from .listings import ListingService
from .permissions import CollaboratorService
from .verification import VerificationService

logger = structlog.get_logger()

T = TypeVar("T")


@dataclass
class RegistryServices:
    """Services bound to one transaction's session."""

    db: Session
    gate: AdminGate
    audit: ListingAuditService
    collaborators: CollaboratorService
    listings: ListingService
    verifications: VerificationService


class ListingRegistry:
    """Serialized, transactional entry point for every registry operation."""

    def __init__(
        self,
        session_factory: sessionmaker,
        *,
        deployer: Optional[str] = None,
        initial_height: Optional[int] = None,
        directory: Optional[OrganizationDirectory] = None,
    ):
        settings = get_settings()
        self._session_factory = session_factory
        self.deployer = deployer if deployer is not None else settings.registry_deployer
        self.initial_height = (
            initial_height
            if initial_height is not None
            else settings.registry_initial_height
        )
        self.directory = directory or OpenDirectory()
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # Transaction boundary
    # ------------------------------------------------------------------

    @contextmanager
    def transaction(self, lock: bool = False) -> Iterator[RegistryServices]:
        """Hold the registry lock around one commit-or-rollback session.

        With ``lock`` the registry state row is also locked in the database,
        which serializes mutations across processes.
        """
        with self._lock:
            db = self._session_factory()
            try:
                yield self._bind(db, lock)
                db.commit()
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def _bind(self, db: Session, lock: bool) -> RegistryServices:
        gate = AdminGate(db, self.deployer, self.initial_height, lock=lock)
        audit = ListingAuditService(db)
        collaborators = CollaboratorService(db, gate)
        return RegistryServices(
            db=db,
            gate=gate,
            audit=audit,
            collaborators=collaborators,
            listings=ListingService(db, gate, collaborators, audit),
            verifications=VerificationService(db, gate),
        )

    def _mutate(
        self,
        operation: str,
        caller: str,
        apply: Callable[[RegistryServices], T],
        **context,
    ) -> T:
        log = logger.bind(operation=operation, caller=caller, **context)
        try:
            with self.transaction(lock=True) as services:
                result = apply(services)
                services.gate.advance()
        except RegistryError as exc:
            log.warning(
                "registry_operation_rejected",
                error_code=exc.code.value,
                reason=exc.message,
            )
            raise
        log.info("registry_operation_committed")
        return result

    def _read(self, query: Callable[[RegistryServices], T]) -> T:
        with self.transaction() as services:
            return query(services)

    # ------------------------------------------------------------------
    # Admin gate
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> None:
        self._mutate("pause", caller, lambda s: s.gate.pause(caller))

    def unpause(self, caller: str) -> None:
        self._mutate("unpause", caller, lambda s: s.gate.unpause(caller))

    def set_admin(self, caller: str, new_admin: str) -> None:
        self._mutate(
            "set_admin",
            caller,
            lambda s: s.gate.set_admin(caller, new_admin),
            new_admin=new_admin,
        )

    def is_paused(self) -> bool:
        return self._read(lambda s: s.gate.state.paused)

    def get_admin(self) -> str:
        return self._read(lambda s: s.gate.state.admin)

    def get_next_listing_id(self) -> int:
        return self._read(lambda s: s.gate.state.next_listing_id)

    def get_current_height(self) -> int:
        return self._read(lambda s: s.gate.now())

    def get_state(self) -> RegistryStateRecord:
        return self._read(lambda s: RegistryStateRecord.model_validate(s.gate.state))

    # ------------------------------------------------------------------
    # Listing lifecycle
    # ------------------------------------------------------------------

    def create_listing(
        self,
        caller: str,
        resource_type: str,
        quantity: int,
        unit: str,
        location: str = "",
        expiration: Optional[int] = None,
        price: Optional[int] = None,
        description: str = "",
        category: str = "",
        tags: Sequence[str] = (),
        metadata: Optional[str] = None,
    ) -> int:
        """Create an active listing owned by ``caller`` and return its id."""
        payload = ListingCreateV1(
            resource_type=resource_type,
            quantity=quantity,
            unit=unit,
            location=location,
            expiration=expiration,
            price=price,
            description=description,
            category=category,
            tags=list(tags),
            metadata=metadata,
        )
        listing_id = self._mutate(
            "create_listing",
            caller,
            lambda s: s.listings.create(caller, payload).listing_id,
        )
        if not self.directory.is_verified_organization(caller):
            logger.warning(
                "listing_creator_unverified", caller=caller, listing_id=listing_id
            )
        return listing_id

    def update_listing(
        self,
        caller: str,
        listing_id: int,
        *,
        quantity: Optional[int] = None,
        location: Optional[str] = None,
        expiration: Optional[int] = None,
        price: Optional[int] = None,
        description: Optional[str] = None,
        metadata: Optional[str] = None,
        notes: str = "",
    ) -> UpdateRecord:
        """Apply a partial update and return the audit entry it produced."""
        update = ListingUpdateV1(
            quantity=quantity,
            location=location,
            expiration=expiration,
            price=price,
            description=description,
            metadata=metadata,
            notes=notes,
        )
        return self._mutate(
            "update_listing",
            caller,
            lambda s: UpdateRecord.model_validate(
                s.listings.update(caller, listing_id, update)
            ),
            listing_id=listing_id,
        )

    def cancel_listing(self, caller: str, listing_id: int) -> ListingRecord:
        return self._mutate(
            "cancel_listing",
            caller,
            lambda s: ListingRecord.model_validate(s.listings.cancel(caller, listing_id)),
            listing_id=listing_id,
        )

    def get_listing(self, listing_id: int) -> Optional[ListingRecord]:
        return self._read(
            lambda s: _record(ListingRecord, s.listings.get(listing_id))
        )

    def get_listing_categories(self, listing_id: int) -> Optional[CategoryRecord]:
        return self._read(
            lambda s: _record(CategoryRecord, s.listings.get_category(listing_id))
        )

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    def add_collaborator(
        self,
        caller: str,
        listing_id: int,
        collaborator: str,
        role: str,
        permissions: Sequence[str],
    ) -> CollaboratorRecord:
        return self._mutate(
            "add_collaborator",
            caller,
            lambda s: CollaboratorRecord.model_validate(
                s.collaborators.add(caller, listing_id, collaborator, role, permissions)
            ),
            listing_id=listing_id,
            collaborator=collaborator,
        )

    def has_permission(self, listing_id: int, caller: str, permission: str) -> bool:
        return self._read(
            lambda s: s.collaborators.has_permission(listing_id, caller, permission)
        )

    def get_listing_collaborator(
        self, listing_id: int, collaborator: str
    ) -> Optional[CollaboratorRecord]:
        return self._read(
            lambda s: _record(
                CollaboratorRecord, s.collaborators.get_grant(listing_id, collaborator)
            )
        )

    def list_listing_collaborators(self, listing_id: int) -> List[CollaboratorRecord]:
        return self._read(
            lambda s: [
                CollaboratorRecord.model_validate(grant)
                for grant in s.collaborators.list_grants(listing_id)
            ]
        )

    # ------------------------------------------------------------------
    # Audit log
    # ------------------------------------------------------------------

    def get_listing_update(
        self, listing_id: int, update_id: int
    ) -> Optional[UpdateRecord]:
        return self._read(
            lambda s: _record(UpdateRecord, s.audit.get_update(listing_id, update_id))
        )

    def list_listing_updates(
        self, listing_id: int, limit: int = 100, offset: int = 0
    ) -> List[UpdateRecord]:
        return self._read(
            lambda s: [
                UpdateRecord.model_validate(entry)
                for entry in s.audit.query_by_listing(listing_id, limit, offset)
            ]
        )

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify_listing(
        self, caller: str, listing_id: int, notes: str
    ) -> VerificationRecord:
        return self._mutate(
            "verify_listing",
            caller,
            lambda s: VerificationRecord.model_validate(
                s.verifications.verify(caller, listing_id, notes)
            ),
            listing_id=listing_id,
        )

    def get_listing_verification(
        self, listing_id: int
    ) -> Optional[VerificationRecord]:
        return self._read(
            lambda s: _record(VerificationRecord, s.verifications.get(listing_id))
        )


def _record(schema, row):
    return schema.model_validate(row) if row is not None else None
