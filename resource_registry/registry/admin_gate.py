"""
Admin gate: pause flag, admin identity, listing id counter and ledger height.

All of this lives in the single ``registry_state`` row, which is created on
first use with the configured deployer as admin.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..db.models import REGISTRY_STATE_ID, RegistryStateModel
from ..policy import ErrorKind, RegistryError


class AdminGate:
    """Process-wide controls consulted by every mutating operation."""

    def __init__(
        self,
        db: Session,
        deployer: str,
        initial_height: int = 0,
        lock: bool = False,
    ):
        self.db = db
        self.deployer = deployer
        self.initial_height = initial_height
        # Mutating transactions hold the state row (SELECT ... FOR UPDATE)
        self.lock = lock
        self._state: Optional[RegistryStateModel] = None

    @property
    def state(self) -> RegistryStateModel:
        """Load (or lazily create) the registry state row."""
        if self._state is None:
            state = self._load()
            if state is None:
                state = self._create()
            self._state = state
        return self._state

    def _load(self) -> Optional[RegistryStateModel]:
        return self.db.get(
            RegistryStateModel, REGISTRY_STATE_ID, with_for_update=self.lock
        )

    def _create(self) -> RegistryStateModel:
        state = RegistryStateModel(
            id=REGISTRY_STATE_ID,
            paused=False,
            admin=self.deployer,
            next_listing_id=1,
            block_height=self.initial_height,
        )
        try:
            with self.db.begin_nested():
                self.db.add(state)
        except IntegrityError:
            # Created concurrently by another process
            state = self._load()
        return state

    # Guards

    def require_not_paused(self) -> None:
        if self.state.paused:
            raise RegistryError(ErrorKind.PAUSED, "registry is paused")

    def require_admin(self, caller: str) -> None:
        if caller != self.state.admin:
            raise RegistryError(
                ErrorKind.UNAUTHORIZED, f"{caller} is not the registry admin"
            )

    # Admin operations

    def pause(self, caller: str) -> None:
        self.require_admin(caller)
        self.state.paused = True

    def unpause(self, caller: str) -> None:
        self.require_admin(caller)
        self.state.paused = False

    def set_admin(self, caller: str, new_admin: str) -> None:
        """Hand the admin role to ``new_admin`` immediately."""
        self.require_admin(caller)
        self.state.admin = new_admin

    # Counters

    def now(self) -> int:
        """Current ledger height, used as the time marker of an operation."""
        return self.state.block_height

    def allocate_listing_id(self) -> int:
        """Reserve the next listing id. Ids are never handed out twice."""
        listing_id = self.state.next_listing_id
        self.state.next_listing_id = listing_id + 1
        return listing_id

    def advance(self) -> None:
        """Move the ledger height forward after a committed mutation."""
        self.state.block_height = self.state.block_height + 1
