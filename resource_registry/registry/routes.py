"""
Listing Registry API Routes.

The caller identity is read from the ``X-Principal`` header, which the
deployment's authenticating proxy is expected to set.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Security
from fastapi.responses import JSONResponse
from fastapi.security.api_key import APIKeyHeader

from ..db.base import get_session_local
from ..policy import ErrorKind, RegistryError
from ..schemas.listing_v1 import (
    AdminTransferV1,
    CollaboratorCreateV1,
    ListingCreateV1,
    ListingUpdateV1,
    VerificationCreateV1,
)
from .service import ListingRegistry

router = APIRouter(tags=["registry"])

principal_header = APIKeyHeader(name="X-Principal", auto_error=False)

_STATUS_FOR_ERROR = {
    ErrorKind.UNAUTHORIZED: 403,
    ErrorKind.NOT_OWNER: 403,
    ErrorKind.INVALID_LISTING: 404,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.INVALID_STATUS: 409,
    ErrorKind.PAUSED: 423,
}

_registry: Optional[ListingRegistry] = None


def get_registry() -> ListingRegistry:
    """Dependency returning the process-wide registry."""
    global _registry
    if _registry is None:
        _registry = ListingRegistry(get_session_local())
    return _registry


def get_caller(principal: Optional[str] = Security(principal_header)) -> str:
    if not principal:
        raise HTTPException(status_code=401, detail="Missing X-Principal")
    return principal


async def registry_error_handler(request: Request, exc: RegistryError) -> JSONResponse:
    """Translate a rejected operation into an HTTP error response."""
    return JSONResponse(
        status_code=_STATUS_FOR_ERROR.get(exc.code, 422),
        content={"detail": exc.to_dict()},
    )


def _found(record, what: str):
    if record is None:
        raise HTTPException(status_code=404, detail=f"{what} not found")
    return record.model_dump(mode="json")


# =============================================================================
# Admin gate
# =============================================================================


@router.get("/registry/state")
async def get_registry_state(
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Pause flag, admin identity, next listing id and ledger height."""
    return registry.get_state().model_dump()


@router.post("/registry/pause")
async def pause_registry(
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    registry.pause(caller)
    return {"status": "success", "paused": True}


@router.post("/registry/unpause")
async def unpause_registry(
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    registry.unpause(caller)
    return {"status": "success", "paused": False}


@router.put("/registry/admin")
async def set_registry_admin(
    transfer: AdminTransferV1,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    registry.set_admin(caller, transfer.new_admin)
    return {"status": "success", "admin": transfer.new_admin}


# =============================================================================
# Listings
# =============================================================================


@router.post("/listings", status_code=201)
async def create_listing(
    listing: ListingCreateV1,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Create a new listing owned by the caller."""
    listing_id = registry.create_listing(caller, **listing.model_dump())
    return {"status": "success", "listing_id": listing_id}


@router.get("/listings/{listing_id}")
async def get_listing(
    listing_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return _found(registry.get_listing(listing_id), "Listing")


@router.patch("/listings/{listing_id}")
async def update_listing(
    listing_id: int,
    update: ListingUpdateV1,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Partially update a listing; omitted fields are left unchanged."""
    entry = registry.update_listing(caller, listing_id, **update.model_dump())
    return {"status": "success", "update": entry.model_dump(mode="json")}


@router.post("/listings/{listing_id}/cancel")
async def cancel_listing(
    listing_id: int,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    listing = registry.cancel_listing(caller, listing_id)
    return {"status": "success", "listing": listing.model_dump(mode="json")}


@router.get("/listings/{listing_id}/categories")
async def get_listing_categories(
    listing_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return _found(registry.get_listing_categories(listing_id), "Categories")


# =============================================================================
# Collaborators
# =============================================================================


@router.post("/listings/{listing_id}/collaborators", status_code=201)
async def add_collaborator(
    listing_id: int,
    grant: CollaboratorCreateV1,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Delegate permissions on a listing. Owner only."""
    record = registry.add_collaborator(
        caller, listing_id, grant.collaborator, grant.role, grant.permissions
    )
    return {"status": "success", "collaborator": record.model_dump(mode="json")}


@router.get("/listings/{listing_id}/collaborators")
async def list_collaborators(
    listing_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> List[Dict[str, Any]]:
    return [
        grant.model_dump(mode="json")
        for grant in registry.list_listing_collaborators(listing_id)
    ]


@router.get("/listings/{listing_id}/collaborators/{principal}")
async def get_collaborator(
    listing_id: int,
    principal: str,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return _found(
        registry.get_listing_collaborator(listing_id, principal), "Collaborator"
    )


@router.get("/listings/{listing_id}/permissions/{principal}/{permission}")
async def check_permission(
    listing_id: int,
    principal: str,
    permission: str,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return {
        "listing_id": listing_id,
        "principal": principal,
        "permission": permission,
        "allowed": registry.has_permission(listing_id, principal, permission),
    }


# =============================================================================
# Audit log
# =============================================================================


@router.get("/listings/{listing_id}/updates")
async def list_updates(
    listing_id: int,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    registry: ListingRegistry = Depends(get_registry),
) -> List[Dict[str, Any]]:
    return [
        entry.model_dump(mode="json")
        for entry in registry.list_listing_updates(listing_id, limit, offset)
    ]


@router.get("/listings/{listing_id}/updates/{update_id}")
async def get_update(
    listing_id: int,
    update_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return _found(registry.get_listing_update(listing_id, update_id), "Update")


# =============================================================================
# Verification
# =============================================================================


@router.post("/listings/{listing_id}/verification")
async def verify_listing(
    listing_id: int,
    verification: VerificationCreateV1,
    caller: str = Depends(get_caller),
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    """Record (or replace) a third-party verification."""
    record = registry.verify_listing(caller, listing_id, verification.notes)
    return {"status": "success", "verification": record.model_dump(mode="json")}


@router.get("/listings/{listing_id}/verification")
async def get_verification(
    listing_id: int,
    registry: ListingRegistry = Depends(get_registry),
) -> Dict[str, Any]:
    return _found(registry.get_listing_verification(listing_id), "Verification")
