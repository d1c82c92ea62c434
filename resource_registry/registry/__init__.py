"""
Listing lifecycle and permission engine.

Components:
    - admin_gate: pause flag, admin identity, id counter and ledger height
    - listings: create / update / cancel
    - permissions: collaborator grants and permission checks
    - verification: third-party attestations
    - service: ListingRegistry, the transactional facade over all of the above
"""

from .directory import OpenDirectory, OrganizationDirectory, StaticDirectory
from .service import ListingRegistry

__all__ = [
    "ListingRegistry",
    "OpenDirectory",
    "OrganizationDirectory",
    "StaticDirectory",
]
