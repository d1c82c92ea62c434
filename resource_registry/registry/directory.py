"""
Organization directory capability.

Whether a principal is a registered, verified organization is decided by an
external registry. The listing registry only consults it and records the
answer in its logs; it never rejects a caller on that basis.
"""

from typing import FrozenSet, Iterable, Protocol


class OrganizationDirectory(Protocol):
    """Answers whether a principal is a verified organization."""

    def is_verified_organization(self, principal: str) -> bool: ...


class OpenDirectory:
    """Directory that treats every principal as verified."""

    def is_verified_organization(self, principal: str) -> bool:
        return True


class StaticDirectory:
    """Directory backed by a fixed set of verified principals."""

    def __init__(self, verified: Iterable[str]):
        self.verified: FrozenSet[str] = frozenset(verified)

    def is_verified_organization(self, principal: str) -> bool:
        return principal in self.verified
