"""
Administrator authorization for the manual dispatch API.

Authentication is external; callers arrive with an identity string (or None).
The policy only answers whether that identity may act as an administrator.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from .errors import NotAuthenticatedError, NotAuthorizedError


class AdminPolicy(ABC):
    @abstractmethod
    def is_administrator(self, identity: str) -> bool: ...

    def require(self, identity: str | None) -> str:
        """Return the identity if it is an administrator, else raise."""
        if not identity:
            raise NotAuthenticatedError()
        if not self.is_administrator(identity):
            raise NotAuthorizedError()
        return identity


class StaticAdminPolicy(AdminPolicy):
    """Fixed set of administrator identities, usually from auth.admin_ids."""

    def __init__(self, admin_ids: Iterable[str]) -> None:
        self._admin_ids = frozenset(admin_ids)

    def is_administrator(self, identity: str) -> bool:
        return identity in self._admin_ids

    def __repr__(self) -> str:
        return f"StaticAdminPolicy(admins={len(self._admin_ids)})"
