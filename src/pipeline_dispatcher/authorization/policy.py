"""
Authorization Policies.

One policy per route. A route is either open to unauthenticated callers or
requires an authenticated caller whose claims satisfy the policy's required
permissions and roles. ``match`` decides whether all requirements must hold
or any single one is enough.
"""

from __future__ import annotations

from enum import Enum
from typing import FrozenSet, Optional

from pydantic import BaseModel, Field

from pipeline_dispatcher.domain.entities import Claims


class MatchMode(str, Enum):
    """How multiple requirements combine."""

    ALL = "all"
    ANY = "any"


class AuthorizationPolicy(BaseModel):
    """Policy entry for one route."""

    unauthenticated: bool = Field(
        default=False, description="Allow every caller, with or without claims"
    )
    permissions: FrozenSet[str] = Field(default_factory=frozenset)
    roles: FrozenSet[str] = Field(default_factory=frozenset)
    match: MatchMode = MatchMode.ALL

    model_config = {"frozen": True}

    @classmethod
    def open(cls) -> "AuthorizationPolicy":
        return cls(unauthenticated=True)

    @classmethod
    def requiring(
        cls,
        *permissions: str,
        roles: Optional[FrozenSet[str]] = None,
        match: MatchMode = MatchMode.ALL,
    ) -> "AuthorizationPolicy":
        return cls(
            permissions=frozenset(permissions),
            roles=frozenset(roles or ()),
            match=match,
        )

    @property
    def has_requirements(self) -> bool:
        return bool(self.permissions or self.roles)

    def is_satisfied_by(self, claims: Claims) -> bool:
        """Whether authenticated ``claims`` meet the permission/role requirements."""
        if not self.has_requirements:
            return True

        if self.match is MatchMode.ALL:
            return self.permissions <= claims.permissions and self.roles <= claims.roles

        return bool(
            (self.permissions & claims.permissions) or (self.roles & claims.roles)
        )

    def describe(self) -> str:
        if self.unauthenticated:
            return "unauthenticated"
        if not self.has_requirements:
            return "authenticated"
        parts = sorted(self.permissions) + [f"role:{r}" for r in sorted(self.roles)]
        return f"{self.match.value}-of({', '.join(parts)})"
