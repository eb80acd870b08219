"""
Authorization Gate - Deny-by-Default Route Policy Check.

Evaluation order:
    1. No policy for the route: deny
    2. Policy marks the route unauthenticated: allow
    3. Otherwise the caller must hold valid claims satisfying the policy

The gate is a pure function of its policy table and the caller's claims.
It performs no I/O and holds no mutable state after construction.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from pipeline_dispatcher.authorization.policy import AuthorizationPolicy
from pipeline_dispatcher.domain.entities import Claims, Failure, RouteKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Decision:
    """Outcome of an authorization check.

    ``reason`` is for logs and audit only. It is never sent to callers;
    denials render through ``failure()`` with a fixed shape.
    """

    allowed: bool
    reason: str = ""

    @classmethod
    def allow(cls, reason: str = "allowed") -> "Decision":
        return cls(True, reason)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(False, reason)

    def failure(self) -> Failure:
        return Failure.permission_denied()

    def __bool__(self) -> bool:
        return self.allowed


class AuthorizationGate:
    """Immutable per-route policy table."""

    def __init__(self, policies: Optional[Mapping[RouteKey, AuthorizationPolicy]] = None) -> None:
        """
        Initialize the gate.

        Args:
            policies: Route -> policy. Routes without an entry are denied.
        """
        self._policies = MappingProxyType(dict(policies or {}))
        for key, policy in self._policies.items():
            if policy.unauthenticated and policy.has_requirements:
                logger.warning(
                    f"Route {key} is unauthenticated; its permission/role requirements are ignored"
                )

    @classmethod
    def from_entries(
        cls, entries: Iterable[Tuple[str, str, AuthorizationPolicy]]
    ) -> "AuthorizationGate":
        policies: Dict[RouteKey, AuthorizationPolicy] = {}
        for interface, method, policy in entries:
            policies[RouteKey(interface, method)] = policy
        return cls(policies)

    def check(
        self,
        interface: str,
        method: str,
        claims: Optional[Claims],
    ) -> Decision:
        """
        Decide whether the caller may invoke a route.

        Args:
            interface: Interface name
            method: Method name
            claims: Caller claims, or None when the caller presented none

        Returns:
            Decision (allow, or deny with an internal reason)
        """
        route = RouteKey(interface, method)
        policy = self._policies.get(route)

        if policy is None:
            return Decision.deny(f"no authorization policy for {route}")

        if policy.unauthenticated:
            return Decision.allow("route is unauthenticated")

        if claims is None or not claims.is_authenticated:
            return Decision.deny(f"missing or invalid claims for {route}")

        if not policy.is_satisfied_by(claims):
            return Decision.deny(
                f"claims of {claims.subject!r} do not satisfy {policy.describe()} for {route}"
            )

        return Decision.allow(f"{claims.subject!r} satisfies {policy.describe()}")

    def policy_for(self, interface: str, method: str) -> Optional[AuthorizationPolicy]:
        return self._policies.get(RouteKey(interface, method))

    def __len__(self) -> int:
        return len(self._policies)

    def __repr__(self) -> str:
        return f"AuthorizationGate(policies={len(self._policies)})"
