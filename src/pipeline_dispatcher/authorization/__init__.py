"""
Authorization Package - Deny-by-Default Route Policies.

Components:
    - AuthorizationPolicy: Per-route requirements (unauthenticated, permissions, roles)
    - MatchMode: all-of or any-of combination of requirements
    - AuthorizationGate: Immutable policy table evaluated once per invocation
    - Decision: Allow, or Deny with an internal reason
"""

from pipeline_dispatcher.authorization.gate import AuthorizationGate, Decision
from pipeline_dispatcher.authorization.policy import AuthorizationPolicy, MatchMode

__all__ = ["AuthorizationGate", "AuthorizationPolicy", "Decision", "MatchMode"]
