"""
Error Taxonomy.

Every failure the dispatcher can produce maps to one ErrorKind. Startup
failures raise; per-request failures are converted into Failure values by
the executor and dispatcher.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorKind(str, Enum):
    """Discriminator transport adapters use to render failures."""

    ROUTE_NOT_FOUND = "route_not_found"
    PERMISSION_DENIED = "permission_denied"
    PARSE_ERROR = "parse_error"
    FIELD_NOT_FOUND = "field_not_found"
    TYPE_MISMATCH = "type_mismatch"
    STEP_FAILURE = "step_failure"
    CANCELLED = "cancelled"

    @property
    def status(self) -> int:
        """HTTP-equivalent status code."""
        return _STATUS_BY_KIND[self]


_STATUS_BY_KIND = {
    ErrorKind.ROUTE_NOT_FOUND: 404,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.PARSE_ERROR: 500,
    ErrorKind.FIELD_NOT_FOUND: 500,
    ErrorKind.TYPE_MISMATCH: 500,
    ErrorKind.STEP_FAILURE: 500,
    ErrorKind.CANCELLED: 499,
}


class DispatchError(Exception):
    """Base class for all dispatcher errors."""

    kind: ErrorKind = ErrorKind.STEP_FAILURE

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = dict(details or {})


class ConfigurationError(DispatchError):
    """Raised at startup when pipelines or policies are structurally invalid."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, message: str, problems: Optional[List[str]] = None) -> None:
        super().__init__(message, {"problems": list(problems or [])})
        self.problems = list(problems or [])


class RouteNotFound(DispatchError):
    """No pipeline registered for an interface/method key."""

    kind = ErrorKind.ROUTE_NOT_FOUND

    def __init__(self, interface: str, method: str) -> None:
        super().__init__(f"No route registered for {interface}::{method}")
        self.interface = interface
        self.method = method


class PermissionDenied(DispatchError):
    """Authorization gate denial. The message never names policy internals."""

    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, message: str = "Permission denied") -> None:
        super().__init__(message)


class StepError(DispatchError):
    """Raised by computation units to report their own failure."""

    kind = ErrorKind.STEP_FAILURE


class InvocationCancelled(DispatchError):
    """Invocation aborted by the caller or by the request timeout."""

    kind = ErrorKind.CANCELLED
