"""
Core Domain Entities.

This module defines the fundamental entities of the dispatcher: routes,
pipelines and steps, caller claims, and the result of one invocation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

from pydantic import BaseModel, Field

from pipeline_dispatcher.domain.errors import DispatchError, ErrorKind, PermissionDenied
from pipeline_dispatcher.expression.values import MapNode, compile_mapping


@dataclass(frozen=True, order=True)
class RouteKey:
    """Identifies a route by interface and method name."""

    interface: str
    method: str

    def __str__(self) -> str:
        return f"{self.interface}::{self.method}"


class Claims(BaseModel):
    """Identity and claims of the caller, as decoded by a transport adapter."""

    subject: Optional[str] = Field(default=None, description="Authenticated principal")
    permissions: FrozenSet[str] = Field(default_factory=frozenset)
    roles: FrozenSet[str] = Field(default_factory=frozenset)
    attributes: Dict[str, Any] = Field(default_factory=dict)

    model_config = {"frozen": True}

    @property
    def is_authenticated(self) -> bool:
        return bool(self.subject)

    @classmethod
    def from_mapping(cls, raw: Optional[Mapping[str, Any]]) -> Optional["Claims"]:
        """
        Build Claims from a loosely shaped mapping (e.g. decoded JWT).

        ``sub`` is accepted for ``subject`` and a space separated ``scope``
        string is accepted for ``permissions``. Unknown keys are kept in
        ``attributes``.
        """
        if raw is None:
            return None
        if not isinstance(raw, Mapping):
            raise TypeError(f"claims must be a mapping, got {type(raw).__name__}")
        data = dict(raw)
        subject = data.pop("subject", None) or data.pop("sub", None)
        permissions = set(_as_strings(data.pop("permissions", ())))
        scope = data.pop("scope", None)
        if isinstance(scope, str):
            permissions.update(scope.split())
        roles = _as_strings(data.pop("roles", ()))
        return cls(
            subject=subject,
            permissions=frozenset(permissions),
            roles=frozenset(roles),
            attributes=data,
        )


def _as_strings(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, Iterable):
        raise TypeError(f"expected a string or a list of strings, got {type(value).__name__}")
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class Step:
    """
    One unit of work in a pipeline.

    ``with_`` holds the raw configuration; ``bindings`` is its compiled form,
    built once at construction so the hot path never re-detects expressions.
    """

    name: str
    uses: str
    with_: Mapping[str, Any] = field(default_factory=dict)
    summary: str = ""
    bindings: MapNode = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", compile_mapping(self.with_))


@dataclass(frozen=True)
class Pipeline:
    """Ordered, immutable step list bound to one interface method."""

    interface: str
    method: str
    steps: Tuple[Step, ...] = ()
    output: Optional[str] = None
    summary: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "steps", tuple(self.steps))

    @property
    def key(self) -> RouteKey:
        return RouteKey(self.interface, self.method)

    @property
    def step_names(self) -> Tuple[str, ...]:
        return tuple(step.name for step in self.steps)

    def __len__(self) -> int:
        return len(self.steps)


class Failure(BaseModel):
    """Structured failure carried by an unsuccessful InvocationResult."""

    kind: ErrorKind
    message: str
    status: int
    step_name: Optional[str] = None
    step_index: Optional[int] = None
    details: Dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"frozen": True}

    @classmethod
    def of(
        cls,
        kind: ErrorKind,
        message: str,
        *,
        step_name: Optional[str] = None,
        step_index: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "Failure":
        return cls(
            kind=kind,
            message=message,
            status=kind.status,
            step_name=step_name,
            step_index=step_index,
            details=dict(details or {}),
        )

    @classmethod
    def from_error(
        cls,
        error: DispatchError,
        *,
        step_name: Optional[str] = None,
        step_index: Optional[int] = None,
    ) -> "Failure":
        return cls.of(
            error.kind,
            error.message,
            step_name=step_name,
            step_index=step_index,
            details=error.details,
        )

    @classmethod
    def permission_denied(cls) -> "Failure":
        return cls.from_error(PermissionDenied())

    @property
    def type(self) -> str:
        return "".join(part.capitalize() for part in self.kind.value.split("_"))

    def to_dict(self) -> Dict[str, Any]:
        """Stable wire shape shared by every transport."""
        data: Dict[str, Any] = {
            "type": self.type,
            "code": self.kind.value,
            "status": self.status,
            "message": self.message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.step_name is not None:
            data["step"] = self.step_name
            data["step_index"] = self.step_index
        if self.details and self.kind is not ErrorKind.PERMISSION_DENIED:
            data["details"] = dict(self.details)
        return data


class InvocationResult(BaseModel):
    """Outcome of one invocation: a success value or a structured failure."""

    ok: bool
    value: Any = None
    failure: Optional[Failure] = None
    outputs: Dict[str, Any] = Field(
        default_factory=dict, description="Step name -> output, in execution order"
    )
    correlation_id: Optional[str] = None
    duration_seconds: float = 0.0

    model_config = {"frozen": True}

    @classmethod
    def success(cls, value: Any, outputs: Optional[Dict[str, Any]] = None) -> "InvocationResult":
        return cls(ok=True, value=value, outputs=dict(outputs or {}))

    @classmethod
    def failed(
        cls, failure: Failure, outputs: Optional[Dict[str, Any]] = None
    ) -> "InvocationResult":
        return cls(ok=False, failure=failure, outputs=dict(outputs or {}))

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.failure.kind if self.failure else None

    def with_metadata(self, correlation_id: str, duration_seconds: float) -> "InvocationResult":
        return self.model_copy(
            update={"correlation_id": correlation_id, "duration_seconds": duration_seconds}
        )
