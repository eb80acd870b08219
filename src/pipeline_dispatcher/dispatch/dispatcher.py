"""
Dispatcher - Top-Level Entry Point for Transport Adapters.

The Dispatcher coordinates one invocation end to end:

    1. Resolve the route in the pipeline registry (missing: route_not_found)
    2. Consult the authorization gate (deny: permission_denied, nothing runs)
    3. Run the step executor and return its result verbatim

Registry, gate and executor are held together in one immutable RouteTable.
``reload()`` swaps that reference atomically; an invocation keeps the
snapshot it read on entry.
"""

from __future__ import annotations

import asyncio
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from pipeline_dispatcher.authorization.gate import AuthorizationGate
from pipeline_dispatcher.domain.entities import (
    Claims,
    Failure,
    InvocationResult,
    RouteKey,
)
from pipeline_dispatcher.domain.errors import InvocationCancelled, RouteNotFound
from pipeline_dispatcher.interfaces.audit_logger import AuditLogger
from pipeline_dispatcher.interfaces.metrics_collector import MetricsCollector
from pipeline_dispatcher.observability.hooks import call_hook
from pipeline_dispatcher.pipeline.executor import StepExecutor
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry
from pipeline_dispatcher.registry.unit_registry import UnitRegistry

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 5.0

ClaimsLike = Union[Claims, Mapping[str, Any], None]


@dataclass(frozen=True)
class RouteTable:
    """Snapshot of everything an invocation needs to be dispatched."""

    registry: PipelineRegistry
    gate: AuthorizationGate
    executor: StepExecutor


@dataclass(frozen=True)
class RouteInfo:
    """Public description of one registered route."""

    interface: str
    method: str
    steps: int
    authorization: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interface": self.interface,
            "method": self.method,
            "steps": self.steps,
            "authorization": self.authorization,
        }


class Dispatcher:
    """Maps invocations to pipelines behind a deny-by-default gate."""

    def __init__(
        self,
        registry: PipelineRegistry,
        gate: AuthorizationGate,
        audit_logger: Optional[AuditLogger] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        offload_sync_units: bool = False,
        units: Optional[UnitRegistry] = None,
    ) -> None:
        """
        Initialize dispatcher with all dependencies.

        Args:
            registry: Route -> pipeline table
            gate: Route -> authorization policy table
            audit_logger: For audit trail (optional)
            metrics_collector: For performance metrics (optional)
            timeout_seconds: Per-invocation limit; None disables it
            offload_sync_units: Run unit calls in the default thread pool
            units: Unit registry the routes were built with, reused on reload
        """
        self.audit_logger = audit_logger
        self.metrics_collector = metrics_collector
        self.timeout_seconds = timeout_seconds
        self.offload_sync_units = offload_sync_units
        self.units = units
        self._routes = self._build_table(registry, gate)

    @property
    def routes(self) -> RouteTable:
        """Current route table snapshot."""
        return self._routes

    def reload(self, registry: PipelineRegistry, gate: AuthorizationGate) -> None:
        """Replace registry and gate together. In-flight invocations are unaffected."""
        self._routes = self._build_table(registry, gate)
        logger.info(f"Route table reloaded: {len(registry)} routes, {len(gate)} policies")

    def _build_table(self, registry: PipelineRegistry, gate: AuthorizationGate) -> RouteTable:
        executor = StepExecutor(
            registry,
            audit_logger=self.audit_logger,
            metrics_collector=self.metrics_collector,
            offload_sync_units=self.offload_sync_units,
        )
        return RouteTable(registry=registry, gate=gate, executor=executor)

    async def handle(
        self,
        interface: str,
        method: str,
        claims: ClaimsLike = None,
        input: Any = None,
        *,
        correlation_id: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvocationResult:
        """
        Handle one invocation.

        Args:
            interface: Interface name
            method: Method name
            claims: Caller claims (Claims or a decoded-token mapping)
            input: Input payload
            correlation_id: Request identifier (generated when omitted)
            cancel_event: Set by the transport when the caller goes away

        Returns:
            InvocationResult. Per-request failures are returned, never raised.
        """
        start_time = time.perf_counter()
        correlation_id = correlation_id or str(uuid.uuid4())
        routes = self._routes
        route = RouteKey(interface, method)
        if self.audit_logger:
            call_hook(self.audit_logger.set_correlation_id, correlation_id)

        logger.debug(f"REQUEST[{route}] {correlation_id}")

        pipeline = routes.registry.get(interface, method)
        if pipeline is None:
            logger.info(f"REQUEST[{route}]: route not found")
            failure = Failure.from_error(RouteNotFound(interface, method))
            return self._finish(route, InvocationResult.failed(failure), correlation_id, start_time)

        caller = self._normalize_claims(route, claims)
        decision = routes.gate.check(interface, method, caller)
        if not decision.allowed:
            logger.warning(f"REQUEST[{route}]: denied ({decision.reason})")
            if self.audit_logger:
                call_hook(
                    self.audit_logger.log_anomaly,
                    "Permission denied",
                    severity="WARNING",
                    context={"route": str(route), "reason": decision.reason},
                )
            if self.metrics_collector:
                call_hook(
                    self.metrics_collector.record_count,
                    "denials_total",
                    1,
                    {"route": str(route)},
                )
            result = InvocationResult.failed(decision.failure())
            return self._finish(route, result, correlation_id, start_time)

        run = routes.executor.run(
            pipeline,
            input,
            claims=caller,
            correlation_id=correlation_id,
            cancel_event=cancel_event,
        )
        try:
            if self.timeout_seconds is None:
                result = await run
            else:
                result = await asyncio.wait_for(run, timeout=self.timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"REQUEST[{route}]: timed out after {self.timeout_seconds}s")
            if self.audit_logger:
                call_hook(
                    self.audit_logger.log_anomaly,
                    "Invocation timed out",
                    severity="WARNING",
                    context={"route": str(route), "timeout_seconds": self.timeout_seconds},
                )
            failure = Failure.from_error(
                InvocationCancelled(
                    f"Invocation timed out after {self.timeout_seconds} seconds",
                    {"timeout_seconds": self.timeout_seconds},
                )
            )
            result = InvocationResult.failed(failure)

        return self._finish(route, result, correlation_id, start_time)

    def handle_sync(
        self,
        interface: str,
        method: str,
        claims: ClaimsLike = None,
        input: Any = None,
        *,
        correlation_id: Optional[str] = None,
    ) -> InvocationResult:
        """Run ``handle()`` on a fresh event loop (for synchronous adapters)."""
        return asyncio.run(
            self.handle(interface, method, claims, input, correlation_id=correlation_id)
        )

    def list_routes(self) -> List[RouteInfo]:
        """Registered routes with their authorization mode."""
        routes = self._routes
        infos: List[RouteInfo] = []
        for key in routes.registry.routes():
            policy = routes.gate.policy_for(key.interface, key.method)
            infos.append(
                RouteInfo(
                    interface=key.interface,
                    method=key.method,
                    steps=len(routes.registry.resolve(key.interface, key.method)),
                    authorization=policy.describe() if policy else "denied",
                )
            )
        return infos

    def _normalize_claims(self, route: RouteKey, claims: ClaimsLike) -> Optional[Claims]:
        """Malformed claims count as no claims; the gate then decides."""
        if claims is None or isinstance(claims, Claims):
            return claims
        try:
            return Claims.from_mapping(claims)
        except (TypeError, ValueError) as e:
            logger.warning(f"REQUEST[{route}]: malformed claims ignored: {e}")
            return None

    def _finish(
        self,
        route: RouteKey,
        result: InvocationResult,
        correlation_id: str,
        start_time: float,
    ) -> InvocationResult:
        duration = time.perf_counter() - start_time
        outcome = "ok" if result.ok else result.failure.kind.value

        if self.metrics_collector:
            call_hook(
                self.metrics_collector.record_timing,
                "invocation_duration_seconds",
                duration,
                {"route": str(route), "outcome": outcome},
            )
            call_hook(
                self.metrics_collector.record_count,
                "invocations_total", 1, {"route": str(route), "outcome": outcome}
            )

        logger.debug(
            f"REQUEST[{route}]:COMPLETE[{outcome}, duration {duration * 1_000_000:.0f} μs]"
        )
        return result.with_metadata(correlation_id, duration)
