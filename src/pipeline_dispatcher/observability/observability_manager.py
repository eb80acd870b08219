"""
Observability Manager - Structured Logging and Metrics.

Provides:
    - Structured logging via structlog (JSON lines or console)
    - Correlation ID propagation through contextvars
    - In-memory event and metric capture for inspection

Design Notes:
    - Correlation IDs live in a ContextVar; concurrent invocations on one
      event loop each see only their own ID
    - Usable directly as the dispatcher's AuditLogger and MetricsCollector
"""

from __future__ import annotations

import logging
import threading
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

import structlog

_correlation_id: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def get_correlation_id() -> Optional[str]:
    """Correlation ID of the invocation running in this context, if any."""
    return _correlation_id.get()


def set_correlation_id(correlation_id: str) -> None:
    _correlation_id.set(correlation_id)


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"


_SEVERITY_LEVELS = {"DEBUG": "debug", "INFO": "info", "WARNING": "warning"}


class ObservabilityManager:
    """
    structlog-backed event sink for dispatcher invocations.

    Each captured event and metric is stamped with the correlation ID
    current at the time it was emitted, so one invocation's trail can be
    pulled out with ``events_for``.
    """

    def __init__(
        self,
        service_name: str = "pipeline_dispatcher",
        use_json: bool = True,
        log_level: int = logging.INFO,
        configure: bool = True,
    ) -> None:
        """
        Args:
            service_name: Logger name and ``service`` field of the trace context
            use_json: JSONRenderer when True, ConsoleRenderer otherwise
            log_level: Minimum level passed to structlog's filtering logger
            configure: Set up structlog globally. Pass False when the host
                application already configured it.
        """
        self.service_name = service_name
        self.use_json = use_json
        self.log_level = log_level
        self._events: List[Dict[str, Any]] = []
        self._metrics: Dict[str, List[Dict[str, Any]]] = {}
        self._lock = threading.Lock()

        if configure:
            self._configure_structlog()
        self._logger = structlog.get_logger(service_name)

    def _configure_structlog(self) -> None:
        renderer = (
            structlog.processors.JSONRenderer()
            if self.use_json
            else structlog.dev.ConsoleRenderer()
        )
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso", utc=True),
                structlog.processors.StackInfoRenderer(),
                renderer,
            ],
            wrapper_class=structlog.make_filtering_bound_logger(self.log_level),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(),
            cache_logger_on_first_use=True,
        )

    # -------------------------------------------------------------------------
    # Correlation
    # -------------------------------------------------------------------------

    def set_correlation_id(self, correlation_id: str) -> None:
        """Bind ``correlation_id`` to this context and to structlog output."""
        set_correlation_id(correlation_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id=correlation_id)

    def generate_correlation_id(self) -> str:
        correlation_id = str(uuid.uuid4())
        self.set_correlation_id(correlation_id)
        return correlation_id

    def bind_route(self, route: str) -> None:
        """Add the route to every structlog line emitted in this context."""
        structlog.contextvars.bind_contextvars(route=route)

    def get_trace_context(self) -> Dict[str, Any]:
        return {
            "correlation_id": get_correlation_id(),
            "service_name": self.service_name,
            "timestamp": _now(),
        }

    # -------------------------------------------------------------------------
    # Events and metrics
    # -------------------------------------------------------------------------

    def log_event(
        self,
        event_type: str,
        data: Optional[Dict[str, Any]] = None,
        level: str = "info",
    ) -> None:
        """
        Capture an event and emit it through structlog.

        Args:
            event_type: Event name, e.g. ``step_started``
            data: Extra fields merged into the event
            level: structlog method name (debug, info, warning, error)
        """
        fields = dict(data or {})
        event = {
            "event_type": event_type,
            "timestamp": _now(),
            "correlation_id": get_correlation_id(),
            **fields,
        }
        with self._lock:
            self._events.append(event)

        emit = getattr(self._logger, level.lower(), self._logger.info)
        emit(event_type, **fields)

    def record_metric(
        self,
        name: str,
        value: float,
        tags: Optional[Dict[str, str]] = None,
        metric_type: MetricKind = MetricKind.GAUGE,
    ) -> None:
        entry = {
            "type": MetricKind(metric_type).value,
            "value": value,
            "tags": dict(tags or {}),
            "correlation_id": get_correlation_id(),
            "timestamp": _now(),
        }
        with self._lock:
            self._metrics.setdefault(name, []).append(entry)

    def get_events(self) -> List[Dict[str, Any]]:
        with self._lock:
            return list(self._events)

    def events_for(self, correlation_id: str) -> List[Dict[str, Any]]:
        """Events emitted while ``correlation_id`` was current."""
        with self._lock:
            return [e for e in self._events if e["correlation_id"] == correlation_id]

    def get_metrics(self) -> Dict[str, List[Dict[str, Any]]]:
        with self._lock:
            return {name: list(entries) for name, entries in self._metrics.items()}

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
            self._metrics.clear()

    # -------------------------------------------------------------------------
    # AuditLogger protocol
    # -------------------------------------------------------------------------

    def log_step_start(
        self,
        step_name: str,
        step_index: int,
        metadata: Optional[Dict] = None,
    ) -> None:
        self.log_event(
            "step_started",
            {"step": step_name, "step_index": step_index, **(metadata or {})},
            level="debug",
        )

    def log_step_end(
        self,
        step_name: str,
        outputs_recorded: int,
        duration_seconds: float,
        metadata: Optional[Dict] = None,
    ) -> None:
        self.log_event(
            "step_finished",
            {
                "step": step_name,
                "outputs_recorded": outputs_recorded,
                "duration_seconds": duration_seconds,
                **(metadata or {}),
            },
        )

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict] = None,
    ) -> None:
        """Denials log at warning; anything more severe logs at error."""
        level = _SEVERITY_LEVELS.get(severity.upper(), "error")
        self.log_event(
            "anomaly",
            {"message": message, "severity": severity, **(context or {})},
            level=level,
        )

    # -------------------------------------------------------------------------
    # MetricsCollector protocol
    # -------------------------------------------------------------------------

    def record_timing(self, name: str, duration_seconds: float, tags: Optional[Dict] = None) -> None:
        self.record_metric(name, duration_seconds, tags, MetricKind.HISTOGRAM)

    def record_count(self, name: str, value: int, tags: Optional[Dict] = None) -> None:
        self.record_metric(name, value, tags, MetricKind.COUNTER)

    def record_gauge(self, name: str, value: float, tags: Optional[Dict] = None) -> None:
        self.record_metric(name, value, tags, MetricKind.GAUGE)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()
