"""
Observability Package - Structured Logging and Metrics.

Components:
    - ObservabilityManager: structlog events with correlation IDs, metrics;
      usable as both audit logger and metrics collector
    - MetricKind: gauge, counter or histogram
    - get_correlation_id / set_correlation_id: contextvar accessors
    - call_hook: invokes injected hooks without letting them fail an invocation
"""

from pipeline_dispatcher.observability.hooks import call_hook
from pipeline_dispatcher.observability.observability_manager import (
    MetricKind,
    ObservabilityManager,
    get_correlation_id,
    set_correlation_id,
)

__all__ = [
    "MetricKind",
    "ObservabilityManager",
    "call_hook",
    "get_correlation_id",
    "set_correlation_id",
]
