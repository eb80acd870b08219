"""
Metrics Collector Protocol.

Sink for invocation timings and outcome counts. Names used by the
dispatcher:

    - ``invocation_duration_seconds`` (timing, tagged by route and outcome)
    - ``invocations_total`` (count, tagged by route and outcome)
    - ``denials_total`` (count, tagged by route)
    - ``step_duration_seconds`` (timing, tagged by step and unit)
    - ``step_failures_total`` (count, tagged by step and failure kind)
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class MetricsCollector(Protocol):
    def record_timing(
        self, name: str, duration_seconds: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def record_count(
        self, name: str, value: int, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def record_gauge(
        self, name: str, value: float, tags: Optional[Dict[str, str]] = None
    ) -> None:
        ...

    def get_metrics(self) -> Dict[str, Any]:
        ...
