"""
Console Audit Logger.

Prints one line per audit event, prefixed with the first eight characters
of the correlation ID:

    [12:00:01] [3f2a9c1e] INFO  greet#0 -> expr
    [12:00:01] [3f2a9c1e] INFO  greet#0 done in 0.001s (1 output)
"""

from __future__ import annotations

from datetime import datetime
from typing import IO, Any, Dict, Optional

_NO_CORRELATION = "-" * 8


class ConsoleAuditLogger:
    """Audit logger for local runs and debugging."""

    def __init__(self, verbose: bool = True, stream: Optional[IO[str]] = None) -> None:
        """
        Args:
            verbose: Also print step starts. Step ends and anomalies are
                always printed.
            stream: Output stream; sys.stdout when None
        """
        self._verbose = verbose
        self._stream = stream
        self._correlation_id: Optional[str] = None
        self._last_index: Dict[str, int] = {}

    def set_correlation_id(self, correlation_id: str) -> None:
        self._correlation_id = correlation_id
        self._last_index.clear()

    def log_step_start(
        self,
        step_name: str,
        step_index: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._last_index[step_name] = step_index
        if self._verbose:
            uses = (metadata or {}).get("uses", "?")
            self._emit("INFO", f"{step_name}#{step_index} -> {uses}")

    def log_step_end(
        self,
        step_name: str,
        outputs_recorded: int,
        duration_seconds: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        index = self._last_index.get(step_name, "?")
        noun = "output" if outputs_recorded == 1 else "outputs"
        self._emit(
            "INFO",
            f"{step_name}#{index} done in {duration_seconds:.3f}s "
            f"({outputs_recorded} {noun})",
        )

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        where = (context or {}).get("route") or (context or {}).get("step")
        suffix = f" [{where}]" if where else ""
        self._emit(severity.upper(), f"!! {message}{suffix}")

    def _emit(self, level: str, text: str) -> None:
        stamp = datetime.now().strftime("%H:%M:%S")
        prefix = self._correlation_id[:8] if self._correlation_id else _NO_CORRELATION
        print(f"[{stamp}] [{prefix}] {level:<5} {text}", file=self._stream)
