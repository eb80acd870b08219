"""
Audit Logger Protocol.

The audit trail of one invocation: which steps ran, how long each took,
and every denial or failed step along the way. Entries of one invocation
share its correlation ID.

Design Notes:
    - Audit calls never influence dispatch; a logger that raises is a bug
      in the logger
    - Denials are logged without policy internals
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol, runtime_checkable


@runtime_checkable
class AuditLogger(Protocol):
    """Receives step and anomaly events from the dispatcher."""

    def set_correlation_id(self, correlation_id: str) -> None:
        """Called once per invocation before any other event."""
        ...

    def log_step_start(
        self,
        step_name: str,
        step_index: int,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        A step is about to invoke its unit.

        Args:
            step_name: Name the step's output will be recorded under
            step_index: Zero-based position in the pipeline
            metadata: ``uses`` and any other step details
        """
        ...

    def log_step_end(
        self,
        step_name: str,
        outputs_recorded: int,
        duration_seconds: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """A step completed and its output was recorded."""
        ...

    def log_anomaly(
        self,
        message: str,
        severity: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        A denial, failed step or timeout.

        Args:
            message: Short description, e.g. "Permission denied"
            severity: WARNING or ERROR
            context: Route, step and failure kind where known
        """
        ...
