"""
Computation Unit Protocol.

A computation unit is the pluggable executor a step names in ``uses``.
It receives the step's resolved configuration and returns the step's
output, either directly or as an awaitable.

The computation unit is responsible for:
    - Interpreting its resolved configuration
    - Returning a value, or raising StepError (any exception is a failure)

Design Notes:
    - Uses typing.Protocol for structural subtyping
    - Units may block or suspend; the executor awaits them before the next step
    - Units must not mutate the configuration they receive
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Dict, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from pipeline_dispatcher.pipeline.invocation_context import InvocationContext


@runtime_checkable
class ComputationUnit(Protocol):
    """Abstract interface for computation units."""

    @property
    def name(self) -> str:
        """Identifier referenced by a step's ``uses``."""
        ...

    def invoke(
        self,
        config: Dict[str, Any],
        context: "InvocationContext",
    ) -> Union[Any, Awaitable[Any]]:
        """
        Run the unit.

        Args:
            config: Resolved ``with`` configuration of the step
            context: Read-only view of the running invocation

        Returns:
            The step output, or an awaitable resolving to it
        """
        ...
