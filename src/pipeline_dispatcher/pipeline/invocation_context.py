"""
Invocation Context - Per-Request State.

The InvocationContext holds the original input, the outputs of steps
executed so far, and the caller's claims. One context exists per
invocation and is discarded when it completes.

Design Notes:
    - Outputs are append-only: a step name is recorded once, in execution order
    - The data context handed to expressions only contains outputs of steps
      that already ran, so bindings can only look backward
    - Views handed out are read-only proxies
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pipeline_dispatcher.domain.entities import Claims

logger = logging.getLogger(__name__)

INPUT_ROOT = "input"
STEPS_ROOT = "steps"


class StepOutputs:
    """
    Append-only ordered record of step outputs.

    Outputs are addressable by step name and by execution position.
    """

    def __init__(self) -> None:
        self._values: Dict[str, Any] = {}
        self._order: List[str] = []

    def record(self, name: str, value: Any) -> None:
        """
        Append the output of a step.

        Raises:
            ValueError: If the step already recorded an output
        """
        if name in self._values:
            raise ValueError(f"Output for step '{name}' is already recorded")
        self._values[name] = value
        self._order.append(name)

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def get(self, name: str, default: Any = None) -> Any:
        return self._values.get(name, default)

    def at(self, index: int) -> Tuple[str, Any]:
        """Name and output of the step executed at ``index``."""
        name = self._order[index]
        return name, self._values[name]

    def last(self) -> Optional[Tuple[str, Any]]:
        if not self._order:
            return None
        return self.at(-1)

    def names(self) -> List[str]:
        return list(self._order)

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy in execution order."""
        return {name: self._values[name] for name in self._order}

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._order)

    def __len__(self) -> int:
        return len(self._order)

    def __repr__(self) -> str:
        return f"StepOutputs({self._order!r})"


class InvocationContext:
    """
    Transient state of one invocation.

    The data context exposed to expressions has these roots:
        - ``input``: the original input payload
        - ``steps``: ``{step_name: {"output": value}}`` for prior steps
        - ``<step_name>``: shorthand for that step's output
    """

    def __init__(
        self,
        input: Any = None,
        claims: Optional[Claims] = None,
        correlation_id: Optional[str] = None,
    ) -> None:
        """
        Initialize invocation context.

        Args:
            input: Original input payload
            claims: Caller identity, opaque except for authorization
            correlation_id: Request identifier for tracing
        """
        self._input = input
        self._claims = claims
        self._correlation_id = correlation_id
        self._outputs = StepOutputs()

        self._steps_view: Dict[str, Mapping[str, Any]] = {}
        self._data: Dict[str, Any] = {
            INPUT_ROOT: input,
            STEPS_ROOT: MappingProxyType(self._steps_view),
        }
        self._data_view = MappingProxyType(self._data)

    @property
    def input(self) -> Any:
        return self._input

    @property
    def claims(self) -> Optional[Claims]:
        return self._claims

    @property
    def correlation_id(self) -> Optional[str]:
        return self._correlation_id

    @property
    def outputs(self) -> StepOutputs:
        return self._outputs

    def record(self, step_name: str, value: Any) -> None:
        """Record a step's output and expose it to later steps."""
        self._outputs.record(step_name, value)
        self._steps_view[step_name] = MappingProxyType({"output": value})
        self._data[step_name] = value
        logger.debug(f"Recorded output of step '{step_name}'")

    def data_context(self) -> Mapping[str, Any]:
        """Read-only data context for expression evaluation."""
        return self._data_view

    def __repr__(self) -> str:
        return (
            f"InvocationContext(correlation_id={self._correlation_id!r}, "
            f"outputs={self._outputs.names()!r})"
        )
