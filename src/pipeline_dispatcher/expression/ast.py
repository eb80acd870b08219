"""
Expression AST.

Parsed expressions are trees of immutable nodes. A parsed tree holds no
per-request state, so one instance can be evaluated concurrently against
any number of independent contexts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple, Union


@dataclass(frozen=True)
class LiteralValue:
    """String, number, boolean or null literal."""

    value: Any


@dataclass(frozen=True)
class FieldPath:
    """Dotted field access, e.g. ``steps.greet.output.text``."""

    segments: Tuple[Union[str, int], ...]

    @property
    def dotted(self) -> str:
        return ".".join(str(s) for s in self.segments)


@dataclass(frozen=True)
class BinaryOp:
    """Binary operator application. Only ``+`` exists today."""

    operator: str
    left: "Node"
    right: "Node"


Node = Union[LiteralValue, FieldPath, BinaryOp]


@dataclass(frozen=True)
class Expression:
    """A parsed expression together with its source text."""

    source: str
    root: Node

    def evaluate(self, context: Mapping[str, Any]) -> Any:
        from pipeline_dispatcher.expression.evaluator import evaluate

        return evaluate(self, context)

    def __str__(self) -> str:
        return self.source
