"""
Expression Errors.

ParseError is a configuration-time failure. FieldNotFound and TypeMismatch
are raised while evaluating and surface per request as failed steps.
"""

from __future__ import annotations

from typing import Optional, Sequence

from pipeline_dispatcher.domain.errors import DispatchError, ErrorKind


class ExpressionError(DispatchError):
    """Base class for expression parse and evaluation errors."""


class ParseError(ExpressionError):
    """Malformed expression source."""

    kind = ErrorKind.PARSE_ERROR

    def __init__(self, message: str, source: str, position: int) -> None:
        super().__init__(
            f"{message} at position {position} in {source!r}",
            {"source": source, "position": position},
        )
        self.source = source
        self.position = position


class EvalError(ExpressionError):
    """Runtime failure while evaluating a parsed expression."""


class FieldNotFound(EvalError):
    """A field path could not be resolved against the data context."""

    kind = ErrorKind.FIELD_NOT_FOUND

    def __init__(self, path: Sequence[str], missing: str, reason: Optional[str] = None) -> None:
        dotted = ".".join(str(s) for s in path)
        message = f"Field '{dotted}' not found"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, {"path": dotted, "segment": missing})
        self.path = dotted
        self.missing = missing


class TypeMismatch(EvalError):
    """Operands of a binary operator have incompatible types."""

    kind = ErrorKind.TYPE_MISMATCH

    def __init__(self, operator: str, left: object, right: object) -> None:
        left_type = _type_name(left)
        right_type = _type_name(right)
        super().__init__(
            f"Cannot apply '{operator}' to {left_type} and {right_type}",
            {"operator": operator, "left": left_type, "right": right_type},
        )


def _type_name(value: object) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "list"
    if isinstance(value, dict):
        return "map"
    return type(value).__name__
