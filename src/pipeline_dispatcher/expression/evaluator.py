"""
Expression Evaluator.

Evaluation is side-effect free: it reads the data context and returns a
new value. Field paths walk mappings by key and lists by integer index.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, List, Union

from pipeline_dispatcher.expression.ast import (
    BinaryOp,
    Expression,
    FieldPath,
    LiteralValue,
    Node,
)
from pipeline_dispatcher.expression.errors import FieldNotFound, TypeMismatch


def evaluate(expression: Union[Expression, Node], context: Mapping) -> Any:
    """
    Evaluate a parsed expression against a data context.

    Args:
        expression: Parsed Expression (or a bare AST node)
        context: Mapping of root names to values

    Returns:
        The computed value

    Raises:
        FieldNotFound: If a field path cannot be resolved
        TypeMismatch: If operand types are incompatible
    """
    root = expression.root if isinstance(expression, Expression) else expression
    return _eval(root, context)


def _eval(node: Node, context: Mapping) -> Any:
    if isinstance(node, LiteralValue):
        return node.value
    if isinstance(node, FieldPath):
        return resolve_path(node.segments, context)
    if isinstance(node, BinaryOp):
        left = _eval(node.left, context)
        right = _eval(node.right, context)
        return add(left, right)
    raise TypeError(f"Unknown expression node: {type(node).__name__}")


def resolve_path(segments: Sequence[Union[str, int]], context: Mapping) -> Any:
    """Walk a field path through nested mappings and lists."""
    current: Any = context
    walked: List[Union[str, int]] = []
    for segment in segments:
        walked.append(segment)
        if isinstance(current, Mapping):
            key = str(segment)
            if key not in current:
                raise FieldNotFound(walked, key)
            current = current[key]
        elif _is_list(current):
            if not isinstance(segment, int):
                raise FieldNotFound(walked, str(segment), "list requires an index")
            if segment >= len(current):
                raise FieldNotFound(walked, str(segment), "index out of range")
            current = current[segment]
        else:
            raise FieldNotFound(walked, str(segment), "parent is not a container")
    return current


def add(left: Any, right: Any) -> Any:
    """``+``: string concatenation if either side is a string, else numeric addition."""
    if isinstance(left, str) or isinstance(right, str):
        if not (_is_text_like(left) and _is_text_like(right)):
            raise TypeMismatch("+", left, right)
        return _to_text(left) + _to_text(right)
    if _is_number(left) and _is_number(right):
        return left + right
    raise TypeMismatch("+", left, right)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_text_like(value: Any) -> bool:
    return isinstance(value, str) or _is_number(value)


def _to_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _is_list(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))
