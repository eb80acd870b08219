"""
Step Configuration Values.

A step's ``with`` block mixes literal data and expressions. It is compiled
once, when the pipeline is built, into a tree of tagged nodes:

    - LiteralNode: any subtree without expressions, copied on every run
    - ExpressionNode: evaluated against the data context on every run
    - ListNode / MapNode: containers holding at least one expression

Raw configuration marks an expression in one of three ways:

    - ExpressionRef, usually built with ``expr("...")``
    - a single-key mapping ``{"$expr": "..."}`` (JSON-friendly)
    - the YAML tag ``!expr`` (see config.loader)
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

from pipeline_dispatcher.caching.expression_cache import ExpressionCache
from pipeline_dispatcher.expression.ast import Expression
from pipeline_dispatcher.expression.parser import parse

EXPR_KEY = "$expr"


@dataclass(frozen=True)
class ExpressionRef:
    """Marks a raw configuration value as expression source."""

    source: str


def expr(source: str) -> ExpressionRef:
    """Mark ``source`` as an expression inside a step's ``with`` block."""
    return ExpressionRef(source)


@dataclass(frozen=True)
class LiteralNode:
    value: Any

    def resolve(self, context: Mapping) -> Any:
        # Runs must not see each other's mutations of shared containers.
        if isinstance(self.value, (dict, list, set, tuple)):
            return copy.deepcopy(self.value)
        return self.value


@dataclass(frozen=True)
class ExpressionNode:
    expression: Expression

    def resolve(self, context: Mapping) -> Any:
        return self.expression.evaluate(context)


@dataclass(frozen=True)
class ListNode:
    items: Tuple["ConfigNode", ...]

    def resolve(self, context: Mapping) -> Any:
        return [item.resolve(context) for item in self.items]


@dataclass(frozen=True)
class MapNode:
    entries: Tuple[Tuple[str, "ConfigNode"], ...]

    def resolve(self, context: Mapping) -> Dict[str, Any]:
        return {key: node.resolve(context) for key, node in self.entries}

    def keys(self) -> Tuple[str, ...]:
        return tuple(key for key, _ in self.entries)


ConfigNode = Union[LiteralNode, ExpressionNode, ListNode, MapNode]


def is_expression_marker(raw: Any) -> bool:
    """True if ``raw`` is marked as expression source."""
    if isinstance(raw, ExpressionRef):
        return True
    return (
        isinstance(raw, Mapping)
        and len(raw) == 1
        and EXPR_KEY in raw
        and isinstance(raw[EXPR_KEY], str)
    )


def compile_value(raw: Any, cache: Optional[ExpressionCache] = None) -> ConfigNode:
    """
    Compile a raw configuration value into a ConfigNode tree.

    Args:
        raw: Literal data possibly containing expression markers
        cache: Expression cache used for parsing

    Returns:
        Compiled node; expression-free subtrees become a single LiteralNode

    Raises:
        ParseError: If any marked expression is malformed
    """
    if isinstance(raw, ExpressionRef):
        return ExpressionNode(parse(raw.source, cache))
    if is_expression_marker(raw):
        return ExpressionNode(parse(raw[EXPR_KEY], cache))
    if isinstance(raw, Mapping):
        entries = tuple((str(k), compile_value(v, cache)) for k, v in raw.items())
        if all(isinstance(node, LiteralNode) for _, node in entries):
            return LiteralNode(raw)
        return MapNode(entries)
    if isinstance(raw, (list, tuple)):
        items = tuple(compile_value(v, cache) for v in raw)
        if all(isinstance(node, LiteralNode) for node in items):
            return LiteralNode(raw)
        return ListNode(items)
    return LiteralNode(raw)


def compile_mapping(
    raw: Optional[Mapping], cache: Optional[ExpressionCache] = None
) -> MapNode:
    """Compile a step's ``with`` block. Always returns a MapNode."""
    entries = tuple(
        (str(k), compile_value(v, cache)) for k, v in (raw or {}).items()
    )
    return MapNode(entries)


def contains_expression(node: ConfigNode) -> bool:
    return not isinstance(node, LiteralNode)
