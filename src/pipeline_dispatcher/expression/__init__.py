"""
Expression Package - Embedded Expression Dialect.

A deliberately small dialect used for data binding between steps:
literals, dotted field paths, and ``+`` for addition or concatenation.

Components:
    - parse / evaluate: contract entry points
    - Expression: immutable parsed form, safe for concurrent evaluation
    - compile_value / expr: tagged configuration values for step ``with`` blocks
"""

from pipeline_dispatcher.expression.ast import Expression
from pipeline_dispatcher.expression.errors import (
    EvalError,
    ExpressionError,
    FieldNotFound,
    ParseError,
    TypeMismatch,
)
from pipeline_dispatcher.expression.evaluator import evaluate
from pipeline_dispatcher.expression.parser import parse, parse_uncached
from pipeline_dispatcher.expression.values import (
    ExpressionRef,
    compile_mapping,
    compile_value,
    expr,
)

__all__ = [
    "Expression",
    "EvalError",
    "ExpressionError",
    "FieldNotFound",
    "ParseError",
    "TypeMismatch",
    "evaluate",
    "parse",
    "parse_uncached",
    "ExpressionRef",
    "compile_mapping",
    "compile_value",
    "expr",
]
