"""
Units Package - Built-in Computation Units.

Components:
    - ExpressionUnit (``expr``): returns resolved expression values
    - LogUnit (``log``): logs a message and passes its value through

Other units (service calls, component invocations) are registered by the
embedding application.
"""

from pipeline_dispatcher.registry.unit_registry import UnitRegistry
from pipeline_dispatcher.units.expression import EXPRESSION_UNIT, ExpressionUnit
from pipeline_dispatcher.units.log import LOG_UNIT, LogUnit


def register_builtin_units(registry: UnitRegistry) -> UnitRegistry:
    """Register the built-in units, skipping names already taken."""
    if EXPRESSION_UNIT not in registry:
        registry.register(
            EXPRESSION_UNIT,
            ExpressionUnit(),
            description="Evaluates embedded expressions",
            tags=["builtin"],
        )
    if LOG_UNIT not in registry:
        registry.register(
            LOG_UNIT,
            LogUnit(),
            description="Logs a message and passes its value through",
            tags=["builtin"],
        )
    return registry


__all__ = [
    "EXPRESSION_UNIT",
    "ExpressionUnit",
    "LOG_UNIT",
    "LogUnit",
    "register_builtin_units",
]
