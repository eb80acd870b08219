"""
Expression Unit.

The in-core computation unit referenced as ``uses: expr``. Its
configuration is resolved by the executor before the call, so the unit
only selects what to return:

    - ``value``: the resolved value (usually an expression)
    - ``data``: a resolved mapping, when no ``value`` is given
"""

from __future__ import annotations

from typing import Any, Dict

from pipeline_dispatcher.domain.errors import StepError

EXPRESSION_UNIT = "expr"


class ExpressionUnit:
    """Returns the step's resolved ``value`` (or ``data``)."""

    @property
    def name(self) -> str:
        return EXPRESSION_UNIT

    def invoke(self, config: Dict[str, Any], context: Any) -> Any:
        if "value" in config:
            return config["value"]
        if "data" in config:
            return config["data"]
        raise StepError(
            "expr unit requires a 'value' or 'data' entry",
            {"keys": sorted(config)},
        )
