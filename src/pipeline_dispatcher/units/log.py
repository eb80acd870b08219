"""
Log Unit.

Writes a resolved message to the ``pipeline_dispatcher.units.log`` logger
and passes its ``value`` through, so a pipeline can trace intermediate data
without changing it.
"""

from __future__ import annotations

import logging
from typing import Any, Dict

from pipeline_dispatcher.domain.errors import StepError

logger = logging.getLogger(__name__)

LOG_UNIT = "log"

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LogUnit:
    """Logs ``message`` at ``level`` and returns ``value`` unchanged."""

    @property
    def name(self) -> str:
        return LOG_UNIT

    def invoke(self, config: Dict[str, Any], context: Any) -> Any:
        level_name = str(config.get("level", "info")).lower()
        if level_name not in _LEVELS:
            raise StepError(f"Unknown log level '{level_name}'", {"level": level_name})

        message = config.get("message", "")
        correlation_id = getattr(context, "correlation_id", None)
        prefix = f"[{correlation_id[:8]}] " if correlation_id else ""
        logger.log(_LEVELS[level_name], f"{prefix}{message}")
        return config.get("value")
