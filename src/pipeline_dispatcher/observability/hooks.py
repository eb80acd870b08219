"""
Observability Hooks.

Audit loggers and metrics collectors are injected by the host
application. A failing hook must not change the outcome of an
invocation, so every call goes through ``call_hook``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)


def call_hook(hook: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Call an audit or metrics hook; its exceptions are logged and dropped."""
    try:
        hook(*args, **kwargs)
    except Exception as e:
        name = getattr(hook, "__qualname__", repr(hook))
        logger.warning(f"Observability hook {name} failed: {e}")
