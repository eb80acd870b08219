"""
Dispatch Package - Entry Point for Transport Adapters.

Components:
    - Dispatcher: resolve route, authorize, execute
    - RouteTable: immutable snapshot swapped atomically on reload
    - RouteInfo: public description of a registered route
"""

from pipeline_dispatcher.dispatch.dispatcher import (
    DEFAULT_TIMEOUT_SECONDS,
    Dispatcher,
    RouteInfo,
    RouteTable,
)

__all__ = ["DEFAULT_TIMEOUT_SECONDS", "Dispatcher", "RouteInfo", "RouteTable"]
