"""
Pipeline Dispatcher - Authorized Dispatch of Interface Calls to Pipelines.

Maps an (interface, method) invocation to a declarative pipeline of steps,
checks the caller's claims against a deny-by-default authorization table,
and runs the steps in order, each step seeing the invocation input and the
outputs of earlier steps through embedded expressions.

Architecture:
    - Hexagonal Architecture (Ports & Adapters)
    - Dependency Injection for testability
    - Immutable route tables swapped atomically on reload
    - Configuration-driven behavior via YAML

Main Components:
    - domain: Core entities (Pipeline, Step, Claims, Failure, InvocationResult)
    - expression: Expression parser, evaluator and compiled step values
    - registry: Computation unit registry and pipeline registry
    - authorization: Policies and the authorization gate
    - pipeline: Step executor and invocation context
    - dispatch: Dispatcher entry point
    - adapters / observability: Audit logging and metrics
    - config: Configuration models, loader and builder

Example:
    >>> from pipeline_dispatcher import ConfigLoader, build_dispatcher
    >>> config = ConfigLoader().load("config/dispatcher.yaml")
    >>> dispatcher = build_dispatcher(config)
    >>> result = dispatcher.handle_sync("greeter", "hello", input={"name": "Ada"})
    >>> print(result.value)

"""

import logging

__version__ = "0.1.0"


def configure_logging(
    level: int = logging.INFO,
    format: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
) -> None:
    """
    Configure logging for Pipeline Dispatcher.

    Call this at application startup to see log messages.
    By default, only WARNING and above are visible.

    Args:
        level: Logging level (default: INFO)
        format: Log message format

    Example:
        >>> import pipeline_dispatcher
        >>> pipeline_dispatcher.configure_logging(logging.DEBUG)
    """
    logging.basicConfig(
        level=level,
        format=format,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("pipeline_dispatcher").setLevel(level)


from pipeline_dispatcher.authorization import (  # noqa: E402
    AuthorizationGate,
    AuthorizationPolicy,
    MatchMode,
)
from pipeline_dispatcher.config import (  # noqa: E402
    ConfigLoader,
    DispatcherConfig,
    build_dispatcher,
    load_config,
)
from pipeline_dispatcher.dispatch import Dispatcher  # noqa: E402
from pipeline_dispatcher.domain.entities import (  # noqa: E402
    Claims,
    Failure,
    InvocationResult,
    Pipeline,
    Step,
)
from pipeline_dispatcher.domain.errors import DispatchError, ErrorKind  # noqa: E402
from pipeline_dispatcher.expression import expr  # noqa: E402
from pipeline_dispatcher.registry import PipelineRegistry, UnitRegistry  # noqa: E402

__all__ = [
    "AuthorizationGate",
    "AuthorizationPolicy",
    "Claims",
    "ConfigLoader",
    "DispatchError",
    "Dispatcher",
    "DispatcherConfig",
    "ErrorKind",
    "Failure",
    "InvocationResult",
    "MatchMode",
    "Pipeline",
    "PipelineRegistry",
    "Step",
    "UnitRegistry",
    "build_dispatcher",
    "configure_logging",
    "expr",
    "load_config",
    "__version__",
]
