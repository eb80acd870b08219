"""
Dispatcher Builder - Wire Configuration into a Running Dispatcher.

Turns a validated DispatcherConfig into pipelines, an authorization gate
and a Dispatcher. Every expression is parsed here, so malformed sources
surface as one ConfigurationError at startup instead of failing requests.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from pipeline_dispatcher.authorization.gate import AuthorizationGate
from pipeline_dispatcher.authorization.policy import AuthorizationPolicy, MatchMode
from pipeline_dispatcher.caching.expression_cache import default_cache
from pipeline_dispatcher.config.models import (
    AuthorizationConfig,
    DispatcherConfig,
    PipelineConfig,
)
from pipeline_dispatcher.dispatch.dispatcher import Dispatcher
from pipeline_dispatcher.domain.entities import Pipeline, RouteKey, Step
from pipeline_dispatcher.domain.errors import ConfigurationError
from pipeline_dispatcher.expression.errors import ParseError
from pipeline_dispatcher.interfaces.audit_logger import AuditLogger
from pipeline_dispatcher.interfaces.metrics_collector import MetricsCollector
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry
from pipeline_dispatcher.registry.unit_registry import UnitRegistry
from pipeline_dispatcher.units import register_builtin_units

logger = logging.getLogger(__name__)


def build_pipelines(config: DispatcherConfig) -> List[Pipeline]:
    """
    Build pipeline entities from configuration.

    Raises:
        ConfigurationError: Listing every malformed expression found
    """
    default_cache().resize(config.engine.expression_cache_size)

    pipelines: List[Pipeline] = []
    problems: List[str] = []
    for pipeline_config in config.pipelines:
        steps, step_problems = _build_steps(pipeline_config)
        problems.extend(step_problems)
        pipelines.append(
            Pipeline(
                interface=pipeline_config.interface,
                method=pipeline_config.method,
                steps=tuple(steps),
                output=pipeline_config.output,
                summary=pipeline_config.summary,
            )
        )

    if problems:
        raise ConfigurationError(
            f"Invalid expressions in {len(problems)} step(s)", problems
        )
    return pipelines


def _build_steps(pipeline_config: PipelineConfig) -> Tuple[List[Step], List[str]]:
    route = RouteKey(pipeline_config.interface, pipeline_config.method)
    steps: List[Step] = []
    problems: List[str] = []
    for index, step_config in enumerate(pipeline_config.steps):
        try:
            steps.append(
                Step(
                    name=step_config.name,
                    uses=step_config.uses,
                    with_=step_config.with_,
                    summary=step_config.summary,
                )
            )
        except ParseError as e:
            problems.append(f"{route} step #{index} '{step_config.name}': {e}")
    return steps, problems


def build_policy(
    auth: AuthorizationConfig,
    default_match: MatchMode = MatchMode.ALL,
) -> AuthorizationPolicy:
    return AuthorizationPolicy(
        unauthenticated=auth.unauthenticated,
        permissions=frozenset(auth.permissions),
        roles=frozenset(auth.roles),
        match=auth.match or default_match,
    )


def build_gate(config: DispatcherConfig) -> AuthorizationGate:
    """Build the gate. Pipelines without an authorization block get no policy."""
    entries = []
    for pipeline_config in config.pipelines:
        if pipeline_config.authorization is None:
            logger.warning(
                f"Route {pipeline_config.interface}::{pipeline_config.method} "
                f"has no authorization entry and will deny every caller"
            )
            continue
        entries.append(
            (
                pipeline_config.interface,
                pipeline_config.method,
                build_policy(pipeline_config.authorization, config.engine.default_match),
            )
        )
    return AuthorizationGate.from_entries(entries)


def build_registry(
    config: DispatcherConfig,
    units: Optional[UnitRegistry] = None,
) -> PipelineRegistry:
    """Build and validate the pipeline registry against ``units`` plus the built-ins."""
    units = register_builtin_units(units if units is not None else UnitRegistry())
    return PipelineRegistry.build(build_pipelines(config), units)


def build_dispatcher(
    config: DispatcherConfig,
    units: Optional[UnitRegistry] = None,
    audit_logger: Optional[AuditLogger] = None,
    metrics_collector: Optional[MetricsCollector] = None,
) -> Dispatcher:
    """
    Build a ready-to-serve Dispatcher.

    Args:
        config: Validated configuration
        units: Application units (built-in units are added when absent)
        audit_logger: For audit trail (optional)
        metrics_collector: For performance metrics (optional)

    Returns:
        Dispatcher

    Raises:
        ConfigurationError: If pipelines are invalid
    """
    units = register_builtin_units(units if units is not None else UnitRegistry())
    registry = build_registry(config, units)
    gate = build_gate(config)
    dispatcher = Dispatcher(
        registry,
        gate,
        audit_logger=audit_logger,
        metrics_collector=metrics_collector,
        timeout_seconds=config.engine.timeout_seconds,
        offload_sync_units=config.engine.offload_sync_units,
        units=units,
    )
    logger.info(
        f"Dispatcher built: {len(registry)} routes, {len(gate)} policies, "
        f"timeout={config.engine.timeout_seconds}"
    )
    return dispatcher


def reload_dispatcher(
    dispatcher: Dispatcher,
    config: DispatcherConfig,
    units: Optional[UnitRegistry] = None,
) -> None:
    """
    Rebuild routes from ``config`` and swap them into ``dispatcher``.

    ``units`` defaults to the registry the dispatcher was built with. On
    ConfigurationError the dispatcher keeps serving its current routes.
    """
    registry = build_registry(config, units if units is not None else dispatcher.units)
    gate = build_gate(config)
    dispatcher.reload(registry, gate)
