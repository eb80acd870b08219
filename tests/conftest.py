"""
Pytest Configuration and Shared Fixtures.

This module contains fixtures available to all tests.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import pytest

from pipeline_dispatcher.adapters.console_logger import ConsoleAuditLogger
from pipeline_dispatcher.adapters.metrics_collector import InMemoryMetricsCollector
from pipeline_dispatcher.authorization.gate import AuthorizationGate
from pipeline_dispatcher.authorization.policy import AuthorizationPolicy
from pipeline_dispatcher.caching.expression_cache import CacheConfig, ExpressionCache
from pipeline_dispatcher.dispatch.dispatcher import Dispatcher
from pipeline_dispatcher.domain.entities import Claims, Pipeline, RouteKey, Step
from pipeline_dispatcher.expression.values import expr
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry
from pipeline_dispatcher.registry.unit_registry import UnitRegistry
from pipeline_dispatcher.units import register_builtin_units


class RecordingUnit:
    """Unit that records every call and returns a configurable value."""

    def __init__(self, name: str = "recorder", result: Any = None) -> None:
        self._name = name
        self.result = result
        self.calls = []

    @property
    def name(self) -> str:
        return self._name

    def invoke(self, config: Dict[str, Any], context: Any) -> Any:
        self.calls.append(dict(config))
        return self.result if self.result is not None else dict(config)


@pytest.fixture(autouse=True)
def set_random_seed():
    """Ensure all tests are deterministic."""
    random.seed(42)
    yield


@pytest.fixture
def sample_config_path() -> Path:
    """Path to sample configuration file."""
    return Path(__file__).parent / "fixtures" / "sample_config.yaml"


@pytest.fixture
def console_logger() -> ConsoleAuditLogger:
    """Create console logger for testing."""
    return ConsoleAuditLogger(verbose=False)


@pytest.fixture
def metrics_collector() -> InMemoryMetricsCollector:
    """Create metrics collector for testing."""
    return InMemoryMetricsCollector()


@pytest.fixture
def expression_cache() -> ExpressionCache:
    """Private expression cache, isolated from the process-wide default."""
    return ExpressionCache(CacheConfig(max_entries=8))


@pytest.fixture
def recorder() -> RecordingUnit:
    return RecordingUnit()


@pytest.fixture
def units(recorder: RecordingUnit) -> UnitRegistry:
    """Unit registry with the built-ins and a recording unit."""
    registry = UnitRegistry()
    registry.register("recorder", recorder)
    return register_builtin_units(registry)


@pytest.fixture
def greet_pipeline() -> Pipeline:
    """Single-step greeting pipeline."""
    return Pipeline(
        interface="greeter",
        method="hello",
        steps=(
            Step(name="greet", uses="expr", with_={"value": expr('"Hello, " + input.name')}),
        ),
    )


@pytest.fixture
def alice() -> Claims:
    return Claims(subject="alice", permissions=frozenset({"greet"}), roles=frozenset({"user"}))


def make_dispatcher(
    pipelines: Iterable[Pipeline],
    units: UnitRegistry,
    policies: Optional[Dict[RouteKey, AuthorizationPolicy]] = None,
    **kwargs: Any,
) -> Dispatcher:
    """Build a dispatcher from in-memory pipelines and policies."""
    registry = PipelineRegistry.build(pipelines, units)
    return Dispatcher(registry, AuthorizationGate(policies or {}), **kwargs)


@pytest.fixture
def dispatcher_factory(units: UnitRegistry):
    """Factory building dispatchers against the shared ``units`` fixture."""

    def factory(
        pipelines: Iterable[Pipeline],
        policies: Optional[Dict[RouteKey, AuthorizationPolicy]] = None,
        **kwargs: Any,
    ) -> Dispatcher:
        return make_dispatcher(pipelines, units, policies, **kwargs)

    return factory
