"""
Unit Tests for PipelineRegistry and PipelineValidator.

Test Aspects Covered:
    ✅ Business Logic: Route resolution, unit capture
    ✅ Error Handling: Duplicate steps, unknown units, unknown output step
    ✅ Edge Cases: Empty pipelines, reserved step names, all problems reported
"""

from __future__ import annotations

import pytest

from pipeline_dispatcher.domain.entities import Pipeline, RouteKey, Step
from pipeline_dispatcher.domain.errors import ConfigurationError, ErrorKind, RouteNotFound
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry
from pipeline_dispatcher.registry.unit_registry import UnitRegistry
from pipeline_dispatcher.validation.pipeline_validator import PipelineValidator


def step(name: str, uses: str = "expr", **with_) -> Step:
    return Step(name=name, uses=uses, with_=with_ or {"value": 1})


class TestResolution:
    """Test route lookup."""

    def test_resolve_registered_route(self, units: UnitRegistry, greet_pipeline: Pipeline) -> None:
        """
        SCENARIO: Route registered at build time
        EXPECTED: resolve returns the pipeline
        """
        # Arrange
        registry = PipelineRegistry.build([greet_pipeline], units)

        # Act
        resolved = registry.resolve("greeter", "hello")

        # Assert
        assert resolved is greet_pipeline
        assert RouteKey("greeter", "hello") in registry
        assert len(registry) == 1

    def test_resolve_unknown_route(self, units: UnitRegistry) -> None:
        """
        SCENARIO: Key never registered
        EXPECTED: RouteNotFound with route_not_found kind
        """
        registry = PipelineRegistry.build([], units)

        with pytest.raises(RouteNotFound) as exc_info:
            registry.resolve("nope", "nothing")

        assert exc_info.value.kind is ErrorKind.ROUTE_NOT_FOUND
        assert registry.get("nope", "nothing") is None

    def test_captures_units_at_build(self, units: UnitRegistry, recorder) -> None:
        """
        SCENARIO: Unit unregistered after the registry is built
        EXPECTED: Registry still returns the captured unit
        """
        # Arrange
        pipeline = Pipeline("svc", "run", (step("a", uses="recorder"),))
        registry = PipelineRegistry.build([pipeline], units)

        # Act
        units.unregister("recorder")

        # Assert
        assert registry.unit_for(pipeline.steps[0]) is recorder

    def test_routes_sorted(self, units: UnitRegistry) -> None:
        pipelines = [Pipeline("b", "x"), Pipeline("a", "y"), Pipeline("a", "x")]
        registry = PipelineRegistry.build(pipelines, units)

        assert registry.routes() == [RouteKey("a", "x"), RouteKey("a", "y"), RouteKey("b", "x")]

    def test_empty_pipeline_is_legal(self, units: UnitRegistry) -> None:
        registry = PipelineRegistry.build([Pipeline("svc", "noop")], units)

        assert len(registry.resolve("svc", "noop")) == 0


class TestValidation:
    """Test fail-fast construction."""

    def test_duplicate_step_names(self, units: UnitRegistry) -> None:
        """
        SCENARIO: Two steps named 'a' in one pipeline
        EXPECTED: ConfigurationError naming the duplicate
        """
        pipeline = Pipeline("svc", "run", (step("a"), step("a")))

        with pytest.raises(ConfigurationError, match="Invalid pipeline configuration") as exc_info:
            PipelineRegistry.build([pipeline], units)

        assert any("'a'" in p for p in exc_info.value.problems)

    def test_unknown_unit(self, units: UnitRegistry) -> None:
        """
        SCENARIO: Step uses an unregistered unit
        EXPECTED: ConfigurationError
        """
        pipeline = Pipeline("svc", "run", (step("a", uses="http"),))

        with pytest.raises(ConfigurationError) as exc_info:
            PipelineRegistry.build([pipeline], units)

        assert any("unknown computation unit 'http'" in p for p in exc_info.value.problems)

    def test_unknown_output_step(self, units: UnitRegistry) -> None:
        pipeline = Pipeline("svc", "run", (step("a"),), output="b")

        with pytest.raises(ConfigurationError) as exc_info:
            PipelineRegistry.build([pipeline], units)

        assert any("output step 'b'" in p for p in exc_info.value.problems)

    def test_duplicate_routes(self, units: UnitRegistry) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            PipelineRegistry.build([Pipeline("svc", "run"), Pipeline("svc", "run")], units)

        assert any("more than once" in p for p in exc_info.value.problems)

    @pytest.mark.parametrize("name", ["input", "steps", ""])
    def test_reserved_or_empty_step_names(self, units: UnitRegistry, name: str) -> None:
        """
        SCENARIO: Step name shadows a data context root or is empty
        EXPECTED: ConfigurationError
        """
        pipeline = Pipeline("svc", "run", (step(name),))

        with pytest.raises(ConfigurationError):
            PipelineRegistry.build([pipeline], units)

    def test_collects_all_problems(self, units: UnitRegistry) -> None:
        """
        SCENARIO: Several independent problems
        EXPECTED: One error listing all of them
        """
        pipelines = [
            Pipeline("svc", "one", (step("a"), step("a"))),
            Pipeline("svc", "two", (step("b", uses="missing"),), output="zzz"),
        ]

        with pytest.raises(ConfigurationError) as exc_info:
            PipelineValidator().validate(pipelines, units)

        assert len(exc_info.value.problems) == 3
        assert exc_info.value.details["problems"] == exc_info.value.problems

    def test_valid_pipelines_pass(self, units: UnitRegistry, greet_pipeline: Pipeline) -> None:
        PipelineValidator().validate([greet_pipeline], units)
