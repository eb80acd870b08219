"""
Unit Tests for domain entities and the error taxonomy.

Test Aspects Covered:
    ✅ Business Logic: Failure wire shape, result metadata
    ✅ Edge Cases: Denials never carry details, immutability
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pipeline_dispatcher.domain.entities import (
    Failure,
    InvocationResult,
    Pipeline,
    RouteKey,
    Step,
)
from pipeline_dispatcher.domain.errors import (
    ConfigurationError,
    DispatchError,
    ErrorKind,
    InvocationCancelled,
    RouteNotFound,
    StepError,
)
from pipeline_dispatcher.expression.errors import FieldNotFound, ParseError, TypeMismatch
from pipeline_dispatcher.expression.values import MapNode, expr


class TestErrorKinds:
    """Status mapping."""

    @pytest.mark.parametrize(
        "kind, status",
        [
            (ErrorKind.ROUTE_NOT_FOUND, 404),
            (ErrorKind.PERMISSION_DENIED, 403),
            (ErrorKind.PARSE_ERROR, 500),
            (ErrorKind.FIELD_NOT_FOUND, 500),
            (ErrorKind.TYPE_MISMATCH, 500),
            (ErrorKind.STEP_FAILURE, 500),
            (ErrorKind.CANCELLED, 499),
        ],
    )
    def test_status(self, kind: ErrorKind, status: int) -> None:
        assert kind.status == status

    @pytest.mark.parametrize(
        "error, kind",
        [
            (RouteNotFound("a", "b"), ErrorKind.ROUTE_NOT_FOUND),
            (ParseError("bad", "x +", 2), ErrorKind.PARSE_ERROR),
            (FieldNotFound(["input", "a"], "a"), ErrorKind.FIELD_NOT_FOUND),
            (TypeMismatch("+", "a", True), ErrorKind.TYPE_MISMATCH),
            (StepError("unit failed"), ErrorKind.STEP_FAILURE),
            (InvocationCancelled("stop"), ErrorKind.CANCELLED),
            (ConfigurationError("bad config", ["p"]), ErrorKind.PARSE_ERROR),
        ],
    )
    def test_every_error_has_kind(self, error: DispatchError, kind: ErrorKind) -> None:
        assert isinstance(error, DispatchError)
        assert error.kind is kind


class TestFailure:
    """Failure wire shape."""

    def test_step_failure_dict(self) -> None:
        """
        SCENARIO: Failure raised inside a step
        EXPECTED: type, code, status, message, timestamp, step context, details
        """
        # Arrange
        failure = Failure.from_error(
            FieldNotFound(["steps", "later"], "later"), step_name="early", step_index=0
        )

        # Act
        payload = failure.to_dict()

        # Assert
        assert payload["type"] == "FieldNotFound"
        assert payload["code"] == "field_not_found"
        assert payload["status"] == 500
        assert payload["step"] == "early"
        assert payload["step_index"] == 0
        assert payload["details"]["path"] == "steps.later"
        assert payload["timestamp"].endswith("+00:00")

    def test_route_not_found_has_no_step(self) -> None:
        payload = Failure.from_error(RouteNotFound("a", "b")).to_dict()

        assert payload["type"] == "RouteNotFound"
        assert "step" not in payload

    def test_denial_is_fixed(self) -> None:
        payload = Failure.permission_denied().to_dict()

        assert set(payload) == {"type", "code", "status", "message", "timestamp"}
        assert payload["message"] == "Permission denied"

    def test_frozen(self) -> None:
        failure = Failure.permission_denied()

        with pytest.raises(ValidationError):
            failure.message = "changed"


class TestInvocationResult:
    """Result construction."""

    def test_success_and_metadata(self) -> None:
        result = InvocationResult.success("v", {"a": "v"})

        stamped = result.with_metadata("corr", 0.5)

        assert stamped.ok and stamped.value == "v"
        assert stamped.correlation_id == "corr"
        assert stamped.duration_seconds == 0.5
        assert result.correlation_id is None
        assert stamped.kind is None

    def test_failed(self) -> None:
        result = InvocationResult.failed(Failure.permission_denied())

        assert not result.ok
        assert result.kind is ErrorKind.PERMISSION_DENIED
        assert result.value is None


class TestPipelineEntities:
    """Pipeline and Step."""

    def test_step_compiles_bindings(self) -> None:
        step = Step("greet", "expr", {"value": expr("input.name"), "n": 1})

        assert isinstance(step.bindings, MapNode)
        assert step.bindings.resolve({"input": {"name": "Ada"}}) == {"value": "Ada", "n": 1}

    def test_pipeline_key_and_names(self) -> None:
        pipeline = Pipeline("greeter", "hello", [Step("a", "expr"), Step("b", "expr")])

        assert pipeline.key == RouteKey("greeter", "hello")
        assert str(pipeline.key) == "greeter::hello"
        assert pipeline.step_names == ("a", "b")
        assert isinstance(pipeline.steps, tuple)
