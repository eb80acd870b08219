"""
Unit Tests for ConfigLoader and the dispatcher builder.

Test Aspects Covered:
    ✅ Business Logic: Config loading, profile merging, dispatcher wiring
    ✅ Edge Cases: !expr tag, $expr mappings, default match mode
    ✅ Error Handling: Invalid YAML, missing files, malformed expressions
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from pipeline_dispatcher.authorization.policy import MatchMode
from pipeline_dispatcher.caching.expression_cache import default_cache
from pipeline_dispatcher.config.builder import (
    build_dispatcher,
    build_gate,
    build_pipelines,
    reload_dispatcher,
)
from pipeline_dispatcher.config.loader import ConfigLoader, deep_merge, load_config
from pipeline_dispatcher.config.models import DispatcherConfig
from pipeline_dispatcher.domain.entities import Claims
from pipeline_dispatcher.domain.errors import ConfigurationError, ErrorKind
from pipeline_dispatcher.expression.values import ExpressionRef
from pipeline_dispatcher.registry.unit_registry import UnitRegistry


class TestConfigLoader:
    """Test cases for ConfigLoader."""

    def test_loads_valid_yaml(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Sample YAML configuration file
        EXPECTED: DispatcherConfig with engine settings and pipelines
        """
        # Arrange
        loader = ConfigLoader(base_path=sample_config_path.parent)

        # Act
        config = loader.load(sample_config_path.name)

        # Assert
        assert isinstance(config, DispatcherConfig)
        assert config.engine.timeout_seconds == 2.5
        assert config.engine.expression_cache_size == 256
        assert [p.method for p in config.pipelines] == ["hello", "create", "purge"]

    def test_expr_tag_becomes_marker(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Step value tagged !expr
        EXPECTED: Loaded as ExpressionRef with the source text
        """
        config = load_config(sample_config_path)

        value = config.pipelines[0].steps[0].with_["value"]
        assert value == ExpressionRef('"Hello, " + input.name')

    def test_applies_defaults(self) -> None:
        """
        SCENARIO: Empty config
        EXPECTED: Defaults applied for missing fields
        """
        config = ConfigLoader().load_from_dict({})

        assert config.version == "1.0"
        assert config.engine.timeout_seconds == 5.0
        assert config.engine.default_match is MatchMode.ALL
        assert config.pipelines == []

    def test_with_alias(self) -> None:
        config = ConfigLoader().load_from_dict(
            {"pipelines": [{"interface": "a", "method": "b", "steps": [
                {"name": "s", "uses": "expr", "with": {"value": 1}}
            ]}]}
        )

        assert config.pipelines[0].steps[0].with_ == {"value": 1}

    def test_load_from_string(self) -> None:
        config = ConfigLoader().load_from_string("engine:\n  timeout_seconds: 1\n")

        assert config.engine.timeout_seconds == 1

    def test_invalid_values_rejected(self) -> None:
        """
        SCENARIO: Negative timeout
        EXPECTED: ValidationError
        """
        with pytest.raises(ValidationError):
            ConfigLoader().load_from_dict({"engine": {"timeout_seconds": -1}})

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            ConfigLoader(base_path=tmp_path).load("missing.yaml")

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        config_file = tmp_path / "bad.yaml"
        config_file.write_text("pipelines: [unclosed\n")

        with pytest.raises(yaml.YAMLError):
            ConfigLoader(base_path=tmp_path).load("bad.yaml")

    def test_expr_tag_requires_scalar(self) -> None:
        with pytest.raises(yaml.YAMLError):
            ConfigLoader().load_from_string("x: !expr [1, 2]\n")

    def test_non_mapping_root_rejected(self) -> None:
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            ConfigLoader().load_from_string("- just\n- a list\n")

    def test_deep_merge_replaces_lists(self) -> None:
        base = {"engine": {"timeout_seconds": 3, "default_match": "all"}, "pipelines": [1, 2]}

        merged = deep_merge(base, {"engine": {"default_match": "any"}, "pipelines": [3]})

        assert merged == {
            "engine": {"timeout_seconds": 3, "default_match": "any"},
            "pipelines": [3],
        }
        assert base["engine"]["default_match"] == "all"

    def test_profile_deep_merge(self, tmp_path: Path) -> None:
        """
        SCENARIO: Profile overrides one engine setting
        EXPECTED: Override applied, sibling settings kept
        """
        # Arrange
        (tmp_path / "base.yaml").write_text(
            "engine:\n  timeout_seconds: 3\n  expression_cache_size: 64\n"
        )
        profiles = tmp_path / "config" / "profiles"
        profiles.mkdir(parents=True)
        (profiles / "strict.yaml").write_text("engine:\n  timeout_seconds: 1\n")

        # Act
        config = ConfigLoader(base_path=tmp_path).load("base.yaml", profile="strict")

        # Assert
        assert config.engine.timeout_seconds == 1
        assert config.engine.expression_cache_size == 64

    def test_missing_profile_raises(self, tmp_path: Path) -> None:
        (tmp_path / "base.yaml").write_text("version: '1.0'\n")

        with pytest.raises(FileNotFoundError, match="Profile not found"):
            ConfigLoader(base_path=tmp_path).load("base.yaml", profile="nope")


class TestBuilder:
    """Test wiring configuration into a dispatcher."""

    def test_build_gate_from_config(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Routes with and without authorization blocks
        EXPECTED: Policies only for declared blocks, default match applied
        """
        # Arrange
        config = load_config(sample_config_path)

        # Act
        gate = build_gate(config)

        # Assert
        assert len(gate) == 2
        assert gate.policy_for("greeter", "hello").unauthenticated
        assert gate.policy_for("orders", "create").match is MatchMode.ANY
        assert gate.policy_for("admin", "purge") is None

    def test_default_match_inherited(self) -> None:
        config = ConfigLoader().load_from_dict(
            {
                "engine": {"default_match": "any"},
                "pipelines": [
                    {"interface": "a", "method": "b", "authorization": {"permissions": ["p"]}}
                ],
            }
        )

        assert build_gate(config).policy_for("a", "b").match is MatchMode.ANY

    def test_build_pipelines_resizes_default_cache(self, sample_config_path: Path) -> None:
        build_pipelines(load_config(sample_config_path))

        assert default_cache().config.max_entries == 256

    def test_malformed_expressions_collected(self) -> None:
        """
        SCENARIO: Two steps with malformed expressions
        EXPECTED: One ConfigurationError listing both
        """
        config = ConfigLoader().load_from_dict(
            {
                "pipelines": [
                    {
                        "interface": "a",
                        "method": "b",
                        "steps": [
                            {"name": "x", "uses": "expr", "with": {"value": {"$expr": "input +"}}},
                            {"name": "y", "uses": "expr", "with": {"value": {"$expr": "(a"}}},
                        ],
                    }
                ]
            }
        )

        with pytest.raises(ConfigurationError) as exc_info:
            build_pipelines(config)

        assert len(exc_info.value.problems) == 2
        assert exc_info.value.kind is ErrorKind.PARSE_ERROR

    def test_unknown_unit_fails_startup(self) -> None:
        config = ConfigLoader().load_from_dict(
            {"pipelines": [{"interface": "a", "method": "b", "steps": [{"name": "s", "uses": "http"}]}]}
        )

        with pytest.raises(ConfigurationError, match="unknown computation unit"):
            build_dispatcher(config)

    def test_dispatcher_end_to_end(self, sample_config_path: Path) -> None:
        """
        SCENARIO: Dispatcher built from the sample file
        EXPECTED: Open greeting works, any-of orders route, admin denied
        """
        # Arrange
        dispatcher = build_dispatcher(load_config(sample_config_path))
        admin = Claims(subject="ops", permissions=frozenset({"orders:admin"}))

        # Act
        greeting = dispatcher.handle_sync("greeter", "hello", None, {"name": "World!"})
        order = dispatcher.handle_sync("orders", "create", admin, {"qty": 2, "extra": 1})
        purge = dispatcher.handle_sync("admin", "purge", admin)

        # Assert
        assert dispatcher.timeout_seconds == 2.5
        assert greeting.value == "Hello, World!"
        assert order.value == {"amount": 3, "currency": "EUR"}
        assert order.outputs["trace"] is None
        assert purge.kind is ErrorKind.PERMISSION_DENIED

    def test_application_units_used(self) -> None:
        units = UnitRegistry()
        units.register_function("shout", lambda config: config["text"].upper())
        config = ConfigLoader().load_from_string(
            """
pipelines:
  - interface: t
    method: shout
    authorization: {unauthenticated: true}
    steps:
      - name: s
        uses: shout
        with: {text: !expr input}
"""
        )

        dispatcher = build_dispatcher(config, units)

        assert dispatcher.handle_sync("t", "shout", None, "hey").value == "HEY"

    def test_reload_dispatcher(self, sample_config_path: Path) -> None:
        dispatcher = build_dispatcher(load_config(sample_config_path))
        replacement = ConfigLoader().load_from_dict(
            {"pipelines": [{"interface": "x", "method": "y", "authorization": {"unauthenticated": True}}]}
        )

        reload_dispatcher(dispatcher, replacement)

        assert [r.interface for r in dispatcher.list_routes()] == ["x"]
        assert dispatcher.handle_sync("x", "y", None, 5).value == 5

    def test_reload_keeps_application_units(self) -> None:
        """
        SCENARIO: Dispatcher built with an application unit, reloaded without units
        EXPECTED: New routes still resolve the application unit
        """
        # Arrange
        units = UnitRegistry()
        units.register_function("shout", lambda config: config["text"].upper())
        dispatcher = build_dispatcher(ConfigLoader().load_from_dict({"pipelines": []}), units)
        replacement = ConfigLoader().load_from_string(
            """
pipelines:
  - interface: t
    method: shout
    authorization: {unauthenticated: true}
    steps:
      - name: s
        uses: shout
        with: {text: !expr input}
"""
        )

        # Act
        reload_dispatcher(dispatcher, replacement)

        # Assert
        assert dispatcher.units is units
        assert dispatcher.handle_sync("t", "shout", None, "hey").value == "HEY"

    def test_failed_reload_keeps_routes(self, sample_config_path: Path) -> None:
        dispatcher = build_dispatcher(load_config(sample_config_path))
        broken = ConfigLoader().load_from_dict(
            {"pipelines": [{"interface": "x", "method": "y", "steps": [{"name": "s", "uses": "nope"}]}]}
        )

        with pytest.raises(ConfigurationError):
            reload_dispatcher(dispatcher, broken)

        assert len(dispatcher.list_routes()) == 3
