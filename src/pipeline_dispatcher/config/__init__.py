"""
Configuration Package - Models, Loaders and Wiring.

    - Pydantic models for type-safe configuration
    - YAML loader with ``!expr`` tag and profile overlays
    - Builder that wires registry, gate and dispatcher

Configuration Structure:
    - DispatcherConfig: Root configuration object
    - EngineConfig: Timeout, expression cache size, default match mode
    - PipelineConfig / StepConfig: Routes and their steps
    - AuthorizationConfig: Per-route policy
"""

from pipeline_dispatcher.config.builder import (
    build_dispatcher,
    build_gate,
    build_pipelines,
    build_policy,
    build_registry,
    reload_dispatcher,
)
from pipeline_dispatcher.config.loader import (
    ConfigLoader,
    ConfigYamlLoader,
    deep_merge,
    load_config,
    read_yaml,
)
from pipeline_dispatcher.config.models import (
    AuthorizationConfig,
    DispatcherConfig,
    EngineConfig,
    PipelineConfig,
    StepConfig,
)

__all__ = [
    "AuthorizationConfig",
    "ConfigLoader",
    "ConfigYamlLoader",
    "DispatcherConfig",
    "EngineConfig",
    "PipelineConfig",
    "StepConfig",
    "build_dispatcher",
    "build_gate",
    "build_pipelines",
    "build_policy",
    "build_registry",
    "deep_merge",
    "load_config",
    "read_yaml",
    "reload_dispatcher",
]
