"""
Registry Module - Units and Pipelines.

Components:
    - UnitRegistry: Thread-safe registry of computation units
    - PipelineRegistry: Immutable route -> pipeline table built at startup
"""

from pipeline_dispatcher.registry.unit_registry import (
    FunctionUnit,
    UnitInfo,
    UnitRegistry,
    UnitRegistryProtocol,
)
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry

__all__ = [
    "FunctionUnit",
    "UnitInfo",
    "UnitRegistry",
    "UnitRegistryProtocol",
    "PipelineRegistry",
]
