"""
Pipeline Registry - Immutable Route to Pipeline Table.

Built once at startup from validated configuration and never mutated
afterwards. Construction fails fast when a step references an unknown
computation unit or step names collide within a pipeline.

Usage:
    registry = PipelineRegistry.build(pipelines, units)
    pipeline = registry.resolve("greeter", "hello")
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional

from pipeline_dispatcher.domain.entities import Pipeline, RouteKey, Step
from pipeline_dispatcher.domain.errors import RouteNotFound
from pipeline_dispatcher.interfaces.computation_unit import ComputationUnit
from pipeline_dispatcher.registry.unit_registry import UnitRegistryProtocol
from pipeline_dispatcher.validation.pipeline_validator import PipelineValidator

logger = logging.getLogger(__name__)


class PipelineRegistry:
    """
    Read-only table of pipelines keyed by interface/method.

    The registry also captures the computation unit instances its steps
    reference, so resolving a step's unit never consults a mutable registry.
    Safe for unsynchronized concurrent reads.
    """

    def __init__(
        self,
        pipelines: Mapping[RouteKey, Pipeline],
        units: Mapping[str, ComputationUnit],
    ) -> None:
        """
        Initialize from already validated tables. Prefer ``build()``.

        Args:
            pipelines: Route -> pipeline
            units: Unit name -> unit instance
        """
        self._pipelines = MappingProxyType(dict(pipelines))
        self._units = MappingProxyType(dict(units))

    @classmethod
    def build(
        cls,
        pipelines: Iterable[Pipeline],
        units: UnitRegistryProtocol,
        validator: Optional[PipelineValidator] = None,
    ) -> "PipelineRegistry":
        """
        Validate pipelines and build the registry.

        Args:
            pipelines: Pipeline definitions
            units: Registry of available computation units
            validator: Validator to use (default PipelineValidator)

        Returns:
            Immutable PipelineRegistry

        Raises:
            ConfigurationError: If any pipeline is invalid
        """
        pipelines = list(pipelines)
        (validator or PipelineValidator()).validate(pipelines, units)

        table: Dict[RouteKey, Pipeline] = {p.key: p for p in pipelines}
        captured: Dict[str, ComputationUnit] = {}
        for pipeline in pipelines:
            for step in pipeline.steps:
                if step.uses not in captured:
                    captured[step.uses] = units.get(step.uses)

        logger.info(
            f"Pipeline registry built: {len(table)} routes, {len(captured)} units"
        )
        return cls(table, captured)

    @classmethod
    def empty(cls) -> "PipelineRegistry":
        return cls({}, {})

    def resolve(self, interface: str, method: str) -> Pipeline:
        """
        Look up the pipeline for a route.

        Raises:
            RouteNotFound: If no pipeline is registered for the key
        """
        pipeline = self._pipelines.get(RouteKey(interface, method))
        if pipeline is None:
            raise RouteNotFound(interface, method)
        return pipeline

    def get(self, interface: str, method: str) -> Optional[Pipeline]:
        return self._pipelines.get(RouteKey(interface, method))

    def unit_for(self, step: Step) -> ComputationUnit:
        """Unit captured for a step at build time."""
        return self._units[step.uses]

    def routes(self) -> List[RouteKey]:
        """All registered routes, sorted."""
        return sorted(self._pipelines)

    def __contains__(self, key: object) -> bool:
        return key in self._pipelines

    def __iter__(self) -> Iterator[Pipeline]:
        return iter(self._pipelines.values())

    def __len__(self) -> int:
        return len(self._pipelines)

    def __repr__(self) -> str:
        return f"PipelineRegistry(routes={len(self._pipelines)}, units={len(self._units)})"
