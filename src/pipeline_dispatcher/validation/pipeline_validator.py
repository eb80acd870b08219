"""
Pipeline Validator - Validate Pipelines Before Startup Completes.

Validates the pipeline set before the registry accepts it:
    - Interface, method and step names are non-empty
    - Routes are unique
    - Step names are unique within a pipeline and not reserved
    - Every ``uses`` names a registered computation unit
    - An explicit output step exists in its pipeline

Design Notes:
    - Fail-fast principle: any problem aborts startup
    - All problems are collected and reported together
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Iterable, List, Optional, Set

from pipeline_dispatcher.domain.entities import Pipeline, RouteKey
from pipeline_dispatcher.domain.errors import ConfigurationError

if TYPE_CHECKING:
    from pipeline_dispatcher.registry.unit_registry import UnitRegistryProtocol

logger = logging.getLogger(__name__)

# Root names of the data context that step names must not shadow
RESERVED_NAMES = frozenset({"input", "steps"})


class PipelineValidator:
    """
    Validates pipeline definitions against the registered units.

    Validates:
        - Route and step naming
        - Step name uniqueness
        - Unit references
        - Output step references
    """

    def __init__(self, reserved_names: Optional[Set[str]] = None) -> None:
        """
        Initialize pipeline validator.

        Args:
            reserved_names: Names steps may not use. Defaults to RESERVED_NAMES.
        """
        self.reserved_names = (
            frozenset(reserved_names) if reserved_names is not None else RESERVED_NAMES
        )

    def validate(
        self,
        pipelines: Iterable[Pipeline],
        units: UnitRegistryProtocol,
    ) -> None:
        """
        Validate a set of pipelines.

        Args:
            pipelines: Pipelines to validate
            units: Registry the steps' ``uses`` must resolve against

        Raises:
            ConfigurationError: If validation fails
        """
        errors: List[str] = []
        seen_routes: Set[RouteKey] = set()

        for pipeline in pipelines:
            route = pipeline.key
            if not pipeline.interface or not pipeline.method:
                errors.append(f"{route}: interface and method must be non-empty")
            if route in seen_routes:
                errors.append(f"{route}: route is declared more than once")
            seen_routes.add(route)
            errors.extend(self._validate_pipeline(pipeline, units))

        if errors:
            error_message = "; ".join(errors)
            logger.error(f"Pipeline validation failed: {error_message}")
            raise ConfigurationError(
                f"Invalid pipeline configuration: {error_message}", errors
            )

        logger.debug(f"Validated {len(seen_routes)} pipelines")

    def _validate_pipeline(
        self,
        pipeline: Pipeline,
        units: UnitRegistryProtocol,
    ) -> List[str]:
        """Validate steps of one pipeline."""
        errors: List[str] = []
        route = pipeline.key
        names: Set[str] = set()

        for index, step in enumerate(pipeline.steps):
            where = f"{route} step #{index}"
            if not step.name:
                errors.append(f"{where}: step name must be non-empty")
            elif step.name in self.reserved_names:
                errors.append(f"{where}: step name '{step.name}' is reserved")
            elif step.name in names:
                errors.append(f"{where}: duplicate step name '{step.name}'")
            names.add(step.name)

            if step.uses not in units:
                errors.append(f"{where}: unknown computation unit '{step.uses}'")

        if pipeline.output is not None and pipeline.output not in names:
            errors.append(f"{route}: output step '{pipeline.output}' is not defined")

        return errors
