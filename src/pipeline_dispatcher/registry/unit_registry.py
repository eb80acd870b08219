"""
Unit Registry - Computation Unit Management.

This module provides a thread-safe registry of the computation units that
steps may reference in ``uses``. Units are registered at startup; the
pipeline registry captures the instances it needs when it is built, so
later changes here never affect pipelines already built.

Usage:
    registry = UnitRegistry()
    registry.register("expr", ExpressionUnit(), "1.0.0")
    registry.register_function("upper", lambda config, ctx: config["value"].upper())

    unit = registry.get("expr")
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Protocol

from pipeline_dispatcher.interfaces.computation_unit import ComputationUnit

logger = logging.getLogger(__name__)


@dataclass
class UnitInfo:
    """Metadata about a registered computation unit."""

    name: str
    version: str
    unit: Optional[ComputationUnit]
    config: Any = None
    description: str = ""
    tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "name": self.name,
            "version": self.version,
            "description": self.description,
            "tags": self.tags,
            "unit_type": type(self.unit).__name__ if self.unit else None,
        }


class FunctionUnit:
    """Adapts a plain (sync or async) function to the ComputationUnit protocol."""

    def __init__(self, name: str, func: Callable[..., Any]) -> None:
        self._name = name
        self._func = func
        self._wants_context = _accepts_two_args(func)

    @property
    def name(self) -> str:
        return self._name

    def invoke(self, config: Dict[str, Any], context: Any) -> Any:
        if self._wants_context:
            return self._func(config, context)
        return self._func(config)

    def __repr__(self) -> str:
        return f"FunctionUnit(name={self._name!r})"


def _accepts_two_args(func: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(func).parameters.values()
    except (TypeError, ValueError):
        return True
    positional = [
        p for p in params
        if p.kind in (p.POSITIONAL_ONLY, p.POSITIONAL_OR_KEYWORD)
    ]
    has_varargs = any(p.kind == p.VAR_POSITIONAL for p in params)
    return has_varargs or len(positional) >= 2


class UnitRegistryProtocol(Protocol):
    """Protocol for unit registry implementations."""

    def register(
        self,
        name: str,
        unit: ComputationUnit,
        version: str = "1.0.0",
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """Register a unit instance."""
        ...

    def get(self, name: str) -> Optional[ComputationUnit]:
        """Get a unit by name."""
        ...

    def __contains__(self, name: object) -> bool:
        ...


class UnitRegistry:
    """
    Thread-safe registry of computation units.

    Supports:
        - Registration of unit instances and plain functions
        - Factory pattern for lazily built units
        - Version tracking per unit
    """

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._units: Dict[str, UnitInfo] = {}
        self._lock = RLock()
        self._factories: Dict[str, Callable[[Any], ComputationUnit]] = {}
        logger.debug("UnitRegistry initialized")

    def register(
        self,
        name: str,
        unit: ComputationUnit,
        version: str = "1.0.0",
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a computation unit.

        Args:
            name: Identifier steps use in ``uses``
            unit: Unit instance
            version: Version string for the unit
            description: Optional description
            tags: Optional tags for categorization

        Raises:
            ValueError: If a unit with this name is already registered
        """
        if not callable(getattr(unit, "invoke", None)):
            raise TypeError(f"Unit '{name}' does not implement invoke(config, context)")

        with self._lock:
            self._ensure_free(name)
            self._units[name] = UnitInfo(
                name=name,
                version=version,
                unit=unit,
                description=description,
                tags=tags or [],
            )
            logger.info(f"Registered unit: {name} v{version}")

    def register_function(
        self,
        name: str,
        func: Callable[..., Any],
        version: str = "1.0.0",
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """Register a plain function taking ``(config)`` or ``(config, context)``."""
        self.register(
            name,
            FunctionUnit(name, func),
            version=version,
            description=description or (func.__doc__ or "").strip(),
            tags=tags,
        )

    def register_with_factory(
        self,
        name: str,
        factory: Callable[[Any], ComputationUnit],
        version: str,
        config: Any = None,
        description: str = "",
        tags: Optional[List[str]] = None,
    ) -> None:
        """
        Register a unit built lazily by a factory on first lookup.

        Args:
            name: Identifier steps use in ``uses``
            factory: Function that creates the unit from ``config``
            version: Version string
            config: Configuration passed to factory
            description: Optional description
            tags: Optional tags
        """
        with self._lock:
            self._ensure_free(name)
            self._units[name] = UnitInfo(
                name=name,
                version=version,
                unit=None,
                config=config,
                description=description,
                tags=tags or [],
            )
            self._factories[name] = factory
            logger.info(f"Registered unit with factory: {name} v{version}")

    def unregister(self, name: str) -> bool:
        """
        Unregister a unit by name.

        Returns:
            True if unit was removed, False if not found
        """
        with self._lock:
            if name not in self._units:
                logger.warning(f"Cannot unregister: unit '{name}' not found")
                return False

            del self._units[name]
            self._factories.pop(name, None)
            logger.info(f"Unregistered unit: {name}")
            return True

    def get(self, name: str) -> Optional[ComputationUnit]:
        """
        Get a unit by name, building it on first access if it has a factory.

        Returns:
            Unit instance or None if not found
        """
        with self._lock:
            info = self._units.get(name)
            if info is None:
                return None
            if info.unit is None:
                info.unit = self._factories[name](info.config)
                logger.debug(f"Built unit '{name}' from factory")
            return info.unit

    def list_all(self) -> Dict[str, UnitInfo]:
        """List all registered units."""
        with self._lock:
            return dict(self._units)

    def names(self) -> List[str]:
        with self._lock:
            return list(self._units)

    def get_version(self, name: str) -> Optional[str]:
        """Get version string for a unit."""
        with self._lock:
            info = self._units.get(name)
            return info.version if info else None

    def get_versions(self) -> Dict[str, str]:
        """Get all unit versions."""
        with self._lock:
            return {name: info.version for name, info in self._units.items()}

    @property
    def registered_count(self) -> int:
        """Total number of registered units."""
        with self._lock:
            return len(self._units)

    def clear(self) -> None:
        """Remove all registered units."""
        with self._lock:
            self._units.clear()
            self._factories.clear()
            logger.info("Cleared all units from registry")

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._units

    def _ensure_free(self, name: str) -> None:
        if name in self._units:
            raise ValueError(
                f"Unit '{name}' is already registered. Use unregister() first."
            )
