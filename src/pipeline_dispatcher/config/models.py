"""
Configuration Models - Pydantic Models for Type-Safe Config.

All configuration is validated at load time using Pydantic. Structural
checks that span pipelines (duplicate routes, unknown units) happen later,
in PipelineValidator, once the unit registry is known.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from pipeline_dispatcher.authorization.policy import MatchMode
from pipeline_dispatcher.dispatch.dispatcher import DEFAULT_TIMEOUT_SECONDS


class EngineConfig(BaseModel):
    """Dispatcher-wide engine settings."""

    timeout_seconds: Optional[float] = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)
    expression_cache_size: int = Field(default=4096, ge=1)
    default_match: MatchMode = MatchMode.ALL
    offload_sync_units: bool = False


class AuthorizationConfig(BaseModel):
    """Authorization entry for one route."""

    unauthenticated: bool = False
    permissions: List[str] = Field(default_factory=list)
    roles: List[str] = Field(default_factory=list)
    match: Optional[MatchMode] = None


class StepConfig(BaseModel):
    """One step: a named call to a computation unit."""

    name: str = Field(min_length=1)
    uses: str = Field(min_length=1)
    with_: Dict[str, Any] = Field(default_factory=dict, alias="with")
    summary: str = ""

    model_config = {"populate_by_name": True}


class PipelineConfig(BaseModel):
    """Pipeline bound to one interface method."""

    interface: str = Field(min_length=1)
    method: str = Field(min_length=1)
    summary: str = ""
    output: Optional[str] = None
    authorization: Optional[AuthorizationConfig] = None
    steps: List[StepConfig] = Field(default_factory=list)


class DispatcherConfig(BaseModel):
    """Root configuration object."""

    version: str = "1.0"
    engine: EngineConfig = Field(default_factory=EngineConfig)
    pipelines: List[PipelineConfig] = Field(default_factory=list)
