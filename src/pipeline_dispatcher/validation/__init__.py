"""
Validation Package - Startup Validation of Pipeline Definitions.

Components:
    - PipelineValidator: Structural checks on pipelines before registration

Design Principles:
    - Fail fast at startup, never per request
    - Report every problem at once
"""

from pipeline_dispatcher.validation.pipeline_validator import (
    RESERVED_NAMES,
    PipelineValidator,
)

__all__ = ["RESERVED_NAMES", "PipelineValidator"]
