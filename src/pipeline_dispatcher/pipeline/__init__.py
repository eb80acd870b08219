"""
Pipeline Package - Step Execution and Per-Invocation State.

Components:
    - StepExecutor: Runs a pipeline's steps sequentially, fail-fast
    - InvocationContext: Input, claims and append-only step outputs of one request
    - StepOutputs: Ordered record of outputs addressable by name and position

Design Principles:
    - Strictly sequential per invocation
    - Bindings only see steps that already ran
    - No shared mutable state between invocations
"""

from pipeline_dispatcher.pipeline.invocation_context import (
    InvocationContext,
    StepOutputs,
)
from pipeline_dispatcher.pipeline.executor import StepExecutor

__all__ = ["InvocationContext", "StepOutputs", "StepExecutor"]
