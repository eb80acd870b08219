"""
Step Executor - Sequential Pipeline Engine.

Runs a pipeline's steps strictly in declaration order within one
invocation. Each step's ``with`` bindings are resolved against the input
and the outputs of earlier steps, its computation unit is invoked and
awaited, and the output is recorded under the step's name.

The first failing step aborts the pipeline: no later step runs and the
result carries the failing step's name, index and error kind.
"""

from __future__ import annotations

import asyncio
import functools
import inspect
import logging
import time
from typing import Any, Optional

from pipeline_dispatcher.domain.entities import (
    Claims,
    Failure,
    InvocationResult,
    Pipeline,
    Step,
)
from pipeline_dispatcher.domain.errors import DispatchError, ErrorKind, InvocationCancelled
from pipeline_dispatcher.interfaces.audit_logger import AuditLogger
from pipeline_dispatcher.interfaces.metrics_collector import MetricsCollector
from pipeline_dispatcher.observability.hooks import call_hook
from pipeline_dispatcher.pipeline.invocation_context import InvocationContext
from pipeline_dispatcher.registry.pipeline_registry import PipelineRegistry

logger = logging.getLogger(__name__)


class StepExecutor:
    """Executes pipelines resolved from one PipelineRegistry snapshot."""

    def __init__(
        self,
        registry: PipelineRegistry,
        audit_logger: Optional[AuditLogger] = None,
        metrics_collector: Optional[MetricsCollector] = None,
        offload_sync_units: bool = False,
    ) -> None:
        """
        Initialize executor.

        Args:
            registry: Registry whose captured units the steps invoke
            audit_logger: For audit trail (optional)
            metrics_collector: For step timings and failure counts (optional)
            offload_sync_units: Call unit ``invoke`` in the default thread pool
                so blocking units do not stall the event loop
        """
        self.registry = registry
        self.audit_logger = audit_logger
        self.metrics_collector = metrics_collector
        self.offload_sync_units = offload_sync_units

    async def run(
        self,
        pipeline: Pipeline,
        input: Any = None,
        *,
        claims: Optional[Claims] = None,
        correlation_id: Optional[str] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> InvocationResult:
        """
        Execute a pipeline.

        Args:
            pipeline: Pipeline to run
            input: Original input payload
            claims: Caller claims, visible to units through the context
            correlation_id: Request identifier for tracing
            cancel_event: When set, no further step is started

        Returns:
            InvocationResult with the output of the last (or designated) step,
            or a Failure naming the step that failed
        """
        context = InvocationContext(input=input, claims=claims, correlation_id=correlation_id)

        for index, step in enumerate(pipeline.steps):
            if cancel_event is not None and cancel_event.is_set():
                logger.info(f"{pipeline.key}: cancelled before step '{step.name}'")
                failure = Failure.from_error(
                    InvocationCancelled("Invocation cancelled"),
                    step_name=step.name,
                    step_index=index,
                )
                return InvocationResult.failed(failure)

            failure = await self._execute_step(pipeline, step, index, context)
            if failure is not None:
                return InvocationResult.failed(failure)

        return InvocationResult.success(
            self._final_value(pipeline, context), context.outputs.snapshot()
        )

    async def _execute_step(
        self,
        pipeline: Pipeline,
        step: Step,
        index: int,
        context: InvocationContext,
    ) -> Optional[Failure]:
        """Execute a single step. Returns a Failure, or None on success."""
        started = time.perf_counter()
        if self.audit_logger:
            call_hook(self.audit_logger.log_step_start, step.name, index, {"uses": step.uses})

        try:
            config = step.bindings.resolve(context.data_context())
            output = await self._invoke(step, config, context)
        except asyncio.CancelledError:
            raise
        except DispatchError as e:
            return self._fail(pipeline, step, index, Failure.from_error(
                e, step_name=step.name, step_index=index
            ))
        except Exception as e:
            return self._fail(pipeline, step, index, Failure.of(
                ErrorKind.STEP_FAILURE,
                str(e) or e.__class__.__name__,
                step_name=step.name,
                step_index=index,
                details={"exception_class": e.__class__.__name__},
            ))

        context.record(step.name, output)
        duration = time.perf_counter() - started

        if self.audit_logger:
            call_hook(self.audit_logger.log_step_end, step.name, len(context.outputs), duration)
        if self.metrics_collector:
            call_hook(
                self.metrics_collector.record_timing,
                "step_duration_seconds",
                duration,
                {"step": step.name, "unit": step.uses},
            )
        return None

    async def _invoke(self, step: Step, config: Any, context: InvocationContext) -> Any:
        unit = self.registry.unit_for(step)
        if self.offload_sync_units:
            loop = asyncio.get_running_loop()
            result = await loop.run_in_executor(
                None, functools.partial(unit.invoke, config, context)
            )
        else:
            result = unit.invoke(config, context)
        if inspect.isawaitable(result):
            result = await result
        return result

    def _fail(self, pipeline: Pipeline, step: Step, index: int, failure: Failure) -> Failure:
        logger.warning(
            f"{pipeline.key}: step '{step.name}' (#{index}, uses={step.uses}) "
            f"failed with {failure.kind.value}: {failure.message}"
        )
        if self.audit_logger:
            call_hook(
                self.audit_logger.log_anomaly,
                f"Step '{step.name}' failed: {failure.message}",
                severity="WARNING",
                context={"step": step.name, "step_index": index, "kind": failure.kind.value},
            )
        if self.metrics_collector:
            call_hook(
                self.metrics_collector.record_count,
                "step_failures_total",
                1,
                {"step": step.name, "kind": failure.kind.value},
            )
        return failure

    @staticmethod
    def _final_value(pipeline: Pipeline, context: InvocationContext) -> Any:
        if pipeline.output is not None:
            return context.outputs[pipeline.output]
        last = context.outputs.last()
        if last is None:
            return context.input
        return last[1]
