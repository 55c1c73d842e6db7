"""Workflow engine driving the generation stages in order."""

from __future__ import annotations

import copy
import time
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass, replace
from typing import Any

from painflow.observability.logging import get_logger
from painflow.observers import ObserverSet, Unsubscribe
from painflow.pipeline.context import WorkflowContext
from painflow.pipeline.stages import (
    DEFAULT_STAGES,
    OutputPredicate,
    Stage,
    StageDefinition,
    StageStatus,
)

log = get_logger(__name__)

Collaborator = Callable[[dict[str, Any]], Awaitable[Any]]
WorkflowObserver = Callable[[tuple[Stage, ...], WorkflowContext], Any]

UNKNOWN_ERROR = "Unknown error"


@dataclass(frozen=True)
class Completed:
    """Every stage completed."""


@dataclass(frozen=True)
class HaltedEmpty:
    """A stage completed without usable output; later stages stay pending."""

    stage_id: str


@dataclass(frozen=True)
class Failed:
    """A collaborator call failed; the stage is marked as error."""

    stage_id: str
    message: str


@dataclass(frozen=True)
class Superseded:
    """A newer run started while this one was waiting on a collaborator."""

    stage_id: str


RunOutcome = Completed | HaltedEmpty | Failed | Superseded


class WorkflowEngine:
    """Run the fixed stage pipeline against an evolving shared context.

    Stages run strictly one after another, one collaborator call each.
    Every transition publishes ``(stages, context)`` to the subscribers.
    A failing collaborator marks its stage as ``error`` and stops the run;
    a stage whose output predicate does not hold stops the run silently.
    Neither case raises out of ``start_workflow``: the returned
    ``RunOutcome`` and the published stage states describe what happened.

    Attributes:
        definitions: The stage definitions, in execution order.
    """

    def __init__(
        self,
        collaborators: Mapping[str, Collaborator],
        definitions: Sequence[StageDefinition] = DEFAULT_STAGES,
        predicates: Mapping[str, OutputPredicate | None] | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            collaborators: Async generation call per stage id.
            definitions: Stage definitions in pipeline order.
            predicates: Optional per-stage override of the output predicate.

        Raises:
            ValueError: If stage ids repeat, a stage has no collaborator,
                or a predicate names an unknown stage.
        """
        ids = [d.id for d in definitions]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Duplicate stage ids in pipeline: {ids}")

        missing = [stage_id for stage_id in ids if stage_id not in collaborators]
        if missing:
            raise ValueError(f"No collaborator for stages: {', '.join(missing)}")

        predicates = predicates or {}
        unknown = sorted(set(predicates) - set(ids))
        if unknown:
            raise ValueError(f"Predicates given for unknown stages: {', '.join(unknown)}")

        self.definitions: tuple[StageDefinition, ...] = tuple(
            replace(d, has_output=predicates[d.id]) if d.id in predicates else d
            for d in definitions
        )
        self._collaborators = dict(collaborators)
        self._stages: list[Stage] = [d.initial_stage() for d in self.definitions]
        self._context = WorkflowContext()
        self._observers: ObserverSet[[tuple[Stage, ...], WorkflowContext]] = ObserverSet(
            "workflow_engine"
        )
        self._run_id = 0
        self._active_run: int | None = None

    def subscribe(self, observer: WorkflowObserver) -> Unsubscribe:
        """Register ``observer(stages, context)``; returns the unsubscribe handle."""
        return self._observers.subscribe(observer)

    def get_stages(self) -> tuple[Stage, ...]:
        return copy.deepcopy(tuple(self._stages))

    def get_context(self) -> WorkflowContext:
        return copy.deepcopy(self._context)

    @property
    def is_running(self) -> bool:
        """True while a run is waiting on a collaborator."""
        return self._active_run is not None

    async def start_workflow(self, user_input: str) -> RunOutcome:
        """Run the pipeline for ``user_input``.

        All stages are reset to pending and the context is replaced before
        the first stage starts.

        Args:
            user_input: Free-text business problem.

        Returns:
            The terminal outcome of this run.
        """
        self._run_id += 1
        run_id = self._run_id
        self._active_run = run_id

        self._stages = [d.initial_stage() for d in self.definitions]
        self._context = WorkflowContext(user_input=user_input)
        log.info("workflow_start", run=run_id, stages=len(self._stages))
        self._publish()

        try:
            for index, definition in enumerate(self.definitions):
                outcome = await self._execute_stage(run_id, index, definition)
                if outcome is not None:
                    return outcome
        finally:
            if self._active_run == run_id:
                self._active_run = None

        log.info("workflow_complete", run=run_id)
        return Completed()

    async def _execute_stage(
        self,
        run_id: int,
        index: int,
        definition: StageDefinition,
    ) -> RunOutcome | None:
        """Run one stage; returns an outcome when the run must stop here."""
        stage_id = definition.id
        self._set_stage(index, status=StageStatus.RUNNING)
        start_time = time.perf_counter()
        log.info("stage_start", run=run_id, stage=stage_id)

        payload = self._context.payload_for(definition.consumes)
        collaborator = self._collaborators[stage_id]

        try:
            result = await collaborator(payload)
        except Exception as e:
            duration = time.perf_counter() - start_time
            if run_id != self._run_id:
                log.info("stage_superseded", run=run_id, stage=stage_id)
                return Superseded(stage_id)
            message = str(e) or UNKNOWN_ERROR
            log.warning(
                "stage_failed",
                run=run_id,
                stage=stage_id,
                error=message,
                error_type=type(e).__name__,
                duration=f"{duration:.2f}s",
            )
            self._set_stage(index, status=StageStatus.ERROR, error=message)
            return Failed(stage_id, message)

        duration = time.perf_counter() - start_time
        if run_id != self._run_id:
            log.info("stage_superseded", run=run_id, stage=stage_id)
            return Superseded(stage_id)

        if definition.produces is not None:
            self._context = self._context.with_result(definition.produces, result)
        self._set_stage(index, status=StageStatus.COMPLETED, result=result)
        log.info("stage_complete", run=run_id, stage=stage_id, duration=f"{duration:.2f}s")

        if definition.has_output is not None and not definition.has_output(result):
            log.info("workflow_halted_empty", run=run_id, stage=stage_id)
            return HaltedEmpty(stage_id)
        return None

    def _set_stage(
        self,
        index: int,
        *,
        status: StageStatus,
        result: Any = None,
        error: str | None = None,
    ) -> None:
        self._stages[index] = replace(self._stages[index], status=status, result=result, error=error)
        self._publish()

    def _publish(self) -> None:
        if not len(self._observers):
            return
        stages = copy.deepcopy(tuple(self._stages))
        context = copy.deepcopy(self._context)
        self._observers.notify(stages, context)
