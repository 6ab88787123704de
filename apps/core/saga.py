"""
Saga runner for multi-step writes that span the document store and the
media store.

Neither store takes part in a shared transaction, so a workflow is written as
an ordered list of steps:

- a forward action, whose result is recorded in the context under the step name
- an optional compensation, run in reverse order when a later step fails
- best-effort steps, whose failure is logged and the saga carries on

Failures of best-effort steps and of compensations become
OrphanResourceWarning entries: logged at WARNING, never raised.

Usage:
    saga = Saga('reject_submission', submission_id=sid)
    saga.add_step('delete_image', delete_blob, best_effort=True, resource=key)
    saga.add_step('delete_document', delete_doc)
    context = saga.run()
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from apps.core.exceptions import OrphanResourceWarning

logger = logging.getLogger(__name__)


@dataclass
class SagaContext:
    """State shared between saga steps."""
    data: Dict[str, Any] = field(default_factory=dict)
    results: Dict[str, Any] = field(default_factory=dict)
    warnings: List[OrphanResourceWarning] = field(default_factory=list)
    completed: List[str] = field(default_factory=list)

    def set(self, key: str, value: Any):
        self.data[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def result(self, step: str, default: Any = None) -> Any:
        return self.results.get(step, default)


StepAction = Callable[[SagaContext], Any]


class Saga:
    """Ordered forward steps with compensations and best-effort cleanup."""

    @dataclass
    class Step:
        name: str
        action: StepAction
        compensation: Optional[StepAction] = None
        best_effort: bool = False
        resource: Optional[str] = None

    def __init__(self, name: str, **data):
        self.name = name
        self.steps: List[Saga.Step] = []
        self.context = SagaContext(data=dict(data))

    def add_step(
        self,
        name: str,
        action: StepAction,
        compensation: Optional[StepAction] = None,
        best_effort: bool = False,
        resource: Optional[str] = None,
    ) -> 'Saga':
        """
        Append a step.

        Args:
            name: Step name, also the key of its result in the context
            action: Forward action, receives the saga context
            compensation: Undo action run if a later step fails
            best_effort: Log and continue when the action fails
            resource: Identifier of what the step touches, for warnings
        """
        self.steps.append(self.Step(
            name=name,
            action=action,
            compensation=compensation,
            best_effort=best_effort,
            resource=resource,
        ))
        return self

    def run(self) -> SagaContext:
        """
        Run every step in order.

        Raises whatever a required step raised, after compensating the
        steps that already completed.
        """
        context = self.context
        done: List[Saga.Step] = []

        for step in self.steps:
            try:
                context.results[step.name] = step.action(context)
            except Exception as e:
                if step.best_effort:
                    self._orphaned(step.name, step.resource, e)
                    continue
                logger.error("Saga '%s' failed at step '%s': %s", self.name, step.name, e)
                self._compensate(done)
                raise

            done.append(step)
            context.completed.append(step.name)

        return context

    def _compensate(self, done: List['Saga.Step']):
        for step in reversed(done):
            if step.compensation is None:
                continue
            try:
                step.compensation(self.context)
                logger.info("Saga '%s' compensated step '%s'", self.name, step.name)
            except Exception as e:
                self._orphaned(f"compensate {step.name}", step.resource, e)

    def _orphaned(self, step: str, resource: Optional[str], cause: Exception):
        warning = OrphanResourceWarning(step=step, resource=resource, cause=cause)
        self.context.warnings.append(warning)
        logger.warning(
            "Saga '%s': %s",
            self.name,
            warning,
            extra={
                "saga": self.name,
                "step": step,
                "resource": resource,
                **{f"saga_{key}": value for key, value in self.context.data.items()},
            },
        )
