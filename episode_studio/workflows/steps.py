"""
Typed step chain

A Workflow is a fixed, ordered list of Steps. Every Step declares the model
it accepts and the model it produces, and the chain checks both sides of
every boundary at run time:

- workflow input fails the first step's input model  -> InputValidationError
- a step's output fails its own output model          -> ContractViolationError
- a step's output fails the next step's input model   -> ContractViolationError

Envelopes carrying extra fields are accepted by the next step (extras are
dropped on validation). Nothing is rolled back on failure.

Usage:
    workflow = (
        Workflow("episode-workflow", EpisodeWorkflowInput, EpisodeWorkflowOutput)
        .then(compose_step)
        .then(generate_step)
        .commit()
    )
    result = await workflow.run(payload)
"""

import time
import uuid
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Type

from pydantic import BaseModel, ValidationError

from episode_studio.services.errors import ContractViolationError, InputValidationError
from episode_studio.services.logger import EpisodeStudioLogger, get_logger

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Per-run data shared by every step of one workflow run"""

    run_id: str
    studio_logger: EpisodeStudioLogger
    state: Dict[str, Any] = field(default_factory=dict)


StepFunction = Callable[[Any, RunContext], Awaitable[Any]]


@dataclass(frozen=True)
class Step:
    """One typed transformation in the chain"""

    id: str
    description: str
    input_model: Type[BaseModel]
    output_model: Type[BaseModel]
    execute: StepFunction


def _coerce(value: Any, model: Type[BaseModel]) -> BaseModel:
    """Validate value against model, accepting instances of other models as dicts."""
    if isinstance(value, BaseModel):
        if type(value) is model:
            # Re-validate so instances built with model_construct are checked too
            return model.model_validate(value.model_dump())
        value = value.model_dump()
    return model.model_validate(value)


class Workflow:
    """Ordered chain of Steps with contracts enforced at every boundary"""

    def __init__(
        self,
        workflow_id: str,
        input_model: Type[BaseModel],
        output_model: Type[BaseModel]
    ):
        self.id = workflow_id
        self.input_model = input_model
        self.output_model = output_model
        self.steps: List[Step] = []
        self._committed = False

    def then(self, step: Step) -> "Workflow":
        """Append a step. Returns self for chaining."""
        if self._committed:
            raise RuntimeError(f"Workflow '{self.id}' is committed; cannot add '{step.id}'")
        if any(s.id == step.id for s in self.steps):
            raise ValueError(f"Duplicate step id '{step.id}' in workflow '{self.id}'")
        self.steps.append(step)
        return self

    def commit(self) -> "Workflow":
        """Freeze the chain."""
        if not self.steps:
            raise ValueError(f"Workflow '{self.id}' has no steps")
        self._committed = True
        logger.debug(f"Workflow '{self.id}' committed: {' → '.join(s.id for s in self.steps)}")
        return self

    def _validate_input(self, input_data: Any) -> BaseModel:
        try:
            validated = _coerce(input_data, self.input_model)
            return _coerce(validated, self.steps[0].input_model)
        except ValidationError as e:
            raise InputValidationError(
                f"Invalid input for workflow '{self.id}': {e.error_count()} error(s)",
                errors=e.errors(include_url=False, include_context=False),
            ) from e

    async def run(self, input_data: Any, run_id: Optional[str] = None) -> BaseModel:
        """
        Run every step in order.

        Args:
            input_data: Dict or model matching the workflow input model
            run_id: Optional identifier used in log lines

        Returns:
            The last step's output, validated against the workflow output model

        Raises:
            InputValidationError: if input_data is malformed
            ContractViolationError: if a step output breaks a contract
            Any error raised by a step itself
        """
        if not self._committed:
            raise RuntimeError(f"Workflow '{self.id}' must be committed before it runs")

        context = RunContext(run_id=run_id or str(uuid.uuid4()), studio_logger=get_logger())
        current = self._validate_input(input_data)

        for index, step in enumerate(self.steps):
            context.studio_logger.stage_started(context.run_id, step.id)
            start = time.time()
            try:
                raw_output = await step.execute(current, context)
            except Exception as e:
                context.studio_logger.stage_failed(context.run_id, step.id, e)
                raise

            try:
                output = _coerce(raw_output, step.output_model)
            except ValidationError as e:
                error = ContractViolationError(step.id, step.output_model.__name__, str(e))
                context.studio_logger.stage_failed(context.run_id, step.id, error)
                raise error from e

            is_last = index == len(self.steps) - 1
            next_model = self.output_model if is_last else self.steps[index + 1].input_model
            try:
                current = _coerce(output, next_model)
            except ValidationError as e:
                error = ContractViolationError(step.id, next_model.__name__, str(e))
                context.studio_logger.stage_failed(context.run_id, step.id, error)
                raise error from e

            context.studio_logger.stage_completed(context.run_id, step.id, time.time() - start)

        return current
