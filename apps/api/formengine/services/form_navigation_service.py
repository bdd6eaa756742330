"""Step navigation state machine for a single form session.

All operations take the schema and the session's ``FormEngineState``
explicitly and mutate only that state. The only suspension point is the
awaited submit callback in ``submit``.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from formengine.core.structured_logging import build_log_context
from formengine.enums import SlideDirection, StepDisplayMode, SubmitStatus
from formengine.schemas.forms import FieldError, FormSchema
from formengine.services.form_submission_service import assemble_payload
from formengine.services.form_validation_service import first_error_field, validate_step
from formengine.services.form_visibility_service import resolve_visible
from formengine.types import FieldValue, FormPayload, FormValues

logger = logging.getLogger(__name__)

SubmitCallback = Callable[[FormPayload], Any]  # sync or async


class UnknownFieldError(KeyError):
    """Raised when an operation names a field id the schema does not define."""


@dataclass
class FormEngineState:
    """Mutable per-session state. Discarded with the session."""

    values: FormValues = field(default_factory=dict)
    errors: dict[str, FieldError] = field(default_factory=dict)
    visible: frozenset[str] = frozenset()
    current_step: int = 0
    completed_steps: set[int] = field(default_factory=set)
    slide_direction: SlideDirection = SlideDirection.FORWARD
    submitting: bool = False
    focus_field_id: str | None = None


@dataclass
class SubmitResult:
    """Outcome of ``submit``; the caller must handle every status."""

    status: SubmitStatus
    payload: FormPayload | None = None
    errors: dict[str, FieldError] = field(default_factory=dict)
    failed_step: int | None = None
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.status == SubmitStatus.SUBMITTED


@dataclass(frozen=True)
class StepTab:
    index: int
    step_id: str
    title: str | None
    completed: bool
    current: bool
    accessible: bool


# =============================================================================
# State
# =============================================================================


def create_state(
    schema: FormSchema, initial_values: Mapping[str, FieldValue] | None = None
) -> FormEngineState:
    values = dict(initial_values or {})
    return FormEngineState(values=values, visible=resolve_visible(schema, values))


def _field_ids(schema: FormSchema) -> set[str]:
    return {f.id for f in schema.iter_fields()}


def set_value(schema: FormSchema, state: FormEngineState, field_id: str, value: FieldValue) -> None:
    """Record an answer, clear that field's error, and recompute visibility."""
    if field_id not in _field_ids(schema):
        raise UnknownFieldError(field_id)
    state.values[field_id] = value
    state.errors.pop(field_id, None)
    state.visible = resolve_visible(schema, state.values)


def _replace_step_errors(
    schema: FormSchema,
    state: FormEngineState,
    step_index: int,
    step_errors: dict[str, FieldError],
) -> None:
    for f in schema.steps[step_index].fields:
        state.errors.pop(f.id, None)
    state.errors.update(step_errors)


def _validate_into_state(schema: FormSchema, state: FormEngineState, step_index: int) -> bool:
    step_errors = validate_step(schema, step_index, state.values, state.visible)
    _replace_step_errors(schema, state, step_index, step_errors)
    return not step_errors


def is_last_step(schema: FormSchema, state: FormEngineState) -> bool:
    return state.current_step >= schema.step_count - 1


# =============================================================================
# Transitions
# =============================================================================


def go_to_next(schema: FormSchema, state: FormEngineState) -> bool:
    """Validate the current step and advance on success."""
    if schema.step_count == 0:
        return False

    if not _validate_into_state(schema, state, state.current_step):
        state.focus_field_id = first_error_field(schema, state.current_step, state.errors)
        logger.debug(
            "Step validation failed",
            extra=build_log_context(step_index=state.current_step, field_id=state.focus_field_id),
        )
        return False

    state.focus_field_id = None
    state.completed_steps.add(state.current_step)
    state.slide_direction = SlideDirection.FORWARD
    state.current_step = min(state.current_step + 1, schema.step_count - 1)
    return True


def go_to_prev(schema: FormSchema, state: FormEngineState) -> bool:
    """Step back without validating. Returns whether the index moved."""
    previous = state.current_step
    state.slide_direction = SlideDirection.BACKWARD
    state.current_step = max(state.current_step - 1, 0)
    return state.current_step != previous


def can_jump_to(
    schema: FormSchema,
    state: FormEngineState,
    index: int,
    mode: StepDisplayMode | str,
) -> bool:
    if StepDisplayMode(mode) != StepDisplayMode.TABS:
        return False
    if index < 0 or index >= schema.step_count:
        return False
    return index <= state.current_step or index in state.completed_steps


def jump_to(
    schema: FormSchema,
    state: FormEngineState,
    index: int,
    mode: StepDisplayMode | str,
) -> bool:
    """Direct step jump (tabs mode only). A disallowed jump is a no-op."""
    if not can_jump_to(schema, state, index, mode):
        return False
    state.current_step = index
    return True


async def submit(
    schema: FormSchema,
    state: FormEngineState,
    on_submit: SubmitCallback,
    *,
    preview: bool = False,
) -> SubmitResult:
    """
    Validate every step, then hand the payload to ``on_submit``.

    The first failing step becomes current and the callback is not invoked.
    ``submitting`` is set while the callback runs and cleared however it ends.
    Concurrent calls are not rejected here; callers honor ``submitting``.
    """
    failed_step: int | None = None
    for step_index in range(schema.step_count):
        if not _validate_into_state(schema, state, step_index) and failed_step is None:
            failed_step = step_index

    if failed_step is not None:
        state.current_step = failed_step
        state.focus_field_id = first_error_field(schema, failed_step, state.errors)
        return SubmitResult(
            status=SubmitStatus.INVALID,
            errors=dict(state.errors),
            failed_step=failed_step,
        )

    state.focus_field_id = None
    payload = assemble_payload(schema, state.values, state.visible)
    if preview:
        return SubmitResult(status=SubmitStatus.PREVIEW, payload=payload)

    state.submitting = True
    try:
        outcome = on_submit(payload)
        if inspect.isawaitable(outcome):
            await outcome
    except Exception as exc:
        return SubmitResult(status=SubmitStatus.FAILED, payload=payload, error=exc)
    finally:
        state.submitting = False

    logger.info(f"Form submitted with {len(payload)} field(s)")
    return SubmitResult(status=SubmitStatus.SUBMITTED, payload=payload)


async def handle_enter(
    schema: FormSchema,
    state: FormEngineState,
    mode: StepDisplayMode | str,
    on_submit: SubmitCallback,
    *,
    shift: bool = False,
    in_multiline: bool = False,
    preview: bool = False,
) -> bool | SubmitResult | None:
    """
    Enter-to-advance for progress bar mode.

    Returns None when the key press is ignored, the ``go_to_next`` result on
    intermediate steps, and the ``SubmitResult`` on the last step.
    """
    if StepDisplayMode(mode) != StepDisplayMode.PROGRESS_BAR:
        return None
    if shift or in_multiline:
        return None
    if is_last_step(schema, state):
        return await submit(schema, state, on_submit, preview=preview)
    return go_to_next(schema, state)


# =============================================================================
# Presentation helpers
# =============================================================================


def progress_percent(schema: FormSchema, state: FormEngineState) -> float:
    if schema.step_count <= 1:
        return 100.0
    return (state.current_step + 1) / schema.step_count * 100


def step_tabs(schema: FormSchema, state: FormEngineState) -> list[StepTab]:
    tabs = []
    for index, step in enumerate(schema.steps):
        completed = index in state.completed_steps
        tabs.append(
            StepTab(
                index=index,
                step_id=step.id,
                title=step.title,
                completed=completed,
                current=index == state.current_step,
                accessible=index <= state.current_step or completed,
            )
        )
    return tabs
