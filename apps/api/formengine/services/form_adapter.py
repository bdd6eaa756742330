"""Presentation boundary between the engine and field widgets.

The engine hands each renderable field to an adapter as a
``FieldRenderProps`` bundle and receives value changes back through
``set_value``. Dispatch by field type here is independent of the validation
dispatch in ``form_validation_service``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Protocol

from formengine.schemas.forms import FieldError, FieldType, FormField, FormSchema
from formengine.services.form_navigation_service import FormEngineState, UnknownFieldError
from formengine.types import FieldValue


class UnknownFieldTypeError(LookupError):
    """No adapter is registered for a field type."""


@dataclass(frozen=True)
class FieldRenderProps:
    field: FormField
    value: FieldValue
    error: FieldError | None
    disabled: bool = False


class FieldAdapter(Protocol):
    def render(self, props: FieldRenderProps, on_change: Callable[[FieldValue], None]) -> object:
        ...


def display_value(field: FormField, value: FieldValue) -> FieldValue:
    """The value a widget receives, with unanswered fields given a neutral value."""
    if value is not None:
        return value
    if field.type == "checkbox":
        return []
    if field.type in {"number", "csat", "rating"}:
        return None
    return ""


def field_props(
    schema: FormSchema,
    state: FormEngineState,
    field_id: str,
    *,
    disabled: bool = False,
) -> FieldRenderProps:
    for field in schema.iter_fields():
        if field.id == field_id:
            return FieldRenderProps(
                field=field,
                value=display_value(field, state.values.get(field_id)),
                error=state.errors.get(field_id),
                disabled=disabled,
            )
    raise UnknownFieldError(field_id)


def render_plan(
    schema: FormSchema,
    state: FormEngineState,
    *,
    disabled: bool = False,
) -> list[FieldRenderProps]:
    """Props for the current step's visible and hidden-typed fields, in order."""
    if not schema.steps:
        return []
    step = schema.steps[state.current_step]
    return [
        FieldRenderProps(
            field=field,
            value=display_value(field, state.values.get(field.id)),
            error=state.errors.get(field.id),
            disabled=disabled,
        )
        for field in step.fields
        if field.type == "hidden" or field.id in state.visible
    ]


class FieldAdapterRegistry:
    """Maps field types to the adapters that render them."""

    def __init__(self) -> None:
        self._adapters: dict[str, FieldAdapter] = {}

    def register(self, field_type: FieldType, adapter: FieldAdapter) -> None:
        self._adapters[field_type] = adapter

    def get(self, field_type: FieldType) -> FieldAdapter:
        adapter = self._adapters.get(field_type)
        if adapter is None:
            raise UnknownFieldTypeError(f"No adapter registered for field type: {field_type}")
        return adapter

    def __contains__(self, field_type: object) -> bool:
        return field_type in self._adapters

    def render(self, props: FieldRenderProps, on_change: Callable[[FieldValue], None]) -> object:
        return self.get(props.field.type).render(props, on_change)
