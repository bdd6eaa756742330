"""Field and step validation for form answers.

Validation never raises: every rule yields either ``None`` or a single
``FieldError``. A malformed rule in the schema (for example an invalid regex)
is not enforced.
"""

import logging
import re
from datetime import date, datetime
from functools import lru_cache
from typing import Collection, Mapping

from formengine.core.config import settings
from formengine.enums import ErrorKind
from formengine.schemas.forms import (
    CSAT_SCALE,
    FieldError,
    FormField,
    FormSchema,
)
from formengine.types import FieldValue

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

DEFAULT_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.REQUIRED: "This field is required",
    ErrorKind.PATTERN: "Invalid format",
    ErrorKind.MIN_LENGTH: "Must be at least {min} characters",
    ErrorKind.MAX_LENGTH: "Must be at most {max} characters",
    ErrorKind.MIN: "Must be at least {min}",
    ErrorKind.MAX: "Must be at most {max}",
    ErrorKind.EMAIL: "Please enter a valid email address",
    ErrorKind.MIN_SELECTIONS: "Select at least {min} options",
    ErrorKind.MAX_SELECTIONS: "Select at most {max} options",
    ErrorKind.MIN_DATE: "Date must be on or after {min}",
    ErrorKind.MAX_DATE: "Date must be on or before {max}",
}

WHOLE_NUMBER_MESSAGE = "Choose a whole number from {min} to {max}"


# =============================================================================
# Helpers
# =============================================================================


def is_empty(value: FieldValue) -> bool:
    """Unanswered: None, empty string, or empty list."""
    return value is None or value == "" or (isinstance(value, (list, tuple)) and len(value) == 0)


def _format_bound(bound: object) -> str:
    if isinstance(bound, float) and bound.is_integer():
        return str(int(bound))
    return str(bound)


def _make_error(
    field: FormField,
    kind: ErrorKind,
    message: str | None = None,
    *,
    template: str | None = None,
    **params: object,
) -> FieldError:
    if message is None:
        custom = field.validation.custom_message if field.validation else None
        if custom:
            message = custom
        else:
            message = (template or DEFAULT_MESSAGES[kind]).format(
                **{key: _format_bound(val) for key, val in params.items()}
            )
    return FieldError(kind=kind, params=params, message=message)


def _to_number(value: FieldValue) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_date(value: object) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            return None
    return None


@lru_cache(maxsize=settings.PATTERN_CACHE_SIZE)
def compile_pattern(pattern: str) -> re.Pattern[str] | None:
    """Compile a schema pattern, returning None when it cannot be used."""
    if len(pattern) > settings.MAX_PATTERN_LENGTH:
        logger.debug(f"Validation pattern longer than {settings.MAX_PATTERN_LENGTH} chars skipped")
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        logger.debug(f"Invalid validation pattern skipped: {exc}")
        return None


# =============================================================================
# Per-type rules
# =============================================================================


def _check_length(field: FormField, value: FieldValue) -> FieldError | None:
    config = field.config
    length = len(str(value))
    if config.min_length and length < config.min_length:
        return _make_error(field, ErrorKind.MIN_LENGTH, min=config.min_length)
    if config.max_length and length > config.max_length:
        return _make_error(field, ErrorKind.MAX_LENGTH, max=config.max_length)
    return None


def _check_number(field: FormField, value: FieldValue) -> FieldError | None:
    numeric_value = _to_number(value)
    if numeric_value is None:
        return None
    config = field.config
    if config.min is not None and numeric_value < config.min:
        return _make_error(field, ErrorKind.MIN, min=config.min)
    if config.max is not None and numeric_value > config.max:
        return _make_error(field, ErrorKind.MAX, max=config.max)
    return None


def _check_scale(field: FormField, value: FieldValue, upper: int) -> FieldError | None:
    numeric_value = _to_number(value)
    if numeric_value is None:
        return None
    if numeric_value < 1:
        return _make_error(field, ErrorKind.MIN, min=1)
    if numeric_value > upper:
        return _make_error(field, ErrorKind.MAX, max=upper)
    if not numeric_value.is_integer():
        return _make_error(field, ErrorKind.MIN, template=WHOLE_NUMBER_MESSAGE, min=1, max=upper)
    return None


def _check_email(field: FormField, value: FieldValue) -> FieldError | None:
    if isinstance(value, str) and EMAIL_PATTERN.match(value) is None:
        return _make_error(field, ErrorKind.EMAIL)
    return None


def _check_selections(field: FormField, value: FieldValue) -> FieldError | None:
    if not isinstance(value, (list, tuple)):
        return None
    config = field.config
    if config.min_selections and len(value) < config.min_selections:
        return _make_error(field, ErrorKind.MIN_SELECTIONS, min=config.min_selections)
    if config.max_selections and len(value) > config.max_selections:
        return _make_error(field, ErrorKind.MAX_SELECTIONS, max=config.max_selections)
    return None


def _check_date(field: FormField, value: FieldValue) -> FieldError | None:
    parsed = _to_date(value)
    if parsed is None:
        return None
    config = field.config
    min_date = _to_date(config.min_date)
    max_date = _to_date(config.max_date)
    if min_date is not None and parsed < min_date:
        return _make_error(field, ErrorKind.MIN_DATE, min=config.min_date)
    if max_date is not None and parsed > max_date:
        return _make_error(field, ErrorKind.MAX_DATE, max=config.max_date)
    return None


def _check_type_rules(field: FormField, value: FieldValue) -> FieldError | None:
    field_type = field.type
    if field_type in {"text", "textarea"}:
        return _check_length(field, value)
    if field_type == "number":
        return _check_number(field, value)
    if field_type == "email":
        return _check_email(field, value)
    if field_type == "checkbox":
        return _check_selections(field, value)
    if field_type == "date":
        return _check_date(field, value)
    if field_type == "csat":
        return _check_scale(field, value, CSAT_SCALE)
    if field_type == "rating":
        return _check_scale(field, value, field.config.max_stars)
    return None


def _check_pattern(field: FormField, value: FieldValue) -> FieldError | None:
    validation = field.validation
    if not validation or not validation.pattern:
        return None
    if not isinstance(value, str) or not value:
        return None
    regex = compile_pattern(validation.pattern)
    if regex is None:
        return None
    if regex.search(value) is None:
        return _make_error(
            field,
            ErrorKind.PATTERN,
            message=validation.pattern_message or DEFAULT_MESSAGES[ErrorKind.PATTERN],
            pattern=validation.pattern,
        )
    return None


# =============================================================================
# Public API
# =============================================================================


def validate_field(field: FormField, value: FieldValue) -> FieldError | None:
    """Validate one answer. Returns at most one error.

    Order: required (short-circuits), then the type-specific rule, then the
    pattern. Hidden fields are never validated.
    """
    if field.type == "hidden":
        return None

    if is_empty(value):
        if field.required:
            return _make_error(field, ErrorKind.REQUIRED)
        return None

    return _check_type_rules(field, value) or _check_pattern(field, value)


def validate_step(
    schema: FormSchema,
    step_index: int,
    values: Mapping[str, FieldValue],
    visible: Collection[str],
) -> dict[str, FieldError]:
    """Validate the visible, non-hidden fields of one step, in field order."""
    if step_index < 0 or step_index >= schema.step_count:
        return {}

    errors: dict[str, FieldError] = {}
    for field in schema.steps[step_index].fields:
        if field.type == "hidden":
            continue
        if field.id not in visible:
            continue
        error = validate_field(field, values.get(field.id))
        if error is not None:
            errors[field.id] = error
    return errors


def first_error_field(
    schema: FormSchema, step_index: int, errors: Mapping[str, FieldError]
) -> str | None:
    """The first field of the step, in display order, that has an error."""
    if step_index < 0 or step_index >= schema.step_count:
        return None
    for field in schema.steps[step_index].fields:
        if field.id in errors:
            return field.id
    return None
