"""Form schema loading and publish-readiness checks."""

import logging
import re
from datetime import date
from typing import Any, Mapping

from pydantic import ValidationError

from formengine.core.config import settings
from formengine.enums import SchemaIssueCode
from formengine.schemas.forms import FormField, FormSchema, FormStep, SchemaIssue
from formengine.services.form_visibility_service import (
    condition_field_ids,
    find_visibility_cycles,
)

logger = logging.getLogger(__name__)


class FormSchemaError(ValueError):
    """A schema document is invalid or not ready to publish."""

    def __init__(self, issues: list[str]) -> None:
        self.issues = issues
        super().__init__("; ".join(issues) or "Invalid form schema")


def _format_validation_error(exc: ValidationError) -> list[str]:
    issues = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"])
        issues.append(f"{location}: {error['msg']}" if location else error["msg"])
    return issues


def parse_schema(data: Mapping[str, Any] | str | bytes) -> FormSchema:
    """Load a schema document (mapping or JSON text)."""
    try:
        if isinstance(data, (str, bytes)):
            return FormSchema.model_validate_json(data)
        return FormSchema.model_validate(data)
    except ValidationError as exc:
        raise FormSchemaError(_format_validation_error(exc)) from exc


def flatten_fields(schema: FormSchema) -> dict[str, FormField]:
    """Field id -> field, in schema order."""
    return {field.id: field for field in schema.iter_fields()}


def step_index_for_field(schema: FormSchema, field_id: str) -> int | None:
    for index, step in enumerate(schema.steps):
        if any(field.id == field_id for field in step.fields):
            return index
    return None


# =============================================================================
# Lint
# =============================================================================


def _issue(
    code: SchemaIssueCode,
    message: str,
    *,
    step: FormStep | None = None,
    field: FormField | None = None,
) -> SchemaIssue:
    return SchemaIssue(
        code=code,
        message=message,
        step_id=step.id if step else None,
        field_id=field.id if field else None,
    )


def _parse_iso_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _check_pattern(step: FormStep, field: FormField) -> list[SchemaIssue]:
    if not field.validation or not field.validation.pattern:
        return []
    pattern = field.validation.pattern
    if len(pattern) > settings.MAX_PATTERN_LENGTH:
        return [
            _issue(
                SchemaIssueCode.INVALID_PATTERN,
                f"Field '{field.id}' pattern exceeds {settings.MAX_PATTERN_LENGTH} characters",
                step=step,
                field=field,
            )
        ]
    try:
        re.compile(pattern)
    except re.error as exc:
        return [
            _issue(
                SchemaIssueCode.INVALID_PATTERN,
                f"Field '{field.id}' has an invalid pattern: {exc}",
                step=step,
                field=field,
            )
        ]
    return []


def _check_bounds(step: FormStep, field: FormField) -> list[SchemaIssue]:
    config = field.config
    pairs: list[tuple[str, object, object]] = []
    if field.type in {"text", "textarea"}:
        pairs.append(("min_length/max_length", config.min_length, config.max_length))
    elif field.type == "number":
        pairs.append(("min/max", config.min, config.max))
    elif field.type == "checkbox":
        pairs.append(("min_selections/max_selections", config.min_selections, config.max_selections))
    elif field.type == "date":
        pairs.append(("min_date/max_date", _parse_iso_date(config.min_date), _parse_iso_date(config.max_date)))

    issues = []
    for name, lower, upper in pairs:
        if lower is not None and upper is not None and lower > upper:
            issues.append(
                _issue(
                    SchemaIssueCode.INVERTED_BOUNDS,
                    f"Field '{field.id}' has {name} with the lower bound above the upper bound",
                    step=step,
                    field=field,
                )
            )
    return issues


def _check_options(step: FormStep, field: FormField) -> list[SchemaIssue]:
    if field.type not in {"radio", "checkbox"}:
        return []
    options = field.config.options
    if not options:
        return [
            _issue(
                SchemaIssueCode.MISSING_OPTIONS,
                f"Field '{field.id}' needs at least one option",
                step=step,
                field=field,
            )
        ]

    issues = []
    seen: set[str] = set()
    for option in options:
        if option.value in seen:
            issues.append(
                _issue(
                    SchemaIssueCode.DUPLICATE_OPTION,
                    f"Field '{field.id}' repeats option value '{option.value}'",
                    step=step,
                    field=field,
                )
            )
        seen.add(option.value)

    if field.type == "checkbox":
        config = field.config
        if config.min_selections and not config.allow_other and config.min_selections > len(seen):
            issues.append(
                _issue(
                    SchemaIssueCode.UNSATISFIABLE_SELECTIONS,
                    f"Field '{field.id}' requires {config.min_selections} selections "
                    f"but offers {len(seen)} option(s)",
                    step=step,
                    field=field,
                )
            )
    return issues


def _check_hidden_source(step: FormStep, field: FormField) -> list[SchemaIssue]:
    if field.type != "hidden":
        return []
    config = field.config
    if config.source_type in {"url_param", "user_field"} and not config.source_key:
        return [
            _issue(
                SchemaIssueCode.MISSING_SOURCE_KEY,
                f"Hidden field '{field.id}' reads from {config.source_type} without a source_key",
                step=step,
                field=field,
            )
        ]
    return []


def _check_references(
    step: FormStep, field: FormField, known: set[str]
) -> list[SchemaIssue]:
    if not field.conditional_logic:
        return []
    issues = []
    for ref in dict.fromkeys(condition_field_ids(field.conditional_logic)):
        if ref == field.id:
            issues.append(
                _issue(
                    SchemaIssueCode.SELF_REFERENCE,
                    f"Field '{field.id}' visibility depends on its own value",
                    step=step,
                    field=field,
                )
            )
        elif ref not in known:
            issues.append(
                _issue(
                    SchemaIssueCode.UNKNOWN_REFERENCE,
                    f"Field '{field.id}' visibility references unknown field '{ref}'",
                    step=step,
                    field=field,
                )
            )
    return issues


def find_schema_issues(schema: FormSchema) -> list[SchemaIssue]:
    """Problems that should block publishing. An empty list means publishable."""
    if not schema.steps:
        return [_issue(SchemaIssueCode.EMPTY_SCHEMA, "Form has no steps")]

    known = set(flatten_fields(schema))
    issues: list[SchemaIssue] = []
    for step in schema.steps:
        if not step.fields:
            issues.append(
                _issue(SchemaIssueCode.EMPTY_STEP, f"Step '{step.id}' has no fields", step=step)
            )
        for field in step.fields:
            issues.extend(_check_references(step, field, known))
            issues.extend(_check_pattern(step, field))
            issues.extend(_check_bounds(step, field))
            issues.extend(_check_options(step, field))
            issues.extend(_check_hidden_source(step, field))

    for group in find_visibility_cycles(schema):
        if len(group) > 1:
            issues.append(
                SchemaIssue(
                    code=SchemaIssueCode.VISIBILITY_CYCLE,
                    message=f"Visibility rules form a cycle: {' -> '.join(group)}",
                    field_id=group[0],
                )
            )

    if issues:
        logger.debug(f"Schema lint found {len(issues)} issue(s)")
    return issues


def assert_publishable(schema: FormSchema) -> None:
    issues = find_schema_issues(schema)
    if issues:
        raise FormSchemaError([issue.message for issue in issues])
