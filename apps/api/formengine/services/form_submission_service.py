"""Submission payload assembly and initial answer seeding."""

import logging
from typing import Collection, Mapping

from formengine.schemas.forms import FormField, FormSchema
from formengine.types import FieldValue, FormPayload, FormValues

logger = logging.getLogger(__name__)


def assemble_payload(
    schema: FormSchema,
    values: Mapping[str, FieldValue],
    visible: Collection[str],
) -> FormPayload:
    """Build the submit payload in schema order.

    Hidden-typed fields are always included. Other fields are included only
    when visible, so an answer given before a rule hid the field is dropped.
    Unanswered included fields map to ``None`` rather than being omitted.
    """
    payload: FormPayload = {}
    for field in schema.iter_fields():
        if field.type == "hidden" or field.id in visible:
            payload[field.id] = values.get(field.id)
    return payload


def _hidden_source_value(
    field: FormField,
    url_params: Mapping[str, str],
    user_fields: Mapping[str, FieldValue],
) -> tuple[bool, FieldValue]:
    config = field.config
    source_type = config.source_type or ("fixed" if config.fixed_value is not None else None)

    if source_type == "fixed":
        return config.fixed_value is not None, config.fixed_value
    if source_type == "url_param":
        if config.source_key and config.source_key in url_params:
            return True, url_params[config.source_key]
        return False, None
    if source_type == "user_field":
        if config.source_key and config.source_key in user_fields:
            return True, user_fields[config.source_key]
        return False, None
    return False, None


def build_initial_values(
    schema: FormSchema,
    initial_values: Mapping[str, FieldValue] | None = None,
    *,
    url_params: Mapping[str, str] | None = None,
    user_fields: Mapping[str, FieldValue] | None = None,
) -> FormValues:
    """
    Seed answers for a new form session.

    Precedence (lowest first):
    - field ``default_value``
    - hidden field source (fixed value, URL parameter, or user attribute)
    - caller-supplied ``initial_values``

    Keys in ``initial_values`` that the schema does not define are kept; the
    assembler ignores them.
    """
    url_params = url_params or {}
    user_fields = user_fields or {}
    values: FormValues = {}

    for field in schema.iter_fields():
        if field.default_value is not None:
            default = field.default_value
            values[field.id] = list(default) if isinstance(default, list) else default
        if field.type == "hidden":
            found, value = _hidden_source_value(field, url_params, user_fields)
            if found:
                values[field.id] = value
            elif field.config.source_type in {"url_param", "user_field"}:
                logger.debug(
                    f"Hidden field {field.id} source '{field.config.source_key}' not available"
                )

    if initial_values:
        values.update(initial_values)
    return values
