"""Service layer modules."""

from formengine.services.form_navigation_service import (
    FormEngineState,
    SubmitResult,
    UnknownFieldError,
    create_state,
    go_to_next,
    go_to_prev,
    handle_enter,
    jump_to,
    set_value,
    submit,
)
from formengine.services.form_schema_service import (
    FormSchemaError,
    assert_publishable,
    find_schema_issues,
    parse_schema,
)
from formengine.services.form_session import FormSession
from formengine.services.form_submission_service import assemble_payload, build_initial_values
from formengine.services.form_validation_service import validate_field, validate_step
from formengine.services.form_visibility_service import resolve_visible

__all__ = [
    # Session
    "FormSession",
    # Navigation
    "FormEngineState",
    "SubmitResult",
    "UnknownFieldError",
    "create_state",
    "set_value",
    "go_to_next",
    "go_to_prev",
    "jump_to",
    "submit",
    "handle_enter",
    # Rules
    "validate_field",
    "validate_step",
    "resolve_visible",
    # Payload
    "assemble_payload",
    "build_initial_values",
    # Schema
    "FormSchemaError",
    "parse_schema",
    "find_schema_issues",
    "assert_publishable",
]
