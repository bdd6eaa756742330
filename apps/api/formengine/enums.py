"""Enum definitions for engine constants."""

from enum import Enum


class ErrorKind(str, Enum):
    """
    Field validation error kinds.

    Values double as message catalog keys, so they keep the camelCase
    spelling used by form authors.
    """
    REQUIRED = "required"
    PATTERN = "pattern"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    MIN = "min"
    MAX = "max"
    EMAIL = "email"
    MIN_SELECTIONS = "minSelections"
    MAX_SELECTIONS = "maxSelections"
    MIN_DATE = "minDate"
    MAX_DATE = "maxDate"


class StepDisplayMode(str, Enum):
    """How steps are presented and navigated."""
    PROGRESS_BAR = "progress_bar"  # one step at a time, strictly sequential
    TABS = "tabs"  # clickable step headers gated by completion


class SlideDirection(str, Enum):
    """Presentation hint for the last step transition."""
    FORWARD = "forward"
    BACKWARD = "backward"


class SubmitStatus(str, Enum):
    """
    Outcome of a submit attempt.

    - INVALID: at least one step failed validation, callback not invoked
    - PREVIEW: form is valid but the session is a preview, callback not invoked
    - SUBMITTED: callback completed
    - FAILED: callback raised
    """
    INVALID = "invalid"
    PREVIEW = "preview"
    SUBMITTED = "submitted"
    FAILED = "failed"


class SchemaIssueCode(str, Enum):
    """Problems reported by the publish-readiness lint."""
    EMPTY_SCHEMA = "empty_schema"
    EMPTY_STEP = "empty_step"
    UNKNOWN_REFERENCE = "unknown_reference"
    SELF_REFERENCE = "self_reference"
    VISIBILITY_CYCLE = "visibility_cycle"
    INVALID_PATTERN = "invalid_pattern"
    INVERTED_BOUNDS = "inverted_bounds"
    MISSING_OPTIONS = "missing_options"
    DUPLICATE_OPTION = "duplicate_option"
    UNSATISFIABLE_SELECTIONS = "unsatisfiable_selections"
    MISSING_SOURCE_KEY = "missing_source_key"
