"""Tests for field and step validation rules."""

import pytest

from formengine.enums import ErrorKind
from formengine.services.form_validation_service import (
    first_error_field,
    is_empty,
    validate_field,
    validate_step,
)


@pytest.mark.parametrize("value", [None, "", []])
def test_required_field_rejects_empty_values(build_field, value):
    field = build_field("name", required=True)

    error = validate_field(field, value)

    assert error is not None
    assert error.kind == ErrorKind.REQUIRED
    assert error.message == "This field is required"


def test_optional_empty_field_skips_type_rules(build_field):
    field = build_field("skills", "checkbox", config={"minSelections": 2})
    assert validate_field(field, []) is None
    assert validate_field(field, None) is None


def test_required_short_circuits_pattern(build_field):
    field = build_field("code", required=True, validation={"pattern": "^[A-Z]+$"})
    assert validate_field(field, "").kind == ErrorKind.REQUIRED


def test_text_length_bounds(build_field):
    field = build_field("bio", config={"minLength": 3, "maxLength": 5})

    too_short = validate_field(field, "ab")
    too_long = validate_field(field, "abcdef")

    assert too_short.kind == ErrorKind.MIN_LENGTH
    assert too_short.params == {"min": 3}
    assert too_short.message == "Must be at least 3 characters"
    assert too_long.kind == ErrorKind.MAX_LENGTH
    assert too_long.params == {"max": 5}
    assert validate_field(field, "abcd") is None


def test_textarea_uses_length_bounds(build_field):
    field = build_field("notes", "textarea", config={"rows": 3, "maxLength": 4})
    assert validate_field(field, "hello").kind == ErrorKind.MAX_LENGTH


def test_number_min_scenario(build_field):
    field = build_field("age", "number", config={"min": 18})

    error = validate_field(field, 15)

    assert error.kind == ErrorKind.MIN
    assert error.message == "Must be at least 18"
    assert validate_field(field, 18) is None


def test_number_max_and_numeric_strings(build_field):
    field = build_field("qty", "number", config={"max": 10})
    assert validate_field(field, "11").kind == ErrorKind.MAX
    assert validate_field(field, "9.5") is None


def test_number_bounds_ignore_non_numeric_values(build_field):
    field = build_field("qty", "number", config={"min": 1})
    assert validate_field(field, "many") is None


@pytest.mark.parametrize("value", ["ada@example.com", "a.b+c@mail.example.org"])
def test_email_accepts_minimal_shape(build_field, value):
    assert validate_field(build_field("email", "email"), value) is None


@pytest.mark.parametrize("value", ["ada", "ada@example", "ada @example.com", "@example.com"])
def test_email_rejects_malformed(build_field, value):
    error = validate_field(build_field("email", "email"), value)
    assert error.kind == ErrorKind.EMAIL


def test_checkbox_min_selections_scenario(build_field):
    field = build_field(
        "skills",
        "checkbox",
        config={
            "options": [
                {"id": "a", "label": "A", "value": "a"},
                {"id": "b", "label": "B", "value": "b"},
                {"id": "c", "label": "C", "value": "c"},
            ],
            "minSelections": 2,
        },
    )

    assert validate_field(field, ["a"]).kind == ErrorKind.MIN_SELECTIONS
    assert validate_field(field, ["a", "b"]) is None


def test_checkbox_max_selections(build_field):
    field = build_field("skills", "checkbox", config={"maxSelections": 1})
    error = validate_field(field, ["a", "b"])
    assert error.kind == ErrorKind.MAX_SELECTIONS
    assert error.message == "Select at most 1 options"


def test_csat_and_rating_ranges(build_field):
    csat = build_field("score", "csat")
    rating = build_field("stars", "rating", config={"maxStars": 5, "icon": "heart"})

    assert validate_field(csat, 11).kind == ErrorKind.MAX
    assert validate_field(csat, 0).kind == ErrorKind.MIN
    assert validate_field(csat, 10) is None
    assert validate_field(rating, 6).kind == ErrorKind.MAX
    assert validate_field(rating, 3) is None


def test_scale_answers_must_be_whole_numbers(build_field):
    csat = build_field("score", "csat")

    error = validate_field(csat, 7.5)

    assert error.kind == ErrorKind.MIN
    assert error.message == "Choose a whole number from 1 to 10"
    assert validate_field(build_field("stars", "rating"), "2.5").kind == ErrorKind.MIN
    assert validate_field(csat, 7.0) is None


def test_date_bounds(build_field):
    field = build_field("start", "date", config={"minDate": "2024-01-01", "maxDate": "2024-12-31"})

    assert validate_field(field, "2023-12-31").kind == ErrorKind.MIN_DATE
    assert validate_field(field, "2025-01-01T09:00").kind == ErrorKind.MAX_DATE
    assert validate_field(field, "2024-06-01") is None
    assert validate_field(field, "not a date") is None


def test_pattern_mismatch_uses_custom_message(build_field):
    field = build_field(
        "zip", validation={"pattern": "^[0-9]{5}$", "patternMessage": "Five digits please"}
    )

    error = validate_field(field, "12a45")

    assert error.kind == ErrorKind.PATTERN
    assert error.message == "Five digits please"
    assert validate_field(field, "12345") is None


def test_pattern_searches_rather_than_full_matching(build_field):
    field = build_field("ref", validation={"pattern": "[0-9]"})
    assert validate_field(field, "abc1") is None


def test_invalid_pattern_is_treated_as_absent(build_field):
    field = build_field("code", validation={"pattern": "(unclosed"})

    assert validate_field(field, "anything") is None


def test_type_rule_takes_precedence_over_pattern(build_field):
    field = build_field("code", config={"maxLength": 2}, validation={"pattern": "^[0-9]+$"})
    assert validate_field(field, "abc").kind == ErrorKind.MAX_LENGTH


def test_custom_message_overrides_default(build_field):
    field = build_field("name", required=True, validation={"customMessage": "Tell us your name"})
    assert validate_field(field, None).message == "Tell us your name"


def test_hidden_fields_are_never_validated(build_field):
    field = build_field("ref", "hidden", required=True)
    assert validate_field(field, None) is None


def test_validate_step_reports_only_required_field(build_field, build_schema):
    schema = build_schema(
        [
            build_field("name", required=True),
            build_field("nickname"),
            build_field("age", "number", config={"min": 18}),
        ]
    )

    errors = validate_step(schema, 0, {"age": 30}, {"name", "nickname", "age"})

    assert list(errors) == ["name"]
    assert errors["name"].kind == ErrorKind.REQUIRED


def test_validate_step_skips_invisible_and_hidden_fields(build_field, build_schema):
    schema = build_schema(
        [
            build_field("name", required=True),
            build_field("ref", "hidden", required=True),
        ]
    )

    assert validate_step(schema, 0, {}, {"ref"}) == {}


def test_validate_step_out_of_range_is_empty(build_field, build_schema):
    schema = build_schema([build_field("name", required=True)])
    assert validate_step(schema, 3, {}, {"name"}) == {}
    assert validate_step(schema, -1, {}, {"name"}) == {}


def test_first_error_field_follows_step_order(build_field, build_schema):
    schema = build_schema(
        [
            build_field("first", required=True),
            build_field("second", required=True),
        ]
    )
    errors = validate_step(schema, 0, {}, {"first", "second"})

    assert first_error_field(schema, 0, {"second": errors["second"]}) == "second"
    assert first_error_field(schema, 0, errors) == "first"
    assert first_error_field(schema, 0, {}) is None


def test_is_empty():
    assert is_empty(None)
    assert is_empty("")
    assert is_empty([])
    assert not is_empty(0)
    assert not is_empty(" ")
    assert not is_empty(["a"])
