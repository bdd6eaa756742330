"""Schemas for multi-step form definitions and validation results."""

from __future__ import annotations

from typing import Annotated, Iterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from formengine.enums import ErrorKind, SchemaIssueCode


FieldType = Literal[
    "text",
    "textarea",
    "number",
    "email",
    "phone",
    "date",
    "radio",
    "checkbox",
    "csat",
    "rating",
    "hidden",
]

DisplayVariant = Literal["default", "buttons"]

CSAT_SCALE = 10
DEFAULT_MAX_STARS = 5


class SchemaModel(BaseModel):
    """Base for schema documents: immutable, accepts snake_case or camelCase keys."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class FieldOption(SchemaModel):
    id: str = Field(..., min_length=1)
    label: str
    value: str


class FieldValidation(SchemaModel):
    pattern: str | None = None
    pattern_message: str | None = None
    custom_message: str | None = None


# =============================================================================
# Conditional logic
# =============================================================================

ConditionOperator = Literal[
    "equals",
    "not_equals",
    "contains",
    "greater_than",
    "less_than",
    "is_empty",
    "is_not_empty",
    "is_one_of",
]

LogicType = Literal["all", "any"]

ConditionOperand = Union[str, int, float, bool, list[str], None]


class FieldCondition(SchemaModel):
    field_id: str = Field(..., min_length=1)
    operator: ConditionOperator
    value: ConditionOperand = None


class ConditionGroup(SchemaModel):
    """Nested AND/OR group inside a field's conditional logic."""

    logic_type: LogicType = "all"
    conditions: list[Union[FieldCondition, "ConditionGroup"]]


class ConditionalLogic(SchemaModel):
    action: Literal["show", "hide"] = "show"
    logic_type: LogicType = "all"
    conditions: list[Union[FieldCondition, ConditionGroup]] = Field(default_factory=list)


ConditionGroup.model_rebuild()


# =============================================================================
# Type-specific config
# =============================================================================


class TextFieldConfig(SchemaModel):
    type: Literal["text"] = "text"
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)


class TextareaFieldConfig(SchemaModel):
    type: Literal["textarea"] = "textarea"
    rows: int | None = Field(None, ge=1)
    min_length: int | None = Field(None, ge=0)
    max_length: int | None = Field(None, ge=0)


class NumberFieldConfig(SchemaModel):
    type: Literal["number"] = "number"
    min: float | None = None
    max: float | None = None
    step: float | None = None
    unit: str | None = None


class EmailFieldConfig(SchemaModel):
    type: Literal["email"] = "email"


class PhoneFieldConfig(SchemaModel):
    type: Literal["phone"] = "phone"
    default_country_code: str | None = None


class DateFieldConfig(SchemaModel):
    type: Literal["date"] = "date"
    include_time: bool = False
    min_date: str | None = None
    max_date: str | None = None


class RadioFieldConfig(SchemaModel):
    type: Literal["radio"] = "radio"
    options: list[FieldOption] = Field(default_factory=list)
    allow_other: bool = False


class CheckboxFieldConfig(SchemaModel):
    type: Literal["checkbox"] = "checkbox"
    options: list[FieldOption] = Field(default_factory=list)
    allow_other: bool = False
    min_selections: int | None = Field(None, ge=0)
    max_selections: int | None = Field(None, ge=0)


class CsatFieldConfig(SchemaModel):
    type: Literal["csat"] = "csat"
    min_label: str | None = None
    max_label: str | None = None
    scale: Literal[10] = CSAT_SCALE


class RatingFieldConfig(SchemaModel):
    type: Literal["rating"] = "rating"
    icon: Literal["star", "heart", "thumb"] = "star"
    max_stars: int = Field(DEFAULT_MAX_STARS, ge=1)


class HiddenFieldConfig(SchemaModel):
    type: Literal["hidden"] = "hidden"
    fixed_value: str | None = None
    source_type: Literal["fixed", "url_param", "user_field"] | None = None
    source_key: str | None = None


FieldConfig = Annotated[
    Union[
        TextFieldConfig,
        TextareaFieldConfig,
        NumberFieldConfig,
        EmailFieldConfig,
        PhoneFieldConfig,
        DateFieldConfig,
        RadioFieldConfig,
        CheckboxFieldConfig,
        CsatFieldConfig,
        RatingFieldConfig,
        HiddenFieldConfig,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Fields, steps, schema
# =============================================================================


class FormField(SchemaModel):
    id: str = Field(..., min_length=1, max_length=100)
    type: FieldType
    label: str = ""
    description: str | None = None
    placeholder: str | None = None
    required: bool = False
    default_value: str | int | float | bool | list[str] | None = None
    display_variant: DisplayVariant | None = None
    validation: FieldValidation | None = None
    conditional_logic: ConditionalLogic | None = None
    config: FieldConfig

    @model_validator(mode="before")
    @classmethod
    def fill_config_tag(cls, data: object) -> object:
        """Derive a missing config (or its missing tag) from the field type."""
        if not isinstance(data, dict):
            return data
        field_type = data.get("type")
        config = data.get("config")
        if config is None:
            return {**data, "config": {"type": field_type}}
        if isinstance(config, dict) and "type" not in config:
            return {**data, "config": {**config, "type": field_type}}
        return data

    @model_validator(mode="after")
    def check_config_matches_type(self) -> "FormField":
        if self.config.type != self.type:
            raise ValueError(
                f"Field '{self.id}' has type '{self.type}' but config for '{self.config.type}'"
            )
        return self


class FormStep(SchemaModel):
    id: str = Field(..., min_length=1)
    title: str | None = None
    description: str | None = None
    fields: list[FormField] = Field(default_factory=list)


class FormSchema(SchemaModel):
    version: str = "1"
    steps: list[FormStep] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_field_ids(self) -> "FormSchema":
        seen: set[str] = set()
        for field in self.iter_fields():
            if field.id in seen:
                raise ValueError(f"Duplicate field id: '{field.id}'")
            seen.add(field.id)
        return self

    @property
    def step_count(self) -> int:
        return len(self.steps)

    def iter_fields(self) -> Iterator[FormField]:
        """All fields across all steps, in schema order."""
        for step in self.steps:
            yield from step.fields


# =============================================================================
# Validation results
# =============================================================================


class FieldError(BaseModel):
    """A single validation error for one field."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    params: dict[str, object] = Field(default_factory=dict)
    message: str


class SchemaIssue(BaseModel):
    """A publish-readiness problem found in a schema."""

    model_config = ConfigDict(frozen=True)

    code: SchemaIssueCode
    message: str
    step_id: str | None = None
    field_id: str | None = None
