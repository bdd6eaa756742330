"""Pydantic schemas for form definitions and validation results."""

from formengine.schemas.forms import (
    CheckboxFieldConfig,
    ConditionalLogic,
    ConditionGroup,
    CsatFieldConfig,
    DateFieldConfig,
    EmailFieldConfig,
    FieldCondition,
    FieldError,
    FieldOption,
    FieldValidation,
    FormField,
    FormSchema,
    FormStep,
    HiddenFieldConfig,
    NumberFieldConfig,
    PhoneFieldConfig,
    RadioFieldConfig,
    RatingFieldConfig,
    SchemaIssue,
    TextareaFieldConfig,
    TextFieldConfig,
)

__all__ = [
    # Schema documents
    "FormSchema",
    "FormStep",
    "FormField",
    "FieldOption",
    "FieldValidation",
    # Conditional logic
    "ConditionalLogic",
    "ConditionGroup",
    "FieldCondition",
    # Field configs
    "TextFieldConfig",
    "TextareaFieldConfig",
    "NumberFieldConfig",
    "EmailFieldConfig",
    "PhoneFieldConfig",
    "DateFieldConfig",
    "RadioFieldConfig",
    "CheckboxFieldConfig",
    "CsatFieldConfig",
    "RatingFieldConfig",
    "HiddenFieldConfig",
    # Results
    "FieldError",
    "SchemaIssue",
]
