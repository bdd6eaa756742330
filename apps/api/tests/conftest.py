"""
Test configuration and fixtures.

Provides:
- Schema builders for compact test schemas
- A multi-step application schema with conditional fields
- A recording submit callback
"""
from dataclasses import dataclass, field
from typing import Any

import pytest

from formengine.schemas.forms import FormField, FormSchema
from formengine.services.form_schema_service import parse_schema


# =============================================================================
# Builders
# =============================================================================

def make_field(field_id: str, field_type: str = "text", **kwargs: Any) -> FormField:
    """Build a field, letting the model derive a config from the type."""
    return FormField.model_validate(
        {"id": field_id, "type": field_type, "label": field_id.title(), **kwargs}
    )


def make_schema(*steps: list[FormField]) -> FormSchema:
    """Build a schema with one step per field list."""
    return FormSchema(
        steps=[
            {"id": f"step-{index}", "title": f"Step {index + 1}", "fields": fields}
            for index, fields in enumerate(steps)
        ]
    )


# =============================================================================
# Schema Fixtures
# =============================================================================

@pytest.fixture
def application_schema() -> FormSchema:
    """Three-step application form written the way authors store it (camelCase)."""
    return parse_schema(
        {
            "version": "1",
            "steps": [
                {
                    "id": "about",
                    "title": "About you",
                    "fields": [
                        {"id": "name", "type": "text", "label": "Name", "required": True,
                         "config": {"type": "text", "maxLength": 50}},
                        {"id": "email", "type": "email", "label": "Email", "required": True,
                         "config": {"type": "email"}},
                        {"id": "source", "type": "hidden", "label": "Source", "required": False,
                         "config": {"type": "hidden", "sourceType": "url_param",
                                    "sourceKey": "utm_source"}},
                    ],
                },
                {
                    "id": "work",
                    "title": "Work",
                    "fields": [
                        {"id": "employed", "type": "radio", "label": "Employed?", "required": True,
                         "config": {"type": "radio", "options": [
                             {"id": "y", "label": "Yes", "value": "yes"},
                             {"id": "n", "label": "No", "value": "no"},
                         ]}},
                        {"id": "employer", "type": "text", "label": "Employer", "required": True,
                         "config": {"type": "text"},
                         "conditionalLogic": {"action": "show", "logicType": "all", "conditions": [
                             {"fieldId": "employed", "operator": "equals", "value": "yes"},
                         ]}},
                    ],
                },
                {
                    "id": "feedback",
                    "title": "Feedback",
                    "fields": [
                        {"id": "score", "type": "csat", "label": "Score", "required": True,
                         "config": {"type": "csat", "scale": 10}},
                        {"id": "comments", "type": "textarea", "label": "Comments",
                         "required": False, "config": {"type": "textarea", "rows": 4}},
                    ],
                },
            ],
        }
    )


# =============================================================================
# Submit Callback Fixtures
# =============================================================================

@dataclass
class RecordingSubmit:
    """Async submit callback that records payloads and can be told to fail."""
    calls: list[dict[str, Any]] = field(default_factory=list)
    fail_with: Exception | None = None

    async def __call__(self, payload: dict[str, Any]) -> None:
        self.calls.append(payload)
        if self.fail_with is not None:
            raise self.fail_with


@pytest.fixture
def on_submit() -> RecordingSubmit:
    return RecordingSubmit()


@pytest.fixture
def build_field():
    return make_field


@pytest.fixture
def build_schema():
    return make_schema
