"""Tests for the FormSession facade."""

import pytest

from formengine.enums import StepDisplayMode, SubmitStatus
from formengine.services.form_session import FormSession


@pytest.mark.asyncio
async def test_full_session_walkthrough(application_schema, on_submit):
    session = FormSession(
        application_schema, on_submit, url_params={"utm_source": "newsletter"}
    )

    assert session.mode == StepDisplayMode.PROGRESS_BAR
    assert not session.next()

    session.set_value("name", "Ada")
    session.set_value("email", "ada@example.com")
    assert session.next()

    session.set_value("employed", "yes")
    session.set_value("employer", "Analytical Engines")
    assert await session.handle_enter() is True
    assert session.is_last_step

    session.set_value("score", 10)
    result = await session.handle_enter()

    assert result.status == SubmitStatus.SUBMITTED
    assert on_submit.calls == [
        {
            "name": "Ada",
            "email": "ada@example.com",
            "source": "newsletter",
            "employed": "yes",
            "employer": "Analytical Engines",
            "score": 10,
            "comments": None,
        }
    ]
    assert session.payload() == on_submit.calls[0]


def test_tabs_session(application_schema, on_submit):
    session = FormSession(application_schema, on_submit, mode="tabs")
    session.set_value("name", "Ada")
    session.set_value("email", "ada@example.com")
    session.next()

    assert session.jump_to(0)
    assert session.prev() is False
    assert [tab.completed for tab in session.tabs()] == [True, False, False]
    assert session.progress() == pytest.approx(100 / 3)


@pytest.mark.asyncio
async def test_preview_session_disables_fields_and_submit(application_schema, on_submit):
    session = FormSession(application_schema, on_submit, preview=True)

    assert session.submit_disabled
    assert all(props.disabled for props in session.render_plan())

    result = await session.submit()

    assert result.status == SubmitStatus.INVALID
    assert on_submit.calls == []


def test_sessions_do_not_share_state(application_schema, on_submit):
    first = FormSession(application_schema, on_submit)
    second = FormSession(application_schema, on_submit)

    first.set_value("name", "Ada")

    assert "name" not in second.state.values
    assert first.session_id != second.session_id


@pytest.mark.asyncio
async def test_session_seeds_defaults_and_hidden_sources(build_field, build_schema, on_submit):
    schema = build_schema(
        [
            build_field("country", default_value="DE"),
            build_field("form_version", "hidden", config={"fixedValue": "v2"}),
            build_field("owner", "hidden", config={"sourceType": "user_field", "sourceKey": "email"}),
        ]
    )
    session = FormSession(
        schema,
        on_submit,
        initial_values={"country": "FR"},
        user_fields={"email": "owner@example.com"},
    )

    result = await session.submit()

    assert result.success
    assert on_submit.calls == [
        {"country": "FR", "form_version": "v2", "owner": "owner@example.com"}
    ]
