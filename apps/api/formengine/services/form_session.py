"""Form session: one schema, one state, one submit callback."""

from __future__ import annotations

import logging
import uuid
from typing import Mapping

from formengine.core.config import settings
from formengine.core.structured_logging import build_log_context
from formengine.enums import StepDisplayMode
from formengine.schemas.forms import FormSchema
from formengine.services import form_adapter, form_navigation_service
from formengine.services.form_adapter import FieldRenderProps
from formengine.services.form_navigation_service import (
    FormEngineState,
    StepTab,
    SubmitCallback,
    SubmitResult,
)
from formengine.services.form_submission_service import assemble_payload, build_initial_values
from formengine.types import FieldValue, FormPayload

logger = logging.getLogger(__name__)


class FormSession:
    """
    Binds a schema to its navigation state and submit callback.

    The state is a plain public attribute; every method delegates to the
    stateless functions in ``form_navigation_service``. Answers are seeded
    with ``build_initial_values``: field defaults, then hidden-field sources
    read from ``url_params`` and ``user_fields``, then ``initial_values``.
    """

    def __init__(
        self,
        schema: FormSchema,
        on_submit: SubmitCallback,
        *,
        mode: StepDisplayMode | str | None = None,
        initial_values: Mapping[str, FieldValue] | None = None,
        url_params: Mapping[str, str] | None = None,
        user_fields: Mapping[str, FieldValue] | None = None,
        preview: bool = False,
        session_id: str | None = None,
    ) -> None:
        self.schema = schema
        self.on_submit = on_submit
        self.mode = StepDisplayMode(mode or settings.DEFAULT_STEP_DISPLAY_MODE)
        self.preview = preview
        self.session_id = session_id or uuid.uuid4().hex
        seeded = build_initial_values(
            schema, initial_values, url_params=url_params, user_fields=user_fields
        )
        self.state: FormEngineState = form_navigation_service.create_state(schema, seeded)
        logger.debug(
            "Form session started",
            extra=build_log_context(session_id=self.session_id, mode=self.mode.value),
        )

    # -- values ---------------------------------------------------------------

    def set_value(self, field_id: str, value: FieldValue) -> None:
        form_navigation_service.set_value(self.schema, self.state, field_id, value)

    def payload(self) -> FormPayload:
        return assemble_payload(self.schema, self.state.values, self.state.visible)

    # -- navigation -----------------------------------------------------------

    def next(self) -> bool:
        return form_navigation_service.go_to_next(self.schema, self.state)

    def prev(self) -> bool:
        return form_navigation_service.go_to_prev(self.schema, self.state)

    def jump_to(self, index: int) -> bool:
        return form_navigation_service.jump_to(self.schema, self.state, index, self.mode)

    async def submit(self) -> SubmitResult:
        result = await form_navigation_service.submit(
            self.schema, self.state, self.on_submit, preview=self.preview
        )
        logger.debug(
            f"Submit finished with status {result.status.value}",
            extra=build_log_context(session_id=self.session_id, step_index=result.failed_step),
        )
        return result

    async def handle_enter(
        self, *, shift: bool = False, in_multiline: bool = False
    ) -> bool | SubmitResult | None:
        return await form_navigation_service.handle_enter(
            self.schema,
            self.state,
            self.mode,
            self.on_submit,
            shift=shift,
            in_multiline=in_multiline,
            preview=self.preview,
        )

    # -- presentation ---------------------------------------------------------

    @property
    def is_last_step(self) -> bool:
        return form_navigation_service.is_last_step(self.schema, self.state)

    @property
    def submit_disabled(self) -> bool:
        return self.state.submitting or self.preview

    def progress(self) -> float:
        return form_navigation_service.progress_percent(self.schema, self.state)

    def tabs(self) -> list[StepTab]:
        return form_navigation_service.step_tabs(self.schema, self.state)

    def render_plan(self) -> list[FieldRenderProps]:
        return form_adapter.render_plan(self.schema, self.state, disabled=self.preview)
