"""Structured logging helpers (PII-safe)."""

import logging
from typing import Any

from formengine.core.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: int | None = None) -> None:
    """Configure root logging for hosts that have not set it up themselves."""
    logging.basicConfig(
        level=level if level is not None else settings.log_level_value,
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


def build_log_context(
    *,
    form_id: str | None = None,
    session_id: str | None = None,
    step_index: int | None = None,
    field_id: str | None = None,
    mode: str | None = None,
) -> dict[str, Any]:
    """Return a PII-safe log context dict.

    Field values are never included; only identifiers and positions.
    """
    context: dict[str, Any] = {}
    if form_id:
        context["form_id"] = form_id
    if session_id:
        context["session_id"] = session_id
    if step_index is not None:
        context["step_index"] = step_index
    if field_id:
        context["field_id"] = field_id
    if mode:
        context["mode"] = mode
    return context
