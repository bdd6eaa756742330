"""Shared type aliases for form values and payloads."""

from __future__ import annotations

from typing import TypeAlias

FieldValue: TypeAlias = object
FormValues: TypeAlias = dict[str, FieldValue]
FormPayload: TypeAlias = dict[str, FieldValue]
