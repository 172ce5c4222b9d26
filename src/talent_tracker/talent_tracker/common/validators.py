from __future__ import annotations

from ..core.enums import ValidationCode
from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str, *, code: str = ValidationCode.INVALID_REQUEST.value) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", code=code)
    return value.strip()


def optional_text(value) -> str | None:
    v = (value or "").strip() if isinstance(value, str) else value
    return v or None
