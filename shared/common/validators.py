"""
Shared Validators Module.

Validation helpers used by models and services.
"""
import os
from datetime import datetime
from typing import Any, Iterable, List, Optional

from django.core.exceptions import ValidationError


# =============================================================================
# DATE/TIME VALIDATORS
# =============================================================================

def validate_date_range(
    start: Optional[datetime],
    end: Optional[datetime],
    field_name: str = "date range"
) -> None:
    """Validate that start is not after end when both are set."""
    if start and end and start > end:
        raise ValidationError(f"Start must be before end for {field_name}")


# =============================================================================
# NUMERIC VALIDATORS
# =============================================================================

def validate_percentage(value: Any, field_name: str = "percentage") -> float:
    """Validate a percentage value (0-100)."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number")

    if number < 0 or number > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")

    return number


# =============================================================================
# JSON VALIDATORS
# =============================================================================

def validate_json_list(
    value: Any,
    required_keys: Iterable[str],
    field_name: str = "items"
) -> List[dict]:
    """Validate a JSON array of objects that must each carry ``required_keys``."""
    if value in (None, ''):
        return []
    if not isinstance(value, list):
        raise ValidationError(f"{field_name} must be a list")

    required = list(required_keys)
    for index, item in enumerate(value):
        if not isinstance(item, dict):
            raise ValidationError(f"{field_name}[{index}] must be an object")
        missing = [key for key in required if item.get(key) in (None, '')]
        if missing:
            raise ValidationError(
                f"{field_name}[{index}] is missing required keys: {', '.join(missing)}"
            )
    return value


# =============================================================================
# FILE VALIDATORS
# =============================================================================

def validate_upload(
    uploaded_file,
    allowed_extensions: Iterable[str],
    max_size_bytes: int,
    field_name: str = "file"
) -> None:
    """Validate an uploaded file's extension and size."""
    extension = os.path.splitext(uploaded_file.name)[1].lower().lstrip('.')
    allowed = [ext.lower().lstrip('.') for ext in allowed_extensions]
    if extension not in allowed:
        raise ValidationError(
            f"{field_name} must be one of: {', '.join('.' + ext for ext in allowed)}"
        )
    if uploaded_file.size > max_size_bytes:
        raise ValidationError(
            f"{field_name} exceeds the maximum size of {max_size_bytes // (1024 * 1024)}MB"
        )
