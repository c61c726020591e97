"""Per-request access to the app's store, clock and viewer timezone."""
from typing import Any, Dict, Optional

from flask import current_app, request

from ..store import DocumentStore
from ..utils.dates import Clock
from ..utils.errors import ValidationError
from ..utils.validators import Helpers

EXTENSION_KEY = "todo_groups"

# Real UTC offsets range from -12:00 to +14:00
MAX_OFFSET_MINUTES = 14 * 60


def _extension() -> Dict[str, Any]:
    return current_app.extensions[EXTENSION_KEY]


def get_store() -> DocumentStore:
    return _extension()["store"]


def get_clock() -> Clock:
    return _extension()["clock"]


def get_pending_counts():
    return _extension()["pending_counts"]


def viewer_tz_offset() -> Optional[int]:
    """The caller's ``X-Timezone-Offset`` header in minutes, if sent"""
    raw = request.headers.get("X-Timezone-Offset")
    if raw is None or raw.strip() == "":
        return None
    try:
        offset = int(raw)
    except ValueError:
        raise ValidationError("X-Timezone-Offset must be an integer number of minutes")
    if abs(offset) > MAX_OFFSET_MINUTES:
        raise ValidationError("X-Timezone-Offset is out of range")
    return offset


def json_body() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValidationError("JSON object body required")
    return payload


def timestamp_to_json(value):
    if value is None:
        return None
    if hasattr(value, "isoformat"):
        return Helpers.format_timestamp(value)
    return value
