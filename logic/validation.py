"""
Validation and sanitization utilities.

This module contains functions for validating pin and comment payloads before
they reach the database.

Author: Matthew Picone (mail@matthewpicone.com)
Date: 2025-12-17
"""

import math
from typing import Any, Dict

from fastapi import HTTPException

REQUIRED_PIN_FIELDS = ("lat", "lng", "title", "description", "authorName")
REQUIRED_COMMENT_FIELDS = ("authorName", "content")

MISSING_FIELDS_MESSAGE = "Missing required fields"

MAX_TITLE_LEN = 255
MAX_AUTHOR_NAME_LEN = 100


def is_missing(value: Any) -> bool:
    """Check whether a payload value counts as absent.

    Zero is a valid coordinate, so only None and blank strings are missing.

    Args:
        value: Raw payload value.

    Returns:
        True if the value is absent.
    """
    if value is None:
        return True
    if isinstance(value, str) and not value.strip():
        return True
    return False


def require_fields(payload: Dict[str, Any], fields) -> None:
    """Raise a 400 if any of the required fields is missing.

    Args:
        payload: Request body.
        fields: Names of the required fields.

    Raises:
        HTTPException: If a field is missing or blank.
    """
    if any(is_missing(payload.get(name)) for name in fields):
        raise HTTPException(400, MISSING_FIELDS_MESSAGE)


def sanitise_text(value: Any, max_len: int = None, field: str = "Field") -> str:
    """Sanitize a text field.

    Args:
        value: Raw value.
        max_len: Maximum length after stripping, if limited.
        field: Field label used in the error message.

    Returns:
        Stripped string.

    Raises:
        HTTPException: If the value is not a string or is too long.
    """
    if not isinstance(value, str):
        raise HTTPException(400, f"{field} must be a string")
    value = value.strip()
    if max_len is not None and len(value) > max_len:
        raise HTTPException(400, f"{field} too long")
    return value


def sanitise_coordinate(value: Any, *, limit: float) -> float:
    """Sanitize a latitude or longitude.

    Args:
        value: Raw value; numbers and numeric strings are accepted.
        limit: Absolute bound (90 for latitude, 180 for longitude).

    Returns:
        Coordinate as float.

    Raises:
        HTTPException: If the value is not numeric or is out of range.
    """
    if isinstance(value, bool):
        raise HTTPException(400, "Invalid coordinates")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid coordinates")
    if not math.isfinite(number) or abs(number) > limit:
        raise HTTPException(400, "Invalid coordinates")
    return number


def validate_pin_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a create-pin request body.

    Args:
        payload: Request body with lat, lng, title, description, authorName.

    Returns:
        Dictionary of cleaned column values.

    Raises:
        HTTPException: On missing or invalid fields.
    """
    require_fields(payload, REQUIRED_PIN_FIELDS)

    return {
        "lat": sanitise_coordinate(payload["lat"], limit=90.0),
        "lng": sanitise_coordinate(payload["lng"], limit=180.0),
        "title": sanitise_text(payload["title"], MAX_TITLE_LEN, "Title"),
        "description": sanitise_text(payload["description"], field="Description"),
        "author_name": sanitise_text(payload["authorName"], MAX_AUTHOR_NAME_LEN, "Author name"),
    }


def validate_comment_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a create-comment request body.

    Args:
        payload: Request body with authorName and content.

    Returns:
        Dictionary of cleaned column values.

    Raises:
        HTTPException: On missing or invalid fields.
    """
    require_fields(payload, REQUIRED_COMMENT_FIELDS)

    return {
        "author_name": sanitise_text(payload["authorName"], MAX_AUTHOR_NAME_LEN, "Author name"),
        "content": sanitise_text(payload["content"], field="Content"),
    }
