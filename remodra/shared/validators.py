"""Shared validation utilities"""

from datetime import date, datetime, timezone
from typing import Any, Optional

SUPPORTED_LANGUAGES = ("en", "es", "fr", "pt")


def empty_to_none(value: Any) -> Any:
    """Forms send "" for cleared optional fields; store those as NULL"""
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC"""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def validate_language(language: Optional[str]) -> str:
    if language not in SUPPORTED_LANGUAGES:
        raise ValueError("Unsupported language")
    return language


def parse_day(value: str) -> date:
    """
    Parse a YYYY-MM-DD path parameter.

    Raises:
        ValueError: If the value is not a calendar date
    """
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def is_number(value: Any, allow_strings: bool = False) -> bool:
    """True for ints/floats (and numeric strings when allowed); booleans are rejected"""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return True
    if allow_strings and isinstance(value, str):
        try:
            float(value)
            return True
        except ValueError:
            return False
    return False


def validate_materials(materials: Any) -> list[dict]:
    """
    Validate a materials list used for job costing.

    Each entry needs a name, a numeric quantity and a numeric unitPrice.

    Raises:
        ValueError: With a message naming the first bad entry
    """
    if not isinstance(materials, list) or not materials:
        raise ValueError("At least one material is required")

    for index, material in enumerate(materials):
        if not isinstance(material, dict):
            raise ValueError(f"Material #{index + 1} must be an object")
        if not material.get("name"):
            raise ValueError(f"Material #{index + 1} is missing a name")
        if not is_number(material.get("quantity")):
            raise ValueError(f"Material '{material['name']}' needs a numeric quantity")
        if not is_number(material.get("unitPrice")):
            raise ValueError(f"Material '{material['name']}' needs a numeric unitPrice")

    return materials
