"""Utility helper functions for the vault."""

import uuid
from datetime import datetime, timezone
from typing import List, Optional


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_aware(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so they compare with stored timestamps."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def parse_iso_datetime(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp, accepting the trailing ``Z`` that
    JSON-serialized browser dates carry.

    Raises:
        ValueError: If the value is not a string or not ISO-8601
    """
    if not isinstance(value, str):
        raise ValueError(f"Expected ISO-8601 string, got {type(value).__name__}")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return ensure_aware(datetime.fromisoformat(text))


def format_iso_datetime(value: datetime) -> str:
    return ensure_aware(value).isoformat()


def parse_tags(tags_str: Optional[str]) -> List[str]:
    """
    Parse comma-separated tags string into list.

    Args:
        tags_str: Comma-separated tags (e.g., "tag1,tag2,tag3")

    Returns:
        List of trimmed tag strings
    """
    if not tags_str:
        return []
    return [tag.strip() for tag in tags_str.split(',') if tag.strip()]


def file_type_from_name(name: str) -> str:
    """Lower-cased extension of ``name``, or an empty string when it has none."""
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1].lower()


SIZE_UNITS = ["Bytes", "KB", "MB", "GB", "TB"]


def format_file_size(size: int) -> str:
    """
    Human readable size in base-1024 units.

    Examples:
        0 -> "0 Bytes", 1536 -> "1.5 KB", 10485760 -> "10 MB"
    """
    if size <= 0:
        return "0 Bytes"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and size >= 1024 ** (exponent + 1):
        exponent += 1
    value = round(size / (1024 ** exponent), 2)
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {SIZE_UNITS[exponent]}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'} ago"


def format_relative_time(when: datetime, now: Optional[datetime] = None) -> str:
    """Distance from ``when`` to ``now`` in words, e.g. "3 days ago"."""
    now = ensure_aware(now or utc_now())
    seconds = max(0, int((now - ensure_aware(when)).total_seconds()))

    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return _plural(minutes, "minute")
    hours = minutes // 60
    if hours < 24:
        return _plural(hours, "hour")
    days = hours // 24
    if days < 30:
        return _plural(days, "day")
    if days < 365:
        return _plural(days // 30, "month")
    return _plural(days // 365, "year")
