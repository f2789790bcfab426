"""Timestamp and ID generation utilities."""

from datetime import datetime, timezone
from uuid import uuid4


def generate_uuid() -> str:
    """
    Generate a UUID4 identifier for records requiring guaranteed uniqueness.

    Returns:
        str: UUID4 string (e.g., "550e8400-e29b-41d4-a716-446655440000")
    """
    return str(uuid4())


def generate_timestamp() -> datetime:
    """
    Generate a timezone-aware UTC timestamp.

    Returns:
        datetime: Current UTC time with timezone info
    """
    return datetime.now(timezone.utc)

