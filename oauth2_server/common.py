"""
Common helpers for the OAuth2 engine.
"""

import uuid
from datetime import datetime, timedelta, timezone


def get_current_time() -> datetime:
    """Get the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def expires_after(seconds: float) -> datetime:
    """Get the time a lifetime of ``seconds`` starting now ends at."""
    return get_current_time() + timedelta(seconds=seconds)


def generate_id() -> str:
    """Generate an RFC 4122 version 4 UUID string."""
    return str(uuid.uuid4())
