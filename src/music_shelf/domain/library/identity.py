"""
Identity and validation rules for catalog entities.

Pure helpers with no catalog state: ID validity and generation, volume
clamping, and display index formatting.
"""

import math
import uuid
from typing import Any, Container, Optional

from .models import DEFAULT_VOLUME

MIN_VOLUME = 0.0
MAX_VOLUME = 100.0


def is_valid_id(value: Any) -> bool:
    """Check if value is usable as an entity ID (non-blank string)."""
    return isinstance(value, str) and value.strip() != ""


def clamp_volume(value: Any) -> float:
    """Coerce a persisted volume into the 0-100 range.

    Values above the range clamp to 100. Negative values are treated as
    corruption rather than a boundary overshoot and reset to the default (50),
    as are values that cannot be read as a number.

    Examples:
        >>> clamp_volume(150)
        100.0
        >>> clamp_volume(-5)
        50.0
        >>> clamp_volume("73")
        73.0
    """
    if isinstance(value, bool) or value is None:
        return DEFAULT_VOLUME

    try:
        volume = float(value)
    except (TypeError, ValueError):
        return DEFAULT_VOLUME

    if math.isnan(volume):
        return DEFAULT_VOLUME
    if volume > MAX_VOLUME:
        return MAX_VOLUME
    if volume < MIN_VOLUME:
        return DEFAULT_VOLUME
    return volume


def generate_id(existing: Optional[Container[str]] = None) -> str:
    """Generate a new opaque ID that does not collide with ``existing``.

    Args:
        existing: IDs already claimed in the collection being built

    Returns:
        32-character hex string
    """
    while True:
        candidate = uuid.uuid4().hex
        if existing is None or candidate not in existing:
            return candidate


def format_display_index(position: int) -> str:
    """Format a 1-based list position as a zero-padded ordinal ("01", "02", ...)."""
    return f"{position:02d}"


def dedupe_ids(values: Any) -> list[str]:
    """Order-preserving dedup of an ID list, dropping blank/non-string entries."""
    if not isinstance(values, (list, tuple)):
        return []

    seen: set[str] = set()
    result = []
    for value in values:
        if not is_valid_id(value) or value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
