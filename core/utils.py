"""Utility functions for vocabin application."""

import math
from datetime import datetime, timezone
from urllib.parse import quote

from .config import AUDIO_BASE_URL


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def from_iso(value) -> datetime | None:
    """Parse an ISO timestamp. Naive values are taken as UTC."""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives (6 * 2.5 -> 15)."""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    """Round a percentage to two decimals."""
    return round_half_up(value * 100) / 100


def generate_audio_url(word: str, accent: int = 2) -> str | None:
    """Build a pronunciation URL for a word. accent 1 = US, 2 = UK."""
    if not word or not word.strip():
        return None
    audio_type = 1 if accent == 1 else 2
    return f"{AUDIO_BASE_URL}?audio={quote(word.strip())}&type={audio_type}"
