import re
from typing import List

# Full-width comma, half-width comma, enumeration comma and slash.
DIRECTION_DELIMITERS = re.compile(r"[、，,/]")


def normalize_text(s: str | None) -> str:
    return (s or "").strip().lower()


def split_directions(direction: str | None) -> List[str]:
    """Split a mentor's direction string into trimmed, non-blank parts."""
    if not direction:
        return []
    parts = [p.strip() for p in DIRECTION_DELIMITERS.split(direction)]
    return [p for p in parts if p]


def preview(text: str | None, length: int = 100) -> str:
    if not text:
        return ""
    return text[:length] + "..."
