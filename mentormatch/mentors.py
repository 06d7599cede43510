"""
Mentor repository.

Responsibilities:
- Load the mentor pool from a JSON array file.
- Serve an immutable snapshot; reload replaces it in a single assignment.

Non-Responsibilities:
- No matching logic.
- No writes to the pool file.

Invariant:
A pool that cannot be loaded is an empty pool, never an error for callers.
"""

import json
from pathlib import Path
from typing import Any, List, Optional, Tuple

from .errors import RepositoryUnavailable
from .logger import get_logger
from .models import Mentor
from .schema import validate_mentor

logger = get_logger()


def read_mentor_file(path: Path) -> List[Any]:
    """Return the raw records in `path`.

    Raises:
        RepositoryUnavailable: file missing, unreadable, not JSON or not a list
    """
    if not path.exists():
        raise RepositoryUnavailable(f"Mentor file not found: {path}")
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
    except OSError as e:
        raise RepositoryUnavailable(f"Cannot read {path}: {e}") from e
    if not content:
        return []
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise RepositoryUnavailable(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, list):
        raise RepositoryUnavailable(f"Mentor file must contain a JSON array: {path}")
    return data


def build_snapshot(records: List[Any]) -> Tuple[Mentor, ...]:
    """Validate records and drop invalid ones and repeated names, keeping file order."""
    mentors: List[Mentor] = []
    seen = set()
    for i, raw in enumerate(records):
        errors = validate_mentor(raw)
        if errors:
            logger.warning("Skipping invalid mentor record", index=i, errors=errors)
            continue
        mentor = Mentor.from_dict(raw)
        if mentor.name in seen:
            logger.warning("Skipping duplicate mentor name", index=i, name=mentor.name)
            continue
        seen.add(mentor.name)
        mentors.append(mentor)
    return tuple(mentors)


class MentorRepository:
    """Read-only access to the mentor pool loaded from `path`."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._mentors: Tuple[Mentor, ...] = ()
        self.loaded = False

    def load(self) -> bool:
        """(Re)load the pool. Returns False when the file could not be used."""
        try:
            snapshot = build_snapshot(read_mentor_file(self.path))
        except RepositoryUnavailable as e:
            logger.error("Mentor pool unavailable, using empty pool", path=str(self.path), error=str(e))
            self._mentors = ()
            self.loaded = False
            return False
        self._mentors = snapshot
        self.loaded = True
        logger.info(f"Loaded {len(snapshot)} mentors", path=str(self.path))
        return True

    reload = load

    def snapshot(self) -> Tuple[Mentor, ...]:
        return self._mentors

    @property
    def count(self) -> int:
        return len(self._mentors)

    def find(self, name: str) -> Optional[Mentor]:
        for mentor in self._mentors:
            if mentor.name == name:
                return mentor
        return None
