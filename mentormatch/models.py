"""
Records shared by the matching engine and the case tooling.

Responsibilities:
- Represent a mentor as loaded from the pool file.
- Represent a match request and a tagged candidate result.

Non-Responsibilities:
- No validation (see schema.py).
- No matching logic.

Invariant:
A missing optional field is "unspecified", never a mismatch.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

MENTOR_FIELDS = (
    "name",
    "direction",
    "position",
    "company",
    "education",
    "information",
    "keywords",
)


class Tier(str, Enum):
    """Provenance of a selected candidate."""

    EXACT = "exact"
    ORACLE = "oracle"
    BACKFILL = "backfill"


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


@dataclass(frozen=True)
class Mentor:
    """A mentor record. `name` is the de-duplication key."""

    name: str
    direction: str = ""
    position: str = ""
    company: str = ""
    education: str = ""
    information: str = ""
    keywords: str = ""
    extra: Dict[str, Any] = field(default_factory=dict, compare=False, hash=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Mentor":
        known = {k: _as_text(data.get(k)) for k in MENTOR_FIELDS}
        extra = {k: v for k, v in data.items() if k not in MENTOR_FIELDS}
        return cls(extra=extra, **known)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = dict(self.extra)
        for k in MENTOR_FIELDS:
            out[k] = getattr(self, k)
        return out


@dataclass(frozen=True)
class MatchRequest:
    direction: str
    role: Optional[str] = None

    @property
    def has_role(self) -> bool:
        return bool(self.role and self.role.strip())


@dataclass(frozen=True)
class Candidate:
    """A mentor tagged with the tier that selected it."""

    mentor: Mentor
    tier: Tier
    score: int
    reason: str

    @property
    def name(self) -> str:
        return self.mentor.name

    def to_dict(self) -> Dict[str, Any]:
        out = self.mentor.to_dict()
        out.update({"tier": self.tier.value, "score": self.score, "reason": self.reason})
        return out
