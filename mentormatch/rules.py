"""
Rule-based matchers for the exact tier.

Responsibilities:
- Decide whether a mentor's direction matches the requested direction.
- Decide whether a mentor's role/employer fits the requested role.

Non-Responsibilities:
- No ordering or truncation.
- No oracle calls.

Invariant:
Matching favours recall. Substring containment is checked in both
directions and an unspecified mentor role never fails a role check.
"""

from typing import Optional, Tuple

from .models import Mentor
from .normalize import normalize_text, split_directions

# (request keyword, employer synonyms). A family fires when the requested
# role mentions the keyword or any synonym and the employer mentions a synonym.
COMPANY_KEYWORD_FAMILIES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("互联网", ("互联网", "科技", "软件")),
    ("金融", ("金融", "银行", "证券")),
    ("快消", ("快消", "消费")),
)


def direction_matches(mentor_direction: str, requested: str) -> bool:
    """Case-sensitive bidirectional containment against each sub-direction."""
    for part in split_directions(mentor_direction):
        if requested in part or part in requested:
            return True
    return False


def family_matches(requested_role: str, company: str) -> bool:
    """Both arguments are expected to be normalized already."""
    if not company:
        return False
    for key, synonyms in COMPANY_KEYWORD_FAMILIES:
        terms = (key,) + synonyms
        if not any(t in requested_role for t in terms):
            continue
        if any(s in company for s in synonyms):
            return True
    return False


def role_matches(mentor_role: str, mentor_company: str, requested_role: Optional[str]) -> bool:
    requested = normalize_text(requested_role)
    if not requested:
        return True
    role = normalize_text(mentor_role)
    if requested in role or role in requested:
        return True
    return family_matches(requested, normalize_text(mentor_company))


def is_exact_match(mentor: Mentor, direction: str, role: Optional[str]) -> bool:
    if not direction_matches(mentor.direction, direction):
        return False
    return role_matches(mentor.position, mentor.company, role)
