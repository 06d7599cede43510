"""
Mentor selection orchestrator.

Responsibilities:
- Run the exact tier over the whole pool.
- Hand the complement to the relevance oracle when the exact tier is short.
- Backfill any still-open slots in pool order.

Non-Responsibilities:
- No pool loading.
- No oracle transport or response parsing.

Invariant:
The result holds min(limit, pool size) candidates with unique names, and
is deterministic for a fixed pool and a deterministic oracle.
"""

from typing import Iterable, List, Optional, Sequence, Set

from .errors import InvalidRequest
from .logger import get_logger
from .models import Candidate, MatchRequest, Mentor, Tier
from .oracle import RelevanceOracle, rank_remaining
from .rules import is_exact_match

logger = get_logger()

SHORTLIST_SIZE = 5
EXACT_SCORE = 100
EXACT_REASON = "公司和岗位信息与求职需求完全匹配"
BACKFILL_SCORE = 50
BACKFILL_REASON = "备选推荐"


def select_exact(pool: Iterable[Mentor], request: MatchRequest) -> List[Candidate]:
    return [
        Candidate(mentor=m, tier=Tier.EXACT, score=EXACT_SCORE, reason=EXACT_REASON)
        for m in pool
        if is_exact_match(m, request.direction, request.role)
    ]


def select_backfill(pool: Iterable[Mentor], selected: Set[str], count: int) -> List[Candidate]:
    out: List[Candidate] = []
    if count <= 0:
        return out
    taken = set(selected)
    for m in pool:
        if m.name in taken:
            continue
        taken.add(m.name)
        out.append(Candidate(mentor=m, tier=Tier.BACKFILL, score=BACKFILL_SCORE, reason=BACKFILL_REASON))
        if len(out) >= count:
            break
    return out


def _accept(result: List[Candidate], selected: Set[str], batch: Iterable[Candidate], limit: int) -> int:
    """Append unseen candidates up to `limit`; returns how many were taken."""
    taken = 0
    for c in batch:
        if len(result) >= limit:
            break
        if c.name in selected:
            continue
        selected.add(c.name)
        result.append(c)
        taken += 1
    return taken


def match_mentors(
    direction: Optional[str],
    role: Optional[str] = None,
    pool: Sequence[Mentor] = (),
    oracle: Optional[RelevanceOracle] = None,
    limit: int = SHORTLIST_SIZE,
) -> List[Candidate]:
    """
    Pick up to `limit` mentors for a career direction and optional role.

    Args:
        direction: Requested career direction (required)
        role: Requested role; blank means "any"
        pool: Mentor snapshot in repository order
        oracle: Relevance oracle; None skips straight to backfill
        limit: Short-list size

    Returns:
        Candidates tagged exact/oracle/backfill, exact first

    Raises:
        InvalidRequest: direction missing or blank
    """
    if not direction or not direction.strip():
        raise InvalidRequest("请提供求职方向")

    request = MatchRequest(direction=direction, role=role)
    logger.record_match_request()
    logger.info("Matching mentors", direction=direction, role=role or "未指定", pool=len(pool))

    result: List[Candidate] = []
    selected: Set[str] = set()

    exact = select_exact(pool, request)
    taken = _accept(result, selected, exact, limit)
    logger.record_candidates(Tier.EXACT.value, taken)
    logger.info(f"Exact tier matched {len(exact)} mentors")

    if len(result) < limit:
        complement = [m for m in pool if m.name not in selected]
        if oracle is None:
            logger.info("No relevance oracle configured, skipping to backfill")
        elif complement:
            ranked = rank_remaining(oracle, complement, request, limit - len(result))
            logger.record_candidates(Tier.ORACLE.value, _accept(result, selected, ranked, limit))

    if len(result) < limit:
        backfill = select_backfill(pool, selected, limit - len(result))
        taken = _accept(result, selected, backfill, limit)
        logger.record_candidates(Tier.BACKFILL.value, taken)
        if taken:
            logger.info(f"Backfilled {taken} mentors")

    return result[:limit]
