"""
Oracle-assisted ranking.

Responsibilities:
- Render the ranking rubric for a batch of candidate mentors.
- Parse the oracle's ranked answer back into batch indices.
- Map indices to mentors and tag them as oracle-tier candidates.

Non-Responsibilities:
- No exact-tier rules.
- No backfill.

Invariant:
Nothing the oracle does (timeouts, error statuses, prose instead of JSON,
indices out of range) fails the match request. The worst case is an
empty oracle tier.
"""

import json
import math
import re
from dataclasses import dataclass
from typing import Any, List, Optional, Protocol, Sequence

from .errors import LLMError, OracleSoftFailure
from .logger import get_logger
from .models import Candidate, MatchRequest, Mentor, Tier
from .qwen import QwenClient

logger = get_logger()

UNSPECIFIED = "未提供"
DEFAULT_ORACLE_REASON = "AI分析推荐"
RESULT_FIELD = "teachers"

_FENCE = re.compile(r"```(?:json)?[ \t]*\n?", re.IGNORECASE)


@dataclass(frozen=True)
class RankedEntry:
    index: int
    score: int
    reason: str


class RelevanceOracle(Protocol):
    def rank(self, rubric: str, candidates: Sequence[Mentor]) -> List[RankedEntry]:
        ...


def _field(value: str) -> str:
    return value if value and value.strip() else UNSPECIFIED


def render_candidate(index: int, mentor: Mentor) -> str:
    return "\n".join([
        f"导师{index}：",
        f"- 姓名：{mentor.name}",
        f"- 公司：{_field(mentor.company)}",
        f"- 职位：{_field(mentor.position)}",
        f"- 擅长方向：{_field(mentor.direction)}",
        f"- 教育背景：{_field(mentor.education)}",
        f"- 详细介绍：{_field(mentor.information)}",
        f"- 关键词：{_field(mentor.keywords)}",
    ])


def build_rubric(request: MatchRequest, candidates: Sequence[Mentor], remaining: int) -> str:
    """Prompt asking for the `remaining` best candidates as strict JSON."""
    role_line = f"求职岗位：{request.role.strip()}" if request.has_role else "求职岗位：未指定"
    listing = "\n\n".join(render_candidate(i, m) for i, m in enumerate(candidates))
    return f"""请根据以下求职需求，从候选导师中筛选出最适合的{remaining}位导师，并按照匹配度从高到低排序。

求职方向：{request.direction}
{role_line}

候选导师信息：
{listing}

请分析每位导师的专业背景、工作经历、擅长领域与求职需求的匹配度，筛选出最适合的{remaining}位导师。

请严格按照以下JSON格式返回结果，只返回JSON，不要有其他文字：
{{
  "{RESULT_FIELD}": [
    {{
      "index": 导师编号（从0开始，对应候选导师数组的索引）,
      "match_score": 匹配度分数（1-100，分数越高匹配度越高）,
      "match_reason": "匹配理由（简要说明为什么这位导师适合）"
    }}
  ]
}}

只返回最适合的{remaining}位导师，按匹配度从高到低排序。"""


def strip_code_fences(text: str) -> str:
    return _FENCE.sub("", text).strip()


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_score(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    try:
        score = float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(score):
        return 0
    # Clamp before rounding; inf has no integer form.
    return round(max(0.0, min(100.0, score)))


def parse_ranking(text: str) -> List[RankedEntry]:
    """Parse the oracle's answer.

    Raises:
        OracleSoftFailure: unparsable text, missing result field, or a
            result field that is not a list
    """
    cleaned = strip_code_fences(text or "")
    try:
        payload = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise OracleSoftFailure(f"Unparsable oracle response: {e}") from e

    if not isinstance(payload, dict) or RESULT_FIELD not in payload:
        raise OracleSoftFailure(f"Oracle response lacks '{RESULT_FIELD}'")
    items = payload[RESULT_FIELD]
    if not isinstance(items, list):
        raise OracleSoftFailure(f"Oracle '{RESULT_FIELD}' is not a list")

    entries: List[RankedEntry] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        index = _as_int(item.get("index"))
        if index is None:
            continue
        reason = item.get("match_reason")
        entries.append(RankedEntry(
            index=index,
            score=_as_score(item.get("match_score")),
            reason=reason.strip() if isinstance(reason, str) else "",
        ))
    return entries


class LLMRelevanceOracle:
    """Relevance oracle backed by a text-generation client."""

    def __init__(self, client: QwenClient, temperature: float = 0.3, max_tokens: int = 2000):
        self.client = client
        self.temperature = temperature
        self.max_tokens = max_tokens

    def rank(self, rubric: str, candidates: Sequence[Mentor]) -> List[RankedEntry]:
        try:
            text = self.client.generate(rubric, temperature=self.temperature, max_tokens=self.max_tokens)
        except LLMError as e:
            raise OracleSoftFailure(str(e)) from e
        try:
            return parse_ranking(text)
        except OracleSoftFailure:
            logger.debug("Oracle text that failed to parse", text=text[:500])
            raise


def rank_remaining(
    oracle: RelevanceOracle,
    candidates: Sequence[Mentor],
    request: MatchRequest,
    remaining: int,
) -> List[Candidate]:
    """Ask the oracle for the best `remaining` of `candidates`.

    Returns an empty list on any soft failure.
    """
    if remaining <= 0 or not candidates:
        return []

    rubric = build_rubric(request, candidates, remaining)
    logger.record_oracle_call()
    try:
        entries = oracle.rank(rubric, candidates)
    except OracleSoftFailure as e:
        logger.record_oracle_failure(type(e.__cause__).__name__ if e.__cause__ else "OracleSoftFailure")
        logger.warning("Oracle ranking failed, falling back", error=str(e), batch=len(candidates))
        return []
    except Exception as e:
        # Third-party oracles may raise their own transport errors.
        logger.record_oracle_failure(type(e).__name__)
        logger.error("Oracle raised unexpectedly, falling back", error=repr(e), batch=len(candidates))
        return []
    logger.record_oracle_success()

    selected: List[Candidate] = []
    used = set()
    for entry in entries:
        if not 0 <= entry.index < len(candidates):
            logger.debug("Dropping out-of-range oracle index", index=entry.index, batch=len(candidates))
            continue
        if entry.index in used:
            continue
        used.add(entry.index)
        selected.append(Candidate(
            mentor=candidates[entry.index],
            tier=Tier.ORACLE,
            score=entry.score,
            reason=entry.reason or DEFAULT_ORACLE_REASON,
        ))
        if len(selected) >= remaining:
            break

    logger.info(f"Oracle supplied {len(selected)} of {remaining} requested mentors")
    return selected
