"""
Case archive.

Responsibilities:
- Create, read, list and delete generated case documents.

Non-Responsibilities:
- No case generation.

Invariant:
Records round-trip in the same shape they were saved in; `list()` is
newest first.
"""

import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import sessionmaker

from .database import Case, init_database
from .errors import CaseNotFound, InvalidRequest
from .logger import get_logger
from .normalize import preview
from .schema import validate_case

logger = get_logger()

UNKNOWN_MENTOR = "未知导师"


def new_case_id() -> str:
    return str(int(time.time() * 1000))


def parse_timestamp(ts: Any) -> datetime:
    """Parse an ISO timestamp (a trailing 'Z' is accepted); now() when missing or malformed."""
    if isinstance(ts, datetime):
        return ts
    if not isinstance(ts, str) or not ts:
        return datetime.now()
    try:
        parsed = datetime.fromisoformat(ts.replace("Z", "+00:00"))
    except ValueError:
        return datetime.now()
    # SQLite drops tzinfo; store local naive time for consistent ordering.
    return parsed.astimezone().replace(tzinfo=None) if parsed.tzinfo else parsed


def _to_record(row: Case) -> Dict[str, Any]:
    return {
        "id": row.id,
        "timestamp": row.timestamp.isoformat(),
        "mentor": row.mentor or {},
        "direction": row.direction or "",
        "role": row.role or "",
        "customer_problems": row.customer_problems or [],
        "core_content": row.core_content or "",
        "highlights": row.highlights or "",
        "language_style": row.language_style or "professional",
        "case": row.content,
    }


class CaseArchive:
    """SQLite-backed store of case documents keyed by an opaque id."""

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._Session = sessionmaker(bind=init_database(self.db_path))

    def save(self, record: Dict[str, Any]) -> Tuple[str, str]:
        """
        Insert or overwrite a case.

        Returns:
            Tuple of (case_id, iso_timestamp)

        Raises:
            InvalidRequest: case text missing or malformed fields
        """
        errors = validate_case(record)
        if errors:
            raise InvalidRequest("; ".join(errors))

        case_id = record.get("id") or new_case_id()
        timestamp = parse_timestamp(record.get("timestamp"))
        mentor = record.get("mentor") or {}

        with self._Session() as session:
            row = session.get(Case, case_id) or Case(id=case_id)
            row.timestamp = timestamp
            row.mentor = mentor
            row.mentor_name = mentor.get("name")
            row.direction = record.get("direction") or ""
            row.role = record.get("role") or ""
            row.customer_problems = record.get("customer_problems") or []
            row.core_content = record.get("core_content") or ""
            row.highlights = record.get("highlights") or ""
            row.language_style = record.get("language_style") or "professional"
            row.content = record["case"]
            session.add(row)
            session.commit()

        logger.info("Case saved", case_id=case_id)
        return case_id, timestamp.isoformat()

    def get(self, case_id: str) -> Dict[str, Any]:
        with self._Session() as session:
            row = session.get(Case, case_id)
            if row is None:
                raise CaseNotFound(case_id)
            return _to_record(row)

    def list(self) -> List[Dict[str, Any]]:
        """Summaries of every case, newest first."""
        with self._Session() as session:
            rows = session.query(Case).order_by(Case.timestamp.desc(), Case.id.desc()).all()
            return [
                {
                    "id": row.id,
                    "timestamp": row.timestamp.isoformat(),
                    "mentor": row.mentor_name or UNKNOWN_MENTOR,
                    "direction": row.direction or "",
                    "preview": preview(row.content),
                }
                for row in rows
            ]

    def delete(self, case_id: str) -> None:
        with self._Session() as session:
            row = session.get(Case, case_id)
            if row is None:
                raise CaseNotFound(case_id)
            session.delete(row)
            session.commit()
        logger.info("Case deleted", case_id=case_id)

    def count(self) -> int:
        with self._Session() as session:
            return session.query(Case).count()
