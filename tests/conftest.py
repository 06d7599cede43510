"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Any, Dict, List

from mentormatch.errors import OracleSoftFailure
from mentormatch.logger import get_logger
from mentormatch.models import Mentor
from mentormatch.oracle import RankedEntry


class StubOracle:
    """Deterministic oracle returning canned entries and recording calls."""

    def __init__(self, entries=None, error: Exception | None = None):
        self.entries = list(entries or [])
        self.error = error
        self.calls = []

    def rank(self, rubric, candidates):
        self.calls.append((rubric, list(candidates)))
        if self.error is not None:
            raise self.error
        return list(self.entries)


class UnreachableOracle(StubOracle):
    def __init__(self):
        super().__init__(error=OracleSoftFailure("connection refused"))


class FakeClient:
    """Stands in for QwenClient.generate."""

    def __init__(self, replies):
        self.replies = list(replies)
        self.prompts = []

    def generate(self, prompt, temperature=0.7, max_tokens=2000):
        self.prompts.append(prompt)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Route log output to the test's temp dir."""
    logger = get_logger()
    logger.configure(level="DEBUG", log_dir=tmp_path / "logs", enable_console=False)
    yield logger


def make_mentor(name: str, **fields) -> Mentor:
    return Mentor(name=name, **fields)


@pytest.fixture
def finance_pool() -> List[Mentor]:
    """Pool from the A/B/C scenario."""
    return [
        make_mentor("A", direction="金融", position="分析师", company="某银行"),
        make_mentor("B", direction="金融", position="顾问", company="某证券"),
        make_mentor("C", direction="互联网"),
    ]


@pytest.fixture
def product_pool() -> List[Mentor]:
    """Seven mentors that all match the direction 产品."""
    return [make_mentor(f"P{i}", direction="产品、运营", position="产品经理") for i in range(7)]


@pytest.fixture
def unrelated_pool() -> List[Mentor]:
    """Mentors none of which match the direction 医疗."""
    return [
        make_mentor("U0", direction="金融"),
        make_mentor("U1", direction="互联网，科技"),
        make_mentor("U2", direction="快消"),
        make_mentor("U3", direction="咨询/战略"),
        make_mentor("U4", direction="法律"),
        make_mentor("U5", direction="教育"),
    ]


@pytest.fixture
def mentor_records() -> List[Dict[str, Any]]:
    """Raw mentor records as stored in teachers.json."""
    return [
        {
            "name": "张老师",
            "direction": "金融、投资",
            "position": "投资经理",
            "company": "某证券公司",
            "education": "北京大学 金融硕士",
            "information": "十年投行经验",
            "keywords": "IPO, 并购",
            "avatar": "zhang.png",
        },
        {
            "name": "李老师",
            "direction": "互联网/产品",
            "position": "产品总监",
            "company": "某科技公司",
        },
        {"name": "王老师"},
    ]


@pytest.fixture
def teachers_file(tmp_path, mentor_records) -> Path:
    path = tmp_path / "teachers.json"
    path.write_text(json.dumps(mentor_records, ensure_ascii=False), encoding="utf-8")
    return path


@pytest.fixture
def case_record() -> Dict[str, Any]:
    return {
        "id": "1700000000000",
        "timestamp": "2024-01-02T03:04:05",
        "mentor": {"name": "张老师", "company": "某证券公司"},
        "direction": "金融",
        "role": "分析师",
        "customer_problems": ["interview"],
        "core_content": "",
        "highlights": "内推资源",
        "language_style": "professional",
        "case": "第一部分：背景介绍。" * 20,
    }
