"""
Tests for the SQLite case archive.
"""

import pytest

from mentormatch.archive import UNKNOWN_MENTOR, CaseArchive, parse_timestamp
from mentormatch.errors import CaseNotFound, InvalidRequest


@pytest.fixture
def archive(tmp_path):
    return CaseArchive(tmp_path / "data" / "cases.db")


class TestSave:
    def test_round_trip(self, archive, case_record):
        case_id, timestamp = archive.save(case_record)

        assert case_id == "1700000000000"
        assert timestamp == "2024-01-02T03:04:05"
        stored = archive.get(case_id)
        assert stored == case_record

    def test_generates_id_when_missing(self, archive, case_record):
        case_record.pop("id")
        case_id, _ = archive.save(case_record)
        assert case_id.isdigit()
        assert archive.get(case_id)["case"] == case_record["case"]

    def test_overwrites_existing_id(self, archive, case_record):
        archive.save(case_record)
        case_record["case"] = "修改后的案例"
        archive.save(case_record)

        assert archive.count() == 1
        assert archive.get("1700000000000")["case"] == "修改后的案例"

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_rejects_empty_case(self, archive, case_record, text):
        case_record["case"] = text
        with pytest.raises(InvalidRequest):
            archive.save(case_record)
        assert archive.count() == 0

    def test_minimal_record(self, archive):
        case_id, _ = archive.save({"case": "正文"})
        stored = archive.get(case_id)
        assert stored["mentor"] == {}
        assert stored["customer_problems"] == []
        assert stored["language_style"] == "professional"


class TestList:
    def test_newest_first_with_summary(self, archive, case_record):
        archive.save(case_record)
        archive.save({"id": "2", "timestamp": "2025-06-01T00:00:00", "case": "短", "direction": "互联网"})

        summaries = archive.list()

        assert [s["id"] for s in summaries] == ["2", "1700000000000"]
        assert summaries[0]["mentor"] == UNKNOWN_MENTOR
        assert summaries[0]["preview"] == "短..."
        assert summaries[1]["mentor"] == "张老师"
        assert summaries[1]["preview"] == case_record["case"][:100] + "..."

    def test_empty(self, archive):
        assert archive.list() == []


class TestGetDelete:
    def test_get_missing(self, archive):
        with pytest.raises(CaseNotFound):
            archive.get("nope")

    def test_delete(self, archive, case_record):
        archive.save(case_record)
        archive.delete("1700000000000")
        assert archive.count() == 0

    def test_delete_missing(self, archive):
        with pytest.raises(CaseNotFound):
            archive.delete("nope")


class TestParseTimestamp:
    def test_iso(self):
        assert parse_timestamp("2024-01-02T03:04:05").isoformat() == "2024-01-02T03:04:05"

    def test_utc_suffix_becomes_naive(self):
        assert parse_timestamp("2024-01-02T03:04:05.000Z").tzinfo is None

    @pytest.mark.parametrize("value", [None, "", "yesterday", 42])
    def test_fallback_to_now(self, value):
        assert parse_timestamp(value) is not None
