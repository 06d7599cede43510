"""
Tests for direction and role/company matchers.
"""

import pytest

from mentormatch.models import Mentor
from mentormatch.rules import (
    COMPANY_KEYWORD_FAMILIES,
    direction_matches,
    family_matches,
    is_exact_match,
    role_matches,
)


class TestDirectionMatches:
    """Bidirectional substring containment on each sub-direction."""

    def test_mentor_part_inside_request(self):
        assert direction_matches("科技", "互联网科技")

    def test_request_inside_mentor_part(self):
        assert direction_matches("产品经理招聘", "产品")

    def test_any_delimited_part_matches(self):
        assert direction_matches("金融、投资", "投资")
        assert direction_matches("金融，投资", "投资")
        assert direction_matches("金融,投资", "投资")
        assert direction_matches("金融/投资", "投资")

    def test_parts_are_trimmed(self):
        assert direction_matches("金融 , 投资 ", "投资")

    def test_empty_mentor_direction_never_matches(self):
        assert not direction_matches("", "金融")
        assert not direction_matches(None, "金融")

    def test_doubled_delimiters_do_not_match_everything(self):
        assert not direction_matches("金融、、投资", "医疗")

    def test_no_overlap(self):
        assert not direction_matches("金融、投资", "医疗")

    def test_case_sensitive(self):
        assert direction_matches("Finance", "Finance")
        assert not direction_matches("Finance", "finance")

    def test_short_direction_is_permissive(self):
        """Single-character directions match broadly; recall is preferred here."""
        assert direction_matches("金", "金融科技")


class TestRoleMatches:
    """Role containment plus employer keyword families."""

    def test_no_role_requested_always_matches(self):
        assert role_matches("分析师", "某银行", None)
        assert role_matches("分析师", "某银行", "   ")

    def test_mentor_role_contains_request(self):
        assert role_matches("高级数据分析师", "", "分析师")

    def test_request_contains_mentor_role(self):
        assert role_matches("分析师", "", "金融分析师")

    def test_case_insensitive(self):
        assert role_matches("Product Manager", "", "  product manager ")

    def test_unspecified_mentor_role_matches(self):
        assert role_matches("", "", "分析师")

    def test_unrelated_role_and_company(self):
        assert not role_matches("设计师", "某设计公司", "分析师")

    @pytest.mark.parametrize(
        "requested, company",
        [
            ("互联网运营", "某科技公司"),
            ("互联网", "某软件公司"),
            ("金融分析", "某银行"),
            ("金融", "某证券"),
            ("快消市场", "某消费品公司"),
        ],
    )
    def test_family_key_in_request(self, requested, company):
        assert role_matches("顾问", company, requested)

    def test_family_synonym_in_request(self):
        assert role_matches("顾问", "某证券", "银行")

    def test_family_needs_employer_synonym(self):
        assert not role_matches("顾问", "某咨询公司", "金融")

    def test_family_does_not_cross(self):
        assert not family_matches("金融", "某科技公司")

    def test_family_empty_company(self):
        assert not family_matches("金融", "")

    def test_families_are_data(self):
        keys = [k for k, _ in COMPANY_KEYWORD_FAMILIES]
        assert keys == ["互联网", "金融", "快消"]
        for key, synonyms in COMPANY_KEYWORD_FAMILIES:
            assert key in synonyms


class TestIsExactMatch:
    def test_direction_and_role(self):
        mentor = Mentor(name="A", direction="金融", position="分析师", company="某银行")
        assert is_exact_match(mentor, "金融", "分析师")

    def test_direction_only(self):
        mentor = Mentor(name="A", direction="金融")
        assert is_exact_match(mentor, "金融", None)

    def test_direction_miss_short_circuits(self):
        mentor = Mentor(name="A", direction="互联网", position="分析师")
        assert not is_exact_match(mentor, "金融", "分析师")
