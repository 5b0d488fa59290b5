# tests/test_fraud_service.py
"""Unit tests for message fraud scoring."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest
from app.services.fraud_service import analyze_message, has_price_inconsistency


class TestAnalyzeMessage:
    def test_ordinary_message_is_low_risk(self):
        result = analyze_message("Is the bike still available? I can come see it Saturday.")
        assert result.risk_score == 0
        assert result.risk_level == "low"
        assert result.flags == []
        assert not result.should_block

    def test_each_matching_pattern_adds_category_weight(self):
        result = analyze_message("Please send money via western union, urgent")
        # two financial patterns (25 each) + one urgency pattern (15)
        assert result.risk_score == 65
        assert result.risk_level == "high"
        assert result.flags == ["financial scams", "urgency pressure"]
        assert "Exercise extreme caution with this message" in result.recommendations

    def test_critical_messages_are_blocked(self):
        result = analyze_message("Wire transfer or bitcoin only, gift card also fine. Urgent!")
        assert result.risk_score >= 80
        assert result.risk_level == "critical"
        assert result.should_block

    def test_medium_band(self):
        result = analyze_message("Text me, it is a quick sale")
        assert result.risk_score == 35
        assert result.risk_level == "medium"

    def test_flag_replaces_only_first_underscore(self):
        result = analyze_message("Priced below market")
        assert result.flags == ["too good_to_be_true"]
        assert result.risk_score == 10

    def test_emotional_manipulation_bonus(self):
        result = analyze_message("Trust me, I am an honest seller")
        assert "emotional manipulation" in result.flags
        assert result.risk_score == 15

    def test_price_inconsistency_bonus(self):
        result = analyze_message("Listed at $9,000 but I'll take $2,500")
        assert "inconsistent information" in result.flags
        assert result.risk_score == 20

    def test_confidence(self):
        assert analyze_message("urgent").confidence == pytest.approx(20.6)
        assert analyze_message("x" * 1000).confidence == 30


@pytest.mark.parametrize("text,expected", [
    ("$100 or $150", False),
    ("$100 or $250", True),
    ("$5,000", False),
    ("no prices here", False),
])
def test_price_inconsistency(text, expected):
    assert has_price_inconsistency(text) is expected
