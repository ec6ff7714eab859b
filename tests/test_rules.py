"""Tests for the rules configuration layer."""
import json

import pytest
from shieldseller.models import ListingData, RiskLevel
from shieldseller.content import analyze_content
from shieldseller.risk import classify_risk_level
from shieldseller.rules import (
    DEFAULT_RULES, FORBIDDEN_KEYWORDS, RISK_PATTERNS, RuleSet, load_rules,
)


class TestDefaults:
    def test_default_policy(self):
        assert DEFAULT_RULES.forbidden_keywords == FORBIDDEN_KEYWORDS
        assert len(DEFAULT_RULES.risk_patterns) == len(RISK_PATTERNS)
        assert DEFAULT_RULES.weights.content == 1.2
        assert DEFAULT_RULES.ceilings.total == 100
        assert DEFAULT_RULES.points.missing_image == 12

    def test_keywords_are_lowercase(self):
        assert all(k == k.lower() for k in FORBIDDEN_KEYWORDS)

    def test_genuine_only_as_phrase(self):
        assert "genuine" not in FORBIDDEN_KEYWORDS
        assert "genuine brand name" in FORBIDDEN_KEYWORDS

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_RULES.weights.content = 5.0

    def test_summary(self):
        text = DEFAULT_RULES.summary()
        assert "🛡️ Risk Rules" in text
        assert f"{len(FORBIDDEN_KEYWORDS)} terms (+15 each)" in text
        assert "safe <30 | low <50 | medium <70 | high <85 | critical otherwise" in text


class TestFromDict:
    def test_partial_overlay(self):
        rules = RuleSet.from_dict({"points": {"keyword": 20}})
        assert rules.points.keyword == 20
        assert rules.points.pattern == 10
        assert rules.forbidden_keywords == FORBIDDEN_KEYWORDS

    def test_overlay_on_base(self):
        base = RuleSet.from_dict({"points": {"keyword": 20}})
        rules = RuleSet.from_dict({"thresholds": {"max_shipping_days": 5}}, base=base)
        assert rules.points.keyword == 20
        assert rules.thresholds.max_shipping_days == 5

    def test_custom_keywords_lowercased(self):
        rules = RuleSet.from_dict({"forbidden_keywords": ["Knockoff"]})
        assert rules.forbidden_keywords == ("knockoff",)
        listing = ListingData(product_id="p", title="KNOCKOFF sneakers for running", description="")
        assert [v.type for v in analyze_content(listing, rules).violations] == ["keyword"]

    def test_custom_patterns(self):
        rules = RuleSet.from_dict({"risk_patterns": [r"\bas seen on tv\b"]})
        listing = ListingData(product_id="p", title="Insulated Water Bottle 32oz", description="As seen on TV")
        assert [v.type for v in analyze_content(listing, rules).violations] == ["pattern"]

    def test_tiers(self):
        rules = RuleSet.from_dict({"tiers": {"high": 90, "safe": 20, "low": 40, "medium": 60}})
        assert rules.tiers == (
            (20, RiskLevel.SAFE), (40, RiskLevel.LOW), (60, RiskLevel.MEDIUM), (90, RiskLevel.HIGH),
        )

    def test_partial_tiers_keep_the_rest(self):
        rules = RuleSet.from_dict({"tiers": {"safe": 25}})
        assert rules.tiers == (
            (25, RiskLevel.SAFE), (50, RiskLevel.LOW), (70, RiskLevel.MEDIUM), (85, RiskLevel.HIGH),
        )
        assert classify_risk_level(40, rules) == RiskLevel.LOW
        assert classify_risk_level(27, rules) == RiskLevel.LOW
        assert classify_risk_level(90, rules) == RiskLevel.CRITICAL

    def test_partial_tiers_on_base(self):
        base = RuleSet.from_dict({"tiers": {"high": 95}})
        rules = RuleSet.from_dict({"tiers": {"low": 45}}, base=base)
        assert rules.tiers == (
            (30, RiskLevel.SAFE), (45, RiskLevel.LOW), (70, RiskLevel.MEDIUM), (95, RiskLevel.HIGH),
        )

    @pytest.mark.parametrize("data,message", [
        ({"tiers": {"safe": 60}}, "must increase from safe to high"),
        ([], "JSON object"),
        ({"bogus": 1}, "Unknown rule keys: bogus"),
        ({"points": {"nope": 1}}, "Unknown points keys"),
        ({"points": {"keyword": "high"}}, "must be a number"),
        ({"weights": {"content": True}}, "must be a number"),
        ({"weights": 1.5}, "must be an object"),
        ({"forbidden_keywords": "fake"}, "list of strings"),
        ({"risk_patterns": ["(unclosed"]}, "Invalid risk pattern"),
        ({"tiers": {"extreme": 95}}, "Unknown risk level"),
        ({"tiers": {"critical": 95}}, "open-ended"),
        ({"tiers": [30, 50]}, "must map level names"),
    ])
    def test_invalid(self, data, message):
        with pytest.raises(ValueError, match=message):
            RuleSet.from_dict(data)


class TestLoadRules:
    def test_load_file(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text(json.dumps({"ceilings": {"content": 50}}), encoding="utf-8")
        rules = load_rules(path)
        assert rules.ceilings.content == 50
        assert rules.ceilings.performance == 40

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "rules.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="not valid JSON"):
            load_rules(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            load_rules(tmp_path / "absent.json")
