"""Risk engine: combines the content, performance and compliance analyzers.

Risk score is 0-100, higher is more dangerous:
- 0-29: safe
- 30-49: low
- 50-69: medium
- 70-84: high
- 85-100: critical
"""
import logging
import math
from typing import Iterable

from shieldseller.compliance import analyze_compliance
from shieldseller.content import analyze_content
from shieldseller.models import ListingData, RiskAnalysis, RiskFactors, RiskLevel
from shieldseller.performance import analyze_performance
from shieldseller.rules import DEFAULT_RULES, RuleSet

logger = logging.getLogger(__name__)

# Shop rollup weight per listing tier
SHOP_TIER_WEIGHTS: dict[RiskLevel, int] = {
    RiskLevel.CRITICAL: 3,
    RiskLevel.HIGH: 2,
}


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (round() would go to even)."""
    return int(math.floor(value + 0.5))


def classify_risk_level(score: float, rules: RuleSet = DEFAULT_RULES) -> RiskLevel:
    for upper, level in rules.tiers:
        if score < upper:
            return level
    return RiskLevel.CRITICAL


def analyze_listing_risk(listing: ListingData, rules: RuleSet = DEFAULT_RULES) -> RiskAnalysis:
    """Perform a complete risk analysis on a listing.

    Args:
        listing: The listing to score.
        rules: Scoring policy; defaults to DEFAULT_RULES.

    Returns:
        RiskAnalysis with the weighted score, tier, all violations
        (content, then performance, then compliance) and the capped
        per-analyzer sub-scores.
    """
    content = analyze_content(listing, rules)
    performance = analyze_performance(listing, rules)
    compliance = analyze_compliance(listing, rules)

    w = rules.weights
    raw = (
        content.score * w.content
        + performance.score * w.performance
        + compliance.score * w.compliance
    )
    risk_score = round_half_up(max(0, min(raw, rules.ceilings.total)))
    risk_level = classify_risk_level(risk_score, rules)

    logger.debug(
        "Scored listing %s: %d (%s) content=%d performance=%d compliance=%d",
        listing.product_id, risk_score, risk_level.value,
        content.score, performance.score, compliance.score,
    )

    return RiskAnalysis(
        risk_score=risk_score,
        risk_level=risk_level,
        violations=content.violations + performance.violations + compliance.violations,
        factors=RiskFactors(
            content_risk=round_half_up(content.score),
            performance_risk=round_half_up(performance.score),
            compliance_risk=round_half_up(compliance.score),
        ),
    )


def average_risk_score(analyses: Iterable[RiskAnalysis]) -> int:
    """Plain mean of listing risk scores; 0 for a shop with no listings."""
    scores = [a.risk_score for a in analyses]
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def calculate_shop_risk(analyses: Iterable[RiskAnalysis]) -> int:
    """Shop-level risk with high and critical listings weighted more heavily."""
    analyses = list(analyses)
    if not analyses:
        return 0
    weights = [SHOP_TIER_WEIGHTS.get(a.risk_level, 1) for a in analyses]
    weighted_sum = sum(a.risk_score * w for a, w in zip(analyses, weights))
    return round_half_up(weighted_sum / sum(weights))
