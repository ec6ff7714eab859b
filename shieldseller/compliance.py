"""Baseline compliance checker for product listings.

Validates that a listing is complete enough to pass platform review:
- Description present and long enough
- Price within a believable range
- Product image present
"""
from shieldseller.models import AnalyzerResult, ListingData, Severity, Violation
from shieldseller.rules import DEFAULT_RULES, RuleSet


class ComplianceChecker:
    """Check listings against baseline completeness rules."""

    def __init__(self, rules: RuleSet = DEFAULT_RULES):
        self.rules = rules

    def check(self, listing: ListingData) -> AnalyzerResult:
        violations: list[Violation] = []
        score = 0

        # 1. Description length
        score += self._check_description(listing, violations)

        # 2. Price sanity
        score += self._check_price(listing, violations)

        # 3. Product image
        score += self._check_image(listing, violations)

        return AnalyzerResult(
            score=min(score, self.rules.ceilings.compliance),
            violations=tuple(violations),
        )

    def _check_description(self, listing: ListingData, violations: list[Violation]) -> int:
        min_chars = self.rules.thresholds.min_description_chars
        if listing.description and len(listing.description) >= min_chars:
            return 0
        violations.append(Violation(
            type="missing_info",
            severity=Severity.WARNING,
            title="Description too short",
            description="Detailed descriptions improve conversions and reduce violations.",
            suggestion="Add at least 200 characters describing features, materials, dimensions, and use cases.",
        ))
        return self.rules.points.short_description

    def _check_price(self, listing: ListingData, violations: list[Violation]) -> int:
        if listing.price is None:
            return 0
        t, score = self.rules.thresholds, 0

        if listing.price < t.min_price:
            score += self.rules.points.low_price
            violations.append(Violation(
                type="price",
                severity=Severity.CRITICAL,
                title="Suspiciously low price",
                description=f"Prices under ${t.min_price:g} may be flagged as scams or test listings.",
                suggestion="Set a realistic price that covers costs and appears legitimate.",
            ))

        if listing.price > t.max_price:
            score += self.rules.points.high_price
            violations.append(Violation(
                type="price",
                severity=Severity.WARNING,
                title="Very high price",
                description="Extremely high prices may require additional verification.",
                suggestion="Ensure pricing is accurate. High-value items may need extra documentation.",
            ))

        return score

    def _check_image(self, listing: ListingData, violations: list[Violation]) -> int:
        if listing.image_url:
            return 0
        violations.append(Violation(
            type="missing_image",
            severity=Severity.WARNING,
            title="Missing product image",
            description="Listings without images perform poorly and may be flagged as incomplete.",
            suggestion="Add at least 3-5 high-quality product images.",
        ))
        return self.rules.points.missing_image


def analyze_compliance(listing: ListingData, rules: RuleSet = DEFAULT_RULES) -> AnalyzerResult:
    """Score listing completeness (0 to the compliance ceiling)."""
    return ComplianceChecker(rules).check(listing)
