"""Seller performance risk analyzer.

Evaluates return rate, rating, late shipments and shipping speed. A metric
that is missing from the listing is skipped entirely.
"""
from shieldseller.models import AnalyzerResult, ListingData, Severity, Violation
from shieldseller.rules import DEFAULT_RULES, RuleSet


def analyze_performance(listing: ListingData, rules: RuleSet = DEFAULT_RULES) -> AnalyzerResult:
    """Score performance metrics (0 to the performance ceiling)."""
    t, pts = rules.thresholds, rules.points
    violations: list[Violation] = []
    score = 0

    # Return rate: one band only, worst first
    if listing.return_rate is not None:
        return_pct = f"{listing.return_rate * 100:.1f}%"
        if listing.return_rate > t.return_rate_critical:
            score += pts.return_rate_critical
            violations.append(Violation(
                type="return_rate",
                severity=Severity.CRITICAL,
                title=f"High return rate: {return_pct}",
                description=(
                    f"Return rates above {t.return_rate_critical:.0%} signal product quality "
                    "issues or misleading descriptions."
                ),
                suggestion=(
                    "Review product quality, improve descriptions, and consider removing "
                    "this listing if returns continue."
                ),
            ))
        elif listing.return_rate > t.return_rate_warning:
            score += pts.return_rate_warning
            violations.append(Violation(
                type="return_rate",
                severity=Severity.WARNING,
                title=f"Elevated return rate: {return_pct}",
                description="Return rate is higher than average. Monitor closely.",
                suggestion="Check product descriptions match actual product. Consider adding more photos.",
            ))

    # Rating only counts once there are enough reviews
    if (
        listing.rating is not None
        and listing.review_count is not None
        and listing.review_count > t.min_reviews_for_rating
    ):
        if listing.rating < t.rating_critical:
            score += pts.rating_critical
            violations.append(Violation(
                type="rating",
                severity=Severity.CRITICAL,
                title=f"Low rating: {listing.rating:.1f}/5.0",
                description=(
                    f"Ratings below {t.rating_critical} can trigger account reviews and hurt visibility."
                ),
                suggestion=(
                    "Address customer complaints, improve product quality, "
                    "or consider removing this listing."
                ),
            ))
        elif listing.rating < t.rating_warning:
            score += pts.rating_warning
            violations.append(Violation(
                type="rating",
                severity=Severity.WARNING,
                title=f"Below average rating: {listing.rating:.1f}/5.0",
                description=f"Ratings below {t.rating_warning} may affect account health over time.",
                suggestion=(
                    "Monitor reviews, respond to complaints, and work to improve "
                    "customer satisfaction."
                ),
            ))

    if listing.late_shipment_rate is not None and listing.late_shipment_rate > t.late_shipment_rate:
        score += pts.late_shipment
        violations.append(Violation(
            type="shipping",
            severity=Severity.CRITICAL,
            title=f"High late shipment rate: {listing.late_shipment_rate * 100:.1f}%",
            description=(
                f"Late shipments above {t.late_shipment_rate:.0%} violate TikTok Shop "
                "performance standards."
            ),
            suggestion="Improve fulfillment speed, adjust handling time, or use faster shipping methods.",
        ))

    if listing.shipping_days is not None and listing.shipping_days > t.max_shipping_days:
        score += pts.slow_shipping
        violations.append(Violation(
            type="shipping_time",
            severity=Severity.WARNING,
            title=f"Slow shipping: {listing.shipping_days} days",
            description=(
                f"Shipping times over {t.max_shipping_days} days can lead to customer "
                "complaints and cancellations."
            ),
            suggestion="Consider using faster shipping methods or partnering with fulfillment services.",
        ))

    return AnalyzerResult(score=min(score, rules.ceilings.performance), violations=tuple(violations))
