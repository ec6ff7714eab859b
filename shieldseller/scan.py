"""Shop-wide listing scans.

Feeds each listing through the risk engine independently and rolls the
results up the way the dashboard, rescan and daily-scan jobs need them.
"""
import csv
import io
import json
import logging
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional

from shieldseller.models import ListingData, RiskAnalysis, RiskLevel
from shieldseller.risk import analyze_listing_risk, average_risk_score, calculate_shop_risk
from shieldseller.rules import DEFAULT_RULES, RuleSet

logger = logging.getLogger(__name__)


@dataclass
class ListingScan:
    listing: ListingData
    analysis: RiskAnalysis

    @property
    def product_id(self) -> str:
        return self.listing.product_id


@dataclass
class ScanSummary:
    scans: list[ListingScan] = field(default_factory=list)
    elapsed_ms: int = 0

    @property
    def analyses(self) -> list[RiskAnalysis]:
        return [s.analysis for s in self.scans]

    @property
    def total_violations(self) -> int:
        return sum(len(s.analysis.violations) for s in self.scans)

    @property
    def average_risk_score(self) -> int:
        return average_risk_score(self.analyses)

    @property
    def shop_risk_score(self) -> int:
        return calculate_shop_risk(self.analyses)

    @property
    def level_counts(self) -> dict[RiskLevel, int]:
        counts = Counter(s.analysis.risk_level for s in self.scans)
        return {level: counts.get(level, 0) for level in RiskLevel}

    @property
    def high_risk_count(self) -> int:
        counts = self.level_counts
        return counts[RiskLevel.HIGH] + counts[RiskLevel.CRITICAL]

    @property
    def critical_alerts(self) -> list[ListingScan]:
        """Listings with at least one critical violation."""
        return [s for s in self.scans if s.analysis.has_critical]

    @property
    def flagged(self) -> list[ListingScan]:
        """Listings in the critical tier."""
        return [s for s in self.scans if s.analysis.risk_level == RiskLevel.CRITICAL]

    def summary(self) -> str:
        counts = self.level_counts
        lines = [
            "🛡️ Shop Scan Complete",
            f"   Listings scanned: {len(self.scans)}",
            f"   Average risk: {self.average_risk_score}/100 | Shop risk: {self.shop_risk_score}/100",
            f"   Violations: {self.total_violations}",
            "   Levels: " + " | ".join(f"{level.value} {counts[level]}" for level in RiskLevel),
            f"   🚨 Critical alerts: {len(self.critical_alerts)}",
            f"   ⏱️  Time: {self.elapsed_ms / 1000:.1f}s",
        ]
        return "\n".join(lines)


def parse_listings(json_text: str) -> list[ListingData]:
    """Parse JSON text into listings.

    Accepts an array of objects or {"listings": [...]} / {"products": [...]}
    """
    data = json.loads(json_text)
    if isinstance(data, dict):
        data = data.get("listings", data.get("products"))
    if not isinstance(data, list):
        raise ValueError("JSON must be an array or contain a 'listings' array")

    listings = []
    for i, item in enumerate(data, 1):
        if not isinstance(item, dict):
            raise ValueError(f"Listing #{i}: expected an object")
        try:
            listings.append(ListingData.from_dict(item))
        except ValueError as e:
            raise ValueError(f"Listing #{i}: {e}") from None
    return listings


def scan_listings(
    listings: Iterable[ListingData],
    rules: RuleSet = DEFAULT_RULES,
    on_progress: Optional[Callable[[int, int, str], None]] = None,
    max_items: Optional[int] = None,
) -> ScanSummary:
    """Score every listing in a shop.

    Args:
        listings: Listings to score.
        rules: Scoring policy.
        on_progress: Optional callback(current, total, product_id).
        max_items: Optional cap on how many listings to scan.

    Returns:
        ScanSummary with one ListingScan per listing, in input order.
    """
    listings = list(listings)
    if max_items is not None and len(listings) > max_items:
        logger.info("Scan limited to %d of %d listings", max_items, len(listings))
        listings = listings[:max_items]

    result = ScanSummary()
    start = time.time()
    for i, listing in enumerate(listings):
        if on_progress:
            on_progress(i + 1, len(listings), listing.product_id)
        result.scans.append(ListingScan(listing=listing, analysis=analyze_listing_risk(listing, rules)))

    result.elapsed_ms = int((time.time() - start) * 1000)
    logger.info(
        "Scanned %d listings: avg risk %d, %d violations, %d critical alerts",
        len(result.scans), result.average_risk_score,
        result.total_violations, len(result.critical_alerts),
    )
    return result


def scan_to_csv(result: ScanSummary) -> str:
    """Export scan results to CSV, one row per listing."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["Product ID", "Title", "Risk Score", "Risk Level", "Critical", "Warnings", "Info", "Top Issue"])
    for scan in result.scans:
        a = scan.analysis
        writer.writerow([
            scan.product_id,
            scan.listing.title,
            a.risk_score,
            a.risk_level.value,
            len(a.critical),
            len(a.warnings),
            len(a.infos),
            a.violations[0].title if a.violations else "",
        ])
    return buf.getvalue()


def scan_to_json(result: ScanSummary) -> str:
    """Export scan results to JSON."""
    data = {
        "summary": {
            "total_listings": len(result.scans),
            "average_risk_score": result.average_risk_score,
            "shop_risk_score": result.shop_risk_score,
            "total_violations": result.total_violations,
            "high_risk": result.high_risk_count,
            "critical_alerts": len(result.critical_alerts),
            "levels": {level.value: n for level, n in result.level_counts.items()},
            "elapsed_ms": result.elapsed_ms,
        },
        "listings": [],
    }
    for scan in result.scans:
        entry = {"product_id": scan.product_id, "title": scan.listing.title}
        entry.update(scan.analysis.to_dict())
        data["listings"].append(entry)
    return json.dumps(data, ensure_ascii=False, indent=2)
