"""Listing, violation and risk-analysis records.

Everything here is a plain value object: listings come in, analyses go out,
and nothing holds state between calls.
"""
import json
import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


class Severity(str, Enum):
    CRITICAL = "critical"  # Can lead to immediate suspension
    WARNING = "warning"    # Hurts account health over time
    INFO = "info"          # Best practice


class RiskLevel(str, Enum):
    SAFE = "safe"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Accepted spellings for each ListingData field (camelCase API, CSV headers).
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "product_id": ("product_id", "productId", "id"),
    "title": ("title",),
    "description": ("description",),
    "category": ("category",),
    "price": ("price",),
    "image_url": ("image_url", "imageUrl"),
    "views": ("views",),
    "orders": ("orders",),
    "return_rate": ("return_rate", "returnRate"),
    "rating": ("rating",),
    "review_count": ("review_count", "reviewCount"),
    "shipping_days": ("shipping_days", "shippingDays"),
    "late_shipment_rate": ("late_shipment_rate", "lateShipmentRate"),
}

_FLOAT_FIELDS = ("price", "return_rate", "rating", "late_shipment_rate")
_INT_FIELDS = ("views", "orders", "review_count", "shipping_days")


@dataclass(frozen=True)
class ListingData:
    """A single product listing to score.

    Optional metrics left as None are skipped by the analyzers; they are
    never read as zero.
    """
    product_id: str
    title: str
    description: str
    category: Optional[str] = None
    price: Optional[float] = None
    image_url: Optional[str] = None
    views: Optional[int] = None
    orders: Optional[int] = None
    return_rate: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    shipping_days: Optional[int] = None
    late_shipment_rate: Optional[float] = None

    @classmethod
    def from_dict(cls, record: dict) -> "ListingData":
        """Build a listing from an upload row or API payload.

        Keys may be camelCase or snake_case. Blank optional values count as
        absent; numeric strings are converted.
        """
        normalized = {}
        for name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                if alias in record and record[alias] is not None:
                    value = record[alias]
                    if isinstance(value, str):
                        value = value.strip()
                    normalized[name] = value
                    break

        product_id = normalized.get("product_id", "")
        if product_id == "":
            raise ValueError("Listing is missing 'product_id'")

        kwargs = {
            "product_id": str(product_id),
            "title": str(normalized.get("title", "")),
            "description": str(normalized.get("description", "")),
        }
        for name in ("category", "image_url"):
            value = normalized.get(name, "")
            if value != "":
                kwargs[name] = str(value)
        for name in _FLOAT_FIELDS:
            kwargs[name] = _to_number(name, normalized.get(name), float)
        for name in _INT_FIELDS:
            kwargs[name] = _to_number(name, normalized.get(name), int)
        return cls(**kwargs)


def _to_number(name: str, value, kind):
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        raise ValueError(f"Field '{name}' must be numeric, got {value!r}")
    try:
        number = float(value)
        if not math.isfinite(number):
            raise ValueError
        return int(number) if kind is int else number
    except (TypeError, ValueError, OverflowError):
        raise ValueError(f"Field '{name}' must be numeric, got {value!r}") from None


@dataclass(frozen=True)
class Violation:
    """One detected issue with a listing."""
    type: str
    severity: Severity
    title: str
    description: str
    suggestion: Optional[str] = None

    def __str__(self) -> str:
        icon = {"critical": "🚨", "warning": "⚠️", "info": "ℹ️"}[self.severity.value]
        s = f"{icon} [{self.type}] {self.title}"
        if self.suggestion:
            s += f"\n   → {self.suggestion}"
        return s

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "title": self.title,
            "description": self.description,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class AnalyzerResult:
    """Capped partial score and findings from a single analyzer."""
    score: int
    violations: tuple[Violation, ...] = ()


@dataclass(frozen=True)
class RiskFactors:
    content_risk: int
    performance_risk: int
    compliance_risk: int

    def to_dict(self) -> dict:
        return {
            "content_risk": self.content_risk,
            "performance_risk": self.performance_risk,
            "compliance_risk": self.compliance_risk,
        }


@dataclass(frozen=True)
class RiskAnalysis:
    """Full risk verdict for one listing."""
    risk_score: int
    risk_level: RiskLevel
    violations: tuple[Violation, ...] = field(default_factory=tuple)
    factors: RiskFactors = field(default_factory=lambda: RiskFactors(0, 0, 0))

    @property
    def critical(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.CRITICAL]

    @property
    def warnings(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.WARNING]

    @property
    def infos(self) -> list[Violation]:
        return [v for v in self.violations if v.severity == Severity.INFO]

    @property
    def has_critical(self) -> bool:
        return bool(self.critical)

    def to_dict(self) -> dict:
        return {
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "violations": [v.to_dict() for v in self.violations],
            "factors": self.factors.to_dict(),
        }

    def to_json(self, pretty: bool = True) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)

    def format_report(self) -> str:
        """Format as readable text report."""
        lines = [
            f"🛡️ Risk Score: {self.risk_score}/100 | Level: {self.risk_level.value.upper()}",
            f"Content: {self.factors.content_risk} | "
            f"Performance: {self.factors.performance_risk} | "
            f"Compliance: {self.factors.compliance_risk}",
            f"Critical: {len(self.critical)} | Warnings: {len(self.warnings)} | Info: {len(self.infos)}",
            "",
        ]
        if not self.violations:
            lines.append("✅ No violations detected")
            return "\n".join(lines)
        for v in self.violations:
            lines.append(f"  {v}")
        return "\n".join(lines)
