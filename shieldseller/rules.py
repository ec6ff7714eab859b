"""Risk policy data for TikTok Shop listings.

Everything the analyzers weigh lives here:
- Forbidden keywords, suspicious-claim patterns, high-risk categories
- Points per finding and the thresholds that trigger them
- Per-analyzer score ceilings and aggregation weights
- Risk tier boundaries

A RuleSet is frozen. Pass a custom one to any analyzer, or load one from
JSON with load_rules(); DEFAULT_RULES is used otherwise.
"""
import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Union

from shieldseller.models import RiskLevel

_PATTERN_FLAGS = re.IGNORECASE | re.ASCII


# =============================================================================
# Default policy lists
# =============================================================================

FORBIDDEN_KEYWORDS: tuple[str, ...] = (
    # Health claims
    "cure", "treat", "diagnose", "heal", "medical grade",
    "fda approved", "clinically proven", "doctor recommended",
    # Misleading terms
    "guaranteed", "risk-free", "100% effective", "miracle",
    "instant results", "overnight", "revolutionary",
    # Prohibited items
    "weapon", "drug", "prescription", "tobacco", "vape",
    "alcohol", "counterfeit", "replica", "fake",
    # IP violations ("genuine" is only flagged as part of the full phrase)
    "authentic", "original", "genuine brand name", "official",
    # Dangerous products
    "flammable", "toxic", "hazardous", "explosive",
)

RISK_PATTERNS: tuple[str, ...] = (
    r"\b(lose|lost)\s+\d+\s*(lbs?|pounds|kg)\b",       # Weight loss claims
    r"\b(money|income|profit)\s+guarantee",             # Income guarantees
    r"\b(100%|totally|completely)\s+(safe|natural|organic)\b",
    r"\b(before|after)\s+(photo|picture|result)",       # Before/after photos
    r"\bget\s+rich\b",
    r"\b(unlimited|instant)\s+(money|cash|income)",
)

SUSPICIOUS_CATEGORIES: tuple[str, ...] = (
    "health", "supplements", "medicine", "beauty treatments",
    "weight loss", "muscle building", "gambling", "cryptocurrency",
)


# =============================================================================
# Numeric policy
# =============================================================================

@dataclass(frozen=True)
class Weights:
    content: float = 1.2       # Content is most important
    performance: float = 1.0
    compliance: float = 0.8    # Compliance is baseline


@dataclass(frozen=True)
class Ceilings:
    content: int = 60
    performance: int = 40
    compliance: int = 30
    total: int = 100


@dataclass(frozen=True)
class Thresholds:
    title_min_chars: int = 20
    title_max_chars: int = 100
    caps_ratio: float = 0.5
    max_exclamations: int = 3
    return_rate_critical: float = 0.15
    return_rate_warning: float = 0.08
    min_reviews_for_rating: int = 10
    rating_critical: float = 3.5
    rating_warning: float = 4.0
    late_shipment_rate: float = 0.10
    max_shipping_days: int = 7
    min_description_chars: int = 50
    min_price: float = 1.0
    max_price: float = 10000.0


@dataclass(frozen=True)
class Points:
    keyword: int = 15
    pattern: int = 10
    title_length: int = 5
    caps: int = 8
    punctuation: int = 5
    category: int = 12
    return_rate_critical: int = 20
    return_rate_warning: int = 10
    rating_critical: int = 25
    rating_warning: int = 12
    late_shipment: int = 15
    slow_shipping: int = 8
    short_description: int = 10
    low_price: int = 15
    high_price: int = 8
    missing_image: int = 12


# Exclusive upper bound per tier, checked in order; anything above is critical.
RISK_TIERS: tuple[tuple[int, RiskLevel], ...] = (
    (30, RiskLevel.SAFE),
    (50, RiskLevel.LOW),
    (70, RiskLevel.MEDIUM),
    (85, RiskLevel.HIGH),
)


def _compile(patterns) -> tuple[re.Pattern, ...]:
    compiled = []
    for p in patterns:
        try:
            compiled.append(re.compile(p, _PATTERN_FLAGS))
        except re.error as e:
            raise ValueError(f"Invalid risk pattern {p!r}: {e}") from None
    return tuple(compiled)


@dataclass(frozen=True)
class RuleSet:
    """Complete scoring policy."""
    forbidden_keywords: tuple[str, ...] = FORBIDDEN_KEYWORDS
    risk_patterns: tuple[re.Pattern, ...] = field(default_factory=lambda: _compile(RISK_PATTERNS))
    suspicious_categories: tuple[str, ...] = SUSPICIOUS_CATEGORIES
    weights: Weights = field(default_factory=Weights)
    ceilings: Ceilings = field(default_factory=Ceilings)
    thresholds: Thresholds = field(default_factory=Thresholds)
    points: Points = field(default_factory=Points)
    tiers: tuple[tuple[int, RiskLevel], ...] = RISK_TIERS

    @classmethod
    def from_dict(cls, data: dict, base: "RuleSet" = None) -> "RuleSet":
        """Overlay a (partial) rules mapping on top of `base` or the defaults.

        {"forbidden_keywords": [...], "points": {"keyword": 20},
         "tiers": {"safe": 25}}

        Tier bounds are merged by level, so unnamed tiers keep their bounds.
        """
        if not isinstance(data, dict):
            raise ValueError("Rules must be a JSON object")
        base = base or cls()
        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            raise ValueError(f"Unknown rule keys: {', '.join(sorted(unknown))}")

        changes = {}
        for key in ("forbidden_keywords", "suspicious_categories"):
            if key in data:
                changes[key] = tuple(s.lower() for s in _string_list(key, data[key]))
        if "risk_patterns" in data:
            changes["risk_patterns"] = _compile(_string_list("risk_patterns", data["risk_patterns"]))
        for key in ("weights", "ceilings", "thresholds", "points"):
            if key in data:
                changes[key] = _overlay(key, getattr(base, key), data[key])
        if "tiers" in data:
            changes["tiers"] = _parse_tiers(data["tiers"], base.tiers)
        return replace(base, **changes)

    def summary(self) -> str:
        """Human-readable overview of the policy."""
        w, c, t = self.weights, self.ceilings, self.thresholds
        lines = [
            "🛡️ Risk Rules",
            "",
            f"Forbidden keywords: {len(self.forbidden_keywords)} terms (+{self.points.keyword} each)",
            f"Risk patterns: {len(self.risk_patterns)} (+{self.points.pattern} each)",
            f"Suspicious categories: {', '.join(self.suspicious_categories)}",
            "",
            f"Weights: content ×{w.content} | performance ×{w.performance} | compliance ×{w.compliance}",
            f"Ceilings: content {c.content} | performance {c.performance} | "
            f"compliance {c.compliance} | total {c.total}",
            f"Title: {t.title_min_chars}-{t.title_max_chars} chars | "
            f"Description: ≥{t.min_description_chars} chars",
            f"Return rate: warn >{t.return_rate_warning:.0%}, critical >{t.return_rate_critical:.0%}",
            f"Rating (>{t.min_reviews_for_rating} reviews): warn <{t.rating_warning}, "
            f"critical <{t.rating_critical}",
            f"Price: ${t.min_price:g}-${t.max_price:g}",
            "",
            "Tiers: " + " | ".join(f"{level.value} <{bound}" for bound, level in self.tiers)
            + f" | {RiskLevel.CRITICAL.value} otherwise",
        ]
        return "\n".join(lines)


def _string_list(key: str, value) -> list[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be a list of strings")
    return value


def _overlay(key: str, current, overrides):
    if not isinstance(overrides, dict):
        raise ValueError(f"'{key}' must be an object")
    known = {f.name: f.type for f in fields(current)}
    unknown = set(overrides) - set(known)
    if unknown:
        raise ValueError(f"Unknown {key} keys: {', '.join(sorted(unknown))}")
    for name, value in overrides.items():
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError(f"'{key}.{name}' must be a number")
    return replace(current, **overrides)


def _parse_tiers(value, current) -> tuple[tuple[int, RiskLevel], ...]:
    if not isinstance(value, dict):
        raise ValueError("'tiers' must map level names to upper bounds")
    bounds = {level: bound for bound, level in current}
    for name, bound in value.items():
        try:
            level = RiskLevel(name)
        except ValueError:
            raise ValueError(f"Unknown risk level: {name}") from None
        if level == RiskLevel.CRITICAL:
            raise ValueError("'critical' is the open-ended top tier and takes no bound")
        if isinstance(bound, bool) or not isinstance(bound, (int, float)):
            raise ValueError(f"Tier bound for '{name}' must be a number")
        bounds[level] = bound

    tiers = sorted(((bound, level) for level, bound in bounds.items()), key=lambda t: t[0])
    order = list(RiskLevel)
    if [level for _, level in tiers] != sorted((level for _, level in tiers), key=order.index):
        raise ValueError("Tier bounds must increase from safe to high")
    return tuple(tiers)


def load_rules(path: Union[str, Path]) -> RuleSet:
    """Load a rules JSON file on top of the defaults."""
    with open(path, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Rules file {path} is not valid JSON: {e}") from None
    return RuleSet.from_dict(data)


DEFAULT_RULES = RuleSet()
