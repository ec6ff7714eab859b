"""Content risk analyzer.

Scans listing text for:
- Forbidden keywords (health claims, misleading terms, prohibited items, IP, hazards)
- Suspicious claim patterns (weight loss, income guarantees, before/after)
- Title structure (length, capitalization)
- Punctuation spam
- High-risk categories
"""
import re

from shieldseller.models import AnalyzerResult, ListingData, Severity, Violation
from shieldseller.rules import DEFAULT_RULES, RuleSet

_UPPERCASE = re.compile(r"[A-Z]")


def analyze_content(listing: ListingData, rules: RuleSet = DEFAULT_RULES) -> AnalyzerResult:
    """Score the title, description and category of a listing (0 to the content ceiling)."""
    violations: list[Violation] = []
    score = 0
    full_text = f"{listing.title} {listing.description}"
    text_lower = full_text.lower()

    score += _check_keywords(text_lower, rules, violations)
    score += _check_patterns(text_lower, rules, violations)
    score += _check_title(listing.title or "", rules, violations)
    score += _check_punctuation(full_text, rules, violations)
    score += _check_category(listing.category, rules, violations)

    return AnalyzerResult(score=min(score, rules.ceilings.content), violations=tuple(violations))


def _check_keywords(text_lower: str, rules: RuleSet, violations: list[Violation]) -> int:
    score = 0
    for keyword in rules.forbidden_keywords:
        if keyword.lower() not in text_lower:
            continue
        score += rules.points.keyword
        violations.append(Violation(
            type="keyword",
            severity=Severity.CRITICAL,
            title=f'Forbidden keyword detected: "{keyword}"',
            description=(
                f'Your listing contains "{keyword}" which violates TikTok Shop policies. '
                "This can lead to immediate suspension."
            ),
            suggestion=(
                f'Remove "{keyword}" and rephrase using compliant language. '
                "Avoid making absolute claims."
            ),
        ))
    return score


def _check_patterns(text_lower: str, rules: RuleSet, violations: list[Violation]) -> int:
    score = 0
    for pattern in rules.risk_patterns:
        if not pattern.search(text_lower):
            continue
        score += rules.points.pattern
        violations.append(Violation(
            type="pattern",
            severity=Severity.WARNING,
            title="Suspicious claim detected",
            description=(
                "Your listing contains language that may be flagged as misleading "
                "or making unverified claims."
            ),
            suggestion="Rewrite this section using factual, measurable descriptions without guarantees.",
        ))
    return score


def _check_title(title: str, rules: RuleSet, violations: list[Violation]) -> int:
    t = rules.thresholds
    score = 0

    if len(title) < t.title_min_chars:
        score += rules.points.title_length
        violations.append(Violation(
            type="title_length",
            severity=Severity.INFO,
            title="Title too short",
            description=f"Titles under {t.title_min_chars} characters may perform poorly and look spammy.",
            suggestion=f"Expand your title to {t.title_min_chars}-60 characters with descriptive keywords.",
        ))

    if len(title) > t.title_max_chars:
        score += rules.points.title_length
        violations.append(Violation(
            type="title_length",
            severity=Severity.INFO,
            title="Title too long",
            description="Very long titles may be truncated and look unprofessional.",
            suggestion="Shorten your title to 60-80 characters focusing on key features.",
        ))

    if title:
        caps_ratio = len(_UPPERCASE.findall(title)) / len(title)
        if caps_ratio > t.caps_ratio:
            score += rules.points.caps
            violations.append(Violation(
                type="caps",
                severity=Severity.WARNING,
                title="Excessive capitalization",
                description="Too many capital letters can be flagged as spammy or shouting.",
                suggestion="Use normal sentence case with capitals only for proper nouns.",
            ))

    return score


def _check_punctuation(full_text: str, rules: RuleSet, violations: list[Violation]) -> int:
    if full_text.count("!") <= rules.thresholds.max_exclamations:
        return 0
    violations.append(Violation(
        type="punctuation",
        severity=Severity.INFO,
        title="Too many exclamation marks",
        description="Excessive exclamation marks look unprofessional and may trigger spam filters.",
        suggestion="Limit exclamation marks to 1-2 per listing.",
    ))
    return rules.points.punctuation


def _check_category(category, rules: RuleSet, violations: list[Violation]) -> int:
    if not category:
        return 0
    category_lower = category.lower()
    if not any(c.lower() in category_lower for c in rules.suspicious_categories):
        return 0
    violations.append(Violation(
        type="category",
        severity=Severity.WARNING,
        title="High-risk category detected",
        description="This product category is heavily regulated and frequently flagged for violations.",
        suggestion=(
            "Ensure all claims are factual, avoid health/medical language, "
            "and include required warnings."
        ),
    ))
    return rules.points.category
