"""Remediation helpers: fix checklists and rule-based listing rewrites."""
import re
from dataclasses import dataclass, field
from typing import Optional

from shieldseller.models import RiskAnalysis, Severity

# Common forbidden phrasing and a compliant replacement
REPLACEMENTS: dict[str, str] = {
    "miracle": "effective",
    "guaranteed": "designed to",
    "cure": "help with",
    "FDA approved": "quality",
    "instant": "quick",
    "100%": "highly",
    "risk-free": "quality",
    "treatment": "support",
    "clinically proven": "tested",
    "doctor": "professional",
}

_SECTIONS = (
    (Severity.CRITICAL, "🚨 CRITICAL (Fix Immediately):"),
    (Severity.WARNING, "⚠️ WARNINGS (Fix Soon):"),
    (Severity.INFO, "ℹ️ IMPROVEMENTS (Optimize):"),
)


@dataclass
class FixResult:
    success: bool
    original_title: str = ""
    original_description: str = ""
    title: str = ""
    description: str = ""
    changes: list[str] = field(default_factory=list)
    is_simple_fix: bool = False
    error: Optional[str] = None

    def summary(self) -> str:
        if not self.success:
            return f"❌ Fix failed: {self.error}"
        kind = "rule-based" if self.is_simple_fix else "AI"
        lines = [f"🛠️ Suggested fix ({kind})", "", f"Title: {self.title}", "", self.description, "", "Changes:"]
        lines.extend(f"  - {c}" for c in self.changes)
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "original": {"title": self.original_title, "description": self.original_description},
            "fixed": {"title": self.title, "description": self.description},
            "changes": self.changes,
            "is_simple_fix": self.is_simple_fix,
            "error": self.error,
        }


def generate_fix_suggestions(analysis: RiskAnalysis) -> str:
    """Numbered fix checklist grouped by severity."""
    if not analysis.violations:
        return "Your listing looks great! No immediate fixes needed."

    lines = ["📋 Recommended Fixes:", ""]
    for severity, header in _SECTIONS:
        group = [v for v in analysis.violations if v.severity == severity]
        if not group:
            continue
        lines.append(header)
        for i, v in enumerate(group, 1):
            lines.append(f"{i}. {v.title}")
            if v.suggestion:
                lines.append(f"   → {v.suggestion}")
            lines.append("")
    return "\n".join(lines)


def _phrase_pattern(phrase: str) -> re.Pattern:
    return re.compile(rf"(?<!\w){re.escape(phrase)}(?!\w)", re.IGNORECASE)


def simple_fix(title: str, description: str) -> FixResult:
    """Rule-based rewrite used when no AI model is configured."""
    fixed_title, fixed_description = title, description
    changes: list[str] = []

    for bad, good in REPLACEMENTS.items():
        pattern = _phrase_pattern(bad)
        if pattern.search(fixed_title):
            fixed_title = pattern.sub(good, fixed_title)
            changes.append(f'Replaced "{bad}" with "{good}" in title')
        if pattern.search(fixed_description):
            fixed_description = pattern.sub(good, fixed_description)
            changes.append(f'Replaced "{bad}" with "{good}" in description')

    if fixed_title == fixed_title.upper() and len(fixed_title) > 10:
        fixed_title = re.sub(r"\b\w", lambda m: m.group().upper(), fixed_title.lower())
        changes.append("Fixed excessive capitalization in title")

    cleaned_title = re.sub(r"\?{2,}", "?", re.sub(r"!{2,}", "!", fixed_title))
    cleaned_description = re.sub(r"\?{2,}", "?", re.sub(r"!{2,}", "!", fixed_description))
    if (cleaned_title, cleaned_description) != (fixed_title, fixed_description):
        fixed_title, fixed_description = cleaned_title, cleaned_description
        changes.append("Cleaned up punctuation")

    return FixResult(
        success=True,
        original_title=title,
        original_description=description,
        title=fixed_title,
        description=fixed_description,
        changes=changes or ["Applied standard compliance improvements"],
        is_simple_fix=True,
    )
