"""Configuration management."""
import logging
import os
from typing import Optional

from shieldseller.rules import DEFAULT_RULES, RuleSet, load_rules


class Config:
    def __init__(self):
        self.OPENAI_KEY: str = os.environ.get("OPENAI_API_KEY", "")
        self.OPENAI_BASE: str = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.OPENAI_MODEL: str = os.environ.get("OPENAI_MODEL", "gpt-4o-mini")
        self.AI_TEMPERATURE: float = float(os.environ.get("AI_TEMPERATURE", "0.3"))
        self.AI_MAX_TOKENS: int = int(os.environ.get("AI_MAX_TOKENS", "2000"))
        self.RULES_PATH: str = os.environ.get("SHIELDSELLER_RULES", "")
        self.LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING").upper()

    @property
    def ai_enabled(self) -> bool:
        return bool(self.OPENAI_KEY)

    def validate(self):
        if not isinstance(logging.getLevelName(self.LOG_LEVEL), int):
            raise ValueError(f"Unknown LOG_LEVEL: {self.LOG_LEVEL}")
        if self.RULES_PATH and not os.path.isfile(self.RULES_PATH):
            raise ValueError(f"SHIELDSELLER_RULES file not found: {self.RULES_PATH}")

    def load_rules(self, path: Optional[str] = None) -> RuleSet:
        """Rules from `path`, else SHIELDSELLER_RULES, else the defaults."""
        path = path or self.RULES_PATH
        if not path:
            return DEFAULT_RULES
        return load_rules(path)


config = Config()
