"""AI rewrite engine with retry logic."""
import json
import logging
import re
import time
from typing import Iterable

import requests

from shieldseller.config import config
from shieldseller.fixes import FixResult, simple_fix
from shieldseller.models import Violation

logger = logging.getLogger(__name__)

SYSTEM_MSG = "You are an expert at creating compliant TikTok Shop listings."

FIX_PROMPT = """I have a product listing that has violations. Please rewrite both the title and description to make them 100% compliant while keeping the product information accurate.

ORIGINAL TITLE:
{title}

ORIGINAL DESCRIPTION:
{description}

VIOLATIONS TO FIX:
{violations}

RULES:
1. Remove ALL forbidden keywords (miracle, guaranteed, cure, FDA approved, etc.)
2. Make NO medical claims
3. Make NO guarantees about results
4. Keep the listing informative and accurate
5. Maintain a professional tone
6. Keep title under 100 characters
7. Make description detailed but compliant

Format your response as JSON:
{{
  "title": "new title here",
  "description": "new description here",
  "changes": ["list of key changes made"]
}}"""


class AIError(RuntimeError):
    """The model endpoint failed or returned something unusable."""


def call_ai(prompt: str, system_msg: str = SYSTEM_MSG, retries: int = 3) -> str:
    """Call OpenAI-compatible API with retry logic."""
    headers = {
        "Authorization": f"Bearer {config.OPENAI_KEY}",
        "Content-Type": "application/json",
    }
    data = {
        "model": config.OPENAI_MODEL,
        "messages": [
            {"role": "system", "content": system_msg},
            {"role": "user", "content": prompt},
        ],
        "temperature": config.AI_TEMPERATURE,
        "max_tokens": config.AI_MAX_TOKENS,
    }

    last_err = None
    for attempt in range(retries):
        try:
            r = requests.post(
                f"{config.OPENAI_BASE}/chat/completions",
                headers=headers,
                json=data,
                timeout=90,
            )
            r.raise_for_status()
            return r.json()["choices"][0]["message"]["content"]
        except requests.exceptions.Timeout:
            last_err = "request timed out"
            delay = 2 ** attempt
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else 0
            if status == 429:
                last_err = "rate limited"
                delay = 5 * (attempt + 1)
            elif status >= 500:
                last_err = f"server error ({status})"
                delay = 2 ** attempt
            else:
                raise AIError(f"HTTP {status}") from e
        except requests.exceptions.RequestException as e:
            last_err = str(e)
            delay = 2 ** attempt
        except (KeyError, IndexError, ValueError) as e:
            raise AIError(f"Unexpected response shape: {e}") from e
        logger.warning("AI call attempt %d/%d failed: %s", attempt + 1, retries, last_err)
        if attempt < retries - 1:
            time.sleep(delay)

    raise AIError(f"failed after {retries} retries: {last_err}")


def _parse_fix(content: str) -> dict:
    match = re.search(r"\{[\s\S]*\}", content)
    if not match:
        raise AIError("Invalid AI response format")
    try:
        result = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AIError(f"Invalid AI response JSON: {e}") from e
    if not isinstance(result, dict) or "title" not in result or "description" not in result:
        raise AIError("AI response is missing title/description")
    return result


def ai_fix(title: str, description: str, violations: Iterable[Violation] = (), retries: int = 3) -> FixResult:
    """Rewrite a listing with the configured model.

    Falls back to the rule-based simple_fix() when no API key is set.
    API and parse failures come back as an unsuccessful FixResult.
    """
    if not config.ai_enabled:
        logger.info("OPENAI_API_KEY not set, using rule-based fix")
        return simple_fix(title, description)

    violation_lines = "\n".join(f"- {v.title}: {v.description}" for v in violations) or "- (none listed)"
    prompt = FIX_PROMPT.format(title=title, description=description, violations=violation_lines)
    try:
        result = _parse_fix(call_ai(prompt, retries=retries))
    except AIError as e:
        logger.error("AI fix failed: %s", e)
        return FixResult(
            success=False,
            original_title=title,
            original_description=description,
            error=str(e),
        )

    changes = result.get("changes") or []
    if not isinstance(changes, list):
        changes = [str(changes)]
    return FixResult(
        success=True,
        original_title=title,
        original_description=description,
        title=str(result["title"]),
        description=str(result["description"]),
        changes=[str(c) for c in changes],
    )
