"""Tests for the AI rewrite engine (HTTP mocked)."""
import json
from unittest.mock import MagicMock, patch

import pytest
import requests as req_lib
from shieldseller.ai_engine import AIError, _parse_fix, ai_fix, call_ai
from shieldseller.config import config
from shieldseller.models import Severity, Violation


def ok_response(content: str) -> MagicMock:
    resp = MagicMock()
    resp.status_code = 200
    resp.json.return_value = {"choices": [{"message": {"content": content}}]}
    resp.raise_for_status = MagicMock()
    return resp


def http_error(status: int) -> req_lib.exceptions.HTTPError:
    resp = MagicMock()
    resp.status_code = status
    return req_lib.exceptions.HTTPError(response=resp)


@pytest.fixture
def ai_key(monkeypatch):
    monkeypatch.setattr(config, "OPENAI_KEY", "sk-test")


# ── call_ai ─────────────────────────────────────────────────

@patch("shieldseller.ai_engine.time.sleep")
@patch("shieldseller.ai_engine.requests.post")
class TestCallAI:
    def test_success(self, mock_post, mock_sleep):
        mock_post.return_value = ok_response("rewritten")
        assert call_ai("prompt") == "rewritten"
        mock_post.assert_called_once()
        mock_sleep.assert_not_called()

    def test_request_payload(self, mock_post, mock_sleep):
        mock_post.return_value = ok_response("ok")
        call_ai("the prompt", system_msg="be brief")
        url = mock_post.call_args[0][0]
        body = mock_post.call_args[1]["json"]
        assert url.endswith("/chat/completions")
        assert body["model"] == config.OPENAI_MODEL
        assert body["messages"] == [
            {"role": "system", "content": "be brief"},
            {"role": "user", "content": "the prompt"},
        ]

    def test_timeout_retries_then_fails(self, mock_post, mock_sleep):
        mock_post.side_effect = req_lib.exceptions.Timeout("timeout")
        with pytest.raises(AIError, match="failed after 2 retries"):
            call_ai("prompt", retries=2)
        assert mock_post.call_count == 2
        mock_sleep.assert_called_once_with(1)

    def test_recovers_after_transient_error(self, mock_post, mock_sleep):
        mock_post.side_effect = [req_lib.exceptions.ConnectionError("reset"), ok_response("second try")]
        assert call_ai("prompt") == "second try"
        assert mock_post.call_count == 2

    def test_client_error_not_retried(self, mock_post, mock_sleep):
        mock_post.side_effect = http_error(401)
        with pytest.raises(AIError, match="401"):
            call_ai("prompt", retries=3)
        assert mock_post.call_count == 1

    def test_rate_limit_retried(self, mock_post, mock_sleep):
        mock_post.side_effect = [http_error(429), ok_response("done")]
        assert call_ai("prompt") == "done"
        mock_sleep.assert_called_once_with(5)

    def test_server_error_retried(self, mock_post, mock_sleep):
        mock_post.side_effect = http_error(503)
        with pytest.raises(AIError, match="server error"):
            call_ai("prompt", retries=3)
        assert mock_post.call_count == 3
        assert [c.args[0] for c in mock_sleep.call_args_list] == [1, 2]

    def test_no_wait_after_last_attempt(self, mock_post, mock_sleep):
        mock_post.side_effect = http_error(429)
        with pytest.raises(AIError, match="rate limited"):
            call_ai("prompt", retries=1)
        mock_sleep.assert_not_called()

    def test_bad_response_shape(self, mock_post, mock_sleep):
        resp = ok_response("")
        resp.json.return_value = {"error": "nope"}
        mock_post.return_value = resp
        with pytest.raises(AIError, match="Unexpected response shape"):
            call_ai("prompt")


# ── Response parsing ────────────────────────────────────────

class TestParseFix:
    def test_plain_json(self):
        assert _parse_fix('{"title": "T", "description": "D"}') == {"title": "T", "description": "D"}

    def test_json_inside_prose(self):
        content = 'Sure! Here it is:\n```json\n{"title": "T", "description": "D", "changes": []}\n```'
        assert _parse_fix(content)["title"] == "T"

    def test_no_json(self):
        with pytest.raises(AIError, match="Invalid AI response format"):
            _parse_fix("I cannot help with that.")

    def test_broken_json(self):
        with pytest.raises(AIError, match="Invalid AI response JSON"):
            _parse_fix('{"title": "T",')

    def test_missing_fields(self):
        with pytest.raises(AIError, match="missing title/description"):
            _parse_fix('{"title": "T"}')


# ── ai_fix ──────────────────────────────────────────────────

class TestAIFix:
    def test_falls_back_without_key(self, monkeypatch):
        monkeypatch.setattr(config, "OPENAI_KEY", "")
        with patch("shieldseller.ai_engine.call_ai") as mock_call:
            result = ai_fix("Miracle Bottle", "A guaranteed fit.")
        mock_call.assert_not_called()
        assert result.success
        assert result.is_simple_fix
        assert result.title == "effective Bottle"

    @patch("shieldseller.ai_engine.call_ai")
    def test_ai_rewrite(self, mock_call, ai_key):
        mock_call.return_value = json.dumps({
            "title": "Insulated Bottle",
            "description": "Keeps drinks cold.",
            "changes": ["Removed miracle claim"],
        })
        violations = [Violation("keyword", Severity.CRITICAL, 'Forbidden keyword detected: "miracle"', "desc")]
        result = ai_fix("Miracle Bottle", "Cures thirst.", violations)

        assert result.success
        assert not result.is_simple_fix
        assert result.title == "Insulated Bottle"
        assert result.changes == ["Removed miracle claim"]
        assert result.original_title == "Miracle Bottle"
        prompt = mock_call.call_args[0][0]
        assert "Miracle Bottle" in prompt
        assert 'Forbidden keyword detected: "miracle"' in prompt

    @patch("shieldseller.ai_engine.call_ai")
    def test_missing_changes_defaults_empty(self, mock_call, ai_key):
        mock_call.return_value = '{"title": "T", "description": "D"}'
        assert ai_fix("a", "b").changes == []

    @patch("shieldseller.ai_engine.call_ai")
    def test_api_failure_reported(self, mock_call, ai_key):
        mock_call.side_effect = AIError("HTTP 401")
        result = ai_fix("a", "b")
        assert not result.success
        assert result.error == "HTTP 401"
        assert result.summary() == "❌ Fix failed: HTTP 401"

    @patch("shieldseller.ai_engine.call_ai")
    def test_unparseable_reply_reported(self, mock_call, ai_key):
        mock_call.return_value = "no json here"
        result = ai_fix("a", "b")
        assert not result.success
        assert "Invalid AI response format" in result.error
