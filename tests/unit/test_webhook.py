"""
Unit tests for the missing-tests webhook.
"""

from datetime import datetime, timezone
from unittest.mock import Mock

import requests

from ai_code_reviewer.models.pr_diff import PRContext
from ai_code_reviewer.models.review import ExemptionDecision, TestAnalysisResult
from ai_code_reviewer.notify.webhook import WebhookNotifier, build_webhook_payload


PR = PRContext(
    owner="octo", repo="repo", pull_number=12, title="Add parser",
    description="New parser", author_login="alice", author_name="Alice Doe",
)

ANALYSIS = TestAnalysisResult(
    has_tests=False,
    missing_tests=["src/parser.ts"],
    affected_files=["src/parser.ts"],
)


def make_payload():
    return build_webhook_payload(
        PR, ANALYSIS, ExemptionDecision.not_exempt(),
        action="opened", actor="alice", event_type="pull_request",
        now=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
    )


class TestBuildWebhookPayload:
    """Unit tests for payload construction."""

    def test_payload_shape(self):
        data = make_payload().model_dump()

        assert data["repository"] == {"owner": "octo", "name": "repo", "full_name": "octo/repo"}
        assert data["pull_request"]["number"] == 12
        assert data["pull_request"]["url"] == "https://github.com/octo/repo/pull/12"
        assert data["pull_request"]["author"] == {"login": "alice", "name": "Alice Doe"}
        assert data["analysis"] == {
            "missing_tests": ["src/parser.ts"],
            "affected_files": ["src/parser.ts"],
            "has_tests": False,
            "exemption": {"is_exempt": False, "reason": ""},
        }
        assert data["metadata"] == {
            "timestamp": "2024-05-01T12:00:00+00:00",
            "action": "opened",
            "actor": "alice",
            "event_type": "pull_request",
        }

    def test_default_timestamp_is_timezone_aware(self):
        payload = build_webhook_payload(PR, ANALYSIS, ExemptionDecision.not_exempt())
        assert datetime.fromisoformat(payload.metadata.timestamp).tzinfo is not None


class TestWebhookNotifier:
    """Unit tests for WebhookNotifier."""

    def test_posts_json(self):
        session = Mock()
        session.post.return_value = Mock(ok=True, status_code=200)
        notifier = WebhookNotifier("https://hooks.example.com/x", timeout=5, session=session)

        assert notifier.notify(make_payload()) is True

        args, kwargs = session.post.call_args
        assert args[0] == "https://hooks.example.com/x"
        assert kwargs["json"]["repository"]["full_name"] == "octo/repo"
        assert kwargs["timeout"] == 5

    def test_error_status_is_reported(self):
        session = Mock()
        session.post.return_value = Mock(ok=False, status_code=502)

        assert WebhookNotifier("https://x", session=session).notify(make_payload()) is False

    def test_network_error_is_swallowed(self):
        session = Mock()
        session.post.side_effect = requests.Timeout("slow")

        assert WebhookNotifier("https://x", session=session).notify(make_payload()) is False
