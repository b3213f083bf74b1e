"""
Unit tests for GitHubClient.
"""

from datetime import datetime, timedelta
from unittest.mock import Mock, call

import pytest
import requests

from ai_code_reviewer.github.client import (
    DIFF_MEDIA_TYPE,
    GitHubAPIError,
    GitHubClient,
    RateLimitExceeded,
)
from ai_code_reviewer.models.review import ReviewComment


def make_response(status_code=200, data=None, text="", headers=None):
    response = Mock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.json.return_value = data if data is not None else {}
    response.text = text
    response.content = b"x" if data is not None else b""
    response.headers = headers or {}
    return response


@pytest.fixture
def client():
    client = GitHubClient("ghp_test")
    client.session = Mock()
    return client


class TestGitHubClient:
    """Unit tests for GitHubClient."""

    def test_requires_token(self):
        with pytest.raises(ValueError):
            GitHubClient("")

    def test_session_headers(self):
        headers = GitHubClient("ghp_test").session.headers
        assert headers["Authorization"] == "token ghp_test"
        assert headers["Accept"] == "application/vnd.github.v3+json"

    def test_pull_request_context_uses_display_name(self, client):
        client.session.request.side_effect = [
            make_response(data={"title": "Add cache", "body": None, "user": {"login": "alice"}}),
            make_response(data={"login": "alice", "name": "Alice Doe"}),
        ]

        pr = client.get_pull_request_context("octo", "repo", 5)

        assert pr.title == "Add cache"
        assert pr.description == ""
        assert pr.author_login == "alice"
        assert pr.author_name == "Alice Doe"
        assert client.session.request.call_args_list[1][0] == ("GET", "https://api.github.com/users/alice")

    def test_display_name_falls_back_to_login(self, client):
        client.session.request.side_effect = [
            make_response(data={"title": "t", "body": "b", "user": {"login": "bot"}}),
            make_response(data={"login": "bot", "name": None}),
        ]

        assert client.get_pull_request_context("octo", "repo", 5).author_name == "bot"

    def test_pull_request_diff(self, client):
        client.session.request.return_value = make_response(text="diff --git a/x b/x\n")

        assert client.get_pull_request_diff("octo", "repo", 5) == "diff --git a/x b/x\n"
        args, kwargs = client.session.request.call_args
        assert args == ("GET", "https://api.github.com/repos/octo/repo/pulls/5")
        assert kwargs["headers"] == {"Accept": DIFF_MEDIA_TYPE}

    def test_compare_commits_diff(self, client):
        client.session.request.return_value = make_response(text="")

        assert client.compare_commits_diff("octo", "repo", "abc1234567", "def7654321") == ""
        assert client.session.request.call_args[0][1] == (
            "https://api.github.com/repos/octo/repo/compare/abc1234567...def7654321"
        )

    def test_issue_comment(self, client):
        client.session.request.return_value = make_response(201, data={"id": 1})

        client.create_issue_comment("octo", "repo", 5, "hello")

        client.session.request.assert_called_once_with(
            "POST", "https://api.github.com/repos/octo/repo/issues/5/comments",
            json={"body": "hello"}, timeout=None,
        )

    def test_comment_review(self, client):
        client.session.request.return_value = make_response(200, data={"id": 2})
        comments = [ReviewComment("a.py", 3, "Fix this."), ReviewComment("b.py", 9, "And this.")]

        client.create_review("octo", "repo", 5, event="COMMENT", comments=comments)

        payload = client.session.request.call_args[1]["json"]
        assert payload == {
            "event": "COMMENT",
            "comments": [
                {"path": "a.py", "line": 3, "body": "Fix this."},
                {"path": "b.py", "line": 9, "body": "And this."},
            ],
        }

    def test_approve_review(self, client):
        client.session.request.return_value = make_response(200, data={"id": 3})

        client.create_review("octo", "repo", 5, event="APPROVE", body="LGTM! 👍")

        assert client.session.request.call_args[1]["json"] == {"event": "APPROVE", "body": "LGTM! 👍"}

    @pytest.mark.parametrize("event", ["MERGE", "REQUEST_CHANGES"])
    def test_invalid_review_event(self, client, event):
        with pytest.raises(ValueError):
            client.create_review("octo", "repo", 5, event=event)
        client.session.request.assert_not_called()

    def test_api_error(self, client):
        client.session.request.return_value = make_response(404, data={"message": "Not Found"})

        with pytest.raises(GitHubAPIError) as exc_info:
            client.get_pull_request("octo", "repo", 99)

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    def test_network_error(self, client):
        client.session.request.side_effect = requests.ConnectionError("down")

        with pytest.raises(GitHubAPIError):
            client.get_pull_request("octo", "repo", 1)

    def test_rate_limited_response(self, client):
        client.session.request.return_value = make_response(429, headers={"X-RateLimit-Reset": "2000000000"})

        with pytest.raises(RateLimitExceeded):
            client.get_pull_request("octo", "repo", 1)

    def test_rate_limit_tracking(self, client):
        client.session.request.return_value = make_response(
            data={}, headers={"X-RateLimit-Remaining": "3", "X-RateLimit-Reset": "2000000000"},
        )
        client.get_pull_request("octo", "repo", 1)

        assert client.rate_limit_remaining == 3
        assert client.rate_limit_reset == datetime.fromtimestamp(2000000000)

    def test_low_rate_limit_blocks_requests(self, client):
        client.rate_limit_remaining = 5
        client.rate_limit_reset = datetime.now() + timedelta(minutes=5)

        with pytest.raises(RateLimitExceeded):
            client.get_pull_request("octo", "repo", 1)
        client.session.request.assert_not_called()
