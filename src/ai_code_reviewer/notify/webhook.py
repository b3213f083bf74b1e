"""
Webhook Notifier

Notifies an external system when a pull request is missing tests.
Delivery is fire-and-forget: failures are logged, never raised.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import requests

from ..models.pr_diff import PRContext
from ..models.review import ExemptionDecision, TestAnalysisResult
from ..models.webhook import (
    AnalysisInfo,
    AuthorInfo,
    ExemptionInfo,
    MetadataInfo,
    PullRequestInfo,
    RepositoryInfo,
    WebhookPayload,
)


logger = logging.getLogger(__name__)


def build_webhook_payload(
    pr: PRContext,
    analysis: TestAnalysisResult,
    exemption: ExemptionDecision,
    action: Optional[str] = None,
    actor: Optional[str] = None,
    event_type: Optional[str] = None,
    now: Optional[datetime] = None,
) -> WebhookPayload:
    """
    Build the missing-tests notification payload.

    Args:
        pr: Pull request context
        analysis: Test analysis of the diff
        exemption: Exemption decision
        action: Triggering event action
        actor: Login that triggered the run
        event_type: Triggering event name
        now: Timestamp override

    Returns:
        WebhookPayload
    """
    timestamp = (now or datetime.now(timezone.utc)).isoformat()

    return WebhookPayload(
        repository=RepositoryInfo(owner=pr.owner, name=pr.repo, full_name=pr.full_name),
        pull_request=PullRequestInfo(
            number=pr.pull_number,
            title=pr.title,
            description=pr.description,
            url=pr.html_url,
            author=AuthorInfo(login=pr.author_login, name=pr.author_name),
        ),
        analysis=AnalysisInfo(
            missing_tests=list(analysis.missing_tests),
            affected_files=list(analysis.affected_files),
            has_tests=analysis.has_tests,
            exemption=ExemptionInfo(is_exempt=exemption.is_exempt, reason=exemption.reason),
        ),
        metadata=MetadataInfo(
            timestamp=timestamp,
            action=action,
            actor=actor,
            event_type=event_type,
        ),
    )


class WebhookNotifier:
    """Posts notification payloads to a configured URL."""

    def __init__(self, url: str, timeout: Optional[int] = None,
                 session: Optional[requests.Session] = None):
        """
        Args:
            url: Webhook URL
            timeout: Optional request timeout in seconds
            session: Optional requests session
        """
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def notify(self, payload: WebhookPayload) -> bool:
        """
        Deliver a payload.

        Returns:
            True if the webhook accepted the request
        """
        try:
            response = self.session.post(
                self.url,
                json=payload.model_dump(),
                headers={'Content-Type': 'application/json'},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error(f"Webhook delivery failed: {e}")
            return False

        if not response.ok:
            logger.error(f"Webhook responded with status {response.status_code}")
            return False

        logger.info("Webhook notification sent")
        return True
