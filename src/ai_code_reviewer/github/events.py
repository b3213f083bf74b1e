"""
Event Gate

Normalizes GitHub Actions event payloads and decides whether a trigger
warrants a review run.
"""

import json
import os
import logging
from dataclasses import dataclass
from typing import Dict, Mapping, Optional


logger = logging.getLogger(__name__)

PULL_REQUEST_ACTIONS = frozenset({"opened", "reopened", "synchronize"})
COMMENT_EVENTS = frozenset({"issue_comment", "pull_request_review_comment"})
REVIEW_COMMAND = "/code_review"


@dataclass(frozen=True)
class TriggerEvent:
    """A normalized triggering event."""
    event_name: str
    action: Optional[str]
    owner: Optional[str]
    repo: Optional[str]
    number: Optional[int]
    is_pull_request: bool = False
    comment_body: Optional[str] = None
    before: Optional[str] = None
    after: Optional[str] = None
    actor: Optional[str] = None

    @property
    def is_comment(self) -> bool:
        return self.event_name in COMMENT_EVENTS

    @property
    def is_synchronize(self) -> bool:
        return self.event_name == "pull_request" and self.action == "synchronize"

    @classmethod
    def from_payload(cls, event_name: Optional[str], payload: Dict,
                     actor: Optional[str] = None) -> "TriggerEvent":
        """
        Build a TriggerEvent from a webhook payload.

        Args:
            event_name: GitHub event name; inferred from the payload if empty
            payload: Decoded event payload
            actor: Login that triggered the run

        Returns:
            TriggerEvent
        """
        if not event_name:
            if 'comment' in payload:
                event_name = 'issue_comment'
            elif 'pull_request' in payload:
                event_name = 'pull_request'
            else:
                event_name = 'unknown'

        repository = payload.get('repository') or {}
        owner = (repository.get('owner') or {}).get('login')
        repo = repository.get('name')
        actor = actor or (payload.get('sender') or {}).get('login')

        if event_name in COMMENT_EVENTS:
            issue = payload.get('issue') or payload.get('pull_request') or {}
            is_pull_request = 'pull_request' in issue or event_name == 'pull_request_review_comment'
            return cls(
                event_name=event_name,
                action=payload.get('action'),
                owner=owner,
                repo=repo,
                number=issue.get('number'),
                is_pull_request=is_pull_request,
                comment_body=(payload.get('comment') or {}).get('body'),
                actor=actor,
            )

        pull_request = payload.get('pull_request')
        number = payload.get('number')
        if number is None and pull_request:
            number = pull_request.get('number')

        return cls(
            event_name=event_name,
            action=payload.get('action'),
            owner=owner,
            repo=repo,
            number=number,
            is_pull_request=pull_request is not None,
            before=payload.get('before'),
            after=payload.get('after'),
            actor=actor,
        )


def load_trigger_event(environ: Optional[Mapping[str, str]] = None) -> TriggerEvent:
    """
    Load the triggering event of the current GitHub Actions run.

    Raises:
        FileNotFoundError: If GITHUB_EVENT_PATH does not point to a file
    """
    env = os.environ if environ is None else environ
    event_path = env.get("GITHUB_EVENT_PATH", "")

    with open(event_path, 'r', encoding='utf-8') as f:
        payload = json.load(f)

    return TriggerEvent.from_payload(
        env.get("GITHUB_EVENT_NAME"),
        payload,
        actor=env.get("GITHUB_ACTOR"),
    )


def is_review_command(body: Optional[str]) -> bool:
    """Check if a comment body asks for a review."""
    return bool(body) and body.strip().startswith(REVIEW_COMMAND)


def should_process(event: TriggerEvent) -> bool:
    """
    Decide whether an event warrants a review run.

    Pull request lifecycle events (opened, reopened, synchronize) on a real
    pull request are processed. Comment events are processed only when the
    comment belongs to a pull request and starts with the review command.
    """
    if event.event_name == "pull_request":
        return event.is_pull_request and event.action in PULL_REQUEST_ACTIONS

    if event.is_comment:
        return event.is_pull_request and is_review_command(event.comment_body)

    return False
