"""
Main AI Code Reviewer

Main interface that runs a review from the triggering event to the final
pull request review: event gate, diff retrieval, test analysis, optional
missing-tests warning, per-hunk AI review, and comment or approval.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .config import AppConfig
from .github.client import GitHubClient
from .github.events import TriggerEvent, should_process
from .github.parser import DiffParser
from .llm.prompts import PromptBuilder
from .llm.providers import AIProvider, create_provider
from .models.pr_diff import DiffFile, PRContext
from .models.review import ExemptionDecision, ReviewComment, TestAnalysisResult
from .notify.webhook import WebhookNotifier, build_webhook_payload
from .review.analyzer import ReviewAnalyzer, filter_excluded_files
from .review.coverage import analyze_tests
from .review.exemption import EXEMPTION_KEYWORDS, ExemptionDetector


logger = logging.getLogger(__name__)


class ReviewState(Enum):
    """States of a review run."""
    START = "start"
    GATE_CHECKED = "gate_checked"
    REJECTED = "rejected"
    DIFF_FETCHED = "diff_fetched"
    NO_DIFF = "no_diff"
    TEST_ANALYZED = "test_analyzed"
    WARN_AND_STOP = "warn_and_stop"
    WARN_AND_CONTINUE = "warn_and_continue"
    SKIP_WARN = "skip_warn"
    REVIEWED = "reviewed"
    NO_ISSUES = "no_issues"
    COMMENTS_POSTED = "comments_posted"
    APPROVED = "approved"
    END = "end"


def should_warn(analysis: TestAnalysisResult, exemption: ExemptionDecision) -> bool:
    """Tests are required, absent from the whole diff, and not exempted."""
    return analysis.tests_missing and not exemption.is_exempt


def should_stop_after_warning(analysis: TestAnalysisResult, exemption: ExemptionDecision,
                              evaluate_tests_only: bool) -> bool:
    return evaluate_tests_only and should_warn(analysis, exemption)


def should_run_ai_review(analysis: TestAnalysisResult, evaluate_tests_only: bool) -> bool:
    """AI review is skipped when only tests are evaluated and tests are missing."""
    return not (evaluate_tests_only and analysis.tests_missing)


def should_annotate_exemption(analysis: TestAnalysisResult, exemption: ExemptionDecision) -> bool:
    """The approval carries the exemption explanation."""
    return analysis.tests_missing and exemption.is_exempt


@dataclass
class ReviewDecision:
    """Outcome of a review run."""
    states: List[ReviewState] = field(default_factory=list)
    analysis: Optional[TestAnalysisResult] = None
    exemption: Optional[ExemptionDecision] = None
    warning_posted: bool = False
    webhook_sent: Optional[bool] = None
    comments: List[ReviewComment] = field(default_factory=list)
    review_event: Optional[str] = None
    review_body: Optional[str] = None

    @property
    def final_state(self) -> Optional[ReviewState]:
        """Last state before END."""
        meaningful = [s for s in self.states if s is not ReviewState.END]
        return meaningful[-1] if meaningful else None

    def enter(self, state: ReviewState) -> None:
        logger.debug(f"State: {state.value}")
        self.states.append(state)


class AICodeReviewer:
    """
    AI Code Reviewer interface.

    Runs the complete review process:
    1. Gate the triggering event
    2. Fetch PR context and diff
    3. Analyze test coverage and exemptions, warn when tests are missing
    4. Review each hunk with the configured AI provider
    5. Post inline comments or an approval
    """

    def __init__(
        self,
        config: AppConfig,
        github_client: Optional[GitHubClient] = None,
        provider_factory: Optional[Callable[[], AIProvider]] = None,
        notifier: Optional[WebhookNotifier] = None,
        diff_parser: Optional[DiffParser] = None,
        prompt_builder: Optional[PromptBuilder] = None,
    ):
        """
        Initialize AI Code Reviewer.

        Args:
            config: Run configuration
            github_client: Optional GitHub client (built from config otherwise)
            provider_factory: Optional factory for the AI provider
            notifier: Optional webhook notifier (built from config otherwise)
            diff_parser: Optional diff parser
            prompt_builder: Optional prompt builder
        """
        self.config = config
        self.github_client = github_client or GitHubClient(
            config.github.token,
            base_url=config.github.api_base_url,
            timeout=config.github.timeout_seconds,
        )
        self._provider_factory = provider_factory or (lambda: create_provider(config.ai))
        self._provider: Optional[AIProvider] = None

        if notifier is None and config.webhook.url:
            notifier = WebhookNotifier(config.webhook.url, timeout=config.webhook.timeout_seconds)
        self.notifier = notifier

        self.diff_parser = diff_parser or DiffParser()
        self.prompt_builder = prompt_builder or PromptBuilder(language=config.review.review_language)
        self.exemption_detector = ExemptionDetector(self.prompt_builder, provider_factory=self._get_provider)

    def _get_provider(self) -> AIProvider:
        """Create the AI provider on first use."""
        if self._provider is None:
            self._provider = self._provider_factory()
        return self._provider

    def run(self, event: TriggerEvent) -> ReviewDecision:
        """
        Run the review for a triggering event.

        Args:
            event: Normalized triggering event

        Returns:
            ReviewDecision describing the visited states and side effects

        Raises:
            GitHubAPIError: If the platform cannot be read or written
            ConfigurationError: If the AI provider is needed but misconfigured
        """
        decision = ReviewDecision()
        decision.enter(ReviewState.START)

        if not should_process(event):
            logger.info(f"Ignoring event {event.event_name}/{event.action}")
            decision.enter(ReviewState.REJECTED)
            decision.enter(ReviewState.END)
            return decision
        decision.enter(ReviewState.GATE_CHECKED)

        pr = self.github_client.get_pull_request_context(event.owner, event.repo, event.number)
        logger.info(f"Reviewing {pr.full_name}#{pr.pull_number}: {pr.title}")

        diff = self._fetch_diff(event, pr)
        if not diff or not diff.strip():
            logger.info("No diff found")
            decision.enter(ReviewState.NO_DIFF)
            decision.enter(ReviewState.END)
            return decision

        files = self.diff_parser.parse(diff)
        decision.enter(ReviewState.DIFF_FETCHED)
        logger.info(f"Number of files in diff: {len(files)}")

        analysis = analyze_tests(files)
        evaluate_tests_only = self.config.review.evaluate_tests_only
        explain = analysis.tests_missing and should_run_ai_review(analysis, evaluate_tests_only)
        exemption = self.exemption_detector.detect(pr, explain=explain)
        decision.analysis = analysis
        decision.exemption = exemption
        decision.enter(ReviewState.TEST_ANALYZED)

        if should_warn(analysis, exemption):
            self._post_test_warning(pr, analysis)
            decision.warning_posted = True
            decision.webhook_sent = self._notify_missing_tests(event, pr, analysis, exemption)

            if should_stop_after_warning(analysis, exemption, evaluate_tests_only):
                decision.enter(ReviewState.WARN_AND_STOP)
                decision.enter(ReviewState.END)
                return decision
            decision.enter(ReviewState.WARN_AND_CONTINUE)
        else:
            decision.enter(ReviewState.SKIP_WARN)

        if not should_run_ai_review(analysis, evaluate_tests_only):
            logger.info("Evaluating tests only, AI review skipped")
            decision.enter(ReviewState.END)
            return decision

        comments = self._review_code(files, pr)
        decision.comments = comments
        decision.enter(ReviewState.REVIEWED if comments else ReviewState.NO_ISSUES)

        if comments:
            self.github_client.create_review(
                pr.owner, pr.repo, pr.pull_number, event="COMMENT", comments=comments,
            )
            decision.review_event = "COMMENT"
            decision.enter(ReviewState.COMMENTS_POSTED)
        else:
            reason = exemption.reason if should_annotate_exemption(analysis, exemption) else ""
            body = self.prompt_builder.build_approval_message(reason)
            self.github_client.create_review(
                pr.owner, pr.repo, pr.pull_number, event="APPROVE", body=body,
            )
            decision.review_event = "APPROVE"
            decision.review_body = body
            decision.enter(ReviewState.APPROVED)

        decision.enter(ReviewState.END)
        return decision

    def _fetch_diff(self, event: TriggerEvent, pr: PRContext) -> Optional[str]:
        if event.is_synchronize and event.before and event.after:
            return self.github_client.compare_commits_diff(pr.owner, pr.repo, event.before, event.after)
        return self.github_client.get_pull_request_diff(pr.owner, pr.repo, pr.pull_number)

    def _post_test_warning(self, pr: PRContext, analysis: TestAnalysisResult) -> None:
        body = self.prompt_builder.build_test_warning(analysis.missing_tests, list(EXEMPTION_KEYWORDS))
        self.github_client.create_issue_comment(pr.owner, pr.repo, pr.pull_number, body)

    def _notify_missing_tests(self, event: TriggerEvent, pr: PRContext,
                              analysis: TestAnalysisResult,
                              exemption: ExemptionDecision) -> Optional[bool]:
        if self.notifier is None:
            return None
        payload = build_webhook_payload(
            pr,
            analysis,
            exemption,
            action=event.action,
            actor=event.actor,
            event_type=event.event_name,
        )
        return self.notifier.notify(payload)

    def _review_code(self, files: List[DiffFile], pr: PRContext) -> List[ReviewComment]:
        reviewable = filter_excluded_files(files, self.config.review.exclude_patterns)
        analyzer = ReviewAnalyzer(self._get_provider(), self.prompt_builder)
        return analyzer.analyze_code(reviewable, pr)
