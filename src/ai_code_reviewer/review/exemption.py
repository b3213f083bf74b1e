"""
Test Exemption Detection

Detects author-declared test exemptions in the PR description and asks the
AI backend for a short explanation to annotate the approval with.
"""

import logging
from typing import Optional

from ..models.pr_diff import PRContext
from ..models.review import ExemptionDecision
from ..llm.prompts import PromptBuilder, EXEMPTION_FALLBACK_REASON
from ..llm.providers import AIProvider


logger = logging.getLogger(__name__)

EXEMPTION_KEYWORDS = (
    'no tests needed',
    'test exempt',
    'skip tests',
    'sem necessidade de teste',
    'não requer teste',
)


def find_exemption_keyword(description: Optional[str]) -> Optional[str]:
    """Return the first exemption keyword found in the description."""
    text = (description or '').lower()
    for keyword in EXEMPTION_KEYWORDS:
        if keyword.lower() in text:
            return keyword
    return None


def has_exemption(description: Optional[str]) -> bool:
    """Check if the description declares a test exemption."""
    return find_exemption_keyword(description) is not None


class ExemptionDetector:
    """
    Builds the exemption decision for a pull request.

    The decision itself comes from keyword matching only; the AI-generated
    reason is advisory text.
    """

    def __init__(self, prompt_builder: PromptBuilder,
                 provider_factory=None):
        """
        Args:
            prompt_builder: Builder for the explanation prompt
            provider_factory: Zero-argument callable returning an AIProvider,
                called only when an exemption is found
        """
        self.prompt_builder = prompt_builder
        self.provider_factory = provider_factory

    def detect(self, pr: PRContext, explain: bool = True) -> ExemptionDecision:
        """
        Decide whether the PR is exempt from the test requirement.

        Args:
            pr: Pull request context
            explain: Ask the AI backend for an explanation when exempt

        Returns:
            ExemptionDecision
        """
        keyword = find_exemption_keyword(pr.description)
        if keyword is None:
            return ExemptionDecision.not_exempt()

        logger.info(f"Test exemption keyword found: {keyword!r}")
        reason = None
        if explain and self.provider_factory is not None:
            reason = self.explain(self.provider_factory(), pr)

        return ExemptionDecision(
            is_exempt=True,
            reason=reason or EXEMPTION_FALLBACK_REASON,
            matched_keyword=keyword,
        )

    def explain(self, provider: AIProvider, pr: PRContext) -> Optional[str]:
        prompt = self.prompt_builder.build_exemption_prompt(pr)
        try:
            reason = provider.process_reason(prompt, json_mode=False)
        except Exception as e:
            # The explanation is advisory, the exemption still holds
            logger.error(f"Exemption explanation failed: {e}")
            reason = None
        if not reason:
            logger.warning("No exemption explanation generated, using fallback")
        return reason
