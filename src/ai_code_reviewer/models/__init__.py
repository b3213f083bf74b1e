"""
Data Models

AI Code Reviewer 시스템의 핵심 데이터 모델들
"""

from .pr_diff import PRContext, DiffFile, Hunk, ChangeLine
from .review import (
    TestAnalysisResult,
    ExemptionDecision,
    ReviewComment,
    AIReviewItem,
    AIReviewResponse,
)
from .webhook import WebhookPayload

__all__ = [
    "PRContext",
    "DiffFile",
    "Hunk",
    "ChangeLine",
    "TestAnalysisResult",
    "ExemptionDecision",
    "ReviewComment",
    "AIReviewItem",
    "AIReviewResponse",
    "WebhookPayload",
]
