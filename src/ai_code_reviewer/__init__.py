"""
AI Code Reviewer

GitHub Pull Request test-coverage check and AI code review bot
"""

__version__ = "1.0.0"

from .api import AICodeReviewer, ReviewDecision, ReviewState

__all__ = ["AICodeReviewer", "ReviewDecision", "ReviewState"]
