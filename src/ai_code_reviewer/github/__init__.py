"""
GitHub Integration Layer

This module provides GitHub API integration for PR metadata and diff
retrieval, review posting, diff parsing and event gating.
"""

from .client import GitHubClient, GitHubAPIError, RateLimitExceeded
from .parser import DiffParser
from .events import TriggerEvent, should_process, load_trigger_event

__all__ = [
    'GitHubClient',
    'GitHubAPIError',
    'RateLimitExceeded',
    'DiffParser',
    'TriggerEvent',
    'should_process',
    'load_trigger_event',
]
