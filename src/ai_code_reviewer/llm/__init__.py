"""
LLM Review Engine

This module provides the AI backends, prompt construction and the
structured-output parsing used for per-hunk reviews.
"""

from .prompts import PromptBuilder
from .providers import AIProvider, OpenAIProvider, GeminiProvider, create_provider
from .parsing import ParseError, extract_structured_reviews

__all__ = [
    'PromptBuilder',
    'AIProvider',
    'OpenAIProvider',
    'GeminiProvider',
    'create_provider',
    'ParseError',
    'extract_structured_reviews',
]
