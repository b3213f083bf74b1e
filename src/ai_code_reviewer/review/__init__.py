"""
Review Decision Logic

This module provides the test-coverage heuristics, exemption detection and
the per-hunk AI review orchestration.
"""

from .coverage import needs_tests, is_test_file, analyze_tests
from .exemption import ExemptionDetector, has_exemption
from .analyzer import ReviewAnalyzer, filter_excluded_files

__all__ = [
    'needs_tests',
    'is_test_file',
    'analyze_tests',
    'ExemptionDetector',
    'has_exemption',
    'ReviewAnalyzer',
    'filter_excluded_files',
]
