"""
Test Coverage Heuristics

Decides which changed files require tests, which changed files are tests,
and which required files have no plausible companion test in the diff.
"""

import logging
import posixpath
import re
from typing import Iterable, List

from ..models.pr_diff import DiffFile
from ..models.review import TestAnalysisResult
from .patterns import matches_any


logger = logging.getLogger(__name__)

TEST_PATTERNS = (
    # Generic test locations and names
    "**/test/**",
    "**/tests/**",
    "**/*test*",
    "**/*spec*",
    # Python/Django
    "**/test_*.py",
    "**/*_test.py",
    "**/tests.py",
    "**/conftest.py",
    # JavaScript/TypeScript
    "**/*.test.ts",
    "**/*.test.js",
    "**/*.spec.ts",
    "**/*.spec.js",
    # Other common layouts
    "**/__tests__/**",
    "**/testing/**",
    "**/pytest/**",
    "**/unittest/**",
)

TESTABLE_EXTENSIONS = frozenset({
    '.py',
    '.js',
    '.ts',
    '.jsx',
    '.tsx',
    '.vue',
    '.rb',
    '.php',
    '.java',
    '.go',
    '.cs',
    '.cpp',
    '.rs',
})

# Config, type declarations and framework entrypoints
EXCLUDED_FRAGMENTS = (
    '.config.',
    '.conf.',
    '.d.ts',
    'settings.py',
    'urls.py',
    'wsgi.py',
    'asgi.py',
    'manage.py',
)

DIRECTORY_SUBSTITUTIONS = (
    (re.compile(r'src/'), 'test/'),
    (re.compile(r'src/'), 'tests/'),
    (re.compile(r'app/'), 'tests/'),
)

DJANGO_TEST_MODULE = re.compile(r'(^|/)(?:views|models)(\.[^/.]+)$')


def is_test_path(path: str) -> bool:
    """Check if a path matches one of the test location/naming patterns."""
    return matches_any(path, TEST_PATTERNS, ignore_case=True)


def needs_tests(path: str) -> bool:
    """
    Check if a changed file should be accompanied by tests.

    Test files never need tests. Other files need tests when their
    extension is testable and the path holds no excluded fragment.
    Files without an extension never need tests.
    """
    if not path or is_test_path(path):
        return False

    extension = posixpath.splitext(path)[1]
    if extension not in TESTABLE_EXTENSIONS:
        return False

    return not any(fragment in path for fragment in EXCLUDED_FRAGMENTS)


def is_test_file(path: str) -> bool:
    """
    Check if a changed file counts as evidence of tests.

    Broader than is_test_path: any path containing "test" counts.
    """
    return is_test_path(path) or 'test' in path.lower()


def candidate_test_fragments(path: str) -> List[str]:
    """
    Build the path fragments a companion test of ``path`` would contain.

    Args:
        path: Path of a file that needs tests

    Returns:
        Ordered, de-duplicated list of fragments
    """
    base = re.sub(r'\.[^/.]+$', '', path)
    directory, stem = posixpath.split(base)

    fragments = [
        f"{stem}_test",
        f"test_{stem}",
        f"{stem}.test",
        f"{stem}.spec",
    ]
    fragments.extend(_substitute_directories(base))

    django_match = DJANGO_TEST_MODULE.search(path)
    if django_match:
        django_path = DJANGO_TEST_MODULE.sub(r'\1tests\2', path)
        fragments.append(django_path)
        fragments.extend(_substitute_directories(django_path))

    seen = set()
    unique = []
    for fragment in fragments:
        if fragment and fragment not in seen:
            seen.add(fragment)
            unique.append(fragment)
    return unique


def _substitute_directories(path: str) -> List[str]:
    results = []
    for pattern, replacement in DIRECTORY_SUBSTITUTIONS:
        substituted = pattern.sub(replacement, path, count=1)
        if substituted != path:
            results.append(substituted)
    return results


def find_missing_tests(affected_files: Iterable[str], test_files: Iterable[str]) -> List[str]:
    """
    Find required files with no companion test among the test files.

    A file is covered when any test path contains (case-insensitively) any
    of its candidate fragments.
    """
    lowered_tests = [test_file.lower() for test_file in test_files]
    missing = []

    for path in affected_files:
        fragments = [fragment.lower() for fragment in candidate_test_fragments(path)]
        covered = any(
            fragment in test_file
            for test_file in lowered_tests
            for fragment in fragments
        )
        if not covered:
            missing.append(path)

    return missing


def analyze_tests(files: Iterable[DiffFile]) -> TestAnalysisResult:
    """
    Analyze test coverage signals for a whole diff.

    Args:
        files: Parsed diff files (the full diff, before any exclusion)

    Returns:
        TestAnalysisResult
    """
    paths = [f.to_path for f in files if f.to_path]

    affected_files = [path for path in paths if needs_tests(path)]
    test_files = [path for path in paths if is_test_file(path)]
    missing_tests = find_missing_tests(affected_files, test_files)

    result = TestAnalysisResult(
        has_tests=len(test_files) > 0,
        missing_tests=missing_tests,
        affected_files=affected_files,
        test_files=test_files,
    )

    logger.info(
        f"Test analysis: has_tests={result.has_tests}, "
        f"affected={len(affected_files)}, missing={len(missing_tests)}"
    )
    return result
