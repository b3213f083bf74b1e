"""
Path Glob Matching

Matches repository paths against minimatch-style globs: "**/" spans zero
or more directories, "*" and "?" never cross a "/".
"""

import re
from functools import lru_cache
from typing import Iterable, Pattern


@lru_cache(maxsize=256)
def _compile(pattern: str, ignore_case: bool) -> Pattern:
    parts = []
    i = 0
    n = len(pattern)

    while i < n:
        if pattern.startswith('**/', i):
            parts.append('(?:[^/]*/)*')
            i += 3
        elif pattern.startswith('/**', i) and i + 3 == n:
            parts.append('(?:/.*)?')
            i += 3
        elif pattern.startswith('**', i):
            parts.append('.*')
            i += 2
        elif pattern[i] == '*':
            parts.append('[^/]*')
            i += 1
        elif pattern[i] == '?':
            parts.append('[^/]')
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1

    flags = re.IGNORECASE if ignore_case else 0
    return re.compile(''.join(parts), flags)


def glob_match(path: str, pattern: str, ignore_case: bool = False) -> bool:
    """
    Check if a path matches a glob pattern.

    Args:
        path: Repository-relative path
        pattern: Glob pattern
        ignore_case: Match case-insensitively

    Returns:
        True if the whole path matches
    """
    if not path or not pattern:
        return False
    return _compile(pattern, ignore_case).fullmatch(path) is not None


def matches_any(path: str, patterns: Iterable[str], ignore_case: bool = False) -> bool:
    """Check if a path matches at least one of the patterns."""
    return any(glob_match(path, pattern, ignore_case) for pattern in patterns)
