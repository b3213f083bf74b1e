"""
AI Review Orchestrator

Sends every hunk of every reviewable file to the AI backend and turns the
structured answers into line-anchored review comments.
"""

import logging
from typing import Iterable, List, Sequence

from ..models.pr_diff import DiffFile, Hunk, PRContext
from ..models.review import AIReviewItem, ReviewComment
from ..llm.prompts import PromptBuilder
from ..llm.providers import AIProvider
from .patterns import matches_any


logger = logging.getLogger(__name__)


def filter_excluded_files(files: Iterable[DiffFile], exclude_patterns: Sequence[str]) -> List[DiffFile]:
    """
    Drop files whose destination path matches an exclude glob.

    Args:
        files: Parsed diff files
        exclude_patterns: Glob patterns (empty entries are ignored)

    Returns:
        Files kept for AI review
    """
    patterns = [p for p in exclude_patterns if p]
    kept = []
    for f in files:
        if patterns and matches_any(f.to_path or '', patterns):
            logger.debug(f"Excluded from review: {f.to_path}")
            continue
        kept.append(f)
    return kept


def coerce_line_number(value) -> int:
    """
    Coerce an AI-provided line number to int.

    Integral floats and numeric strings such as "12.0" are accepted.

    Raises:
        ValueError: If the value is not an integral number
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid line number: {value!r}")
    if isinstance(value, int):
        return value

    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        number = float(text)
    if not number.is_integer():
        raise ValueError(f"Invalid line number: {value!r}")
    return int(number)


class ReviewAnalyzer:
    """
    Per-hunk AI review.

    Files are processed in diff order and hunks in file order, one
    provider call per hunk.
    """

    def __init__(self, provider: AIProvider, prompt_builder: PromptBuilder):
        self.provider = provider
        self.prompt_builder = prompt_builder
        self.failed_hunks = 0

    def analyze_code(self, files: Iterable[DiffFile], pr: PRContext) -> List[ReviewComment]:
        """
        Review all hunks of the given files.

        Args:
            files: Files to review (already exclude-filtered)
            pr: Pull request context

        Returns:
            Accumulated review comments
        """
        comments: List[ReviewComment] = []

        for file in files:
            if file.is_deleted:
                continue
            for hunk in file.hunks:
                comments.extend(self.review_hunk(file, hunk, pr))

        logger.info(f"AI review produced {len(comments)} comments ({self.failed_hunks} hunks failed)")
        return comments

    def review_hunk(self, file: DiffFile, hunk: Hunk, pr: PRContext) -> List[ReviewComment]:
        prompt = self.prompt_builder.build_review_prompt(file, hunk, pr)

        try:
            items = self.provider.get_response(prompt)
        except Exception as e:
            # A single hunk must never abort the run
            logger.error(f"AI review failed for {file.to_path} {hunk.header}: {e}")
            items = None

        if items is None:
            self.failed_hunks += 1
            return []

        return self.create_comments(file, items)

    @staticmethod
    def create_comments(file: DiffFile, items: Iterable[AIReviewItem]) -> List[ReviewComment]:
        """Turn review items into comments anchored to the file's new path."""
        if not file.to_path:
            return []

        comments = []
        for item in items:
            try:
                line = coerce_line_number(item.line_number)
            except ValueError:
                logger.warning(f"Dropping comment with non-numeric line {item.line_number!r} in {file.to_path}")
                continue
            comments.append(ReviewComment(path=file.to_path, line=line, body=item.review_comment))
        return comments
