"""
Unified Diff Parser

Parses unified diff text returned by GitHub into per-file, per-hunk
change records with resolved line numbers.
"""

import re
import logging
from typing import List, Optional

from ..models.pr_diff import DiffFile, Hunk, ChangeLine


logger = logging.getLogger(__name__)

DEV_NULL = "/dev/null"


class DiffParser:
    """
    Parser for unified diff text.

    Tracks old/new line numbers through each hunk so that every change line
    can be anchored to the line GitHub expects for inline review comments.
    """

    def __init__(self):
        """Initialize diff parser."""
        self.diff_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')
        self.git_header_pattern = re.compile(r'^diff --git a/(.+?) b/(.+)$')
        self.binary_file_pattern = re.compile(r'^Binary files (.+) and (.+) differ$')

    def parse(self, diff_text: Optional[str]) -> List[DiffFile]:
        """
        Parse diff text into structured files.

        Args:
            diff_text: Raw unified diff

        Returns:
            List of DiffFile objects in diff order
        """
        if not diff_text or not diff_text.strip():
            return []

        files: List[DiffFile] = []
        current_file: Optional[DiffFile] = None
        current_hunk: Optional[Hunk] = None
        old_line = new_line = 0
        old_remaining = new_remaining = 0

        # Only '\n' ends a diff line; form feeds and U+2028 are file content
        for line in diff_text.split('\n'):
            if line.endswith('\r'):
                line = line[:-1]

            if current_hunk is not None and (old_remaining > 0 or new_remaining > 0):
                if line.startswith('+'):
                    current_hunk.changes.append(ChangeLine('add', line, new_line=new_line))
                    new_line += 1
                    new_remaining -= 1
                    continue
                if line.startswith('-'):
                    current_hunk.changes.append(ChangeLine('del', line, old_line=old_line))
                    old_line += 1
                    old_remaining -= 1
                    continue
                if line.startswith(' ') or line == '':
                    current_hunk.changes.append(
                        ChangeLine('normal', line or ' ', new_line=new_line, old_line=old_line)
                    )
                    old_line += 1
                    new_line += 1
                    old_remaining -= 1
                    new_remaining -= 1
                    continue
                if line.startswith('\\'):
                    # "\ No newline at end of file"
                    continue
                logger.debug(f"Hunk ended early at line: {line!r}")
                current_hunk = None

            if line.startswith('\\'):
                continue

            git_match = self.git_header_pattern.match(line)
            if git_match:
                current_file = DiffFile(from_path=git_match.group(1), to_path=git_match.group(2))
                files.append(current_file)
                current_hunk = None
                continue

            if line.startswith('--- '):
                if current_file is None or current_file.hunks:
                    # Plain unified diff without a "diff --git" header
                    current_file = DiffFile(from_path=None, to_path=None)
                    files.append(current_file)
                current_file.from_path = self._strip_prefix(line[4:], 'a/')
                continue

            if line.startswith('+++ ') and current_file is not None:
                current_file.to_path = self._strip_prefix(line[4:], 'b/')
                continue

            if current_file is None:
                continue

            if line.startswith('deleted file mode'):
                current_file.to_path = None
                continue

            if line.startswith('new file mode'):
                current_file.from_path = None
                continue

            binary_match = self.binary_file_pattern.match(line)
            if binary_match:
                current_file.is_binary = True
                current_file.from_path = self._strip_prefix(binary_match.group(1), 'a/')
                current_file.to_path = self._strip_prefix(binary_match.group(2), 'b/')
                continue

            header_match = self.diff_header_pattern.match(line)
            if header_match:
                old_start = int(header_match.group(1))
                old_count = int(header_match.group(2) or 1)
                new_start = int(header_match.group(3))
                new_count = int(header_match.group(4) or 1)

                current_hunk = Hunk(
                    header=line,
                    old_start=old_start,
                    old_lines=old_count,
                    new_start=new_start,
                    new_lines=new_count,
                )
                current_file.hunks.append(current_hunk)
                old_line, new_line = old_start, new_start
                old_remaining, new_remaining = old_count, new_count

        logger.debug(f"Parsed {len(files)} files from diff")
        return files

    @staticmethod
    def _strip_prefix(path: str, prefix: str) -> Optional[str]:
        """Normalize a ---/+++ path, mapping /dev/null to None."""
        path = path.split('\t')[0].strip()
        if path.startswith('"') and path.endswith('"'):
            path = path[1:-1]
        if path == DEV_NULL:
            return None
        if path.startswith(prefix):
            return path[len(prefix):]
        return path
