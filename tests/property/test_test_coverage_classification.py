"""
Property-based tests for changed-file classification.

Checks the relationships between test paths, files that need tests, and
the analysis built from them.
"""

from hypothesis import given, strategies as st

from ai_code_reviewer.models.pr_diff import DiffFile
from ai_code_reviewer.review.coverage import (
    TESTABLE_EXTENSIONS,
    analyze_tests,
    is_test_file,
    is_test_path,
    needs_tests,
)


segment = st.text(alphabet="abcdefghijklmnopqrstuvwxyz_", min_size=1, max_size=8)
directories = st.lists(segment, min_size=0, max_size=3)
extensions = st.sampled_from(sorted(TESTABLE_EXTENSIONS) + [".md", ".json", ".txt", ""])


@st.composite
def file_paths(draw):
    parts = draw(directories) + [draw(segment) + draw(extensions)]
    return "/".join(parts)


class TestClassificationProperties:
    """Property tests for is_test_path, needs_tests and is_test_file."""

    @given(path=file_paths())
    def test_test_paths_never_need_tests(self, path):
        """
        Property: A path recognized as a test never requires tests itself.
        """
        if is_test_path(path):
            assert not needs_tests(path)

    @given(path=file_paths())
    def test_test_paths_are_test_files(self, path):
        """
        Property: Every pattern-recognized test path counts as a test file.
        """
        if is_test_path(path):
            assert is_test_file(path)

    @given(path=file_paths())
    def test_classification_ignores_case(self, path):
        """
        Property: Recognition of tests does not depend on letter case.
        """
        assert is_test_path(path) == is_test_path(path.upper())

    @given(name=segment, ext=st.sampled_from(sorted(TESTABLE_EXTENSIONS)))
    def test_test_suffix_is_recognized(self, name, ext):
        """
        Property: <name>.test.<ext> and <name>.spec.<ext> are always tests.
        """
        assert is_test_path(f"src/{name}.test{ext}")
        assert is_test_path(f"src/{name}.spec{ext}")


class TestAnalysisProperties:
    """Property tests for analyze_tests."""

    @given(paths=st.lists(file_paths(), max_size=8))
    def test_analysis_partitions_changed_files(self, paths):
        """
        Property: Affected files are exactly the changed files needing tests,
        and missing tests are a subset of them.
        """
        files = [DiffFile(from_path=p, to_path=p) for p in paths]
        result = analyze_tests(files)

        assert sorted(result.affected_files) == sorted(p for p in paths if needs_tests(p))
        assert set(result.missing_tests) <= set(result.affected_files)
        assert result.has_tests == any(is_test_file(p) for p in paths)

    @given(paths=st.lists(file_paths(), max_size=8))
    def test_nothing_missing_without_affected_files(self, paths):
        """
        Property: A diff with no file needing tests never reports missing tests.
        """
        files = [DiffFile(from_path=p, to_path=p) for p in paths if not needs_tests(p)]
        result = analyze_tests(files)

        assert result.missing_tests == []
        assert not result.tests_missing
