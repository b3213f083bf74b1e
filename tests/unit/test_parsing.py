"""
Unit tests for structured review extraction from model output.
"""

import pytest

from ai_code_reviewer.llm.parsing import ParseError, extract_structured_reviews


class TestExtractStructuredReviews:
    """Unit tests for extract_structured_reviews."""

    def test_bare_json(self):
        items = extract_structured_reviews('{"reviews": [{"lineNumber": "12", "reviewComment": "Use a constant."}]}')

        assert len(items) == 1
        assert items[0].line_number == "12"
        assert items[0].review_comment == "Use a constant."

    def test_empty_reviews_means_no_issues(self):
        assert extract_structured_reviews('{"reviews": []}') == []

    def test_numeric_line_number(self):
        items = extract_structured_reviews('{"reviews": [{"lineNumber": 3, "reviewComment": "x"}]}')
        assert items[0].line_number == 3

    def test_code_fenced_json(self):
        text = 'Here is my review:\n```json\n{"reviews": [{"lineNumber": "1", "reviewComment": "Rename."}]}\n```'
        items = extract_structured_reviews(text)

        assert [i.review_comment for i in items] == ["Rename."]

    def test_json_surrounded_by_prose(self):
        text = 'Sure! {"reviews": [{"lineNumber": "4", "reviewComment": "Guard against None."}]} Hope it helps.'
        items = extract_structured_reviews(text)

        assert items[0].line_number == "4"

    @pytest.mark.parametrize("text", [
        "",
        "   ",
        None,
        "no json here",
        "[1, 2, 3]",
        '{"review": []}',
        '{"reviews": "none"}',
        '{"reviews": [{"lineNumber": "1"}]}',
        '{"reviews": [{"lineNumber": "1", "reviewComment": "  "}]}',
        '{"reviews": [',
    ])
    def test_invalid_output_raises_parse_error(self, text):
        with pytest.raises(ParseError):
            extract_structured_reviews(text)
