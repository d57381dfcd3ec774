"""
Unit tests for ResponseFormatter.
"""

import pytest

from ranchhand.answering.response_formatter import ResponseFormatter


@pytest.fixture
def formatter():
    return ResponseFormatter()


class TestFormat:

    @pytest.mark.parametrize("raw", ["", None, 42])
    def test_empty_or_non_text(self, formatter, raw):
        assert formatter.format(raw) == ""

    def test_strips_chatter_prefix(self, formatter):
        raw = "Sure! Here is the answer:\nThe fox jumped [1]."
        assert formatter.format(raw) == "The fox jumped [1]."

    def test_keeps_text_when_prefix_is_everything(self, formatter):
        assert formatter.format("Based on the sources,") == "Based on the sources,"

    @pytest.mark.parametrize("raw", [
        "According to the sources [1], the fox is quick.",
        "Based on the sources [2][3]: dogs sleep.",
    ])
    def test_keeps_prefix_that_carries_a_citation(self, formatter, raw):
        assert formatter.format(raw) == raw

    def test_strips_uncited_source_prefix(self, formatter):
        assert formatter.format("According to the sources, the fox is quick [1].") == "the fox is quick [1]."

    def test_normalizes_quotes_and_dashes(self, formatter):
        assert formatter.format("“quoted” — it’s fine") == "\"quoted\" - it's fine"

    def test_drops_control_characters(self, formatter):
        assert formatter.format("a\x00b\x07c\nd") == "abc\nd"

    def test_collapses_blank_lines_and_trailing_space(self, formatter):
        assert formatter.format("one   \n\n\n\ntwo") == "one\n\ntwo"


class TestCitedIndices:

    def test_single_and_grouped(self, formatter):
        text = "Foxes jump [1]. Dogs sleep [2, 3]. Both [1][3]."
        assert formatter.cited_indices(text, 3) == [1, 2, 3]

    def test_out_of_range_ignored(self, formatter):
        assert formatter.cited_indices("See [0] and [4] and [2].", 3) == [2]

    def test_no_citations(self, formatter):
        assert formatter.cited_indices("I do not know.", 5) == []
        assert formatter.cited_indices("", 5) == []
