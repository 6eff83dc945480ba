"""
Tests for CSV import/export of flashcards.

Tests cover:
- Header detection and line numbering
- Quoted fields with commas and doubled quotes
- Per-line validation errors
- Export escaping and parse(generate(x)) == x
"""

import pytest

from app.study_sets.csv_parser import CSV_HEADER, MAX_FIELD_LENGTH, FlashcardInput, generate_csv, parse_csv


class TestParseCSV:
    """Test parsing CSV text into flashcards."""

    def test_header_is_skipped(self):
        result = parse_csv("term,definition\nfoo,bar")

        assert result.success is True
        assert result.flashcards == (FlashcardInput(term="foo", definition="bar"),)
        assert result.errors == ()

    def test_without_header_first_line_is_data(self):
        result = parse_csv("France,Paris\nItaly,Rome")

        assert [c.term for c in result.flashcards] == ["France", "Italy"]

    def test_first_line_mentioning_term_is_treated_as_header(self):
        """Header detection is a substring check on the first line."""
        result = parse_csv("Determinism,a philosophical view\nfoo,bar")

        assert result.flashcards == (FlashcardInput(term="foo", definition="bar"),)

    def test_quoted_fields(self):
        result = parse_csv('"hi, there","a ""quoted"" def"')

        assert result.flashcards == (FlashcardInput(term="hi, there", definition='a "quoted" def'),)
        assert result.errors == ()

    def test_empty_term_line_is_reported_and_skipped(self):
        """A bad line is skipped; valid lines before and after still parse."""
        result = parse_csv("a,b\n,d\n")

        assert result.flashcards == (FlashcardInput(term="a", definition="b"),)
        assert result.errors == ("Line 2: Term is empty",)

    def test_empty_definition(self):
        result = parse_csv("foo,   ")

        assert result.success is False
        assert result.errors == ("Line 1: Definition is empty",)

    def test_single_column(self):
        result = parse_csv("just a term")

        assert result.success is False
        assert result.errors == ("Line 1: Expected at least 2 columns (term, definition)",)

    def test_blank_lines_are_not_numbered(self):
        result = parse_csv("term,definition\n\n   \nfoo,bar\n\n,baz")

        assert len(result.flashcards) == 1
        assert result.errors == ("Line 3: Term is empty",)

    def test_crlf_line_endings(self):
        result = parse_csv("foo,bar\r\nbaz,qux\r\n")

        assert result.flashcards == (
            FlashcardInput(term="foo", definition="bar"),
            FlashcardInput(term="baz", definition="qux"),
        )

    def test_values_are_trimmed_and_extra_columns_ignored(self):
        result = parse_csv("  foo  ,  bar  ,extra,columns")

        assert result.flashcards == (FlashcardInput(term="foo", definition="bar"),)

    def test_empty_content(self):
        result = parse_csv("")

        assert result.success is False
        assert result.flashcards == ()
        assert result.errors == ()

    def test_header_only(self):
        result = parse_csv("term,definition\n")

        assert result.success is False
        assert result.errors == ()

    def test_oversize_fields_are_reported_per_line(self):
        content = "\n".join([
            "foo,bar",
            "x" * (MAX_FIELD_LENGTH + 1) + ",baz",
            "qux," + "y" * (MAX_FIELD_LENGTH + 1),
            "a," + "z" * MAX_FIELD_LENGTH,
        ])

        result = parse_csv(content)

        assert [c.term for c in result.flashcards] == ["foo", "a"]
        assert result.errors == (
            f"Line 2: Term exceeds {MAX_FIELD_LENGTH} characters",
            f"Line 3: Definition exceeds {MAX_FIELD_LENGTH} characters",
        )


class TestGenerateCSV:
    """Test exporting flashcards as CSV."""

    def test_empty_export_is_header_only(self):
        assert generate_csv([]) == CSV_HEADER

    def test_special_values_are_quoted(self):
        content = generate_csv([FlashcardInput(term="hi, there", definition='a "quoted" def')])

        assert content == 'term,definition\n"hi, there","a ""quoted"" def"'

    def test_plain_values_are_not_quoted(self):
        content = generate_csv([FlashcardInput(term="France", definition="Paris")])

        assert content == "term,definition\nFrance,Paris"

    @pytest.mark.parametrize(
        "pairs",
        [
            [("France", "Paris")],
            [("hi, there", 'a "quoted" def'), ("x", "y")],
            [("Congo, Republic of", "Brazzaville"), ('"', ","), ("café", "crème brûlée")],
        ],
    )
    def test_export_parses_back_to_same_cards(self, pairs):
        cards = [FlashcardInput(term=t, definition=d) for t, d in pairs]

        result = parse_csv(generate_csv(cards))

        assert list(result.flashcards) == cards
        assert result.errors == ()
