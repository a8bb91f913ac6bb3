"""
Unit tests for text processing: verse reference extraction and verse formatting.
"""

from app.services.text_processing import (
    clean_markup,
    extract_verse_references,
    format_verse_line,
    format_verse_lines,
    strip_code_fence,
)


class TestExtractVerseReferences:
    """Tests for extract_verse_references()."""

    def test_empty_returns_empty(self) -> None:
        assert extract_verse_references("") == []
        assert extract_verse_references("What does the Bible say about love") == []

    def test_single_reference(self) -> None:
        assert extract_verse_references("John 3:16") == [("John 3:16", "John", "3", "16", None)]

    def test_numbered_book_with_range(self) -> None:
        refs = extract_verse_references("Read 1 Corinthians 13:4-7 today")
        assert refs == [("1 Corinthians 13:4-7", "1 Corinthians", "13", "4", "7")]

    def test_leading_words_are_captured_with_book(self) -> None:
        # Book resolution later looks for the book name at the end of the phrase
        refs = extract_verse_references("show me John 3:16")
        assert len(refs) == 1
        assert refs[0][1] == "show me John"
        assert refs[0][2:] == ("3", "16", None)

    def test_multiple_references_in_order(self) -> None:
        refs = extract_verse_references("John 3:16 and Romans 8:28")
        assert [(r[2], r[3]) for r in refs] == [("3", "16"), ("8", "28")]
        assert refs[0][1] == "John"
        assert refs[1][1].endswith("Romans")


class TestFormatting:
    """Tests for verse line formatting."""

    def test_clean_markup_removes_braces(self) -> None:
        assert clean_markup("And the earth was {without} form") == "And the earth was without form"
        assert clean_markup("") == ""

    def test_format_verse_line(self) -> None:
        doc = {"book": "John", "chapter": 3, "verse": 16, "text": "For God {so} loved the world"}
        assert format_verse_line(doc) == "John 3:16 - For God so loved the world"

    def test_format_verse_line_falls_back_to_abbrev(self) -> None:
        doc = {"abbrev": "jn", "chapter": 3, "verse": 16, "text": "For God so loved the world"}
        assert format_verse_line(doc) == "JN 3:16 - For God so loved the world"

    def test_format_verse_lines_joins_with_blank_line(self) -> None:
        docs = [
            {"book": "Psalms", "chapter": 23, "verse": 1, "text": "The LORD is my shepherd"},
            {"book": "Psalms", "chapter": 23, "verse": 2, "text": "He maketh me to lie down"},
        ]
        assert format_verse_lines(docs) == (
            "Psalms 23:1 - The LORD is my shepherd\n\nPsalms 23:2 - He maketh me to lie down"
        )

    def test_strip_code_fence(self) -> None:
        assert strip_code_fence('```json\n{"topK": 3}\n```') == '{"topK": 3}'
        assert strip_code_fence('  {"topK": 3} ') == '{"topK": 3}'
        assert strip_code_fence("") == ""
