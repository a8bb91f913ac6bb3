"""
Verse text processing: reference extraction and response formatting.

Turns free text like "show me John 3:16 and 1 Corinthians 13:4-7" into
structured references, and turns retrieved verse documents into the
"Book C:V - text" lines shown to users and fed to the LLM.
"""

import re
from typing import Any

# "Book Chapter:Verse" with optional "-EndVerse"; book may carry a 1-3 prefix and several words
_REFERENCE_PATTERN = re.compile(
    r"(?:^|\s)([1-3]?\s*[a-zA-Z]+(?:\s+[a-zA-Z]+)*?)\s+(\d+):(\d+)(?:-(\d+))?(?=\s|$)",
    re.IGNORECASE,
)
_MARKUP_PATTERN = re.compile(r"\{([^}]*)\}")


def extract_verse_references(text: str) -> list[tuple[str, str, str, str, str | None]]:
    """
    Find every explicit verse reference in text.

    Returns (full_match, book, chapter, start_verse, end_verse_or_None) tuples
    in the order they appear.
    """
    if not text:
        return []
    results = []
    for match in _REFERENCE_PATTERN.finditer(text):
        results.append((
            match.group(0).strip(),
            match.group(1).strip(),
            match.group(2),
            match.group(3),
            match.group(4),
        ))
    return results


def clean_markup(text: str) -> str:
    """Strip KJV italics markers: {word} -> word."""
    return _MARKUP_PATTERN.sub(r"\1", text or "")


def format_reference(book: str, chapter: int | str, verse: int | str) -> str:
    return f"{book} {chapter}:{verse}"


def format_verse_line(doc: dict[str, Any]) -> str:
    """One verse document as 'Book C:V - text'. Falls back to the upper-cased abbrev."""
    book_name = doc.get("book") or (doc.get("abbrev") or "").upper()
    return f"{format_reference(book_name, doc.get('chapter'), doc.get('verse'))} - {clean_markup(doc.get('text', ''))}"


def format_verse_lines(documents: list[dict[str, Any]]) -> str:
    """Join verse lines with a blank line between them."""
    return "\n\n".join(format_verse_line(d) for d in documents)


def strip_code_fence(text: str) -> str:
    """Unwrap a reply fenced as ```json ... ``` (models often do this despite instructions)."""
    text = (text or "").strip()
    if text.startswith("```"):
        text = re.sub(r"^```[a-zA-Z]*\s*", "", text)
        text = re.sub(r"\s*```$", "", text)
    return text.strip()
