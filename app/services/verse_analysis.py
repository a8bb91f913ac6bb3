"""
Verse analysis: KJV verses cross-referenced with Hebrew/Greek originals and
explained by the LLM.

Topical queries go through vector search; explicitly named verses go through
exact-id lookup. The streaming variant yields events for the SSE route.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Iterator

from app.agent import prompts
from app.agent.llm import complete, complete_stream
from app.core.books import canonical_book_name, determine_testament
from app.core.config import (
    ANALYSIS_MAX_TOKENS,
    EXPLANATION_MAX_TOKENS,
    ORIGINAL_LOOKUP_TOP_K,
    SPECIFIC_VERSE_WORKERS,
)
from app.services.retrieval_service import (
    fetch_kjv_verse,
    find_original_language_verse,
    search_kjv,
)
from app.services.text_processing import format_reference

logger = logging.getLogger(__name__)

ANALYSIS_ERROR_MESSAGE = "An error occurred while analyzing the verses. Please try again."


@dataclass
class VerseResult:
    """A KJV verse with its original-language counterpart, when one was found."""

    id: str
    kjv_text: str
    book: str
    chapter: int
    verse: int
    testament: str
    original_text: str | None = None
    original_language: str | None = None

    @property
    def reference(self) -> str:
        return format_reference(self.book, self.chapter, self.verse)

    def to_formatted(self) -> dict[str, Any]:
        return {
            "reference": self.reference,
            "kjv_text": self.kjv_text,
            "original_text": self.original_text or None,
            "original_language": self.original_language or None,
            "testament": self.testament,
            "book": self.book,
            "chapter": self.chapter,
            "verse": self.verse,
        }


@dataclass
class AnalysisResult:
    query: str
    verses: list[VerseResult] = field(default_factory=list)
    explanation: str = ""
    analysis_type: str | None = None


def _language_label(language: str | None) -> str:
    return "Hebrew" if language == "hebrew" else "Greek"


def _with_original(document: dict[str, Any]) -> VerseResult:
    """Attach the Hebrew/Greek text of the same reference to a KJV document."""
    book = document.get("book") or ""
    chapter, verse = document.get("chapter"), document.get("verse")
    original = find_original_language_verse(book, chapter, verse) if book else None
    return VerseResult(
        id=document.get("id"),
        kjv_text=document.get("text", ""),
        book=book,
        chapter=chapter,
        verse=verse,
        testament=(original or {}).get("testament") or determine_testament(book),
        original_text=(original or {}).get("text"),
        original_language=(original or {}).get("language"),
    )


def find_verses(query: str, top_k: int = 5) -> list[VerseResult]:
    """Vector-search KJV verses and cross-reference each with its original text."""
    logger.info("[analysis:find_verses] searching KJV verses for %r", query)
    documents = search_kjv(query, top_k)
    logger.info("[analysis:find_verses] looking up original language texts for %d verses", len(documents))
    return [_with_original(d) for d in documents]


def format_verses_context(verses: list[VerseResult]) -> str:
    """Verse block for the explanation prompt: reference, KJV, original text."""
    blocks = []
    for v in verses:
        block = f"**{v.reference}**\nKJV: \"{v.kjv_text}\"\n"
        if v.original_text:
            block += f"{_language_label(v.original_language)}: \"{v.original_text}\"\n"
        else:
            block += "Original language text not available.\n"
        blocks.append(block)
    return "\n".join(blocks)


def format_verses_text(verses: list[VerseResult]) -> str:
    """Compact verse block for combined and streamed analysis prompts."""
    parts = []
    for v in verses:
        text = f"{v.reference}: {v.kjv_text}"
        if v.original_text:
            text += f"\n{_language_label(v.original_language)}: {v.original_text}"
        parts.append(text)
    return "\n\n".join(parts)


def _fallback_listing(query: str, verses: list[VerseResult]) -> str:
    listing = "\n\n".join(f"{v.reference} - {v.kjv_text}" for v in verses)
    return f'Here are the relevant verses for "{query}":\n\n{listing}'


def generate_explanation(query: str, verses: list[VerseResult]) -> str:
    """Scholar explanation of the verses. Falls back to a plain listing if the LLM fails."""
    prompt = prompts.EXPLANATION_PROMPT.format(query=query, verses=format_verses_context(verses))
    try:
        explanation = complete(
            prompt,
            system=prompts.SCHOLAR_SYSTEM,
            max_tokens=EXPLANATION_MAX_TOKENS,
            temperature=0.7,
        )
    except Exception as e:
        logger.warning("[analysis:generate_explanation] LLM failed, listing verses: %s", e)
        return _fallback_listing(query, verses)
    return explanation or "Unable to generate explanation."


def analyze_verses(query: str, top_k: int = 5) -> AnalysisResult:
    """Topical analysis: search, cross-reference, explain."""
    verses = find_verses(query, top_k)
    if not verses:
        return AnalysisResult(query=query, explanation="No verses found matching your query.")
    logger.info("[analysis:analyze_verses] generating explanation for %d verses", len(verses))
    return AnalysisResult(query=query, verses=verses, explanation=generate_explanation(query, verses))


def analyze_specific_verse(book: str, chapter: int, verse: int, explain: bool = True) -> AnalysisResult:
    """
    Resolve one named verse. Exact id first, then a similarity search on
    "Book C:V" that prefers a matching hit over the best one.
    """
    book = canonical_book_name(book) or book
    query = format_reference(book, chapter, verse)
    match = fetch_kjv_verse(book, chapter, verse)
    if match is None:
        candidates = search_kjv(query, ORIGINAL_LOOKUP_TOP_K)
        match = next(
            (
                c for c in candidates
                if str(c.get("book") or "").lower() == book.lower()
                and c.get("chapter") == chapter
                and c.get("verse") == verse
            ),
            candidates[0] if candidates else None,
        )
    if match is None:
        return AnalysisResult(query=query, explanation=f"Verse {query} not found.")

    result = _with_original(match)
    explanation = generate_explanation(query, [result]) if explain else ""
    return AnalysisResult(query=query, verses=[result], explanation=explanation)


def expand_references(specific_verses: list[dict[str, Any]]) -> list[tuple[str, int, int]]:
    """Flatten requested references into (book, chapter, verse), expanding endVerse ranges."""
    expanded = []
    for ref in specific_verses:
        start = int(ref["verse"])
        end = ref.get("end_verse")
        end = int(end) if end is not None and int(end) >= start else start
        for v in range(start, end + 1):
            expanded.append((ref["book"], int(ref["chapter"]), v))
    return expanded


def _resolve_specific(specific_verses: list[dict[str, Any]], explain: bool) -> list[AnalysisResult]:
    refs = expand_references(specific_verses)
    if not refs:
        return []
    with ThreadPoolExecutor(max_workers=min(SPECIFIC_VERSE_WORKERS, len(refs))) as pool:
        return list(pool.map(lambda r: analyze_specific_verse(*r, explain=explain), refs))


def analyze_specific_verses(query: str, specific_verses: list[dict[str, Any]]) -> AnalysisResult:
    """
    Analyze explicitly named verses. One verse keeps its own explanation;
    several get one combined explanation.
    """
    single = len(expand_references(specific_verses)) == 1
    results = _resolve_specific(specific_verses, explain=single)
    verses = [v for r in results for v in r.verses]

    if single and results:
        explanation = results[0].explanation
    elif not verses:
        explanation = "\n\n".join(r.explanation for r in results) or "No verses found matching your query."
    else:
        prompt = prompts.COMBINED_PROMPT.format(query=query, verses=format_verses_text(verses))
        try:
            explanation = complete(
                prompt,
                system=prompts.SCHOLAR_SYSTEM,
                max_tokens=ANALYSIS_MAX_TOKENS,
                temperature=0.7,
            ) or "Unable to generate explanation."
        except Exception as e:
            logger.warning("[analysis:analyze_specific_verses] combined explanation failed: %s", e)
            explanation = "\n\n---\n\n".join(
                generate_explanation(r.query, r.verses) if r.verses else r.explanation
                for r in results
            )
    return AnalysisResult(query=query, verses=verses, explanation=explanation, analysis_type="specific_verses")


def stream_analysis(
    query: str, top_k: int, specific_verses: list[dict[str, Any]] | None = None
) -> Iterator[dict[str, Any]]:
    """
    Yield analysis events: status messages, the verse list, explanation deltas,
    and a final complete event. Any failure ends the stream with an error event.
    """
    try:
        yield {"type": "status", "message": "Searching Bible verses..."}
        if specific_verses:
            yield {"type": "status", "message": "Analyzing specific verses..."}
            verses = [v for r in _resolve_specific(specific_verses, explain=False) for v in r.verses]
        else:
            yield {"type": "status", "message": "Finding relevant verses..."}
            verses = find_verses(query, top_k)
        yield {"type": "verses", "verses": [v.to_formatted() for v in verses]}

        if verses:
            yield {"type": "status", "message": "Generating analysis with original languages..."}
            prompt = prompts.STREAM_ANALYSIS_PROMPT.format(query=query, verses=format_verses_text(verses))
            for content in complete_stream(
                prompt,
                system=prompts.SCHOLAR_SYSTEM,
                max_tokens=ANALYSIS_MAX_TOKENS,
                temperature=0.7,
            ):
                yield {"type": "explanation", "content": content}

        yield {"type": "complete"}
    except Exception:
        logger.exception("[analysis:stream_analysis] streaming analysis failed")
        yield {"type": "error", "message": ANALYSIS_ERROR_MESSAGE}
