"""
Query understanding: relevance filter, spelling cleanup, intent parsing,
book-name normalization, and response-preference detection.

Each helper is a single LLM prompt. Failures never reach the caller: every
helper logs and substitutes a safe default so the request can continue.
"""

import json
import logging
from typing import Any

from app.agent import prompts
from app.agent.llm import complete
from app.core.books import canonical_book_name, match_canonical_suffix
from app.core.config import DEFAULT_TOP_K, MAX_INTENT_TOP_K
from app.services.text_processing import strip_code_fence

logger = logging.getLogger(__name__)

DEFAULT_PREFERENCE = {"wants_summary": True, "response_style": "summary"}


def check_relevance(query: str) -> bool:
    """True if the question is about the Bible or faith. Defaults to True when the check fails."""
    try:
        reply = complete(f'"{query}"', system=prompts.RELEVANCE_SYSTEM, max_tokens=5)
    except Exception as e:
        logger.warning("[query:check_relevance] check failed, letting query through: %s", e)
        return True
    relevant = reply.strip().upper() == "YES"
    logger.info("[query:check_relevance] OUT reply=%r relevant=%s", reply, relevant)
    return relevant


def clean_query(query: str) -> str:
    """Fix spelling and grammar without changing intent. Returns the original query on failure."""
    try:
        cleaned = complete(query, system=prompts.CLEANUP_SYSTEM, max_tokens=100).strip()
    except Exception as e:
        logger.warning("[query:clean_query] cleanup failed, using original: %s", e)
        return query
    logger.info("[query:clean_query] IN %r OUT %r", query, cleaned)
    return cleaned or query


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _coerce_specific_verses(raw: Any) -> list[dict[str, Any]]:
    """Keep entries that carry a book, chapter and verse; endVerse is optional."""
    if not isinstance(raw, list):
        return []
    verses = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        book = str(item.get("book") or "").strip()
        chapter = _as_int(item.get("chapter"))
        verse = _as_int(item.get("verse"))
        if not book or chapter is None or verse is None or chapter < 1 or verse < 1:
            continue
        entry: dict[str, Any] = {"book": book, "chapter": chapter, "verse": verse}
        end_verse = _as_int(item.get("endVerse", item.get("end_verse")))
        if end_verse is not None and end_verse >= 1:
            entry["end_verse"] = end_verse
        verses.append(entry)
    return verses


def default_intent(query: str) -> dict[str, Any]:
    return {
        "cleaned_query": query,
        "top_k": DEFAULT_TOP_K,
        "has_specific_verse": False,
        "specific_verses": [],
    }


def parse_intent(query: str) -> dict[str, Any]:
    """
    Ask the LLM for cleaned query, verse count and explicit references.

    topK is clamped to [1, MAX_INTENT_TOP_K]. Any failure (LLM error, non-JSON
    reply) yields the defaults: original query, 5 verses, no references.
    """
    logger.info("[query:parse_intent] IN  query=%r", query)
    try:
        reply = complete(query, system=prompts.INTENT_SYSTEM, max_tokens=150, temperature=0)
        parsed = json.loads(strip_code_fence(reply) or "{}")
    except Exception as e:
        logger.warning("[query:parse_intent] falling back to defaults: %s", e)
        return default_intent(query)
    if not isinstance(parsed, dict):
        return default_intent(query)

    top_k = _as_int(parsed.get("topK")) or DEFAULT_TOP_K
    result = {
        "cleaned_query": str(parsed.get("cleanedQuery") or "").strip() or query,
        "top_k": min(max(top_k, 1), MAX_INTENT_TOP_K),
        "has_specific_verse": bool(parsed.get("hasSpecificVerse")),
        "specific_verses": _coerce_specific_verses(parsed.get("specificVerses")),
    }
    logger.info(
        "[query:parse_intent] OUT top_k=%d has_specific_verse=%s refs=%d",
        result["top_k"], result["has_specific_verse"], len(result["specific_verses"]),
    )
    return result


def normalize_book_name(book_name: str) -> str | None:
    """
    Resolve a possibly misspelled or abbreviated book name to its canonical form.

    Names already in the canon resolve without an LLM call. Returns None when
    the LLM says INVALID; returns the input unchanged when the LLM call fails.
    """
    raw = (book_name or "").strip()
    known = canonical_book_name(raw) or match_canonical_suffix(raw)
    if known:
        return known
    try:
        reply = complete(raw, system=prompts.BOOK_NAME_SYSTEM, max_tokens=50).strip().strip('"')
    except Exception as e:
        logger.warning("[query:normalize_book_name] failed for %r: %s", raw, e)
        return raw
    if not reply or reply.upper() == "INVALID":
        logger.info("[query:normalize_book_name] %r is not a book", raw)
        return None
    normalized = canonical_book_name(reply) or reply
    logger.info("[query:normalize_book_name] IN %r OUT %r", raw, normalized)
    return normalized


def detect_response_preference(query: str) -> dict[str, Any]:
    """VERSE_ONLY / DETAILED / SUMMARY -> {wants_summary, response_style}. Defaults to summary."""
    try:
        reply = complete(query, system=prompts.PREFERENCE_SYSTEM, max_tokens=20).strip()
    except Exception as e:
        logger.warning("[query:detect_response_preference] failed, using summary: %s", e)
        return dict(DEFAULT_PREFERENCE)
    if reply == "VERSE_ONLY":
        return {"wants_summary": False, "response_style": "verse_only"}
    if reply == "DETAILED":
        return {"wants_summary": True, "response_style": "detailed"}
    return dict(DEFAULT_PREFERENCE)
