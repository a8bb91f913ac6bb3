"""
Retrieval: KJV semantic search, exact verse lookup, original-language
cross-reference, and HF rerank.

Responsibility: Query Milvus, shape matches into verse documents, rerank with HF.
"""

import logging
from typing import Any

import httpx

from app.core.books import determine_testament, language_for_testament, verse_id
from app.core.config import (
    GREEK_COLLECTION,
    HEBREW_COLLECTION,
    HF_API_KEY,
    HF_RERANK_MODEL,
    KJV_COLLECTION,
    ORIGINAL_LOOKUP_TOP_K,
    RERANK_API_TIMEOUT,
    RERANK_TOP_K,
)
from app.services.text_processing import format_reference
from app.services.vector_store import embed_text, fetch_vector_by_id, query_vectors

logger = logging.getLogger(__name__)

HF_RERANK_URL = f"https://router.huggingface.co/hf-inference/models/{HF_RERANK_MODEL}"


def to_document(match: dict) -> dict[str, Any]:
    """Shape a vector match into a verse document {id, score, text, abbrev, book, chapter, verse}."""
    meta = match.get("metadata") or {}
    return {
        "id": match.get("id"),
        "score": match.get("score"),
        "text": meta.get("text") or "No text available",
        "abbrev": meta.get("abbrev"),
        "book": meta.get("book"),
        "chapter": meta.get("chapter"),
        "verse": meta.get("verse"),
    }


def search_kjv(query: str, top_k: int = 5) -> list[dict[str, Any]]:
    """Embed query, search the KJV collection, return verse documents best first."""
    logger.info("[retrieval:search_kjv] IN  query=%r top_k=%d", query, top_k)
    if not query or not query.strip():
        return []
    vector = embed_text(query.strip())
    documents = [to_document(m) for m in query_vectors(KJV_COLLECTION, vector, top_k=top_k)]
    logger.info(
        "[retrieval:search_kjv] OUT documents=%d refs=%s",
        len(documents),
        [format_reference(d.get("book"), d.get("chapter"), d.get("verse")) for d in documents[:5]],
    )
    return documents


def fetch_kjv_verse(book: str, chapter: int, verse: int) -> dict[str, Any] | None:
    """Exact-id lookup of one KJV verse. book must be canonical."""
    record_id = verse_id(determine_testament(book), book, chapter, verse)
    match = fetch_vector_by_id(KJV_COLLECTION, record_id)
    logger.info("[retrieval:fetch_kjv_verse] id=%s found=%s", record_id, match is not None)
    return to_document(match) if match else None


def _is_same_verse(meta: dict, book: str, chapter: int, verse: int) -> bool:
    return (
        str(meta.get("book") or "").lower() == book.lower()
        and meta.get("chapter") == chapter
        and meta.get("verse") == verse
    )


def find_original_language_verse(book: str, chapter: int, verse: int) -> dict[str, str] | None:
    """
    Look up the Hebrew (OT) or Greek (NT) text of a verse.

    Exact id first; otherwise a similarity search on "Book C:V" that prefers a
    hit with matching metadata and falls back to the first hit. Returns
    {text, language, testament} or None (also on any provider error).
    """
    testament = determine_testament(book)
    language = language_for_testament(testament)
    collection = HEBREW_COLLECTION if testament == "OT" else GREEK_COLLECTION
    if not collection:
        logger.error("Missing collection setting for %s texts", language)
        return None

    try:
        original = fetch_vector_by_id(collection, verse_id(testament, book, chapter, verse))
        if original is None:
            reference = format_reference(book, chapter, verse)
            results = query_vectors(collection, embed_text(reference), top_k=ORIGINAL_LOOKUP_TOP_K)
            original = next(
                (r for r in results if _is_same_verse(r.get("metadata") or {}, book, chapter, verse)),
                results[0] if results else None,
            )
    except Exception as e:
        logger.warning("Error finding original language verse for %s %d:%d: %s", book, chapter, verse, e)
        return None

    if original is None:
        return None
    return {
        "text": (original.get("metadata") or {}).get("text", ""),
        "language": language,
        "testament": testament,
    }


def _parse_rerank_scores(data: Any) -> list[float] | None:
    """Normalize the shapes the HF router returns into one score per input."""
    def to_score(item) -> float:
        if isinstance(item, (int, float)):
            return float(item)
        if isinstance(item, list) and item:
            return float(item[0]) if isinstance(item[0], (int, float)) else 0.0
        if isinstance(item, dict):
            return float(item.get("score", 0))
        return 0.0

    if isinstance(data, dict) and "scores" in data:
        return [to_score(s) for s in data["scores"]]
    if not isinstance(data, list) or not data:
        return None
    # Router sometimes returns [[s1, s2, ...]]: one element holding all scores
    if len(data) == 1 and isinstance(data[0], list):
        return [to_score(s) for s in data[0]]
    return [to_score(s) for s in data]


def rerank(query: str, documents: list[dict], top_k: int = RERANK_TOP_K) -> list[dict]:
    """
    Rerank verse documents with the HF inference router (bge-reranker-v2-m3).

    Returns the top_k documents by relevance, each with a rerank_score. Without
    an API key or on provider error, returns the first top_k in vector order.
    """
    if not documents or not query or not HF_API_KEY:
        return documents[:top_k]

    inputs = [{"text": query, "text_pair": d.get("text", "")} for d in documents]
    headers = {
        "Authorization": f"Bearer {HF_API_KEY}",
        "Content-Type": "application/json",
    }
    payload = {"inputs": inputs, "options": {"wait_for_model": True}}

    try:
        with httpx.Client(timeout=RERANK_API_TIMEOUT) as client:
            response = client.post(HF_RERANK_URL, json=payload, headers=headers)
        if response.status_code != 200:
            logger.warning("Reranker API error %s: %s", response.status_code, response.text[:200])
            return documents[:top_k]
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("Reranker request failed: %s", e)
        return documents[:top_k]

    scores = _parse_rerank_scores(data)
    if not scores:
        return documents[:top_k]

    scored = sorted(
        ((i, s) for i, s in enumerate(scores) if i < len(documents)),
        key=lambda x: -x[1],
    )
    reranked = [{**documents[i], "rerank_score": s} for i, s in scored[:top_k]]
    logger.info(
        "[retrieval:rerank] OUT reranked=%d refs=%s",
        len(reranked),
        [format_reference(d.get("book"), d.get("chapter"), d.get("verse")) for d in reranked],
    )
    return reranked
