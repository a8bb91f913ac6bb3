"""
Tests for the LangGraph search pipelines. Every LLM and retrieval call is
patched at the graph module, so the compiled graphs run without providers.
"""

from unittest.mock import patch

import pytest

from app.agent.graph import run_search
from app.core.config import NOT_BIBLICAL_MESSAGE

MODULE = "app.agent.graph"

JOHN_3_16 = {"id": "NT-John-3-16", "score": 1.0, "text": "For God so loved the world", "abbrev": "jn", "book": "John", "chapter": 3, "verse": 16}
LOVE_DOCS = [
    {"id": "NT-1-John-4-8", "score": 0.61, "text": "God is love", "abbrev": "1jo", "book": "1 John", "chapter": 4, "verse": 8},
    {"id": "NT-Romans-5-8", "score": 0.58, "text": "But God commendeth his love", "abbrev": "rm", "book": "Romans", "chapter": 5, "verse": 8},
]
SUMMARY = {"wants_summary": True, "response_style": "summary"}


def test_empty_query_raises() -> None:
    with pytest.raises(ValueError):
        run_search("   ")


def test_non_biblical_query_is_rejected() -> None:
    with patch(f"{MODULE}.check_relevance", return_value=False), \
         patch(f"{MODULE}.search_kjv") as mock_search:
        result = run_search("What is the weather in Paris?")
    assert result["ai_response"] == NOT_BIBLICAL_MESSAGE
    assert result["documents"] == []
    assert result["total"] == 0
    mock_search.assert_not_called()


def test_named_verse_uses_exact_lookup() -> None:
    with patch(f"{MODULE}.check_relevance", return_value=True), \
         patch(f"{MODULE}.clean_query", return_value="John 3:16"), \
         patch(f"{MODULE}.detect_response_preference", return_value=SUMMARY), \
         patch(f"{MODULE}.normalize_book_name", return_value="John"), \
         patch(f"{MODULE}.fetch_kjv_verse", return_value=JOHN_3_16) as mock_fetch, \
         patch(f"{MODULE}.search_kjv") as mock_search, \
         patch(f"{MODULE}.complete", return_value="God's love for the world."):
        result = run_search("jon 3:16")
    mock_fetch.assert_called_once_with("John", 3, 16)
    mock_search.assert_not_called()
    assert result["total"] == 1
    assert result["verses"] == "John 3:16 - For God so loved the world"
    assert result["ai_response"] == "John 3:16 - For God so loved the world\n\nSummary:\nGod's love for the world."
    assert result["reranked"] is False


def test_range_fetches_each_verse() -> None:
    with patch(f"{MODULE}.check_relevance", return_value=True), \
         patch(f"{MODULE}.clean_query", return_value="Psalms 23:1-3"), \
         patch(f"{MODULE}.detect_response_preference", return_value={"wants_summary": False, "response_style": "verse_only"}), \
         patch(f"{MODULE}.normalize_book_name", return_value="Psalms"), \
         patch(f"{MODULE}.fetch_kjv_verse", side_effect=lambda b, c, v: {"book": b, "chapter": c, "verse": v, "text": f"v{v}"}):
        result = run_search("psalm 23:1-3")
    assert result["total"] == 3
    assert result["ai_response"] == "Psalms 23:1 - v1\n\nPsalms 23:2 - v2\n\nPsalms 23:3 - v3"


def test_topical_query_falls_back_to_vector_search() -> None:
    with patch(f"{MODULE}.check_relevance", return_value=True), \
         patch(f"{MODULE}.clean_query", return_value="verses about love"), \
         patch(f"{MODULE}.detect_response_preference", return_value={"wants_summary": False, "response_style": "verse_only"}), \
         patch(f"{MODULE}.search_kjv", return_value=LOVE_DOCS) as mock_search, \
         patch(f"{MODULE}.complete") as mock_complete:
        result = run_search("versus about love", top_k=2)
    mock_search.assert_called_once_with("verses about love", 2)
    mock_complete.assert_not_called()
    assert result["ai_response"] == result["verses"]
    assert result["verses"].startswith("1 John 4:8 - God is love")


def test_summary_failure_lists_verses() -> None:
    with patch(f"{MODULE}.check_relevance", return_value=True), \
         patch(f"{MODULE}.clean_query", return_value="verses about love"), \
         patch(f"{MODULE}.detect_response_preference", return_value=SUMMARY), \
         patch(f"{MODULE}.search_kjv", return_value=LOVE_DOCS), \
         patch(f"{MODULE}.complete", side_effect=RuntimeError("boom")):
        result = run_search("love")
    assert result["ai_response"].startswith('Here are some relevant Bible verses about "love":\n\n1 John 4:8')


def test_rerank_pipeline_uses_original_query() -> None:
    reordered = [dict(LOVE_DOCS[1], rerank_score=0.9), dict(LOVE_DOCS[0], rerank_score=0.2)]
    with patch(f"{MODULE}.check_relevance", return_value=True), \
         patch(f"{MODULE}.clean_query", return_value="verses about love"), \
         patch(f"{MODULE}.search_kjv", return_value=LOVE_DOCS) as mock_search, \
         patch(f"{MODULE}.rerank", return_value=reordered) as mock_rerank, \
         patch(f"{MODULE}.fetch_kjv_verse") as mock_fetch, \
         patch(f"{MODULE}.complete", return_value="Love summary."):
        result = run_search("versus about love", top_k=10, with_rerank=True)
    mock_search.assert_called_once_with("verses about love", 10)
    assert mock_rerank.call_args[0][0] == "versus about love"
    mock_fetch.assert_not_called()
    assert result["reranked"] is True
    assert [d["id"] for d in result["documents"]] == ["NT-Romans-5-8", "NT-1-John-4-8"]
    assert result["ai_response"] == "Love summary."
    assert result["verses"].startswith("Romans 5:8 - But God commendeth his love")
