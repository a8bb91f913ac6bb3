"""
Unit tests for verse analysis: topical and named-verse analysis, range
expansion and the streamed event sequence. Retrieval and the LLM are mocked.
"""

from unittest.mock import patch

from app.services.verse_analysis import (
    ANALYSIS_ERROR_MESSAGE,
    analyze_specific_verse,
    analyze_specific_verses,
    analyze_verses,
    expand_references,
    generate_explanation,
    stream_analysis,
    VerseResult,
)

MODULE = "app.services.verse_analysis"

KJV = {
    ("John", 3, 16): {"id": "NT-John-3-16", "text": "For God so loved the world", "book": "John", "chapter": 3, "verse": 16},
    ("Romans", 8, 28): {"id": "NT-Romans-8-28", "text": "And we know that all things work together", "book": "Romans", "chapter": 8, "verse": 28},
}


def fake_fetch(book, chapter, verse):
    return KJV.get((book, chapter, verse))


def fake_original(book, chapter, verse):
    return {"text": f"greek {book} {chapter}:{verse}", "language": "greek", "testament": "NT"}


def test_expand_references_handles_ranges() -> None:
    refs = [
        {"book": "Psalms", "chapter": 23, "verse": 1, "end_verse": 3},
        {"book": "John", "chapter": 3, "verse": 16, "end_verse": 2},
        {"book": "Romans", "chapter": 8, "verse": 28},
    ]
    assert expand_references(refs) == [
        ("Psalms", 23, 1), ("Psalms", 23, 2), ("Psalms", 23, 3),
        ("John", 3, 16),
        ("Romans", 8, 28),
    ]


def test_analyze_verses_no_results() -> None:
    with patch(f"{MODULE}.search_kjv", return_value=[]):
        result = analyze_verses("nothing", 5)
    assert result.verses == []
    assert result.explanation == "No verses found matching your query."


def test_analyze_verses_attaches_originals_and_explains() -> None:
    with patch(f"{MODULE}.search_kjv", return_value=[KJV[("John", 3, 16)]]), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete", return_value="Agape love.") as mock_complete:
        result = analyze_verses("love", 5)
    assert result.explanation == "Agape love."
    verse = result.verses[0]
    assert verse.reference == "John 3:16"
    assert verse.original_language == "greek"
    assert verse.original_text == "greek John 3:16"
    assert "greek John 3:16" in mock_complete.call_args[0][0]


def test_generate_explanation_falls_back_to_listing() -> None:
    verses = [VerseResult(id="NT-John-3-16", kjv_text="For God so loved the world", book="John", chapter=3, verse=16, testament="NT")]
    with patch(f"{MODULE}.complete", side_effect=RuntimeError("boom")):
        text = generate_explanation("love", verses)
    assert text == 'Here are the relevant verses for "love":\n\nJohn 3:16 - For God so loved the world'


def test_analyze_specific_verse_not_found() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", return_value=None), \
         patch(f"{MODULE}.search_kjv", return_value=[]):
        result = analyze_specific_verse("John", 99, 1)
    assert result.verses == []
    assert result.explanation == "Verse John 99:1 not found."


def test_analyze_specific_verse_canonicalizes_book() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", side_effect=fake_fetch) as mock_fetch, \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete", return_value="Explained."):
        result = analyze_specific_verse("john", 3, 16)
    mock_fetch.assert_called_once_with("John", 3, 16)
    assert result.query == "John 3:16"
    assert result.explanation == "Explained."


def test_analyze_specific_verses_single_keeps_own_explanation() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", side_effect=fake_fetch), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete", return_value="Single explanation.") as mock_complete:
        result = analyze_specific_verses("Explain John 3:16", [{"book": "John", "chapter": 3, "verse": 16}])
    assert result.analysis_type == "specific_verses"
    assert result.explanation == "Single explanation."
    assert mock_complete.call_count == 1


def test_analyze_specific_verses_combined_in_request_order() -> None:
    refs = [{"book": "Romans", "chapter": 8, "verse": 28}, {"book": "John", "chapter": 3, "verse": 16}]
    with patch(f"{MODULE}.fetch_kjv_verse", side_effect=fake_fetch), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete", return_value="Combined.") as mock_complete:
        result = analyze_specific_verses("Compare these", refs)
    assert [v.reference for v in result.verses] == ["Romans 8:28", "John 3:16"]
    assert result.explanation == "Combined."
    mock_complete.assert_called_once()


def test_analyze_specific_verses_none_found() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", return_value=None), \
         patch(f"{MODULE}.search_kjv", return_value=[]):
        result = analyze_specific_verses("q", [{"book": "John", "chapter": 99, "verse": 1}, {"book": "John", "chapter": 98, "verse": 1}])
    assert result.verses == []
    assert result.explanation == "Verse John 99:1 not found.\n\nVerse John 98:1 not found."


def test_stream_analysis_event_sequence() -> None:
    with patch(f"{MODULE}.search_kjv", return_value=[KJV[("John", 3, 16)]]), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete_stream", return_value=iter(["Part one", " and two"])):
        events = list(stream_analysis("love", 5))
    assert [e["type"] for e in events] == [
        "status", "status", "verses", "status", "explanation", "explanation", "complete",
    ]
    assert events[1]["message"] == "Finding relevant verses..."
    assert events[2]["verses"][0]["kjv_text"] == "For God so loved the world"
    assert "".join(e["content"] for e in events if e["type"] == "explanation") == "Part one and two"


def test_stream_analysis_specific_verses_status() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", side_effect=fake_fetch), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete_stream", return_value=iter(["ok"])), \
         patch(f"{MODULE}.complete") as mock_complete:
        events = list(stream_analysis("John 3:16", 5, [{"book": "John", "chapter": 3, "verse": 16}]))
    assert events[1]["message"] == "Analyzing specific verses..."
    assert events[-1] == {"type": "complete"}
    mock_complete.assert_not_called()


def test_stream_analysis_error_event() -> None:
    with patch(f"{MODULE}.search_kjv", side_effect=RuntimeError("milvus down")):
        events = list(stream_analysis("love", 5))
    assert [e["type"] for e in events] == ["status", "status", "error"]
    assert events[-1]["message"] == ANALYSIS_ERROR_MESSAGE


def test_analyze_specific_verse_similarity_fallback_uses_hit_reference() -> None:
    with patch(f"{MODULE}.fetch_kjv_verse", return_value=None), \
         patch(f"{MODULE}.search_kjv", return_value=[KJV[("John", 3, 16)]]) as mock_search, \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original) as mock_original, \
         patch(f"{MODULE}.complete", return_value="Explained."):
        result = analyze_specific_verse("Genesis", 99, 1)
    assert mock_search.call_args[0][0] == "Genesis 99:1"
    mock_original.assert_called_once_with("John", 3, 16)
    verse = result.verses[0]
    assert verse.reference == "John 3:16"
    assert verse.testament == "NT"
    assert verse.original_text == "greek John 3:16"


def test_analyze_specific_verse_similarity_prefers_matching_hit() -> None:
    other = {"id": "NT-1-John-4-8", "text": "God is love", "book": "1 John", "chapter": 4, "verse": 8}
    with patch(f"{MODULE}.fetch_kjv_verse", return_value=None), \
         patch(f"{MODULE}.search_kjv", return_value=[other, KJV[("Romans", 8, 28)]]), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original):
        result = analyze_specific_verse("romans", 8, 28, explain=False)
    assert result.verses[0].reference == "Romans 8:28"
    assert result.explanation == ""


def test_analyze_specific_verses_combined_failure_joins_individual() -> None:
    refs = [{"book": "Romans", "chapter": 8, "verse": 28}, {"book": "John", "chapter": 3, "verse": 16}]

    def fake_complete(prompt, **kwargs):
        if "Romans 8:28" in prompt and "John 3:16" in prompt:
            raise RuntimeError("combined failed")
        return "About Romans." if "Romans 8:28" in prompt else "About John."

    with patch(f"{MODULE}.fetch_kjv_verse", side_effect=fake_fetch), \
         patch(f"{MODULE}.find_original_language_verse", side_effect=fake_original), \
         patch(f"{MODULE}.complete", side_effect=fake_complete) as mock_complete:
        result = analyze_specific_verses("Compare these", refs)
    assert result.explanation == "About Romans.\n\n---\n\nAbout John."
    assert mock_complete.call_count == 3
