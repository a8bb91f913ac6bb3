"""
Unit tests for the Milvus vector store wrapper with a mocked client.
"""

from unittest.mock import MagicMock, patch

from app.services.vector_store import (
    ensure_collection,
    fetch_vector_by_id,
    get_collection_stats,
    query_vectors,
    upsert_vectors,
)

CLIENT = "app.services.vector_store.get_milvus_client"


def test_ensure_collection_creates_string_keyed_cosine() -> None:
    client = MagicMock()
    client.has_collection.return_value = False
    with patch(CLIENT, return_value=client):
        assert ensure_collection("kjv", 1536) is True
    kwargs = client.create_collection.call_args.kwargs
    assert kwargs["collection_name"] == "kjv"
    assert kwargs["dimension"] == 1536
    assert kwargs["id_type"] == "string"
    assert kwargs["metric_type"] == "COSINE"


def test_ensure_collection_rejects_dimension_mismatch() -> None:
    client = MagicMock()
    client.has_collection.return_value = True
    client.describe_collection.return_value = {"fields": [{"name": "id"}, {"name": "vector", "params": {"dim": 768}}]}
    with patch(CLIENT, return_value=client):
        assert ensure_collection("kjv", 1536) is False
        assert ensure_collection("kjv", 768) is True
    client.create_collection.assert_not_called()


def test_upsert_vectors_flattens_metadata_in_batches() -> None:
    client = MagicMock()
    records = [
        {"id": f"NT-John-3-{v}", "values": [0.1, 0.2], "metadata": {"book": "John", "chapter": 3, "verse": v}}
        for v in range(1, 6)
    ]
    with patch(CLIENT, return_value=client):
        assert upsert_vectors("kjv", records, batch_size=2) == 5
    assert client.upsert.call_count == 3
    first_rows = client.upsert.call_args_list[0].kwargs["data"]
    assert first_rows[0] == {"id": "NT-John-3-1", "vector": [0.1, 0.2], "book": "John", "chapter": 3, "verse": 1}


def test_query_vectors_shapes_hits() -> None:
    client = MagicMock()
    client.search.return_value = [[
        {"id": "NT-1-John-4-8", "distance": 0.61, "entity": {"text": "God is love", "book": "1 John", "chapter": 4, "verse": 8}},
    ]]
    with patch(CLIENT, return_value=client):
        matches = query_vectors("kjv", [0.1, 0.2], top_k=3)
    assert matches == [{
        "id": "NT-1-John-4-8",
        "score": 0.61,
        "metadata": {"text": "God is love", "book": "1 John", "chapter": 4, "verse": 8},
    }]
    assert client.search.call_args.kwargs["limit"] == 3


def test_fetch_vector_by_id() -> None:
    client = MagicMock()
    client.get.side_effect = [
        [{"id": "NT-John-3-16", "text": "For God so loved the world", "book": "John", "vector": [0.1]}],
        [],
    ]
    with patch(CLIENT, return_value=client):
        found = fetch_vector_by_id("kjv", "NT-John-3-16")
        missing = fetch_vector_by_id("kjv", "NT-John-99-1")
    assert found == {"id": "NT-John-3-16", "score": 1.0, "metadata": {"text": "For God so loved the world", "book": "John"}}
    assert missing is None


def test_get_collection_stats_counts_missing_as_zero() -> None:
    client = MagicMock()
    client.has_collection.side_effect = lambda name: name != "greek_nt"
    client.get_collection_stats.return_value = {"row_count": 42}
    with patch(CLIENT, return_value=client), \
         patch("app.services.vector_store.KJV_COLLECTION", "kjv"), \
         patch("app.services.vector_store.HEBREW_COLLECTION", "hebrew_ot"), \
         patch("app.services.vector_store.GREEK_COLLECTION", "greek_nt"):
        assert get_collection_stats() == {"kjv": 42, "hebrew_ot": 42, "greek_nt": 0}
