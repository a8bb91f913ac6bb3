"""
Vector store client: Milvus Cloud connection, embeddings (OpenAI), and verse storage.

Responsibility: Connect to Milvus, embed texts with text-embedding-3-small, store
and fetch verse vectors keyed by verse id. One collection per corpus (KJV,
Hebrew OT, Greek NT).
"""

import logging
from functools import lru_cache
from typing import Any

from app.agent.llm import get_openai_client
from app.core.config import (
    EMBED_DIM,
    GREEK_COLLECTION,
    HEBREW_COLLECTION,
    KJV_COLLECTION,
    MILVUS_TOKEN,
    MILVUS_URI,
    OPENAI_EMBED_MODEL,
    UPSERT_BATCH_SIZE,
)
from app.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

# Verse metadata stored next to each vector (dynamic fields)
METADATA_FIELDS = ["text", "book", "chapter", "verse", "testament", "abbrev", "language"]
ID_MAX_LENGTH = 128


def embed_texts(texts: list[str], dimensions: int = EMBED_DIM) -> list[list[float]]:
    """
    Embed texts in one OpenAI embeddings call. Order of vectors matches texts.
    Callers batch large corpora themselves.
    """
    if not texts:
        return []
    response = get_openai_client().embeddings.create(
        model=OPENAI_EMBED_MODEL,
        input=texts,
        dimensions=dimensions,
    )
    return [list(item.embedding) for item in response.data]


def embed_text(text: str, dimensions: int = EMBED_DIM) -> list[float]:
    """Embed a single query string."""
    vectors = embed_texts([text], dimensions=dimensions)
    return vectors[0] if vectors else []


@lru_cache(maxsize=1)
def get_milvus_client() -> Any:
    """Connect to Milvus Cloud and return a client."""
    if not MILVUS_URI or not MILVUS_TOKEN:
        raise ServiceUnavailableError("MILVUS_URI and MILVUS_TOKEN must be set in .env", service="milvus")

    from pymilvus import MilvusClient

    client = MilvusClient(uri=MILVUS_URI, token=MILVUS_TOKEN)
    logger.info("Milvus connection established")
    return client


def _collection_dimension(client: Any, collection_name: str) -> int | None:
    info = client.describe_collection(collection_name=collection_name)
    for field in info.get("fields", []):
        params = field.get("params") or {}
        if "dim" in params:
            return int(params["dim"])
    return None


def ensure_collection(collection_name: str, dimension: int = EMBED_DIM) -> bool:
    """
    Create a string-keyed COSINE collection if it does not exist.

    Returns False (and uploads must not proceed) when an existing collection
    has a different vector dimension.
    """
    client = get_milvus_client()
    if client.has_collection(collection_name):
        existing = _collection_dimension(client, collection_name)
        logger.info("Collection %s already exists (dim=%s)", collection_name, existing)
        if existing is not None and existing != dimension:
            logger.warning(
                "Collection dimension mismatch for %s: expected %d, got %d. "
                "Drop the collection or use a different name.",
                collection_name, dimension, existing,
            )
            return False
        return True

    client.create_collection(
        collection_name=collection_name,
        dimension=dimension,
        primary_field_name="id",
        id_type="string",
        max_length=ID_MAX_LENGTH,
        vector_field_name="vector",
        metric_type="COSINE",
        auto_id=False,
    )
    logger.info("Collection %s created (dim=%d)", collection_name, dimension)
    return True


def upsert_vectors(collection_name: str, records: list[dict], batch_size: int = UPSERT_BATCH_SIZE) -> int:
    """
    Upsert {id, values, metadata} records in batches. Returns the number written.
    Re-running an upload overwrites records with the same verse id.
    """
    if not records:
        return 0
    client = get_milvus_client()
    written = 0
    for i in range(0, len(records), batch_size):
        batch = records[i : i + batch_size]
        rows = [{"id": r["id"], "vector": r["values"], **(r.get("metadata") or {})} for r in batch]
        client.upsert(collection_name=collection_name, data=rows)
        written += len(rows)
    logger.info("Successfully upserted %d vectors to %s", written, collection_name)
    return written


def _metadata(entity: dict) -> dict:
    return {k: entity[k] for k in METADATA_FIELDS if k in entity}


def query_vectors(collection_name: str, vector: list[float], top_k: int = 10) -> list[dict]:
    """Similarity search. Returns [{id, score, metadata}] best first."""
    client = get_milvus_client()
    results = client.search(
        collection_name=collection_name,
        data=[vector],
        limit=top_k,
        output_fields=METADATA_FIELDS,
    )
    # results: list of list of hits (one list per query vector)
    hits = results[0] if results else []
    matches = []
    for h in hits:
        entity = h.get("entity") or h
        matches.append({
            "id": h.get("id", entity.get("id")),
            "score": float(h.get("distance", h.get("score", 0.0))),
            "metadata": _metadata(entity),
        })
    logger.info("[vector_store:query_vectors] %s OUT matches=%d", collection_name, len(matches))
    return matches


def fetch_vector_by_id(collection_name: str, record_id: str) -> dict | None:
    """Exact lookup by verse id. Returns {id, score=1.0, metadata} or None."""
    client = get_milvus_client()
    results = client.get(
        collection_name=collection_name,
        ids=[record_id],
        output_fields=METADATA_FIELDS,
    )
    if not results:
        return None
    r = results[0]
    return {"id": r.get("id", record_id), "score": 1.0, "metadata": _metadata(r)}


def get_collection_stats() -> dict:
    """Row count per configured collection (0 when a collection does not exist yet)."""
    client = get_milvus_client()
    stats = {}
    for name in (KJV_COLLECTION, HEBREW_COLLECTION, GREEK_COLLECTION):
        if not name:
            continue
        if not client.has_collection(name):
            stats[name] = 0
            continue
        info = client.get_collection_stats(collection_name=name)
        stats[name] = int(info.get("row_count", 0))
    return stats
