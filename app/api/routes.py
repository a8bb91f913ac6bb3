"""
API route aggregator: register endpoints; no logic, only delegate to handlers.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from app.api.handlers import (
    analysis_event_stream,
    handle_analyze,
    handle_parse_intent,
    handle_search,
    require_query,
)
from app.schemas.query import (
    AnalyzeRequest,
    AnalyzeResponse,
    IntentRequest,
    IntentResponse,
    SearchRequest,
    SearchResponse,
)
from app.services.vector_store import get_collection_stats

logger = logging.getLogger(__name__)
router = APIRouter()


# --- System ---

@router.get("/health", tags=["system"])
def health():
    return {"status": "healthy"}


@router.get("/stats", tags=["system"], summary="Verse counts per collection")
def stats() -> dict:
    """Row count of the KJV, Hebrew and Greek collections."""
    return {"collections": get_collection_stats()}


# --- Query understanding ---

@router.post(
    "/parse-intent",
    response_model=IntentResponse,
    tags=["query"],
    summary="Clean up a message and extract verse count and references",
    description="400 when query is missing. LLM failures fall back to the original query, topK 5 and no references.",
)
def post_parse_intent(body: IntentRequest) -> IntentResponse:
    logger.info("[api:parse_intent] IN  query=%r", body.query)
    return handle_parse_intent(body.query)


# --- Search ---

@router.post(
    "/search",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    tags=["search"],
    summary="Verse search with AI summary",
    description="Named verses are fetched by exact id; everything else goes through vector similarity search.",
)
def post_search(body: SearchRequest) -> SearchResponse:
    logger.info("[api:search] IN  query=%r top_k=%s", body.query, body.top_k)
    return handle_search(body)


@router.post(
    "/search-rerank",
    response_model=SearchResponse,
    response_model_exclude_none=True,
    tags=["search"],
    summary="Vector search reranked by a cross-encoder, with AI summary",
)
def post_search_rerank(body: SearchRequest) -> SearchResponse:
    logger.info("[api:search_rerank] IN  query=%r top_k=%s", body.query, body.top_k)
    return handle_search(body, with_rerank=True)


# --- Analysis ---

@router.post(
    "/analyze-verse",
    response_model=AnalyzeResponse,
    tags=["analysis"],
    summary="Verses with Hebrew/Greek originals and a scholarly explanation",
)
def post_analyze_verse(body: AnalyzeRequest) -> AnalyzeResponse:
    logger.info("[api:analyze_verse] IN  query=%r top_k=%d specific=%s", body.query, body.top_k, bool(body.specific_verses))
    return handle_analyze(body)


@router.post(
    "/analyze-verse-stream",
    tags=["analysis"],
    summary="Verse analysis streamed as Server-Sent Events",
    description="Events: status, verses, explanation (content deltas), complete, error.",
)
def post_analyze_verse_stream(body: AnalyzeRequest) -> StreamingResponse:
    logger.info("[api:analyze_verse_stream] IN  query=%r top_k=%d", body.query, body.top_k)
    require_query(body.query)
    return StreamingResponse(
        analysis_event_stream(body),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
