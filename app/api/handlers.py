"""
API handlers: validate request data, call the pipelines, map results/errors to HTTP.

Responsibility: Bridge HTTP types and services. Marshalling and exception-to-HTTP mapping.
Lives in the API layer so services stay free of FastAPI/HTTP types.
"""

import json
import logging
from collections.abc import Iterator
from datetime import datetime, timezone

from fastapi import HTTPException

from app.agent.graph import run_search
from app.agent.query_understanding import check_relevance, parse_intent
from app.core.config import (
    DEFAULT_RERANK_SEARCH_TOP_K,
    DEFAULT_TOP_K,
    MAX_ANALYSIS_TOP_K,
    NOT_BIBLICAL_MESSAGE,
)
from app.core.errors import MissingQueryError, ServiceUnavailableError
from app.schemas.query import (
    AnalyzeRequest,
    AnalyzeResponse,
    FormattedVerse,
    IntentResponse,
    SearchRequest,
    SearchResponse,
)
from app.services.verse_analysis import (
    analyze_specific_verses,
    analyze_verses,
    stream_analysis,
)

logger = logging.getLogger(__name__)


def require_query(query: str | None) -> str:
    """Return the stripped query or raise MissingQueryError (-> 400)."""
    if query is None or not str(query).strip():
        raise MissingQueryError()
    return str(query).strip()


def _internal_error(where: str) -> HTTPException:
    logger.exception("[api:%s] request failed", where)
    return HTTPException(status_code=500, detail="Internal server error")


def handle_parse_intent(query: str | None) -> IntentResponse:
    q = require_query(query)
    try:
        return IntentResponse.model_validate(parse_intent(q))
    except ServiceUnavailableError:
        raise
    except Exception as e:
        raise _internal_error("parse_intent") from e


def handle_search(body: SearchRequest, with_rerank: bool = False) -> SearchResponse:
    q = require_query(body.query)
    default_top_k = DEFAULT_RERANK_SEARCH_TOP_K if with_rerank else DEFAULT_TOP_K
    try:
        result = run_search(q, top_k=body.top_k or default_top_k, with_rerank=with_rerank)
    except ServiceUnavailableError:
        raise
    except Exception as e:
        raise _internal_error("search_rerank" if with_rerank else "search") from e
    if not with_rerank:
        result["reranked"] = None
    return SearchResponse.model_validate(result)


def _not_biblical_analysis(query: str) -> AnalyzeResponse:
    return AnalyzeResponse(
        query=query,
        verses=[],
        explanation=NOT_BIBLICAL_MESSAGE,
        analysis_type="not_biblical",
    )


def handle_analyze(body: AnalyzeRequest) -> AnalyzeResponse:
    """Topical or named-verse analysis with Hebrew/Greek cross-reference."""
    q = require_query(body.query)
    if not check_relevance(q):
        return _not_biblical_analysis(q)
    try:
        if body.specific_verses:
            refs = [v.model_dump() for v in body.specific_verses]
            result = analyze_specific_verses(q, refs)
        else:
            result = analyze_verses(q, min(body.top_k, MAX_ANALYSIS_TOP_K))
            result.analysis_type = "topical_search"
    except ServiceUnavailableError:
        raise
    except Exception as e:
        raise _internal_error("analyze_verse") from e

    verses = [v.to_formatted() for v in result.verses]
    return AnalyzeResponse.model_validate({
        "query": result.query,
        "verses": verses,
        "explanation": result.explanation,
        "analysis_type": result.analysis_type,
        "total": len(verses),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    })


def _camel_event(event: dict) -> dict:
    """Verse payloads go out in the same camelCase shape as /api/analyze-verse."""
    if event.get("type") != "verses":
        return event
    return {
        "type": "verses",
        "verses": [FormattedVerse.model_validate(v).model_dump(by_alias=True) for v in event["verses"]],
    }


def format_sse(event: dict) -> str:
    """One Server-Sent Event: named by its type, JSON payload including the type."""
    return f"event: {event['type']}\ndata: {json.dumps(event, ensure_ascii=False)}\n\n"


def analysis_event_stream(body: AnalyzeRequest) -> Iterator[str]:
    """
    SSE frames for /api/analyze-verse-stream. Non-biblical questions produce a
    single error event; the query must already be validated.
    """
    q = require_query(body.query)
    if not check_relevance(q):
        yield format_sse({"type": "error", "message": NOT_BIBLICAL_MESSAGE})
        return
    refs = [v.model_dump() for v in body.specific_verses] if body.specific_verses else None
    for event in stream_analysis(q, min(body.top_k, MAX_ANALYSIS_TOP_K), refs):
        yield format_sse(_camel_event(event))
