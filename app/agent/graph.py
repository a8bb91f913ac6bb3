"""
LangGraph search pipelines.

search:        relevance -> cleanup -> preference -> exact references
               -> (vector search if no reference resolved) -> compose
search-rerank: relevance -> cleanup -> vector search -> rerank -> compose

Non-biblical questions short-circuit to a fixed rejection message.
"""

import logging
from functools import lru_cache
from typing import Literal, TypedDict

from langgraph.graph import END, StateGraph

from app.agent import prompts
from app.agent.llm import complete
from app.agent.query_understanding import (
    DEFAULT_PREFERENCE,
    check_relevance,
    clean_query,
    detect_response_preference,
    normalize_book_name,
)
from app.core.config import NOT_BIBLICAL_MESSAGE, RERANK_TOP_K
from app.services.retrieval_service import fetch_kjv_verse, rerank, search_kjv
from app.services.text_processing import extract_verse_references, format_verse_lines

logger = logging.getLogger(__name__)


class SearchState(TypedDict, total=False):
    query: str
    top_k: int
    is_relevant: bool
    cleaned_query: str
    preference: dict
    documents: list
    from_references: bool
    reranked: bool
    ai_response: str
    verses: str


def _check_relevance(state: SearchState) -> dict:
    return {"is_relevant": check_relevance(state["query"])}


def _route_after_relevance(state: SearchState) -> Literal["clean_query", "reject"]:
    next_node = "clean_query" if state.get("is_relevant") else "reject"
    logger.info("[graph:route_after_relevance] relevant=%s -> %s", state.get("is_relevant"), next_node)
    return next_node


def _reject(state: SearchState) -> dict:
    return {"documents": [], "ai_response": NOT_BIBLICAL_MESSAGE, "verses": ""}


def _clean_query(state: SearchState) -> dict:
    return {"cleaned_query": clean_query(state["query"])}


def _detect_preference(state: SearchState) -> dict:
    preference = detect_response_preference(state.get("cleaned_query") or state["query"])
    logger.info("[graph:detect_preference] OUT %s", preference)
    return {"preference": preference}


def _resolve_references(state: SearchState) -> dict:
    """Fetch explicitly named verses ("John 3:16", "Psalms 23:1-3") by exact id."""
    cleaned = state.get("cleaned_query") or state["query"]
    documents = []
    for _, book_name, chapter, start, end in extract_verse_references(cleaned):
        book = normalize_book_name(book_name)
        if not book:
            continue
        chapter_num, start_num = int(chapter), int(start)
        end_num = int(end) if end else start_num
        for verse_num in range(start_num, end_num + 1):
            doc = fetch_kjv_verse(book, chapter_num, verse_num)
            if doc:
                documents.append(doc)
    logger.info("[graph:resolve_references] OUT documents=%d", len(documents))
    return {"documents": documents, "from_references": bool(documents)}


def _route_after_references(state: SearchState) -> Literal["compose_response", "vector_search"]:
    return "compose_response" if state.get("documents") else "vector_search"


def _vector_search(state: SearchState) -> dict:
    documents = search_kjv(state.get("cleaned_query") or state["query"], state.get("top_k") or 5)
    return {"documents": documents, "from_references": False}


def _rerank(state: SearchState) -> dict:
    # rerank against the user's own wording, not the cleaned query
    documents = rerank(state["query"], state.get("documents") or [], top_k=RERANK_TOP_K)
    return {"documents": documents, "reranked": True}


def _compose_response(state: SearchState) -> dict:
    """
    Verse lines plus an LLM summary, shaped by the user's response preference.
    Reranked results carry the summary alone; the verses go out separately.
    """
    query = state["query"]
    documents = state.get("documents") or []
    if not documents:
        return {"ai_response": "", "verses": ""}

    verses = format_verse_lines(documents)
    preference = state.get("preference") or DEFAULT_PREFERENCE
    if not preference.get("wants_summary", True):
        return {"ai_response": verses, "verses": verses}

    from_references = state.get("from_references", False)
    if preference.get("response_style") == "detailed":
        template = prompts.DETAILED_SPECIFIC_PROMPT if from_references else prompts.DETAILED_PROMPT
    else:
        template = prompts.SUMMARY_PROMPT
    try:
        summary = complete(template.format(query=query, verses=verses), system=prompts.ASSISTANT_SYSTEM)
    except Exception as e:
        logger.warning("[graph:compose_response] summary failed: %s", e)
        fallback = verses if from_references else f'Here are some relevant Bible verses about "{query}":\n\n{verses}'
        return {"ai_response": fallback, "verses": verses}

    if state.get("reranked"):
        return {"ai_response": summary or "", "verses": verses}
    ai_response = f"{verses}\n\nSummary:\n{summary}" if summary else verses
    return {"ai_response": ai_response, "verses": verses}


@lru_cache(maxsize=2)
def build_search_graph(with_rerank: bool = False):
    """
    Build and compile a search graph.
    with_rerank=False: exact references first, vector search as fallback.
    with_rerank=True: vector search then rerank, no reference resolution.
    """
    graph = StateGraph(SearchState)

    graph.add_node("check_relevance", _check_relevance)
    graph.add_node("reject", _reject)
    graph.add_node("clean_query", _clean_query)
    graph.add_node("vector_search", _vector_search)
    graph.add_node("compose_response", _compose_response)

    graph.set_entry_point("check_relevance")
    graph.add_conditional_edges("check_relevance", _route_after_relevance)
    graph.add_edge("reject", END)

    if with_rerank:
        graph.add_node("rerank", _rerank)
        graph.add_edge("clean_query", "vector_search")
        graph.add_edge("vector_search", "rerank")
        graph.add_edge("rerank", "compose_response")
    else:
        graph.add_node("detect_preference", _detect_preference)
        graph.add_node("resolve_references", _resolve_references)
        graph.add_edge("clean_query", "detect_preference")
        graph.add_edge("detect_preference", "resolve_references")
        graph.add_conditional_edges("resolve_references", _route_after_references)
        graph.add_edge("vector_search", "compose_response")

    graph.add_edge("compose_response", END)
    return graph.compile()


def run_search(query: str, top_k: int = 5, with_rerank: bool = False) -> dict:
    """
    Run a search pipeline. Returns query, documents, total, ai_response,
    verses and reranked.
    """
    if not query or not str(query).strip():
        raise ValueError("query is required")
    logger.info("[run_search] START query=%r top_k=%d rerank=%s", query, top_k, with_rerank)
    initial: SearchState = {"query": query, "top_k": top_k, "documents": [], "reranked": False}
    final = build_search_graph(with_rerank).invoke(initial)
    documents = final.get("documents") or []
    logger.info("[run_search] END documents=%d relevant=%s", len(documents), final.get("is_relevant"))
    return {
        "query": query,
        "documents": documents,
        "total": len(documents),
        "ai_response": final.get("ai_response", ""),
        "verses": final.get("verses", ""),
        "reranked": bool(final.get("reranked")),
    }
