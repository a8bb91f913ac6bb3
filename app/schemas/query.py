"""Request and response schemas for the /api routes. JSON on the wire is camelCase."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SpecificVerse(CamelModel):
    """An explicitly named verse, optionally a range ending at end_verse."""

    book: str = Field(..., min_length=1)
    chapter: int = Field(..., ge=1)
    verse: int = Field(..., ge=1)
    end_verse: int | None = Field(None, ge=1)


class IntentRequest(CamelModel):
    """Body for POST /api/parse-intent. query is checked by the handler so a missing one is a 400."""

    query: str | None = Field(None, description="Raw user message.")


class IntentResponse(CamelModel):
    cleaned_query: str
    top_k: int = Field(..., ge=1, le=50)
    has_specific_verse: bool
    specific_verses: list[SpecificVerse] = Field(default_factory=list)


class SearchRequest(CamelModel):
    """Body for POST /api/search and /api/search-rerank."""

    query: str | None = Field(None, description="User question or verse request.")
    top_k: int | None = Field(None, ge=1, le=50, description="Verses to retrieve; route default when omitted.")


class VerseDocument(CamelModel):
    id: str | None = None
    score: float | None = None
    text: str = ""
    abbrev: str | None = None
    book: str | None = None
    chapter: int | None = None
    verse: int | None = None
    rerank_score: float | None = None


class SearchResponse(CamelModel):
    query: str
    documents: list[VerseDocument] = Field(default_factory=list)
    total: int = 0
    ai_response: str = ""
    verses: str = ""
    reranked: bool | None = Field(None, description="Set on /api/search-rerank responses.")


class AnalyzeRequest(CamelModel):
    """Body for POST /api/analyze-verse and /api/analyze-verse-stream."""

    query: str | None = Field(None, description="User question (usually the cleaned query from parse-intent).")
    top_k: int = Field(5, ge=1, description="Topical search is capped at 10.")
    specific_verses: list[SpecificVerse] | None = Field(
        None, description="Named verses from parse-intent; skips topical search when present."
    )


class FormattedVerse(CamelModel):
    reference: str
    kjv_text: str
    original_text: str | None = None
    original_language: str | None = None
    testament: str
    book: str
    chapter: int
    verse: int


class AnalyzeResponse(CamelModel):
    query: str
    verses: list[FormattedVerse] = Field(default_factory=list)
    explanation: str = ""
    analysis_type: str
    total: int = 0
    timestamp: str | None = None
