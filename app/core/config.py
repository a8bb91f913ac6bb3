"""
Application configuration (env, settings, constants).

Responsibility: Centralize config loading, environment variables, and app-wide
constants. Keeps the rest of the app decoupled from how config is sourced.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Project root and data locations for the preparation scripts
PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent.parent
DATA_DIR: Path = Path(os.getenv("DATA_DIR", str(PROJECT_ROOT / "data")))
OUTPUT_DIR: Path = Path(os.getenv("OUTPUT_DIR", str(PROJECT_ROOT / "output")))

# OpenAI (chat completions + embeddings)
OPENAI_API_KEY: str = os.getenv("OPENAI_API_KEY", "").strip()
OPENAI_LLM_MODEL: str = (
    os.getenv("OPENAI_LLM_MODEL", "gpt-4o-mini").strip() or "gpt-4o-mini"
)
OPENAI_EMBED_MODEL: str = (
    os.getenv("OPENAI_EMBED_MODEL", "text-embedding-3-small").strip()
    or "text-embedding-3-small"
)

# Embedding dimension; every collection is created with this size
EMBED_DIM: int = int(os.getenv("EMBED_DIM", "1536"))

# Milvus Cloud (from env)
MILVUS_URI: str = os.getenv("MILVUS_URI", "").strip()
MILVUS_TOKEN: str = os.getenv("MILVUS_TOKEN", "").strip()

# Collections: English KJV plus the two original-language corpora
KJV_COLLECTION: str = os.getenv("KJV_COLLECTION", "kjv").strip() or "kjv"
HEBREW_COLLECTION: str = os.getenv("HEBREW_COLLECTION", "hebrew_ot").strip()
GREEK_COLLECTION: str = os.getenv("GREEK_COLLECTION", "greek_nt").strip()

# Hugging Face (rerank, and chat fallback when OPENAI_API_KEY is not set)
HF_API_KEY: str = os.getenv("HF_API_KEY", "").strip()
HF_RERANK_MODEL: str = (
    os.getenv("HF_RERANK_MODEL", "BAAI/bge-reranker-v2-m3").strip()
    or "BAAI/bge-reranker-v2-m3"
)
HF_CHAT_URL: str = "https://router.huggingface.co/v1/chat/completions"
HF_LLM_MODEL: str = (
    os.getenv("HF_LLM_MODEL", "meta-llama/Llama-3.2-3B-Instruct").strip()
    or "meta-llama/Llama-3.2-3B-Instruct"
)

# API timeouts (seconds)
EMBED_API_TIMEOUT: float = 30.0
RERANK_API_TIMEOUT: float = 60.0
LLM_API_TIMEOUT: float = 60.0

# Retrieval limits
DEFAULT_TOP_K: int = 5
DEFAULT_RERANK_SEARCH_TOP_K: int = 10
RERANK_TOP_K: int = 5
MAX_INTENT_TOP_K: int = 50
MAX_ANALYSIS_TOP_K: int = 10
ORIGINAL_LOOKUP_TOP_K: int = 3
SPECIFIC_VERSE_WORKERS: int = 8

# LLM token budgets
EXPLANATION_MAX_TOKENS: int = 800
ANALYSIS_MAX_TOKENS: int = 1000

# Batch sizes for the data preparation scripts
UPSERT_BATCH_SIZE: int = 100
KJV_EMBED_BATCH_SIZE: int = 1000
KJV_SAVE_BATCH_SIZE: int = 1000
ORIGINALS_EMBED_BATCH_SIZE: int = 100
ORIGINALS_BATCH_DELAY: float = 1.0

# Fixed reply for questions outside the Bible domain
NOT_BIBLICAL_MESSAGE: str = (
    "I only answer questions related to the Bible, Christianity, and faith. "
    "Please ask me about scripture, biblical stories, Christian teachings, "
    "or spiritual guidance."
)
