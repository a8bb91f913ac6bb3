"""
LLM access: OpenAI (primary) or Hugging Face (fallback).
When OPENAI_API_KEY is set, uses OpenAI chat completions; otherwise uses HF router.
"""

import logging
from collections.abc import Iterator
from functools import lru_cache

import httpx
from openai import OpenAI

from app.core.config import (
    HF_API_KEY,
    HF_CHAT_URL,
    HF_LLM_MODEL,
    LLM_API_TIMEOUT,
    OPENAI_API_KEY,
    OPENAI_LLM_MODEL,
)
from app.core.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_openai_client() -> OpenAI:
    """Shared OpenAI client (chat and embeddings)."""
    if not OPENAI_API_KEY:
        raise ServiceUnavailableError("OPENAI_API_KEY must be set in .env", service="openai")
    return OpenAI(api_key=OPENAI_API_KEY, timeout=LLM_API_TIMEOUT)


def _messages(system: str, prompt: str) -> list[dict[str, str]]:
    messages = []
    if system:
        messages.append({"role": "system", "content": system})
    messages.append({"role": "user", "content": prompt})
    return messages


def _call_openai(
    system: str, prompt: str, max_tokens: int | None, temperature: float | None
) -> str:
    """Call OpenAI chat completions. Returns generated text."""
    kwargs = {}
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if temperature is not None:
        kwargs["temperature"] = temperature
    response = get_openai_client().chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=_messages(system, prompt),
        **kwargs,
    )
    msg = response.choices[0].message if response.choices else None
    if not msg or not getattr(msg, "content", None):
        return ""
    out = (msg.content or "").strip()
    logger.info("[llm:openai] OUT response_len=%d", len(out))
    return out


def _call_hf(
    system: str, prompt: str, max_tokens: int | None, temperature: float | None
) -> str:
    """Call Hugging Face router chat completions. Returns generated text."""
    if not HF_API_KEY:
        logger.warning("[llm:hf] no HF_API_KEY")
        return ""
    headers = {"Authorization": f"Bearer {HF_API_KEY}", "Content-Type": "application/json"}
    payload = {"model": HF_LLM_MODEL, "messages": _messages(system, prompt)}
    if max_tokens is not None:
        payload["max_tokens"] = max_tokens
    if temperature is not None:
        payload["temperature"] = temperature
    try:
        with httpx.Client(timeout=LLM_API_TIMEOUT) as client:
            response = client.post(HF_CHAT_URL, json=payload, headers=headers)
        if response.status_code != 200:
            logger.warning("[llm:hf] HF LLM error %s: %s", response.status_code, response.text[:200])
            return ""
        data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.warning("[llm:hf] request failed: %s", e)
        return ""
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        msg = choices[0].get("message") or {}
        out = (msg.get("content") or "").strip()
        logger.info("[llm:hf] OUT response_len=%d", len(out))
        return out
    return ""


def complete(
    prompt: str,
    system: str = "",
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> str:
    """
    One chat completion. Uses OpenAI when OPENAI_API_KEY is set, else Hugging Face.
    If OpenAI returns empty, falls back to HF. Errors from OpenAI propagate so callers
    can substitute their own default.
    """
    logger.info("[llm] IN  prompt_len=%d max_tokens=%s", len(prompt), max_tokens)
    if not OPENAI_API_KEY and not HF_API_KEY:
        raise ServiceUnavailableError(
            "No LLM provider configured. Set OPENAI_API_KEY (or HF_API_KEY) in .env", service="llm"
        )
    if OPENAI_API_KEY:
        out = _call_openai(system, prompt, max_tokens, temperature)
        if out:
            return out
        logger.info("[llm] OpenAI returned empty; falling back to Hugging Face")
    return _call_hf(system, prompt, max_tokens, temperature)


def complete_stream(
    prompt: str,
    system: str = "",
    max_tokens: int | None = None,
    temperature: float | None = None,
) -> Iterator[str]:
    """
    Stream a chat completion token by token. Yields content deltas.
    Without OpenAI, yields the whole HF completion as a single delta.
    """
    logger.info("[llm:stream] IN  prompt_len=%d max_tokens=%s", len(prompt), max_tokens)
    if not OPENAI_API_KEY:
        out = complete(prompt, system=system, max_tokens=max_tokens, temperature=temperature)
        if out:
            yield out
        return
    kwargs = {}
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens
    if temperature is not None:
        kwargs["temperature"] = temperature
    stream = get_openai_client().chat.completions.create(
        model=OPENAI_LLM_MODEL,
        messages=_messages(system, prompt),
        stream=True,
        **kwargs,
    )
    total = 0
    for chunk in stream:
        if not chunk.choices:
            continue
        content = getattr(chunk.choices[0].delta, "content", None)
        if content:
            total += len(content)
            yield content
    logger.info("[llm:stream] OUT streamed_len=%d", total)
