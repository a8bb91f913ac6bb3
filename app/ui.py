# Run from project root: streamlit run app/ui.py
# UI talks to backend API (POST /api/parse-intent, then POST /api/analyze-verse-stream for SSE).

import json
import os
import sys
from pathlib import Path

# Ensure project root is on path (Streamlit runs the script with app/ on sys.path)
_root = str(Path(__file__).resolve().parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

import requests
import streamlit as st

from app.services.text_processing import clean_markup

# Backend config
API_BASE = os.environ.get("API_BASE", "http://localhost:8000")

SUGGESTED_QUESTIONS = [
    "What does the Bible say about love?",
    "Explain John 3:16",
    "Show me verses about forgiveness",
    "What is the meaning of Psalm 23?",
    "Give me 3 verses about hope",
    "What does Romans 8:28 mean in the original Greek?",
]


def parse_intent(message: str) -> dict:
    """Cleaned query, verse count and named verses; falls back to the raw message."""
    fallback = {"cleanedQuery": message, "topK": 5, "hasSpecificVerse": False, "specificVerses": []}
    try:
        r = requests.post(f"{API_BASE}/api/parse-intent", json={"query": message}, timeout=30)
    except requests.RequestException:
        return fallback
    return r.json() if r.ok else fallback


def render_verses(verses: list[dict]) -> None:
    for v in verses:
        with st.container(border=True):
            st.markdown(f"**{v.get('reference', '')}** ({v.get('testament', '')})")
            st.markdown(clean_markup(v.get("kjvText", "")))
            if v.get("originalText"):
                lang = (v.get("originalLanguage") or "").capitalize()
                st.caption(f"{lang}: {v['originalText']}")


def render_message(msg: dict) -> None:
    if msg.get("verses"):
        render_verses(msg["verses"])
    if msg.get("content"):
        st.markdown(msg["content"])


st.title("Bible Study Assistant")
st.caption("KJV verses with the Hebrew and Greek originals, explained.")

if "messages" not in st.session_state:
    st.session_state.messages = []
# New chat: clear local messages
if st.button("New chat", key="new_chat"):
    st.session_state.messages = []
    st.session_state.pop("pending_query", None)
    st.rerun()

# Starter questions on an empty conversation
if not st.session_state.messages and not st.session_state.get("pending_query"):
    st.caption("Try one of these:")
    cols = st.columns(2)
    for i, question in enumerate(SUGGESTED_QUESTIONS):
        if cols[i % 2].button(question, key=f"suggested_{i}"):
            st.session_state.messages.append({"role": "user", "content": question})
            st.session_state.pending_query = question
            st.rerun()

for msg in st.session_state.messages:
    with st.chat_message(msg["role"]):
        render_message(msg)

# If we just submitted a query, parse intent and stream the analysis
if st.session_state.get("pending_query"):
    prompt = st.session_state.pending_query
    with st.chat_message("assistant"):
        status_placeholder = st.empty()
        verses_area = st.container()
        answer_placeholder = st.empty()
        status_placeholder.caption("Understanding your question...")
        verses: list[dict] = []
        accumulated: list[str] = []
        answer = ""

        intent = parse_intent(prompt)
        body = {"query": intent.get("cleanedQuery") or prompt, "topK": intent.get("topK") or 5}
        if intent.get("hasSpecificVerse") and intent.get("specificVerses"):
            body["specificVerses"] = intent["specificVerses"]

        try:
            r = requests.post(
                f"{API_BASE}/api/analyze-verse-stream",
                json=body,
                stream=True,
                timeout=120,
            )
            if not r.ok:
                answer = f"Error: {r.status_code}: {r.text[:200]}"
                status_placeholder.empty()
                answer_placeholder.error(answer)
            else:
                current_event = None
                for line in r.iter_lines(decode_unicode=True):
                    if not line:
                        continue
                    if line.startswith("event:"):
                        current_event = line[6:].strip()
                    elif line.startswith("data:") and current_event:
                        try:
                            data = json.loads(line[5:].strip())
                        except json.JSONDecodeError:
                            data = {}
                        if current_event == "status":
                            status_placeholder.caption(data.get("message", ""))
                        elif current_event == "verses":
                            verses = data.get("verses") or []
                            with verses_area:
                                render_verses(verses)
                        elif current_event == "explanation":
                            content = data.get("content", "")
                            if content:
                                accumulated.append(content)
                                answer_placeholder.markdown("".join(accumulated))
                        elif current_event == "complete":
                            status_placeholder.empty()
                        elif current_event == "error":
                            msg = data.get("message", "Unknown error")
                            status_placeholder.empty()
                            answer_placeholder.error(msg)
                            answer = msg
                answer = answer or "".join(accumulated) or ("" if verses else "No answer.")
        except requests.RequestException as e:
            answer = f"Connection failed: {e}"
            status_placeholder.empty()
            answer_placeholder.error(answer)
        st.session_state.messages.append({"role": "assistant", "content": answer, "verses": verses})
    del st.session_state["pending_query"]
    st.rerun()

if prompt := st.chat_input("Ask about a verse, a passage, or a biblical topic"):
    st.session_state.messages.append({"role": "user", "content": prompt})
    st.session_state.pending_query = prompt
    st.rerun()
