"""
Streamlit UI rendering, run headless with streamlit's AppTest. No backend
calls happen: the conversation is seeded through session state.
"""

from pathlib import Path

from streamlit.testing.v1 import AppTest

UI_SCRIPT = str(Path(__file__).resolve().parent.parent / "app" / "ui.py")

JOHN_3_16 = {
    "reference": "John 3:16",
    "kjvText": "For God so loved the world, that he gave his only begotten Son, that whosoever believeth in him should not perish, but have {everlasting} life.",
    "originalText": "οὕτως γὰρ ἠγάπησεν ὁ θεὸς τὸν κόσμον",
    "originalLanguage": "greek",
    "testament": "NT",
}


def test_verse_cards_strip_italics_markers() -> None:
    at = AppTest.from_file(UI_SCRIPT)
    at.session_state["messages"] = [
        {"role": "user", "content": "Explain John 3:16"},
        {"role": "assistant", "content": "God's love.", "verses": [JOHN_3_16]},
    ]
    at.run()
    assert not at.exception
    rendered = [m.value for m in at.markdown]
    assert any("have everlasting life." in text for text in rendered)
    assert not any("{everlasting}" in text for text in rendered)
    assert any(c.value == "Greek: οὕτως γὰρ ἠγάπησεν ὁ θεὸς τὸν κόσμον" for c in at.caption)
