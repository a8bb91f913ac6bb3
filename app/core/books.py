"""
Bible book canon: ordered book lists, testament lookup, and verse ids.

The verse id convention is shared by ingestion and lookup:
{testament}-{book}-{chapter}-{verse}, whitespace in the book name replaced by "-".
"""

import re

OLD_TESTAMENT_BOOKS: tuple[str, ...] = (
    "Genesis", "Exodus", "Leviticus", "Numbers", "Deuteronomy",
    "Joshua", "Judges", "Ruth", "1 Samuel", "2 Samuel", "1 Kings", "2 Kings",
    "1 Chronicles", "2 Chronicles", "Ezra", "Nehemiah", "Esther",
    "Job", "Psalms", "Proverbs", "Ecclesiastes", "Song of Solomon",
    "Isaiah", "Jeremiah", "Lamentations", "Ezekiel", "Daniel",
    "Hosea", "Joel", "Amos", "Obadiah", "Jonah", "Micah",
    "Nahum", "Habakkuk", "Zephaniah", "Haggai", "Zechariah", "Malachi",
)

NEW_TESTAMENT_BOOKS: tuple[str, ...] = (
    "Matthew", "Mark", "Luke", "John", "Acts", "Romans",
    "1 Corinthians", "2 Corinthians", "Galatians", "Ephesians",
    "Philippians", "Colossians", "1 Thessalonians", "2 Thessalonians",
    "1 Timothy", "2 Timothy", "Titus", "Philemon", "Hebrews",
    "James", "1 Peter", "2 Peter", "1 John", "2 John", "3 John",
    "Jude", "Revelation",
)

ALL_BOOKS: tuple[str, ...] = OLD_TESTAMENT_BOOKS + NEW_TESTAMENT_BOOKS

# OSIS file names of the Hebrew OT corpus
HEBREW_BOOK_MAPPINGS: dict[str, str] = {
    "Gen": "Genesis", "Exod": "Exodus", "Lev": "Leviticus", "Num": "Numbers",
    "Deut": "Deuteronomy", "Josh": "Joshua", "Judg": "Judges", "Ruth": "Ruth",
    "1Sam": "1 Samuel", "2Sam": "2 Samuel", "1Kgs": "1 Kings", "2Kgs": "2 Kings",
    "1Chr": "1 Chronicles", "2Chr": "2 Chronicles", "Ezra": "Ezra",
    "Neh": "Nehemiah", "Esth": "Esther", "Job": "Job", "Ps": "Psalms",
    "Prov": "Proverbs", "Eccl": "Ecclesiastes", "Song": "Song of Solomon",
    "Isa": "Isaiah", "Jer": "Jeremiah", "Lam": "Lamentations", "Ezek": "Ezekiel",
    "Dan": "Daniel", "Hos": "Hosea", "Joel": "Joel", "Amos": "Amos",
    "Obad": "Obadiah", "Jonah": "Jonah", "Mic": "Micah", "Nah": "Nahum",
    "Hab": "Habakkuk", "Zeph": "Zephaniah", "Hag": "Haggai", "Zech": "Zechariah",
    "Mal": "Malachi",
}

# <book id="..."> values of the Greek NT corpus
GREEK_BOOK_MAPPINGS: dict[str, str] = {
    "Mt": "Matthew", "Mk": "Mark", "Lk": "Luke", "Jn": "John", "Ac": "Acts",
    "Ro": "Romans", "1Co": "1 Corinthians", "2Co": "2 Corinthians",
    "Ga": "Galatians", "Eph": "Ephesians", "Php": "Philippians",
    "Col": "Colossians", "1Th": "1 Thessalonians", "2Th": "2 Thessalonians",
    "1Ti": "1 Timothy", "2Ti": "2 Timothy", "Tit": "Titus", "Phm": "Philemon",
    "Heb": "Hebrews", "Jas": "James", "1Pe": "1 Peter", "2Pe": "2 Peter",
    "1Jn": "1 John", "2Jn": "2 John", "3Jn": "3 John", "Jud": "Jude",
    "Re": "Revelation",
}

_OT_LOWER = frozenset(b.lower() for b in OLD_TESTAMENT_BOOKS)
_CANON_BY_KEY = {re.sub(r"\s+", " ", b.lower()): b for b in ALL_BOOKS}
_ORDER = {b: i for i, b in enumerate(ALL_BOOKS)}


def determine_testament(book: str) -> str:
    """'OT' if the book is in the Old Testament list, else 'NT'."""
    return "OT" if (book or "").strip().lower() in _OT_LOWER else "NT"


def language_for_testament(testament: str) -> str:
    return "hebrew" if testament == "OT" else "greek"


def canonical_book_name(name: str) -> str | None:
    """Return the canonical spelling of a book name, ignoring case and spacing."""
    if not name:
        return None
    key = re.sub(r"\s+", " ", name.strip().lower())
    return _CANON_BY_KEY.get(key)


def match_canonical_suffix(phrase: str) -> str | None:
    """
    Find the longest trailing run of words in phrase that names a book.

    Reference extraction captures leading words too ("show me John"), so the
    book is looked for at the end of the phrase.
    """
    words = (phrase or "").split()
    for start in range(len(words)):
        found = canonical_book_name(" ".join(words[start:]))
        if found:
            return found
    return None


def verse_id(testament: str, book: str, chapter: int, verse: int) -> str:
    """Build the vector-record id for a verse, e.g. NT-1-Corinthians-13-4."""
    slug = re.sub(r"\s+", "-", book.strip())
    return f"{testament}-{slug}-{int(chapter)}-{int(verse)}"


def canon_sort_key(record: dict) -> tuple[int, int, int]:
    """Sort key placing verses in canonical book order, then chapter and verse."""
    return (
        _ORDER.get(record.get("book", ""), len(ALL_BOOKS)),
        int(record.get("chapter", 0)),
        int(record.get("verse", 0)),
    )
