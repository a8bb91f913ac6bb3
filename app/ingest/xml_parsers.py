# Hebrew OT (OSIS) and Greek NT XML -> flat verse lists.
# Output records: {"book", "chapter", "verse", "text"}, sorted in canon order.

import json
import logging
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterable, List

from app.core.books import GREEK_BOOK_MAPPINGS, HEBREW_BOOK_MAPPINGS, canon_sort_key

logger = logging.getLogger(__name__)

OSIS_ID_RE = re.compile(r"([^.]+)\.(\d+)\.(\d+)")
GREEK_VERSE_ID_RE = re.compile(r"(\w+)\s+(\d+):(\d+)")
HEBREW_CHARS_RE = re.compile("[\u0590-\u05FF]")
SPACE_BEFORE_PUNCT_RE = re.compile(r"\s+([,.;:])")

HEBREW_EXCLUDED_FILES = {"VerseMap.xml"}


def _local(tag) -> str:
    """Tag name without its {namespace} prefix."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def _text(elem: ET.Element) -> str:
    return "".join(elem.itertext()).strip()


def _iter_local(root: ET.Element, name: str) -> Iterable[ET.Element]:
    return (e for e in root.iter() if _local(e.tag) == name)


def parse_hebrew_xml_file(path: Path) -> List[Dict]:
    """
    Parse one OSIS book file. The book comes from the file name (Gen.xml -> Genesis);
    verses without Hebrew characters are skipped. Unreadable files yield [].
    """
    path = Path(path)
    book = HEBREW_BOOK_MAPPINGS.get(path.stem, path.stem)
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        logger.error("[xml:parse_hebrew] failed to parse %s: %s", path, e)
        return []

    verses = []
    for verse_elem in _iter_local(root, "verse"):
        match = OSIS_ID_RE.match(verse_elem.get("osisID") or "")
        if not match:
            continue
        words = [w for w in (_text(e) for e in _iter_local(verse_elem, "w")) if w]
        if not words:
            words = _text(verse_elem).split()
        text = " ".join(words).strip()
        if text and HEBREW_CHARS_RE.search(text):
            verses.append({
                "book": book,
                "chapter": int(match.group(2)),
                "verse": int(match.group(3)),
                "text": text,
            })
    logger.info("[xml:parse_hebrew] %s: %d verses", book, len(verses))
    return verses


def _collect_greek_verses(parent: ET.Element, book: str, out: List[Dict]) -> None:
    """Walk the children of parent; a verse-number opens a verse that runs until the next one."""
    current = None
    words: List[str] = []

    def flush():
        if current is not None and words:
            text = SPACE_BEFORE_PUNCT_RE.sub(r"\1", " ".join(words)).strip()
            out.append({"book": book, "chapter": current[0], "verse": current[1], "text": text})

    for child in parent:
        name = _local(child.tag)
        if name == "verse-number":
            flush()
            words = []
            match = GREEK_VERSE_ID_RE.search(child.get("id") or "")
            current = (int(match.group(2)), int(match.group(3))) if match else None
        elif current is not None and name == "w":
            word = _text(child)
            if word:
                words.append(word)
        elif current is not None and name == "suffix":
            suffix = _text(child)
            if suffix and words:
                words[-1] += suffix
        else:
            _collect_greek_verses(child, book, out)
    flush()


def parse_greek_xml_file(path: Path) -> List[Dict]:
    """Parse one Greek NT book file. The book comes from <book id="...">."""
    path = Path(path)
    try:
        root = ET.parse(path).getroot()
    except (ET.ParseError, OSError) as e:
        logger.error("[xml:parse_greek] failed to parse %s: %s", path, e)
        return []

    book_elem = root if _local(root.tag) == "book" else next(_iter_local(root, "book"), None)
    book_id = book_elem.get("id", "") if book_elem is not None else ""
    book = GREEK_BOOK_MAPPINGS.get(book_id, book_id)

    verses: List[Dict] = []
    _collect_greek_verses(root, book, verses)
    logger.info("[xml:parse_greek] %s: %d verses", book, len(verses))
    return verses


def _parse_directory(source_dir: Path, parse_file, excluded=frozenset()) -> List[Dict]:
    source_dir = Path(source_dir)
    if not source_dir.is_dir():
        raise FileNotFoundError(f"Directory not found: {source_dir}")
    files = sorted(p for p in source_dir.glob("*.xml") if p.name not in excluded)
    logger.info("Found %d XML files in %s", len(files), source_dir)
    verses: List[Dict] = []
    for path in files:
        verses.extend(parse_file(path))
    verses.sort(key=canon_sort_key)
    return verses


def parse_hebrew_directory(source_dir: Path) -> List[Dict]:
    """All OSIS files in source_dir (VerseMap.xml excluded), in canon order."""
    return _parse_directory(source_dir, parse_hebrew_xml_file, HEBREW_EXCLUDED_FILES)


def parse_greek_directory(source_dir: Path) -> List[Dict]:
    return _parse_directory(source_dir, parse_greek_xml_file)


def write_verses_json(verses: List[Dict], output_path: Path) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(verses, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved %d verses to %s", len(verses), output_path)
    return output_path


def verses_per_book(verses: List[Dict]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for v in verses:
        counts[v["book"]] = counts.get(v["book"], 0) + 1
    return counts
