"""
Corpus ingestion: embed and load the KJV and the Hebrew/Greek corpora into Milvus.

Responsibility: Read prepared JSON (KJV books, parsed original-language verses),
embed in batches, persist vector batches to disk, and upsert into the per-corpus
collections. Called by the scripts in scripts/; no HTTP or FastAPI here.
"""

import json
import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable

from app.core.books import determine_testament, language_for_testament, verse_id
from app.core.config import (
    EMBED_DIM,
    KJV_EMBED_BATCH_SIZE,
    KJV_SAVE_BATCH_SIZE,
    ORIGINALS_BATCH_DELAY,
    ORIGINALS_EMBED_BATCH_SIZE,
)
from app.services.vector_store import embed_texts, ensure_collection, upsert_vectors

logger = logging.getLogger(__name__)

BATCH_INFO_FILE = "batch_info.json"
KJV_BATCH_FILE = "en_kjv_vectors_batch_{n}.json"

# Used when data/hebrew_ot.json or data/greek_nt.json has not been generated yet
SAMPLE_HEBREW_VERSES = [
    {"book": "Genesis", "chapter": 1, "verse": 1,
     "text": "בְּרֵאשִׁית בָּרָא אֱלֹהִים אֵת הַשָּׁמַיִם וְאֵת הָאָרֶץ"},
    {"book": "Psalms", "chapter": 23, "verse": 1,
     "text": "יְהוָה רֹעִי לֹא אֶחְסָר"},
    {"book": "Psalms", "chapter": 1, "verse": 1,
     "text": "אַשְׁרֵי־הָאִישׁ אֲשֶׁר לֹא הָלַךְ בַּעֲצַת רְשָׁעִים וּבְדֶרֶךְ חַטָּאִים לֹא עָמָד וּבְמוֹשַׁב לֵצִים לֹא יָשָׁב"},
]

SAMPLE_GREEK_VERSES = [
    {"book": "John", "chapter": 3, "verse": 16,
     "text": "οὕτως γὰρ ἠγάπησεν ὁ θεὸς τὸν κόσμον, ὥστε τὸν υἱὸν τὸν μονογενῆ ἔδωκεν, ἵνα πᾶς ὁ πιστεύων εἰς αὐτὸν μὴ ἀπόληται ἀλλὰ ἔχῃ ζωὴν αἰώνιον."},
    {"book": "1 Corinthians", "chapter": 13, "verse": 4,
     "text": "ἡ ἀγάπη μακροθυμεῖ, χρηστεύεται ἡ ἀγάπη, οὐ ζηλοῖ, οὐ περπερεύεται, οὐ φυσιοῦται"},
    {"book": "John", "chapter": 1, "verse": 1,
     "text": "Ἐν ἀρχῇ ἦν ὁ λόγος, καὶ ὁ λόγος ἦν πρὸς τὸν θεόν, καὶ θεὸς ἦν ὁ λόγος."},
    {"book": "Romans", "chapter": 8, "verse": 28,
     "text": "οἴδαμεν δὲ ὅτι τοῖς ἀγαπῶσιν τὸν θεὸν πάντα συνεργεῖ εἰς ἀγαθόν, τοῖς κατὰ πρόθεσιν κλητοῖς οὖσιν."},
    {"book": "Ephesians", "chapter": 2, "verse": 8,
     "text": "τῇ γὰρ χάριτί ἐστε σεσῳσμένοι διὰ πίστεως· καὶ τοῦτο οὐκ ἐξ ὑμῶν, θεοῦ τὸ δῶρον·"},
]


@dataclass
class KjvBatchInfo:
    """Summary written next to the KJV vector batch files."""

    total_vectors: int
    batch_size: int
    batch_files: list[str]
    total_batches: int

    def to_json(self) -> dict:
        return {
            "totalVectors": self.total_vectors,
            "batchSize": self.batch_size,
            "batchFiles": self.batch_files,
            "totalBatches": self.total_batches,
        }

    @classmethod
    def from_json(cls, data: dict) -> "KjvBatchInfo":
        files = list(data.get("batchFiles") or [])
        return cls(
            total_vectors=int(data.get("totalVectors", 0)),
            batch_size=int(data.get("batchSize", KJV_SAVE_BATCH_SIZE)),
            batch_files=files,
            total_batches=int(data.get("totalBatches", len(files))),
        )


def _batches(items: list, size: int) -> Iterable[list]:
    for i in range(0, len(items), size):
        yield items[i : i + size]


def embed_in_batches(
    texts: list[str],
    batch_size: int,
    delay: float = 0.0,
    embed: Callable[[list[str]], list[list[float]]] | None = None,
) -> list[list[float]]:
    """Embed texts batch by batch, optionally pausing between batches. Order is preserved."""
    embed = embed or embed_texts
    vectors: list[list[float]] = []
    total = (len(texts) + batch_size - 1) // batch_size
    for n, batch in enumerate(_batches(texts, batch_size), start=1):
        logger.info("Processing batch %d/%d (%d verses)", n, total, len(batch))
        vectors.extend(embed(batch))
        if delay and n < total:
            time.sleep(delay)
    return vectors


# --- KJV ---

def load_kjv_books(path: Path) -> list[dict]:
    """Read en_kjv.json: a list of {abbrev, name, chapters: [[verse text, ...], ...]}."""
    raw = Path(path).read_text(encoding="utf-8-sig")
    return json.loads(raw)


def flatten_kjv(books: list[dict]) -> list[dict]:
    """One record per verse; chapter and verse are 1-based positions in the source arrays."""
    verses = []
    for book in books:
        for chapter_index, chapter in enumerate(book.get("chapters") or [], start=1):
            for verse_index, text in enumerate(chapter, start=1):
                verses.append({
                    "abbrev": book.get("abbrev", ""),
                    "book": book["name"],
                    "chapter": chapter_index,
                    "verse": verse_index,
                    "text": text,
                })
    return verses


def build_kjv_records(verses: list[dict], vectors: list[list[float]]) -> list[dict]:
    records = []
    for v, values in zip(verses, vectors):
        testament = determine_testament(v["book"])
        records.append({
            "id": verse_id(testament, v["book"], v["chapter"], v["verse"]),
            "values": values,
            "metadata": {**v, "testament": testament},
        })
    return records


def embed_kjv_to_batches(
    kjv_path: Path,
    out_dir: Path,
    embed_batch_size: int = KJV_EMBED_BATCH_SIZE,
    save_batch_size: int = KJV_SAVE_BATCH_SIZE,
) -> KjvBatchInfo:
    """
    Embed every KJV verse and save the vectors as en_kjv_vectors_batch_N.json files
    plus batch_info.json in out_dir. Each file is written as soon as its verses
    are embedded, so only one batch of vectors is held in memory and finished
    files survive a failure later on.
    """
    verses = flatten_kjv(load_kjv_books(kjv_path))
    logger.info("[ingest:embed_kjv] %d verses from %s", len(verses), kjv_path)

    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    files = []
    total_vectors = 0
    for n, chunk in enumerate(_batches(verses, save_batch_size), start=1):
        vectors = embed_in_batches([v["text"] for v in chunk], embed_batch_size)
        records = build_kjv_records(chunk, vectors)
        name = KJV_BATCH_FILE.format(n=n)
        (out_dir / name).write_text(json.dumps(records, ensure_ascii=False), encoding="utf-8")
        files.append(name)
        total_vectors += len(records)
        logger.info("Saved batch %d to %s (%d/%d verses)", n, name, total_vectors, len(verses))

    info = KjvBatchInfo(
        total_vectors=total_vectors,
        batch_size=save_batch_size,
        batch_files=files,
        total_batches=len(files),
    )
    (out_dir / BATCH_INFO_FILE).write_text(json.dumps(info.to_json(), indent=2), encoding="utf-8")
    logger.info("[ingest:embed_kjv] OUT vectors=%d batches=%d", info.total_vectors, info.total_batches)
    return info


def upload_kjv_batches(out_dir: Path, collection_name: str) -> int:
    """
    Upsert every batch listed in batch_info.json. The collection dimension is
    taken from the first vector. Returns the number of vectors uploaded
    (0 when the collection exists with another dimension).
    """
    out_dir = Path(out_dir)
    info_path = out_dir / BATCH_INFO_FILE
    if not info_path.is_file():
        raise FileNotFoundError(f"{info_path} not found; run the KJV embed step first")
    info = KjvBatchInfo.from_json(json.loads(info_path.read_text(encoding="utf-8")))
    if not info.batch_files:
        logger.warning("[ingest:upload_kjv] no batch files listed in %s", info_path)
        return 0

    first = json.loads((out_dir / info.batch_files[0]).read_text(encoding="utf-8"))
    dimension = len(first[0]["values"]) if first else EMBED_DIM
    if not ensure_collection(collection_name, dimension):
        return 0

    uploaded = 0
    for n, name in enumerate(info.batch_files, start=1):
        records = first if n == 1 else json.loads((out_dir / name).read_text(encoding="utf-8"))
        uploaded += upsert_vectors(collection_name, records)
        logger.info("Uploaded batch %d/%d (%d vectors so far)", n, info.total_batches, uploaded)
    return uploaded


# --- Hebrew OT / Greek NT ---

def load_original_verses(path: Path, testament: str) -> list[dict]:
    """
    Parsed verses for one testament with ids attached. Falls back to a few
    sample verses when the file is missing, unreadable or empty.
    """
    path = Path(path)
    verses: list[dict] = []
    if path.is_file():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Error reading %s: %s", path, e)
            data = []
        if isinstance(data, list):
            verses = [
                v for v in data
                if isinstance(v, dict) and v.get("text") and v.get("book") and v.get("chapter") and v.get("verse")
            ]
    if not verses:
        logger.info("Using sample %s verses; generate %s for the full corpus", testament, path.name)
        verses = SAMPLE_HEBREW_VERSES if testament == "OT" else SAMPLE_GREEK_VERSES

    return [
        {
            "id": verse_id(testament, v["book"], v["chapter"], v["verse"]),
            "book": v["book"],
            "chapter": int(v["chapter"]),
            "verse": int(v["verse"]),
            "text": v["text"],
            "testament": testament,
        }
        for v in verses
    ]


def ingest_original_verses(
    verses: list[dict],
    collection_name: str,
    batch_size: int = ORIGINALS_EMBED_BATCH_SIZE,
    delay: float = ORIGINALS_BATCH_DELAY,
) -> int:
    """Embed and upsert original-language verses. Returns the number written."""
    if not verses:
        logger.warning("[ingest:originals] no verses for %s", collection_name)
        return 0
    if not ensure_collection(collection_name, EMBED_DIM):
        return 0
    vectors = embed_in_batches([v["text"] for v in verses], batch_size, delay=delay)
    records = [
        {
            "id": v["id"],
            "values": values,
            "metadata": {
                "book": v["book"],
                "chapter": v["chapter"],
                "verse": v["verse"],
                "text": v["text"],
                "testament": v["testament"],
                "language": language_for_testament(v["testament"]),
            },
        }
        for v, values in zip(verses, vectors)
    ]
    written = upsert_vectors(collection_name, records)
    logger.info("[ingest:originals] OUT %s written=%d", collection_name, written)
    return written
