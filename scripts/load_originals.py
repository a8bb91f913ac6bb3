#!/usr/bin/env python3
"""
Embed and load the Hebrew OT and Greek NT verses into their Milvus collections.

Reads data/hebrew_ot.json and data/greek_nt.json (see parse_hebrew_xml.py and
parse_greek_xml.py); a few sample verses are used when a file is missing.

    python scripts/load_originals.py
    python scripts/load_originals.py --only greek
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import DATA_DIR, GREEK_COLLECTION, HEBREW_COLLECTION
from app.services.ingestion_service import ingest_original_verses, load_original_verses

CORPORA = {
    "hebrew": ("OT", "hebrew_ot.json", HEBREW_COLLECTION),
    "greek": ("NT", "greek_nt.json", GREEK_COLLECTION),
}


def main() -> None:
    parser = argparse.ArgumentParser(description="Load Hebrew/Greek verses into Milvus.")
    parser.add_argument("--only", choices=sorted(CORPORA), help="Load a single corpus.")
    parser.add_argument("--data-dir", type=Path, default=DATA_DIR, help="Directory holding the parsed JSON files.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    if not HEBREW_COLLECTION or not GREEK_COLLECTION:
        print("Error: HEBREW_COLLECTION and GREEK_COLLECTION must be set.")
        sys.exit(1)

    totals = {}
    for name, (testament, filename, collection) in CORPORA.items():
        if args.only and name != args.only:
            continue
        verses = load_original_verses(args.data_dir / filename, testament)
        print(f"Loaded {len(verses)} {name} verses -> {collection}")
        totals[name] = ingest_original_verses(verses, collection)

    for name, count in totals.items():
        print(f"  {name}: {count} vectors")
    print(f"Done. Total verses processed: {sum(totals.values())}")


if __name__ == "__main__":
    main()
