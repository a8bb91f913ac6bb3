#!/usr/bin/env python3
"""
Parse the Hebrew OT OSIS XML files into data/hebrew_ot.json.

Run from project root:

    python scripts/parse_hebrew_xml.py
    python scripts/parse_hebrew_xml.py --source data/HebrewOT --output data/hebrew_ot.json

Then load the verses into Milvus with scripts/load_originals.py.
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import DATA_DIR
from app.ingest.xml_parsers import parse_hebrew_directory, verses_per_book, write_verses_json

SAMPLES = [("Genesis", 1, 1), ("Psalms", 23, 1), ("Isaiah", 53, 6)]


def main() -> None:
    parser = argparse.ArgumentParser(description="Parse Hebrew OT OSIS XML into JSON.")
    parser.add_argument("--source", type=Path, default=DATA_DIR / "HebrewOT", help="Directory of OSIS book files.")
    parser.add_argument("--output", type=Path, default=DATA_DIR / "hebrew_ot.json", help="Output JSON path.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        verses = parse_hebrew_directory(args.source)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    write_verses_json(verses, args.output)
    print(f"Total Hebrew verses parsed: {len(verses)}")
    for book, count in verses_per_book(verses).items():
        print(f"  {book}: {count} verses")

    index = {(v["book"], v["chapter"], v["verse"]): v for v in verses}
    for key in SAMPLES:
        if key in index:
            print(f"  {key[0]} {key[1]}:{key[2]} - {index[key]['text'][:40]}...")
    print(f"Done. Saved to {args.output}")


if __name__ == "__main__":
    main()
