#!/usr/bin/env python3
"""
Parse the Greek NT XML files into data/greek_nt.json.

Run from project root:

    python scripts/parse_greek_xml.py
    python scripts/parse_greek_xml.py --source data/GreekNT --output data/greek_nt.json
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
from app.ingest.xml_parsers import parse_greek_directory, verses_per_book, write_verses_json

SAMPLES = [("John", 1, 1), ("John", 3, 16), ("Romans", 8, 28)]


def main() -> None:
    parser = argparse.ArgumentParser(description="Parse Greek NT XML into JSON.")
    parser.add_argument("--source", type=Path, default=DATA_DIR / "GreekNT", help="Directory of book XML files.")
    parser.add_argument("--output", type=Path, default=DATA_DIR / "greek_nt.json", help="Output JSON path.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        verses = parse_greek_directory(args.source)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)

    write_verses_json(verses, args.output)
    print(f"Total Greek verses parsed: {len(verses)}")
    for book, count in verses_per_book(verses).items():
        print(f"  {book}: {count} verses")

    index = {(v["book"], v["chapter"], v["verse"]): v for v in verses}
    for key in SAMPLES:
        if key in index:
            print(f"  {key[0]} {key[1]}:{key[2]} - {index[key]['text'][:60]}...")
    print(f"Done. Saved to {args.output}")


if __name__ == "__main__":
    main()
