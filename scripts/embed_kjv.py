#!/usr/bin/env python3
"""
Embed the KJV (data/en_kjv.json) into vector batch files under output/.

Run from project root (needs OPENAI_API_KEY in .env):

    python scripts/embed_kjv.py
    python scripts/upload_kjv.py   # then push the batches to Milvus
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import DATA_DIR, OUTPUT_DIR
from app.services.ingestion_service import embed_kjv_to_batches


def main() -> None:
    parser = argparse.ArgumentParser(description="Embed KJV verses into batch files.")
    parser.add_argument("--input", type=Path, default=DATA_DIR / "en_kjv.json", help="KJV JSON path.")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Where batch files are written.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    info = embed_kjv_to_batches(args.input, args.output_dir)
    print(f"Done. Created {info.total_vectors} vectors in {info.total_batches} batches under {args.output_dir}")


if __name__ == "__main__":
    main()
