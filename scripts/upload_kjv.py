#!/usr/bin/env python3
"""
Upload the KJV vector batches (output/batch_info.json) to the Milvus KJV collection.

Run from project root (needs MILVUS_URI and MILVUS_TOKEN in .env):

    python scripts/upload_kjv.py
    python scripts/upload_kjv.py --collection kjv_test
"""

import argparse
import logging
import sys
from pathlib import Path

# Project root on path so "app" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.core.config import KJV_COLLECTION, OUTPUT_DIR
from app.services.ingestion_service import upload_kjv_batches


def main() -> None:
    parser = argparse.ArgumentParser(description="Upload KJV vector batches to Milvus.")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="Directory holding batch_info.json.")
    parser.add_argument("--collection", default=KJV_COLLECTION, help="Target collection name.")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    try:
        uploaded = upload_kjv_batches(args.output_dir, args.collection)
    except FileNotFoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    if not uploaded:
        print("Nothing uploaded (see log for dimension mismatch or empty batches).")
        sys.exit(1)
    print(f"Done. Uploaded {uploaded} vectors to {args.collection}")


if __name__ == "__main__":
    main()
