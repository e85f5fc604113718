from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from schemaless.documents.creators import detect_format
from schemaless.errors import SchemalessError
from schemaless.services.indexing_service import IndexingService
from schemaless.settings import settings


def main(argv=None) -> int:
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(message)s")

    parser = argparse.ArgumentParser(description="Index a JSON, CSV or XML file into a collection")
    parser.add_argument("path", type=Path, help="File to index")
    parser.add_argument("--collection", "-c", required=True, help="Target collection (index)")
    parser.add_argument("--format", "-f", choices=["json", "csv", "xml"], help="Input format (default: from suffix)")
    parser.add_argument("--batch-size", type=int, default=None, help="Documents per bulk request")
    args = parser.parse_args(argv)

    try:
        fmt = args.format or detect_format(args.path)
        text = args.path.read_text(encoding="utf-8-sig")
        service = IndexingService(batch_size=args.batch_size)
        indexed = service.index_text(args.collection, fmt, text)
    except (OSError, SchemalessError) as e:
        print(f"Indexing failed: {e}", file=sys.stderr)
        return 1

    print(f"Indexed: {indexed}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
