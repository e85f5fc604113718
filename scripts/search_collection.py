from __future__ import annotations

import argparse
import json
import os
import sys

CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from schemaless.errors import SchemalessError
from schemaless.services.search_service import SearchService


def _sort_clause(value: str) -> dict:
    # "field" or "field:desc"
    item, _, order = value.partition(":")
    return {"item": item, "order": order or "asc"}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Search a collection")
    parser.add_argument("--collection", "-c", required=True)
    parser.add_argument("-q", "--query", default=None, help="Query string (default *:*)")
    parser.add_argument("--fq", action="append", default=[], help="Filter query; repeatable")
    parser.add_argument("--facet", action="append", default=[], help="Facet field; repeatable")
    parser.add_argument("--sort", action="append", default=[], type=_sort_clause, help="field[:asc|desc]; repeatable")
    parser.add_argument("--start", type=int, default=0)
    parser.add_argument("--rows", type=int, default=None)
    args = parser.parse_args(argv)

    try:
        res = SearchService().search(
            args.collection,
            query=args.query,
            filter_queries=args.fq,
            facet_fields=args.facet,
            sort_clauses=args.sort,
            start=args.start,
            rows=args.rows,
        )
    except (SchemalessError, ValueError) as e:
        print(f"Search failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(res, ensure_ascii=False, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
