# dealbot/cli.py
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from .catalog import load_catalog
from .config import CATALOG_PATH
from .matching import find_scored_matches
from .normalize import extract_search_terms


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Match a free-text query against the deal catalog.")
    ap.add_argument("query", help="Query text, e.g. 'cheap pizza near me'")
    ap.add_argument("--catalog", type=Path, default=CATALOG_PATH,
                    help="Path to the catalog JSON file")
    ap.add_argument("--scores", action="store_true",
                    help="Print the match score next to each deal")
    args = ap.parse_args(argv)

    catalog = load_catalog(args.catalog)
    terms = extract_search_terms(args.query)
    print(f"Terms: {', '.join(terms) if terms else '<none>'}")

    matches = find_scored_matches(args.query, catalog)
    if not matches:
        print("No matching deals.")
        return 1

    for rank, m in enumerate(matches, start=1):
        line = f"{rank}. [{m.entry.id}] {m.entry.name} - {m.entry.deal}"
        if args.scores:
            line += f"  (score={m.score:.3f})"
        print(line)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
