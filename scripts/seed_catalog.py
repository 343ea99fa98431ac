#!/usr/bin/env python3
"""
Create the schema and load the bundled catalog (products, categories, articles).

Usage:
  python scripts/seed_catalog.py [--force] [--file path/to/catalog.json]
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from storefront.db.create_tables import create_all
from storefront.repositories.catalog_seed import load, seed_catalog
from storefront.repositories.sql_repository import SQLRepository


def main() -> None:
    ap = argparse.ArgumentParser(description="Seed the storefront catalog")
    ap.add_argument("--force", action="store_true", help="Replace existing products with the seed data")
    ap.add_argument("--file", help="Alternative catalog JSON file")
    args = ap.parse_args()

    data = None
    if args.file:
        path = Path(args.file)
        if not path.exists():
            raise SystemExit(f"File not found: {path}")
        data = load(path)

    create_all()
    counts = seed_catalog(SQLRepository(), data=data, force=args.force)
    print("OK: catalog seeded")
    for name, count in counts.items():
        print(f"  {name}: {count}")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
