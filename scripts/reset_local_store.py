#!/usr/bin/env python3
"""
Discard the local snapshots so the next read starts again from the seed data.

Usage:
  python scripts/reset_local_store.py [--collection autores|libros]
"""
from __future__ import annotations

import argparse
import sys

from biblioteca.core.config import get_settings
from biblioteca.domain.models import COLLECTIONS
from biblioteca.repositories.local_store import STORAGE_KEYS
from biblioteca.repositories.store_provider import build_local_storage


def main() -> None:
    ap = argparse.ArgumentParser(description="Reset the local fallback store")
    ap.add_argument("--collection", choices=COLLECTIONS, help="Only reset this collection (default: all)")
    args = ap.parse_args()

    settings = get_settings()
    storage = build_local_storage(settings)
    targets = [args.collection] if args.collection else list(COLLECTIONS)
    for collection in targets:
        storage.clear(STORAGE_KEYS[collection])
        print(f"OK: {collection} reset ({STORAGE_KEYS[collection]})")


if __name__ == "__main__":
    try:
        main()
    except Exception as exc:  # pragma: no cover
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
