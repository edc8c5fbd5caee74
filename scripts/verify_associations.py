#!/usr/bin/env python3
"""Report image files referenced by an associations file that are missing on disk."""
from __future__ import annotations

import sys

from associations.store import AssociationStore
from common.errors import PersistenceError
from config.settings import DEFAULT_ASSOCIATIONS_FILE


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    path = args[0] if args else DEFAULT_ASSOCIATIONS_FILE
    try:
        store = AssociationStore.from_file(path)
    except PersistenceError as exc:
        print(f"error: {exc}")
        return 1

    missing = store.get_missing_assets()
    print(f"path={path} words={store.key_count} images={store.asset_count} missing={len(missing)}")
    for asset in missing:
        print(f"  missing: {asset}")
    return 1 if missing else 0


if __name__ == "__main__":
    raise SystemExit(main())
