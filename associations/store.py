"""JSON-backed word -> image path association store."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable

from common.errors import PersistenceError

logger = logging.getLogger(__name__)


def normalize_key(key: Any) -> str:
    return str(key or "").strip().lower()


def _valid_reference(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


class AssociationStore:
    """In-memory map of normalized key -> ordered image paths.

    An entry exists only while it holds at least one path. ``save`` rewrites the
    whole file; there is no append mode.
    """

    def __init__(self) -> None:
        self._associations: dict[str, list[str]] = {}

    @classmethod
    def from_file(cls, path: str | Path) -> "AssociationStore":
        store = cls()
        store.load(path)
        return store

    def add(self, key: str, assets: Iterable[Any] | None) -> None:
        """Append valid paths to ``key``. Blank keys and all-invalid paths are a no-op."""
        normalized = normalize_key(key)
        if not normalized or not assets:
            return
        valid = [asset for asset in assets if _valid_reference(asset)]
        if not valid:
            return
        self._associations.setdefault(normalized, []).extend(valid)

    def get(self, key: str) -> list[str]:
        return list(self._associations.get(normalize_key(key), []))

    def has(self, key: str) -> bool:
        normalized = normalize_key(key)
        if not normalized:
            return False
        return bool(self._associations.get(normalized))

    def all_keys(self) -> set[str]:
        return set(self._associations)

    @property
    def key_count(self) -> int:
        return len(self._associations)

    @property
    def asset_count(self) -> int:
        return sum(len(paths) for paths in self._associations.values())

    def clear(self) -> None:
        self._associations.clear()

    def to_dict(self) -> dict[str, Any]:
        return {
            "associations": {key: list(paths) for key, paths in self._associations.items()},
            "metadata": {
                "created": datetime.now(timezone.utc).isoformat(),
                "wordCount": self.key_count,
                "imageCount": self.asset_count,
            },
        }

    def save(self, path: str | Path) -> Path:
        """Write the store and its metadata to ``path`` (temp file, then replace)."""
        if not str(path or "").strip():
            raise ValueError("path is required")
        target = Path(path)
        tmp_path = target.with_name(f"{target.name}.tmp")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
            tmp_path.replace(target)
        except OSError as exc:
            raise PersistenceError(f"Failed to save associations to {target}: {exc}") from exc
        logger.debug("[STORE] saved words=%s images=%s path=%s", self.key_count, self.asset_count, target)
        return target

    def load(self, path: str | Path) -> None:
        """Replace the in-memory map with the contents of ``path``.

        Entries whose value is not a list are skipped; non-string items inside a
        list are dropped.
        """
        if not str(path or "").strip():
            raise ValueError("path is required")
        source = Path(path)
        if not source.exists():
            raise PersistenceError(f"File does not exist: {source}")
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise PersistenceError(f"Failed to read associations file {source}: {exc}") from exc
        except ValueError as exc:
            raise PersistenceError(f"Invalid JSON format in {source}: {exc}") from exc

        if not isinstance(data, dict) or "associations" not in data:
            raise PersistenceError("Invalid associations file format: missing 'associations' key")
        raw = data["associations"]
        if not isinstance(raw, dict):
            raise PersistenceError("Invalid associations file format: 'associations' must be an object")

        loaded: dict[str, list[str]] = {}
        skipped = 0
        for key, value in raw.items():
            normalized = normalize_key(key)
            if not normalized or not isinstance(value, list):
                skipped += 1
                continue
            paths = [item for item in value if _valid_reference(item)]
            if paths:
                loaded.setdefault(normalized, []).extend(paths)
        self._associations = loaded
        if skipped:
            logger.warning("[STORE] skipped %s malformed entries in %s", skipped, source)
        logger.debug("[STORE] loaded words=%s images=%s path=%s", self.key_count, self.asset_count, source)

    def verify_assets(self) -> bool:
        """True when every referenced file exists on disk."""
        for paths in self._associations.values():
            for asset in paths:
                if not Path(asset).exists():
                    return False
        return True

    def get_missing_assets(self) -> list[str]:
        missing: list[str] = []
        for paths in self._associations.values():
            for asset in paths:
                if not Path(asset).exists():
                    missing.append(asset)
        return missing
