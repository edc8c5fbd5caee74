"""Key sources: ordered, de-duplicated content words for a build run."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable, Protocol

from common.errors import ValidationError

logger = logging.getLogger(__name__)

_WORD_RE = re.compile(r"\b\w+\b")
MIN_WORD_LENGTH = 3


class KeySource(Protocol):
    def keys(self) -> list[str]:
        """Return the ordered, de-duplicated keys to build."""


def _dedupe(words: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    ordered: list[str] = []
    for word in words:
        normalized = str(word or "").strip().lower()
        if not normalized or normalized in seen:
            continue
        seen.add(normalized)
        ordered.append(normalized)
    return ordered


class StaticKeySource:
    """Keys supplied directly by the caller."""

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys = _dedupe(keys)

    def keys(self) -> list[str]:
        if not self._keys:
            raise ValidationError("No keys to process")
        return list(self._keys)


def load_stop_words(path: str | Path | None) -> set[str]:
    """Read one stop word per line. A missing or unreadable file yields an empty set."""
    if not path:
        return set()
    try:
        lines = Path(path).read_text(encoding="utf-8").splitlines()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning("[KEYS] could not load stop words file %s: %s; continuing unfiltered", path, exc)
        return set()
    return {line.strip().lower() for line in lines if line.strip()}


def extract_content_words(text: str, stop_words: set[str] | None = None) -> list[str]:
    """Lower-cased words in first-seen order, minus short words and stop words."""
    stop = stop_words or set()
    words = (match.group().lower() for match in _WORD_RE.finditer(text or ""))
    return [word for word in _dedupe(words) if len(word) >= MIN_WORD_LENGTH and word not in stop]


class TextFileKeySource:
    """Content words read from a UTF-8 text script."""

    def __init__(self, text_path: str | Path, *, stop_words_path: str | Path | None = None) -> None:
        self.text_path = Path(text_path)
        self.stop_words_path = stop_words_path

    def keys(self) -> list[str]:
        path = self.text_path
        if not path.exists():
            raise ValidationError(f"Text file not found: {path}")
        if not path.is_file():
            raise ValidationError(f"Path is not a file: {path}")
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ValidationError(f"Text file is unreadable: {path}: {exc}") from exc
        if not content.strip():
            raise ValidationError(f"Text file is empty: {path}")

        words = extract_content_words(content, load_stop_words(self.stop_words_path))
        if not words:
            raise ValidationError(f"No content words found in {path} after filtering stop words")
        logger.info("[KEYS] text=%s chars=%s content_words=%s", path, len(content), len(words))
        return words
