"""Batch build of the word -> image association store."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Protocol

from associations.store import AssociationStore, normalize_key
from common.errors import (
    ConfigurationError,
    CredentialError,
    FetchError,
    KeyFetchFailure,
    ValidationError,
)
from config.settings import BuildSettings
from pipeline.keys import KeySource

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_RE = re.compile(r"[^\w-]+")
IMAGE_EXTENSION = ".jpg"


class _ImageFetcher(Protocol):
    def search(self, query: str, count: int) -> list[str]:
        """Return image URLs for a query."""

    def download(self, uri: str, local_path: str) -> bool:
        """Save one image locally; False on failure."""


@dataclass
class BuildRun:
    """Counters for one ``BuildOrchestrator.run`` invocation."""

    total_keys: int = 0
    processed_keys: int = 0
    skipped_keys: int = 0
    failed_keys: list[str] = field(default_factory=list)
    failure_reasons: dict[str, str] = field(default_factory=dict)

    @property
    def failed_count(self) -> int:
        return len(self.failed_keys)

    def record_failure(self, key: str, reason: str) -> None:
        if key not in self.failure_reasons:
            self.failed_keys.append(key)
        self.failure_reasons[key] = reason


def sanitize_filename(key: str) -> str:
    return _UNSAFE_FILENAME_RE.sub("_", normalize_key(key)) or "word"


def _free_file_numbers(image_dir: Path, stem: str, existing: list[str]) -> Iterator[int]:
    """Yield file numbers above the highest one stored for ``stem``, skipping files already on disk."""
    suffix_re = re.compile(rf"^{re.escape(stem)}_(\d+){re.escape(IMAGE_EXTENSION)}$")
    highest = 0
    for asset in existing:
        match = suffix_re.match(Path(asset).name)
        if match:
            highest = max(highest, int(match.group(1)))
    taken = set(existing)
    number = highest
    while True:
        number += 1
        candidate = image_dir / f"{stem}_{number}{IMAGE_EXTENSION}"
        if str(candidate) in taken or candidate.exists():
            continue
        yield number


class BuildOrchestrator:
    """Drives one pass over the key source: skip, search, download, persist.

    Keys already holding ``images_per_word`` images are skipped without any
    network call. The store is written after every key that gains images and
    once more when the loop finishes, so an interrupted run keeps completed keys.
    Per-key failures are recorded in the returned ``BuildRun``; only credential,
    configuration, key-source and persistence errors abort the run.

    The associations file is loaded at the start of ``run`` only when the store
    is empty; an injected store that already holds entries is used as is and
    overwrites the file when saved.
    """

    def __init__(
        self,
        settings: BuildSettings,
        client: _ImageFetcher,
        store: AssociationStore | None = None,
        *,
        key_source: KeySource | None = None,
        save_after_each_key: bool = True,
    ) -> None:
        self.settings = settings
        self.client = client
        self.store = store if store is not None else AssociationStore()
        self.key_source = key_source
        self.save_after_each_key = save_after_each_key
        self.last_run: BuildRun | None = None

    def run(self, key_source: KeySource | None = None) -> BuildRun:
        if not self.settings.access_key:
            raise ConfigurationError(
                "Unsplash access key is missing",
                hint=f"Create {self.settings.unsplash_properties_file} with access_key=YOUR_ACCESS_KEY",
            )
        source = key_source or self.key_source
        if source is None:
            raise ValidationError("No key source configured")
        keys = source.keys()
        if not keys:
            raise ValidationError("Key source produced no keys")

        associations_path = Path(self.settings.associations_file)
        if associations_path.exists() and self.store.key_count:
            logger.info("[BUILD] using injected store; not reloading %s", associations_path)
        elif associations_path.exists():
            self.store.load(associations_path)
            logger.info(
                "[BUILD] loaded existing associations words=%s images=%s",
                self.store.key_count,
                self.store.asset_count,
            )

        run = BuildRun(total_keys=len(keys))
        self.last_run = run
        logger.info(
            "[BUILD] processing %s keys (%s images per word)",
            run.total_keys,
            self.settings.images_per_word,
        )
        for index, key in enumerate(keys, start=1):
            try:
                self._process_key(key, index, run)
            except KeyFetchFailure as failure:
                logger.warning("[BUILD] [%s/%s] %r failed: %s", index, run.total_keys, key, failure.reason)
                run.record_failure(failure.key, failure.reason)

        self.store.save(associations_path)
        self._log_summary(run, associations_path)
        return run

    def _process_key(self, key: str, index: int, run: BuildRun) -> None:
        target = self.settings.images_per_word
        existing = self.store.get(key)
        if len(existing) >= target:
            run.skipped_keys += 1
            logger.info(
                "[BUILD] [%s/%s] %r already has %s images; skipping", index, run.total_keys, key, len(existing)
            )
            return

        try:
            urls = self.client.search(key, target)
        except CredentialError:
            raise
        except FetchError as exc:
            raise KeyFetchFailure(key, f"search failed: {exc}") from exc
        if not urls:
            raise KeyFetchFailure(key, "no images found")

        image_dir = Path(self.settings.image_storage_dir)
        stem = sanitize_filename(key)
        downloaded: list[str] = []
        numbers = _free_file_numbers(image_dir, stem, existing)
        for url in urls:
            local_path = str(image_dir / f"{stem}_{next(numbers)}{IMAGE_EXTENSION}")
            if self.client.download(url, local_path):
                downloaded.append(local_path)

        if not downloaded:
            raise KeyFetchFailure(key, "failed to download any images")

        self.store.add(key, downloaded)
        run.processed_keys += 1
        logger.info(
            "[BUILD] [%s/%s] %r downloaded %s/%s images", index, run.total_keys, key, len(downloaded), len(urls)
        )
        if self.save_after_each_key:
            self.store.save(self.settings.associations_file)

    def _log_summary(self, run: BuildRun, associations_path: Path) -> None:
        logger.info(
            "[BUILD] complete processed=%s skipped=%s failed=%s",
            run.processed_keys,
            run.skipped_keys,
            run.failed_count,
        )
        if run.failed_keys:
            logger.info("[BUILD] failed words: %s", ", ".join(run.failed_keys))
        logger.info(
            "[BUILD] saved %s words / %s images to %s",
            self.store.key_count,
            self.store.asset_count,
            associations_path,
        )
