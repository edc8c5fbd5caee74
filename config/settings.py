"""Build settings: defaults, JSON loading and validation."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from common.errors import ConfigurationError
from config.credentials import load_access_key

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = os.environ.get("ICANDY_CONFIG_PATH", "~/.icandy/config.json")

DEFAULT_IMAGES_PER_WORD = 5
DEFAULT_MAX_RETRIES = 3
DEFAULT_IMAGE_STORAGE_DIR = "data/images"
DEFAULT_ASSOCIATIONS_FILE = "data/associations.json"
DEFAULT_STOP_WORDS_FILE = "data/stopwords.txt"
DEFAULT_UNSPLASH_PROPERTIES_FILE = "~/.icandy/unsplash.properties"


@dataclass(frozen=True)
class BuildSettings:
    images_per_word: int = DEFAULT_IMAGES_PER_WORD
    max_retries: int = DEFAULT_MAX_RETRIES
    image_storage_dir: str = DEFAULT_IMAGE_STORAGE_DIR
    associations_file: str = DEFAULT_ASSOCIATIONS_FILE
    stop_words_file: str | None = DEFAULT_STOP_WORDS_FILE
    unsplash_properties_file: str = DEFAULT_UNSPLASH_PROPERTIES_FILE
    access_key: str | None = None


def expand_path(path: str) -> str:
    return os.path.expanduser(str(path))


def load_config(path: str) -> dict[str, Any]:
    resolved = Path(expand_path(path))
    if not resolved.exists():
        raise ConfigurationError(
            f"Configuration file not found: {resolved}",
            hint=f"Create a configuration file at {resolved} with a 'build' section.",
        )
    try:
        with resolved.open("r", encoding="utf-8") as f:
            config = json.load(f)
    except (OSError, ValueError) as exc:
        raise ConfigurationError(f"Failed to parse configuration file {resolved}: {exc}") from exc
    if not isinstance(config, dict):
        raise ConfigurationError(f"Configuration file {resolved} must contain a JSON object")
    return config


def validate_config(config):
    errors = []
    if not isinstance(config, dict):
        return ["config must be a JSON object"]

    build = config.get("build")
    if build is None:
        return errors
    if not isinstance(build, dict):
        return ["build must be an object"]

    images_per_word = build.get("imagesPerWord")
    if images_per_word is not None:
        if not _is_int(images_per_word):
            errors.append("build.imagesPerWord must be an integer")
        elif images_per_word <= 0:
            errors.append("build.imagesPerWord must be > 0")

    max_retries = build.get("maxRetries")
    if max_retries is not None:
        if not _is_int(max_retries):
            errors.append("build.maxRetries must be an integer")
        elif max_retries < 0:
            errors.append("build.maxRetries must be >= 0")

    for name in ("imageStorageDir", "associationsFile", "stopWordsFile", "unsplashPropertiesFile"):
        value = build.get(name)
        if value is not None and (not isinstance(value, str) or not value.strip()):
            errors.append(f"build.{name} must be a non-empty string")

    return errors


def load_build_settings(path: str | None = None, *, require_credentials: bool = True) -> BuildSettings:
    """Load the ``build`` section of the config file, falling back to defaults.

    Invalid values are logged and replaced by their default. When
    ``require_credentials`` is set, a missing access key is a
    ``ConfigurationError``.
    """
    config = load_config(path or DEFAULT_CONFIG_PATH)
    for problem in validate_config(config):
        logger.warning("[CONFIG] %s; using default", problem)

    build = config.get("build")
    if not isinstance(build, dict):
        build = {}

    images_per_word = build.get("imagesPerWord")
    if not (_is_int(images_per_word) and images_per_word > 0):
        images_per_word = DEFAULT_IMAGES_PER_WORD

    max_retries = build.get("maxRetries")
    if not (_is_int(max_retries) and max_retries >= 0):
        max_retries = DEFAULT_MAX_RETRIES

    settings = BuildSettings(
        images_per_word=images_per_word,
        max_retries=max_retries,
        image_storage_dir=expand_path(_string_or(build.get("imageStorageDir"), DEFAULT_IMAGE_STORAGE_DIR)),
        associations_file=expand_path(_string_or(build.get("associationsFile"), DEFAULT_ASSOCIATIONS_FILE)),
        stop_words_file=expand_path(_string_or(build.get("stopWordsFile"), DEFAULT_STOP_WORDS_FILE)),
        unsplash_properties_file=_string_or(
            build.get("unsplashPropertiesFile"), DEFAULT_UNSPLASH_PROPERTIES_FILE
        ),
    )
    if not require_credentials:
        return settings
    access_key = load_access_key(settings.unsplash_properties_file)
    return replace(settings, access_key=access_key)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _string_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default
