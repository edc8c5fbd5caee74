"""Unsplash credential loading."""

from __future__ import annotations

import os
from pathlib import Path

from common.errors import ConfigurationError

_ACCESS_KEY_ENV = "UNSPLASH_ACCESS_KEY"


def read_properties(path: Path) -> dict[str, str]:
    """Parse a ``key=value`` properties file; ``#`` and ``!`` start comments."""
    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        for sep in ("=", ":"):
            if sep in line:
                key, value = line.split(sep, 1)
                values[key.strip()] = value.strip()
                break
    return values


def load_access_key(properties_path: str | None) -> str:
    """Return the Unsplash access key from the environment or the properties file."""
    env_key = (os.environ.get(_ACCESS_KEY_ENV) or "").strip()
    if env_key:
        return env_key

    if not properties_path:
        raise ConfigurationError(
            "Configuration missing 'unsplashPropertiesFile'",
            hint=f"Set build.unsplashPropertiesFile or export {_ACCESS_KEY_ENV}.",
        )
    path = Path(os.path.expanduser(properties_path))
    hint = f"Create a file at {path} with:\n  access_key=YOUR_ACCESS_KEY"
    if not path.exists():
        raise ConfigurationError(f"Unsplash credentials file not found: {path}", hint=hint)
    try:
        props = read_properties(path)
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read Unsplash credentials from {path}: {exc}", hint=hint) from exc

    access_key = props.get("access_key", "").strip()
    if not access_key:
        raise ConfigurationError(f"access_key not found in {path}", hint=hint)
    return access_key
