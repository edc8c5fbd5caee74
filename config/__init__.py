"""Build configuration and credentials."""

from config.credentials import load_access_key
from config.settings import BuildSettings, load_build_settings, validate_config

__all__ = ["BuildSettings", "load_access_key", "load_build_settings", "validate_config"]
