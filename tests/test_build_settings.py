from __future__ import annotations

import json
import os

import pytest

from common.errors import ConfigurationError
from config import settings as settings_module
from config.credentials import load_access_key, read_properties
from config.settings import (
    DEFAULT_IMAGES_PER_WORD,
    DEFAULT_MAX_RETRIES,
    load_build_settings,
    load_config,
    validate_config,
)


def _write_config(write_file, build: dict, properties: str | None = "access_key=file-key\n"):
    props_path = None
    if properties is not None:
        props_path = write_file("unsplash.properties", properties)
        build = {"unsplashPropertiesFile": str(props_path), **build}
    return write_file("config.json", json.dumps({"build": build}))


def test_load_build_settings_reads_build_section(write_file, tmp_path) -> None:
    config_path = _write_config(
        write_file,
        {
            "imagesPerWord": 2,
            "maxRetries": 5,
            "imageStorageDir": str(tmp_path / "imgs"),
            "associationsFile": str(tmp_path / "assoc.json"),
            "stopWordsFile": str(tmp_path / "stop.txt"),
        },
    )

    settings = load_build_settings(str(config_path))

    assert settings.images_per_word == 2
    assert settings.max_retries == 5
    assert settings.image_storage_dir == str(tmp_path / "imgs")
    assert settings.associations_file == str(tmp_path / "assoc.json")
    assert settings.stop_words_file == str(tmp_path / "stop.txt")
    assert settings.access_key == "file-key"


def test_missing_values_fall_back_to_defaults(write_file) -> None:
    config_path = _write_config(write_file, {})

    settings = load_build_settings(str(config_path))

    assert settings.images_per_word == DEFAULT_IMAGES_PER_WORD == 5
    assert settings.max_retries == DEFAULT_MAX_RETRIES == 3
    assert settings.image_storage_dir.endswith(os.path.join("data", "images"))


def test_invalid_values_are_logged_and_replaced(write_file, caplog) -> None:
    config_path = _write_config(write_file, {"imagesPerWord": 0, "maxRetries": "many"})

    with caplog.at_level("WARNING"):
        settings = load_build_settings(str(config_path))

    assert settings.images_per_word == DEFAULT_IMAGES_PER_WORD
    assert settings.max_retries == DEFAULT_MAX_RETRIES
    assert "build.imagesPerWord must be > 0" in caplog.text
    assert "build.maxRetries must be an integer" in caplog.text


def test_paths_expand_user_home(write_file, monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    config_path = _write_config(write_file, {"imageStorageDir": "~/pictures"})

    settings = load_build_settings(str(config_path))

    assert settings.image_storage_dir == str(tmp_path / "pictures")


def test_require_credentials_false_skips_key_lookup(write_file) -> None:
    config_path = write_file("config.json", json.dumps({"build": {"imagesPerWord": 1}}))

    settings = load_build_settings(str(config_path), require_credentials=False)

    assert settings.images_per_word == 1
    assert settings.access_key is None


def test_missing_config_file_has_hint(tmp_path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_config(str(tmp_path / "missing.json"))

    assert excinfo.value.hint


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_unparseable_config_is_configuration_error(write_file, content) -> None:
    path = write_file("config.json", content)

    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_default_config_path_is_used_when_none_given(monkeypatch, write_file) -> None:
    config_path = write_file("default.json", json.dumps({"build": {}}))
    monkeypatch.setattr(settings_module, "DEFAULT_CONFIG_PATH", str(config_path))

    settings = load_build_settings(require_credentials=False)

    assert settings.images_per_word == DEFAULT_IMAGES_PER_WORD


def test_validate_config_reports_each_problem() -> None:
    errors = validate_config(
        {
            "build": {
                "imagesPerWord": True,
                "maxRetries": -1,
                "imageStorageDir": "",
                "associationsFile": 7,
            }
        }
    )

    assert errors == [
        "build.imagesPerWord must be an integer",
        "build.maxRetries must be >= 0",
        "build.imageStorageDir must be a non-empty string",
        "build.associationsFile must be a non-empty string",
    ]


def test_validate_config_accepts_missing_build_section() -> None:
    assert validate_config({}) == []
    assert validate_config({"build": "nope"}) == ["build must be an object"]


def test_read_properties_handles_comments_and_separators(write_file) -> None:
    path = write_file(
        "unsplash.properties",
        "# Unsplash credentials\n! legacy comment\n\naccess_key = abc123\nsecret_key:shh\n",
    )

    assert read_properties(path) == {"access_key": "abc123", "secret_key": "shh"}


def test_environment_key_wins_over_properties_file(monkeypatch, write_file) -> None:
    path = write_file("unsplash.properties", "access_key=file-key\n")
    monkeypatch.setenv("UNSPLASH_ACCESS_KEY", "env-key")

    assert load_access_key(str(path)) == "env-key"


def test_missing_credentials_file_has_creation_hint(tmp_path) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_access_key(str(tmp_path / "unsplash.properties"))

    assert "access_key=YOUR_ACCESS_KEY" in excinfo.value.hint


@pytest.mark.parametrize("content", ["", "secret_key=abc\n", "access_key=   \n"])
def test_properties_without_access_key_is_configuration_error(write_file, content) -> None:
    path = write_file("unsplash.properties", content)

    with pytest.raises(ConfigurationError) as excinfo:
        load_access_key(str(path))

    assert "access_key=YOUR_ACCESS_KEY" in excinfo.value.hint


def test_missing_properties_path_without_env_key() -> None:
    with pytest.raises(ConfigurationError):
        load_access_key(None)
