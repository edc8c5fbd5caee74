from __future__ import annotations

import pytest

from common.errors import ValidationError
from pipeline.keys import StaticKeySource, TextFileKeySource, extract_content_words, load_stop_words


def test_extract_content_words_lowercases_dedupes_and_filters() -> None:
    words = extract_content_words(
        "The quick brown fox jumps over the lazy dog. The FOX again!",
        {"the", "over"},
    )

    assert words == ["quick", "brown", "fox", "jumps", "lazy", "dog", "again"]


def test_extract_content_words_drops_short_words() -> None:
    assert extract_content_words("I am at a big sea", set()) == ["big", "sea"]


def test_extract_content_words_splits_on_punctuation() -> None:
    assert extract_content_words("rock'n'roll, hello-world;test", set()) == ["rock", "roll", "hello", "world", "test"]


def test_text_file_source_reads_words_with_stop_words(write_file) -> None:
    text = write_file("script.txt", "Hello world! Hello again, and the world.")
    stop = write_file("stopwords.txt", "the\nAND\n\n")

    source = TextFileKeySource(text, stop_words_path=stop)

    assert source.keys() == ["hello", "world", "again"]


def test_missing_stop_words_file_means_no_filtering(write_file, tmp_path, caplog) -> None:
    text = write_file("script.txt", "the mountain")

    with caplog.at_level("WARNING"):
        keys = TextFileKeySource(text, stop_words_path=tmp_path / "missing.txt").keys()

    assert keys == ["the", "mountain"]
    assert "stop words" in caplog.text


def test_load_stop_words_without_path_is_empty() -> None:
    assert load_stop_words(None) == set()


def test_missing_text_file(tmp_path) -> None:
    with pytest.raises(ValidationError, match="not found"):
        TextFileKeySource(tmp_path / "missing.txt").keys()


def test_directory_is_not_a_text_file(tmp_path) -> None:
    with pytest.raises(ValidationError, match="not a file"):
        TextFileKeySource(tmp_path).keys()


@pytest.mark.parametrize("content", ["", "   \n\t"])
def test_empty_text_file(write_file, content) -> None:
    path = write_file("empty.txt", content)

    with pytest.raises(ValidationError, match="empty"):
        TextFileKeySource(path).keys()


def test_text_with_only_stop_words_and_short_words(write_file) -> None:
    text = write_file("script.txt", "The and a of it.")
    stop = write_file("stopwords.txt", "the\nand\n")

    with pytest.raises(ValidationError, match="No content words"):
        TextFileKeySource(text, stop_words_path=stop).keys()


def test_undecodable_text_file(tmp_path) -> None:
    path = tmp_path / "binary.txt"
    path.write_bytes(b"\xff\xfe\xfa\x00bad")

    with pytest.raises(ValidationError, match="unreadable"):
        TextFileKeySource(path).keys()


def test_static_source_normalizes_and_dedupes() -> None:
    assert StaticKeySource(["Hello", " world ", "HELLO", "", None]).keys() == ["hello", "world"]


def test_static_source_without_keys() -> None:
    with pytest.raises(ValidationError):
        StaticKeySource([" ", ""]).keys()
