#!/usr/bin/env python3
"""
Build the word -> image association store for a text script.
- Content words are read from the script, minus short words and stop words.
- Words that already have enough images are skipped (incremental rebuilds).
- Images come from Unsplash; the hourly request budget is respected.
- Associations are saved after every completed word.
"""

from __future__ import annotations

import argparse
import logging
import sys

from associations.store import AssociationStore
from common.errors import ConfigurationError, IcandyError
from common.logging_setup import configure_logging
from config.settings import DEFAULT_CONFIG_PATH, load_build_settings
from pipeline.keys import TextFileKeySource
from pipeline.orchestrator import BuildOrchestrator
from unsplash.client import UnsplashClient

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="icandy-build",
        description="Download Unsplash images for the content words of a text script.",
    )
    parser.add_argument("text_file", help="Path to the text script to process")
    parser.add_argument(
        "--config",
        default=DEFAULT_CONFIG_PATH,
        help=f"Path to the configuration JSON file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument("--log-dir", default="logs", help="Directory for build.log ('' disables file logging)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_dir or None, verbose=args.verbose)

    if not args.text_file.strip():
        logger.error("Text file path cannot be empty")
        return 1

    try:
        logger.info("Loading configuration from: %s", args.config)
        settings = load_build_settings(args.config)
        client = UnsplashClient(access_key=settings.access_key, max_retries=settings.max_retries)
        orchestrator = BuildOrchestrator(
            settings,
            client,
            AssociationStore(),
            key_source=TextFileKeySource(args.text_file, stop_words_path=settings.stop_words_file),
        )
        run = orchestrator.run()
    except KeyboardInterrupt:
        logger.error("=== Build Interrupted === completed words were saved")
        return 130
    except IcandyError as exc:
        logger.error("=== Build Failed === %s", exc)
        hint = getattr(exc, "hint", None)
        if hint:
            logger.error("Suggestion: %s", hint)
        elif isinstance(exc, ConfigurationError):
            logger.error("Suggestion: check the configuration file at %s", args.config)
        return 1

    logger.info(
        "=== Build Complete === processed=%s skipped=%s failed=%s",
        run.processed_keys,
        run.skipped_keys,
        run.failed_count,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
