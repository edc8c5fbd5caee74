#!/usr/bin/env python3
from __future__ import annotations

import sys

from common.errors import IcandyError
from config.credentials import load_access_key
from config.settings import DEFAULT_UNSPLASH_PROPERTIES_FILE
from unsplash.client import UnsplashClient


def main() -> int:
    query = " ".join(sys.argv[1:]).strip()
    if not query:
        print("Usage: scripts/unsplash_smoke.py <query>")
        return 1
    try:
        client = UnsplashClient(access_key=load_access_key(DEFAULT_UNSPLASH_PROPERTIES_FILE))
        urls = client.search(query, 5)
    except IcandyError as exc:
        print(f"error: {exc}")
        return 1
    print(f"query={query!r} results={len(urls)} requests_in_window={client.request_count}")
    for idx, url in enumerate(urls, start=1):
        print(f"{idx}. {url}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
