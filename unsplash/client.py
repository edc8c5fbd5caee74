"""Unsplash API client for image search and image downloads."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, TypeVar
from urllib.parse import urljoin

import requests
from requests.adapters import HTTPAdapter

from common.errors import CredentialError, FetchError, RateLimitError, TransientIOError
from unsplash.rate_limit import HourlyRequestWindow

logger = logging.getLogger(__name__)

T = TypeVar("T")

UNSPLASH_BASE_URL = os.getenv("UNSPLASH_BASE_URL", "https://api.unsplash.com")
UNSPLASH_USER_AGENT = os.getenv("UNSPLASH_USER_AGENT", "icandy-build/0.1")
UNSPLASH_TIMEOUT_SECONDS = float(os.getenv("UNSPLASH_TIMEOUT_SECONDS", "30"))

SEARCH_ENDPOINT = "/search/photos"
MAX_PER_PAGE = 30
MAX_RATE_LIMIT_ATTEMPTS = 2
RATE_LIMIT_RETRY_DELAY_SECONDS = 5.0
TRANSIENT_RETRY_DELAY_SECONDS = 1.0
DOWNLOAD_CHUNK_SIZE = 8192

_RATE_LIMIT_STATUSES = frozenset({403, 429})
_IMAGE_SIZE_FALLBACKS = ("regular", "full", "small", "raw")


class UnsplashClient:
    """Searches Unsplash and downloads the results, one request at a time.

    ``search`` and ``download`` share ``_call_with_retry``: authentication
    failures are raised at once, rate-limit responses get a linear backoff and
    fail fast after ``MAX_RATE_LIMIT_ATTEMPTS``, anything else is retried up to
    ``max_retries`` attempts with a short fixed delay.
    """

    def __init__(
        self,
        *,
        access_key: str | None = None,
        max_retries: int = 3,
        timeout_sec: float = UNSPLASH_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
        rate_window: HourlyRequestWindow | None = None,
        sleep: Callable[[float], None] = time.sleep,
        rate_limit_retry_delay: float = RATE_LIMIT_RETRY_DELAY_SECONDS,
        transient_retry_delay: float = TRANSIENT_RETRY_DELAY_SECONDS,
        image_size: str = "regular",
    ) -> None:
        key = access_key if access_key is not None else os.environ.get("UNSPLASH_ACCESS_KEY")
        self.access_key = (key or "").strip() or None
        self.max_retries = max(0, int(max_retries))
        self.timeout_sec = timeout_sec
        self.base_url = UNSPLASH_BASE_URL.rstrip("/") + "/"
        self.image_size = image_size
        self.rate_limit_retry_delay = float(rate_limit_retry_delay)
        self.transient_retry_delay = float(transient_retry_delay)
        self._window = rate_window or HourlyRequestWindow()
        self._sleep = sleep
        if session is None:
            session = requests.Session()
            # Retries are owned by _call_with_retry, not by urllib3.
            adapter = HTTPAdapter(max_retries=0)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self._session = session

    @property
    def request_count(self) -> int:
        return self._window.request_count

    def reset_rate_limit_tracking(self) -> None:
        self._window.reset()

    def search(self, query: str, count: int) -> list[str]:
        """Return up to ``count`` image URLs for ``query`` in provider order."""
        term = str(query or "").strip()
        if not term or count is None or int(count) <= 0:
            return []
        if not self.access_key:
            raise CredentialError("Unsplash access key is not set")

        wanted = int(count)
        per_page = min(wanted, MAX_PER_PAGE)
        self._window.acquire()
        urls = self._call_with_retry(lambda: self._search_once(term, per_page, wanted))
        self._window.record()
        logger.info(
            "[UNSPLASH] search query=%r results=%s requests_in_window=%s",
            term,
            len(urls),
            self._window.request_count,
        )
        return urls

    def download(self, uri: str, local_path: str | Path) -> bool:
        """Stream ``uri`` to ``local_path``; return False instead of raising on failure."""
        url = str(uri or "").strip()
        target = str(local_path or "").strip()
        if not url or not target:
            return False

        path = Path(target)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            return self._call_with_retry(lambda: self._download_once(url, path))
        except (FetchError, OSError) as exc:
            logger.warning("[UNSPLASH] download failed url=%s error=%s", url, exc)
            return False

    def _call_with_retry(self, fn: Callable[[], T]) -> T:
        allowed = max(1, self.max_retries)
        attempts = 0
        rate_limit_attempts = 0
        last_error: FetchError | None = None
        while attempts < allowed:
            try:
                return fn()
            except CredentialError:
                raise
            except RateLimitError as exc:
                attempts += 1
                rate_limit_attempts += 1
                last_error = exc
                if rate_limit_attempts >= MAX_RATE_LIMIT_ATTEMPTS:
                    logger.error(
                        "[UNSPLASH] rate limit exceeded after %s attempts; giving up "
                        "(Unsplash allows %s requests per hour)",
                        rate_limit_attempts,
                        self._window.limit,
                    )
                    raise
                if attempts < allowed:
                    delay = self.rate_limit_retry_delay * rate_limit_attempts
                    logger.warning("[UNSPLASH] rate limit hit, waiting %.0fs before retry", delay)
                    self._sleep(delay)
            except TransientIOError as exc:
                attempts += 1
                last_error = exc
                if attempts < allowed:
                    logger.info("[UNSPLASH] retry attempt=%s/%s error=%s", attempts, allowed, exc)
                    self._sleep(self.transient_retry_delay)
        if last_error:
            raise last_error
        raise TransientIOError(f"operation failed after {allowed} attempts")

    def _search_once(self, term: str, per_page: int, wanted: int) -> list[str]:
        response = self._get(
            urljoin(self.base_url, SEARCH_ENDPOINT.lstrip("/")),
            params={"query": term, "per_page": per_page},
            headers={
                "Authorization": f"Client-ID {self.access_key}",
                "Accept-Version": "v1",
                "User-Agent": UNSPLASH_USER_AGENT,
            },
        )
        try:
            _raise_for_status(response)
            try:
                payload = response.json()
            except ValueError as exc:
                raise TransientIOError(f"Unsplash returned invalid JSON: {exc}") from exc
        finally:
            response.close()

        if not isinstance(payload, dict):
            raise TransientIOError("Unsplash search response is not a JSON object")
        results = payload.get("results") or []
        if not isinstance(results, list):
            raise TransientIOError("Unsplash search response 'results' is not a list")

        urls: list[str] = []
        for result in results:
            url = self._pick_image_url(result)
            if url:
                urls.append(url)
            if len(urls) >= wanted:
                break
        return urls

    def _pick_image_url(self, result: Any) -> str | None:
        if not isinstance(result, dict):
            return None
        sizes = result.get("urls")
        if not isinstance(sizes, dict):
            return None
        for size in (self.image_size, *_IMAGE_SIZE_FALLBACKS):
            value = sizes.get(size)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    def _download_once(self, url: str, path: Path) -> bool:
        response = self._get(url, stream=True, headers={"User-Agent": UNSPLASH_USER_AGENT})
        tmp_path = path.with_name(f".{path.name}.part")
        try:
            _raise_for_status(response)
            with tmp_path.open("wb") as fh:
                for chunk in response.iter_content(chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        fh.write(chunk)
            tmp_path.replace(path)
        except requests.RequestException as exc:
            tmp_path.unlink(missing_ok=True)
            raise TransientIOError(f"download interrupted: {exc}") from exc
        except BaseException:
            tmp_path.unlink(missing_ok=True)
            raise
        finally:
            response.close()
        return True

    def _get(self, url: str, **kwargs: Any) -> requests.Response:
        try:
            return self._session.get(url, timeout=self.timeout_sec, **kwargs)
        except requests.RequestException as exc:
            raise TransientIOError(f"request to {url} failed: {exc}") from exc


def _raise_for_status(response: requests.Response) -> None:
    status = int(response.status_code)
    if 200 <= status < 300:
        return
    if status == 401:
        raise CredentialError("Unauthorized: invalid Unsplash access key", status_code=status)
    if status in _RATE_LIMIT_STATUSES:
        raise RateLimitError(f"Unsplash API rate limit exceeded (status {status})", status_code=status)
    raise TransientIOError(f"request failed with status {status}", status_code=status)
