from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import httpx

from volume_forge.models.specs import FillMode
from volume_forge.utils.logging_utils import get_logger

logger = get_logger(__name__)

DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
TEXT_ENCODING = "utf-8"


@dataclass(frozen=True)
class FetchResult:
    url: str
    ok: bool
    chars: int = 0
    status_code: Optional[int] = None
    error: Optional[str] = None


class ContentSource:
    """
    Supplies filler bytes for generated files.

    Zero mode yields zero bytes. Buffer mode repeats an immutable byte buffer
    cyclically: the byte at absolute file offset ``i`` is ``buffer[i % len(buffer)]``.
    The buffer is never mutated after construction, so one instance can be
    shared by concurrent writers.
    """

    def __init__(self, buffer: bytes = b"", fetch_report: Optional[Sequence[FetchResult]] = None):
        self._buffer = bytes(buffer)
        self.fetch_report: Tuple[FetchResult, ...] = tuple(fetch_report or ())

    @classmethod
    def zero(cls) -> "ContentSource":
        return cls()

    @classmethod
    def from_bytes(cls, data: bytes) -> "ContentSource":
        return cls(buffer=data)

    @classmethod
    def from_text(cls, text: str) -> "ContentSource":
        return cls(buffer=text.encode(TEXT_ENCODING))

    @classmethod
    def from_fetch(
        cls,
        urls: Sequence[str],
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = 4,
    ) -> Optional["ContentSource"]:
        """
        Fetch every URL and concatenate the successful bodies in URL order.

        Failed URLs are logged and skipped. Returns None when nothing usable was
        fetched; the caller is expected to fall back to zero fill.
        """
        source, _ = cls.fetch_with_report(urls, client=client, timeout=timeout, max_workers=max_workers)
        return source

    @classmethod
    def fetch_with_report(
        cls,
        urls: Sequence[str],
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_FETCH_TIMEOUT_SECONDS,
        max_workers: int = 4,
    ) -> Tuple[Optional["ContentSource"], List[FetchResult]]:
        """Like ``from_fetch``, but also returns the per-URL results when nothing was fetched."""
        urls = list(urls)
        if not urls:
            logger.warning("No source URLs given; nothing to fetch")
            return None, []

        owns_client = client is None
        if owns_client:
            client = httpx.Client(timeout=timeout, follow_redirects=True)

        try:
            if max_workers > 1 and len(urls) > 1:
                with ThreadPoolExecutor(max_workers=min(max_workers, len(urls))) as pool:
                    fetched = list(pool.map(lambda u: _fetch_text(client, u), urls))
            else:
                fetched = [_fetch_text(client, u) for u in urls]
        finally:
            if owns_client:
                client.close()

        report = [result for result, _ in fetched]
        texts = [text for _, text in fetched if text is not None]
        ok_count = sum(1 for r in report if r.ok)
        logger.info("Fetched %d of %d source URL(s)", ok_count, len(urls))

        combined = "".join(texts)
        if not combined:
            logger.warning("No content fetched from %d source URL(s)", len(urls))
            return None, report

        return cls(buffer=combined.encode(TEXT_ENCODING), fetch_report=report), report

    @property
    def fill_mode(self) -> FillMode:
        return FillMode.BUFFERED if self._buffer else FillMode.ZERO

    @property
    def buffer(self) -> bytes:
        return self._buffer

    @property
    def buffer_length(self) -> int:
        return len(self._buffer)

    def next_chunk(self, offset: int, max_len: int) -> bytes:
        """
        Return filler bytes for file offset ``offset``.

        Zero mode returns exactly ``max_len`` bytes. Buffer mode wraps around the
        end of the buffer at most once, so the result is shorter than ``max_len``
        when ``max_len`` exceeds the buffer length.
        """
        if max_len <= 0:
            return b""
        if not self._buffer:
            return bytes(max_len)

        size = len(self._buffer)
        start = offset % size
        end = start + max_len
        if end <= size:
            return self._buffer[start:end]

        head = self._buffer[start:]
        tail_len = min(max_len - len(head), start)
        return head + self._buffer[:tail_len]


def _fetch_text(client: httpx.Client, url: str) -> Tuple[FetchResult, Optional[str]]:
    try:
        response = client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.warning("Fetch failed for url=%s. Status=%s", url, exc.response.status_code)
        return FetchResult(url=url, ok=False, status_code=exc.response.status_code, error=str(exc)), None
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        logger.warning("Fetch failed for url=%s. Error=%s", url, exc)
        return FetchResult(url=url, ok=False, error=str(exc)), None

    text = response.text
    return FetchResult(url=url, ok=True, chars=len(text), status_code=response.status_code), text
