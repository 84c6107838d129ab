"""Infinite-scroll feed state and the HTTP client that feeds it."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

import httpx

logger = logging.getLogger(__name__)


class FeedClientError(RuntimeError):
    """Raised when a feed page cannot be fetched."""


@dataclass(slots=True)
class FeedPage:
    threads: list[dict[str, Any]] = field(default_factory=list)
    is_next: bool = False


class ThreadsApiClient:
    """Fetches feed pages from ``/threads/feed``."""

    def __init__(
        self,
        base_url: str,
        *,
        token: str | None = None,
        page_size: int | None = None,
        client: httpx.Client | None = None,
        timeout: float = 10.0,
    ) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._client = client or httpx.Client(base_url=base_url.rstrip("/"), timeout=timeout)
        self._headers = headers
        self._page_size = page_size

    def fetch_feed_page(self, page_number: int) -> FeedPage:
        params: dict[str, Any] = {"page": page_number}
        if self._page_size:
            params["page_size"] = self._page_size
        try:
            response = self._client.get("/threads/feed", params=params, headers=self._headers)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.exception("Feed request for page %d failed", page_number)
            raise FeedClientError(f"Failed to fetch feed page {page_number}: {exc}") from exc

        if not isinstance(data, dict) or not isinstance(data.get("threads"), list):
            raise FeedClientError("Invalid feed response")
        return FeedPage(threads=data["threads"], is_next=bool(data.get("is_next")))

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ThreadsApiClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class InfiniteThreadFeed:
    """Loaded threads plus the page counter behind an infinitely scrolling list.

    The sentinel (and its loading indicator) stays mounted while ``has_more``
    is true; each time it scrolls into view the next page is appended.
    """

    def __init__(
        self,
        initial_threads: Iterable[dict[str, Any]] | None,
        *,
        fetch_page: Callable[[int], FeedPage],
        saved_ids: Iterable[str] = (),
    ) -> None:
        self._fetch_page = fetch_page
        self._saved_ids = {str(item) for item in saved_ids}
        self.threads: list[dict[str, Any]] = []
        self._seen: set[str] = set()
        self.page = 1
        self.has_more = True
        self._append(initial_threads or [])

    @property
    def show_sentinel(self) -> bool:
        return self.has_more

    def _append(self, threads: Iterable[dict[str, Any]]) -> list[dict[str, Any]]:
        added: list[dict[str, Any]] = []
        for thread in threads:
            key = str(thread.get("id"))
            # Concurrent writes can shift a thread onto the next page.
            if key in self._seen:
                continue
            self._seen.add(key)
            self.threads.append(thread)
            added.append(thread)
        return added

    def load_more(self) -> list[dict[str, Any]]:
        """Fetch the next page and append it; returns the newly added threads."""

        next_page = self.page + 1
        result = self._fetch_page(next_page)
        self.has_more = result.is_next
        if not result.threads:
            return []
        self.page = next_page
        return self._append(result.threads)

    def on_intersection(self, in_view: bool) -> list[dict[str, Any]]:
        if not in_view or not self.has_more:
            return []
        return self.load_more()

    def cards(self) -> list[dict[str, Any]]:
        """Threads decorated with the viewer's saved flag, in display order."""

        return [{**thread, "is_saved": str(thread.get("id")) in self._saved_ids} for thread in self.threads]


__all__ = ["FeedClientError", "FeedPage", "InfiniteThreadFeed", "ThreadsApiClient"]
