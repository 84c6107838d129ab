"""Tests for the infinite-scroll feed state and its HTTP client."""
from __future__ import annotations

import httpx
import pytest

from threadline.clients import FeedClientError, FeedPage, InfiniteThreadFeed, ThreadsApiClient


def _threads(*ids: str) -> list[dict]:
    return [{"id": thread_id, "text": f"thread {thread_id}"} for thread_id in ids]


class PagedSource:
    def __init__(self, pages: dict[int, FeedPage]) -> None:
        self.pages = pages
        self.requested: list[int] = []

    def __call__(self, page_number: int) -> FeedPage:
        self.requested.append(page_number)
        return self.pages.get(page_number, FeedPage())


def test_appending_pages_preserves_existing_order():
    source = PagedSource(
        {
            2: FeedPage(threads=_threads("c", "d"), is_next=True),
            3: FeedPage(threads=_threads("e"), is_next=False),
        }
    )
    feed = InfiniteThreadFeed(_threads("a", "b"), fetch_page=source)

    feed.on_intersection(True)
    assert [item["id"] for item in feed.threads] == ["a", "b", "c", "d"]
    assert feed.page == 2
    assert feed.show_sentinel is True

    feed.on_intersection(True)
    assert [item["id"] for item in feed.threads] == ["a", "b", "c", "d", "e"]
    assert feed.show_sentinel is False

    assert feed.on_intersection(True) == []
    assert source.requested == [2, 3]


def test_out_of_view_sentinel_does_not_fetch():
    source = PagedSource({2: FeedPage(threads=_threads("b"), is_next=False)})
    feed = InfiniteThreadFeed(_threads("a"), fetch_page=source)

    assert feed.on_intersection(False) == []
    assert source.requested == []


def test_empty_page_keeps_counter_and_unmounts_sentinel():
    source = PagedSource({})
    feed = InfiniteThreadFeed(_threads("a"), fetch_page=source)

    assert feed.load_more() == []
    assert feed.page == 1
    assert feed.has_more is False


def test_threads_repeated_across_pages_are_skipped():
    source = PagedSource({2: FeedPage(threads=_threads("b", "c"), is_next=False)})
    feed = InfiniteThreadFeed(_threads("a", "b"), fetch_page=source)

    added = feed.load_more()
    assert [item["id"] for item in added] == ["c"]
    assert [item["id"] for item in feed.threads] == ["a", "b", "c"]


def test_cards_carry_saved_flag():
    feed = InfiniteThreadFeed(_threads("a", "b"), fetch_page=PagedSource({}), saved_ids=["b"])
    assert [(card["id"], card["is_saved"]) for card in feed.cards()] == [("a", False), ("b", True)]


def test_api_client_requests_feed_pages():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"threads": _threads("x"), "is_next": True})

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://threads.test")
    with ThreadsApiClient("http://threads.test", token="tok", page_size=5, client=http) as api:
        page = api.fetch_feed_page(2)

    assert page.is_next is True
    assert [item["id"] for item in page.threads] == ["x"]
    assert seen[0].url.path == "/threads/feed"
    assert seen[0].url.params["page"] == "2"
    assert seen[0].url.params["page_size"] == "5"
    assert seen[0].headers["Authorization"] == "Bearer tok"


def test_api_client_wraps_http_failures():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "Storage operation failed"})

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://threads.test")
    api = ThreadsApiClient("http://threads.test", client=http)
    with pytest.raises(FeedClientError):
        api.fetch_feed_page(2)
    api.close()


def test_feed_driven_by_api_client():
    pages = {2: {"threads": _threads("b"), "is_next": False}}

    def handler(request: httpx.Request) -> httpx.Response:
        number = int(request.url.params["page"])
        return httpx.Response(200, json=pages.get(number, {"threads": [], "is_next": False}))

    http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://threads.test")
    api = ThreadsApiClient("http://threads.test", client=http)
    feed = InfiniteThreadFeed(_threads("a"), fetch_page=api.fetch_feed_page)

    feed.on_intersection(True)
    assert [item["id"] for item in feed.threads] == ["a", "b"]
    assert feed.show_sentinel is False
