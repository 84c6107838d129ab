"""HTTP clients and client-side state for consumers of the threads API."""
from .feed import FeedClientError, FeedPage, InfiniteThreadFeed, ThreadsApiClient

__all__ = ["FeedClientError", "FeedPage", "InfiniteThreadFeed", "ThreadsApiClient"]
