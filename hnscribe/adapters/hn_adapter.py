"""Abstract base class for Hacker News data access."""

from abc import ABC, abstractmethod
from typing import Optional


class HackerNewsAdapter(ABC):
    """Abstract interface for fetching Hacker News items."""

    @abstractmethod
    def fetch_item(self, item_id: int | str) -> Optional[dict]:
        """Fetch one item record from the JSON item API.

        Args:
            item_id: Numeric item id (story or comment)

        Returns:
            The item record (keys: by, text, time, kids, url, title,
            deleted, dead, ...) or None when the item does not exist

        Raises:
            NetworkFailureError: transport failure or bad response
            ItemNotFoundError: HTTP 404
        """
        ...

    @abstractmethod
    def fetch_item_page(self, item_id: int | str) -> str:
        """Fetch the HTML discussion page for an item.

        Args:
            item_id: Numeric story id

        Returns:
            The page HTML

        Raises:
            NetworkFailureError: transport failure or HTTP error status
            ItemNotFoundError: HTTP 404
        """
        ...

    @abstractmethod
    def item_url(self, item_id: int | str) -> str:
        """Permalink of an item on the site."""
        ...
