"""Hacker News adapter over the public item API and item pages."""

import logging
from typing import Optional

import requests

from hnscribe.adapters.hn_adapter import HackerNewsAdapter
from hnscribe.core.exceptions import ItemNotFoundError, NetworkFailureError

logger = logging.getLogger("hnscribe")

# App version for User-Agent
_APP_VERSION = "1.0.0"

DEFAULT_API_BASE_URL = "https://hacker-news.firebaseio.com/v0"
DEFAULT_SITE_BASE_URL = "https://news.ycombinator.com"


class HackerNewsHTTPAdapter(HackerNewsAdapter):
    """Fetches items over HTTP. One attempt per call, never retries.

    The session is shared across worker threads; only GET requests are made.
    """

    def __init__(
        self,
        api_base_url: str = DEFAULT_API_BASE_URL,
        site_base_url: str = DEFAULT_SITE_BASE_URL,
        timeout: float = 30,
    ):
        self._api_base_url = api_base_url.rstrip("/")
        self._site_base_url = site_base_url.rstrip("/")
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            "User-Agent": f"hnscribe/{_APP_VERSION} (+markdown archiver)",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def fetch_item(self, item_id: int | str) -> Optional[dict]:
        url = f"{self._api_base_url}/item/{item_id}.json"
        response = self._get(url, accept="application/json")
        try:
            data = response.json()
        except ValueError as e:
            raise NetworkFailureError(f"Invalid JSON for item {item_id}: {e}")

        if data is None:
            return None
        if not isinstance(data, dict):
            raise NetworkFailureError(f"Unexpected item payload for {item_id}: {type(data).__name__}")
        return data

    def fetch_item_page(self, item_id: int | str) -> str:
        response = self._get(self.item_url(item_id), accept="text/html")
        return response.text

    def item_url(self, item_id: int | str) -> str:
        return f"{self._site_base_url}/item?id={item_id}"

    def _get(self, url: str, accept: str) -> requests.Response:
        """Single GET with status mapping.

        Handles: transport errors, 404, other HTTP error codes.
        """
        try:
            response = self._session.get(url, headers={"Accept": accept}, timeout=self._timeout)
        except requests.RequestException as e:
            raise NetworkFailureError(f"Request failed for {url}: {e}")

        if response.status_code == 404:
            raise ItemNotFoundError(f"Not found: {url}")
        try:
            response.raise_for_status()
        except requests.HTTPError as e:
            raise NetworkFailureError(f"HTTP error for {url}: {e}")

        logger.debug(f"GET {url} -> {response.status_code}")
        return response
