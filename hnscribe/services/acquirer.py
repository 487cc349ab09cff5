"""Tree acquisition: item API first, item page as fallback."""

import logging
import re
import threading
from datetime import datetime, timezone
from typing import Optional

from hnscribe.core.exceptions import (
    InvalidUrlError,
    ItemNotFoundError,
    NetworkError,
)
from hnscribe.core.types import PostInfo, count_comments
from hnscribe.services.api_strategy import ApiTreeStrategy
from hnscribe.services.page_strategy import PageTreeStrategy

logger = logging.getLogger("hnscribe")

ITEM_URL_PATTERN = re.compile(
    r'^https?://news\.ycombinator\.com/item\?id=(\d+)(?:[&#].*)?$'
)

UNKNOWN_TITLE = "Unknown Title"


def extract_post_id(url: str) -> str:
    """Return the numeric id of a Hacker News item URL.

    Raises:
        InvalidUrlError: url is not of the form
            http(s)://news.ycombinator.com/item?id=<digits>
    """
    match = ITEM_URL_PATTERN.match((url or "").strip())
    if not match:
        raise InvalidUrlError(
            "Invalid Hacker News URL. Expected https://news.ycombinator.com/item?id=XXXXX"
        )
    return match.group(1)


class TreeAcquirer:
    """Runs the acquisition chain and normalizes the result.

    Chain:
    1. ApiTreeStrategy. Any NetworkError is logged and the chain moves on;
       a result with comments is returned immediately.
    2. PageTreeStrategy. Its result is returned even when empty; callers
       check PostInfo.is_empty. A page fetch failure propagates.
    """

    def __init__(self, api_strategy: ApiTreeStrategy, page_strategy: PageTreeStrategy):
        self._api = api_strategy
        self._page = page_strategy

    def acquire(self, url: str,
                cancel_event: Optional[threading.Event] = None) -> PostInfo:
        """Acquire the comment forest of a post.

        Args:
            url: Hacker News item URL
            cancel_event: Optional event honored at every per-node fetch

        Returns:
            PostInfo with computed comment_count and scraped_date

        Raises:
            InvalidUrlError: malformed url (no network activity)
            ItemNotFoundError: the item exists in neither source
            NetworkFailureError: the page fallback could not be fetched
            AcquisitionCancelledError: cancel_event was set
        """
        post_id = extract_post_id(url)

        api_info: Optional[PostInfo] = None
        api_error: Optional[NetworkError] = None
        try:
            api_info = self._api.fetch(post_id, cancel_event=cancel_event)
        except NetworkError as e:
            api_error = e
            logger.warning(f"Item API failed for {post_id} ({e.message}); falling back to page")

        if api_info is not None and not api_info.is_empty:
            return self._finalize(api_info)

        if api_info is not None:
            logger.info(f"Item API returned no comments for {post_id}; falling back to page")

        page_info = self._page.fetch(post_id)

        if (page_info.is_empty and page_info.title is None
                and isinstance(api_error, ItemNotFoundError)):
            raise api_error

        merged = PostInfo(
            post_id=post_id,
            title=page_info.title or (api_info.title if api_info else None),
            original_url=page_info.original_url or (api_info.original_url if api_info else None),
            comments=page_info.comments,
        )
        if merged.title is None and not merged.is_empty:
            merged.title = UNKNOWN_TITLE

        if merged.is_empty:
            logger.warning(f"No comments found for item {post_id} in either source")
        return self._finalize(merged)

    @staticmethod
    def _finalize(info: PostInfo) -> PostInfo:
        info.comment_count = count_comments(info.comments)
        info.scraped_date = datetime.now(timezone.utc)
        return info
