"""Structured acquisition: walk the comment tree through the item API."""

import logging
import threading
from concurrent.futures import Executor, ThreadPoolExecutor
from datetime import datetime, timezone
from functools import partial
from typing import Optional

from hnscribe.adapters.hn_adapter import HackerNewsAdapter
from hnscribe.core.exceptions import (
    AcquisitionCancelledError,
    ItemNotFoundError,
    NetworkError,
    SubtreeFetchError,
)
from hnscribe.core.types import (
    DEFAULT_TIMESTAMP_FORMAT,
    Comment,
    PostInfo,
    count_comments,
)

logger = logging.getLogger("hnscribe")


def format_timestamp(posix_time, pattern: str = DEFAULT_TIMESTAMP_FORMAT) -> str:
    """Format a POSIX timestamp (seconds, UTC) with a strftime pattern.

    Returns "" when the record carries no usable time.
    """
    if posix_time is None:
        return ""
    try:
        moment = datetime.fromtimestamp(int(posix_time), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError, OSError):
        return ""
    return moment.strftime(pattern)


class ApiTreeStrategy:
    """Builds the comment forest from explicit kid references.

    Each level of siblings is fetched through a thread pool and reassembled
    in reply order; recursion into a node's kids happens on the calling
    thread before its next sibling is processed. A failed or removed child
    is dropped together with its subtree.
    """

    def __init__(
        self,
        adapter: HackerNewsAdapter,
        timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT,
        max_workers: int = 8,
    ):
        self._adapter = adapter
        self._timestamp_format = timestamp_format or DEFAULT_TIMESTAMP_FORMAT
        self._max_workers = max(1, int(max_workers))

    def fetch(self, post_id: str,
              cancel_event: Optional[threading.Event] = None) -> PostInfo:
        """Fetch a story and every reachable comment.

        Args:
            post_id: Numeric story id
            cancel_event: Optional event; checked before every node fetch

        Returns:
            PostInfo whose forest may be empty when the story has no kids

        Raises:
            NetworkFailureError: root fetch failed at the transport layer
            ItemNotFoundError: root item does not exist
            AcquisitionCancelledError: cancel_event was set
        """
        self._check_cancelled(cancel_event)
        root = self._adapter.fetch_item(post_id)
        if root is None:
            raise ItemNotFoundError(f"Item {post_id} not found")

        title = root.get("title") or None
        original_url = root.get("url") or None
        kids = root.get("kids") or []

        if not kids:
            logger.info(f"Item {post_id} has no kids in the API record")
            return PostInfo(post_id=post_id, title=title, original_url=original_url)

        comments: list[Comment] = []
        with ThreadPoolExecutor(max_workers=self._max_workers,
                                thread_name_prefix="hn-fetch") as executor:
            self._build_children(executor, kids, comments, 0, None, cancel_event)

        count = count_comments(comments)
        logger.info(f"Fetched {count} comments for item {post_id} via API")
        return PostInfo(
            post_id=post_id,
            title=title,
            original_url=original_url,
            comments=comments,
            comment_count=count,
        )

    def _build_children(self, executor: Executor, kid_ids: list, target: list[Comment],
                        depth: int, parent_id: Optional[str],
                        cancel_event: Optional[threading.Event]) -> None:
        """Append surviving kids to target, recursing depth-first."""
        records = self._fetch_level(executor, kid_ids, cancel_event)

        for kid_id, record in zip(kid_ids, records):
            if record is None:
                continue
            comment = self._to_comment(kid_id, record, depth, parent_id)
            target.append(comment)

            grandkids = record.get("kids") or []
            if grandkids:
                self._build_children(executor, grandkids, comment.children,
                                     depth + 1, comment.id, cancel_event)

    def _fetch_level(self, executor: Executor, kid_ids: list,
                     cancel_event: Optional[threading.Event]) -> list[Optional[dict]]:
        """Fetch one level of siblings. Result order matches kid_ids."""
        self._check_cancelled(cancel_event)
        records = list(executor.map(partial(self._fetch_child, cancel_event=cancel_event), kid_ids))
        self._check_cancelled(cancel_event)
        return records

    def _fetch_child(self, kid_id, cancel_event: Optional[threading.Event] = None) -> Optional[dict]:
        """Runs on a worker thread. Never raises for a single bad node."""
        if cancel_event is not None and cancel_event.is_set():
            return None
        try:
            return self._load_child(kid_id)
        except SubtreeFetchError as e:
            logger.warning(f"Skipping comment {kid_id} and its replies: {e.message}")
            return None

    def _load_child(self, kid_id) -> Optional[dict]:
        try:
            record = self._adapter.fetch_item(kid_id)
        except NetworkError as e:
            raise SubtreeFetchError(f"comment {kid_id}: {e.message}") from e

        if record is None:
            logger.debug(f"Comment {kid_id} missing from API")
            return None
        if record.get("deleted") or record.get("dead"):
            logger.debug(f"Comment {kid_id} removed (deleted/dead)")
            return None
        return record

    def _to_comment(self, kid_id, record: dict, depth: int,
                    parent_id: Optional[str]) -> Comment:
        return Comment(
            id=f"comment_{kid_id}",
            author=record.get("by") or "Anonymous",
            body=record.get("text") or "",
            timestamp=format_timestamp(record.get("time"), self._timestamp_format),
            depth=depth,
            parent_id=parent_id,
        )

    @staticmethod
    def _check_cancelled(cancel_event: Optional[threading.Event]) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise AcquisitionCancelledError()
