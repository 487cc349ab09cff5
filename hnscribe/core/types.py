"""Data Transfer Objects for HNScribe."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator, Optional

DEFAULT_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class Comment:
    """A node in the comment forest."""

    id: str                          # "comment_<n>" (API) or row id (page)
    author: str = "Anonymous"
    body: str = ""                   # Raw HTML, converted at render time
    timestamp: str = ""              # Display string, never parsed
    depth: int = 0                   # nesting depth (0 = top-level)
    children: list['Comment'] = field(default_factory=list)
    parent_id: Optional[str] = None  # set during tree assembly

    def walk(self) -> Iterator['Comment']:
        """Yield this comment and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()


def count_comments(comments: list[Comment]) -> int:
    """Count every node in the forest, not just the roots."""
    return sum(1 for root in comments for _ in root.walk())


@dataclass
class PostInfo:
    """A post and its comment forest, as produced by the acquirer."""

    post_id: str
    title: Optional[str] = None
    original_url: Optional[str] = None
    comments: list[Comment] = field(default_factory=list)
    scraped_date: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    comment_count: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.comments


@dataclass
class FlatCommentRow:
    """One comment row as it appears on the item page, before nesting."""

    id: str
    author: str = "Anonymous"
    timestamp: str = ""
    body: str = ""
    level: int = 0                   # visual indentation level


@dataclass(frozen=True)
class RenderOptions:
    """Per-call renderer settings. Snapshotted from config, never shared.

    timestamp_format is read by ApiTreeStrategy at acquisition time; comments
    reach the renderer with their time strings already formatted.
    """

    enhanced_links: bool = False
    wrap_html_tags: bool = True
    timestamp_format: str = DEFAULT_TIMESTAMP_FORMAT
