"""Flat-list acquisition: rebuild the comment tree from the item page.

The page lists comments as a flat run of rows. Nesting is only visible as
an indentation width, so parents are recovered with the "nearest preceding
shallower row" rule.
"""

import logging
from typing import Optional

from bs4 import BeautifulSoup
from bs4.element import Tag

from hnscribe.adapters.hn_adapter import HackerNewsAdapter
from hnscribe.core.types import Comment, FlatCommentRow, PostInfo, count_comments

logger = logging.getLogger("hnscribe")

DEFAULT_INDENT_UNIT_PX = 40


def parse_item_page(html: str, indent_unit_px: int = DEFAULT_INDENT_UNIT_PX
                    ) -> tuple[Optional[str], Optional[str], list[FlatCommentRow]]:
    """Extract title, linked URL and comment rows from an item page.

    Args:
        html: Full item page HTML
        indent_unit_px: Indent width of one nesting level

    Returns:
        (title, original_url, rows). title and original_url are None when
        the page has no title line; rows are in document order.
    """
    soup = BeautifulSoup(html, "html.parser")

    title: Optional[str] = None
    original_url: Optional[str] = None
    titleline = soup.select_one(".titleline")
    if titleline is not None:
        anchor = titleline.find("a")
        if anchor is not None:
            original_url = anchor.get("href") or None
            title = anchor.get_text(strip=True) or None
        if not title:
            title = titleline.get_text(" ", strip=True) or None

    rows = []
    for row in soup.select("tr.comtr"):
        row_id = row.get("id")
        if not row_id:
            continue
        rows.append(FlatCommentRow(
            id=row_id,
            author=_text_of(row, ".hnuser") or "Anonymous",
            timestamp=_text_of(row, ".age"),
            body=_inner_html(row, ".commtext"),
            level=_row_level(row, indent_unit_px),
        ))
    return title, original_url, rows


def _text_of(row: Tag, selector: str) -> str:
    element = row.select_one(selector)
    return element.get_text(strip=True) if element is not None else ""


def _inner_html(row: Tag, selector: str) -> str:
    element = row.select_one(selector)
    return element.decode_contents().strip() if element is not None else ""


def _row_level(row: Tag, indent_unit_px: int) -> int:
    """Nesting level from the indent cell.

    Newer pages carry an explicit indent attribute; older ones only a
    spacer image whose width is a multiple of indent_unit_px.
    """
    cell = row.select_one(".ind")
    if cell is None:
        return 0

    indent = cell.get("indent")
    if indent is not None:
        try:
            return max(0, int(indent))
        except ValueError:
            logger.debug(f"Unparseable indent attribute on row {row.get('id')}: {indent!r}")

    spacer = cell.find("img")
    width = spacer.get("width") if spacer is not None else None
    if width is None:
        return 0
    try:
        return max(0, int(float(width)) // max(1, indent_unit_px))
    except ValueError:
        logger.debug(f"Unparseable indent width on row {row.get('id')}: {width!r}")
        return 0


def build_comment_forest(rows: list[FlatCommentRow]) -> list[Comment]:
    """Nest flat rows into a forest.

    Each row's parent is the nearest preceding row with a strictly smaller
    level. Level 0 rows, and rows with no shallower predecessor, become
    roots. The stack only ever holds rows that can still be someone's
    nearest shallower predecessor, so the scan is linear.

    Depth comes from tree position, not from the raw level, so a row that
    skips levels still ends up at parent depth + 1.
    """
    roots: list[Comment] = []
    stack: list[tuple[int, Comment]] = []

    for row in rows:
        while stack and stack[-1][0] >= row.level:
            stack.pop()

        comment = Comment(
            id=row.id,
            author=row.author,
            body=row.body,
            timestamp=row.timestamp,
        )

        if row.level > 0 and stack:
            parent = stack[-1][1]
            comment.depth = parent.depth + 1
            comment.parent_id = parent.id
            parent.children.append(comment)
        else:
            if row.level > 0:
                logger.debug(f"Row {row.id} at level {row.level} has no parent; keeping as root")
            roots.append(comment)

        stack.append((row.level, comment))

    return roots


class PageTreeStrategy:
    """Builds the comment forest from the HTML item page."""

    def __init__(self, adapter: HackerNewsAdapter,
                 indent_unit_px: int = DEFAULT_INDENT_UNIT_PX):
        self._adapter = adapter
        self._indent_unit_px = indent_unit_px

    def fetch(self, post_id: str) -> PostInfo:
        """Fetch and parse the item page.

        Raises:
            NetworkFailureError: page fetch failed
            ItemNotFoundError: HTTP 404
        """
        html = self._adapter.fetch_item_page(post_id)
        title, original_url, rows = parse_item_page(html, self._indent_unit_px)
        comments = build_comment_forest(rows)
        count = count_comments(comments)
        logger.info(f"Parsed {count} comments for item {post_id} from page ({len(rows)} rows)")
        return PostInfo(
            post_id=post_id,
            title=title,
            original_url=original_url,
            comments=comments,
            comment_count=count,
        )
