"""Render an acquired PostInfo as a single Markdown note."""

import re
from datetime import timezone
from typing import Optional
from urllib.parse import quote

from hnscribe.adapters.hn_http_adapter import DEFAULT_SITE_BASE_URL
from hnscribe.core.exceptions import RenderError
from hnscribe.core.types import Comment, PostInfo, RenderOptions, count_comments
from hnscribe.services.html_converter import (
    convert_body,
    escape_frontmatter,
    escape_markdown,
)

_TRAILING_DIGITS = re.compile(r'(\d+)$')

INDENT = "  "
FALLBACK_HEADING = "Hacker News Comments"


def format_scraped_date(post_info: PostInfo) -> str:
    """ISO-8601 in UTC with milliseconds, e.g. 2024-05-01T12:00:00.000Z."""
    moment = post_info.scraped_date.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


def permalink_id(comment: Comment) -> Optional[str]:
    """Numeric item id behind a comment id ("comment_123" or "123")."""
    match = _TRAILING_DIGITS.search(comment.id or "")
    return match.group(1) if match else None


class MarkdownRenderer:
    """Pure PostInfo -> Markdown conversion. No I/O, input is never mutated.

    Layout:
        frontmatter block
        "# <title>"
        "## Comments"
        top-level comments separated by "---"
    """

    def __init__(self, site_base_url: str = DEFAULT_SITE_BASE_URL):
        self._site_base_url = site_base_url.rstrip("/")

    def render(self, post_info: PostInfo, source_url: str,
               options: Optional[RenderOptions] = None) -> str:
        """Render the whole note.

        Args:
            post_info: Acquired post and comment forest
            source_url: URL the user asked for, recorded in the frontmatter
            options: Formatting switches (defaults: plain links, tags wrapped)

        Returns:
            Markdown text

        Raises:
            RenderError: the forest violates the depth invariant
        """
        options = options or RenderOptions()
        parts = [self._frontmatter(post_info, source_url)]

        heading = " ".join(post_info.title.split()) if post_info.title else ""
        parts.append(f"# {escape_markdown(heading) or FALLBACK_HEADING}\n\n")
        parts.append("## Comments\n\n")

        last = len(post_info.comments) - 1
        for index, comment in enumerate(post_info.comments):
            if comment.depth != 0:
                raise RenderError(f"Top-level comment {comment.id} has depth {comment.depth}")
            parts.append(self._render_comment(comment, options))
            if index < last:
                parts.append("---\n\n")

        return "".join(parts)

    def _frontmatter(self, post_info: PostInfo, source_url: str) -> str:
        lines = [
            "---",
            f'source: "{escape_frontmatter(source_url)}"',
            f"post-id: {post_info.post_id}",
            f"date: {format_scraped_date(post_info)}",
            f"comment-count: {count_comments(post_info.comments)}",
        ]
        if post_info.title:
            lines.append(f'title: "{escape_frontmatter(post_info.title)}"')
        if post_info.original_url:
            lines.append(f'original-url: "{escape_frontmatter(post_info.original_url)}"')
        lines.append("---")
        return "\n".join(lines) + "\n\n"

    def _render_comment(self, comment: Comment, options: RenderOptions) -> str:
        indent = INDENT * comment.depth
        parts = [f"{indent}- **{self._author_text(comment, options)}** | "
                 f"{self._time_text(comment, options)}\n"]

        body = convert_body(comment.body, wrap_tags=options.wrap_html_tags)
        if body:
            body_indent = indent + INDENT
            parts.append("\n".join(
                f"{body_indent}{line}" if line.strip() else ""
                for line in body.split("\n")
            ))
            parts.append("\n")
        parts.append("\n")

        for child in comment.children:
            if child.depth != comment.depth + 1:
                raise RenderError(
                    f"Comment {child.id} has depth {child.depth}, "
                    f"expected {comment.depth + 1} under {comment.id}"
                )
            parts.append(self._render_comment(child, options))

        return "".join(parts)

    def _author_text(self, comment: Comment, options: RenderOptions) -> str:
        author = escape_markdown(comment.author)
        if not options.enhanced_links:
            return author
        profile = f"{self._site_base_url}/user?id={quote(comment.author, safe='')}"
        return f"[{author}]({profile})"

    def _time_text(self, comment: Comment, options: RenderOptions) -> str:
        if not options.enhanced_links:
            return comment.timestamp
        item_id = permalink_id(comment)
        if item_id is None:
            return comment.timestamp
        label = comment.timestamp or "link"
        return f"[{label}]({self._site_base_url}/item?id={item_id})"
