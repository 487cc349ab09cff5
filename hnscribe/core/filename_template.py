"""Note filename templating.

Placeholders: {{title}}, {{post-id}}, {{date}}, {{time}}, {{datetime}},
{{source}}. Every substituted value is sanitized, then the whole result is
sanitized again and given a .md extension.
"""

import re
from datetime import datetime
from typing import Optional
from urllib.parse import urlparse

from hnscribe.core.types import PostInfo

RESERVED_CHARS = re.compile(r'[\\/:*?"<>|]')
MAX_FILENAME_LENGTH = 200
DEFAULT_TEMPLATE = "HN - {{title}} - {{date}}"


def sanitize_filename(text: str) -> str:
    """Replace reserved characters with '-', collapse whitespace, cap length."""
    cleaned = RESERVED_CHARS.sub('-', text)
    cleaned = re.sub(r'\s+', ' ', cleaned).strip()
    return cleaned[:MAX_FILENAME_LENGTH]


def source_label(original_url: Optional[str]) -> str:
    """Host of the linked article, or "HackerNews" for text posts."""
    if original_url:
        host = urlparse(original_url).hostname
        if host:
            return host
    return "HackerNews"


def generate_filename(template: str, post_info: PostInfo,
                      now: Optional[datetime] = None) -> str:
    """Expand a filename template for a post.

    Args:
        template: Template string; blank falls back to DEFAULT_TEMPLATE
        post_info: Acquired post (title, id and original URL are used)
        now: Point in time for the date placeholders (default: local now)

    Returns:
        Sanitized filename ending in ".md"
    """
    now = now or datetime.now()
    date = now.strftime("%Y-%m-%d")
    time = now.strftime("%H-%M-%S")
    values = {
        "title": post_info.title or "Untitled",
        "post-id": post_info.post_id,
        "date": date,
        "time": time,
        "datetime": f"{date}-{time}",
        "source": source_label(post_info.original_url),
    }

    result = template if template and template.strip() else DEFAULT_TEMPLATE
    for name, value in values.items():
        result = result.replace("{{" + name + "}}", sanitize_filename(value))

    filename = sanitize_filename(result)
    if not filename.endswith(".md"):
        filename += ".md"
    return filename
