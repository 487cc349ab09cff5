"""Archive service: acquire + render + save orchestration."""

import logging
import threading
from pathlib import Path
from typing import Optional

from hnscribe.core.config_manager import ConfigManager
from hnscribe.core.exceptions import EmptyResultError
from hnscribe.core.filename_template import DEFAULT_TEMPLATE, generate_filename
from hnscribe.core.note_store import NoteStore
from hnscribe.core.types import PostInfo, RenderOptions
from hnscribe.services.acquirer import TreeAcquirer
from hnscribe.services.markdown_renderer import MarkdownRenderer

logger = logging.getLogger("hnscribe")


class ArchiveService:
    """Turns a Hacker News item URL into a saved Markdown note.

    Responsibilities:
    - Acquire the comment forest via TreeAcquirer
    - Surface an empty forest as EmptyResultError
    - Render with a RenderOptions snapshot taken per call
    - Name the note from the filename template and hand it to NoteStore
    """

    def __init__(self, acquirer: TreeAcquirer, renderer: MarkdownRenderer,
                 note_store: NoteStore, config: ConfigManager):
        self._acquirer = acquirer
        self._renderer = renderer
        self._note_store = note_store
        self._config = config

    def render_post(self, url: str, options: Optional[RenderOptions] = None,
                    cancel_event: Optional[threading.Event] = None) -> tuple[PostInfo, str]:
        """Acquire and render a post without saving it.

        Args:
            url: Hacker News item URL
            options: Overrides the configured RenderOptions for this call
            cancel_event: Optional cancellation signal for the fetches

        Returns:
            (post_info, markdown)

        Raises:
            InvalidUrlError, ItemNotFoundError, NetworkFailureError,
            AcquisitionCancelledError: from the acquirer
            EmptyResultError: neither source produced any comment
        """
        post_info = self._acquirer.acquire(url, cancel_event=cancel_event)
        if post_info.is_empty:
            raise EmptyResultError()

        options = options or self._config.get_render_options()
        markdown = self._renderer.render(post_info, url, options)
        logger.info(f"Rendered {post_info.comment_count} comments for item {post_info.post_id}")
        return post_info, markdown

    def archive(self, url: str, options: Optional[RenderOptions] = None,
                cancel_event: Optional[threading.Event] = None) -> Path:
        """Acquire, render and save a post. Returns the created note path."""
        post_info, markdown = self.render_post(url, options=options, cancel_event=cancel_event)
        template = self._config.get("notes.filename_template", DEFAULT_TEMPLATE)
        filename = generate_filename(template, post_info)
        return self._note_store.save(filename, markdown)
