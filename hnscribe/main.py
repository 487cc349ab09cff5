"""HNScribe command line entry point."""

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import Optional

from hnscribe.adapters.hn_http_adapter import HackerNewsHTTPAdapter
from hnscribe.core.config_manager import VALID_LOG_LEVELS, ConfigManager
from hnscribe.core.exceptions import EmptyResultError, HNScribeError, InvalidUrlError
from hnscribe.core.logger import setup_logger
from hnscribe.core.note_store import NoteStore
from hnscribe.services.acquirer import TreeAcquirer
from hnscribe.services.api_strategy import ApiTreeStrategy
from hnscribe.services.archive_service import ArchiveService
from hnscribe.services.markdown_renderer import MarkdownRenderer
from hnscribe.services.page_strategy import PageTreeStrategy

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_URL = 2
EXIT_EMPTY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hnscribe",
        description="Save a Hacker News discussion as a Markdown note.",
    )
    parser.add_argument("url", help="https://news.ycombinator.com/item?id=...")
    parser.add_argument("--stdout", action="store_true",
                        help="Print the note instead of saving it")
    parser.add_argument("-o", "--output-dir", type=Path,
                        help="Directory for the note (default: notes.output_dir)")
    parser.add_argument("--enhanced-links", action=argparse.BooleanOptionalAction, default=None,
                        help="Link author names and timestamps")
    parser.add_argument("--wrap-html-tags", action=argparse.BooleanOptionalAction, default=None,
                        help="Wrap literal HTML tags in backticks")
    parser.add_argument("--log-level", choices=VALID_LOG_LEVELS, type=str.upper,
                        help="Override app.log_level")
    return parser


def build_service(config: ConfigManager, output_dir: Optional[Path] = None) -> ArchiveService:
    """Wire adapters and services from configuration."""
    adapter = HackerNewsHTTPAdapter(
        api_base_url=config.get("hn.api_base_url"),
        site_base_url=config.get("hn.site_base_url"),
        timeout=config.get("hn.request_timeout", 30),
    )
    options = config.get_render_options()
    api_strategy = ApiTreeStrategy(
        adapter,
        timestamp_format=options.timestamp_format,
        max_workers=config.get("hn.max_workers", 8),
    )
    page_strategy = PageTreeStrategy(adapter, indent_unit_px=config.get("hn.indent_unit_px", 40))
    acquirer = TreeAcquirer(api_strategy, page_strategy)
    renderer = MarkdownRenderer(site_base_url=config.get("hn.site_base_url"))
    note_store = NoteStore(output_dir or config.get_output_dir())
    return ArchiveService(acquirer, renderer, note_store, config)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the hnscribe command.

    Startup sequence:
    1. Parse arguments
    2. ConfigManager init (loads or creates settings.yaml)
    3. Logger init (log level, optional file log)
    4. Adapter, strategies, acquirer, renderer, note store, service
    5. Render (and save unless --stdout)
    """
    args = build_parser().parse_args(argv)

    config = ConfigManager()

    log_level = args.log_level or config.get("app.log_level", "INFO")
    logger = setup_logger(
        log_level=log_level,
        log_dir=config.get_log_dir(),
        mask_logs=config.get("security.mask_logs", False),
    )

    options = config.get_render_options()
    if args.enhanced_links is not None:
        options = dataclasses.replace(options, enhanced_links=args.enhanced_links)
    if args.wrap_html_tags is not None:
        options = dataclasses.replace(options, wrap_html_tags=args.wrap_html_tags)

    service = build_service(config, output_dir=args.output_dir)

    try:
        if args.stdout:
            _, markdown = service.render_post(args.url, options=options)
            sys.stdout.write(markdown)
        else:
            path = service.archive(args.url, options=options)
            print(f"Created note: {path}")
    except InvalidUrlError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_INVALID_URL
    except EmptyResultError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_EMPTY
    except HNScribeError as e:
        logger.error(f"Failed to process {args.url}: {e.message}")
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_ERROR

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
