"""Tests for TreeAcquirer and URL validation."""

from datetime import timezone
from unittest.mock import MagicMock

import pytest

from hnscribe.core.exceptions import (
    InvalidUrlError,
    ItemNotFoundError,
    NetworkFailureError,
)
from hnscribe.core.types import Comment, PostInfo
from hnscribe.services.acquirer import TreeAcquirer, extract_post_id
from hnscribe.services.api_strategy import ApiTreeStrategy
from hnscribe.services.page_strategy import PageTreeStrategy
from tests.helpers.hn_fixtures import comment_row, item_page, make_item_adapter

URL = "https://news.ycombinator.com/item?id=1"


def make_acquirer(adapter):
    return TreeAcquirer(ApiTreeStrategy(adapter), PageTreeStrategy(adapter))


class TestUrlValidation:
    @pytest.mark.parametrize("url, post_id", [
        ("https://news.ycombinator.com/item?id=123", "123"),
        ("http://news.ycombinator.com/item?id=42", "42"),
        ("  https://news.ycombinator.com/item?id=7  ", "7"),
        ("https://news.ycombinator.com/item?id=7&p=2", "7"),
        ("https://news.ycombinator.com/item?id=7#8", "7"),
    ])
    def test_accepts_item_urls(self, url, post_id):
        assert extract_post_id(url) == post_id

    @pytest.mark.parametrize("url", [
        "",
        "https://news.ycombinator.com/",
        "https://news.ycombinator.com/item?id=abc",
        "https://evil.example.com/item?id=1",
        "ftp://news.ycombinator.com/item?id=1",
        "https://news.ycombinator.com.evil.com/item?id=1",
    ])
    def test_rejects_other_urls(self, url):
        with pytest.raises(InvalidUrlError):
            extract_post_id(url)

    def test_invalid_url_makes_no_requests(self):
        api, page = MagicMock(), MagicMock()
        with pytest.raises(InvalidUrlError):
            TreeAcquirer(api, page).acquire("https://example.com")
        api.fetch.assert_not_called()
        page.fetch.assert_not_called()


class TestStrategyChain:
    """Test API-first, page-fallback ordering."""

    def test_api_result_used_when_it_has_comments(self):
        items = {1: {"id": 1, "title": "T", "kids": [10]},
                 10: {"id": 10, "by": "a", "text": "x", "time": 1}}
        adapter = make_item_adapter(items)

        info = make_acquirer(adapter).acquire(URL)

        assert info.comment_count == 1
        assert info.title == "T"
        assert info.scraped_date.tzinfo == timezone.utc
        adapter.fetch_item_page.assert_not_called()

    def test_zero_kids_falls_back_to_page(self, sample_page):
        adapter = make_item_adapter({1: {"id": 1, "title": "API title", "kids": []}},
                                    page_html=sample_page)

        info = make_acquirer(adapter).acquire(URL)

        assert not info.is_empty
        assert info.comment_count == 6
        assert info.title == "Show HN: A thing"
        adapter.fetch_item_page.assert_called_once_with("1")

    def test_api_failure_falls_back_to_page(self, sample_page):
        adapter = make_item_adapter({}, failing={1}, page_html=sample_page)
        info = make_acquirer(adapter).acquire(URL)
        assert info.comment_count == 6

    def test_both_empty_is_empty_result_not_error(self):
        adapter = make_item_adapter({1: {"id": 1, "title": "Quiet", "kids": []}},
                                    page_html=item_page([], title="Quiet"))

        info = make_acquirer(adapter).acquire(URL)

        assert info.is_empty
        assert info.comment_count == 0
        assert info.title == "Quiet"

    def test_page_failure_propagates(self):
        adapter = make_item_adapter({1: {"id": 1, "kids": []}})
        adapter.fetch_item_page.side_effect = NetworkFailureError("down")
        with pytest.raises(NetworkFailureError):
            make_acquirer(adapter).acquire(URL)

    def test_not_found_in_both_sources(self):
        adapter = make_item_adapter({}, page_html="<html><body>No such item.</body></html>")
        with pytest.raises(ItemNotFoundError):
            make_acquirer(adapter).acquire(URL)

    def test_page_without_title_gets_placeholder(self):
        adapter = make_item_adapter({}, failing={1},
                                    page_html=item_page([comment_row("5", 0)], title=None))
        info = make_acquirer(adapter).acquire(URL)
        assert info.title == "Unknown Title"

    def test_api_metadata_fills_page_gaps(self):
        adapter = make_item_adapter(
            {1: {"id": 1, "title": "From API", "url": "https://a.example", "kids": []}},
            page_html=item_page([comment_row("5", 0)], title=None),
        )
        info = make_acquirer(adapter).acquire(URL)
        assert info.title == "From API"
        assert info.original_url == "https://a.example"

    def test_comment_count_recomputed(self):
        api = MagicMock()
        api.fetch.return_value = PostInfo(
            post_id="1",
            comments=[Comment(id="c1", children=[Comment(id="c2", depth=1)])],
            comment_count=999,
        )
        info = TreeAcquirer(api, MagicMock()).acquire(URL)
        assert info.comment_count == 2
