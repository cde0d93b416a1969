"""Tests for feed parsers."""

import httpx
import pytest
from datetime import datetime
from unittest.mock import Mock, patch
from newsdesk.models.source import SourceType
from newsdesk.services.feed_parser import (
    FeedFetchError,
    RSSFeedParser,
    UnimplementedFeedParser,
    build_parsers,
    get_parser,
)


ATOM_FEED = """<?xml version="1.0" encoding="utf-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
    <title>Atom Feed</title>
    <entry>
        <title>Atom Entry</title>
        <link rel="alternate" href="https://example.com/atom-entry"/>
        <id>urn:uuid:1</id>
        <updated>2024-01-03T08:30:00+02:00</updated>
        <summary>Atom summary</summary>
        <category term="science"/>
    </entry>
</feed>
"""


@pytest.mark.unit
class TestRSSFeedParser:
    """Test RSSFeedParser."""

    def test_parse_text_extracts_items(self, mock_rss_feed_data):
        articles = RSSFeedParser().parse_text(mock_rss_feed_data)

        assert len(articles) == 2
        first = articles[0]
        assert first.title == "Test Article 1"
        assert first.url == "https://example.com/article1"
        assert first.summary == "Description of article 1"
        assert first.published_at == datetime(2024, 1, 1, 12, 0, 0)
        assert first.categories == ["Technology", "Startups"]
        assert first.image_url == "https://example.com/image1.jpg"

        second = articles[1]
        assert second.categories == []
        assert second.image_url is None

    def test_parse_text_atom_link_attribute(self):
        articles = RSSFeedParser().parse_text(ATOM_FEED)

        assert len(articles) == 1
        assert articles[0].url == "https://example.com/atom-entry"
        assert articles[0].categories == ["science"]
        # Converted to naive UTC
        assert articles[0].published_at == datetime(2024, 1, 3, 6, 30, 0)

    def test_parse_text_skips_entries_without_link(self):
        feed = """<?xml version="1.0"?>
<rss version="2.0"><channel><title>T</title>
<item><title>No link here</title></item>
<item><title>Linked</title><link>https://example.com/linked</link></item>
</channel></rss>"""
        articles = RSSFeedParser().parse_text(feed)

        assert [a.title for a in articles] == ["Linked"]

    def test_parse_text_malformed_returns_empty(self):
        assert RSSFeedParser().parse_text("this is not xml <<<") == []

    def test_parse_text_empty_returns_empty(self):
        assert RSSFeedParser().parse_text("") == []

    def test_parse_date_formats(self):
        parser = RSSFeedParser()

        assert parser._parse_date("Mon, 01 Jan 2024 12:00:00 GMT") == datetime(
            2024, 1, 1, 12, 0, 0
        )
        assert parser._parse_date("2024-01-01T12:00:00Z") == datetime(
            2024, 1, 1, 12, 0, 0
        )
        assert parser._parse_date("not a date") is None
        assert parser._parse_date(None) is None

    @pytest.mark.asyncio
    async def test_parse_fetches_url(self, mock_rss_feed_data):
        with patch("httpx.AsyncClient.get") as mock_get:
            mock_response = Mock()
            mock_response.text = mock_rss_feed_data
            mock_response.raise_for_status = Mock()
            mock_get.return_value = mock_response

            articles = await RSSFeedParser(timeout=5).parse(
                "https://example.com/feed.xml"
            )

        assert len(articles) == 2
        mock_get.assert_called_once_with("https://example.com/feed.xml")

    @pytest.mark.asyncio
    async def test_parse_network_error(self):
        with patch("httpx.AsyncClient.get") as mock_get:
            mock_get.side_effect = httpx.ConnectError("Connection refused")

            with pytest.raises(FeedFetchError) as exc_info:
                await RSSFeedParser().parse("https://example.com/feed.xml")

        assert str(exc_info.value) == "Network error"

    @pytest.mark.asyncio
    async def test_parse_timeout(self):
        with patch("httpx.AsyncClient.get") as mock_get:
            mock_get.side_effect = httpx.ReadTimeout("slow")

            with pytest.raises(FeedFetchError) as exc_info:
                await RSSFeedParser(timeout=5).parse("https://example.com/feed.xml")

        assert str(exc_info.value) == "Network error"

    @pytest.mark.asyncio
    async def test_parse_http_status_error(self):
        request = httpx.Request("GET", "https://example.com/feed.xml")
        response = httpx.Response(503, request=request)

        with patch("httpx.AsyncClient.get") as mock_get:
            mock_get.return_value = response

            with pytest.raises(FeedFetchError) as exc_info:
                await RSSFeedParser().parse("https://example.com/feed.xml")

        assert str(exc_info.value) == "Network error"


@pytest.mark.unit
class TestParserRegistry:
    """Test parser lookup by source type."""

    def test_build_parsers_covers_every_type(self):
        parsers = build_parsers()

        assert set(parsers) == set(SourceType)
        assert isinstance(parsers[SourceType.RSS], RSSFeedParser)

    @pytest.mark.asyncio
    async def test_unimplemented_parser_returns_empty(self):
        parser = get_parser("api", build_parsers())

        assert isinstance(parser, UnimplementedFeedParser)
        assert await parser.parse("https://example.com/api") == []

    def test_get_parser_unknown_type(self):
        with pytest.raises(FeedFetchError, match="No parser available"):
            get_parser("carrier-pigeon", build_parsers())

    def test_get_parser_missing_registration(self):
        with pytest.raises(FeedFetchError):
            get_parser("rss", {})
