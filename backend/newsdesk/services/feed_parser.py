"""
Feed parsers, one per source type.

Parsers are looked up by ``SourceType`` in a registry instead of being
subclassed; adding a source type means adding an entry and an implementation.
"""

import asyncio
import feedparser
import httpx
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Dict, List, Optional, Protocol
from newsdesk.core.config import settings
from newsdesk.models.source import SourceType
import logging

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error"


class FeedFetchError(Exception):
    """Raised when a feed cannot be retrieved. The cause is logged, not carried."""


@dataclass
class ParsedArticle:
    title: str
    url: str
    summary: Optional[str] = None
    content: Optional[str] = None
    author: Optional[str] = None
    published_at: Optional[datetime] = None
    image_url: Optional[str] = None
    categories: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)


class FeedParser(Protocol):
    async def parse(self, feed_url: str) -> List[ParsedArticle]:
        ...


class RSSFeedParser:
    """Fetches an RSS 2.0 or Atom document and extracts one article per item/entry."""

    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT_SECONDS

    async def parse(self, feed_url: str) -> List[ParsedArticle]:
        """
        Fetch and parse a feed.

        Network failures raise FeedFetchError so the caller can record them;
        unparseable content yields an empty list.
        """
        text = await self.fetch(feed_url)
        return self.parse_text(text, feed_url)

    async def fetch(self, feed_url: str) -> str:
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": settings.FETCH_USER_AGENT},
            ) as client:
                response = await asyncio.wait_for(
                    client.get(feed_url), timeout=self.timeout
                )
                response.raise_for_status()
        except (httpx.TimeoutException, asyncio.TimeoutError) as e:
            logger.warning(f"Timed out after {self.timeout:g}s fetching {feed_url}")
            raise FeedFetchError(NETWORK_ERROR) from e
        except httpx.HTTPStatusError as e:
            logger.warning(f"HTTP {e.response.status_code} fetching {feed_url}")
            raise FeedFetchError(NETWORK_ERROR) from e
        except httpx.RequestError as e:
            logger.warning(f"Request to {feed_url} failed: {str(e)}")
            raise FeedFetchError(NETWORK_ERROR) from e

        return response.text

    def parse_text(self, text: str, feed_url: str = "") -> List[ParsedArticle]:
        """Parse an already-fetched feed document. Never raises."""
        try:
            parsed = feedparser.parse(text)

            if parsed.bozo and not parsed.entries:
                logger.warning(
                    f"Malformed feed {feed_url}: {parsed.get('bozo_exception')}"
                )
                return []

            articles = []
            for entry in parsed.entries:
                article = self._parse_entry(entry)
                if article is None:
                    logger.debug(f"Skipping entry without link in {feed_url}")
                    continue
                articles.append(article)

            logger.debug(f"Parsed {len(articles)} articles from {feed_url}")
            return articles

        except Exception as e:
            logger.error(f"Error parsing feed {feed_url}: {str(e)}")
            return []

    def _parse_entry(self, entry) -> Optional[ParsedArticle]:
        url = self._extract_link(entry)
        if not url:
            return None

        content = None
        if entry.get("content"):
            content = entry.content[0].get("value") or None

        return ParsedArticle(
            title=(entry.get("title") or "").strip() or "No Title",
            url=url,
            summary=entry.get("summary") or None,
            content=content,
            author=entry.get("author") or None,
            published_at=self._parse_date(
                entry.get("published", entry.get("updated"))
            ),
            image_url=self._extract_image(entry),
            categories=self._extract_categories(entry),
        )

    def _extract_link(self, entry) -> str:
        """Link element text, falling back to the href of a link element."""
        link = (entry.get("link") or "").strip()
        if link:
            return link
        for candidate in entry.get("links", []):
            if candidate.get("rel", "alternate") == "alternate" and candidate.get("href"):
                return candidate["href"].strip()
        return ""

    def _extract_categories(self, entry) -> List[str]:
        terms = [
            (tag.get("term") or "").strip() for tag in entry.get("tags", []) or []
        ]
        return list(dict.fromkeys(t for t in terms if t))

    def _extract_image(self, entry) -> Optional[str]:
        """URL of the first image-typed enclosure, if any."""
        for enclosure in entry.get("enclosures", []) or []:
            if enclosure.get("type", "").startswith("image/"):
                url = enclosure.get("href") or enclosure.get("url")
                if url:
                    return url
        return None

    def _parse_date(self, date_string: Optional[str]) -> Optional[datetime]:
        """Parse RFC 822 or ISO 8601 dates into naive UTC datetimes."""
        if not date_string:
            return None

        try:
            value = parsedate_to_datetime(date_string)
        except (TypeError, ValueError, IndexError):
            try:
                value = datetime.fromisoformat(date_string.replace("Z", "+00:00"))
            except ValueError:
                logger.warning(f"Could not parse date: {date_string}")
                return None

        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value


class UnimplementedFeedParser:
    """Placeholder for source types without an integration yet; yields nothing."""

    def __init__(self, source_type: SourceType):
        self.source_type = source_type

    async def parse(self, feed_url: str) -> List[ParsedArticle]:
        logger.debug(f"No {self.source_type.value} integration yet, skipping {feed_url}")
        return []


def build_parsers(timeout: Optional[float] = None) -> Dict[SourceType, FeedParser]:
    """Default parser registry."""
    return {
        SourceType.RSS: RSSFeedParser(timeout=timeout),
        SourceType.API: UnimplementedFeedParser(SourceType.API),
        SourceType.SCRAPER: UnimplementedFeedParser(SourceType.SCRAPER),
        SourceType.NEWSLETTER: UnimplementedFeedParser(SourceType.NEWSLETTER),
    }


def get_parser(
    source_type: str, parsers: Dict[SourceType, FeedParser]
) -> FeedParser:
    """
    Resolve the parser for a source type.

    Raises:
        FeedFetchError: If no parser is registered for the type
    """
    try:
        parser = parsers.get(SourceType(source_type))
    except ValueError:
        parser = None
    if parser is None:
        raise FeedFetchError(f"No parser available for source type: {source_type}")
    return parser
