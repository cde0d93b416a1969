"""
One aggregation run across every due source.

At most one run executes at a time. A call that arrives while a run is in
flight returns straight away with an error entry; it never waits.
"""

import asyncio
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List, Optional, Tuple
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from newsdesk.core.config import settings
from newsdesk.core.logging_config import log_pipeline_event
from newsdesk.models.source import Source, SourceType
from newsdesk.schemas.feed import AggregationResult
from newsdesk.services.article_store import ArticleStore
from newsdesk.services.feed_parser import (
    FeedParser,
    ParsedArticle,
    build_parsers,
    get_parser,
)
import logging

logger = logging.getLogger(__name__)

ALREADY_RUNNING = "Aggregation already in progress"


class FetchScheduler:
    def __init__(
        self,
        parsers: Optional[Dict[SourceType, FeedParser]] = None,
        now_func: Callable[[], datetime] = datetime.utcnow,
        max_concurrent: Optional[int] = None,
    ):
        self.parsers = parsers or build_parsers(settings.FETCH_TIMEOUT_SECONDS)
        self.now_func = now_func
        self.max_concurrent = max_concurrent or settings.FETCH_MAX_CONCURRENT
        self._lock = threading.Lock()

    @property
    def is_aggregating(self) -> bool:
        return self._lock.locked()

    @staticmethod
    def is_due(source: Source, now: datetime) -> bool:
        """A source is due if never fetched or its cadence has elapsed."""
        if source.last_fetched is None:
            return True
        cadence = timedelta(minutes=source.fetch_frequency_minutes)
        return now - source.last_fetched >= cadence

    def load_sources(self, db: Session) -> List[Source]:
        try:
            return (
                db.query(Source)
                .filter(Source.is_active == True)
                .order_by(Source.name)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to load sources: {str(e)}")
            return []

    async def run_aggregation(self, db: Session) -> AggregationResult:
        """
        Fetch every due source and store what it yields.

        Per-source failures are collected in ``errors`` and never abort the
        run. ``last_fetched`` only advances for sources that succeeded.
        """
        if not self._lock.acquire(blocking=False):
            log_pipeline_event(
                "aggregation.rejected", ALREADY_RUNNING, level=logging.WARNING
            )
            return AggregationResult(fetched=0, errors=[ALREADY_RUNNING])

        try:
            return await self._aggregate(db)
        finally:
            self._lock.release()

    async def _aggregate(self, db: Session) -> AggregationResult:
        now = self.now_func()
        due = [s for s in self.load_sources(db) if self.is_due(s, now)]

        log_pipeline_event(
            "aggregation.started",
            f"Aggregating {len(due)} due sources",
            due_sources=len(due),
        )

        fetched = 0
        errors: List[str] = []
        store = ArticleStore(db)

        # Network work runs in parallel; the session is only touched sequentially
        outcomes = await self._fetch_all(due)

        for source, outcome in outcomes:
            if isinstance(outcome, Exception):
                errors.append(f"Failed to fetch from {source.name}: {outcome}")
                logger.warning(f"Fetch failed for {source.name}: {outcome}")
                continue

            try:
                fetched += store.save_all(source, outcome)
                source.last_fetched = now
                db.commit()
            except Exception as e:
                db.rollback()
                errors.append(f"Failed to fetch from {source.name}: {e}")
                logger.error(f"Failed to store articles from {source.name}: {str(e)}")

        log_pipeline_event(
            "aggregation.completed",
            f"Stored {fetched} articles from {len(due)} sources",
            level=logging.WARNING if errors else logging.INFO,
            fetched=fetched,
            error_count=len(errors),
        )
        return AggregationResult(fetched=fetched, errors=errors)

    async def _fetch_all(
        self, sources: List[Source]
    ) -> List[Tuple[Source, object]]:
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def fetch_with_limit(source: Source) -> List[ParsedArticle]:
            async with semaphore:
                parser = get_parser(source.source_type, self.parsers)
                return await parser.parse(source.feed_url or source.url)

        results = await asyncio.gather(
            *(fetch_with_limit(source) for source in sources),
            return_exceptions=True,
        )
        return list(zip(sources, results))


# Global aggregation instance shared by the API and the background scheduler
fetch_scheduler = FetchScheduler()
