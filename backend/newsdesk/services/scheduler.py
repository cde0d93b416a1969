from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from newsdesk.core.database import SessionLocal
from newsdesk.core.config import settings
from newsdesk.services.digest_generator import DigestGenerator
from newsdesk.services.fetch_scheduler import FetchScheduler, fetch_scheduler
import logging

logger = logging.getLogger(__name__)


class PipelineScheduler:
    """
    Periodic triggers for the pipeline.

    Each tick only asks for work; whether a source is due is decided by the
    FetchScheduler, and whether a digest is due by the user's settings.
    """

    def __init__(self, aggregator: FetchScheduler = fetch_scheduler):
        self.scheduler = AsyncIOScheduler()
        self.aggregator = aggregator

    async def aggregate(self):
        db = SessionLocal()
        try:
            result = await self.aggregator.run_aggregation(db)
            logger.info(
                f"Scheduled aggregation completed: {result.fetched} articles, "
                f"{len(result.errors)} errors"
            )
        except Exception as e:
            logger.error(f"Error in scheduled aggregation: {str(e)}")
        finally:
            db.close()

    async def generate_digests(self):
        db = SessionLocal()
        try:
            results = DigestGenerator(db).generate_daily_digests_for_all_users()
            logger.info(
                f"Scheduled digests: {results['created']} created, "
                f"{results['skipped']} skipped, {results['failed']} failed"
            )
        except Exception as e:
            logger.error(f"Error in scheduled digest generation: {str(e)}")
        finally:
            db.close()

    def start(self):
        """Start the scheduler."""
        self.scheduler.add_job(
            self.aggregate,
            trigger=IntervalTrigger(minutes=settings.AGGREGATION_INTERVAL),
            id="aggregate_sources",
            name="Fetch due sources",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.add_job(
            self.generate_digests,
            trigger=IntervalTrigger(minutes=settings.DIGEST_CHECK_INTERVAL),
            id="daily_digests",
            name="Generate due daily digests",
            replace_existing=True,
            max_instances=1,
        )
        self.scheduler.start()
        logger.info(
            f"Scheduler started: aggregation every {settings.AGGREGATION_INTERVAL} "
            f"minutes, digests every {settings.DIGEST_CHECK_INTERVAL} minutes"
        )

    def shutdown(self):
        """Shutdown the scheduler."""
        if self.scheduler.running:
            self.scheduler.shutdown()
        logger.info("Scheduler shutdown")


# Global scheduler instance
scheduler = PipelineScheduler()
