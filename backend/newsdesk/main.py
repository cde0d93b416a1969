from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from newsdesk.core.config import settings
from newsdesk.core.database import engine, Base
from newsdesk.core.logging_config import (
    setup_logging,
    CorrelationIdMiddleware,
    log_pipeline_event,
)
from newsdesk.api.endpoints import (
    sources,
    aggregation,
    articles,
    preferences,
    feed,
    interactions,
    saved_articles,
    digests,
)
from newsdesk.services.scheduler import scheduler
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
import logging

# Configure structured JSON logging
pipeline_logger = setup_logging(logging.DEBUG if settings.DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

# Initialize rate limiter
limiter = Limiter(key_func=get_remote_address, default_limits=["100/minute"])


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting newsdesk application...")

    # Create database tables
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")

    if settings.SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Scheduler disabled; aggregation runs only on request")

    yield

    logger.info("Shutting down newsdesk application...")
    if settings.SCHEDULER_ENABLED:
        scheduler.shutdown()


app = FastAPI(
    title="newsdesk - News Aggregation & Personalization",
    description="Feed aggregation with per-user relevance ranking and digests",
    version="1.0.0",
    lifespan=lifespan,
)

# Add correlation ID middleware (first, so all logs have correlation IDs)
app.add_middleware(CorrelationIdMiddleware)

# Add rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

log_pipeline_event(
    event_type="app.startup",
    message="newsdesk application starting",
    event_category="system",
    debug=settings.DEBUG,
    scheduler_enabled=settings.SCHEDULER_ENABLED,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(sources.router, prefix="/api/sources", tags=["sources"])
app.include_router(aggregation.router, prefix="/api/aggregation", tags=["aggregation"])
app.include_router(articles.router, prefix="/api/articles", tags=["articles"])
app.include_router(preferences.router, prefix="/api/preferences", tags=["preferences"])
app.include_router(feed.router, prefix="/api/feed", tags=["feed"])
app.include_router(interactions.router, prefix="/api/interactions", tags=["interactions"])
app.include_router(
    saved_articles.router, prefix="/api/saved-articles", tags=["saved-articles"]
)
app.include_router(digests.router, prefix="/api/digests", tags=["digests"])


@app.get("/")
def root():
    return {
        "name": "newsdesk",
        "version": "1.0.0",
        "description": "News Aggregation & Personalization Pipeline",
    }


@app.get("/health")
def health_check():
    return {"status": "healthy"}
