"""
Pytest configuration and fixtures for newsdesk tests.
"""

import os

# Settings are read at import time
os.environ.setdefault("SECRET_KEY", "test_secret_key_for_testing_only")
os.environ.setdefault("DATABASE_URI", "sqlite:///:memory:")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from datetime import datetime, timedelta
from typing import Generator
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from newsdesk.core.database import Base, get_db
from newsdesk.core.auth import create_access_token
from newsdesk.models.source import Source
from newsdesk.models.article import Article
from newsdesk.models.preferences import UserNewsPreferences, DEFAULT_NOTIFICATION_SETTINGS


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_USER_ID = "user-123"
NOW = datetime(2024, 6, 12, 12, 0, 0)


@pytest.fixture(scope="function")
def db_engine():
    """Create a test database engine."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """Create a test database session."""
    TestingSessionLocal = sessionmaker(
        autocommit=False, autoflush=False, bind=db_engine
    )
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def test_app(db_session):
    """Create a FastAPI test app without lifespan events."""
    from fastapi import FastAPI
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

    # Create app without lifespan so the scheduler never starts
    test_app = FastAPI(title="newsdesk - Test", version="1.0.0")

    test_app.include_router(sources.router, prefix="/api/sources")
    test_app.include_router(aggregation.router, prefix="/api/aggregation")
    test_app.include_router(articles.router, prefix="/api/articles")
    test_app.include_router(preferences.router, prefix="/api/preferences")
    test_app.include_router(feed.router, prefix="/api/feed")
    test_app.include_router(interactions.router, prefix="/api/interactions")
    test_app.include_router(saved_articles.router, prefix="/api/saved-articles")
    test_app.include_router(digests.router, prefix="/api/digests")

    @test_app.get("/health")
    def health():
        return {"status": "ok"}

    # Override database dependency
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    test_app.dependency_overrides[get_db] = override_get_db

    return test_app


@pytest.fixture(scope="function")
def client(test_app) -> TestClient:
    """Create a test client without entering context manager."""
    return TestClient(test_app, raise_server_exceptions=False)


@pytest.fixture(scope="function")
def auth_headers() -> dict:
    """Create authentication headers for test requests."""
    access_token = create_access_token(data={"sub": TEST_USER_ID})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def authenticated_client(client) -> TestClient:
    """Create an authenticated test client."""
    access_token = create_access_token(data={"sub": TEST_USER_ID})
    client.cookies.set("auth_token", access_token)
    return client


@pytest.fixture(scope="function")
def test_source(db_session) -> Source:
    """Create a never-fetched RSS source."""
    source = Source(
        name="Example News",
        url="https://example.com",
        feed_url="https://example.com/feed.xml",
        source_type="rss",
        categories=["technology"],
        is_active=True,
        fetch_frequency_minutes=360,
    )
    db_session.add(source)
    db_session.commit()
    db_session.refresh(source)
    return source


def make_article(source: Source, index: int, **overrides) -> Article:
    values = dict(
        source_id=source.id,
        external_id=f"ext-{index}",
        title=f"Test Article {index}",
        summary=f"Summary for article {index}",
        url=f"https://example.com/article-{index}",
        published_at=NOW - timedelta(hours=index),
        tags=[],
        sentiment=0.0,
        relevance_score=0.5,
        engagement_metrics={},
        extra_metadata={},
    )
    categories = overrides.pop("categories", ["technology"])
    values.update(overrides)
    article = Article(**values)
    article.categories = categories
    return article


@pytest.fixture(scope="function")
def test_article(db_session, test_source) -> Article:
    """Create a test article."""
    # Index outside the range used by multiple_articles so both fixtures can coexist
    article = make_article(
        test_source,
        100,
        published_at=NOW - timedelta(hours=1),
        title="AI startup raises funding",
        categories=["technology", "business"],
        tags=["ai", "funding"],
    )
    db_session.add(article)
    db_session.commit()
    db_session.refresh(article)
    return article


@pytest.fixture(scope="function")
def multiple_articles(db_session, test_source) -> list:
    """Create five articles one hour apart, newest first."""
    articles = [make_article(test_source, i) for i in range(5)]
    db_session.add_all(articles)
    db_session.commit()
    for article in articles:
        db_session.refresh(article)
    return articles


@pytest.fixture(scope="function")
def test_preferences(db_session) -> UserNewsPreferences:
    preferences = UserNewsPreferences(
        user_id=TEST_USER_ID,
        categories=["technology"],
        keywords=[],
        companies=[],
        industries=[],
        excluded_sources=[],
        excluded_keywords=[],
        notification_settings=dict(DEFAULT_NOTIFICATION_SETTINGS),
        reading_history_retention_days=30,
        ai_personalization_enabled=True,
    )
    db_session.add(preferences)
    db_session.commit()
    db_session.refresh(preferences)
    return preferences


@pytest.fixture
def mock_rss_feed_data():
    """Mock RSS feed data."""
    return """<?xml version="1.0" encoding="UTF-8"?>
<rss version="2.0">
    <channel>
        <title>Test Feed</title>
        <link>https://example.com</link>
        <description>A test RSS feed</description>
        <item>
            <title>Test Article 1</title>
            <link>https://example.com/article1</link>
            <description>Description of article 1</description>
            <pubDate>Mon, 01 Jan 2024 12:00:00 GMT</pubDate>
            <author>author@example.com (Test Author)</author>
            <category>Technology</category>
            <category>Startups</category>
            <enclosure url="https://example.com/image1.jpg" type="image/jpeg" length="1234"/>
        </item>
        <item>
            <title>Test Article 2</title>
            <link>https://example.com/article2</link>
            <description>Description of article 2</description>
            <pubDate>Tue, 02 Jan 2024 12:00:00 GMT</pubDate>
        </item>
    </channel>
</rss>
"""


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are module level; start every test from zero."""
    from newsdesk.api.endpoints import (
        aggregation,
        preferences,
        interactions,
        saved_articles,
        digests,
    )

    for module in (aggregation, preferences, interactions, saved_articles, digests):
        module.limiter.reset()
    yield
