"""Tests for the HTTP API."""

import httpx
import pytest
from unittest.mock import patch
from conftest import TEST_USER_ID


@pytest.mark.unit
class TestAuth:
    """Every news endpoint requires a caller identity."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200

    def test_missing_token(self, client):
        response = client.get("/api/feed/")

        assert response.status_code == 401

    def test_invalid_token(self, client):
        response = client.get(
            "/api/feed/", headers={"Authorization": "Bearer not-a-token"}
        )

        assert response.status_code == 401

    def test_bearer_token(self, client, auth_headers):
        response = client.get("/api/feed/", headers=auth_headers)

        assert response.status_code == 200


@pytest.mark.integration
class TestSourcesAndAggregationAPI:
    """Test sources and aggregation endpoints."""

    def test_load_sources(self, authenticated_client, test_source):
        response = authenticated_client.get("/api/sources/")

        assert response.status_code == 200
        data = response.json()
        assert len(data) == 1
        assert data[0]["name"] == "Example News"
        assert data[0]["is_due"] is True
        assert "metadata" in data[0]

    def test_run_aggregation_reports_network_errors(
        self, authenticated_client, test_source
    ):
        with patch("httpx.AsyncClient.get") as mock_get:
            mock_get.side_effect = httpx.ConnectError("Connection refused")
            response = authenticated_client.post("/api/aggregation/run")

        assert response.status_code == 200
        data = response.json()
        assert data["fetched"] == 0
        assert data["errors"] == ["Failed to fetch from Example News: Network error"]

    def test_run_aggregation_stores_articles(
        self, authenticated_client, test_source, mock_rss_feed_data
    ):
        with patch("httpx.AsyncClient.get") as mock_get:
            mock_get.return_value = httpx.Response(
                200,
                text=mock_rss_feed_data,
                request=httpx.Request("GET", "https://example.com/feed.xml"),
            )
            response = authenticated_client.post("/api/aggregation/run")

        assert response.status_code == 200
        assert response.json() == {"fetched": 2, "errors": []}

        sources = authenticated_client.get("/api/sources/").json()
        assert sources[0]["is_due"] is False


@pytest.mark.integration
class TestArticlesAPI:
    """Test article endpoints."""

    def test_search(self, authenticated_client, test_article, multiple_articles):
        response = authenticated_client.get(
            "/api/articles/search", params={"q": "startup"}
        )

        assert response.status_code == 200
        data = response.json()
        assert [a["id"] for a in data] == [test_article.id]
        assert data[0]["categories"] == ["technology", "business"]

    def test_search_with_filters(self, authenticated_client, test_article):
        response = authenticated_client.get(
            "/api/articles/search",
            params={"q": "AI", "categories": ["sports"], "min_relevance": 0.2},
        )

        assert response.status_code == 200
        assert response.json() == []

    def test_search_invalid_date_range(self, authenticated_client):
        response = authenticated_client.get(
            "/api/articles/search",
            params={
                "q": "AI",
                "date_from": "2024-02-01T00:00:00",
                "date_to": "2024-01-01T00:00:00",
            },
        )

        assert response.status_code == 422

    def test_search_requires_query(self, authenticated_client):
        response = authenticated_client.get("/api/articles/search")

        assert response.status_code == 422

    def test_get_article(self, authenticated_client, test_article):
        response = authenticated_client.get(f"/api/articles/{test_article.id}")

        assert response.status_code == 200
        assert response.json()["title"] == "AI startup raises funding"

    def test_get_article_not_found(self, authenticated_client):
        response = authenticated_client.get("/api/articles/999")

        assert response.status_code == 404


@pytest.mark.integration
class TestPreferencesAPI:
    """Test preference endpoints."""

    def test_get_without_preferences(self, authenticated_client):
        response = authenticated_client.get("/api/preferences/")

        assert response.status_code == 200
        assert response.json() is None

    def test_update_and_get(self, authenticated_client):
        response = authenticated_client.put(
            "/api/preferences/",
            json={
                "categories": ["technology"],
                "notification_settings": {"digest_time": "07:00"},
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user_id"] == TEST_USER_ID
        assert data["categories"] == ["technology"]
        assert data["notification_settings"]["digest_time"] == "07:00"
        assert data["notification_settings"]["timezone"] == "UTC"

        fetched = authenticated_client.get("/api/preferences/").json()
        assert fetched["categories"] == ["technology"]

    def test_update_validation(self, authenticated_client):
        response = authenticated_client.put(
            "/api/preferences/",
            json={"notification_settings": {"digest_time": "7am"}},
        )

        assert response.status_code == 422


@pytest.mark.integration
class TestFeedAPI:
    """Test the personalized feed endpoint."""

    def test_feed(self, authenticated_client, multiple_articles):
        response = authenticated_client.get("/api/feed/", params={"limit": 2})

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 5
        assert len(data["articles"]) == 2
        assert set(data["relevance_scores"]) == {
            str(a["id"]) for a in data["articles"]
        }
        assert set(data["recommendations"]) == {
            "trending",
            "for_you",
            "breaking",
            "industry",
        }

    def test_feed_limit_validation(self, authenticated_client):
        response = authenticated_client.get("/api/feed/", params={"limit": 0})

        assert response.status_code == 422


@pytest.mark.integration
class TestInteractionsAPI:
    """Test interactions and saved articles endpoints."""

    def test_record_interaction(self, authenticated_client, test_article):
        response = authenticated_client.post(
            "/api/interactions/",
            json={
                "article_id": test_article.id,
                "action": "viewed",
                "reading_time_seconds": 42,
            },
        )

        assert response.status_code == 200
        assert response.json() == {"recorded": True}

    def test_record_interaction_unknown_article(self, authenticated_client):
        response = authenticated_client.post(
            "/api/interactions/", json={"article_id": 999, "action": "viewed"}
        )

        assert response.status_code == 404

    def test_record_interaction_invalid_action(self, authenticated_client, test_article):
        response = authenticated_client.post(
            "/api/interactions/",
            json={"article_id": test_article.id, "action": "liked"},
        )

        assert response.status_code == 422

    def test_saved_articles_flow(self, authenticated_client, test_article):
        response = authenticated_client.post(
            "/api/saved-articles/",
            json={"article_id": test_article.id, "folder": "reading", "tags": ["AI"]},
        )
        assert response.status_code == 200
        assert response.json()["tags"] == ["ai"]

        listed = authenticated_client.get(
            "/api/saved-articles/", params={"folder": "reading"}
        ).json()
        assert len(listed) == 1
        assert listed[0]["article"]["id"] == test_article.id

        response = authenticated_client.delete(
            f"/api/saved-articles/{test_article.id}"
        )
        assert response.status_code == 200

        response = authenticated_client.delete(
            f"/api/saved-articles/{test_article.id}"
        )
        assert response.status_code == 404

    def test_save_unknown_article(self, authenticated_client):
        response = authenticated_client.post(
            "/api/saved-articles/", json={"article_id": 999}
        )

        assert response.status_code == 404


@pytest.mark.integration
class TestDigestsAPI:
    """Test digest endpoints."""

    def test_daily_digest_is_idempotent(self, authenticated_client):
        first = authenticated_client.post("/api/digests/daily")
        second = authenticated_client.post("/api/digests/daily")

        assert first.status_code == 200
        assert first.json()["digest_type"] == "daily"
        assert second.status_code == 200
        assert second.json() is None

    def test_weekly_digest(self, authenticated_client):
        response = authenticated_client.post("/api/digests/weekly")

        assert response.status_code == 200
        assert response.json()["digest_type"] == "weekly"

    def test_custom_digest_rejected(self, authenticated_client):
        response = authenticated_client.post("/api/digests/custom")

        assert response.status_code == 422

    def test_unknown_digest_type(self, authenticated_client):
        response = authenticated_client.post("/api/digests/hourly")

        assert response.status_code == 422

    def test_digest_state_changes(self, authenticated_client):
        digest = authenticated_client.post("/api/digests/daily").json()

        response = authenticated_client.get(f"/api/digests/{digest['id']}")
        assert response.status_code == 200
        assert response.json()["was_read"] is False

        response = authenticated_client.post(f"/api/digests/{digest['id']}/read")
        assert response.json() == {"updated": True}

        response = authenticated_client.post(f"/api/digests/{digest['id']}/sent")
        assert response.json() == {"updated": True}

        data = authenticated_client.get(f"/api/digests/{digest['id']}").json()
        assert data["was_read"] is True
        assert data["was_sent"] is True
        assert data["read_at"] is not None

    def test_digest_not_found(self, authenticated_client):
        assert authenticated_client.get("/api/digests/999").status_code == 404
        assert authenticated_client.post("/api/digests/999/read").status_code == 404
