"""Tests for the preference store."""

import pytest
from unittest.mock import patch
from pydantic import ValidationError
from sqlalchemy.exc import OperationalError
from newsdesk.schemas.preferences import PreferencesUpdate
from newsdesk.services.preferences import PreferenceStore
from conftest import TEST_USER_ID


@pytest.mark.integration
class TestPreferenceStore:
    """Test PreferenceStore."""

    def test_missing_preferences_is_none(self, db_session):
        assert PreferenceStore(db_session).get(TEST_USER_ID) is None

    def test_storage_failure_returns_none(self, db_session, test_preferences):
        error = OperationalError("SELECT", {}, Exception("database is locked"))

        with patch.object(db_session, "query", side_effect=error):
            assert PreferenceStore(db_session).get(TEST_USER_ID) is None

    def test_first_update_creates_row(self, db_session):
        preferences = PreferenceStore(db_session).update(
            TEST_USER_ID, PreferencesUpdate(categories=["technology", " science "])
        )

        assert preferences.user_id == TEST_USER_ID
        assert preferences.categories == ["technology", "science"]
        assert preferences.keywords == []
        assert preferences.reading_history_retention_days == 30
        assert preferences.ai_personalization_enabled is True
        assert preferences.notification_settings["digest_time"] == "09:00"
        assert preferences.notification_settings["daily_digest"] is True

    def test_partial_update_keeps_other_fields(self, db_session):
        store = PreferenceStore(db_session)
        store.update(
            TEST_USER_ID,
            PreferencesUpdate(categories=["technology"], keywords=["ai"]),
        )

        preferences = store.update(
            TEST_USER_ID, PreferencesUpdate(keywords=["robotics"])
        )

        assert preferences.categories == ["technology"]
        assert preferences.keywords == ["robotics"]

    def test_notification_settings_merge(self, db_session):
        store = PreferenceStore(db_session)
        store.update(
            TEST_USER_ID,
            PreferencesUpdate(notification_settings={"timezone": "Europe/Berlin"}),
        )

        preferences = store.update(
            TEST_USER_ID,
            PreferencesUpdate(notification_settings={"digest_time": "07:30"}),
        )

        assert preferences.notification_settings["timezone"] == "Europe/Berlin"
        assert preferences.notification_settings["digest_time"] == "07:30"
        assert preferences.notification_settings["weekly_summary"] is True

    def test_opt_out_of_personalization(self, db_session):
        preferences = PreferenceStore(db_session).update(
            TEST_USER_ID, PreferencesUpdate(ai_personalization_enabled=False)
        )

        assert preferences.ai_personalization_enabled is False


@pytest.mark.unit
class TestPreferencesValidation:
    """Test PreferencesUpdate validation."""

    def test_invalid_digest_time(self):
        with pytest.raises(ValidationError):
            PreferencesUpdate(notification_settings={"digest_time": "25:00"})

    def test_retention_bounds(self):
        with pytest.raises(ValidationError):
            PreferencesUpdate(reading_history_retention_days=0)

    def test_terms_deduplicated(self):
        update = PreferencesUpdate(keywords=["ai", " ai", "", "cloud"])

        assert update.keywords == ["ai", "cloud"]
