from datetime import datetime
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from newsdesk.core.repository import Repository
from newsdesk.models.preferences import (
    UserNewsPreferences,
    DEFAULT_NOTIFICATION_SETTINGS,
)
from newsdesk.schemas.preferences import PreferencesUpdate
import logging

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Per-user declared interests. A user without a row simply has no preferences."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = Repository(db)

    def get(self, user_id: str) -> Optional[UserNewsPreferences]:
        try:
            return (
                self.db.query(UserNewsPreferences)
                .filter(UserNewsPreferences.user_id == user_id)
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            logger.error(f"Failed to get preferences for user {user_id}: {str(e)}")
            return None

    def update(
        self, user_id: str, changes: PreferencesUpdate
    ) -> Optional[UserNewsPreferences]:
        """
        Merge a partial update into the user's preferences, creating the row on
        first write. Fields not set in ``changes`` keep their stored value.
        """
        existing = self.get(user_id)
        data = changes.model_dump(exclude_unset=True, exclude={"notification_settings"})

        notification_settings = dict(DEFAULT_NOTIFICATION_SETTINGS)
        if existing and existing.notification_settings:
            notification_settings.update(existing.notification_settings)
        if changes.notification_settings is not None:
            notification_settings.update(
                changes.notification_settings.model_dump(exclude_none=True)
            )

        values = {
            "user_id": user_id,
            "categories": existing.categories if existing else [],
            "keywords": existing.keywords if existing else [],
            "companies": existing.companies if existing else [],
            "industries": existing.industries if existing else [],
            "excluded_sources": existing.excluded_sources if existing else [],
            "excluded_keywords": existing.excluded_keywords if existing else [],
            "reading_history_retention_days": (
                existing.reading_history_retention_days if existing else 30
            ),
            "ai_personalization_enabled": (
                existing.ai_personalization_enabled if existing else True
            ),
        }
        values.update({k: v for k, v in data.items() if v is not None})
        values["notification_settings"] = notification_settings
        values["updated_at"] = datetime.utcnow()

        try:
            self.repository.upsert_by_key(
                UserNewsPreferences, values, conflict_keys=("user_id",)
            )
            self.db.commit()
        except SQLAlchemyError as e:
            logger.error(f"Failed to update preferences for user {user_id}: {str(e)}")
            self.db.rollback()
            return None

        logger.info(f"Updated news preferences for user {user_id}")
        return self.get(user_id)
