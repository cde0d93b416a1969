from newsdesk.schemas.source import Source, SourceBase
from newsdesk.schemas.article import Article, ArticleSearchFilters
from newsdesk.schemas.preferences import (
    Preferences,
    PreferencesUpdate,
    NotificationSettings,
    NotificationSettingsUpdate,
)
from newsdesk.schemas.interaction import (
    InteractionCreate,
    InteractionOptions,
    InteractionResult,
)
from newsdesk.schemas.saved_article import (
    SavedArticle,
    SavedArticleCreate,
    SavedArticleWithArticle,
    SaveOptions,
)
from newsdesk.schemas.digest import Digest, DigestStateChange
from newsdesk.schemas.feed import PersonalizedFeed, Recommendations, AggregationResult

__all__ = [
    "Source",
    "SourceBase",
    "Article",
    "ArticleSearchFilters",
    "Preferences",
    "PreferencesUpdate",
    "NotificationSettings",
    "NotificationSettingsUpdate",
    "InteractionCreate",
    "InteractionOptions",
    "InteractionResult",
    "SavedArticle",
    "SavedArticleCreate",
    "SavedArticleWithArticle",
    "SaveOptions",
    "Digest",
    "DigestStateChange",
    "PersonalizedFeed",
    "Recommendations",
    "AggregationResult",
]
