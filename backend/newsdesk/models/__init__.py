from .source import Source, SourceType
from .article import Article, ArticleCategory
from .preferences import UserNewsPreferences, DEFAULT_NOTIFICATION_SETTINGS
from .interaction import NewsInteraction, InteractionAction, InteractionFeedback
from .saved_article import SavedArticle
from .digest import NewsDigest, DigestType

__all__ = [
    "Source",
    "SourceType",
    "Article",
    "ArticleCategory",
    "UserNewsPreferences",
    "DEFAULT_NOTIFICATION_SETTINGS",
    "NewsInteraction",
    "InteractionAction",
    "InteractionFeedback",
    "SavedArticle",
    "NewsDigest",
    "DigestType",
]
