"""
Per-user relevance scoring.

Everything here is pure: callers load articles, preferences and interaction
history, and these functions only compute. Scores are always within [0, 1].
"""

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence

BASE_SCORE = 0.5
CATEGORY_MATCH_BONUS = 0.25
KEYWORD_STEP, KEYWORD_CAP = 0.1, 0.3
ENTITY_STEP, ENTITY_CAP = 0.1, 0.2  # companies and industries, each
BEHAVIOR_BONUS = 0.15
RECENCY_FULL_HOURS, RECENCY_HALF_HOURS = 24, 72
RECENCY_BONUS = 0.1
SENTIMENT_WEIGHT = 0.1

# Mean of these over an article's interactions becomes its base relevance
ACTION_WEIGHTS = {
    "saved": 0.9,
    "shared": 0.8,
    "clicked": 0.6,
    "viewed": 0.4,
    "hidden": 0.1,
}
DEFAULT_ACTION_WEIGHT = 0.3

POSITIVE_ACTIONS = {"viewed", "clicked", "saved", "shared"}
NEGATIVE_ACTIONS = {"hidden", "reported"}
NEGATIVE_ACTION_PENALTY = 0.5


@dataclass
class InteractionSignal:
    """One past interaction joined with the bits of its article the scorer needs."""

    action: str
    categories: List[str] = field(default_factory=list)
    sentiment: Optional[float] = None
    reading_time_seconds: Optional[int] = None


@dataclass
class UserBehavior:
    preferred_categories: List[str] = field(default_factory=list)
    preferred_sentiment: Optional[float] = None
    avg_reading_time: Optional[float] = None


def clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def action_weight(action: str) -> float:
    return ACTION_WEIGHTS.get(action, DEFAULT_ACTION_WEIGHT)


def average_sentiment(values: Iterable[Optional[float]]) -> Optional[float]:
    """Mean over defined sentiments; None when there are none."""
    defined = [v for v in values if v is not None]
    if not defined:
        return None
    return sum(defined) / len(defined)


def analyze_user_behavior(
    signals: Sequence[InteractionSignal], max_categories: int = 3
) -> UserBehavior:
    """Derive category affinity and sentiment taste from interaction history."""
    category_weights: Dict[str, float] = defaultdict(float)
    positive_sentiments: List[Optional[float]] = []
    reading_times: List[int] = []

    for signal in signals:
        if signal.action in POSITIVE_ACTIONS:
            weight = action_weight(signal.action)
            positive_sentiments.append(signal.sentiment)
        elif signal.action in NEGATIVE_ACTIONS:
            weight = -NEGATIVE_ACTION_PENALTY
        else:
            continue

        for category in signal.categories:
            category_weights[category] += weight

        if signal.reading_time_seconds:
            reading_times.append(signal.reading_time_seconds)

    ranked = sorted(
        (item for item in category_weights.items() if item[1] > 0),
        key=lambda item: (-item[1], item[0]),
    )

    return UserBehavior(
        preferred_categories=[name for name, _ in ranked[:max_categories]],
        preferred_sentiment=average_sentiment(positive_sentiments),
        avg_reading_time=(
            sum(reading_times) / len(reading_times) if reading_times else None
        ),
    )


def _count_matches(terms: Iterable[str], text: str) -> int:
    return sum(1 for term in terms if term and term.lower() in text)


def _hours_old(article, now: datetime) -> Optional[float]:
    timestamp = article.published_at or getattr(article, "created_at", None)
    if timestamp is None:
        return None
    if timestamp.tzinfo is not None:
        timestamp = timestamp.astimezone(timezone.utc).replace(tzinfo=None)
    return (now - timestamp).total_seconds() / 3600


def score_article(
    article,
    preferences,
    behavior: Optional[UserBehavior] = None,
    now: Optional[datetime] = None,
) -> float:
    """
    Relevance of one article for one user, in [0, 1].

    Args:
        article: Anything with title, summary, categories, sentiment,
            published_at/created_at and relevance_score attributes
        preferences: The user's preferences, or None
        behavior: Summary of recent interactions (see analyze_user_behavior)
        now: Reference time as naive UTC (default: current time)
    """
    if preferences is None:
        base = article.relevance_score
        return clamp(base if base is not None else BASE_SCORE)

    now = now or datetime.utcnow()
    behavior = behavior or UserBehavior()
    categories = set(article.categories or [])
    text = f"{article.title} {article.summary or ''}".lower()

    score = BASE_SCORE

    if preferences.categories and categories & set(preferences.categories):
        score += CATEGORY_MATCH_BONUS

    if preferences.keywords:
        score += min(KEYWORD_CAP, _count_matches(preferences.keywords, text) * KEYWORD_STEP)

    if preferences.companies:
        score += min(ENTITY_CAP, _count_matches(preferences.companies, text) * ENTITY_STEP)

    if preferences.industries:
        score += min(ENTITY_CAP, _count_matches(preferences.industries, text) * ENTITY_STEP)

    if categories & set(behavior.preferred_categories):
        score += BEHAVIOR_BONUS

    hours_old = _hours_old(article, now)
    if hours_old is not None:
        if hours_old < RECENCY_FULL_HOURS:
            score += RECENCY_BONUS
        elif hours_old < RECENCY_HALF_HOURS:
            score += RECENCY_BONUS / 2

    # Closeness to the user's usual sentiment: +0.1 when identical, nothing when far apart
    if article.sentiment is not None and behavior.preferred_sentiment is not None:
        distance = abs(article.sentiment - behavior.preferred_sentiment)
        score += max(0.0, SENTIMENT_WEIGHT - distance * SENTIMENT_WEIGHT)

    return clamp(score)


def score_articles(
    articles: Sequence,
    preferences,
    signals: Sequence[InteractionSignal] = (),
    now: Optional[datetime] = None,
) -> Dict[int, float]:
    """Score a batch against one user; returns {article.id: score}."""
    behavior = analyze_user_behavior(signals) if preferences is not None else None
    return {
        article.id: score_article(article, preferences, behavior, now)
        for article in articles
    }
