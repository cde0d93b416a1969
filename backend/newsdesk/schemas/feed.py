from pydantic import BaseModel
from typing import List, Dict
from .article import Article


class Recommendations(BaseModel):
    trending: List[Article] = []
    for_you: List[Article] = []
    breaking: List[Article] = []
    industry: List[Article] = []


class PersonalizedFeed(BaseModel):
    articles: List[Article] = []
    total_count: int = 0
    relevance_scores: Dict[int, float] = {}
    recommendations: Recommendations = Recommendations()


class AggregationResult(BaseModel):
    fetched: int = 0
    errors: List[str] = []
