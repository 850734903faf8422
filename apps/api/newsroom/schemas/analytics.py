"""Analytics report schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel


class AnalyticsPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class PeriodStats(BaseModel):
    articles_in_period: int
    published_in_period: int
    users_in_period: int


class AuthorRanking(BaseModel):
    id: str
    username: str
    email: str
    count: int


class CategoryRanking(BaseModel):
    category: str
    count: int


class AnalyticsReport(BaseModel):
    period: AnalyticsPeriod
    start_date: datetime
    end_date: datetime
    stats: PeriodStats
    top_authors: list[AuthorRanking]
    popular_categories: list[CategoryRanking]
