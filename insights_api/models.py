"""
Response models for the insights API.

InsightSummary mirrors one row of insight_summary; ApiResponse is the
envelope every JSON endpoint returns.
"""
from __future__ import annotations

from typing import Generic, List, Literal, TypeVar

from pydantic import BaseModel

T = TypeVar("T")

Sentiment = Literal["positive", "negative", "neutral"]


class InsightSummary(BaseModel):
    id: int
    word: str
    total_count: int
    positive_count: int
    negative_count: int
    neutral_count: int
    positive_pct: float
    negative_pct: float
    neutral_pct: float
    created_at: str


class TopInsight(BaseModel):
    """Sidebar row: volume plus the dominant sentiment of a word."""
    id: int
    word: str
    total_count: int
    positive_pct: float
    negative_pct: float
    neutral_pct: float
    dominant_sentiment: Sentiment


class DashboardStats(BaseModel):
    total_insight_count: int
    total_feedback_count: int
    positive_ratio: float
    negative_ratio: float
    neutral_ratio: float
    top_positive: List[InsightSummary]
    top_negative: List[InsightSummary]
    sample_all: List[InsightSummary]


class ApiResponse(BaseModel, Generic[T]):
    success: bool
    data: T
    message: str

    @classmethod
    def ok(cls, data, message: str):
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, data=None):
        return cls(success=False, data=[] if data is None else data, message=message)
