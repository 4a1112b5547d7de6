from __future__ import annotations

# insights_api/services/insight_svc.py
import logging
from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from ..errors import ValidationError
from ..models import ApiResponse, DashboardStats, InsightSummary, TopInsight
from ..repository.insight_repo import InsightRepository

logger = logging.getLogger(__name__)

TOP_PCT_THRESHOLD = 70.0
DASHBOARD_TOP_LIMIT = 5
TOP_LIST_LIMIT = 10
DASHBOARD_SAMPLE_LIMIT = 20
SIDEBAR_TOP_LIMIT = 10

WORD_REQUIRED_MESSAGE = "Word parameter is required"


def _round_ratio(value: float, precision: int = 2) -> float:
    """Round half away from zero using Decimal."""
    if value == 0.0:
        return 0.0
    return float(Decimal(str(value)).quantize(Decimal("0." + "0" * precision), rounding=ROUND_HALF_UP))


def sentiment_ratio(part: int, grand: int) -> float:
    """part / grand as a percentage with 2 decimals; 0.0 when grand is 0."""
    if grand <= 0:
        return 0.0
    return _round_ratio(part / grand * 100)


class InsightService:
    """Orchestrates repository reads and builds response envelopes."""

    def __init__(self, repo: InsightRepository, max_workers: int = 6):
        self.repo = repo
        self.max_workers = max_workers

    def get_summary(self) -> ApiResponse[List[InsightSummary]]:
        insights = self.repo.list_all()
        return ApiResponse[List[InsightSummary]].ok(
            insights, "Successfully retrieved all insights summary"
        )

    def get_dashboard(self) -> ApiResponse[DashboardStats]:
        # 子查询互相独立，并发发出，全部完成后再组装
        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            f_total = pool.submit(self.repo.count_all)
            f_feedback = pool.submit(self.repo.sum_total_count)
            f_sums = pool.submit(self.repo.sum_by_category)
            f_pos = pool.submit(self.repo.top_by_percentage, "positive", TOP_PCT_THRESHOLD, DASHBOARD_TOP_LIMIT)
            f_neg = pool.submit(self.repo.top_by_percentage, "negative", TOP_PCT_THRESHOLD, DASHBOARD_TOP_LIMIT)
            f_sample = pool.submit(self.repo.sample_ordered_by_total, DASHBOARD_SAMPLE_LIMIT)

            # result() 会把仓储层异常原样抛出
            pos, neg, neu = f_sums.result()
            grand = pos + neg + neu
            if grand == 0:
                logger.info("dashboard: no sentiment counts, ratios default to 0.0")

            stats = DashboardStats(
                total_insight_count=f_total.result(),
                total_feedback_count=f_feedback.result(),
                positive_ratio=sentiment_ratio(pos, grand),
                negative_ratio=sentiment_ratio(neg, grand),
                neutral_ratio=sentiment_ratio(neu, grand),
                top_positive=f_pos.result(),
                top_negative=f_neg.result(),
                sample_all=f_sample.result(),
            )
        return ApiResponse[DashboardStats].ok(stats, "Successfully retrieved dashboard statistics")

    def get_top_positive(self) -> ApiResponse[List[InsightSummary]]:
        insights = self.repo.top_by_percentage("positive", TOP_PCT_THRESHOLD, TOP_LIST_LIMIT)
        return ApiResponse[List[InsightSummary]].ok(
            insights, "Successfully retrieved top positive insights"
        )

    def get_top_negative(self) -> ApiResponse[List[InsightSummary]]:
        insights = self.repo.top_by_percentage("negative", TOP_PCT_THRESHOLD, TOP_LIST_LIMIT)
        return ApiResponse[List[InsightSummary]].ok(
            insights, "Successfully retrieved top negative insights"
        )

    def get_by_word(self, word: Optional[str]) -> ApiResponse[List[InsightSummary]]:
        if not word:
            raise ValidationError(WORD_REQUIRED_MESSAGE)
        insights = self.repo.search_by_word(word)
        return ApiResponse[List[InsightSummary]].ok(
            insights, f"Successfully retrieved insights for '{word}'"
        )

    def get_top_insights(self) -> ApiResponse[List[TopInsight]]:
        insights = self.repo.top_by_total(SIDEBAR_TOP_LIMIT)
        return ApiResponse[List[TopInsight]].ok(
            insights, "Successfully retrieved top 10 insights with sentiment"
        )
