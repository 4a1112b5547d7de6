"""
洞察数据访问层
只负责固定形状的只读查询，并把行映射成 InsightSummary / TopInsight
"""
from __future__ import annotations

from typing import Any, Callable, List, Mapping, Tuple, TypeVar

from pydantic import ValidationError as PydanticValidationError

from ..db import Store
from ..errors import RepositoryError, RepositoryErrorKind
from ..models import InsightSummary, TopInsight

M = TypeVar("M")

SUMMARY_COLUMNS = """
    id, word, total_count, positive_count, negative_count, neutral_count,
    positive_pct, negative_pct, neutral_pct, created_at
"""

# category -> percentage column; never built from request input
PCT_COLUMNS = {
    "positive": "positive_pct",
    "negative": "negative_pct",
}


def _decode(rows: List[Mapping[str, Any]], build: Callable[..., M]) -> List[M]:
    try:
        return [build(**dict(r)) for r in rows]
    except (PydanticValidationError, TypeError) as e:
        raise RepositoryError(RepositoryErrorKind.DECODE_FAILURE, str(e)) from e


def _scalar(row: Mapping[str, Any] | None, key: str) -> int:
    """SUM() over an empty table yields NULL; normalize it to 0."""
    if row is None or row.get(key) is None:
        return 0
    try:
        return int(row[key])
    except (TypeError, ValueError) as e:
        raise RepositoryError(RepositoryErrorKind.DECODE_FAILURE, f"{key}: {e}") from e


class InsightRepository:
    def __init__(self, store: Store):
        self.store = store

    def list_all(self) -> List[InsightSummary]:
        rows = self.store.query(
            f"SELECT {SUMMARY_COLUMNS} FROM insight_summary ORDER BY total_count DESC"
        )
        return _decode(rows, InsightSummary)

    def count_all(self) -> int:
        row = self.store.query_one("SELECT COUNT(*) AS count FROM insight_summary")
        return _scalar(row, "count")

    def sum_total_count(self) -> int:
        row = self.store.query_one("SELECT SUM(total_count) AS total FROM insight_summary")
        return _scalar(row, "total")

    def sum_by_category(self) -> Tuple[int, int, int]:
        row = self.store.query_one(
            """
            SELECT SUM(positive_count) AS pos,
                   SUM(negative_count) AS neg,
                   SUM(neutral_count)  AS neu
            FROM insight_summary
            """
        )
        return _scalar(row, "pos"), _scalar(row, "neg"), _scalar(row, "neu")

    def top_by_percentage(self, category: str, threshold: float, limit: int) -> List[InsightSummary]:
        """
        按情感占比取 Top-N

        Args:
            category: positive | negative
            threshold: 占比下限（严格大于）
            limit: 返回条数上限

        Returns:
            按占比降序、total_count 降序排列的记录
        """
        col = PCT_COLUMNS.get(category)
        if col is None:
            raise ValueError(f"unsupported category: {category!r}")
        rows = self.store.query(
            f"""
            SELECT {SUMMARY_COLUMNS}
            FROM insight_summary
            WHERE {col} > ?
            ORDER BY {col} DESC, total_count DESC
            LIMIT ?
            """,
            (threshold, limit),
        )
        return _decode(rows, InsightSummary)

    def sample_ordered_by_total(self, limit: int) -> List[InsightSummary]:
        rows = self.store.query(
            f"SELECT {SUMMARY_COLUMNS} FROM insight_summary ORDER BY total_count DESC LIMIT ?",
            (limit,),
        )
        return _decode(rows, InsightSummary)

    def search_by_word(self, substring: str) -> List[InsightSummary]:
        # LIKE 语义交给 SQLite（ASCII 大小写不敏感）；调用方保证 substring 非空
        rows = self.store.query(
            f"""
            SELECT {SUMMARY_COLUMNS}
            FROM insight_summary
            WHERE word LIKE ?
            ORDER BY total_count DESC
            """,
            (f"%{substring}%",),
        )
        return _decode(rows, InsightSummary)

    def top_by_total(self, limit: int) -> List[TopInsight]:
        rows = self.store.query(
            """
            SELECT id, word, total_count, positive_pct, negative_pct, neutral_pct,
                   CASE
                     WHEN positive_pct > negative_pct AND positive_pct > neutral_pct THEN 'positive'
                     WHEN negative_pct > positive_pct AND negative_pct > neutral_pct THEN 'negative'
                     ELSE 'neutral'
                   END AS dominant_sentiment
            FROM insight_summary
            ORDER BY total_count DESC
            LIMIT ?
            """,
            (limit,),
        )
        return _decode(rows, TopInsight)
