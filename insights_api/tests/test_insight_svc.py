"""
洞察业务服务层测试
用内存假仓储测试 insight_svc.py 的聚合与信封组装
"""

from decimal import Decimal, ROUND_HALF_UP

import pytest

from conftest import make_row
from insights_api.errors import RepositoryError, RepositoryErrorKind, ValidationError
from insights_api.models import InsightSummary
from insights_api.services.insight_svc import InsightService, sentiment_ratio


class FakeRepository:
    """In-memory stand-in for InsightRepository with the same query semantics."""

    def __init__(self, rows=()):
        self.rows = [InsightSummary(id=i + 1, **r) for i, r in enumerate(rows)]
        self.calls = []

    def _by_total(self, rows):
        return sorted(rows, key=lambda r: r.total_count, reverse=True)

    def list_all(self):
        self.calls.append("list_all")
        return self._by_total(self.rows)

    def count_all(self):
        return len(self.rows)

    def sum_total_count(self):
        return sum(r.total_count for r in self.rows)

    def sum_by_category(self):
        return (
            sum(r.positive_count for r in self.rows),
            sum(r.negative_count for r in self.rows),
            sum(r.neutral_count for r in self.rows),
        )

    def top_by_percentage(self, category, threshold, limit):
        self.calls.append(("top_by_percentage", category, threshold, limit))
        attr = f"{category}_pct"
        hits = [r for r in self.rows if getattr(r, attr) > threshold]
        hits.sort(key=lambda r: (getattr(r, attr), r.total_count), reverse=True)
        return hits[:limit]

    def sample_ordered_by_total(self, limit):
        self.calls.append(("sample_ordered_by_total", limit))
        return self._by_total(self.rows)[:limit]

    def search_by_word(self, substring):
        self.calls.append(("search_by_word", substring))
        return self._by_total([r for r in self.rows if substring in r.word])

    def top_by_total(self, limit):
        self.calls.append(("top_by_total", limit))
        return []


def _expected_ratio(part, grand):
    return float(Decimal(str(part / grand * 100)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


SCENARIO = [make_row("great", 80, 10, 10), make_row("bad", 5, 40, 5)]


class TestSentimentRatio:

    def test_zero_grand_total_yields_zero(self):
        assert sentiment_ratio(0, 0) == 0.0
        assert sentiment_ratio(5, 0) == 0.0

    def test_two_decimals(self):
        assert sentiment_ratio(85, 150) == 56.67
        assert sentiment_ratio(50, 150) == 33.33
        assert sentiment_ratio(15, 150) == 10.0

    def test_rounds_half_away_from_zero(self):
        # 1/16 * 100 == 6.25 and 1/32 * 100 == 3.125 are exact in binary
        assert sentiment_ratio(1, 16) == 6.25
        assert sentiment_ratio(1, 32) == 3.13  # round() would give 3.12


class TestInsightService:

    def test_get_summary_sorted_by_total(self):
        svc = InsightService(FakeRepository([make_row("a", 1, 0, 0), make_row("b", 9, 1, 0)]))
        resp = svc.get_summary()
        assert resp.success is True
        assert resp.message == "Successfully retrieved all insights summary"
        assert [r.word for r in resp.data] == ["b", "a"]

    def test_get_dashboard_scenario(self):
        svc = InsightService(FakeRepository(SCENARIO))
        resp = svc.get_dashboard()
        stats = resp.data
        assert resp.success is True
        assert stats.total_insight_count == 2
        assert stats.total_feedback_count == 150
        assert stats.positive_ratio == _expected_ratio(85, 150)
        assert stats.negative_ratio == _expected_ratio(50, 150)
        assert stats.neutral_ratio == _expected_ratio(15, 150)
        assert abs(stats.positive_ratio + stats.negative_ratio + stats.neutral_ratio - 100.0) <= 0.02
        assert [r.word for r in stats.top_positive] == ["great"]
        assert [r.word for r in stats.top_negative] == ["bad"]
        assert [r.word for r in stats.sample_all] == ["great", "bad"]

    def test_get_dashboard_uses_fixed_limits(self):
        repo = FakeRepository(SCENARIO)
        InsightService(repo).get_dashboard()
        assert ("top_by_percentage", "positive", 70.0, 5) in repo.calls
        assert ("top_by_percentage", "negative", 70.0, 5) in repo.calls
        assert ("sample_ordered_by_total", 20) in repo.calls

    def test_get_dashboard_empty_table(self):
        stats = InsightService(FakeRepository()).get_dashboard().data
        assert stats.total_insight_count == 0
        assert stats.total_feedback_count == 0
        assert (stats.positive_ratio, stats.negative_ratio, stats.neutral_ratio) == (0.0, 0.0, 0.0)
        assert stats.top_positive == [] and stats.sample_all == []

    def test_top_lists_use_limit_ten(self):
        rows = [make_row(f"p{i}", 90 + i, 1, 1) for i in range(12)]
        repo = FakeRepository(rows)
        svc = InsightService(repo)
        resp = svc.get_top_positive()
        assert len(resp.data) == 10
        assert resp.message == "Successfully retrieved top positive insights"
        assert svc.get_top_negative().data == []
        assert ("top_by_percentage", "negative", 70.0, 10) in repo.calls

    @pytest.mark.parametrize("word", [None, ""])
    def test_get_by_word_requires_word(self, word):
        repo = FakeRepository(SCENARIO)
        with pytest.raises(ValidationError) as ei:
            InsightService(repo).get_by_word(word)
        assert ei.value.message == "Word parameter is required"
        assert not any(isinstance(c, tuple) and c[0] == "search_by_word" for c in repo.calls)

    def test_get_by_word_blank_is_a_search_term(self):
        repo = FakeRepository([make_row("work life", 3, 1, 0), make_row("gaji", 5, 0, 0)])
        resp = InsightService(repo).get_by_word(" ")
        assert resp.success is True
        assert [r.word for r in resp.data] == ["work life"]
        assert ("search_by_word", " ") in repo.calls

    def test_get_by_word_substring(self):
        repo = FakeRepository([
            make_row("foobar", 1, 0, 0),
            make_row("barfoo", 2, 0, 0),
            make_row("baz", 3, 0, 0),
        ])
        resp = InsightService(repo).get_by_word("foo")
        assert resp.success is True
        assert {r.word for r in resp.data} == {"foobar", "barfoo"}
        assert "'foo'" in resp.message

    def test_get_top_insights(self):
        repo = FakeRepository()
        resp = InsightService(repo).get_top_insights()
        assert resp.data == []
        assert ("top_by_total", 10) in repo.calls

    def test_repository_errors_propagate_from_dashboard(self):
        repo = FakeRepository(SCENARIO)

        def boom():
            raise RepositoryError(RepositoryErrorKind.QUERY_FAILURE, "no such table")

        repo.sum_total_count = boom
        with pytest.raises(RepositoryError):
            InsightService(repo).get_dashboard()
