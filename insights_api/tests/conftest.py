import os
import sys
import sqlite3
import pytest
from pathlib import Path

# Ensure project root on sys.path
_THIS_DIR = Path(__file__).resolve().parent
_PROJECT_ROOT = _THIS_DIR.parent.parent
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


def make_row(word, pos, neg, neu, **overrides):
    """Build an insight_summary row whose percentages follow from the counts."""
    total = pos + neg + neu
    pct = (lambda c: round(c / total * 100, 2) if total else 0.0)
    row = {
        "word": word,
        "total_count": total,
        "positive_count": pos,
        "negative_count": neg,
        "neutral_count": neu,
        "positive_pct": pct(pos),
        "negative_pct": pct(neg),
        "neutral_pct": pct(neu),
        "created_at": "2025-01-01 00:00:00",
    }
    row.update(overrides)
    return row


@pytest.fixture(scope="session")
def tmp_db_path(tmp_path_factory):
    path = tmp_path_factory.mktemp("db") / "insights_test.db"
    # Point the app to this temp DB
    os.environ["INSIGHTS_DB_PATH"] = str(path)
    schema = Path(_PROJECT_ROOT / "schema.sql").read_text(encoding="utf-8")
    conn = sqlite3.connect(str(path))
    try:
        conn.executescript(schema)
        conn.commit()
    finally:
        conn.close()
    return str(path)


@pytest.fixture(autouse=True)
def _clean_db(tmp_db_path):
    # Safety: ensure we only ever wipe the temp DB, never a real one
    assert os.environ.get("INSIGHTS_DB_PATH") == tmp_db_path, "Refusing to clean non-temp DB"
    conn = sqlite3.connect(tmp_db_path)
    try:
        conn.execute("DELETE FROM insight_summary")
        conn.commit()
    finally:
        conn.close()
    yield


@pytest.fixture()
def insert_insights(tmp_db_path):
    """Insert rows directly, standing in for the external ingestion job."""
    def _insert(*rows):
        conn = sqlite3.connect(tmp_db_path)
        try:
            conn.executemany(
                """INSERT INTO insight_summary
                (word,total_count,positive_count,negative_count,neutral_count,
                 positive_pct,negative_pct,neutral_pct,created_at)
                VALUES(:word,:total_count,:positive_count,:negative_count,:neutral_count,
                       :positive_pct,:negative_pct,:neutral_pct,:created_at)""",
                rows,
            )
            conn.commit()
        finally:
            conn.close()
    return _insert


@pytest.fixture()
def repo(tmp_db_path):
    from insights_api.db import SqliteStore
    from insights_api.repository.insight_repo import InsightRepository
    return InsightRepository(SqliteStore(tmp_db_path))


@pytest.fixture()
def client(tmp_db_path):
    from fastapi.testclient import TestClient
    from insights_api.api import create_app
    from insights_api.config import Settings
    return TestClient(create_app(Settings(db_path=tmp_db_path)))
