from __future__ import annotations

# insights_api/db.py
import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterator, List, Mapping, Optional, Protocol, Sequence, Union

from .errors import RepositoryError, RepositoryErrorKind

Params = Union[Sequence[Any], Mapping[str, Any]]


@contextmanager
def get_conn(db_path: str) -> Iterator[sqlite3.Connection]:
    """
    获取 SQLite 连接（路径由调用方从 Settings 传入）。
    row_factory 设为 Row，便于按列名取值。
    """
    conn = sqlite3.connect(
        db_path,
        detect_types=sqlite3.PARSE_DECLTYPES | sqlite3.PARSE_COLNAMES,
        check_same_thread=False,
        isolation_level=None,
    )
    try:
        conn.row_factory = sqlite3.Row
        yield conn
    finally:
        conn.close()


class Store(Protocol):
    """Read-only query capability injected into the repository."""

    def query(self, sql: str, params: Params = ()) -> List[Mapping[str, Any]]: ...

    def query_one(self, sql: str, params: Params = ()) -> Optional[Mapping[str, Any]]: ...


class SqliteStore:
    """
    Store backed by a SQLite file. Each call opens its own short-lived
    connection, so concurrent callers never share a cursor.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    def _check_exists(self):
        # sqlite3.connect 会静默创建不存在的文件，只读服务里视为连接失败
        if self.db_path != ":memory:" and not os.path.exists(self.db_path):
            raise RepositoryError(
                RepositoryErrorKind.CONNECTION_FAILURE, f"database not found: {self.db_path}"
            )

    def _run(self, sql: str, params: Params, one: bool):
        self._check_exists()
        try:
            with get_conn(self.db_path) as conn:
                cur = conn.execute(sql, params)
                if one:
                    row = cur.fetchone()
                    return dict(row) if row is not None else None
                return [dict(r) for r in cur.fetchall()]
        except sqlite3.OperationalError as e:
            # "unable to open database file" 属于连接问题，其余视为 SQL 执行失败
            kind = (
                RepositoryErrorKind.CONNECTION_FAILURE
                if "unable to open" in str(e)
                else RepositoryErrorKind.QUERY_FAILURE
            )
            raise RepositoryError(kind, str(e)) from e
        except sqlite3.Error as e:
            raise RepositoryError(RepositoryErrorKind.QUERY_FAILURE, str(e)) from e

    def query(self, sql: str, params: Params = ()) -> List[Mapping[str, Any]]:
        return self._run(sql, params, one=False)

    def query_one(self, sql: str, params: Params = ()) -> Optional[Mapping[str, Any]]:
        return self._run(sql, params, one=True)
