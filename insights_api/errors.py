from __future__ import annotations

# insights_api/errors.py
from enum import Enum


class ValidationError(Exception):
    """缺少必填参数等调用方错误，边界层转成 400。"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class RepositoryErrorKind(str, Enum):
    CONNECTION_FAILURE = "ConnectionFailure"
    QUERY_FAILURE = "QueryFailure"
    DECODE_FAILURE = "DecodeFailure"


class RepositoryError(Exception):
    """数据访问失败（连接 / SQL 执行 / 行解码），不在本层重试。"""

    def __init__(self, kind: RepositoryErrorKind, message: str):
        super().__init__(f"{kind.value}: {message}")
        self.kind = kind
        self.message = message
