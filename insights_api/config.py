from __future__ import annotations

# insights_api/config.py
import os
from dataclasses import dataclass, field
from typing import Tuple

import yaml

# 配置来源优先级：
# 1) 环境变量（INSIGHTS_DB_PATH / INSIGHTS_LOG_LEVEL）
# 2) INSIGHTS_CONFIG 指向的 yaml，否则项目根 config.yaml
# 3) 代码内默认值
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_DB = os.path.join(PROJECT_ROOT, "insights.db")

DEFAULT_CORS_METHODS = ("GET", "POST", "OPTIONS")


@dataclass(frozen=True)
class CorsSettings:
    allow_origins: Tuple[str, ...] = ("*",)
    allow_methods: Tuple[str, ...] = DEFAULT_CORS_METHODS
    allow_headers: Tuple[str, ...] = ("*",)


@dataclass(frozen=True)
class Settings:
    db_path: str = DEFAULT_DB
    log_level: str = "INFO"
    cors: CorsSettings = field(default_factory=CorsSettings)


def read_config_yaml(cfg_path: str | None = None) -> dict:
    """读取 config.yaml；文件不存在或内容非 dict 时返回空配置。

    路径优先级：显式参数 > INSIGHTS_CONFIG > 项目根 config.yaml
    """
    cfg_path = cfg_path or os.environ.get("INSIGHTS_CONFIG") or os.path.join(PROJECT_ROOT, "config.yaml")
    if not os.path.exists(cfg_path):
        return {}
    with open(cfg_path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    return cfg if isinstance(cfg, dict) else {}


def _str_tuple(value, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if isinstance(value, str) and value.strip():
        return tuple(v.strip() for v in value.split(",") if v.strip())
    if isinstance(value, (list, tuple)) and value:
        return tuple(str(v).strip() for v in value)
    return default


def _is_test_env() -> bool:
    return (os.environ.get("APP_ENV") == "test") or (os.environ.get("PYTEST_CURRENT_TEST") is not None)


def resolve_db_path(cfg: dict) -> str:
    env_path = os.environ.get("INSIGHTS_DB_PATH")
    cfg_db = cfg.get("db_path")
    cfg_test = cfg.get("test_db_path")

    if env_path:
        return env_path
    if _is_test_env() and isinstance(cfg_test, str) and cfg_test.strip():
        return cfg_test.strip()
    if isinstance(cfg_db, str) and cfg_db.strip():
        return cfg_db.strip()
    return DEFAULT_DB


def load_settings(cfg_path: str | None = None) -> Settings:
    cfg = read_config_yaml(cfg_path)
    cors_cfg = cfg.get("cors") or {}
    cors = CorsSettings(
        allow_origins=_str_tuple(cors_cfg.get("allow_origins"), ("*",)),
        allow_methods=_str_tuple(cors_cfg.get("allow_methods"), DEFAULT_CORS_METHODS),
        allow_headers=_str_tuple(cors_cfg.get("allow_headers"), ("*",)),
    )
    log_level = os.environ.get("INSIGHTS_LOG_LEVEL") or cfg.get("log_level") or "INFO"
    return Settings(
        db_path=resolve_db_path(cfg),
        log_level=str(log_level).upper(),
        cors=cors,
    )
