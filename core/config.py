"""Runtime settings read from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

ROOT_DIR = Path(__file__).resolve().parents[1]
DEFAULT_BOOTSTRAP = ROOT_DIR / "data" / "sales_data.csv"
DEFAULT_CORS_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]


@dataclass(frozen=True)
class Settings:
    bootstrap_source: str = str(DEFAULT_BOOTSTRAP)
    fetch_timeout: float = 10.0
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    log_level: str = "INFO"


def _as_float(value: str | None, default: float) -> float:
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def load_settings(env: dict | None = None) -> Settings:
    env = os.environ if env is None else env
    origins = [o.strip() for o in (env.get("SALES_DASHBOARD_CORS_ORIGINS") or "").split(",") if o.strip()]
    return Settings(
        bootstrap_source=env.get("SALES_DASHBOARD_BOOTSTRAP") or str(DEFAULT_BOOTSTRAP),
        fetch_timeout=_as_float(env.get("SALES_DASHBOARD_FETCH_TIMEOUT"), 10.0),
        cors_origins=origins or list(DEFAULT_CORS_ORIGINS),
        log_level=(env.get("SALES_DASHBOARD_LOG_LEVEL") or "INFO").strip().upper(),
    )
