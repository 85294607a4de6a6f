"""Shared fixtures: small sales frames and an API client with an isolated store.

The API module keeps one process-wide store; each test gets its own
``InMemoryDatasetStore`` through FastAPI dependency overrides so uploads made
in one test are never visible to another.
"""

from __future__ import annotations

from datetime import datetime

import pandas as pd
import pytest

from core.codecs import decode_csv
from core.records import to_frame
from core.store import InMemoryDatasetStore

SAMPLE_CSV = (
    "timestamp,user_id,region,category,sales_amount,items_sold\n"
    "2024-01-01,1,East,Books,10.5,2\n"
    "2024-01-01,2,West,Toys,5,1"
)

FIXED_NOW = datetime(2024, 2, 15, 12, 0, 0)


@pytest.fixture
def sample_frame() -> pd.DataFrame:
    return to_frame(decode_csv(SAMPLE_CSV))


@pytest.fixture
def january_frame() -> pd.DataFrame:
    text = "\n".join(
        [
            "timestamp,user_id,region,category,sales_amount,items_sold",
            "2024-01-03T09:00:00,1,East,Books,10,1",
            "2024-01-10T12:30:00,2,West,Toys,20.25,2",
            "2024-01-15T18:45:00,1,East,Toys,5.5,1",
            "2024-01-31T23:59:59,3,North,Books,7,3",
            "2024-02-02T08:00:00,2,East,Books,100,10",
        ]
    )
    return to_frame(decode_csv(text))


@pytest.fixture
def store() -> InMemoryDatasetStore:
    return InMemoryDatasetStore()


@pytest.fixture
def client(store: InMemoryDatasetStore, sample_frame: pd.DataFrame, monkeypatch: pytest.MonkeyPatch):
    from fastapi.testclient import TestClient

    import api.main as main

    main.app.dependency_overrides[main.get_store] = lambda: store
    main.app.dependency_overrides[main.get_now] = lambda: FIXED_NOW
    monkeypatch.setattr(main, "get_bootstrap_dataset", lambda: sample_frame)
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
