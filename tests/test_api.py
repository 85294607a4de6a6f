from __future__ import annotations

import io
import json

import pandas as pd
import pytest

from core.codecs import decode_csv
from core.store import InMemoryDatasetStore

from tests.conftest import SAMPLE_CSV

JANUARY = {"from": "2024-01-01T00:00:00", "to": "2024-01-31T23:59:59"}


def _upload(client, content: str, name: str = "sales.csv"):
    return client.post("/api/files", files={"file": (name, content.encode("utf-8"), "text/plain")})


def test_upload_retrieve_filter_aggregate(client) -> None:
    resp = _upload(client, SAMPLE_CSV)
    assert resp.status_code == 200
    file_id = resp.json()["fileId"]

    records = client.get(f"/api/files/{file_id}").json()
    assert len(records) == 2
    assert records[0] == {
        "timestamp": "2024-01-01T00:00:00",
        "user_id": 1,
        "region": "East",
        "category": "Books",
        "sales_amount": 10.5,
        "items_sold": 2,
    }

    payload = client.post(f"/dashboard?file_id={file_id}", json={**JANUARY, "region": "East"}).json()
    assert payload["summary"] == {"totalSales": 10.5, "itemsSold": 2, "transactions": 1}
    assert payload["by_day"] == [{"date": "2024-01-01", "salesAmount": 10.5, "itemsSold": 2, "transactions": 1}]

    unfiltered = client.post(f"/dashboard?file_id={file_id}", json=JANUARY).json()
    assert unfiltered["by_region"] == [
        {"name": "East", "salesAmount": 10.5, "itemsSold": 2, "transactions": 1},
        {"name": "West", "salesAmount": 5.0, "itemsSold": 1, "transactions": 1},
    ]
    assert set(unfiltered["charts"]) == {"sales_over_time", "sales_by_region", "sales_by_category"}
    assert unfiltered["options"] == {"regions": ["East", "West"], "categories": ["Books", "Toys"], "users": ["1", "2"]}

    exported = client.post(f"/export?file_id={file_id}", json={**JANUARY, "region": "East"})
    assert exported.status_code == 200
    assert decode_csv(exported.text) == [
        {
            "timestamp": "2024-01-01T00:00:00",
            "user_id": 1,
            "region": "East",
            "category": "Books",
            "sales_amount": 10.5,
            "items_sold": 2.0,
        }
    ]


def test_json_upload(client) -> None:
    body = json.dumps(
        [{"timestamp": "2024-01-05T10:00:00Z", "user_id": 9, "region": "South", "category": "Games", "sales_amount": 12, "items_sold": 1}]
    )
    file_id = _upload(client, body, "data.JSON").json()["fileId"]
    records = client.get(f"/api/files/{file_id}").json()
    assert records[0]["timestamp"] == "2024-01-05T10:00:00"
    assert records[0]["sales_amount"] == 12.0


@pytest.mark.parametrize(
    "content, name, status, message",
    [
        (SAMPLE_CSV, "sales.xlsx", 415, "Only JSON and CSV files are supported"),
        ("{oops", "sales.json", 400, "Invalid JSON format"),
        ("[]", "sales.json", 400, "Invalid data format: Expected a non-empty array"),
        ('[{"region": "x"}]', "sales.json", 400, "Invalid data format: Missing required field 'timestamp'"),
    ],
)
def test_rejected_uploads(client, store: InMemoryDatasetStore, content: str, name: str, status: int, message: str) -> None:
    resp = _upload(client, content, name)
    assert resp.status_code == status
    assert resp.json() == {"error": message}
    assert len(store) == 0


def test_unknown_file_is_404(client) -> None:
    resp = client.get("/api/files/not-a-real-id")
    assert resp.status_code == 404
    assert resp.json() == {"error": "File not found"}


def test_store_failure_is_500(client) -> None:
    import api.main as main

    class BrokenStore(InMemoryDatasetStore):
        def get(self, dataset_id):
            raise RuntimeError("disk on fire")

    main.app.dependency_overrides[main.get_store] = lambda: BrokenStore()
    resp = client.get("/api/files/anything")
    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to retrieve file"}


def test_dashboard_defaults_to_bootstrap_and_previous_month(client) -> None:
    # FIXED_NOW is mid-February, so the default range is January.
    payload = client.post("/dashboard", json={}).json()
    assert payload["summary"]["transactions"] == 2
    assert payload["filters"]["date_from"] == "2024-01-01T00:00:00"


def test_dashboard_for_unknown_file_is_404(client) -> None:
    resp = client.post("/dashboard?file_id=missing", json={})
    assert resp.status_code == 404


def test_dashboard_chart_type(client) -> None:
    payload = client.post("/dashboard?chart_type=bar", json=JANUARY).json()
    layers = payload["charts"]["sales_over_time"]["layer"]
    assert all(layer["mark"]["type"] == "bar" for layer in layers)


def test_meta_options(client) -> None:
    file_id = _upload(client, SAMPLE_CSV).json()["fileId"]
    assert client.get(f"/meta/options?file_id={file_id}").json()["regions"] == ["East", "West"]
    assert client.get("/meta/options?file_id=missing").status_code == 404


def test_export_returns_filtered_csv(client, sample_frame: pd.DataFrame) -> None:
    file_id = _upload(client, SAMPLE_CSV).json()["fileId"]
    resp = client.post(f"/export?file_id={file_id}", json={**JANUARY, "region": "West"})

    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/csv")
    rows = decode_csv(resp.text)
    assert rows == [
        {
            "timestamp": "2024-01-01T00:00:00",
            "user_id": 2,
            "region": "West",
            "category": "Toys",
            "sales_amount": 5.0,
            "items_sold": 1.0,
        }
    ]


def test_export_keeps_values_with_commas_intact(client) -> None:
    body = json.dumps(
        [
            {"timestamp": "2024-01-03T09:00:00", "user_id": 4, "region": "North, Upper", "category": "Books", "sales_amount": 7.5, "items_sold": 2},
            {"timestamp": "2024-01-04T09:00:00", "user_id": 5, "region": "West", "category": "Toys", "sales_amount": 1.0, "items_sold": 1},
        ]
    )
    file_id = _upload(client, body, "sales.json").json()["fileId"]
    resp = client.post(f"/export?file_id={file_id}", json={**JANUARY, "region": "North, Upper"})

    back = pd.read_csv(io.StringIO(resp.text))
    assert len(back.columns) == 6
    assert back.to_dict(orient="records") == [
        {
            "timestamp": "2024-01-03T09:00:00",
            "user_id": 4,
            "region": "North, Upper",
            "category": "Books",
            "sales_amount": 7.5,
            "items_sold": 2,
        }
    ]


def test_csv_upload_tolerates_float_ids_and_empty_cells(client) -> None:
    text = "timestamp,user_id,region,category,sales_amount,items_sold\n2024-01-01,101.0,East,Books,10.5,\n"
    resp = _upload(client, text)
    assert resp.status_code == 200

    records = client.get(f"/api/files/{resp.json()['fileId']}").json()
    assert records[0]["user_id"] == 101
    assert records[0]["items_sold"] is None


def test_json_upload_with_epoch_millis_and_huge_count(client) -> None:
    body = json.dumps(
        [{"timestamp": 1704103200000, "user_id": 9, "region": "South", "category": "Games", "sales_amount": 12, "items_sold": 1e20}]
    )
    resp = _upload(client, body, "sales.json")
    assert resp.status_code == 200

    records = client.get(f"/api/files/{resp.json()['fileId']}").json()
    assert records[0]["timestamp"] == "2024-01-01T10:00:00"
    assert records[0]["items_sold"] is None
