from __future__ import annotations

import logging
import math
from datetime import datetime
from functools import lru_cache
from typing import Literal, Optional

import numpy as np
import pandas as pd
from fastapi import Depends, FastAPI, File, Query, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.schemas import DashboardResponse, ErrorResponse, FilterOptionsResponse, SalesFiltersModel, UploadResponse
from core.codecs import encode_csv
from core.config import load_settings
from core.errors import DashboardError, NotFoundError, UnsupportedTypeError
from core.filters import SalesFilters, filter_options, filter_sales, normalize_filters
from core.ingest import ingest_upload, load_bootstrap_dataset
from core.logging_setup import configure_logging
from core.metrics_sales import compute_dashboard
from core.records import frame_to_records
from core.store import DatasetStore, InMemoryDatasetStore

settings = load_settings()
configure_logging(settings.log_level)

app = FastAPI(title="Sales Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_store = InMemoryDatasetStore()


def get_store() -> DatasetStore:
    return _store


def get_now() -> datetime:
    return datetime.now()


@lru_cache(maxsize=1)
def get_bootstrap_dataset() -> pd.DataFrame:
    return load_bootstrap_dataset(settings.bootstrap_source, timeout=settings.fetch_timeout)


def _json(data: object, status_code: int = 200) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                type(pd.NaT): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
                pd.Timestamp: lambda ts: ts.isoformat(),
            },
        ),
    )


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _filters_from_model(model: SalesFiltersModel, *, now: datetime) -> SalesFilters:
    return normalize_filters(model.model_dump(), now=now)


def _resolve_dataset(file_id: Optional[str], store: DatasetStore) -> pd.DataFrame:
    if not file_id:
        return get_bootstrap_dataset()
    df = store.get(file_id)
    if df is None:
        raise NotFoundError()
    return df


@app.post("/api/files", response_model=UploadResponse, responses={400: {"model": ErrorResponse}, 415: {"model": ErrorResponse}})
async def upload_file(file: UploadFile = File(...), store: DatasetStore = Depends(get_store)):
    content = await file.read()
    try:
        file_id = ingest_upload(content, file.filename or "", store)
    except UnsupportedTypeError as exc:
        return _error(415, str(exc))
    except DashboardError as exc:
        logger.info("upload of %s rejected: %s", file.filename, exc)
        return _error(400, str(exc))
    return {"fileId": file_id}


@app.get("/api/files/{file_id}", responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})
def get_file(file_id: str, store: DatasetStore = Depends(get_store)):
    try:
        df = store.get(file_id)
        if df is None:
            return _error(404, "File not found")
        return _json(frame_to_records(df))
    except Exception:
        logger.exception("get_file failed for %s", file_id)
        return _error(500, "Failed to retrieve file")


@app.get("/meta/options", response_model=FilterOptionsResponse)
def meta_options(file_id: Optional[str] = Query(default=None), store: DatasetStore = Depends(get_store)):
    try:
        return _json(filter_options(_resolve_dataset(file_id, store)))
    except NotFoundError as exc:
        return _error(404, str(exc))
    except Exception as exc:
        logger.exception("meta_options failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/dashboard", response_model=DashboardResponse)
def dashboard(
    filters: SalesFiltersModel,
    file_id: Optional[str] = Query(default=None),
    chart_type: Literal["line", "bar", "area"] = Query(default="line"),
    store: DatasetStore = Depends(get_store),
    now: datetime = Depends(get_now),
):
    try:
        df = _resolve_dataset(file_id, store)
        f = _filters_from_model(filters, now=now)
        return _json(compute_dashboard(f, df, now=now, chart_type=chart_type))
    except NotFoundError as exc:
        return _error(404, str(exc))
    except Exception as exc:
        logger.exception("dashboard failed")
        return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.post("/export")
def export_csv(
    filters: SalesFiltersModel,
    file_id: Optional[str] = Query(default=None),
    store: DatasetStore = Depends(get_store),
    now: datetime = Depends(get_now),
):
    try:
        df = _resolve_dataset(file_id, store)
    except NotFoundError as exc:
        return _error(404, str(exc))
    f = _filters_from_model(filters, now=now)
    filtered = filter_sales(df, f, now=now)
    csv_bytes = encode_csv(filtered).encode("utf-8")
    filename = f"sales_{file_id or 'bootstrap'}.csv"
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})
