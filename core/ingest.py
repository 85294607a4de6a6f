"""Upload ingestion: decode, validate, normalize, store."""

from __future__ import annotations

import logging
import urllib.error
import urllib.request
from pathlib import Path, PurePath

import pandas as pd

from core.codecs import decode_csv, decode_json
from core.errors import DashboardError, ParseError, TransientFetchError, UnsupportedTypeError, ValidationError
from core.records import empty_frame, to_frame, validate_records
from core.store import DatasetStore

logger = logging.getLogger(__name__)

DECODERS = {
    "csv": (decode_csv, "Invalid CSV format"),
    "json": (decode_json, "Invalid JSON format"),
}


def file_type(name: str) -> str:
    """Accept ``"sales.CSV"``, ``".csv"`` or ``"csv"``; return ``"csv"``/``"json"``."""
    name = (name or "").strip()
    suffix = PurePath(name).suffix if "." in name.lstrip(".") else name
    ext = suffix.lstrip(".").lower()
    if ext not in DECODERS:
        raise UnsupportedTypeError("Only JSON and CSV files are supported")
    return ext


def _as_text(content: bytes | str, error_message: str) -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise ParseError(error_message) from exc


def parse_upload(content: bytes | str, name: str) -> pd.DataFrame:
    ext = file_type(name)
    decode, error_message = DECODERS[ext]
    text = _as_text(content, error_message)
    records = validate_records(decode(text))
    try:
        return to_frame(records)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValidationError(f"Invalid data format: {exc}") from exc


def ingest_upload(content: bytes | str, name: str, store: DatasetStore) -> str:
    """Parse an uploaded file and store it; return the new dataset id.

    Any decode or validation failure propagates and nothing is stored.
    """
    frame = parse_upload(content, name)
    dataset_id = store.put(frame)
    logger.info("ingested %s upload as %s (%d records)", file_type(name), dataset_id, len(frame))
    return dataset_id


def fetch_text(source: str, *, timeout: float = 10.0) -> str:
    try:
        if source.startswith(("http://", "https://")):
            with urllib.request.urlopen(source, timeout=timeout) as resp:
                return resp.read().decode("utf-8-sig")
        return Path(source).read_text(encoding="utf-8-sig")
    except (OSError, urllib.error.URLError, UnicodeDecodeError) as exc:
        raise TransientFetchError(f"Failed to fetch {source}: {exc}") from exc


def load_bootstrap_dataset(source: str, *, timeout: float = 10.0) -> pd.DataFrame:
    """Initial dataset shown before any upload; empty when it cannot be loaded."""
    try:
        records = decode_csv(fetch_text(source, timeout=timeout))
        if not records:
            return empty_frame()
        return to_frame(records)
    except DashboardError:
        logger.exception("Error loading bootstrap data from %s", source)
        return empty_frame()
