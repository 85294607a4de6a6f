from __future__ import annotations


class DashboardError(Exception):
    """Base class for failures surfaced to the uploader or API caller."""

    message = "Dashboard error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class ParseError(DashboardError):
    message = "Invalid file format"


class ValidationError(DashboardError):
    message = "Invalid data format"


class UnsupportedTypeError(DashboardError):
    message = "Only JSON and CSV files are supported"


class NotFoundError(DashboardError):
    message = "File not found"


class TransientFetchError(DashboardError):
    message = "Failed to fetch bootstrap data"
