from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class SalesFiltersModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    region: str = ""
    category: str = ""
    user_id: str = Field(default="", alias="userId")
    date_from: Optional[datetime] = Field(default=None, alias="from")
    date_to: Optional[datetime] = Field(default=None, alias="to")


class UploadResponse(BaseModel):
    fileId: str


class ErrorResponse(BaseModel):
    error: str


class FilterOptionsResponse(BaseModel):
    regions: List[str]
    categories: List[str]
    users: List[str]


class SummaryModel(BaseModel):
    totalSales: float
    itemsSold: int
    transactions: int


class DashboardResponse(BaseModel):
    filters: Dict[str, Optional[str]]
    summary: SummaryModel
    by_day: List[dict]
    by_region: List[dict]
    by_category: List[dict]
    options: FilterOptionsResponse
    charts: Dict[str, dict]
