"""
app/schemas/analytics.py

Response schemas for the multi-snapshot analytics endpoints.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.snapshots import ReconciledURLResponse


class MonthBucketResponse(BaseModel):
    """
    API response model for one month of the monthly trend.
    """

    model_config = ConfigDict(from_attributes=True)

    month: str
    content_revenue: float
    spend_target_currency: float
    spend_source_currency: float
    profit: float
    clicks: int
    impressions: int
    snapshot_count: int = Field(..., ge=0)
    spending_url_count: int = Field(..., ge=0)
    profitable: int = Field(..., ge=0)
    losing: int = Field(..., ge=0)
    turnoff: int = Field(..., ge=0)
    roi: float


class MonthlyTrendResponse(BaseModel):
    months: list[MonthBucketResponse] = Field(default_factory=list)


class DateRangeURLResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    status: str
    trend: str
    content_revenue: float
    spend_target_currency: float
    spend_source_currency: float
    clicks: int
    impressions: int
    campaigns: list[str] = Field(default_factory=list)
    appearances: int = Field(..., ge=1)
    months_active: list[str] = Field(default_factory=list)
    month_count: int = Field(..., ge=1)
    per_month_profit: dict[str, float] = Field(default_factory=dict)
    profit: float
    roi: float
    revenue_per_click: float
    cost_per_click: float


class DateRangeTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_revenue: float
    spend_target_currency: float
    spend_source_currency: float
    profit: float
    clicks: int
    url_count: int = Field(..., ge=0)
    profitable: int = Field(..., ge=0)
    improving: int = Field(..., ge=0)
    losing: int = Field(..., ge=0)
    turnoff: int = Field(..., ge=0)
    roi: float


class MonthlyBreakdownResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    content_revenue: float
    spend_target_currency: float
    spend_source_currency: float
    profit: float
    clicks: int
    roi: float


class DateRangeResponse(BaseModel):
    """
    API response model for a date-range aggregation.

    ``totals`` is null when no snapshot is dated inside the range.
    """

    model_config = ConfigDict(from_attributes=True)

    date_from: dt.date
    date_to: dt.date
    snapshots_used: int = Field(..., ge=0)
    totals: DateRangeTotalsResponse | None = None
    urls: list[DateRangeURLResponse] = Field(default_factory=list)
    monthly_breakdown: list[MonthlyBreakdownResponse] = Field(default_factory=list)


class URLHistoryEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    snapshot_id: str
    date: dt.date
    label: str
    period: str
    url: ReconciledURLResponse


class URLHistoryResponse(BaseModel):
    slug: str
    entries: list[URLHistoryEntryResponse] = Field(default_factory=list)
