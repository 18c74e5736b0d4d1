"""
app/schemas/snapshots.py

Response schemas for snapshot endpoints.
"""

from __future__ import annotations

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field


class ContentRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    views: int
    revenue: float
    rpm: float
    cpm: float
    viewability: float
    fill_rate: float
    impressions_per_view: float


class AdRowResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    slug: str
    campaigns: list[str] = Field(default_factory=list)
    clicks: int
    impressions: int
    cost_source_currency: float


class ReconciledURLResponse(BaseModel):
    """
    API response model for one reconciled slug.
    """

    model_config = ConfigDict(from_attributes=True)

    slug: str
    status: str
    profit: float
    roi: float
    revenue_per_click: float
    cost_per_click: float
    cost_target_currency: float
    has_spend: bool
    content: ContentRowResponse
    spend: AdRowResponse


class SnapshotTotalsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    content_revenue: float
    spend_source_currency: float
    spend_target_currency: float
    clicks: int = Field(..., ge=0)
    impressions: int = Field(..., ge=0)
    total_profit: float
    url_count: int = Field(..., ge=0)
    spending_url_count: int = Field(..., ge=0)


class SnapshotHeaderResponse(BaseModel):
    """
    Snapshot metadata and totals without the URL list.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    label: str
    date: dt.date
    period: str
    created_at: dt.datetime
    exchange_rate: float
    totals: SnapshotTotalsResponse


class SnapshotResponse(SnapshotHeaderResponse):
    urls: list[ReconciledURLResponse] = Field(default_factory=list)


class SnapshotListResponse(BaseModel):
    count: int = Field(..., ge=0)
    snapshots: list[SnapshotHeaderResponse] = Field(default_factory=list)


class SnapshotSummaryResponse(BaseModel):
    """
    API response model for the headline figures of one snapshot.
    """

    model_config = ConfigDict(from_attributes=True)

    snapshot_id: str
    totals: SnapshotTotalsResponse
    profitable: int = Field(..., ge=0)
    improving: int = Field(..., ge=0)
    losing: int = Field(..., ge=0)
    turnoff: int = Field(..., ge=0)
    average_roi: float
    wasted_spend: float


class StatusBucketResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    status: str
    urls: list[ReconciledURLResponse] = Field(default_factory=list)
    total_spend: float
    total_profit: float


class SnapshotDeleteResponse(BaseModel):
    deleted: int = Field(..., ge=0)
