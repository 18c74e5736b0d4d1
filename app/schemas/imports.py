"""
app/schemas/imports.py

Response schemas for the report import endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.snapshots import SnapshotHeaderResponse


class ReportParseResponse(BaseModel):
    """
    Extraction diagnostics for one uploaded report.
    """

    model_config = ConfigDict(from_attributes=True)

    provided: bool
    row_count: int = Field(..., ge=0)
    rows_with_coercion_warnings: int = Field(..., ge=0)
    format_mismatch: bool


class ImportSummaryResponse(BaseModel):
    """
    API response model for a completed import.
    """

    model_config = ConfigDict(from_attributes=True)

    snapshot: SnapshotHeaderResponse
    content: ReportParseResponse
    spend: ReportParseResponse
    warnings: list[str] = Field(default_factory=list)
