"""
app/schemas/settings.py

Request/response schemas for the settings endpoints.
"""

from __future__ import annotations

from pydantic import BaseModel, Field


class SettingsResponse(BaseModel):
    exchange_rate: float


class SettingsUpdateRequest(BaseModel):
    exchange_rate: float = Field(..., gt=0, allow_inf_nan=False)
