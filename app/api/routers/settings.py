"""
app/api/routers/settings.py

Exchange-rate settings endpoints. A new rate only affects future imports.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_settings_repository, storage_unavailable
from app.repositories.settings_repository import SettingsRepository
from app.schemas.settings import SettingsResponse, SettingsUpdateRequest
from db.repositories.errors import BlobStoreError

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsResponse)
def get_settings(
    repository: SettingsRepository = Depends(get_settings_repository),
) -> SettingsResponse:
    try:
        settings = repository.load()
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    return SettingsResponse(exchange_rate=settings.exchange_rate)


@router.put("", response_model=SettingsResponse)
def update_settings(
    payload: SettingsUpdateRequest,
    repository: SettingsRepository = Depends(get_settings_repository),
) -> SettingsResponse:
    try:
        settings = repository.set_exchange_rate(payload.exchange_rate)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except BlobStoreError as exc:
        raise storage_unavailable(exc) from exc
    return SettingsResponse(exchange_rate=settings.exchange_rate)
