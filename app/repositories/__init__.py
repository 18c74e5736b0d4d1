"""
app/repositories package marker.
"""

from app.repositories.settings_repository import SettingsRepository, StoredSettings
from app.repositories.snapshot_repository import LATEST, SnapshotRepository

__all__ = [
    "LATEST",
    "SettingsRepository",
    "SnapshotRepository",
    "StoredSettings",
]
