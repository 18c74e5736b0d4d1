"""
app/api/routers package marker.
"""

from app.api.routers.analytics import router as analytics_router
from app.api.routers.export import router as export_router
from app.api.routers.imports import router as imports_router
from app.api.routers.settings import router as settings_router
from app.api.routers.snapshots import router as snapshots_router

__all__ = [
    "analytics_router",
    "export_router",
    "imports_router",
    "settings_router",
    "snapshots_router",
]
