from __future__ import annotations

import logging
import math
import os
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI


def _validate_env() -> None:
    """
    Validate storage-related environment variables at startup.

    Runs before any backend is initialised. Raises RuntimeError listing every
    invalid variable so the operator can fix all problems in one restart cycle.

    Rules:
    - ADPROFIT_BLOB_BACKEND, when set, must name a known backend.
    - The database backend requires DATABASE_URL (PostgreSQL or SQLite).
    - ADPROFIT_DEFAULT_EXCHANGE_RATE, when set, must be a positive number.
    """

    from app.config import BLOB_BACKENDS
    from db.config import SUPPORTED_URL_PREFIXES, load_env_files

    load_env_files()

    errors: list[str] = []

    # --- Blob backend ---------------------------------------------------
    backend = os.getenv("ADPROFIT_BLOB_BACKEND", "file").strip().lower() or "file"
    if backend not in BLOB_BACKENDS:
        errors.append(
            f"ADPROFIT_BLOB_BACKEND='{backend}' is not valid. "
            f"Allowed values: {sorted(BLOB_BACKENDS)}."
        )

    # --- Database URL ---------------------------------------------------
    if backend == "database":
        database_url = (
            os.getenv("ADPROFIT_DATABASE_URL", "").strip()
            or os.getenv("DATABASE_URL", "").strip()
        )
        if not database_url:
            errors.append(
                "ADPROFIT_BLOB_BACKEND=database requires DATABASE_URL to be set."
            )
        elif not database_url.startswith(SUPPORTED_URL_PREFIXES) and not database_url.startswith("postgres://"):
            errors.append("DATABASE_URL must be a PostgreSQL or SQLite URL.")

    # --- Exchange rate --------------------------------------------------
    raw_rate = os.getenv("ADPROFIT_DEFAULT_EXCHANGE_RATE", "").strip()
    if raw_rate:
        try:
            rate = float(raw_rate)
        except ValueError:
            rate = 0.0
        if not math.isfinite(rate) or rate <= 0:
            errors.append(
                f"ADPROFIT_DEFAULT_EXCHANGE_RATE='{raw_rate}' must be a positive number."
            )

    if errors:
        raise RuntimeError(
            "Startup validation failed. Invalid environment variables:\n"
            + "\n".join(f"  - {e}" for e in errors)
        )


def _configure_logging() -> None:
    """
    Configure root logging once for the API process.
    """

    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Open a session and run SELECT 1. Raises RuntimeError if the DB is unreachable."""
    from sqlalchemy import text
    from sqlalchemy.exc import SQLAlchemyError

    from db.session import SessionLocal

    try:
        db = SessionLocal()
        try:
            db.execute(text("SELECT 1"))
        finally:
            db.close()
    except SQLAlchemyError as exc:
        raise RuntimeError("Database unavailable.") from exc


def _check_schema() -> None:
    """
    Compare Base.metadata table names against the live DB schema.

    Every table registered on Base.metadata must exist in the database.
    If any are missing, log a critical error and abort startup so that
    the operator is forced to run migrations before serving traffic.

    Does NOT auto-migrate.
    """
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401  registers ORM models on Base.metadata
    from db.base import Base
    from db.session import get_engine

    inspector = sa_inspect(get_engine())
    actual: set[str] = set(inspector.get_table_names())
    expected: set[str] = set(Base.metadata.tables.keys())
    missing = expected - actual

    if missing:
        log = logging.getLogger(__name__)
        log.critical(
            "Schema mismatch: %d table(s) defined in ORM metadata are absent from "
            "the database: %s. Run 'alembic upgrade head' and restart.",
            len(missing),
            ", ".join(sorted(missing)),
        )
        raise RuntimeError(
            f"Schema mismatch: {len(missing)} table(s) missing from the database "
            f"({', '.join(sorted(missing))}). Run migrations and restart."
        )


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    """Validate DB connectivity and schema on boot when the database backend is active."""
    from app.config import get_storage_settings

    settings = get_storage_settings()
    if settings.backend == "database":
        _check_db()
        logging.getLogger(__name__).info("Database connectivity confirmed")
        _check_schema()
        logging.getLogger(__name__).info("Database schema validated")
    logging.getLogger(__name__).info("Blob backend ready backend=%s", settings.backend)
    yield


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="AdProfit API",
        version="1.0.0",
        lifespan=_lifespan,
    )

    from app.api.routers import (
        analytics_router,
        export_router,
        imports_router,
        settings_router,
        snapshots_router,
    )

    application.include_router(imports_router)
    application.include_router(snapshots_router)
    application.include_router(analytics_router)
    application.include_router(export_router)
    application.include_router(settings_router)

    @application.get("/health")
    def healthcheck() -> dict[str, str]:
        from app.config import get_storage_settings

        return {"status": "ok", "backend": get_storage_settings().backend}

    return application


app = create_app()
