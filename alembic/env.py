"""
Alembic environment for the blob-store schema.

The database URL is taken from the first source that is set:

    -x db_url=...            one-off target on the command line
    ALEMBIC_DATABASE_URL     migration-only override
    sqlalchemy.url           alembic.ini
    ADPROFIT_DATABASE_URL / DATABASE_URL
"""

from __future__ import annotations

import logging
import os
from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from db.base import Base
from db.config import SUPPORTED_URL_PREFIXES, load_env_files, normalize_database_url, resolve_database_url
from db.models import BlobEntry  # noqa: F401  registers blob_entries on Base.metadata

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

logger = logging.getLogger("alembic.env")
target_metadata = Base.metadata


def _database_url() -> str:
    load_env_files()

    candidates = (
        context.get_x_argument(as_dictionary=True).get("db_url"),
        os.getenv("ALEMBIC_DATABASE_URL"),
        config.get_main_option("sqlalchemy.url"),
    )
    explicit = next((c.strip() for c in candidates if c and c.strip()), None)
    url = normalize_database_url(explicit) if explicit else resolve_database_url()

    if not url.startswith(SUPPORTED_URL_PREFIXES):
        raise RuntimeError("Blob-store migrations support PostgreSQL and SQLite URLs only.")
    return url


def _configure_options(url: str) -> dict:
    return {
        "target_metadata": target_metadata,
        "compare_type": True,
        "render_as_batch": url.startswith("sqlite"),
    }


def run_migrations_offline() -> None:
    url = _database_url()
    context.configure(
        url=url,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        **_configure_options(url),
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    url = _database_url()
    section = config.get_section(config.config_ini_section, {})
    section["sqlalchemy.url"] = url
    connectable = engine_from_config(section, prefix="sqlalchemy.", poolclass=pool.NullPool)

    logger.info("Migrating blob store dialect=%s", connectable.dialect.name)
    with connectable.connect() as connection:
        context.configure(connection=connection, **_configure_options(url))
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
