"""Alembic environment for the Let's Roll schema.

Runs against the async engine from ``DATABASE_URL``. Invoked either from the
CLI (``alembic upgrade head`` inside backend/) or programmatically through
``letsroll.db.session.run_migrations``.
"""

from __future__ import annotations

import asyncio
import re
import sys
from datetime import datetime, timezone
from logging.config import fileConfig
from pathlib import Path

from alembic import context
from sqlalchemy import pool
from sqlalchemy.engine import Connection
from sqlalchemy.ext.asyncio import async_engine_from_config
from sqlmodel import SQLModel

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from letsroll.core.config import settings  # noqa: E402
from letsroll.db import base  # noqa: F401,E402  # registers every table on SQLModel.metadata

VERSIONS_DIR = Path(__file__).parent / "versions"
REVISION_PATTERN = re.compile(r"^\d{8}_(\d{4})")

config = context.config

if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

if not config.attributes.get("url_configured"):
    config.set_main_option("sqlalchemy.url", settings.DATABASE_URL)

target_metadata = SQLModel.metadata


def _next_revision_id() -> str:
    sequences = [
        int(match.group(1))
        for match in (REVISION_PATTERN.match(path.stem) for path in VERSIONS_DIR.glob("*.py"))
        if match
    ]
    today = datetime.now(timezone.utc).strftime("%Y%m%d")
    return f"{today}_{max(sequences, default=0) + 1:04d}"


def _name_revision(context, revision, directives) -> None:
    """Autogenerated revisions are named YYYYMMDD_NNNN, numbered across dates."""
    if directives:
        directives[0].rev_id = _next_revision_id()


def _configure(**kwargs) -> None:
    context.configure(
        target_metadata=target_metadata,
        compare_type=True,
        process_revision_directives=_name_revision,
        **kwargs,
    )


def run_migrations_offline() -> None:
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def _run_sync(connection: Connection) -> None:
    # Enum types created in one revision must be committed before later ones use them
    _configure(connection=connection, transaction_per_migration=True)
    with context.begin_transaction():
        context.run_migrations()


async def run_migrations_online() -> None:
    engine = async_engine_from_config(
        config.get_section(config.config_ini_section) or {},
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    try:
        async with engine.connect() as connection:
            await connection.run_sync(_run_sync)
    finally:
        await engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    asyncio.run(run_migrations_online())
