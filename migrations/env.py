# migrations/env.py
from pathlib import Path
import logging
import os
import sys

from sqlalchemy import engine_from_config
from sqlalchemy import pool

from alembic import context

# Project root on the path so utils/ imports work from any cwd.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from utils.redaction import redact_database_url

logger = logging.getLogger("alembic.env")

config = context.config

# Read DATABASE_URL directly; importing config.py would demand API_KEY and storage settings.
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip() or (config.get_main_option("sqlalchemy.url") or "").strip()
if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)

if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set; cannot run migrations.")
if not DATABASE_URL.startswith("postgresql://"):
    raise RuntimeError(f"Only Postgres is supported for DATABASE_URL. Got: {redact_database_url(DATABASE_URL)}")

config.set_main_option("sqlalchemy.url", DATABASE_URL)
logger.info(f"Migrating {redact_database_url(DATABASE_URL)}")

# Tables are created by hand-written revisions; no autogenerate metadata.
target_metadata = None


def run_migrations_offline() -> None:
    context.configure(
        url=DATABASE_URL,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
