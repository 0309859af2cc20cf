#!/usr/bin/env python3
"""Apply alembic migrations (style_profiles, render_events) to DATABASE_URL."""
import os
import sys

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Load .env before reading any environment variables
dotenv_path = os.path.join(BASE_DIR, '.env')
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path)
    print("[Manage] Loaded .env file")

sys.path.insert(0, BASE_DIR)


def migrate(revision="head"):
    from alembic.config import Config
    from alembic import command
    from utils.redaction import redact_database_url

    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
        os.environ["DATABASE_URL"] = database_url

    if not database_url:
        print("[Manage] ERROR: DATABASE_URL environment variable is not set.")
        sys.exit(1)

    print(f"[Manage] Migrating {redact_database_url(database_url)} to '{revision}'...")

    # No alembic.ini: point alembic at migrations/ directly
    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", os.path.join(BASE_DIR, "migrations"))
    alembic_cfg.set_main_option("sqlalchemy.url", database_url)
    try:
        command.upgrade(alembic_cfg, revision)
    except Exception as e:
        print(f"[Manage] Alembic migration FAILED: {e}")
        sys.exit(1)

    print("[Manage] Database migration completed successfully.")


if __name__ == "__main__":
    migrate(sys.argv[1] if len(sys.argv) > 1 else "head")
