import logging

import psycopg2
from psycopg2.extras import DictCursor, Json
from flask import g

from config import IS_PRODUCTION, DATABASE_URL
from utils.redaction import redact_database_url

logger = logging.getLogger(__name__)


def get_db():
    """Per-request Postgres connection, stored on flask.g."""
    if 'db' not in g:
        db_url = DATABASE_URL
        if not db_url:
            raise RuntimeError("DATABASE_URL is required for Postgres connection.")

        try:
            conn = psycopg2.connect(db_url, cursor_factory=DictCursor)
            g.db = PostgresDB(conn)
        except psycopg2.Error as e:
            logger.error(
                "[DB] Connection Failed (%s) while connecting to %s",
                type(e).__name__,
                redact_database_url(db_url),
            )
            raise
    return g.db


def close_connection(exception=None):
    db = g.pop('db', None)
    if db is not None:
        db.close()


class PostgresDB:
    """
    Strict Postgres wrapper.
    Passes SQL through to psycopg2 without modification.
    Expects %s placeholders; wrap dict/list parameters with as_json().
    """
    def __init__(self, conn):
        self._conn = conn

    def execute(self, sql, params=None):
        cur = self._conn.cursor()
        try:
            cur.execute(sql, params)
            return cur
        except psycopg2.Error as e:
            logger.error(f"[DB] Query Failed: {e}")
            if not IS_PRODUCTION:
                logger.error(f"[DB] SQL: {sql}")
            raise

    def commit(self):
        self._conn.commit()

    def rollback(self):
        self._conn.rollback()

    def close(self):
        self._conn.close()


def as_json(value):
    """Adapt a Python structure for a JSONB column."""
    return Json(value)
