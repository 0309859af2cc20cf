"""
Style profile store.

A profile is a JSON document ``{"styles": {...}, "document": {...},
"columns": [...]}`` keyed by profile id. Profiles are stored exactly as
the editor saved them; normalization happens at render time and is never
written back.
"""
import copy
import logging
import threading

from database import get_db, as_json
from services.errors import ConfigurationError

logger = logging.getLogger(__name__)


class ProfileStore:
    def get(self, profile_id):
        raise NotImplementedError

    def set(self, profile_id, document):
        raise NotImplementedError

    def delete(self, profile_id):
        raise NotImplementedError


class PostgresProfileStore(ProfileStore):
    """Profiles in the ``style_profiles`` table (JSONB ``document``)."""

    def get(self, profile_id):
        db = get_db()
        row = db.execute(
            "SELECT document FROM style_profiles WHERE profile_id = %s",
            (profile_id,),
        ).fetchone()
        return dict(row["document"]) if row else None

    def set(self, profile_id, document):
        db = get_db()
        db.execute(
            """
            INSERT INTO style_profiles (profile_id, document, updated_at)
            VALUES (%s, %s, NOW())
            ON CONFLICT (profile_id)
            DO UPDATE SET document = EXCLUDED.document, updated_at = NOW()
            """,
            (profile_id, as_json(document)),
        )
        db.commit()

    def delete(self, profile_id):
        db = get_db()
        cur = db.execute("DELETE FROM style_profiles WHERE profile_id = %s", (profile_id,))
        db.commit()
        return cur.rowcount > 0


class MemoryProfileStore(ProfileStore):
    """Process-local store for development and tests."""

    def __init__(self):
        self._profiles = {}
        self._lock = threading.Lock()

    def get(self, profile_id):
        with self._lock:
            document = self._profiles.get(profile_id)
            return copy.deepcopy(document) if document is not None else None

    def set(self, profile_id, document):
        with self._lock:
            self._profiles[profile_id] = copy.deepcopy(document)

    def delete(self, profile_id):
        with self._lock:
            return self._profiles.pop(profile_id, None) is not None

    def clear(self):
        with self._lock:
            self._profiles.clear()


_memory_store = MemoryProfileStore()


def get_profile_store():
    """Factory to return the configured profile store."""
    from config import PROFILE_STORE_BACKEND

    if PROFILE_STORE_BACKEND == "memory":
        return _memory_store
    return PostgresProfileStore()


def load_profile(store, profile_id):
    """
    Fetch a profile by id.

    Raises:
        ConfigurationError: no profile with that id
    """
    document = store.get(profile_id)
    if document is None:
        raise ConfigurationError(f"Style profile not found: {profile_id}")
    if not isinstance(document, dict):
        raise ConfigurationError(f"Style profile {profile_id} is not a JSON object")
    return document


def deep_merge(base, override):
    """Recursively merge ``override`` onto a copy of ``base``; override wins, lists are replaced."""
    merged = copy.deepcopy(base) if isinstance(base, dict) else {}
    if not isinstance(override, dict):
        return merged
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def merge_profile(profile, body):
    """
    Combine a stored profile with the request.

    Request ``styles`` and ``document`` are merged over the profile's (the
    request wins). Columns are not merged: the request's list is used when
    present, else the profile's; preset columns still take precedence later.
    """
    profile = profile or {}
    body = body or {}
    columns = body.get("columns") if isinstance(body.get("columns"), list) and body.get("columns") else profile.get("columns")
    return {
        "styles": deep_merge(profile.get("styles"), body.get("styles")),
        "document": deep_merge(profile.get("document"), body.get("document")),
        "columns": columns if isinstance(columns, list) else [],
    }
