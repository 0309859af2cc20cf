"""
Pytest fixtures for the schedule renderer.

Environment is fixed before config.py is imported: memory profile store,
local storage under a temp directory, a known API key.
"""
import os
import sys
import tempfile
from datetime import datetime, timezone

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

_INSTANCE_DIR = tempfile.mkdtemp(prefix="schedule-renderer-tests-")

# Set test environment before importing app
os.environ['APP_STAGE'] = 'test'
os.environ['PROFILE_STORE_BACKEND'] = 'memory'
os.environ['STORAGE_BACKEND'] = 'local'
os.environ['INSTANCE_DIR'] = _INSTANCE_DIR
os.environ['API_KEY'] = 'test-key'
os.environ['BASE_URL'] = 'http://localhost:5000'
os.environ['PUBLIC_ASSET_BASE_URL'] = ''
os.environ.pop('DATABASE_URL', None)

API_KEY = 'test-key'
FIXED_INSTANT = datetime(2025, 8, 27, 17, 17, tzinfo=timezone.utc)


@pytest.fixture
def app():
    from app import create_app

    app = create_app({'TESTING': True})
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    """Clock pinned to Wednesday 27th August 2025 at 6.17pm London time."""
    from utils.timestamps import RenderClock

    return RenderClock("Europe/London", fixed=FIXED_INSTANT)


@pytest.fixture
def styles():
    from services.styles import normalize_styles

    return normalize_styles({})


@pytest.fixture
def memory_profiles():
    from services.profiles import get_profile_store

    store = get_profile_store()
    store.clear()
    yield store
    store.clear()


@pytest.fixture
def storage(tmp_path):
    from utils.storage import LocalStorage

    return LocalStorage(str(tmp_path / "storage"), "http://localhost:5000", public_base_url="https://cdn.example.com")


@pytest.fixture
def no_logo():
    """Logo fetcher that fails like an unreachable host."""
    from services.errors import ExternalFetchError

    def fetch(url):
        raise ExternalFetchError(f"Logo fetch failed for {url}: unreachable")

    return fetch


def make_entry(**fields):
    entry = {"tagIds": [], "locationIds": [], "subLocationIds": []}
    entry.update(fields)
    return entry


@pytest.fixture
def schedule_payload():
    """Two days, two departments, two locations."""
    return {
        "appName": "Flair App",
        "event": {
            "name": "Summer Gala",
            "header": ["Summer Gala 2025", "Production schedule"],
            "keyInfo": "**Call time** 07:00",
        },
        "data": {
            "scheduleDetail": [
                make_entry(date="2025-05-16", time="09:00", description="Doors open",
                           tagIds=["t1"], tags=["Front of house"], locationIds=["l1"], locations=["Foyer"]),
                make_entry(date="2025-05-15", time="10:00", description="Sound check",
                           tagIds=["t2"], tags=["Audio"], locationIds=["l2"], locations=["Main stage"],
                           format="important"),
                make_entry(date="2025-05-15", time="08:00", description="Load in",
                           tagIds=["t1", "t2"], tags=["Front of house", "Audio"], locationIds=["l2"],
                           locations=["Main stage"], format="new"),
            ]
        },
        "dicts": {"groupMeta": {"date": {"2025-05-15": {"above": ["Build day"], "below": "Crew meal 18:00"}}}},
        "snapshots": [
            {"name": "Full schedule", "group": "Schedules", "sortOrder": 1, "groupPresetId": "byDate"},
            {"name": "Audio", "group": "Departments", "sortOrder": 2, "groupPresetId": "byTag",
             "filterTagIds": ["t2"]},
        ],
    }
