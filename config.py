import os
import logging
from urllib.parse import urlparse

from utils.env import get_env_str, get_env_bool, get_env_int, get_env_float

logger = logging.getLogger(__name__)

BASE_DIR = os.path.abspath(os.path.dirname(__file__))

# -----------------------------------------------------------------------------
# Dotenv loading (LOCAL ONLY)
# -----------------------------------------------------------------------------
# Rules:
# - Hosted environments are configured via real environment variables.
# - Tests must be deterministic and must NOT ingest a developer's repo-root .env.
_RUNNING_HOSTED = bool(os.getenv("K_SERVICE") or os.getenv("RAILWAY_ENVIRONMENT"))
_APP_STAGE_EARLY = (os.getenv("APP_STAGE") or "").strip().lower()

if (not _RUNNING_HOSTED) and (_APP_STAGE_EARLY not in {"test", "testing"}):
    try:
        from dotenv import load_dotenv
        load_dotenv(dotenv_path=os.path.join(BASE_DIR, ".env"), override=False)
    except Exception:
        # Dotenv is convenience for local dev; failure to load should not crash.
        pass

# -----------------------------------------------------------------------------
# Environment / Stage
# -----------------------------------------------------------------------------
def _normalize_stage(raw: str) -> str:
    raw = (raw or "").strip().lower()
    if raw in {"prod", "production"}:
        return "production"
    if raw in {"stage", "staging"}:
        return "staging"
    if raw in {"test", "testing"}:
        return "test"
    return "dev"


APP_STAGE = _normalize_stage(os.getenv("APP_STAGE", "dev"))

IS_TEST = APP_STAGE == "test"
IS_STAGING = APP_STAGE == "staging"
IS_PRODUCTION = APP_STAGE == "production"

APP_VERSION = "2.3.0"

# -----------------------------------------------------------------------------
# Instance / Asset Paths
# -----------------------------------------------------------------------------
INSTANCE_DIR = get_env_str("INSTANCE_DIR", default=os.path.join(BASE_DIR, "instance"))

try:
    os.makedirs(INSTANCE_DIR, exist_ok=True)
except OSError as e:
    logger.warning(
        f"[Config] WARNING: Could not create INSTANCE_DIR at {INSTANCE_DIR} ({e}). Falling back to /tmp/instance."
    )
    INSTANCE_DIR = os.path.join("/tmp", "instance")
    os.makedirs(INSTANCE_DIR, exist_ok=True)

TEMPLATES_DIR = os.path.join(BASE_DIR, "templates")
PRESETS_PATH = get_env_str("PRESETS_PATH", default=os.path.join(BASE_DIR, "presets", "group_presets.json"))

# -----------------------------------------------------------------------------
# URLs
# -----------------------------------------------------------------------------
def _strip_trailing_slash(url: str) -> str:
    return url[:-1] if url.endswith("/") else url


BASE_URL = _strip_trailing_slash(get_env_str("BASE_URL", default="http://localhost:5000"))

# Edge proxy host that fronts the public/ prefix of the bucket.
PUBLIC_ASSET_BASE_URL = _strip_trailing_slash(get_env_str("PUBLIC_ASSET_BASE_URL", default=""))

if (IS_STAGING or IS_PRODUCTION) and PUBLIC_ASSET_BASE_URL:
    if not PUBLIC_ASSET_BASE_URL.lower().startswith("https://"):
        raise RuntimeError(
            f"CRITICAL: PUBLIC_ASSET_BASE_URL must be HTTPS in {APP_STAGE} stage. Got: {PUBLIC_ASSET_BASE_URL}"
        )

# -----------------------------------------------------------------------------
# Profile Store / Database
# -----------------------------------------------------------------------------
PROFILE_STORE_BACKEND = get_env_str("PROFILE_STORE_BACKEND", default="postgres").lower()
if PROFILE_STORE_BACKEND not in {"postgres", "memory"}:
    raise RuntimeError(f"CRITICAL: PROFILE_STORE_BACKEND must be 'postgres' or 'memory'. Got: {PROFILE_STORE_BACKEND}")

if IS_PRODUCTION and PROFILE_STORE_BACKEND != "postgres":
    raise RuntimeError("CRITICAL: PROFILE_STORE_BACKEND must be 'postgres' in production.")

DATABASE_URL = get_env_str("DATABASE_URL", default="")

if DATABASE_URL.startswith("postgres://"):
    DATABASE_URL = DATABASE_URL.replace("postgres://", "postgresql://", 1)
    os.environ["DATABASE_URL"] = DATABASE_URL

if PROFILE_STORE_BACKEND == "postgres":
    if not DATABASE_URL:
        raise RuntimeError("DATABASE_URL environment variable is required when PROFILE_STORE_BACKEND=postgres.")
    if not DATABASE_URL.startswith("postgresql://"):
        # Never include credentials in errors/logs.
        try:
            p = urlparse(DATABASE_URL)
            got = f"{p.scheme}://{p.hostname}" if p.scheme else "INVALID_URL"
        except Exception:
            got = "INVALID_URL"
        raise ValueError(
            f"CRITICAL: DATABASE_URL must be a PostgreSQL URL (postgresql://...). Got: {got}."
        )

# Render events go to the same database; without one they are only logged.
RENDER_EVENTS_TO_DB = bool(DATABASE_URL) and get_env_bool("RENDER_EVENTS_TO_DB", default=True)

# -----------------------------------------------------------------------------
# Storage Backend
# -----------------------------------------------------------------------------
STORAGE_BACKEND = get_env_str("STORAGE_BACKEND", default="local").strip().lower()

if IS_PRODUCTION and STORAGE_BACKEND != "s3":
    raise RuntimeError("CRITICAL: STORAGE_BACKEND must be 's3' in production.")

if IS_STAGING and STORAGE_BACKEND != "s3":
    logger.warning("[Config] WARNING: STORAGE_BACKEND is not 's3' in staging. Expect drift vs production.")

S3_BUCKET = get_env_str("S3_BUCKET", default="")
S3_PREFIX = get_env_str("S3_PREFIX", default="")

_region = get_env_str("AWS_REGION", default="eu-west-2")
if " " in _region or not _region.replace("-", "").isalnum():
    logger.warning(f"[Config] WARNING: Invalid AWS_REGION detected: '{_region}'. Defaulting to 'us-east-1'.")
    _region = "us-east-1"
AWS_REGION = _region

if STORAGE_BACKEND == "s3" and not S3_BUCKET:
    raise RuntimeError("CRITICAL: S3_BUCKET must be set when STORAGE_BACKEND=s3.")

# -----------------------------------------------------------------------------
# Secrets
# -----------------------------------------------------------------------------
API_KEY = get_env_str("API_KEY")
if not API_KEY:
    if IS_STAGING or IS_PRODUCTION:
        raise ValueError(f"API_KEY must be set in {APP_STAGE} environment.")
    API_KEY = "dev-api-key"
    logger.warning("[Config] WARNING: Using default API_KEY for development. DO NOT use in real environments!")

# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------
HOME_FILENAME = get_env_str("HOME_FILENAME", default="mom.html")
DISPLAY_TIMEZONE = get_env_str("DISPLAY_TIMEZONE", default="Europe/London")
FOOTER_CREDIT = get_env_str("FOOTER_CREDIT", default="")
LOGO_FETCH_TIMEOUT = get_env_float("LOGO_FETCH_TIMEOUT", default=5.0)
LOGO_FETCH_RETRIES = max(0, get_env_int("LOGO_FETCH_RETRIES", default=1))
RENDER_WORKERS = max(1, get_env_int("RENDER_WORKERS", default=1))
DEBUG_DUMP_JSON = get_env_bool("DEBUG_DUMP_JSON", default=False)
