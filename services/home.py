"""
generateHome orchestration.

Handles:
1. Resolving the style profile and merging it with the request
2. Building one View per group preset
3. Publishing every snapshot (sequentially, or on a worker pool)
4. Rendering and uploading the home page once every snapshot has a result

A failed snapshot is logged and listed on the home page as a disabled
link; it never stops its siblings. Configuration problems (unknown preset,
missing profile) fail the whole request before anything is rendered.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor

from constants import CACHE_NO_STORE
from services.errors import ConfigurationError
from services.profiles import load_profile, merge_profile
from services.rendering.assets import fetch_logo
from services.rendering.home_page import render_home
from services.snapshots import publish_snapshot, upload
from services.styles import normalize_styles
from services.views import load_presets, preset_key, prepare_views, build_snapshot_document
from utils.filenames import sanitise_name, public_prefix

logger = logging.getLogger(__name__)

RUN_ID_KEYS = ("runId", "runID", "run_id")


def derive_run_id(body, clock):
    for key in RUN_ID_KEYS:
        value = (body or {}).get(key)
        if value not in (None, ""):
            return str(value)
    return f"run_{clock.epoch_ms()}"


def app_and_event_names(body):
    """Sanitised path segments for the app and the event."""
    event = body.get("event") if isinstance(body.get("event"), dict) else {}
    app_name = sanitise_name(body.get("appName") or body.get("glideAppName"), "App")
    event_name = sanitise_name(event.get("name") or event.get("eventName"), "Event")
    return app_name, event_name


def profile_id_for(body):
    event = body.get("event") if isinstance(body.get("event"), dict) else {}
    return event.get("profileId") or body.get("profileId") or ""


def validate_snapshots(snapshots, presets):
    """
    Check every snapshot names a known group preset.

    Raises:
        ConfigurationError: a snapshot has no ``groupPresetId`` or an unknown one
    """
    known = {preset_key(p) for p in presets if p.get("groupBy")}
    for index, snapshot in enumerate(snapshots):
        label = snapshot.get("name") or f"#{index + 1}"
        preset_id = snapshot.get("groupPresetId")
        if not preset_id:
            raise ConfigurationError(f"Snapshot {label} has no groupPresetId")
        if preset_id not in known:
            raise ConfigurationError(f"Unknown groupPresetId '{preset_id}' for snapshot {label}")


def _publish_one(index, snapshot, views, payload, merged, styles, publish_kwargs):
    label = snapshot.get("name") or f"#{index + 1}"
    try:
        prepared = build_snapshot_document(
            snapshot, views[snapshot["groupPresetId"]], payload, styles["document"], merged,
        )
        result = publish_snapshot(prepared, styles, **publish_kwargs)
        return dict(snapshot, htmlUrl=result["htmlUrl"], pdfUrl=result["pdfUrl"], error=None)
    except Exception as e:
        logger.exception(f"[Home] Snapshot {label} failed: {e}")
        return dict(snapshot, htmlUrl=None, pdfUrl=None, error=str(e))


def publish_all(snapshots, views, payload, merged, styles, publish_kwargs, workers=1):
    """Publish every snapshot and return results in input order (a barrier for the home page)."""
    jobs = [(i, s, views, payload, merged, styles, publish_kwargs) for i, s in enumerate(snapshots)]
    if workers <= 1 or len(jobs) <= 1:
        return [_publish_one(*job) for job in jobs]

    with ThreadPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(_publish_one, *job) for job in jobs]
        return [f.result() for f in futures]


def generate_home(body, *, storage, profile_store, presets_path, clock, run_id=None, workers=1,
                  home_filename="mom.html", footer_credit="", logo_fetcher=fetch_logo, debug_dump=False):
    """
    Publish every snapshot of an event plus its home page.

    Args:
        body: Request payload (``data``, ``snapshots``, ``event``, ``styles``,
            ``document``, ``columns``, ``groupMeta``/``dicts``)
        storage: StorageBackend receiving the artifacts
        profile_store: ProfileStore used when the request names a profile
        presets_path: Group presets JSON file
        clock: RenderClock shared by every artifact of this request
        run_id: Correlation id; derived from the body when omitted
        workers: Snapshot render concurrency (1 = sequential)
        debug_dump: Upload the prepared JSON of every snapshot (also on
            when the body sets ``"debug": true``)

    Returns:
        dict with ``success``, ``message``, ``htmlUrl``, ``snapshots``
        (``name``, ``htmlUrl``, ``pdfUrl``, plus ``error`` for failures),
        ``timestamp``, ``executionTimeSeconds`` and ``runId``

    Raises:
        ConfigurationError: missing profile, presets file or preset
        UploadError: the home page could not be stored
    """
    started = time.monotonic()
    run_id = run_id or derive_run_id(body, clock)

    profile_id = profile_id_for(body)
    profile = load_profile(profile_store, profile_id) if profile_id else {}
    merged = merge_profile(profile, body)
    styles = normalize_styles(merged["styles"], merged["document"])

    presets = load_presets(presets_path)
    snapshots = [s for s in (body.get("snapshots") or []) if isinstance(s, dict)]
    validate_snapshots(snapshots, presets)

    payload = dict(body, columns=merged["columns"])
    views = prepare_views(payload, presets)

    app_name, event_name = app_and_event_names(body)
    prefix = public_prefix(app_name, event_name)
    logger.info(f"[Home] run={run_id} publishing {len(snapshots)} snapshot(s) under {prefix} (workers={workers})")

    publish_kwargs = {
        "storage": storage,
        "prefix": prefix,
        "clock": clock,
        "home_href": home_filename,
        "footer_credit": footer_credit,
        "logo_fetcher": logo_fetcher,
        "debug_dump": debug_dump or body.get("debug") is True,
    }
    results = publish_all(snapshots, views, payload, merged, styles, publish_kwargs, workers=workers)

    event = body.get("event") if isinstance(body.get("event"), dict) else {}
    home_html = render_home(results, event, clock=clock, logo_url=styles["document"]["header"]["logo"]["url"])
    home_url = upload(storage, home_html, f"{prefix}/{home_filename}", "text/html; charset=utf-8", CACHE_NO_STORE)

    failed = [r for r in results if r.get("error")]
    elapsed = round(time.monotonic() - started, 3)
    message = f"Published {len(results) - len(failed)} of {len(results)} snapshot(s)"
    logger.info(f"[Home] run={run_id} {message} in {elapsed}s; home at {home_url}")

    summary = []
    for result in results:
        item = {"name": result.get("name"), "htmlUrl": result["htmlUrl"], "pdfUrl": result["pdfUrl"]}
        if result.get("error"):
            item["error"] = result["error"]
        summary.append(item)

    return {
        "success": True,
        "message": message,
        "htmlUrl": home_url,
        "snapshots": summary,
        "timestamp": clock.iso(),
        "executionTimeSeconds": elapsed,
        "runId": run_id,
    }
