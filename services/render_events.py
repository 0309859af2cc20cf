import logging

from database import get_db, as_json
from utils.redaction import redact_payload

logger = logging.getLogger(__name__)

SUMMARY_KEYS = ("appName", "glideAppName", "profileId", "runId", "event", "snapshots")


def _summary(body):
    """Small, credential-free view of the request for the events table."""
    body = redact_payload(body)
    summary = {k: body[k] for k in SUMMARY_KEYS if k in body}
    event = summary.get("event")
    if isinstance(event, dict):
        summary["event"] = {"name": event.get("name") or event.get("eventName")}
    snapshots = summary.get("snapshots")
    if isinstance(snapshots, list):
        summary["snapshots"] = [s.get("name") for s in snapshots if isinstance(s, dict)]
    return summary


def record_render_event(action, *, run_id, success, message="", execution_seconds=None, body=None,
                        to_db=None):
    """
    Log a render request outcome and, when enabled, persist it.

    The database write is best-effort: a failure is logged and never
    changes the response the caller is about to send.
    """
    from config import RENDER_EVENTS_TO_DB

    to_db = RENDER_EVENTS_TO_DB if to_db is None else to_db
    record = {
        "action": action,
        "run_id": run_id,
        "success": success,
        "message": message,
        "execution_seconds": execution_seconds,
    }
    level = logging.INFO if success else logging.ERROR
    logger.log(level, f"[RenderEvents] {action} run={run_id} success={success} "
                      f"seconds={execution_seconds} {message}", extra={"event": record})

    if not to_db:
        return

    try:
        db = get_db()
        db.execute(
            """
            INSERT INTO render_events (run_id, action, success, message, payload, execution_seconds)
            VALUES (%s, %s, %s, %s, %s, %s)
            """,
            (run_id, action, success, message, as_json(_summary(body)), execution_seconds),
        )
        db.commit()
    except Exception as e:
        logger.warning(f"[RenderEvents] Failed to persist event for run={run_id}: {e}")
