"""
Render API.

    POST /api/v2?action=version        -> {"success": true, "version": ...}
    POST /api/v2?action=generateHome   -> orchestration result

The action may also be given in the body. Every action except ``version``
needs the shared API key.
"""
import json
import time

from flask import Blueprint, request, jsonify, current_app, g

import config
from constants import ACTION_VERSION, ACTION_GENERATE_HOME, SUPPORTED_ACTIONS
from extensions import limiter
from services.errors import ScheduleError, ConfigurationError
from services.home import generate_home, derive_run_id
from services.profiles import get_profile_store
from services.render_events import record_render_event
from utils.api_auth import presented_api_key, api_key_valid
from utils.storage import get_storage
from utils.timestamps import RenderClock

schedules_bp = Blueprint("schedules", __name__, url_prefix="/api")


class BadRequest(Exception):
    pass


def _read_body():
    """JSON object from the request; a JSON-encoded string body is decoded once more."""
    body = request.get_json(silent=True)
    if body is None:
        raw = request.get_data(as_text=True)
        if not raw.strip():
            return {}
        body = raw
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except ValueError:
            raise BadRequest("Request body is not valid JSON")
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _failure(message, status, *, run_id, started, action, body=None):
    elapsed = round(time.monotonic() - started, 3)
    record_render_event(action or "unknown", run_id=run_id, success=False, message=message,
                        execution_seconds=elapsed, body=body)
    return jsonify({
        "success": False,
        "message": message,
        "runId": run_id,
        "executionTimeSeconds": elapsed,
    }), status


@schedules_bp.route("/v2", methods=["POST"])
@limiter.limit("60 per minute")
def render_v2():
    started = time.monotonic()
    clock = RenderClock(config.DISPLAY_TIMEZONE)
    run_id = derive_run_id({}, clock)
    action = request.args.get("action")
    body = None

    try:
        body = _read_body()
        action = action or body.get("action")
        run_id = derive_run_id(body, clock)
        g.run_id = run_id

        if action not in SUPPORTED_ACTIONS:
            raise BadRequest(f"Unknown action: {action}" if action else "Missing action")

        if action == ACTION_VERSION:
            return jsonify({"success": True, "version": config.APP_VERSION})

        if not api_key_valid(presented_api_key(body), config.API_KEY):
            current_app.logger.warning(f"[API] Rejected {action} run={run_id}: invalid API key")
            return _failure("Invalid or missing API key", 403, run_id=run_id, started=started, action=action)

        if action == ACTION_GENERATE_HOME:
            result = generate_home(
                body,
                storage=get_storage(),
                profile_store=get_profile_store(),
                presets_path=config.PRESETS_PATH,
                clock=clock,
                run_id=run_id,
                workers=config.RENDER_WORKERS,
                home_filename=config.HOME_FILENAME,
                footer_credit=config.FOOTER_CREDIT,
                debug_dump=config.DEBUG_DUMP_JSON,
            )
            result["executionTimeSeconds"] = round(time.monotonic() - started, 3)
            record_render_event(action, run_id=run_id, success=True, message=result["message"],
                                execution_seconds=result["executionTimeSeconds"], body=body)
            return jsonify(result)

    except BadRequest as e:
        current_app.logger.warning(f"[API] Bad request run={run_id}: {e}")
        return _failure(str(e), 400, run_id=run_id, started=started, action=action, body=body)
    except ConfigurationError as e:
        current_app.logger.error(f"[API] {action} run={run_id} configuration error: {e}")
        return _failure(str(e), e.status_code, run_id=run_id, started=started, action=action, body=body)
    except ScheduleError as e:
        current_app.logger.error(f"[API] {action} run={run_id} failed: {e}")
        return _failure(str(e), e.status_code, run_id=run_id, started=started, action=action, body=body)
    except Exception as e:
        current_app.logger.exception(f"[API] {action} run={run_id} unexpected error: {e}")
        return _failure(f"Internal error: {e}", 500, run_id=run_id, started=started, action=action, body=body)
