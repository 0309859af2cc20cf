#!/usr/bin/env python3
"""
Render a generateHome payload locally.

Runs the full pipeline (views, snapshot PDF/HTML, home page) without the
HTTP layer and writes every artifact to a local directory. Useful for
debugging a payload captured from production logs.

Usage:
    python scripts/render_payload.py payload.json
    python scripts/render_payload.py payload.json --out /tmp/render --profile profile.json
"""
import os
import sys
import json
import argparse

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Local runs need neither Postgres nor S3
os.environ.setdefault("PROFILE_STORE_BACKEND", "memory")
os.environ.setdefault("STORAGE_BACKEND", "local")

import config
from services.errors import ScheduleError
from services.home import generate_home, profile_id_for
from services.profiles import MemoryProfileStore
from utils.storage import LocalStorage
from utils.timestamps import RenderClock


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Render a schedule payload to local files.")
    parser.add_argument("payload", help="JSON file holding the generateHome request body")
    parser.add_argument("--presets", default=config.PRESETS_PATH, help="Group presets JSON file")
    parser.add_argument("--out", default=os.path.join(config.INSTANCE_DIR, "render"), help="Output directory")
    parser.add_argument("--profile", help="Style profile JSON used for the payload's profileId")
    parser.add_argument("--workers", type=int, default=config.RENDER_WORKERS, help="Snapshot render concurrency")
    return parser.parse_args(argv)


def load_json(path):
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    # Payloads captured from the wire are sometimes a JSON string
    return json.loads(data) if isinstance(data, str) else data


def main(argv=None):
    args = parse_args(argv)
    body = load_json(args.payload)

    profiles = MemoryProfileStore()
    if args.profile:
        profiles.set(profile_id_for(body) or "local", load_json(args.profile))
        if not profile_id_for(body):
            body["profileId"] = "local"

    out_dir = os.path.abspath(args.out)
    storage = LocalStorage(out_dir, f"file://{out_dir}", url_path="")

    try:
        result = generate_home(
            body,
            storage=storage,
            profile_store=profiles,
            presets_path=args.presets,
            clock=RenderClock(config.DISPLAY_TIMEZONE),
            workers=max(1, args.workers),
            home_filename=config.HOME_FILENAME,
            footer_credit=config.FOOTER_CREDIT,
            debug_dump=config.DEBUG_DUMP_JSON,
        )
    except ScheduleError as e:
        print(json.dumps({"success": False, "message": str(e)}, indent=2))
        return 1

    print(json.dumps(result, indent=2))
    return 0 if all(not s.get("error") for s in result["snapshots"]) else 2


if __name__ == "__main__":
    sys.exit(main())
