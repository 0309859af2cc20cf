"""
View preparation.

A View is what one group preset makes of the whole schedule:
``{"label", "groupBy", "columns", "groups"}``. Views are built once per
request and shared by every snapshot that names the preset; snapshots
then filter a View into their own prepared document.
"""
import copy
import json
import logging
import os

from constants import DATE_META_BUCKETS, GROUP_BY_DATE
from services.errors import ConfigurationError
from services.filters import apply_snapshot_filters_to_view
from services.grouping import group_rows, sort_groups_in_place, sort_entries_in_place
from utils.timestamps import friendly_date

logger = logging.getLogger(__name__)

# Keys that identify a group in the list form of groupMeta, in priority order
META_KEY_FIELDS = ("id", "date", "tagId", "locationId", "key", "groupKey")


def load_presets(path):
    """
    Read group presets from a JSON file.

    Accepts a bare list or an object holding the list under ``groupPresets``
    or ``presets``.

    Raises:
        ConfigurationError: file missing, unreadable or not a preset list
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Group presets file not found: {path}")
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Group presets file unreadable ({os.path.basename(path)}): {e}")

    if isinstance(data, dict):
        data = data.get("groupPresets", data.get("presets"))
    if not isinstance(data, list):
        raise ConfigurationError("Group presets file must contain a list of presets")
    return [p for p in data if isinstance(p, dict)]


def preset_key(preset):
    return preset.get("id") or preset.get("label") or preset.get("groupBy")


def _meta_value(data):
    data = data if isinstance(data, dict) else {}
    return {
        "title": data.get("title") or "",
        "above": data.get("above") or "",
        "below": data.get("below") or "",
    }


def index_group_meta(payload):
    """
    Index group metadata by bucket and group key.

    Two shapes are read and merged (the object-map form wins on clashes):
        payload.groupMeta.<bucket>       = [{"date": "...", "title": ...}, ...]
        payload.dicts.groupMeta.<bucket> = {"2025-05-15": {"title": ...}, ...}
    """
    index = {}
    payload = payload if isinstance(payload, dict) else {}

    list_buckets = payload.get("groupMeta")
    if isinstance(list_buckets, dict):
        for bucket, items in list_buckets.items():
            if not isinstance(items, list):
                continue
            for item in items:
                if not isinstance(item, dict):
                    continue
                key = next((item[k] for k in META_KEY_FIELDS if item.get(k) not in (None, "")), None)
                if key is None:
                    continue
                data = item["data"] if isinstance(item.get("data"), dict) else item
                index.setdefault(bucket, {})[str(key)] = _meta_value(data)

    dicts = payload.get("dicts")
    map_buckets = dicts.get("groupMeta") if isinstance(dicts, dict) else None
    if isinstance(map_buckets, dict):
        for bucket, mapping in map_buckets.items():
            if not isinstance(mapping, dict):
                continue
            for key, data in mapping.items():
                index.setdefault(bucket, {})[str(key)] = _meta_value(data)

    return index


def date_meta(index):
    for bucket in DATE_META_BUCKETS:
        if index.get(bucket):
            return index[bucket]
    return {}


def schedule_rows(payload, meta_by_date=None):
    """Copies of the schedule entries, each given a ``dateKey`` display title."""
    data = payload.get("data") if isinstance(payload, dict) else None
    rows = data.get("scheduleDetail") if isinstance(data, dict) else None
    if not isinstance(rows, list):
        return []

    meta_by_date = meta_by_date or {}
    out = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        cloned = dict(row)
        if cloned.get("date") and not cloned.get("dateKey"):
            meta = meta_by_date.get(str(cloned["date"]))
            cloned["dateKey"] = (meta or {}).get("title") or cloned["date"]
        out.append(cloned)
    return out


def prepare_views(payload, presets):
    """
    Build one grouped, sorted View per preset.

    Presets without ``groupBy`` are skipped. Date groups receive ``meta``
    from the date metadata bucket; other presets may name a bucket through
    ``groupMetaData``.

    Returns:
        dict of preset id -> View
    """
    index = index_group_meta(payload)
    meta_by_date = date_meta(index)
    rows = schedule_rows(payload, meta_by_date)

    views = {}
    for preset in presets or []:
        group_by = preset.get("groupBy")
        if not group_by:
            continue

        groups = group_rows(rows, group_by)

        bucket_name = preset.get("groupMetaData")
        meta_bucket = index.get(bucket_name) if bucket_name else None
        if meta_bucket is None and group_by == GROUP_BY_DATE:
            meta_bucket = meta_by_date
        if meta_bucket:
            for group in groups:
                meta = meta_bucket.get(group["rawKey"])
                if meta:
                    group["meta"] = meta

        sort_groups_in_place(groups, preset)
        for group in groups:
            sort_entries_in_place(group["entries"], group_by, preset)

        key = preset_key(preset)
        views[key] = {
            "label": preset.get("label") or key,
            "groupBy": group_by,
            "columns": copy.deepcopy(preset.get("columns")) if isinstance(preset.get("columns"), list) else [],
            "groups": groups,
        }
        logger.info(f"[Views] Prepared view {key}: {len(groups)} groups (groupBy={group_by})")

    return views


def metadata_text(value):
    if isinstance(value, (list, tuple)):
        return "\n".join(str(v) for v in value if v)
    return str(value) if value else ""


def display_title(group, group_by):
    """Metadata title, then a friendly date for date groups, then the group title."""
    meta = group.get("meta") or {}
    if meta.get("title"):
        return str(meta["title"])
    if group_by == GROUP_BY_DATE:
        return friendly_date(group.get("rawKey"))
    return str(group.get("title") or group.get("rawKey") or "")


def header_lines(event, document, snapshot_name):
    """Event header lines plus the snapshot name, unless a line already equals it."""
    raw = (event or {}).get("header")
    if isinstance(raw, str):
        lines = [line for line in raw.splitlines() if line.strip()]
    elif isinstance(raw, list):
        lines = [str(line) for line in raw if line]
    else:
        lines = list(document["header"]["text"])

    name = (snapshot_name or "").strip()
    if name and name.lower() not in {line.strip().lower() for line in lines}:
        lines.append(name)
    return lines


def resolve_columns(view, payload, profile=None):
    for candidate in (view.get("columns"), (payload or {}).get("columns"), (profile or {}).get("columns")):
        if isinstance(candidate, list) and candidate:
            return candidate
    return []


def build_snapshot_document(snapshot, view, payload, document, profile=None):
    """
    Filter a base View for one snapshot and resolve everything renderers need.

    Args:
        snapshot: Snapshot request (name, filters, groupPresetId)
        view: Base View for the snapshot's preset
        payload: Full request payload (event, columns)
        document: Normalized DocumentSettings
        profile: Stored profile, used as the last source of columns

    Returns:
        dict with ``name``, ``label``, ``groupBy``, ``columns``, ``groups``
        (with display ``title`` and ``metadataAbove``/``metadataBelow``),
        ``document`` and ``keyInfo``.
    """
    filtered = apply_snapshot_filters_to_view(view, {
        "filterTagIds": snapshot.get("filterTagIds"),
        "filterLocationIds": snapshot.get("filterLocationIds"),
        "filterSubLocationIds": snapshot.get("filterSubLocationIds"),
    })

    group_by = filtered["groupBy"]
    groups = []
    for group in filtered["groups"]:
        meta = group.get("meta") or {}
        groups.append({
            "rawKey": group.get("rawKey"),
            "title": display_title(group, group_by),
            "metadataAbove": metadata_text(meta.get("above")),
            "metadataBelow": metadata_text(meta.get("below")),
            "entries": group["entries"],
        })

    event = (payload or {}).get("event") or {}
    name = snapshot.get("name") or snapshot.get("filename") or document.get("filename") or "Schedule"

    doc = copy.deepcopy(document)
    doc["filename"] = name
    doc["header"]["text"] = header_lines(event, document, snapshot.get("filename") or snapshot.get("name"))
    if event.get("logoUrl") and not doc["header"]["logo"]["url"]:
        doc["header"]["logo"]["url"] = str(event["logoUrl"])

    return {
        "name": name,
        "label": filtered["label"],
        "groupBy": group_by,
        "columns": resolve_columns(filtered, payload, profile),
        "groups": groups,
        "document": doc,
        "keyInfo": event.get("keyInfo") or "",
    }
