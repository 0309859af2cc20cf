"""
Home (index) page renderer.

Lists every snapshot of an event as a link button, grouped by the
snapshot's ``group`` label. Snapshots whose render failed are still listed,
as disabled buttons, so operators can see what is missing.
"""
import logging
import math

from constants import DEFAULT_HOME_GROUP, DEFAULT_COMPANY
from services.styles import is_number
from services.rendering.common import template_env, safe_url
from services.rendering.markdown_render import render_markdown
from markupsafe import Markup
from utils.timestamps import RenderClock

logger = logging.getLogger(__name__)

LABEL_KEYS = ("name", "displayName", "title", "filename")


def is_enabled(value) -> bool:
    """True for ``True`` or the string "true" in any case; everything else is off."""
    if value is True:
        return True
    return isinstance(value, str) and value.strip().lower() == "true"


def _sort_order(value):
    if is_number(value) and math.isfinite(value):
        return value
    return math.inf


def snapshot_label(snapshot) -> str:
    for key in LABEL_KEYS:
        value = snapshot.get(key)
        if value not in (None, ""):
            return str(value)
    return "Snapshot"


def snapshot_url(snapshot) -> str:
    for key in ("htmlUrl", "pdfUrl"):
        url = safe_url(snapshot.get(key))
        if url:
            return url
    return ""


def group_snapshots(snapshots):
    """
    Group snapshots by ``group`` (default "Other").

    Groups are ordered by the lowest numeric ``sortOrder`` among their
    members (missing or non-numeric counts as infinity), ties broken by
    group label. Items keep their input order.
    """
    groups = {}
    for snapshot in snapshots or []:
        if not isinstance(snapshot, dict):
            continue
        label = snapshot.get("group")
        label = DEFAULT_HOME_GROUP if label in (None, "") else str(label)
        group = groups.setdefault(label, {"label": label, "sortOrder": math.inf, "items": []})
        group["sortOrder"] = min(group["sortOrder"], _sort_order(snapshot.get("sortOrder")))
        group["items"].append(snapshot)

    return sorted(groups.values(), key=lambda g: (g["sortOrder"], g["label"]))


def _ordered(items):
    indexed = list(enumerate(items))
    indexed.sort(key=lambda pair: (_sort_order(pair[1].get("sortOrder")), pair[0]))
    return [item for _, item in indexed]


def _person(raw):
    return {
        "name": str(raw.get("name") or ""),
        "role": str(raw.get("role") or raw.get("title") or ""),
        "phone": str(raw.get("phone") or ""),
        "email": str(raw.get("email") or ""),
        "sortOrder": raw.get("sortOrder"),
    }


def key_people_by_company(raw):
    """
    Normalise key people into companies, each with its people.

    Accepts either a list of companies (``{"company"|"name", "sortOrder",
    "people": [...]}``) or a flat list of people carrying ``company`` and
    ``companySortOrder``. Companies and people are ordered by ``sortOrder``
    then input order.
    """
    if not isinstance(raw, list):
        return []

    companies = {}
    for item in raw:
        if not isinstance(item, dict):
            continue
        if isinstance(item.get("people"), list):
            name = str(item.get("company") or item.get("name") or DEFAULT_COMPANY)
            company = companies.setdefault(name, {"name": name, "sortOrder": item.get("sortOrder"), "people": []})
            company["people"].extend(_person(p) for p in item["people"] if isinstance(p, dict))
        else:
            name = str(item.get("company") or DEFAULT_COMPANY)
            company = companies.setdefault(name, {"name": name, "sortOrder": item.get("companySortOrder"), "people": []})
            if company["sortOrder"] is None:
                company["sortOrder"] = item.get("companySortOrder")
            company["people"].append(_person(item))

    ordered = _ordered(list(companies.values()))
    for company in ordered:
        company["people"] = _ordered(company["people"])
    return [c for c in ordered if c["people"]]


def _header(event):
    lines = event.get("header")
    if isinstance(lines, str):
        lines = [line for line in lines.splitlines() if line.strip()]
    if isinstance(lines, list) and lines:
        lines = [str(line) for line in lines]
        return lines[0], lines[1:]
    return str(event.get("name") or event.get("eventName") or "Event"), []


def render_home(snapshots, event, *, clock=None, logo_url=None):
    """
    Render the home page for an event.

    Args:
        snapshots: Snapshot results (``name``, ``group``, ``sortOrder``,
            ``htmlUrl``, ``pdfUrl``); failed snapshots carry no URLs
        event: Event metadata (``name``, ``header``, ``logoUrl``,
            ``momKeyInfo``/``keyInfo``, ``keyPeople`` and their show flags)
        clock: RenderClock shared by the request
        logo_url: Logo used when the event has none

    Returns:
        HTML string
    """
    event = event if isinstance(event, dict) else {}
    clock = clock or RenderClock()

    groups = []
    for group in group_snapshots(snapshots):
        groups.append({
            "label": group["label"],
            "items": [{"label": snapshot_label(s), "url": snapshot_url(s)} for s in group["items"]],
        })

    key_info_html = ""
    if is_enabled(event.get("showKeyInfo")):
        key_info_html = render_markdown(event.get("momKeyInfo") or event.get("keyInfo") or "")

    key_people = key_people_by_company(event.get("keyPeople")) if is_enabled(event.get("showKeyPeople")) else []

    heading, sub_lines = _header(event)
    event_name = str(event.get("name") or event.get("eventName") or "Event")

    html = template_env.get_template("home.html").render(
        title=f"{event_name} - Home",
        heading=heading,
        sub_lines=sub_lines,
        logo_url=safe_url(event.get("logoUrl") or logo_url),
        groups=groups,
        key_info_html=Markup(key_info_html),
        key_people=key_people,
        generated_at=clock.pretty(),
    )
    disabled = sum(1 for g in groups for item in g["items"] if not item["url"])
    logger.info(f"[Home] Rendered home for '{event_name}': {len(groups)} groups, {disabled} disabled links")
    return html
