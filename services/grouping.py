"""
Grouping and ordering of schedule entries.

Groups are plain dicts: ``{"rawKey", "title", "entries"}`` plus ``meta``
when date metadata was attached. Sorting uses ``field:dir`` tokens; the
comparator walks tokens in order and falls through on ties. Missing values
sort last whichever direction is requested.
"""
from functools import cmp_to_key

from constants import GROUP_BY_DATE, GROUP_BY_FIELDS, DEFAULT_DATE_ENTRY_SORT, DEFAULT_ENTRY_SORT
from services.filters import normalise_id_array
from services.styles import is_number


def parse_sort_token(token):
    """'time:desc' -> ('time', -1). Direction defaults to ascending."""
    field, _, direction = str(token or "").partition(":")
    return field.strip(), -1 if direction.strip().lower() == "desc" else 1


def _compare_values(a, b):
    if is_number(a) and is_number(b):
        return (a > b) - (a < b)
    sa, sb = str(a), str(b)
    return (sa > sb) - (sa < sb)


def build_comparator(tokens, getter):
    """
    Build a cmp-style function from sort tokens.

    Args:
        tokens: Ordered list of "field:asc" / "field:desc" strings
        getter: getter(record, field) -> value (None when absent)

    Returns:
        cmp(a, b) -> negative, zero or positive
    """
    parsed = [parse_sort_token(t) for t in (tokens or [])]
    parsed = [(field, direction) for field, direction in parsed if field]

    def compare(a, b):
        for field, direction in parsed:
            va, vb = getter(a, field), getter(b, field)
            if va is None and vb is None:
                continue
            if va is None:
                return 1
            if vb is None:
                return -1
            result = _compare_values(va, vb)
            if result:
                return result * direction
        return 0

    return compare


def group_rows(rows, group_by):
    """
    Bucket rows by the grouping key, keeping first-seen group order.

    ``date`` puts each row in at most one group. ``tagId`` and
    ``locationId`` fan a row out to one group per distinct id. Rows without
    the key are skipped; an unknown ``group_by`` yields no groups.
    """
    if group_by not in GROUP_BY_FIELDS:
        return []
    id_field, _ = GROUP_BY_FIELDS[group_by]

    buckets = {}
    for row in rows or []:
        if not isinstance(row, dict):
            continue
        if group_by == GROUP_BY_DATE:
            keys = normalise_id_array(row.get(id_field))[:1]
        else:
            keys = list(dict.fromkeys(normalise_id_array(row.get(id_field))))
        for key in keys:
            buckets.setdefault(key, []).append(row)

    return [
        {"rawKey": key, "title": resolve_group_title(key, entries, group_by), "entries": entries}
        for key, entries in buckets.items()
    ]


def resolve_group_title(raw_key, entries, group_by):
    """
    Display title for a group.

    Date groups keep the raw date (formatted later by the renderers). Tag
    and location groups take their name from the first entry carrying a
    non-empty names list; later entries are never consulted, even if they
    disagree. Inside that entry the name at the same position as ``raw_key``
    in the id list is used when both lists line up, otherwise the first
    name. Falls back to ``raw_key``.
    """
    if group_by not in GROUP_BY_FIELDS or group_by == GROUP_BY_DATE:
        return raw_key
    id_field, names_field = GROUP_BY_FIELDS[group_by]

    for entry in entries or []:
        names = entry.get(names_field)
        if not isinstance(names, (list, tuple)) or not names:
            continue
        ids = normalise_id_array(entry.get(id_field))
        if len(ids) == len(names) and raw_key in ids:
            name = names[ids.index(raw_key)]
        else:
            name = names[0]
        return str(name) if name not in (None, "") else raw_key
    return raw_key


def _group_value(group, field):
    if field in ("date", "dateKey", "rawKey"):
        return group.get("rawKey")
    return group.get("title") or group.get("rawKey")


def _entry_value(entry, field):
    value = entry.get(field)
    if field in ("time", "description"):
        return str(value).lower() if value is not None else None
    return value


def sort_groups_in_place(groups, preset):
    """Order groups by ``preset.groupSort``; without tokens, rawKey ascending."""
    tokens = (preset or {}).get("groupSort")
    if isinstance(tokens, list) and tokens:
        groups.sort(key=cmp_to_key(build_comparator(tokens, _group_value)))
    else:
        groups.sort(key=lambda g: str(g.get("rawKey")))
    return groups


def default_entry_sort(group_by):
    return list(DEFAULT_DATE_ENTRY_SORT if group_by == GROUP_BY_DATE else DEFAULT_ENTRY_SORT)


def sort_entries_in_place(entries, group_by, preset):
    tokens = (preset or {}).get("entrySort")
    if not (isinstance(tokens, list) and tokens):
        tokens = default_entry_sort(group_by)
    entries.sort(key=cmp_to_key(build_comparator(tokens, _entry_value)))
    return entries
