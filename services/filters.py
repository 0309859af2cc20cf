"""
Snapshot filters over schedule entries.

Three id dimensions (tags, locations, sub-locations). Within a dimension an
entry passes when it shares at least one id with the filter; across
dimensions every active filter must pass. An empty filter list is off.
"""
from constants import FILTER_DIMENSIONS


def normalise_id_array(value):
    """Ids as a list of strings; scalars become one-element lists, None becomes []."""
    if value is None:
        return []
    if isinstance(value, (list, tuple, set)):
        return [str(v) for v in value if v is not None and str(v) != ""]
    if str(value) == "":
        return []
    return [str(value)]


def _active_filters(filters):
    filters = filters or {}
    active = []
    for filter_key, entry_key in FILTER_DIMENSIONS:
        wanted = set(normalise_id_array(filters.get(filter_key)))
        if wanted:
            active.append((entry_key, wanted))
    return active


def _passes(entry, active):
    for entry_key, wanted in active:
        if wanted.isdisjoint(normalise_id_array(entry.get(entry_key))):
            return False
    return True


def filter_entries(entries, filters):
    """
    Return the entries that pass every active filter dimension, in input order.

    Entries are not copied or mutated; the returned list holds the same
    objects.
    """
    active = _active_filters(filters)
    if not active:
        return list(entries or [])
    return [entry for entry in (entries or []) if _passes(entry, active)]


def apply_snapshot_filters_to_view(view, filters):
    """
    Filter every group of a View and drop the groups left empty.

    Returns a new View; ``label``, ``groupBy`` and ``columns`` are carried
    over and each kept group keeps its ``rawKey``, ``title`` and ``meta``.
    """
    groups = []
    for group in view.get("groups") or []:
        entries = filter_entries(group.get("entries"), filters)
        if not entries:
            continue
        filtered = dict(group)
        filtered["entries"] = entries
        groups.append(filtered)

    return {
        "label": view.get("label"),
        "groupBy": view.get("groupBy"),
        "columns": list(view.get("columns") or []),
        "groups": groups,
    }
