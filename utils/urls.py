"""Map storage keys to the public URLs served by the edge proxy."""


def make_public_url(key, public_base_url="", fallback=None):
    """
    Return the public URL for a storage key.

    public/<app>/<event>/<rest>  ->  <base>/<app>/<event>/<rest>
    snapshots/<app>/<rest>       ->  <base>/snapshots/<app>/<rest>

    Keys outside those prefixes, or any key when no edge host is configured,
    use ``fallback(key)`` (normally the storage backend's own URL).
    """
    key = (key or "").lstrip("/")
    base = (public_base_url or "").rstrip("/")

    if base:
        parts = key.split("/")
        if parts[0] == "public" and len(parts) >= 4:
            return f"{base}/{'/'.join(parts[1:])}"
        if parts[0] == "snapshots" and len(parts) >= 3:
            return f"{base}/{key}"

    if fallback is not None:
        return fallback(key)
    return key
