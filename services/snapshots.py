"""
Snapshot publishing.

Renders one prepared snapshot to PDF and HTML and uploads both:

    public/<app>/<event>/<slug>-<YYYYMMDD-HHMM>.pdf   immutable, new key per render
    public/<app>/<event>/<slug>.html                  stable key, never cached

The PDF is rendered first so the HTML can link to it.
"""
import json
import logging
import time

from constants import CACHE_IMMUTABLE, CACHE_NO_STORE
from services.errors import UploadError
from services.rendering.assets import fetch_logo
from services.rendering.html_schedule import render_schedule_html
from services.rendering.pdf_schedule import render_schedule_pdf
from utils.filenames import sanitise_name, html_key, pdf_key

logger = logging.getLogger(__name__)


def upload(storage, data, key, content_type, cache_control):
    """Store bytes and return their public URL, wrapping any backend failure."""
    try:
        storage.put_bytes(data, key, content_type=content_type, cache_control=cache_control)
    except Exception as e:
        raise UploadError(key, e) from e
    return storage.public_url(key)


def publish_snapshot(prepared, styles, *, storage, prefix, clock, home_href=None, footer_credit="",
                     logo_fetcher=fetch_logo, debug_dump=False):
    """
    Render and upload one snapshot.

    Args:
        prepared: Output of build_snapshot_document
        styles: Normalized style profile
        storage: StorageBackend
        prefix: ``public/<app>/<event>`` key prefix
        clock: RenderClock shared by the request
        home_href: Relative link from the HTML back to the home page
        footer_credit: Optional credit line for both documents
        logo_fetcher: Callable returning logo bytes for a URL
        debug_dump: Also upload the prepared JSON next to the artifacts

    Returns:
        dict with ``name``, ``slug``, ``htmlUrl``, ``pdfUrl``, ``pdfName``,
        ``htmlName`` and ``executionTimeSeconds``

    Raises:
        RenderError: unusable page geometry
        UploadError: an artifact could not be stored
    """
    started = time.monotonic()
    name = prepared["name"]
    slug = sanitise_name(name)
    document = prepared["document"]

    pdf_name = pdf_key(prefix, slug, clock.file_stamp())
    pdf_bytes = render_schedule_pdf(
        prepared, styles, document,
        clock=clock,
        key_info=prepared.get("keyInfo"),
        logo_fetcher=logo_fetcher,
        footer_credit=footer_credit,
    )
    pdf_url = upload(storage, pdf_bytes, pdf_name, "application/pdf", CACHE_IMMUTABLE)

    html = render_schedule_html(
        prepared, styles, document, pdf_url,
        clock=clock,
        key_info=prepared.get("keyInfo"),
        home_href=home_href,
        footer_credit=footer_credit,
    )
    html_name = html_key(prefix, slug)
    html_url = upload(storage, html, html_name, "text/html; charset=utf-8", CACHE_NO_STORE)

    if debug_dump:
        dump = json.dumps(prepared, default=str, indent=2)
        upload(storage, dump, f"{prefix}/{slug}.json", "application/json", CACHE_NO_STORE)

    elapsed = round(time.monotonic() - started, 3)
    logger.info(f"[Snapshots] Published '{name}' as {slug} in {elapsed}s")
    return {
        "name": name,
        "slug": slug,
        "htmlUrl": html_url,
        "pdfUrl": pdf_url,
        "pdfName": pdf_name,
        "htmlName": html_name,
        "executionTimeSeconds": elapsed,
    }
