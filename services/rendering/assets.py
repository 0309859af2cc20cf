"""Remote assets pulled into rendered documents (currently only logos)."""
import logging

import requests

from config import LOGO_FETCH_TIMEOUT, LOGO_FETCH_RETRIES
from services.errors import ExternalFetchError

logger = logging.getLogger(__name__)


def fetch_logo(url, timeout=None, retries=None):
    """
    Download a logo image.

    Every attempt is bounded by ``timeout`` seconds; a failed attempt is
    retried ``retries`` more times (one by default).

    Raises:
        ExternalFetchError: all attempts failed
    """
    timeout = LOGO_FETCH_TIMEOUT if timeout is None else timeout
    retries = LOGO_FETCH_RETRIES if retries is None else retries

    last_error = None
    for attempt in range(retries + 1):
        try:
            response = requests.get(url, timeout=timeout)
            response.raise_for_status()
            return response.content
        except requests.RequestException as e:
            last_error = e
            logger.warning(f"[Assets] Logo fetch attempt {attempt + 1} failed for {url}: {e}")

    raise ExternalFetchError(f"Logo fetch failed for {url}: {last_error}")
