"""Forward geocoding of city names using OpenStreetMap Nominatim.

Nominatim is a shared public service: every request goes through a single
throttle so successive calls are spaced by at least NOMINATIM_MIN_INTERVAL
seconds, however many enrichment workers are running.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from typing import Any, Optional, Tuple

import requests

from settings import settings

logger = logging.getLogger(__name__)
_session = requests.Session()
_last_request_ts: float = 0.0
_lock = threading.Lock()
_MIN_INTERVAL_SEC = settings.NOMINATIM_MIN_INTERVAL
_logged_ua = False

NOMINATIM_SEARCH_URL = f"{settings.NOMINATIM_BASE_URL}/search"
FALLBACK_UA = "travel-guide-service/0.1 (contact: example@example.com)"
if settings.NOMINATIM_USER_AGENT is None:
    logger.warning(
        "NOMINATIM_USER_AGENT not set in environment; using fallback UA. "
        "This may violate Nominatim usage policy."
    )


def _redact_email(ua: str) -> str:
    if "@" not in ua:
        return ua
    return re.sub(r"\S+@\S+", "<redacted>", ua)


_ua_value = settings.NOMINATIM_USER_AGENT or FALLBACK_UA
NOMINATIM_HEADERS = {
    "User-Agent": _ua_value,
}
if settings.NOMINATIM_REFERER:
    NOMINATIM_HEADERS["Referer"] = settings.NOMINATIM_REFERER


def _throttled_get(
    url: str,
    *,
    params: dict[str, Any],
    headers: dict[str, str],
    timeout: float,
) -> requests.Response:
    """Perform a GET request with a simple global rate limit."""
    global _last_request_ts
    with _lock:
        now = time.time()
        delta = now - _last_request_ts
        if delta < _MIN_INTERVAL_SEC:
            time.sleep(_MIN_INTERVAL_SEC - delta)
        _last_request_ts = time.time()
    return _session.get(url, params=params, headers=headers, timeout=timeout)


def _parse_first_result(data: Any) -> Optional[Tuple[float, float]]:
    if not isinstance(data, list) or not data:
        return None
    first = data[0]
    return float(first["lat"]), float(first["lon"])


def geocode_city(city: str) -> Optional[Tuple[float, float]]:
    """Resolve a city name to (lat, lon) using Nominatim.

    Returns None when geocoding is disabled, nothing matches, or the request
    or its payload fails in any way.
    """
    if not settings.GEOCODING_ENABLED:
        return None

    global _logged_ua
    if not _logged_ua:
        logger.debug("Nominatim User-Agent: %s", _redact_email(_ua_value))
        _logged_ua = True

    params = {
        "q": city,
        "format": "json",
        "limit": "1",
    }

    try:
        resp = _throttled_get(
            NOMINATIM_SEARCH_URL,
            params=params,
            headers=NOMINATIM_HEADERS,
            timeout=settings.HTTP_TIMEOUT,
        )
        resp.raise_for_status()
    except requests.RequestException as exc:
        logger.warning("Nominatim search error for %r: %s", city, exc)
        return None

    try:
        coords = _parse_first_result(resp.json())
    except (ValueError, KeyError, TypeError) as exc:
        logger.warning("Nominatim search JSON error for %r: %s", city, exc)
        return None

    if coords is None:
        logger.info("No coordinates found for %r", city)
        return None
    logger.debug("Geocoded %r -> %.5f,%.5f", city, coords[0], coords[1])
    return coords
