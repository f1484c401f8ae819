"""
City picture lookup.

With UNSPLASH_ACCESS_KEY set, the Unsplash search API is queried for a
landscape photo. Without a key, a redirecting random-image endpoint is
requested and the final URL it resolves to is kept.
"""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

import requests

from settings import settings

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
USER_AGENT = "travel-guide-service/0.1"

logger = logging.getLogger(__name__)
_session = requests.Session()


def _search_unsplash(city: str, access_key: str) -> Optional[str]:
    resp = _session.get(
        UNSPLASH_SEARCH_URL,
        params={"query": city, "per_page": 1, "orientation": "landscape"},
        headers={"Authorization": f"Client-ID {access_key}", "User-Agent": USER_AGENT},
        timeout=settings.HTTP_TIMEOUT,
    )
    resp.raise_for_status()
    results = resp.json().get("results") or []
    if not results:
        return None
    return results[0]["urls"]["regular"]


def _resolve_redirect(city: str) -> Optional[str]:
    url = settings.IMAGE_REDIRECT_URL_TEMPLATE.format(query=quote(city))
    # stream=True: only the final location matters, not the image bytes
    resp = _session.get(
        url,
        headers={"User-Agent": USER_AGENT},
        timeout=settings.HTTP_TIMEOUT,
        allow_redirects=True,
        stream=True,
    )
    try:
        resp.raise_for_status()
        # No redirect means the endpoint did not resolve to a picture.
        if not resp.history:
            return None
        return resp.url or None
    finally:
        resp.close()


def lookup_city_image(city: str) -> Optional[str]:
    """Return an image URL for the city, or None if none could be found."""
    if not settings.IMAGE_LOOKUP_ENABLED:
        return None
    try:
        if settings.UNSPLASH_ACCESS_KEY:
            image_url = _search_unsplash(city, settings.UNSPLASH_ACCESS_KEY)
        else:
            image_url = _resolve_redirect(city)
    except requests.RequestException as exc:
        logger.warning("Image lookup failed for %r: %s", city, exc)
        return None
    except (ValueError, KeyError, TypeError, AttributeError) as exc:
        logger.warning("Unexpected image payload for %r: %s", city, exc)
        return None

    if not image_url:
        logger.info("No image found for %r", city)
        return None
    logger.debug("Image for %r -> %s", city, image_url)
    return image_url
