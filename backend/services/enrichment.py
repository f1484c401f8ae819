from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Dict, Iterable, List, Optional, Tuple, TypeVar

from domain.models import CityCoordinate, CityEnrichment
from services.geocoding import geocode_city
from services.image_lookup import lookup_city_image
from settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _best_effort(kind: str, city: str, fn: Callable[[str], Optional[T]]) -> Optional[T]:
    """Run one lookup; a failure only costs this city this piece of data."""
    try:
        return fn(city)
    except Exception as exc:
        logger.warning("%s lookup raised for %r: %s", kind, city, exc)
        return None


def _combine(city: str, image_url: Optional[str], coords: Optional[Tuple[float, float]]) -> CityEnrichment:
    result = CityEnrichment(name=city, image_url=image_url)
    if coords:
        result.lat, result.lon = coords
    return result


def enrich_cities(cities: Iterable[str], max_workers: Optional[int] = None) -> List[CityEnrichment]:
    """
    Enrich every city with a bounded pool of workers.

    Image and geocode lookups are queued as separate tasks; geocode requests
    are additionally spaced by the Nominatim throttle. Results come back in
    the order of ``cities``, not in completion order.
    """
    names = list(cities)
    if not names:
        return []
    workers = max(1, max_workers or settings.ENRICHMENT_MAX_WORKERS)

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="enrich") as pool:
        pending: List[Tuple[str, Future, Future]] = [
            (
                city,
                pool.submit(_best_effort, "image", city, lookup_city_image),
                pool.submit(_best_effort, "geocode", city, geocode_city),
            )
            for city in names
        ]
        results: List[CityEnrichment] = []
        for city, image_future, geo_future in pending:
            results.append(_combine(city, image_future.result(), geo_future.result()))

    logger.info(
        "Enriched %d cities: %d images, %d coordinates",
        len(results),
        sum(1 for r in results if r.image_url),
        sum(1 for r in results if r.has_coordinates),
    )
    return results


def build_enrichment_maps(
    results: Iterable[CityEnrichment],
) -> Tuple[Dict[str, str], List[CityCoordinate]]:
    """Split enrichment results into the stored image map and ordered coordinates."""
    city_images: Dict[str, str] = {}
    coordinates: List[CityCoordinate] = []
    for item in results:
        if item.image_url:
            city_images[item.name] = item.image_url
        if item.has_coordinates:
            coordinates.append(CityCoordinate(name=item.name, lat=item.lat, lon=item.lon))
    return city_images, coordinates
