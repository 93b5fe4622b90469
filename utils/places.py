"""
Google Places gateway: text search and place details.

Reshapes upstream payloads into the Location / PlaceDetails dicts the UI
consumes. Nothing here persists; selection logging lives in utils.tracking.
"""
from typing import Any, Optional
from urllib.parse import quote

import httpx

from core.config import logger, PLACES_API_BASE, PLACES_HTTP_TIMEOUT
from core import config

DETAIL_FIELDS = (
    "place_id,name,formatted_address,formatted_phone_number,international_phone_number,"
    "website,url,business_status,types,rating,user_ratings_total,geometry,photos"
)
MAX_PHOTOS = 5
PHOTO_MAX_WIDTH = 400
DEFAULT_RETRY_AFTER = "60"

# Overridable transport (tests plug in httpx.MockTransport)
_transport: Optional[httpx.AsyncBaseTransport] = None


class PlacesError(Exception):
    status_code = 500


class PlacesConfigError(PlacesError):
    def __init__(self):
        super().__init__("API configuration error")


class PlacesRateLimited(PlacesError):
    status_code = 429

    def __init__(self, retry_after: str):
        super().__init__("Rate limit exceeded")
        self.retry_after = retry_after


class PlacesNotFound(PlacesError):
    status_code = 404


class PlacesUpstreamError(PlacesError):
    def __init__(self, message: str = "Failed to fetch data from Google Places API", upstream_status: Optional[int] = None):
        super().__init__(message)
        self.upstream_status = upstream_status


def _api_key() -> str:
    key = (config.GOOGLE_PLACES_API_KEY or "").strip()
    if not key:
        logger.error("[places] GOOGLE_PLACES_API_KEY is missing")
        raise PlacesConfigError()
    return key


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=PLACES_HTTP_TIMEOUT, transport=_transport)


async def _get_json(url: str, params: dict) -> dict:
    try:
        async with _client() as client:
            resp = await client.get(url, params=params)
    except httpx.HTTPError as ex:
        logger.error(f"[places] request to {url} failed: {ex}")
        raise PlacesUpstreamError() from ex

    if resp.status_code == 429:
        raise PlacesRateLimited(resp.headers.get("Retry-After") or DEFAULT_RETRY_AFTER)
    if resp.status_code >= 400:
        logger.error(f"[places] upstream error {resp.status_code}: {resp.text[:500]}")
        raise PlacesUpstreamError(upstream_status=resp.status_code)
    try:
        return resp.json()
    except ValueError as ex:
        raise PlacesUpstreamError("Invalid response from Google Places API") from ex


def photo_url(photo_reference: str, api_key: str) -> str:
    return (
        f"{PLACES_API_BASE}/photo?maxwidth={PHOTO_MAX_WIDTH}"
        f"&photoreference={quote(str(photo_reference), safe='')}&key={api_key}"
    )


def to_location(result: dict) -> dict:
    return {
        "id": result.get("place_id"),
        "name": result.get("name"),
        "address": result.get("formatted_address"),
        "placeId": result.get("place_id"),
    }


def to_place_details(result: dict, api_key: str) -> dict[str, Any]:
    place_id = result.get("place_id")
    photos = [
        photo_url(p.get("photo_reference"), api_key)
        for p in (result.get("photos") or [])[:MAX_PHOTOS]
        if p.get("photo_reference")
    ]
    return {
        "id": place_id,
        "placeId": place_id,
        "name": result.get("name"),
        "address": result.get("formatted_address"),
        "formatted_address": result.get("formatted_address"),
        "formatted_phone_number": result.get("formatted_phone_number"),
        "international_phone_number": result.get("international_phone_number"),
        "phoneNumber": result.get("formatted_phone_number") or result.get("international_phone_number"),
        "website": result.get("website"),
        "googleMapsUrl": result.get("url") or f"https://maps.google.com/maps?place_id={place_id}",
        "photos": photos,
        "businessStatus": result.get("business_status"),
        "types": result.get("types") or [],
        "rating": result.get("rating"),
        "user_ratings_total": result.get("user_ratings_total"),
        "geometry": result.get("geometry"),
    }


async def search_places(query: str) -> list[dict]:
    query = (query or "").strip()
    if not query:
        raise ValueError("Search query is required")
    api_key = _api_key()

    data = await _get_json(f"{PLACES_API_BASE}/textsearch/json", {"query": query, "key": api_key})
    results = data.get("results") or []
    if data.get("status") != "OK" or not results:
        raise PlacesNotFound(data.get("error_message") or "No results found")

    logger.info(f"[places.search] query='{query}' results={len(results)}")
    return [to_location(r) for r in results]


async def get_place_details(place_id: str) -> dict[str, Any]:
    place_id = (place_id or "").strip()
    if not place_id:
        raise ValueError("Place ID is required")
    api_key = _api_key()

    data = await _get_json(
        f"{PLACES_API_BASE}/details/json",
        {"place_id": place_id, "fields": DETAIL_FIELDS, "key": api_key},
    )
    result = data.get("result")
    if data.get("status") != "OK" or not result:
        raise PlacesNotFound("No details found for this place")

    return to_place_details(result, api_key)
