"""
DevCamper Backend — MapQuest Geocoder
=======================================

What:  Geocoder implementation over the MapQuest Geocoding API v1.
Why:   MapQuest is the provider the DevCamper deployment has a key for.
How:   One GET to `{base_url}/address?key=...&location=...` per call through
       httpx.AsyncClient with the configured timeout. Every location of the
       first result set is returned, best match first.
Who:   BootcampService (address on create/update) and the radius search
       (zipcode).

Failure policy:
    - HTTP/transport error, timeout, non-2xx, MapQuest statuscode != 0, or a
      payload without the expected shape → GeocodingError (503)
    - No locations, or only the "no match" centroid MapQuest returns for
      unknown input → empty list (the caller decides what that means)
    - One attempt per call
"""

import logging
import time
import uuid
from typing import Any, Dict, List, Optional

import httpx

from app.config import settings
from app.exceptions import GeocodingError
from app.services.geocoder_base import GeocodeResult, Geocoder

logger = logging.getLogger(__name__)

# geocodeQuality MapQuest assigns when it falls back to a country or state
# centroid instead of matching the input
_UNMATCHED_QUALITIES = {"COUNTRY", "STATE"}


def _format_address(street: str, city: str, state: str, zipcode: str, country: str) -> str:
    region = " ".join(part for part in (state, zipcode) if part)
    return ", ".join(part for part in (street, city, region, country) if part)


def _parse_location(location: Dict[str, Any]) -> Optional[GeocodeResult]:
    lat_lng = location.get("latLng") or location.get("displayLatLng")
    if not lat_lng:
        return None
    if location.get("geocodeQuality") in _UNMATCHED_QUALITIES:
        return None

    street = location.get("street") or ""
    city = location.get("adminArea5") or ""
    state = location.get("adminArea3") or ""
    zipcode = location.get("postalCode") or ""
    country = location.get("adminArea1") or ""
    return GeocodeResult(
        latitude=float(lat_lng["lat"]),
        longitude=float(lat_lng["lng"]),
        formatted_address=_format_address(street, city, state, zipcode, country),
        street=street or None,
        city=city or None,
        state=state or None,
        zipcode=zipcode or None,
        country_code=country or None,
    )


class MapQuestGeocoder(Geocoder):
    """
    Forward geocoding against MapQuest.

    Args:
        api_key:   consumer key (defaults to settings.geocoder_api_key)
        base_url:  API root (defaults to settings.geocoder_base_url)
        timeout:   seconds per request (defaults to settings.geocoder_timeout)
        transport: httpx transport override, used by tests
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.geocoder_api_key
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.timeout = timeout or settings.geocoder_timeout
        self._transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def geocode(self, query: str) -> List[GeocodeResult]:
        request_id = str(uuid.uuid4())[:8]
        if not self.configured:
            raise GeocodingError(
                message="Geocoding service is not configured",
                context={"request_id": request_id},
            )

        start_time = time.time()
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(
                    f"{self.base_url}/address",
                    params={"key": self.api_key, "location": query, "maxResults": 5},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "[%s] MapQuest returned HTTP %d", request_id, e.response.status_code
            )
            raise GeocodingError(context={"request_id": request_id, "status": e.response.status_code})
        except httpx.HTTPError as e:
            logger.warning("[%s] MapQuest request failed: %s", request_id, str(e))
            raise GeocodingError(context={"request_id": request_id, "error_type": type(e).__name__})
        except ValueError:
            logger.warning("[%s] MapQuest returned a non-JSON body", request_id)
            raise GeocodingError(context={"request_id": request_id})

        duration_ms = (time.time() - start_time) * 1000

        try:
            status = payload.get("info", {}).get("statuscode", 0)
            if status != 0:
                messages = payload.get("info", {}).get("messages", [])
                logger.warning("[%s] MapQuest statuscode=%s: %s", request_id, status, messages)
                raise GeocodingError(context={"request_id": request_id, "statuscode": status})

            results = payload.get("results") or []
            locations = results[0].get("locations", []) if results else []
            matches = [m for m in (_parse_location(loc) for loc in locations) if m is not None]
        except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
            logger.warning("[%s] Unexpected MapQuest payload: %s", request_id, str(e))
            raise GeocodingError(context={"request_id": request_id})

        logger.info(
            "[%s] Geocoded '%s' in %.0fms: %d match(es)",
            request_id,
            query,
            duration_ms,
            len(matches),
        )
        return matches


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless apart from configuration; routes receive it via get_geocoder()
geocoder = MapQuestGeocoder()
