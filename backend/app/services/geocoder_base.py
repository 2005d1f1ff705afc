"""
DevCamper Backend — Abstract Geocoder Interface
=================================================

What:  Contract for forward geocoding (address or postal code → coordinates).
Why:   BootcampService and the radius search only need "give me matches for
       this string"; which provider answers is configuration. Tests supply
       an in-memory implementation through the `get_geocoder` dependency.
How:   Concrete providers inherit from Geocoder and implement geocode().
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class GeocodeResult:
    """One match returned by a geocoder, best match first."""

    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country_code: Optional[str] = None


class Geocoder(ABC):
    """
    Abstract forward geocoder.

    Contract:
        - geocode() returns matches ordered best-first; an empty list means
          the query could not be resolved (a caller error, not a failure)
        - transport and provider failures raise GeocodingError
        - no retries: one request per call
    """

    @abstractmethod
    async def geocode(self, query: str) -> List[GeocodeResult]:
        """
        Resolve an address or postal code.

        Raises:
            GeocodingError: the provider could not be reached or answered
                with something unreadable
        """
        ...

    @property
    @abstractmethod
    def configured(self) -> bool:
        """Whether the provider has the credentials it needs (health check)."""
        ...
