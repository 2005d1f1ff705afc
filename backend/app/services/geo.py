"""
DevCamper Backend — Spherical Geometry Helpers
================================================

What:  Pure functions behind the radius search: linear distance → angular
       radius, great-circle central angle, and a lat/lng bounding box used
       as an index-friendly prefilter.
Units: Distances are miles. The Earth is a sphere of radius 3,963 miles.
"""

import math
from dataclasses import dataclass
from typing import Optional

EARTH_RADIUS_MILES = 3963
EARTH_RADIUS_KM = 6378


@dataclass(frozen=True)
class BoundingBox:
    """Degrees. Longitude bounds are None when every longitude qualifies."""

    min_lat: float
    max_lat: float
    min_lng: Optional[float] = None
    max_lng: Optional[float] = None


def angular_radius(distance: float, earth_radius: float = EARTH_RADIUS_MILES) -> float:
    """Radians subtended by `distance` on the sphere."""
    return distance / earth_radius


def central_angle(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine central angle in radians between two points given in degrees."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = phi2 - phi1
    d_lambda = math.radians(lng2 - lng1)
    h = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    return 2 * math.asin(min(1.0, math.sqrt(h)))


def within_radius(lat: float, lng: float, center_lat: float, center_lng: float, radius: float) -> bool:
    return central_angle(center_lat, center_lng, lat, lng) <= radius


def bounding_box(lat: float, lng: float, radius: float) -> BoundingBox:
    """
    Smallest lat/lng box containing the spherical cap of `radius` radians.

    Longitude is left open when the cap reaches a pole or crosses the
    antimeridian; the exact central-angle check filters afterwards.
    """
    delta_lat = math.degrees(radius)
    min_lat = lat - delta_lat
    max_lat = lat + delta_lat
    if min_lat <= -90 or max_lat >= 90:
        return BoundingBox(max(min_lat, -90.0), min(max_lat, 90.0))

    ratio = math.sin(radius) / math.cos(math.radians(lat))
    if ratio >= 1:
        return BoundingBox(min_lat, max_lat)
    delta_lng = math.degrees(math.asin(ratio))
    min_lng = lng - delta_lng
    max_lng = lng + delta_lng
    if min_lng < -180 or max_lng > 180:
        return BoundingBox(min_lat, max_lat)
    return BoundingBox(min_lat, max_lat, min_lng, max_lng)
