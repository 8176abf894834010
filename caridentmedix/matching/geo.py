"""Great-circle distance and nearby clinic lookup."""
import logging
import math
from dataclasses import replace
from typing import List, Sequence

from ..config import DEFAULT_RADIUS_KM, EARTH_RADIUS_KM
from .models import Clinic

logger = logging.getLogger(__name__)


def haversine_distance_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Distance in kilometres between two points given in decimal degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    # Rounding can push a just past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def validate_coordinates(latitude: float, longitude: float) -> None:
    if not -90.0 <= latitude <= 90.0:
        raise ValueError(f"latitude must be between -90 and 90, got {latitude}")
    if not -180.0 <= longitude <= 180.0:
        raise ValueError(f"longitude must be between -180 and 180, got {longitude}")


def find_nearby_clinics(
    clinics: Sequence[Clinic],
    latitude: float,
    longitude: float,
    radius_km: float = DEFAULT_RADIUS_KM,
) -> List[Clinic]:
    """
    Clinics within radius_km of the given point, nearest first.

    Each returned clinic is a copy with distance_km filled in. Clinics that have
    no coordinates are skipped.
    """
    if clinics is None:
        raise ValueError("clinics must be a sequence of clinics, got None")
    if radius_km < 0:
        raise ValueError(f"radius_km must not be negative, got {radius_km}")
    validate_coordinates(latitude, longitude)

    nearby = []
    skipped = 0
    for clinic in clinics:
        if clinic.latitude is None or clinic.longitude is None:
            skipped += 1
            continue
        distance = haversine_distance_km(latitude, longitude, clinic.latitude, clinic.longitude)
        if distance <= radius_km:
            nearby.append(replace(clinic, distance_km=distance))

    if skipped:
        logger.warning(f"Skipped {skipped} clinics without coordinates.")
    nearby.sort(key=lambda clinic: clinic.distance_km)
    logger.info(f"Found {len(nearby)} clinics within {radius_km} km.")
    return nearby
