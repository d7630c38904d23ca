"""Geospatial helper functions."""

from __future__ import annotations

import math
from typing import Optional, Sequence

from ..errors import InvalidInputError

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Compute distance between two coordinates using the Haversine formula."""

    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    a = math.sin(d_phi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    # rounding can push ``a`` a hair past 1 for antipodal points
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def is_valid_coordinate(lat: Optional[float], lon: Optional[float]) -> bool:
    if lat is None or lon is None:
        return False
    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def validate_coordinate(lat: Optional[float], lon: Optional[float], *, label: str = "start") -> tuple[float, float]:
    """Return ``(lat, lon)`` or raise ``InvalidInputError`` for missing/out-of-range values."""

    if lat is None or lon is None:
        raise InvalidInputError(f"{label}_lat and {label}_lng are required")
    if not is_valid_coordinate(lat, lon):
        raise InvalidInputError(
            f"Invalid {label} coordinate ({lat}, {lon}): latitude must be within [-90, 90] "
            f"and longitude within [-180, 180]"
        )
    return float(lat), float(lon)


def build_distance_matrix(points: Sequence[tuple[float, float]]) -> list[list[float]]:
    """Symmetric haversine matrix for ``(lat, lon)`` points; index 0 is usually the start."""

    count = len(points)
    matrix = [[0.0] * count for _ in range(count)]
    for i in range(count):
        for j in range(i + 1, count):
            distance = haversine_km(points[i][0], points[i][1], points[j][0], points[j][1])
            matrix[i][j] = distance
            matrix[j][i] = distance
    return matrix
