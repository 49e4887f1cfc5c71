from __future__ import annotations

import math
from abc import ABC, abstractmethod

from ...core.constants import EARTH_RADIUS_METERS
from ..model import Coordinates, Geofence, GeofenceResult


def haversine_meters(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in meters between two coordinates."""
    phi1, phi2 = math.radians(a.latitude), math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)
    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


class FenceStrategy(ABC):
    """Strategy Pattern: one containment rule per fence type."""

    @abstractmethod
    def evaluate(self, fence: Geofence, point: Coordinates, *, grace_meters: float) -> GeofenceResult:
        raise NotImplementedError
