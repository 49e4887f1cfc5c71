from __future__ import annotations

from ...core.enums import GeofenceType
from ..model import Coordinates, Geofence, GeofenceResult
from .base import FenceStrategy, haversine_meters


class CircleStrategy(FenceStrategy):
    """Inside when the distance to the center is within radius + grace."""

    def evaluate(self, fence: Geofence, point: Coordinates, *, grace_meters: float) -> GeofenceResult:
        distance = haversine_meters(point, fence.center)
        return GeofenceResult(
            is_inside=distance <= fence.radius_meters + grace_meters,
            distance_meters=round(distance),
            allowed_radius_meters=fence.radius_meters,
            fence_type=GeofenceType.CIRCLE,
        )
