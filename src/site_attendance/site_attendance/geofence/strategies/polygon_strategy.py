from __future__ import annotations

from ...core.enums import GeofenceType
from ..model import Coordinates, Geofence, GeofenceResult
from .base import FenceStrategy, haversine_meters


def point_in_polygon(point: Coordinates, vertices: tuple[Coordinates, ...]) -> bool:
    """Ray casting on (lng, lat) as planar x/y."""
    x, y = point.longitude, point.latitude
    inside = False
    j = len(vertices) - 1
    for i, vi in enumerate(vertices):
        vj = vertices[j]
        if (vi.latitude > y) != (vj.latitude > y):
            cross_x = (vj.longitude - vi.longitude) * (y - vi.latitude) / (vj.latitude - vi.latitude) + vi.longitude
            if x < cross_x:
                inside = not inside
        j = i
    return inside


class PolygonStrategy(FenceStrategy):
    """Inside when contained, or when the nearest vertex is within the grace buffer."""

    def evaluate(self, fence: Geofence, point: Coordinates, *, grace_meters: float) -> GeofenceResult:
        if point_in_polygon(point, fence.vertices):
            distance = 0.0
        else:
            distance = min(haversine_meters(point, v) for v in fence.vertices)

        return GeofenceResult(
            is_inside=distance <= grace_meters,
            distance_meters=round(distance),
            allowed_radius_meters=0.0,
            fence_type=GeofenceType.POLYGON,
        )
