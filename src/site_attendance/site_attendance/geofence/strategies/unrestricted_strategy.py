from __future__ import annotations

from ...core.enums import GeofenceType
from ..model import Coordinates, Geofence, GeofenceResult
from .base import FenceStrategy


class UnrestrictedStrategy(FenceStrategy):
    """Project without a boundary: every location counts as on site."""

    def evaluate(self, fence: Geofence, point: Coordinates, *, grace_meters: float) -> GeofenceResult:
        return GeofenceResult(is_inside=True, distance_meters=0, allowed_radius_meters=0.0, fence_type=GeofenceType.NONE)
