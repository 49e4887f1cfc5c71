from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import GeofenceType
from .model import Geofence
from .strategies.base import FenceStrategy
from .strategies.circle_strategy import CircleStrategy
from .strategies.polygon_strategy import PolygonStrategy
from .strategies.unrestricted_strategy import UnrestrictedStrategy


@dataclass
class GeofenceStrategyFactory:
    """Factory Pattern: choose the containment rule for a fence."""

    def for_fence(self, fence: Geofence) -> FenceStrategy:
        if fence.type == GeofenceType.CIRCLE and fence.center is not None:
            return CircleStrategy()
        if fence.type == GeofenceType.POLYGON and len(fence.vertices) >= 3:
            return PolygonStrategy()
        return UnrestrictedStrategy()
