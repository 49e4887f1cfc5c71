from __future__ import annotations

from typing import Optional

from .factory import GeofenceStrategyFactory
from .model import Coordinates, Geofence, GeofenceResult

_default_factory = GeofenceStrategyFactory()


def evaluate(
    fence: Geofence,
    point: Coordinates,
    *,
    grace_meters: float = 0.0,
    factory: Optional[GeofenceStrategyFactory] = None,
) -> GeofenceResult:
    """Pure check of a coordinate against a project boundary."""

    strategy = (factory or _default_factory).for_fence(fence)
    return strategy.evaluate(fence, point, grace_meters=float(grace_meters))
