from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from ..common.validators import require_number
from ..core.enums import GeofenceType
from ..core.exceptions import ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    @classmethod
    def parse(cls, latitude: Any, longitude: Any) -> "Coordinates":
        lat = require_number(latitude, "latitude")
        lng = require_number(longitude, "longitude")
        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValidationError("Invalid latitude or longitude")
        return cls(latitude=lat, longitude=lng)


@dataclass(frozen=True)
class Geofence:
    """Project boundary.

    Stored as JSON on the project row:
    - ``{"type": "CIRCLE", "center": {"lat": .., "lng": ..}, "radius_meters": ..}``
    - ``{"type": "POLYGON", "coordinates": [[lng, lat], ...]}``
    - anything else (or nothing) means no restriction.
    """

    type: GeofenceType
    center: Optional[Coordinates] = None
    radius_meters: float = 0.0
    vertices: tuple[Coordinates, ...] = ()

    @classmethod
    def circle(cls, center: Coordinates, radius_meters: float) -> "Geofence":
        return cls(type=GeofenceType.CIRCLE, center=center, radius_meters=float(radius_meters))

    @classmethod
    def polygon(cls, vertices: list[Coordinates]) -> "Geofence":
        return cls(type=GeofenceType.POLYGON, vertices=tuple(vertices))

    @classmethod
    def unrestricted(cls) -> "Geofence":
        return cls(type=GeofenceType.NONE)

    @classmethod
    def from_json(cls, data: Optional[dict], *, project_id: Optional[int] = None) -> "Geofence":
        """Parse a stored fence; an unusable shape falls back to unrestricted with a warning."""

        if not isinstance(data, dict):
            return cls.unrestricted()

        kind = str(data.get("type") or "NONE").upper()
        if kind == GeofenceType.CIRCLE.value:
            center = data.get("center") or {}
            try:
                return cls.circle(
                    Coordinates.parse(center.get("lat"), center.get("lng")),
                    require_number(data.get("radius_meters"), "radius_meters"),
                )
            except (AttributeError, ValidationError) as exc:
                return cls._malformed(kind, project_id, exc)

        if kind == GeofenceType.POLYGON.value:
            points = data.get("coordinates") or []
            try:
                vertices = [Coordinates.parse(p[1], p[0]) for p in points]
            except (IndexError, KeyError, TypeError, ValidationError) as exc:
                return cls._malformed(kind, project_id, exc)
            if len(vertices) < 3:
                return cls._malformed(kind, project_id, f"{len(vertices)} vertices")
            return cls.polygon(vertices)

        if kind != GeofenceType.NONE.value:
            return cls._malformed(kind, project_id, "unknown fence type")
        return cls.unrestricted()

    @classmethod
    def _malformed(cls, kind: str, project_id: Optional[int], cause: Any) -> "Geofence":
        logger.warning("Malformed %s geofence for project %s (%s); treating as unrestricted", kind, project_id, cause)
        return cls.unrestricted()

    def to_json(self) -> Optional[dict]:
        if self.type == GeofenceType.CIRCLE and self.center:
            return {
                "type": "CIRCLE",
                "center": {"lat": self.center.latitude, "lng": self.center.longitude},
                "radius_meters": self.radius_meters,
            }
        if self.type == GeofenceType.POLYGON:
            return {"type": "POLYGON", "coordinates": [[v.longitude, v.latitude] for v in self.vertices]}
        return None


@dataclass(frozen=True)
class GeofenceResult:
    is_inside: bool
    distance_meters: int
    allowed_radius_meters: float
    fence_type: GeofenceType

    def as_detail(self) -> dict:
        return {
            "distance_meters": self.distance_meters,
            "allowed_radius_meters": self.allowed_radius_meters,
            "geofence_type": self.fence_type.value,
        }
