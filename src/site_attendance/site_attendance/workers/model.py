from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..geofence.model import Coordinates


@dataclass(frozen=True)
class Worker:
    """Domain entity: a field worker (labour).

    Note: identity is immutable from the ledger's point of view; profile
    edits happen elsewhere.
    """

    worker_id: int
    full_name: str
    skill_type: str
    category: str
    home: Optional[Coordinates] = None
    travel_radius_km: Optional[float] = None
