from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from .model import WageRecord


class WageRepository(Protocol):
    def get_for_attendance(self, attendance_id: int) -> Optional[WageRecord]:
        raise NotImplementedError

    def list_for_worker(self, worker_id: int) -> Sequence[WageRecord]:
        """Newest attendance day first."""

        raise NotImplementedError

    def upsert(
        self,
        *,
        attendance_id: int,
        worker_id: int,
        project_id: int,
        hourly_rate: Decimal,
        worked_hours: Decimal,
        total_amount: Decimal,
        updated_at: datetime,
    ) -> WageRecord:
        """Insert or refresh the amounts; an existing ``status`` is left untouched."""

        raise NotImplementedError


class RateTable(Protocol):
    def get_hourly_rate(self, project_id: int, skill_type: str, category: str) -> Optional[Decimal]:
        raise NotImplementedError
