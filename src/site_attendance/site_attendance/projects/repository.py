from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .model import BreakWindow, Project


class ProjectRepository(Protocol):
    def get_by_id(self, project_id: int) -> Optional[Project]:
        raise NotImplementedError

    def get_active_break(self, project_id: int, at: datetime) -> Optional[BreakWindow]:
        raise NotImplementedError

    def create_break(
        self,
        *,
        project_id: int,
        started_at: datetime,
        ended_at: datetime,
        reason: Optional[str],
        created_by: int,
    ) -> int:
        raise NotImplementedError

    def list_breaks(self, project_id: int, limit: int) -> Sequence[BreakWindow]:
        raise NotImplementedError
