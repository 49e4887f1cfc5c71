from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import now_local
from ..core.constants import MAX_BREAK_MINUTES, MIN_BREAK_MINUTES
from ..core.enums import Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..database.unit_of_work import UnitOfWork
from .model import BreakWindow

logger = logging.getLogger(__name__)


class BreakService:
    """Site-wide breaks that freeze attendance tracking for a project."""

    def __init__(self, uow: UnitOfWork):
        self._uow = uow

    def start_break(
        self,
        *,
        current_role: str,
        project_id: int,
        duration_minutes: int,
        reason: Optional[str],
        created_by: int,
        now: Optional[datetime] = None,
    ) -> BreakWindow:
        if current_role != Role.SITE_ENGINEER.value:
            raise AuthorizationError("Only site engineers can start a break")
        try:
            duration = int(duration_minutes)
        except (TypeError, ValueError):
            raise ValidationError("duration_minutes must be a number")
        if not MIN_BREAK_MINUTES <= duration <= MAX_BREAK_MINUTES:
            raise ValidationError(f"Break duration must be between {MIN_BREAK_MINUTES} and {MAX_BREAK_MINUTES} minutes")

        now = now or now_local()
        with self._uow.begin() as tx:
            if not tx.projects.get_by_id(project_id):
                raise NotFoundError(f"Project {project_id} not found")
            active = tx.projects.get_active_break(project_id, now)
            if active:
                raise ConflictError(f"A break is already active until {active.ended_at.isoformat()}")

            ends_at = now + timedelta(minutes=duration)
            break_id = tx.projects.create_break(
                project_id=project_id,
                started_at=now,
                ended_at=ends_at,
                reason=(reason or "").strip() or None,
                created_by=created_by,
            )

        logger.info("Break %s started on project %s until %s", break_id, project_id, ends_at.isoformat())
        return BreakWindow(
            break_id=break_id,
            project_id=project_id,
            started_at=now,
            ended_at=ends_at,
            reason=(reason or "").strip() or None,
            created_by=created_by,
        )

    def active_break(self, project_id: int, *, now: Optional[datetime] = None) -> Optional[BreakWindow]:
        now = now or now_local()
        with self._uow.begin() as tx:
            if not tx.projects.get_by_id(project_id):
                raise NotFoundError(f"Project {project_id} not found")
            return tx.projects.get_active_break(project_id, now)

    def list_breaks(self, project_id: int, *, current_role: str, limit: int = 50) -> Sequence[BreakWindow]:
        """Most recent breaks of a project, newest first."""

        if current_role != Role.SITE_ENGINEER.value:
            raise AuthorizationError("Only site engineers can list breaks")
        with self._uow.begin() as tx:
            if not tx.projects.get_by_id(project_id):
                raise NotFoundError(f"Project {project_id} not found")
            return list(tx.projects.list_breaks(project_id, max(int(limit), 1)))
