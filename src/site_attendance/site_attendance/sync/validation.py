"""Envelope checks for offline sync batches.

A bad batch raises before anything runs; a bad action raises only for that
action and the reconciler rejects it individually.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Any

from ..common.datetime_utils import parse_client_timestamp
from ..common.validators import require_non_empty, require_positive_int
from ..core.constants import MAX_ACTION_ID_LENGTH
from ..core.enums import SyncActionType
from ..core.exceptions import ValidationError
from ..geofence.model import Coordinates
from .model import SyncAction


def validate_batch(actions: Any, *, max_size: int) -> list:
    if not isinstance(actions, list) or not actions:
        raise ValidationError("actions must be a non-empty list")
    if len(actions) > max_size:
        raise ValidationError(f"Batch too large: {len(actions)} actions, at most {max_size} allowed")
    return actions


def parse_action(raw: Any, *, now: datetime, max_clock_skew: timedelta) -> SyncAction:
    if not isinstance(raw, dict):
        raise ValidationError("Action must be an object")

    action_id = require_non_empty(raw.get("id"), "id")
    if len(action_id) > MAX_ACTION_ID_LENGTH:
        raise ValidationError(f"id must be at most {MAX_ACTION_ID_LENGTH} characters")

    try:
        action_type = SyncActionType(raw.get("action_type"))
    except ValueError:
        raise ValidationError(f"Unsupported action_type: {raw.get('action_type')!r}")

    payload = raw.get("payload")
    if not isinstance(payload, dict):
        raise ValidationError("payload must be an object")

    project_id = None
    if action_type == SyncActionType.CHECK_IN:
        project_id = require_positive_int(raw.get("project_id", payload.get("project_id")), "project_id")

    timestamp = None
    if raw.get("timestamp") is not None:
        if not isinstance(raw["timestamp"], str):
            raise ValidationError("timestamp must be an ISO-8601 string")
        timestamp = parse_client_timestamp(raw["timestamp"])
        if timestamp > now + max_clock_skew:
            raise ValidationError("timestamp is in the future")

    point = None
    if action_type in (SyncActionType.CHECK_IN, SyncActionType.TRACK):
        point = Coordinates.parse(payload.get("latitude"), payload.get("longitude"))

    return SyncAction(
        action_id=action_id,
        action_type=action_type,
        payload=payload,
        project_id=project_id,
        timestamp=timestamp,
        point=point,
    )
