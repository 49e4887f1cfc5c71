from datetime import datetime, timedelta

import pytest

from src.site_attendance.site_attendance.core.enums import SyncActionType
from src.site_attendance.site_attendance.core.exceptions import ValidationError
from src.site_attendance.site_attendance.sync.validation import parse_action, validate_batch

NOW = datetime(2026, 3, 2, 13, 0)
SKEW = timedelta(minutes=5)


def _parse(raw):
    return parse_action(raw, now=NOW, max_clock_skew=SKEW)


def test_check_in_envelope():
    action = _parse(
        {
            "id": "a-1",
            "action_type": "CHECK_IN",
            "project_id": 10,
            "timestamp": "2026-03-02T08:00:00",
            "payload": {"latitude": 12.97, "longitude": 77.59},
        }
    )

    assert action.action_type == SyncActionType.CHECK_IN
    assert action.project_id == 10
    assert action.timestamp == datetime(2026, 3, 2, 8, 0)
    assert action.point.latitude == 12.97


def test_project_id_may_come_from_payload():
    action = _parse(
        {"id": "a-2", "action_type": "CHECK_IN", "payload": {"project_id": "10", "latitude": 1, "longitude": 2}}
    )
    assert action.project_id == 10


def test_check_out_needs_no_coordinates():
    action = _parse({"id": "a-3", "action_type": "CHECK_OUT", "payload": {}})
    assert action.point is None
    assert action.timestamp is None


def test_timestamp_within_skew_is_accepted():
    action = _parse(
        {"id": "a-4", "action_type": "CHECK_OUT", "payload": {}, "timestamp": "2026-03-02T13:04:00"}
    )
    assert action.timestamp == datetime(2026, 3, 2, 13, 4)


@pytest.mark.parametrize(
    "raw",
    [
        "not-an-object",
        {"action_type": "CHECK_OUT", "payload": {}},
        {"id": "x" * 65, "action_type": "CHECK_OUT", "payload": {}},
        {"id": "a", "action_type": "SUBMIT_DPR", "payload": {}},
        {"id": "a", "action_type": "CHECK_OUT", "payload": []},
        {"id": "a", "action_type": "CHECK_IN", "payload": {"latitude": 1, "longitude": 2}},
        {"id": "a", "action_type": "TRACK", "payload": {"latitude": 1}},
        {"id": "a", "action_type": "TRACK", "payload": {"latitude": "1", "longitude": 2}},
        {"id": "a", "action_type": "CHECK_OUT", "payload": {}, "timestamp": "yesterday"},
        {"id": "a", "action_type": "CHECK_OUT", "payload": {}, "timestamp": "2026-03-02T13:06:00"},
        {"id": "a", "action_type": "CHECK_OUT", "payload": {}, "timestamp": 1700000000},
    ],
)
def test_malformed_actions_raise(raw):
    with pytest.raises(ValidationError):
        _parse(raw)


@pytest.mark.parametrize("actions", [None, [], {"id": "a"}, [{}] * 6])
def test_batch_shape(actions):
    with pytest.raises(ValidationError):
        validate_batch(actions, max_size=5)


def test_batch_at_limit_is_accepted():
    assert len(validate_batch([{}] * 5, max_size=5)) == 5
