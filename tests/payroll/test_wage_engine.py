from dataclasses import replace
from datetime import timedelta
from decimal import Decimal

import pytest

from src.site_attendance.site_attendance.core.enums import WageComputation, WageStatus
from src.site_attendance.site_attendance.core.exceptions import NotFoundError
from tests.conftest import FAR_AWAY, OTHER_WORKER_ID, PROJECT_ID, SITE, WORKER_ID


def _day_with_closed_session(ledger, now, minutes):
    checked_in = ledger.check_in(WORKER_ID, PROJECT_ID, SITE, now=now)
    ledger.track_location(WORKER_ID, FAR_AWAY, now=now + timedelta(minutes=minutes))
    return checked_in.attendance_id


def test_recompute_is_idempotent(ledger, wage_engine, store, fixed_now):
    attendance_id = _day_with_closed_session(ledger, fixed_now, 125)

    first = wage_engine.recompute(attendance_id, now=fixed_now + timedelta(hours=3))
    second = wage_engine.recompute(attendance_id, now=fixed_now + timedelta(hours=3))

    assert first.computed
    assert first.wage == second.wage
    assert first.wage.worked_hours == Decimal("2.08")
    assert first.wage.total_amount == Decimal("312.50")


def test_recompute_ignores_running_session(ledger, wage_engine, fixed_now):
    attendance_id = _day_with_closed_session(ledger, fixed_now, 60)
    ledger.track_location(WORKER_ID, SITE, now=fixed_now + timedelta(minutes=70))

    outcome = wage_engine.recompute(attendance_id, now=fixed_now + timedelta(hours=5))

    assert outcome.wage.worked_hours == Decimal("1.00")


def test_recompute_preserves_approval_status(ledger, wage_engine, store, fixed_now):
    attendance_id = _day_with_closed_session(ledger, fixed_now, 60)
    store.wages[attendance_id] = replace(store.wages[attendance_id], status=WageStatus.APPROVED)

    outcome = wage_engine.recompute(attendance_id, now=fixed_now + timedelta(hours=2))

    assert outcome.wage.status == WageStatus.APPROVED


def test_rate_change_is_picked_up(ledger, wage_engine, rates, fixed_now):
    attendance_id = _day_with_closed_session(ledger, fixed_now, 60)
    rates.rates[(PROJECT_ID, "MASON", "SKILLED")] = Decimal("200.00")

    outcome = wage_engine.recompute(attendance_id)

    assert outcome.wage.hourly_rate == Decimal("200.00")
    assert outcome.wage.total_amount == Decimal("200.00")


def test_missing_rate_is_a_configuration_gap(ledger, wage_engine, store, fixed_now):
    checked_in = ledger.check_in(OTHER_WORKER_ID, PROJECT_ID, SITE, now=fixed_now)

    outcome = wage_engine.recompute(checked_in.attendance_id)

    assert outcome.computation == WageComputation.RATE_NOT_CONFIGURED
    assert outcome.wage is None
    assert "HELPER/UNSKILLED" in outcome.message
    assert store.wages == {}


def test_recompute_unknown_attendance_raises(wage_engine):
    with pytest.raises(NotFoundError):
        wage_engine.recompute(12345)


def test_estimate(wage_engine, store):
    worker = store.workers[WORKER_ID]
    assert wage_engine.estimate(worker, PROJECT_ID, 45) == Decimal("112.50")
    assert wage_engine.estimate(store.workers[OTHER_WORKER_ID], PROJECT_ID, 45) is None


def test_recompute_day_counts_outcomes(ledger, wage_engine, fixed_now):
    ledger.check_in(WORKER_ID, PROJECT_ID, SITE, now=fixed_now)
    ledger.check_in(OTHER_WORKER_ID, PROJECT_ID, SITE, now=fixed_now)

    summary = wage_engine.recompute_day(fixed_now.date(), now=fixed_now + timedelta(hours=1))

    assert summary.computed == 1
    assert summary.rate_missing == 1
    assert summary.failed == 0
    assert summary.to_dict()["work_date"] == "2026-03-02"


def test_wages_for_worker_summarizes_every_day(ledger, wage_engine, store, fixed_now):
    # fixed_now is a Monday
    days = [
        (0, 60, WageStatus.APPROVED),
        (1, 120, WageStatus.PENDING),
        (7, 60, WageStatus.APPROVED),
        (9, 30, WageStatus.REJECTED),
    ]
    for offset, minutes, status in days:
        start = fixed_now + timedelta(days=offset)
        checked_in = ledger.check_in(WORKER_ID, PROJECT_ID, SITE, now=start)
        ledger.check_out(WORKER_ID, now=start + timedelta(minutes=minutes))
        store.wages[checked_in.attendance_id] = replace(store.wages[checked_in.attendance_id], status=status)

    statement = wage_engine.wages_for_worker(WORKER_ID, limit=3)

    assert [w.work_date.isoformat() for w in statement.wages] == ["2026-03-11", "2026-03-09", "2026-03-03"]
    assert statement.summary.approved_days == 2
    assert statement.summary.total_earnings == Decimal("300.00")
    assert statement.summary.pending_earnings == Decimal("300.00")
    assert statement.summary.rejected_earnings == Decimal("75.00")
    assert [w.to_dict() for w in statement.weekly] == [
        {"week_start": "2026-03-09", "amount": "150.00"},
        {"week_start": "2026-03-02", "amount": "150.00"},
    ]
    assert statement.to_dict()["wages"][0]["total_amount"] == "75.00"


def test_wages_for_worker_without_wages(wage_engine):
    statement = wage_engine.wages_for_worker(OTHER_WORKER_ID)

    assert statement.wages == ()
    assert statement.summary.total_earnings == Decimal("0.00")
    assert statement.weekly == ()
