from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from .base import PayrollCalculator

CENTS = Decimal("0.01")
MINUTES_PER_HOUR = Decimal(60)


def _minutes(value) -> Decimal:
    return max(Decimal(value or 0), Decimal(0))


class StandardPayrollCalculator(PayrollCalculator):
    """Standard rule: hours = minutes / 60 and total = minutes x rate / 60.

    Only the outputs are rounded (half-up, 2dp); negative time counts as 0.
    """

    def worked_hours(self, worked_minutes: Decimal) -> Decimal:
        return (_minutes(worked_minutes) / MINUTES_PER_HOUR).quantize(CENTS, rounding=ROUND_HALF_UP)

    def total(self, worked_minutes: Decimal, hourly_rate: Decimal) -> Decimal:
        amount = _minutes(worked_minutes) * Decimal(hourly_rate) / MINUTES_PER_HOUR
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)
