from decimal import Decimal

from src.site_attendance.site_attendance.payroll.calculator.standard_calculator import StandardPayrollCalculator


def test_hours_round_half_up_to_cents():
    calc = StandardPayrollCalculator()
    assert calc.worked_hours(0) == Decimal("0.00")
    assert calc.worked_hours(90) == Decimal("1.50")
    # 20 / 60 = 0.3333..
    assert calc.worked_hours(20) == Decimal("0.33")
    assert calc.worked_hours(7) == Decimal("0.12")


def test_negative_minutes_count_as_zero():
    assert StandardPayrollCalculator().worked_hours(-15) == Decimal("0.00")


def test_total_is_minutes_times_rate_per_hour():
    calc = StandardPayrollCalculator()
    assert calc.total(510, Decimal("150.00")) == Decimal("1275.00")
    # 20 min at 99.99/h is 33.33; rounding the hours first would give 33.00
    assert calc.total(20, Decimal("99.99")) == Decimal("33.33")


def test_total_rounds_only_the_amount():
    calc = StandardPayrollCalculator()
    # 125 min is 2.0833 h; 2.08 h would pay 312.00
    assert calc.worked_hours(125) == Decimal("2.08")
    assert calc.total(125, Decimal("150.00")) == Decimal("312.50")
    assert calc.total(Decimal("1.98"), Decimal("150.00")) == Decimal("4.95")
    assert calc.total(-5, Decimal("150.00")) == Decimal("0.00")
