from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal


class PayrollCalculator(ABC):
    """Calculator interface (Strategy Pattern for payroll).

    Both methods take the raw worked minutes so that the total is never
    built from an already rounded hour figure.
    """

    @abstractmethod
    def worked_hours(self, worked_minutes: Decimal) -> Decimal:
        raise NotImplementedError

    @abstractmethod
    def total(self, worked_minutes: Decimal, hourly_rate: Decimal) -> Decimal:
        raise NotImplementedError
