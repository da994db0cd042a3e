"""
Lifetime of an expense.

A lifetime says how long an expense lasts: a single day, or a number of
days, weeks, months or years repeated a number of times. The exact length
in days depends on the start date, since months and years vary in size.
"""

import datetime
import re
from dataclasses import dataclass
from enum import Enum

from dateutil.relativedelta import relativedelta

from .errors import InvalidLifetimeFormat


class LifetimeUnit(Enum):
    """Period kinds a lifetime can be expressed in."""
    SINGLE_DAY = "single_day"
    DAY = "d"
    WEEK = "w"
    MONTH = "m"
    YEAR = "y"


# Average sizes used to compare lifetimes of different units
DAYS_IN_YEAR_APPROX = 365.25
DAYS_IN_MONTH_APPROX = 30.44
DAYS_IN_WEEK = 7.0

_UNITS_BY_SYMBOL = {
    "d": LifetimeUnit.DAY,
    "w": LifetimeUnit.WEEK,
    "m": LifetimeUnit.MONTH,
    "y": LifetimeUnit.YEAR,
}

_LIFETIME_RE = re.compile(
    r"(?P<amount>[0-9]+)?(?P<unit>[a-zA-Z])(?:(?P<times>[0-9]+)x)?"
)


@dataclass(frozen=True, eq=False)
class Lifetime:
    """Recurrence of an expense: `amount` units repeated `times` times.

    Two lifetimes are equal when their approximate length in days is the
    same, so `Lifetime.year(20)` equals `Lifetime.year(1, 20)`.
    """
    unit: LifetimeUnit
    amount: int = 1
    times: int = 1

    def __post_init__(self):
        """Validate amount and repetitions."""
        if self.amount < 1:
            raise InvalidLifetimeFormat(f"lifetime amount must be >= 1, got {self.amount}")
        if self.times < 1:
            raise InvalidLifetimeFormat(f"lifetime repetitions must be >= 1, got {self.times}")
        if self.unit == LifetimeUnit.SINGLE_DAY and (self.amount, self.times) != (1, 1):
            raise InvalidLifetimeFormat("a single day lifetime cannot have amount or repetitions")

    @classmethod
    def single_day(cls) -> "Lifetime":
        return cls(LifetimeUnit.SINGLE_DAY)

    @classmethod
    def day(cls, amount: int = 1, times: int = 1) -> "Lifetime":
        return cls(LifetimeUnit.DAY, amount, times)

    @classmethod
    def week(cls, amount: int = 1, times: int = 1) -> "Lifetime":
        return cls(LifetimeUnit.WEEK, amount, times)

    @classmethod
    def month(cls, amount: int = 1, times: int = 1) -> "Lifetime":
        return cls(LifetimeUnit.MONTH, amount, times)

    @classmethod
    def year(cls, amount: int = 1, times: int = 1) -> "Lifetime":
        return cls(LifetimeUnit.YEAR, amount, times)

    @classmethod
    def parse(cls, token: str) -> "Lifetime":
        """Parse a lifetime token such as `1m12x`, `3y` or `100d`.

        Missing amount or repetitions default to 1. A token without any
        lifetime marker is a single day expressed as `1d1x`.

        Args:
            token: Lifetime token

        Returns:
            Parsed Lifetime

        Raises:
            InvalidLifetimeFormat: If the unit is unknown or the numbers are invalid
        """
        token = token.strip()
        match = _LIFETIME_RE.fullmatch(token)
        if match is None:
            if not any(c.isdigit() for c in token):
                return cls.day()
            raise InvalidLifetimeFormat(f"invalid lifetime: {token!r}")

        unit = _UNITS_BY_SYMBOL.get(match.group("unit"))
        if unit is None:
            raise InvalidLifetimeFormat(
                f"invalid lifetime unit {match.group('unit')!r} in {token!r}, "
                f"expected one of: {sorted(_UNITS_BY_SYMBOL)}"
            )
        amount = int(match.group("amount") or 1)
        times = int(match.group("times") or 1)
        return cls(unit, amount, times)

    def days_since(self, since: datetime.date) -> int:
        """Number of days spanned when the lifetime starts on `since`.

        Months and years are advanced on the calendar, so the result
        accounts for month lengths and leap years. A day of month missing
        in the target month is clamped to the month's last day.
        """
        periods = self.amount * self.times
        if self.unit == LifetimeUnit.MONTH:
            end = since + relativedelta(months=periods)
            return (end - since).days
        elif self.unit == LifetimeUnit.YEAR:
            end = since + relativedelta(years=periods)
            return (end - since).days
        elif self.unit == LifetimeUnit.WEEK:
            return periods * 7
        elif self.unit == LifetimeUnit.DAY:
            return periods
        return 1

    def approx_days(self) -> float:
        """Approximate size in days, with 365.25 day years and 30.44 day months."""
        periods = self.amount * self.times
        if self.unit == LifetimeUnit.YEAR:
            return DAYS_IN_YEAR_APPROX * periods
        elif self.unit == LifetimeUnit.MONTH:
            return DAYS_IN_MONTH_APPROX * periods
        elif self.unit == LifetimeUnit.WEEK:
            return DAYS_IN_WEEK * periods
        elif self.unit == LifetimeUnit.DAY:
            return float(periods)
        return 1.0

    def repeats(self) -> int:
        """Number of repetitions of the period."""
        if self.unit == LifetimeUnit.SINGLE_DAY:
            return 1
        return self.times

    def __eq__(self, other):
        if not isinstance(other, Lifetime):
            return NotImplemented
        return self.approx_days() == other.approx_days()

    def __hash__(self):
        return hash(self.approx_days())

    def __str__(self):
        if self.unit == LifetimeUnit.SINGLE_DAY:
            return "1d1x"
        return f"{self.amount}{self.unit.value}{self.times}x"
