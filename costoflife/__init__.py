"""
CostOf.Life - the cost of your daily life.

Parse expenses written as free text and compute how much they cost per day.
"""

from .core.errors import (
    CostOfLifeError,
    GenericError,
    InvalidAmount,
    InvalidDateFormat,
    InvalidLifetimeFormat,
)
from .core.lifetime import Lifetime, LifetimeUnit
from .core.record import ExpenseRecord, cost_of_life, parse, per_diem_of
from .storage.ledger import Ledger

__version__ = "0.3.2"

__all__ = [
    "CostOfLifeError",
    "ExpenseRecord",
    "GenericError",
    "InvalidAmount",
    "InvalidDateFormat",
    "InvalidLifetimeFormat",
    "Ledger",
    "Lifetime",
    "LifetimeUnit",
    "cost_of_life",
    "parse",
    "per_diem_of",
]
