"""
Result rows produced by ledger queries.

Rows are plain named tuples so they compare equal to ordinary tuples.
"""

import datetime
from decimal import Decimal
from typing import NamedTuple


class SummaryRow(NamedTuple):
    """An active expense: name, total amount, per diem and progress."""
    name: str
    total_amount: Decimal
    per_diem: Decimal
    progress: float


class TagRow(NamedTuple):
    """Aggregation for one tag: how many active expenses and their per diem."""
    tag: str
    count: int
    per_diem: Decimal


class SearchRow(NamedTuple):
    """A search match with its dates and comma separated tags."""
    name: str
    total_amount: Decimal
    per_diem: Decimal
    starts_on: datetime.date
    ends_on: datetime.date
    progress: float
    tags: str
