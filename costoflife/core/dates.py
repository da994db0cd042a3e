"""
Date helpers shared by the parser, the records and the CLI.
"""

import datetime
from typing import Optional

# Formats accepted for user supplied dates, tried in order
DATE_FORMATS = ("%d%m%y", "%d.%m.%y", "%d/%m/%y", "%d/%m/%Y", "%d.%m.%Y")


def today() -> datetime.date:
    """Current local date."""
    return datetime.date.today()


def now_local() -> datetime.datetime:
    """Current time, aware of the local timezone."""
    return datetime.datetime.now().astimezone()


def parse_date(text: str) -> Optional[datetime.date]:
    """Parse a date trying every known format.

    Recognized formats are ddmmyy, dd.mm.yy, dd/mm/yy, dd/mm/yyyy
    and dd.mm.yyyy.

    Args:
        text: Date as typed by the user

    Returns:
        The parsed date, or None if no format matches
    """
    for fmt in DATE_FORMATS:
        try:
            return datetime.datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    return None
