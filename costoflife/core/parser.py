"""
Tokenizer for free-text expense descriptions.

An expense is written as whitespace separated tokens in any order, e.g.
"Rent 1729€ 1m12x 010118 #rent". Each token is classified as an amount,
a tag, a lifetime, a start date or, failing all of these, part of the name.
"""

import datetime
import re
import unicodedata
from dataclasses import dataclass, field
from typing import List, Optional

from .dates import today
from .errors import InvalidDateFormat
from .lifetime import Lifetime

# Token classifiers, checked in this order, first match wins
RE_CURRENCY = re.compile(r"(?P<amount>[0-9]+(?:\.[0-9]{2})?)(?P<symbol>\S)")
RE_HASHTAG = re.compile(r"[#.](?P<tag>[a-zA-Z][0-9a-zA-Z_-]*)")
RE_LIFETIME = re.compile(r"[1-9][0-9]*[dwmy](?:[1-9][0-9]*x)?")
RE_DATE = re.compile(r"[0-3][0-9][0-1][0-9][1-9][0-9]")

START_DATE_FORMAT = "%d%m%y"

# Amount used when the text has no amount token, rejected at construction
MISSING_AMOUNT = "0"


@dataclass
class ExpenseFields:
    """Fields collected from an expense text, not yet validated."""
    name: str = ""
    tags: List[str] = field(default_factory=list)
    amount: str = MISSING_AMOUNT
    lifetime: Lifetime = field(default_factory=Lifetime.single_day)
    starts_on: datetime.date = field(default_factory=today)


def extract_amount(token: str) -> Optional[str]:
    """Return the numeric part of a currency token like `9.99€`."""
    match = RE_CURRENCY.fullmatch(token)
    if match is None or unicodedata.category(match.group("symbol")) != "Sc":
        return None
    return match.group("amount")


def extract_hashtag(token: str) -> Optional[str]:
    """Return the label of a tag token like `#rent` or `.rent`."""
    match = RE_HASHTAG.fullmatch(token)
    return match.group("tag") if match else None


def extract_date(token: str) -> Optional[datetime.date]:
    """Return the start date of a ddmmyy token.

    Raises:
        InvalidDateFormat: If the token looks like a date but is not a real one
    """
    if RE_DATE.fullmatch(token) is None:
        return None
    try:
        return datetime.datetime.strptime(token, START_DATE_FORMAT).date()
    except ValueError as e:
        raise InvalidDateFormat(f"invalid date {token!r}: {e}") from e


def is_label(text: str) -> bool:
    """True if `#text` is read back as a tag with this exact label."""
    return extract_hashtag(f"#{text}") == text


def is_field_token(token: str) -> bool:
    """True if the token would be read as an amount, tag, lifetime or date."""
    if extract_amount(token) is not None or extract_hashtag(token) is not None:
        return True
    return RE_LIFETIME.fullmatch(token) is not None or RE_DATE.fullmatch(token) is not None


def extract_fields(text: str) -> ExpenseFields:
    """Split an expense text into its fields.

    The last amount, lifetime and date tokens win; tags accumulate; every
    other token joins the name in order. Missing tokens fall back to
    defaults: amount "0", a single day lifetime, today as start date.

    Args:
        text: Expense description

    Returns:
        Collected fields

    Raises:
        InvalidDateFormat: If a date token is not a valid date
        InvalidLifetimeFormat: If a lifetime token is invalid
    """
    fields = ExpenseFields()
    name = []
    for token in text.split():
        amount = extract_amount(token)
        if amount is not None:
            fields.amount = amount
            continue
        tag = extract_hashtag(token)
        if tag is not None:
            fields.tags.append(tag)
            continue
        if RE_LIFETIME.fullmatch(token):
            fields.lifetime = Lifetime.parse(token)
            continue
        starts_on = extract_date(token)
        if starts_on is not None:
            fields.starts_on = starts_on
            continue
        name.append(token)
    fields.name = " ".join(name)
    return fields
