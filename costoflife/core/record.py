"""
Expense records and per diem calculations.

An ExpenseRecord is the validated form of an expense. It knows when the
expense starts and ends, how much it costs per day and how to write
itself to (and read itself back from) a ledger line.
"""

import datetime
from dataclasses import dataclass, field, replace
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional, Union

from slugify import slugify

from .dates import now_local, today
from .errors import CostOfLifeError, GenericError, InvalidAmount, InvalidDateFormat
from .lifetime import Lifetime
from .parser import extract_fields, is_field_token, is_label

# Scale used for every amount shown to the user
SCALE = Decimal("0.01")
CURRENCY_SYMBOL = "€"
FIELD_SEPARATOR = "::"


def round_amount(value: Decimal) -> Decimal:
    """Round a decimal to 2 places, half up."""
    return value.quantize(SCALE, rounding=ROUND_HALF_UP)


def parse_amount(value: Union[str, Decimal, int]) -> Optional[Decimal]:
    """Convert a value to a finite Decimal, None if it is not a number."""
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    return amount if amount.is_finite() else None


@dataclass(frozen=True, eq=False)
class ExpenseRecord:
    """A single expense, immutable once built.

    `amount` is the cost of one period of the lifetime; the total cost is
    the amount times the lifetime repetitions. `src` holds the text the
    record was parsed from, if any.
    """
    name: str
    tags: Dict[str, str]
    amount: Decimal
    starts_on: datetime.date
    lifetime: Lifetime
    recorded_at: datetime.datetime
    src: Optional[str] = field(default=None)

    def __post_init__(self):
        """Validate the amount is a positive number."""
        if not isinstance(self.amount, Decimal) or not self.amount.is_finite():
            raise InvalidAmount(f"invalid amount: {self.amount!r}")
        if round_amount(self.amount) <= 0:
            raise InvalidAmount(f"amount should be a positive number: {self.amount}")

    @classmethod
    def build(
        cls,
        name: str,
        tags: Iterable[str],
        amount: Union[str, Decimal, int],
        starts_on: datetime.date,
        lifetime: Lifetime,
        recorded_at: Optional[datetime.datetime] = None,
        src: Optional[str] = None,
    ) -> "ExpenseRecord":
        """Build a record from its fields.

        Every field must survive a trip through the expense text, so that a
        record without `src` reads back equal from its ledger line.

        Args:
            name: Name of the expense, runs of whitespace become one space
            tags: Tag labels, keyed by their slug (later duplicates win)
            amount: Amount for one period of the lifetime, at most 2 decimals
            starts_on: First day of the expense
            lifetime: Duration and repetitions
            recorded_at: When the expense was recorded, defaults to now
            src: Text of the expense, if it was parsed

        Returns:
            Validated ExpenseRecord

        Raises:
            InvalidAmount: If the amount is not a positive number with at
                most 2 decimals
            GenericError: If a name word reads as a field token or a tag
                label is not a valid hashtag
        """
        parsed = parse_amount(amount)
        if parsed is None:
            raise InvalidAmount(f"invalid amount: {amount!r}")
        if parsed != round_amount(parsed):
            raise InvalidAmount(f"amount has more than 2 decimals: {amount}")
        words = name.split()
        for word in words:
            if is_field_token(word):
                raise GenericError(f"name word {word!r} reads as an amount, tag, lifetime or date")
        tags = list(tags)
        for label in tags:
            if not is_label(label):
                raise GenericError(f"invalid tag label: {label!r}")
        if recorded_at is None:
            recorded_at = now_local()
        elif recorded_at.tzinfo is None:
            recorded_at = recorded_at.astimezone()
        return cls(
            name=" ".join(words),
            tags={slugify(label): label for label in tags},
            amount=parsed,
            starts_on=starts_on,
            lifetime=lifetime,
            recorded_at=recorded_at,
            src=src,
        )

    @classmethod
    def new(cls, name: str, amount: Union[str, Decimal, int]) -> "ExpenseRecord":
        """Single day expense starting today."""
        return cls.build(name, [], amount, today(), Lifetime.single_day())

    @classmethod
    def from_str(cls, text: str) -> "ExpenseRecord":
        """Parse an expense text like "Rent 1729€ 1m12x 010118 #rent".

        Raises:
            InvalidAmount: If the amount is missing or not positive
            InvalidDateFormat: If the start date is not a valid date
            InvalidLifetimeFormat: If the lifetime is malformed
        """
        fields = extract_fields(text)
        return cls.build(
            fields.name,
            fields.tags,
            fields.amount,
            fields.starts_on,
            fields.lifetime,
            src=text,
        )

    @classmethod
    def from_line(cls, line: str) -> "ExpenseRecord":
        """Read a record back from a ledger line.

        The line is `<recorded_at>::<starts_on>::<expense text>`. The text is
        parsed again, then the stored start date and recording time replace
        the parsed ones.

        Raises:
            GenericError: If the line does not have three fields
            InvalidDateFormat: If a stored date or timestamp is malformed
            CostOfLifeError: Any error raised parsing the expense text
        """
        parts = line.strip().split(FIELD_SEPARATOR, 2)
        if len(parts) != 3:
            raise GenericError(f"malformed ledger line: {line.strip()!r}")
        recorded_at_str, starts_on_str, source = parts

        record = cls.from_str(source)
        try:
            starts_on = datetime.date.fromisoformat(starts_on_str)
        except ValueError as e:
            raise InvalidDateFormat(f"invalid start date {starts_on_str!r}: {e}") from e
        try:
            recorded_at = datetime.datetime.fromisoformat(recorded_at_str)
        except ValueError as e:
            raise InvalidDateFormat(f"invalid timestamp {recorded_at_str!r}: {e}") from e
        if recorded_at.tzinfo is None:
            raise InvalidDateFormat(f"timestamp without timezone: {recorded_at_str!r}")
        return replace(record, starts_on=starts_on, recorded_at=recorded_at)

    @property
    def amount_display(self) -> Decimal:
        """Amount rounded to 2 decimals."""
        return round_amount(self.amount)

    def tag_labels(self) -> List[str]:
        """Tag labels sorted alphabetically."""
        return sorted(self.tags.values())

    def has_tag(self, label: str) -> bool:
        return slugify(label) in self.tags

    def amount_is_total(self) -> bool:
        """True when the lifetime repeats, so the total differs from the amount."""
        return self.lifetime.repeats() > 1

    def amount_total(self) -> Decimal:
        return self.amount * self.lifetime.repeats()

    def duration_days(self) -> int:
        return self.lifetime.days_since(self.starts_on)

    def ends_on(self) -> datetime.date:
        """Last day the expense is active on (inclusive)."""
        return self.starts_on + datetime.timedelta(days=self.duration_days() - 1)

    def per_diem_raw(self) -> Decimal:
        """Total amount spread over the duration, unrounded."""
        return self.amount_total() / Decimal(self.duration_days())

    def per_diem(self) -> Decimal:
        return round_amount(self.per_diem_raw())

    def is_active_on(self, on: datetime.date) -> bool:
        return self.starts_on <= on <= self.ends_on()

    def progress(self, on: Optional[datetime.date] = None) -> float:
        """Fraction of the expense lifetime elapsed on a date, in [0, 1].

        Args:
            on: Reference date, defaults to today
        """
        if on is None:
            on = today()
        start, end = self.starts_on, self.ends_on()
        if on <= start:
            return 0.0
        if on >= end:
            return 1.0
        return (on - start).days / (end - start).days

    def recorded_at_rfc3339(self) -> str:
        return self.recorded_at.isoformat()

    def to_line(self) -> str:
        """Serialize the record to a ledger line, newline included.

        The source text is written back as is; records built from fields
        get a synthesized text instead.
        """
        if self.src is not None:
            text = self.src
        else:
            tags = " ".join(f"#{label}" for label in self.tag_labels())
            text = f"{self.name} {self.amount_display}{CURRENCY_SYMBOL} {self.lifetime} {tags}"
        return FIELD_SEPARATOR.join(
            [self.recorded_at_rfc3339(), self.starts_on.isoformat(), text]
        ) + "\n"

    def __eq__(self, other):
        if not isinstance(other, ExpenseRecord):
            return NotImplemented
        return (
            self.name == other.name
            and self.tags == other.tags
            and self.amount == other.amount
            and self.starts_on == other.starts_on
            and self.lifetime == other.lifetime
        )

    def __str__(self):
        return self.name


def parse(text: str) -> ExpenseRecord:
    """Parse an expense text into a record."""
    return ExpenseRecord.from_str(text)


def cost_of_life(records: Iterable[ExpenseRecord], on: datetime.date) -> Decimal:
    """Total daily cost of the records active on a date.

    Raw per diems are summed and the total is rounded once.
    """
    total = sum(
        (record.per_diem_raw() for record in records if record.is_active_on(on)),
        Decimal(0),
    )
    return round_amount(total)


def per_diem_of(text: str) -> float:
    """Rounded per diem of an expense text, -1.0 if it cannot be parsed."""
    try:
        return float(parse(text).per_diem())
    except CostOfLifeError:
        return -1.0
