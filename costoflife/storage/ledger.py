"""
Content addressed ledger of expense records.

Records are keyed by a hash of their identity fields (name, amount,
lifetime and start date), so inserting the same expense twice keeps a
single copy. The ledger is persisted as one line per record.
"""

import datetime
import hashlib
import os
import shutil
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

import structlog
from rapidfuzz import fuzz

from costoflife.core.dates import today
from costoflife.core.errors import CostOfLifeError
from costoflife.core.record import ExpenseRecord, cost_of_life
from .models import SearchRow, SummaryRow, TagRow

log = structlog.get_logger(__name__)

DEFAULT_SEARCH_THRESHOLD = 70


class Ledger:
    """In-memory store of expense records with file persistence.

    The ledger is meant for a single process: concurrent changes to the
    backing file between `load` and `save` are overwritten.
    """

    def __init__(self):
        self._records: Dict[str, ExpenseRecord] = {}

    @staticmethod
    def key(record: ExpenseRecord) -> str:
        """Content hash of the record identity fields.

        Tags and recording time are not part of the identity.
        """
        fields = f"{record.name}:{record.amount_display}:{record.lifetime}:{record.starts_on.isoformat()}"
        return hashlib.blake2b(fields.encode("utf-8"), digest_size=32).hexdigest()

    def insert(self, record: ExpenseRecord) -> Optional[ExpenseRecord]:
        """Insert a record, replacing any record with the same identity.

        Args:
            record: Record to store

        Returns:
            The replaced record, or None if the identity was new
        """
        key = self.key(record)
        previous = self._records.get(key)
        self._records[key] = record
        if previous is not None:
            log.debug("ledger.replaced", key=key, name=record.name)
        return previous

    def load(self, path: Union[str, Path]) -> None:
        """Load the records found in a ledger file.

        Lines that are not valid UTF-8 or cannot be parsed are skipped;
        errors opening or reading the file propagate.

        Args:
            path: Ledger file path

        Raises:
            OSError: If the file cannot be read
        """
        loaded = skipped = 0
        with open(path, "rb") as f:
            for line_no, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    record = ExpenseRecord.from_line(raw.decode("utf-8"))
                except (CostOfLifeError, UnicodeDecodeError) as e:
                    skipped += 1
                    log.warning("ledger.line_skipped", path=str(path), line_no=line_no, error=str(e))
                    continue
                self.insert(record)
                loaded += 1
        log.debug("ledger.loaded", path=str(path), loaded=loaded, skipped=skipped)

    def save(self, path: Union[str, Path]) -> None:
        """Write every record to the ledger file, replacing its content.

        Records are written to a temporary file next to the target, which
        then replaces it. Line order is not significant.

        Args:
            path: Ledger file path

        Raises:
            OSError: If the file cannot be written
        """
        target = Path(path)
        fd, tmp_path = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                for record in self._records.values():
                    f.write(record.to_line())
                f.flush()
            if target.exists():
                shutil.copymode(target, tmp_path)
            os.replace(tmp_path, target)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        log.info("ledger.saved", path=str(target), count=len(self._records))

    def records(self) -> List[ExpenseRecord]:
        return list(self._records.values())

    def active_on(self, on: datetime.date) -> Iterator[ExpenseRecord]:
        """Records whose lifetime covers a date."""
        return (record for record in self._records.values() if record.is_active_on(on))

    def size(self, on: Optional[datetime.date] = None) -> int:
        """Number of records, or of the records active on a date if given."""
        if on is None:
            return len(self._records)
        return sum(1 for _ in self.active_on(on))

    def cost_of_life(self, on: datetime.date) -> Decimal:
        """Total per diem of the records active on a date, rounded to 2 decimals."""
        return cost_of_life(self._records.values(), on)

    def summary(self, on: datetime.date) -> List[SummaryRow]:
        """Active records as (name, total amount, per diem, progress).

        Rows are sorted by progress, most advanced first.
        """
        rows = [
            SummaryRow(
                name=record.name,
                total_amount=record.amount_total(),
                per_diem=record.per_diem(),
                progress=record.progress(on),
            )
            for record in self.active_on(on)
        ]
        rows.sort(key=lambda row: row.progress, reverse=True)
        return rows

    def tags(self, on: datetime.date) -> List[TagRow]:
        """Per tag count and per diem of the active records.

        Rows are sorted by per diem, highest first.
        """
        counts: Dict[str, int] = {}
        totals: Dict[str, Decimal] = {}
        for record in self.active_on(on):
            per_diem = record.per_diem()
            for label in record.tag_labels():
                counts[label] = counts.get(label, 0) + 1
                totals[label] = totals.get(label, Decimal(0)) + per_diem

        rows = [TagRow(tag=label, count=counts[label], per_diem=totals[label]) for label in counts]
        rows.sort(key=lambda row: row.per_diem, reverse=True)
        return rows

    def search(
        self,
        pattern: str,
        on: Optional[datetime.date] = None,
        threshold: int = DEFAULT_SEARCH_THRESHOLD,
    ) -> List[SearchRow]:
        """Find records by name or tag.

        Names and tag labels are fuzzy matched against the pattern, case
        insensitive; a record carrying the pattern as a tag always matches.

        Args:
            pattern: Text to look for
            on: Date used for the progress column, defaults to today
            threshold: Minimum match score, 0 to 100

        Returns:
            Matching records, best match first
        """
        pattern = pattern.strip()
        if not pattern:
            return []
        if on is None:
            on = today()

        scored = []
        for record in self._records.values():
            haystack = " ".join([record.name, *record.tag_labels()])
            score = fuzz.partial_ratio(pattern.lower(), haystack.lower())
            if record.has_tag(pattern):
                score = 100.0
            if score >= threshold:
                scored.append((score, record))
        scored.sort(key=lambda item: item[0], reverse=True)

        return [
            SearchRow(
                name=record.name,
                total_amount=record.amount_total(),
                per_diem=record.per_diem(),
                starts_on=record.starts_on,
                ends_on=record.ends_on(),
                progress=record.progress(on),
                tags=", ".join(record.tag_labels()),
            )
            for _, record in scored
        ]

    def __len__(self):
        return len(self._records)

    def __iter__(self):
        return iter(self._records.values())
