"""Period value type: a calendar month + year.

All reaction counters are partitioned by Period. The canonical textual form is
"YYYY-MM" (e.g. "2024-02" is February 2024); it is both the storage key and the
only accepted external format.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import re

from app.errors import InvalidError

_PERIOD_RE = re.compile(r"^([0-9]{4})-([0-9]{2})$")


@dataclass(frozen=True, order=True)
class Period:
    """Calendar month partition key. Ordered by calendar time."""

    year: int
    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise InvalidError(f"Invalid month: {self.month}", detail={"month": self.month})
        if not 1 <= self.year <= 9999:
            raise InvalidError(f"Invalid year: {self.year}", detail={"year": self.year})

    @classmethod
    def from_datetime(cls, dt: datetime) -> Period:
        """Period containing `dt`, evaluated in UTC (naive values are taken as UTC)."""
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc)
        return cls(year=dt.year, month=dt.month)

    @classmethod
    def parse(cls, raw: str) -> Period:
        """Parse the canonical "YYYY-MM" form.

        Raises:
            InvalidError: if `raw` is empty or not a valid "YYYY-MM" value.
        """
        value = (raw or "").strip()
        m = _PERIOD_RE.match(value)
        if not m:
            raise InvalidError(
                f"Invalid period {raw!r}: expected YYYY-MM",
                detail={"period": raw},
            )
        return cls(year=int(m.group(1)), month=int(m.group(2)))

    @property
    def key(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"

    def previous(self) -> Period:
        if self.month == 1:
            return Period(year=self.year - 1, month=12)
        return Period(year=self.year, month=self.month - 1)

    def __str__(self) -> str:
        return self.key
