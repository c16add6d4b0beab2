"""
Opening-hours calendar shared by parks and rides.

Days are keyed by an integer day number (days since the Unix epoch in the
civil calendar of the instant's own UTC offset), so "2024-07-04" maps to the
same key whether it arrives as a date, a naive string or an offset-aware
timestamp from a park on the other side of the world.

Each day holds at most one primary record (Operating, Closed or
Refurbishment) plus any number of "special hours" records such as
"Extra Magic Hours".
"""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

import pytz

logger = logging.getLogger(__name__)

OPERATING = "Operating"
CLOSED = "Closed"
REFURBISHMENT = "Refurbishment"
PRIMARY_TYPES = frozenset({OPERATING, CLOSED, REFURBISHMENT})

DEFAULT_DATE_FORMAT = "%Y-%m-%d"
CLOCK_FORMATS = ("%H:%M:%S", "%H:%M")


@dataclass(frozen=True)
class SpecialCalendarEntry:
    opening_time: str
    closing_time: str
    type: str

    def to_dict(self) -> dict:
        return {"openingTime": self.opening_time, "closingTime": self.closing_time, "type": self.type}

    @classmethod
    def from_dict(cls, data: dict) -> "SpecialCalendarEntry":
        return cls(opening_time=data["openingTime"], closing_time=data["closingTime"], type=data["type"])


@dataclass(frozen=True)
class CalendarDay:
    date: str
    opening_time: str
    closing_time: str
    type: str = OPERATING
    special: tuple = field(default=())

    def to_dict(self) -> dict:
        data = {
            "date": self.date,
            "openingTime": self.opening_time,
            "closingTime": self.closing_time,
            "type": self.type,
        }
        if self.special:
            data["special"] = [entry.to_dict() for entry in self.special]
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "CalendarDay":
        return cls(
            date=data["date"],
            opening_time=data["openingTime"],
            closing_time=data["closingTime"],
            type=data.get("type", OPERATING),
        )


def get_timezone(timezone) -> tzinfo:
    """Resolve a zone name (or pass through a pytz zone). Raises ValueError on unknown names."""
    if isinstance(timezone, tzinfo):
        return timezone
    try:
        return pytz.timezone(timezone)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"Invalid timezone {timezone}")


def _localize(naive: datetime, tz: tzinfo) -> datetime:
    # pytz zones need localize() to pick the right DST offset
    if hasattr(tz, "localize"):
        return tz.localize(naive)
    return naive.replace(tzinfo=tz)


def parse_datetime(value, tz: tzinfo, name: str = "value") -> Optional[datetime]:
    """
    Coerce a datetime, date or string into an aware datetime.

    Naive inputs are read as wall-clock time in `tz`. Strings may be ISO-8601
    date-times, plain YYYY-MM-DD dates, or bare HH:MM[:SS] clock times (taken
    as today in `tz`). Returns None if the value can't be understood.
    """
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else _localize(value, tz)
    if isinstance(value, date):
        return _localize(datetime.combine(value, time.min), tz)
    if isinstance(value, str) and value.strip():
        text = value.strip()
        for fmt in CLOCK_FORMATS:
            try:
                clock = datetime.strptime(text, fmt).time()
            except ValueError:
                continue
            return _localize(datetime.combine(datetime.now(tz).date(), clock), tz)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            logger.debug(f"Invalid {name}: {value!r}")
            return None
        return parse_datetime(parsed, tz, name)
    logger.debug(f"Invalid {name}: {value!r}")
    return None


def date_to_day(value: datetime) -> int:
    """Days since the Unix epoch, counted in the instant's own local calendar."""
    offset = value.utcoffset() or timedelta(0)
    return math.floor((value.timestamp() / 60 + offset.total_seconds() / 60) / 1440)


def _anchor(value: datetime, day: date) -> datetime:
    """Move `value` onto the civil date `day`, keeping its clock time and zone."""
    return _localize(datetime.combine(day, value.time()), value.tzinfo)


class Calendar:
    def __init__(self, timezone="UTC", date_format: str = None, time_format: str = None):
        self.timezone = get_timezone(timezone)
        self.date_format = date_format or DEFAULT_DATE_FORMAT
        # None means ISO-8601 with offset
        self.time_format = time_format
        self.days: dict[int, CalendarDay] = {}
        self.special: dict[int, list[SpecialCalendarEntry]] = {}
        # empty data isn't worth caching
        self.is_dirty = False

    def mark_clean(self):
        self.is_dirty = False

    def now(self) -> datetime:
        return datetime.now(self.timezone)

    def today(self) -> date:
        return self.now().date()

    def _format_time(self, value: datetime) -> str:
        if self.time_format:
            return value.strftime(self.time_format)
        return value.isoformat(timespec="seconds")

    # ── Writes ─────────────────────────────────────────────────────────────────

    def set_date(
        self,
        date=None,
        opening_time=None,
        closing_time=None,
        type: str = OPERATING,
        special: bool = False,
    ) -> bool:
        """
        Store opening hours for one day.

        Args:
            date: day to set; defaults to opening_time
            opening_time, closing_time: may be omitted when type is "Closed"
            type: "Operating", "Closed" or "Refurbishment" for primary hours,
                any other label for special hours
            special: add to the special-hours overlay instead of primary hours

        Returns:
            True if stored data actually changed
        """
        if date is None:
            date = opening_time
        day_start = parse_datetime(date, self.timezone, "date")
        if day_start is None:
            return False

        if type == CLOSED:
            if opening_time is None:
                opening_time = day_start.replace(hour=0, minute=0, second=0, microsecond=0)
            if closing_time is None:
                closing_time = day_start.replace(hour=23, minute=59, second=59, microsecond=0)

        opening = parse_datetime(opening_time, self.timezone, "opening_time")
        closing = parse_datetime(closing_time, self.timezone, "closing_time")
        if opening is None or closing is None:
            return False

        civil_date = day_start.date()
        day = date_to_day(day_start)
        opening = _anchor(opening, civil_date)
        closing = _anchor(closing, civil_date)
        if closing < opening:
            # open past midnight
            closing = _anchor(closing, civil_date + timedelta(days=1))

        if special:
            return self._set_special(day, opening, closing, type)

        if type not in PRIMARY_TYPES:
            logger.debug(f"Invalid schedule type {type!r} for primary hours")
            return False

        record = CalendarDay(
            date=civil_date.strftime(self.date_format),
            opening_time=self._format_time(opening),
            closing_time=self._format_time(closing),
            type=type,
        )
        if self.days.get(day) == record:
            return False

        self.days[day] = record
        self.is_dirty = True
        return True

    def _set_special(self, day: int, opening: datetime, closing: datetime, type: str) -> bool:
        if type in (OPERATING, CLOSED):
            logger.debug(f"Invalid schedule type {type!r} for special hours")
            return False

        entry = SpecialCalendarEntry(
            opening_time=self._format_time(opening),
            closing_time=self._format_time(closing),
            type=type,
        )
        entries = self.special.setdefault(day, [])
        if entry in entries:
            return False

        entries.append(entry)
        self.is_dirty = True
        return True

    def set_range(
        self,
        start_date,
        end_date,
        opening_time,
        closing_time,
        type: str = OPERATING,
        special: bool = False,
    ) -> bool:
        """Apply the same hours to every day from start_date to end_date inclusive."""
        start = parse_datetime(start_date, self.timezone, "start_date")
        end = parse_datetime(end_date, self.timezone, "end_date")
        opening = parse_datetime(opening_time, self.timezone, "opening_time")
        closing = parse_datetime(closing_time, self.timezone, "closing_time")
        if start is None or end is None or opening is None or closing is None:
            return False

        all_set = True
        for day in _civil_days(start.date(), end.date()):
            # keep going after a failure so as much data as possible lands
            changed = self.set_date(
                date=day,
                opening_time=opening,
                closing_time=closing,
                type=type,
                special=special,
            )
            all_set = all_set and changed
        return all_set

    # ── Reads ──────────────────────────────────────────────────────────────────

    def get_date(self, date) -> Optional[CalendarDay]:
        parsed = parse_datetime(date, self.timezone, "date")
        if parsed is None:
            return None
        day = date_to_day(parsed)
        record = self.days.get(day)
        if record is None:
            return None
        return replace(record, special=tuple(self.special.get(day, ())))

    def get_date_range(self, start_date, end_date) -> list[CalendarDay]:
        start = parse_datetime(start_date, self.timezone, "start_date")
        end = parse_datetime(end_date, self.timezone, "end_date")
        if start is None or end is None:
            return []
        result = []
        for day in _civil_days(start.date(), end.date()):
            record = self.get_date(day)
            if record is not None:
                result.append(record)
        return result

    # ── Serialization ──────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {
            "dates": {str(day): record.to_dict() for day, record in sorted(self.days.items())},
            "datesSpecial": {
                str(day): [entry.to_dict() for entry in entries]
                for day, entries in sorted(self.special.items())
            },
        }

    def from_dict(self, data: dict):
        """Replace all stored hours with a snapshot from to_dict()."""
        self.days = {int(day): CalendarDay.from_dict(record) for day, record in data.get("dates", {}).items()}
        self.special = {
            int(day): [SpecialCalendarEntry.from_dict(entry) for entry in entries]
            for day, entries in data.get("datesSpecial", {}).items()
        }


def _civil_days(start: date, end: date):
    for offset in range((end - start).days + 1):
        yield start + timedelta(days=offset)
