from datetime import datetime, timezone
from typing import Optional

from geolocation import GeoLocation
from schedule import CLOSED, OPERATING, Calendar, parse_datetime

DOWN = "Down"

# wait time sentinels set by adapters
WAIT_CLOSED = -1
WAIT_DOWN = -2

FAST_PASS_TIME_FORMAT = "%H:%M"


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value) -> Optional[datetime]:
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class Ride:
    """
    Live state of one attraction.

    last_update only moves when a tracked value actually changes, so repeated
    polls returning the same wait time keep the original timestamp.
    """

    def __init__(
        self,
        ride_id: str,
        name: str,
        type: str = None,
        location: GeoLocation = None,
        detail: dict = None,
        timezone="UTC",
    ):
        if not ride_id:
            raise ValueError("No ride ID supplied to new ride object")
        if not name:
            raise ValueError("No ride name supplied to new ride object")

        self.id = str(ride_id)
        self.name = name
        self.type = type
        self.location = location
        self.detail = detail
        self.schedule = Calendar(timezone)

        self._wait_time: Optional[int] = None
        self.fast_pass = False
        self.last_update: Optional[datetime] = None

        self.fast_pass_return_available = False
        self.fast_pass_start: Optional[str] = None
        self.fast_pass_end: Optional[str] = None
        self.fast_pass_last_update: Optional[datetime] = None

    # ── Wait time ──────────────────────────────────────────────────────────────

    def set_wait_time(self, value: int):
        """Minutes of queue, or -1 when closed and -2 when temporarily down."""
        value = int(value)
        if self._wait_time != value:
            self._wait_time = value
            self.last_update = _now()

    @property
    def wait_time(self) -> int:
        # never negative; use active/status for open state
        if self._wait_time is None or self._wait_time < 0:
            return 0
        return self._wait_time

    @property
    def active(self) -> bool:
        return self._wait_time is not None and self._wait_time >= 0

    @property
    def status(self) -> str:
        # planned closures on the schedule beat whatever the wait time says
        today = self.schedule.get_date(self.schedule.today())
        if today is not None and today.type != OPERATING:
            return today.type
        if self._wait_time == WAIT_DOWN:
            return DOWN
        return OPERATING if self.active else CLOSED

    # ── Fast pass ──────────────────────────────────────────────────────────────

    def set_fast_pass(self, available: bool):
        available = bool(available)
        if self.fast_pass != available:
            self.fast_pass = available
            self.last_update = _now()

    def set_fast_pass_window(self, start, end):
        """Set the current return window. Accepts datetimes or HH:MM strings."""
        start_time = parse_datetime(start, self.schedule.timezone, "fast_pass_start")
        end_time = parse_datetime(end, self.schedule.timezone, "fast_pass_end")
        if start_time is None or end_time is None:
            raise ValueError(f"Invalid fast pass return window {start!r} - {end!r}")

        start_text = start_time.strftime(FAST_PASS_TIME_FORMAT)
        end_text = end_time.strftime(FAST_PASS_TIME_FORMAT)
        if (
            not self.fast_pass_return_available
            or start_text != self.fast_pass_start
            or end_text != self.fast_pass_end
        ):
            self.fast_pass_start = start_text
            self.fast_pass_end = end_text
            self.fast_pass_return_available = True
            self.fast_pass_last_update = _now()
        self.set_fast_pass(True)

    def clear_fast_pass_window(self):
        if self.fast_pass_return_available:
            self.fast_pass_return_available = False
            self.fast_pass_last_update = _now()

    # ── Serialization ──────────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "location": self.location.to_dict() if self.location else None,
            "detail": self.detail,
            "active": self.active,
            "waitTime": self.wait_time,
            "fastPass": self.fast_pass,
            "lastUpdate": self.last_update.isoformat() if self.last_update else None,
            "status": self.status,
        }
        if self.fast_pass_return_available:
            data["fastPassReturnTime"] = {
                "startTime": self.fast_pass_start,
                "endTime": self.fast_pass_end,
                "lastUpdate": self.fast_pass_last_update.isoformat() if self.fast_pass_last_update else None,
            }
        today = self.schedule.get_date(self.schedule.today())
        if today is not None:
            data["schedule"] = today.to_dict()
        return data

    def from_dict(self, data: dict):
        """Restore state from to_dict() output without touching timestamps."""
        self.id = data["id"]
        self.name = data["name"]
        self.type = data.get("type")
        self.location = GeoLocation.from_dict(data["location"]) if data.get("location") else None
        self.detail = data.get("detail")
        self.last_update = _parse_timestamp(data.get("lastUpdate"))
        self.fast_pass = bool(data.get("fastPass", False))

        # active isn't stored, it comes back through the sign of the wait time
        if data.get("active"):
            self._wait_time = data.get("waitTime", 0)
        else:
            self._wait_time = WAIT_CLOSED

        return_time = data.get("fastPassReturnTime")
        if return_time:
            self.fast_pass_return_available = True
            self.fast_pass_start = return_time.get("startTime")
            self.fast_pass_end = return_time.get("endTime")
            self.fast_pass_last_update = _parse_timestamp(return_time.get("lastUpdate"))

        schedule = data.get("schedule")
        if schedule:
            self.schedule.set_date(
                date=schedule["date"],
                opening_time=schedule["openingTime"],
                closing_time=schedule["closingTime"],
                type=schedule["type"],
            )
            for entry in schedule.get("special", []):
                self.schedule.set_date(
                    date=schedule["date"],
                    opening_time=entry["openingTime"],
                    closing_time=entry["closingTime"],
                    type=entry["type"],
                    special=True,
                )

    def __repr__(self):
        return f"Ride({self.id!r}, {self.name!r}, status={self.status!r})"
