import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

from schedule import OPERATING

logger = logging.getLogger(__name__)


@dataclass
class RideWaitTime:
    ride_id: str
    name: str
    # minutes, -1 closed for the day, -2 temporarily down
    wait_time: int
    fast_pass: bool = False
    fast_pass_start: Optional[str] = None
    fast_pass_end: Optional[str] = None
    type: Optional[str] = None
    detail: Optional[dict] = None


@dataclass
class ScheduleEntry:
    date: Any
    opening_time: Any = None
    closing_time: Any = None
    type: str = OPERATING
    special: bool = False
    # set to apply the same hours to every day from date to end_date
    end_date: Any = None
    # when set, the hours belong to this ride rather than the park
    ride_id: Optional[str] = None
    # lets the ride be created before any wait times have been fetched
    ride_name: Optional[str] = None


class BaseAdapter(ABC):
    """
    One data source family. Parks using it are described by a ParkConfig.

    Subclasses return normalized records; fetch_wait_times and
    fetch_opening_times apply them to a Park, skipping (and logging) records
    that don't fit rather than failing the whole fetch.
    """

    supports_wait_times = True
    supports_opening_times = True

    @abstractmethod
    def get_wait_times(self, config) -> list[RideWaitTime]:
        """
        Returns the current wait time for every ride at the park.

        Args:
            config: ParkConfig for the park being fetched

        Raises on transport or payload errors.
        """
        raise NotImplementedError

    @abstractmethod
    def get_opening_times(self, config) -> list[ScheduleEntry]:
        """Returns known opening hours for the park (and optionally its rides)."""
        raise NotImplementedError

    def fetch_wait_times(self, park):
        for record in self.get_wait_times(park.config):
            try:
                self._apply_wait_time(park, record)
            except (TypeError, ValueError) as e:
                logger.warning(f"{park.name}: skipping ride {record.ride_id!r}: {e}")

    def _apply_wait_time(self, park, record: RideWaitTime):
        ride = park.registry.get_or_create(record.ride_id, record.name, type=record.type, detail=record.detail)
        if ride is None:
            raise ValueError("missing ride ID or name")
        ride.set_wait_time(record.wait_time)
        if record.fast_pass_start and record.fast_pass_end:
            ride.set_fast_pass_window(record.fast_pass_start, record.fast_pass_end)
        else:
            ride.set_fast_pass(record.fast_pass)

    def fetch_opening_times(self, park):
        for entry in self.get_opening_times(park.config):
            calendar = park.schedule
            if entry.ride_id is not None:
                if entry.ride_name:
                    ride = park.registry.get_or_create(entry.ride_id, entry.ride_name)
                else:
                    ride = park.find_ride(entry.ride_id)
                if ride is None:
                    logger.warning(f"{park.name}: hours for unknown ride {entry.ride_id!r}")
                    continue
                calendar = ride.schedule

            if entry.end_date is not None:
                ok = calendar.set_range(
                    start_date=entry.date,
                    end_date=entry.end_date,
                    opening_time=entry.opening_time,
                    closing_time=entry.closing_time,
                    type=entry.type,
                    special=entry.special,
                )
            else:
                ok = calendar.set_date(
                    date=entry.date,
                    opening_time=entry.opening_time,
                    closing_time=entry.closing_time,
                    type=entry.type,
                    special=entry.special,
                )
            if not ok:
                logger.debug(f"{park.name}: schedule entry not applied: {entry}")
