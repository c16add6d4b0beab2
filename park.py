import logging
from datetime import timedelta
from typing import Optional

from cache import Cache, FileCache, MemoryCache
from config import ParkConfig, Settings
from geolocation import GeoLocation
from registry import RideRegistry
from ride import Ride
from schedule import CLOSED, Calendar, get_timezone

logger = logging.getLogger(__name__)

WAIT_TIMES_KEY = "waittimes"
OPENING_TIMES_KEY = "openingtimes"


class FetchError(Exception):
    pass


def make_store(settings: Settings):
    if settings.cache_file:
        return FileCache(settings.cache_file)
    return MemoryCache(max_entries=settings.cache_max_entries)


class Park:
    """
    Serves wait times and opening hours for one park.

    Every call checks the cache first; on a miss the adapter fetches fresh
    data into the ride registry / park calendar, and the resulting snapshot
    is cached for the next caller.
    """

    def __init__(self, config: ParkConfig, adapter, settings: Settings = None, store=None):
        if not config.name:
            raise ValueError("Park config has no name")
        if config.latitude is None or config.longitude is None:
            raise ValueError(f"No location for {config.name}. Please supply latitude and longitude.")

        self.config = config
        self.adapter = adapter
        self.settings = settings or Settings()
        self.timezone = get_timezone(config.timezone)
        self.location = GeoLocation(latitude=config.latitude, longitude=config.longitude)

        self.registry = RideRegistry(config.name, self.timezone)
        self.schedule = Calendar(
            self.timezone,
            date_format=self.settings.date_format,
            time_format=self.settings.time_format,
        )
        self.cache = Cache(
            store if store is not None else make_store(self.settings),
            prefix=config.name,
            default_ttl=self.settings.default_cache_ttl,
        )

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def schedule_days(self) -> int:
        return self.config.schedule_days or self.settings.schedule_days

    @property
    def supports_wait_times(self) -> bool:
        return getattr(self.adapter, "supports_wait_times", True)

    @property
    def supports_opening_times(self) -> bool:
        return getattr(self.adapter, "supports_opening_times", True)

    @property
    def rides(self) -> list[Ride]:
        return self.registry.rides

    def find_ride(self, ride_id) -> Optional[Ride]:
        return self.registry.find(ride_id)

    def time_now(self, time_format: str = None) -> str:
        now = self.schedule.now()
        fmt = time_format or self.settings.time_format
        return now.strftime(fmt) if fmt else now.isoformat(timespec="seconds")

    def date_now(self, date_format: str = None) -> str:
        return self.schedule.now().strftime(date_format or self.settings.date_format)

    # ── Wait times ─────────────────────────────────────────────────────────────

    def get_wait_times(self) -> list[dict]:
        if not self.supports_wait_times:
            raise FetchError(f"{self.name} doesn't support fetching wait times")

        cached = self.cache.get(WAIT_TIMES_KEY)
        if cached is not None:
            for data in cached:
                ride = self.registry.get_or_create(data.get("id"), data.get("name"))
                if ride is not None:
                    ride.from_dict(data)
            return [ride.to_dict() for ride in self.registry]

        try:
            self.adapter.fetch_wait_times(self)
        except Exception as e:
            raise FetchError(f"Error fetching park wait times: {e}") from e

        self.cache.set(
            WAIT_TIMES_KEY,
            [ride.to_dict() for ride in self.registry],
            self.config.cache_wait_times_ttl or self.settings.cache_wait_times_ttl,
        )
        # callers get their own copy, separate from the cached snapshot
        return [ride.to_dict() for ride in self.registry]

    # ── Opening times ──────────────────────────────────────────────────────────

    def get_opening_times(self) -> list[dict]:
        if not self.supports_opening_times:
            raise FetchError(f"{self.name} doesn't support fetching opening times")

        cached = self.cache.get(OPENING_TIMES_KEY)
        if cached is not None:
            self._restore_opening_times(cached)
            return self._opening_times_window()

        try:
            self.adapter.fetch_opening_times(self)
        except Exception as e:
            raise FetchError(f"Error fetching park opening times: {e}") from e

        self._fill_closed_days()

        # nothing is cached at this point, so even unchanged data is written back
        stored = self.cache.set(
            OPENING_TIMES_KEY,
            self._opening_times_snapshot(),
            self.config.cache_opening_times_ttl or self.settings.cache_opening_times_ttl,
        )
        if stored:
            self.schedule.mark_clean()
            for ride in self.registry:
                ride.schedule.mark_clean()
        else:
            logger.warning(f"Error setting cache data for {self.name}")

        return self._opening_times_window()

    def _opening_times_snapshot(self) -> dict:
        snapshot = self.schedule.to_dict()
        snapshot["rides"] = {
            ride.id: {"name": ride.name, **ride.schedule.to_dict()}
            for ride in self.registry
            if ride.schedule.days or ride.schedule.special
        }
        return snapshot

    def _restore_opening_times(self, snapshot: dict):
        self.schedule.from_dict(snapshot)
        for ride_id, data in snapshot.get("rides", {}).items():
            ride = self.registry.get_or_create(ride_id, data.get("name"))
            if ride is not None:
                ride.schedule.from_dict(data)

    def _fill_closed_days(self):
        today = self.schedule.today()
        for offset in range(self.schedule_days + self.settings.closed_fill_days):
            day = today + timedelta(days=offset)
            if self.schedule.get_date(day) is None:
                self.schedule.set_date(date=day, type=CLOSED)

    def _opening_times_window(self) -> list[dict]:
        today = self.schedule.today()
        end = today + timedelta(days=self.schedule_days)
        return [day.to_dict() for day in self.schedule.get_date_range(today, end)]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "timezone": self.config.timezone,
            "location": self.location.to_dict(),
            "fastPass": self.config.fast_pass,
            "fastPassReturnTimes": self.config.fast_pass_return_times,
            "supportsWaitTimes": self.supports_wait_times,
            "supportsOpeningTimes": self.supports_opening_times,
            "supportsRideSchedules": self.config.supports_ride_schedules,
        }
