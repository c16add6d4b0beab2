import json

from schedule import OPERATING

from .base import BaseAdapter, RideWaitTime, ScheduleEntry


class FixtureAdapter(BaseAdapter):
    """
    Replays canned data from a JSON file, keyed by park name:

        {"<park>": {"rides": [{"id", "name", "waitTime", ...}],
                    "schedule": [{"date", "openingTime", "closingTime", "type", ...}]}}
    """

    def __init__(self, path: str = "fixtures/sample_parks.json"):
        self.path = path

    def _load(self, config) -> dict:
        with open(self.path) as f:
            return json.load(f).get(config.name, {})

    def get_wait_times(self, config) -> list[RideWaitTime]:
        return [
            RideWaitTime(
                ride_id=ride.get("id"),
                name=ride.get("name"),
                wait_time=ride.get("waitTime", -1),
                fast_pass=ride.get("fastPass", False),
                fast_pass_start=ride.get("fastPassStart"),
                fast_pass_end=ride.get("fastPassEnd"),
                type=ride.get("type"),
            )
            for ride in self._load(config).get("rides", [])
        ]

    def get_opening_times(self, config) -> list[ScheduleEntry]:
        return [
            ScheduleEntry(
                date=entry.get("date"),
                opening_time=entry.get("openingTime"),
                closing_time=entry.get("closingTime"),
                type=entry.get("type", OPERATING),
                special=entry.get("special", False),
                end_date=entry.get("endDate"),
                ride_id=entry.get("rideId"),
                ride_name=entry.get("rideName"),
            )
            for entry in self._load(config).get("schedule", [])
        ]
