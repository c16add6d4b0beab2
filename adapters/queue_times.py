import requests

from .base import BaseAdapter, RideWaitTime

QUEUE_TIMES_BASE = "https://queue-times.com"


class QueueTimesAdapter(BaseAdapter):
    """Live wait times from Queue-Times.com. The feed has no opening hours."""

    supports_opening_times = False

    def __init__(self, timeout: float = 10):
        self.timeout = timeout

    def get_wait_times(self, config) -> list[RideWaitTime]:
        if not config.source_id:
            raise ValueError(f"No Queue-Times park ID configured for {config.name}")
        resp = requests.get(
            f"{QUEUE_TIMES_BASE}/parks/{config.source_id}/queue_times.json",
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return parse_wait_times(resp.json())

    def get_opening_times(self, config):
        """Not available: supports_opening_times is False, so Park never calls this."""
        raise NotImplementedError("Queue-Times doesn't publish opening hours")


def parse_wait_times(payload: dict) -> list[RideWaitTime]:
    records = []
    for land in payload.get("lands", []):
        for ride in land.get("rides", []):
            records.append(_to_record(ride, land.get("name")))
    # some parks list rides outside any land
    for ride in payload.get("rides", []):
        records.append(_to_record(ride, None))
    return records


def _to_record(ride: dict, land: str) -> RideWaitTime:
    if ride.get("is_open"):
        wait_time = ride.get("wait_time") or 0
    else:
        wait_time = -1
    return RideWaitTime(
        ride_id=str(ride["id"]) if ride.get("id") is not None else None,
        name=ride.get("name"),
        wait_time=wait_time,
        detail={"land": land} if land else None,
    )
