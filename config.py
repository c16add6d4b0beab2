import dataclasses
from dataclasses import dataclass, field
from typing import Optional

import yaml


@dataclass
class Settings:
    """Process-wide defaults, built once at start-up and passed down."""

    cache_wait_times_ttl: int = 60 * 5
    cache_opening_times_ttl: int = 60 * 60
    default_cache_ttl: int = 60 * 60
    cache_max_entries: int = 5000
    # JSON file for a cache that outlives the process; in-memory when unset
    cache_file: Optional[str] = None
    schedule_days: int = 30
    # days past schedule_days filled in as Closed when a source has no data
    closed_fill_days: int = 90
    date_format: str = "%Y-%m-%d"
    time_format: Optional[str] = None
    http_timeout: float = 10


@dataclass
class ParkConfig:
    name: str
    timezone: str
    latitude: float
    longitude: float
    adapter: str = "queue_times"
    # the park's ID at the data source
    source_id: Optional[str] = None
    fast_pass: bool = False
    fast_pass_return_times: bool = False
    supports_ride_schedules: bool = False
    schedule_days: Optional[int] = None
    cache_wait_times_ttl: Optional[int] = None
    cache_opening_times_ttl: Optional[int] = None
    options: dict = field(default_factory=dict)


def load_config(path: str = "config.yaml") -> dict:
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _build(cls, raw: dict, what: str):
    known = {f.name for f in dataclasses.fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ValueError(f"Unknown {what} option(s): {', '.join(sorted(unknown))}")
    return cls(**raw)


def load_settings(config: dict) -> Settings:
    return _build(Settings, config.get("settings") or {}, "settings")


def load_parks(config: dict) -> list[ParkConfig]:
    parks = []
    for raw in config.get("parks", []):
        for required in ("name", "timezone", "latitude", "longitude"):
            if raw.get(required) in (None, ""):
                raise ValueError(f"Park config missing {required}: {raw}")
        parks.append(_build(ParkConfig, raw, "park"))
    return parks
