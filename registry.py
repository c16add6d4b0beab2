import logging
from typing import Optional

from ride import Ride

logger = logging.getLogger(__name__)


class RideRegistry:
    """De-duplicated set of rides for one park, keyed by park-namespaced ID."""

    def __init__(self, namespace: str, timezone="UTC"):
        if not namespace:
            raise ValueError("RideRegistry needs a namespace")
        self.namespace = namespace
        self.timezone = timezone
        self._rides: dict[str, Ride] = {}

    def make_key(self, ride_id) -> str:
        ride_id = str(ride_id)
        if ride_id.startswith(f"{self.namespace}_"):
            return ride_id
        return f"{self.namespace}_{ride_id}"

    def get_or_create(self, ride_id, name: str, **details) -> Optional[Ride]:
        """
        Return the ride for ride_id, creating it on first sight.

        An existing ride keeps its original name and details. Returns None
        (instead of raising) when ride_id or name is missing, since adapters
        call this while walking half-complete vendor records.
        """
        if ride_id is None or ride_id == "":
            logger.debug(f"No ride ID supplied for {name!r}")
            return None
        if not name:
            logger.debug(f"No ride name supplied for {ride_id!r}")
            return None

        key = self.make_key(ride_id)
        ride = self._rides.get(key)
        if ride is None:
            ride = Ride(key, name, timezone=self.timezone, **details)
            self._rides[key] = ride
        return ride

    def find(self, ride_id) -> Optional[Ride]:
        if ride_id is None or ride_id == "":
            return None
        return self._rides.get(self.make_key(ride_id))

    @property
    def rides(self) -> list[Ride]:
        return list(self._rides.values())

    def __iter__(self):
        return iter(self._rides.values())

    def __len__(self):
        return len(self._rides)

    def __contains__(self, ride_id):
        return self.make_key(ride_id) in self._rides
