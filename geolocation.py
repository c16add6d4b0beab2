import math


def _format_degrees(number: float) -> str:
    minutes = math.floor((number % 1) * 60)
    seconds = ((number * 60) % 1) * 60
    return f"{math.floor(number)}°{minutes}′{seconds:.2f}″"


class GeoLocation:
    """A latitude/longitude pair, normalized on construction."""

    def __init__(self, latitude: float = 0, longitude: float = 0):
        try:
            longitude = float(longitude)
            latitude = float(latitude)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid location: latitude={latitude!r}, longitude={longitude!r}")

        # longitude wraps into (-180, 180], latitude clamps to [-90, 90]
        longitude = math.fmod(longitude, 360)
        if longitude > 180:
            longitude -= 360
        elif longitude <= -180:
            longitude += 360
        self.longitude_raw = longitude
        self.latitude_raw = max(-90.0, min(latitude, 90.0))

    @property
    def longitude(self) -> str:
        if self.longitude_raw < 0:
            return f"{_format_degrees(-self.longitude_raw)}W"
        return f"{_format_degrees(self.longitude_raw)}E"

    @property
    def latitude(self) -> str:
        if self.latitude_raw < 0:
            return f"{_format_degrees(-self.latitude_raw)}S"
        return f"{_format_degrees(self.latitude_raw)}N"

    def to_dict(self) -> dict:
        return {"latitude": self.latitude_raw, "longitude": self.longitude_raw}

    @classmethod
    def from_dict(cls, data: dict) -> "GeoLocation":
        return cls(latitude=data.get("latitude", 0), longitude=data.get("longitude", 0))

    def google_maps_url(self) -> str:
        return f"http://maps.google.com/?ll={self.latitude_raw},{self.longitude_raw}"

    def __eq__(self, other):
        if not isinstance(other, GeoLocation):
            return NotImplemented
        return (self.latitude_raw, self.longitude_raw) == (other.latitude_raw, other.longitude_raw)

    def __repr__(self):
        return f"({self.latitude}, {self.longitude})"
