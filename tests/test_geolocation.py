import pytest

from geolocation import GeoLocation


def test_longitude_wraps():
    assert GeoLocation(latitude=0, longitude=190).longitude_raw == -170
    assert GeoLocation(latitude=0, longitude=-190).longitude_raw == 170


def test_latitude_clamps():
    assert GeoLocation(latitude=100, longitude=0).latitude_raw == 90
    assert GeoLocation(latitude=-100, longitude=0).latitude_raw == -90


def test_formatted_coordinates():
    location = GeoLocation(latitude=51.5, longitude=-0.25)
    assert location.latitude == "51°30′0.00″N"
    assert location.longitude == "0°15′0.00″W"


def test_invalid_coordinates():
    with pytest.raises(ValueError):
        GeoLocation(latitude="north", longitude=0)


def test_google_maps_url():
    assert GeoLocation(latitude=1.5, longitude=2.5).google_maps_url() == "http://maps.google.com/?ll=1.5,2.5"
