import pytest
import requests
import responses as resp_mock

from adapters.queue_times import QUEUE_TIMES_BASE, QueueTimesAdapter, parse_wait_times
from config import ParkConfig
from park import FetchError, Park

CONFIG = ParkConfig(
    name="Efteling",
    timezone="Europe/Amsterdam",
    latitude=51.6498,
    longitude=5.0436,
    source_id="160",
)

PAYLOAD = {
    "lands": [
        {
            "id": 1,
            "name": "Adventure Realm",
            "rides": [
                {"id": 101, "name": "Baron 1898", "is_open": True, "wait_time": 25},
                {"id": 102, "name": "Python", "is_open": False, "wait_time": 0},
            ],
        }
    ],
    "rides": [{"id": 200, "name": "Stoomtrein", "is_open": True, "wait_time": 5}],
}


def test_parse_wait_times_flattens_lands():
    records = parse_wait_times(PAYLOAD)
    assert [r.ride_id for r in records] == ["101", "102", "200"]
    assert records[0].detail == {"land": "Adventure Realm"}
    assert records[2].detail is None


def test_parse_wait_times_marks_closed_rides():
    records = parse_wait_times(PAYLOAD)
    assert records[0].wait_time == 25
    assert records[1].wait_time == -1


@resp_mock.activate
def test_get_wait_times_calls_queue_times():
    resp_mock.add(resp_mock.GET, f"{QUEUE_TIMES_BASE}/parks/160/queue_times.json", json=PAYLOAD, status=200)

    records = QueueTimesAdapter().get_wait_times(CONFIG)

    assert len(records) == 3
    assert len(resp_mock.calls) == 1


@resp_mock.activate
def test_get_wait_times_raises_on_http_error():
    resp_mock.add(resp_mock.GET, f"{QUEUE_TIMES_BASE}/parks/160/queue_times.json", status=500)

    with pytest.raises(requests.HTTPError):
        QueueTimesAdapter().get_wait_times(CONFIG)


def test_get_wait_times_needs_source_id():
    config = ParkConfig(name="Nowhere", timezone="UTC", latitude=0, longitude=0)
    with pytest.raises(ValueError):
        QueueTimesAdapter().get_wait_times(config)


@resp_mock.activate
def test_park_wait_times_through_queue_times():
    resp_mock.add(resp_mock.GET, f"{QUEUE_TIMES_BASE}/parks/160/queue_times.json", json=PAYLOAD, status=200)

    park = Park(CONFIG, QueueTimesAdapter())
    result = park.get_wait_times()

    statuses = {r["name"]: r["status"] for r in result}
    assert statuses == {"Baron 1898": "Operating", "Python": "Closed", "Stoomtrein": "Operating"}


@resp_mock.activate
def test_park_wraps_transport_errors():
    resp_mock.add(resp_mock.GET, f"{QUEUE_TIMES_BASE}/parks/160/queue_times.json", status=503)

    with pytest.raises(FetchError):
        Park(CONFIG, QueueTimesAdapter()).get_wait_times()


def test_opening_times_unsupported():
    with pytest.raises(FetchError):
        Park(CONFIG, QueueTimesAdapter()).get_opening_times()
    with pytest.raises(NotImplementedError):
        QueueTimesAdapter().get_opening_times(CONFIG)
