import pytest

from config import ParkConfig, Settings, load_config, load_parks, load_settings

YAML = """
settings:
  schedule_days: 14
  cache_file: cache/test.json

parks:
  - name: Efteling
    timezone: Europe/Amsterdam
    latitude: 51.6498
    longitude: 5.0436
    source_id: "160"
"""


def test_load_config_reads_yaml(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(YAML)

    cfg = load_config(str(path))
    settings = load_settings(cfg)
    parks = load_parks(cfg)

    assert settings.schedule_days == 14
    assert settings.cache_file == "cache/test.json"
    assert settings.cache_wait_times_ttl == 300
    assert parks == [
        ParkConfig(name="Efteling", timezone="Europe/Amsterdam", latitude=51.6498, longitude=5.0436, source_id="160")
    ]


def test_empty_config_gives_defaults(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    cfg = load_config(str(path))
    assert load_settings(cfg) == Settings()
    assert load_parks(cfg) == []


def test_unknown_setting_rejected():
    with pytest.raises(ValueError):
        load_settings({"settings": {"cache_ttl_forever": True}})


def test_park_missing_timezone_rejected():
    with pytest.raises(ValueError):
        load_parks({"parks": [{"name": "Efteling", "latitude": 1, "longitude": 2}]})
