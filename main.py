import argparse
import json
import logging
import sys

from adapters.fixture import FixtureAdapter
from adapters.queue_times import QueueTimesAdapter
from config import ParkConfig, Settings, load_config, load_parks, load_settings
from park import FetchError, Park, make_store

FIXTURE_FILE = "fixtures/sample_parks.json"

ADAPTERS = {
    "queue_times": lambda settings, options: QueueTimesAdapter(timeout=settings.http_timeout, **options),
    "fixture": lambda settings, options: FixtureAdapter(**options),
}


def build_adapter(park: ParkConfig, settings: Settings):
    try:
        factory = ADAPTERS[park.adapter]
    except KeyError:
        raise ValueError(f"Unknown adapter {park.adapter!r} for {park.name}")
    return factory(settings, park.options)


def run(
    settings: Settings,
    parks: list,
    opening_times: bool = False,
    dry_run: bool = False,
    adapter=None,
    store=None,
) -> dict:
    """
    Core logic. Returns {park name: wait times or opening times}.
    Separated from __main__ to allow unit testing without config files.
    """
    # one store for every park so global cache keys are shared
    if store is None:
        store = make_store(settings)

    results = {}
    for park_config in parks:
        if adapter is not None:
            park_adapter = adapter
        elif dry_run:
            park_adapter = FixtureAdapter(FIXTURE_FILE)
        else:
            park_adapter = build_adapter(park_config, settings)

        park = Park(park_config, park_adapter, settings, store=store)
        try:
            if opening_times:
                results[park.name] = park.get_opening_times()
            else:
                results[park.name] = park.get_wait_times()
        except FetchError as e:
            print(f"ERROR fetching {park.name}: {e}", file=sys.stderr)
            continue

    return results


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Theme park wait times and opening hours")
    parser.add_argument("--config", default="config.yaml", help="Path to config YAML")
    parser.add_argument("--park", action="append", help="Only fetch this park (repeatable)")
    parser.add_argument("--opening-times", action="store_true", help="Fetch opening hours instead of wait times")
    parser.add_argument("--dry-run", action="store_true", help="Use fixture data instead of live sources")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    cfg = load_config(args.config)
    settings = load_settings(cfg)
    parks = load_parks(cfg)
    if args.park:
        parks = [p for p in parks if p.name in args.park]

    results = run(
        settings=settings,
        parks=parks,
        opening_times=args.opening_times,
        dry_run=args.dry_run,
    )
    json.dump(results, sys.stdout, indent=2)
    print()
