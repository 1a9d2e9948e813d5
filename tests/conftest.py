"""Shared fixtures for ISS Trail Tracker tests."""

import pytest

from iss_tracker.database import Database
from iss_tracker.trail import Position


def make_positions(lons, lat=10.0, start=1700000000):
    """Build positions along a track of longitudes, one second apart."""
    return [
        Position(
            latitude=lat,
            longitude=float(lon),
            datetime=f"2023-11-14T22:13:{i % 60:02d}+00:00",
            timestamp=start + i,
        )
        for i, lon in enumerate(lons)
    ]


class FakeTrackerClient:
    """Stands in for TrackerClient with canned answers or errors."""

    base_url = "http://tracker.test"

    def __init__(self, history=None, latest=None):
        self.history = history if history is not None else []
        self.latest = list(latest or [])

    def fetch_history(self):
        if isinstance(self.history, Exception):
            raise self.history
        return list(self.history)

    def fetch_latest(self):
        item = self.latest.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def database(tmp_path):
    db = Database(db_name=str(tmp_path / "positions.db"), max_positions=5)
    db.init_db()
    return db
