"""Tests for the Flask routes."""

import pytest

from iss_tracker import app as app_module
from iss_tracker.config import CONFIG
from iss_tracker.renderer import ViewRegistry
from iss_tracker.scheduler import TrailPoller
from tests.conftest import FakeTrackerClient, make_positions


@pytest.fixture
def client(database, monkeypatch):
    poller = TrailPoller(
        client=FakeTrackerClient(history=make_positions([170, -170, -160])),
        max_segments=4,
        max_retries=3,
        update_interval_ms=10,
    )
    monkeypatch.setattr(app_module, "db", database)
    monkeypatch.setattr(app_module, "trail_poller", poller)
    monkeypatch.setattr(
        app_module, "map_views", ViewRegistry(center=[0, 0], zoom=3)
    )
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


class TestPositionAPI:
    def test_positions_empty(self, client):
        data = client.get("/api/positions").get_json()
        assert data == {"count": 0, "last_update": None, "positions": []}

    def test_positions_and_latest(self, client, database):
        positions = make_positions([1, 2, 3])
        for p in positions:
            database.add_position(p)

        data = client.get("/api/positions").get_json()
        assert data["count"] == 3
        assert data["last_update"] == positions[-1].datetime
        assert data["positions"][0] == positions[0].to_dict()

        latest = client.get("/api/latest").get_json()
        assert latest["position"] == positions[-1].to_dict()
        assert latest["last_update"] == positions[-1].datetime

    def test_latest_empty(self, client):
        data = client.get("/api/latest").get_json()
        assert data == {"last_update": None, "position": None}

    def test_status(self, client, database):
        database.add_position(make_positions([9])[0])
        data = client.get("/api/status").get_json()
        assert data["positions_stored"] == 1
        assert data["max_positions"] == 5
        assert "update_interval" in data


class TestMapRoutes:
    def test_trail(self, client):
        app_module.trail_poller.load_history()
        data = client.get("/api/trail").get_json()
        assert data["panel"]["segments_count"] == 1
        assert data["panel"]["positions_count"] == 3
        # one past segment, the current one and the marker
        assert len(data["figure"]["data"]) == 3
        assert data["view"]["terrain"] is False

    def test_terrain_toggle(self, client):
        data = client.post("/api/view/terrain").get_json()
        assert data["terrain"] is True
        assert data["button_label"] == "Show Street Map"

    def test_reset_view(self, client):
        data = client.post("/api/view/reset", json={"zoom": 5}).get_json()
        assert data["center"] == [0, 0]
        assert data["zoom"] == 5.0

    def test_reset_view_bad_zoom(self, client):
        response = client.post("/api/view/reset", json={"zoom": "far"})
        assert response.status_code == 400

    def test_index(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.get_data(as_text=True)
        for element_id in (
            "connection-status",
            "positions-count",
            "segments-count",
            "reset-view-btn",
            "terrain-toggle-btn",
        ):
            assert f'id="{element_id}"' in body

    def test_index_registers_a_view(self, client):
        body = client.get("/").get_data(as_text=True)
        assert len(app_module.map_views) == 1
        assert "VIEW_ID" in body

    def test_pages_keep_separate_views(self, client):
        first = app_module.map_views.create()
        second = app_module.map_views.create()

        data = client.post(f"/api/view/terrain?view={first}").get_json()
        assert data["terrain"] is True
        client.post(f"/api/view/reset?view={first}", json={"zoom": 7})

        other = client.get(f"/api/trail?view={second}").get_json()["view"]
        assert other["terrain"] is False
        assert other["zoom"] == 3
        assert other["revision"] == 0

        mine = client.get(f"/api/trail?view={first}").get_json()["view"]
        assert mine["terrain"] is True
        assert mine["zoom"] == 7.0
        assert mine["revision"] == 1

    def test_trail_layer_follows_page_terrain(self, client):
        view_id = app_module.map_views.create()
        client.post(f"/api/view/terrain?view={view_id}")
        data = client.get(f"/api/trail?view={view_id}").get_json()
        layer = data["figure"]["layout"]["map"]["layers"][0]
        assert layer["source"] == [CONFIG.terrain_tiles]

    def test_no_static_route(self, client):
        assert app_module.app.static_folder is None
        endpoints = {rule.endpoint for rule in app_module.app.url_map.iter_rules()}
        assert "static" not in endpoints
