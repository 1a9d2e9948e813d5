"""Tests for configuration loading and helpers."""

import os

import pytest

from iss_tracker.config import Config
from iss_tracker.utils import format_time, rfc3339_from_timestamp


class TestConfig:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            Config(str(tmp_path / "nope.yaml"))

    def test_defaults_for_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        cfg = Config(str(path))
        assert cfg.max_positions == 15000
        assert cfg.poll_interval == 2
        assert cfg.timeout == 3
        assert cfg.max_path_segments == 4
        assert cfg.max_retries == 3
        assert cfg.update_interval_ms == 5000
        assert cfg.map_center == [0, 0]
        assert cfg.api_base_url == "http://127.0.0.1:8000"

    def test_map_defaults_match_shipped_config(self, tmp_path):
        shipped = Config(
            os.path.join(os.path.dirname(os.path.dirname(__file__)), "config.yaml")
        )
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        defaults = Config(str(path))
        for name in (
            "street_tiles",
            "street_attribution",
            "terrain_tiles",
            "terrain_attribution",
        ):
            assert getattr(defaults, name) == getattr(shipped, name), name

    def test_values_and_overrides(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "viewer:\n"
            "  api_base_url: http://tracker.test/\n"
            "  max_path_segments: 6\n",
            encoding="utf-8",
        )
        cfg = Config(str(path))
        assert cfg.api_base_url == "http://tracker.test"
        assert cfg.max_path_segments == 6

        cfg.override("tracker", "poll_interval", 10)
        cfg.override("tracker", "timeout", None)
        assert cfg.poll_interval == 10
        assert cfg.timeout == 3


class TestTimeHelpers:
    def test_rfc3339(self):
        assert rfc3339_from_timestamp(0) == "1970-01-01T00:00:00+00:00"

    def test_format_time(self):
        text = format_time("2024-01-01T12:34:56Z")
        assert len(text) == 8 and text.count(":") == 2

    def test_format_time_unparsable(self):
        assert format_time("yesterday") == "yesterday"
