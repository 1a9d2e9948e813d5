"""
Configuration loader for ISS Trail Tracker.
Loads and validates configuration from YAML file.
"""

import os
from typing import Any, Dict, List

import yaml

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG_FILE = os.environ.get(
    "ISS_TRACKER_CONFIG", os.path.join(_project_root, "config.yaml")
)


class Config:
    """Load and provide access to configuration from YAML file."""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE):
        self.path = config_file
        self.data: Dict[str, Any] = {}
        self.load()

    def load(self):
        """Load YAML configuration file."""
        if not os.path.exists(self.path):
            raise FileNotFoundError(f"Config file not found: {self.path}")

        with open(self.path, "r", encoding="utf-8") as f:
            self.data = yaml.safe_load(f) or {}

    def override(self, section: str, key: str, value: Any):
        """Replace a single setting, e.g. from a command-line flag."""
        if value is None:
            return
        self.data.setdefault(section, {})[key] = value

    # Tracker properties
    @property
    def source_url(self) -> str:
        """Get upstream ISS position API URL."""
        tracker_cfg = self.data.get("tracker", {})
        default_url = "http://api.open-notify.org/iss-now.json"
        return tracker_cfg.get("source_url", default_url)

    @property
    def max_positions(self) -> int:
        """Get number of positions kept in the store."""
        return self.data.get("tracker", {}).get("max_positions", 15000)

    @property
    def poll_interval(self) -> int:
        """Get upstream poll interval in seconds."""
        return self.data.get("tracker", {}).get("poll_interval", 2)

    @property
    def timeout(self) -> int:
        """Get upstream request timeout in seconds."""
        return self.data.get("tracker", {}).get("timeout", 3)

    # Database properties
    @property
    def db_name(self) -> str:
        """Get database file path."""
        db_config = self.data.get("database", {})
        return db_config.get("name", "data/iss_positions.db")

    # Viewer properties
    @property
    def api_base_url(self) -> str:
        """Get base URL of the position API (defaults to this server)."""
        url = self.data.get("viewer", {}).get("api_base_url", "")
        if not url:
            url = f"http://{self.dev_host}:{self.dev_port}"
        return url.rstrip("/")

    @property
    def update_interval_ms(self) -> int:
        """Get live polling interval in milliseconds."""
        viewer_cfg = self.data.get("viewer", {})
        return viewer_cfg.get("update_interval_ms", 5000)

    @property
    def request_timeout(self) -> int:
        """Get viewer request timeout in seconds."""
        return self.data.get("viewer", {}).get("request_timeout", 10)

    @property
    def max_retries(self) -> int:
        """Get failures tolerated before the connection shows as down."""
        return self.data.get("viewer", {}).get("max_retries", 3)

    @property
    def max_path_segments(self) -> int:
        """Get number of historical path segments kept on the map."""
        return self.data.get("viewer", {}).get("max_path_segments", 4)

    # Map properties
    @property
    def map_center(self) -> List[float]:
        """Get [lat, lon] the map resets to."""
        return list(self.data.get("map", {}).get("center", [0, 0]))

    @property
    def map_zoom(self) -> float:
        """Get initial map zoom."""
        return self.data.get("map", {}).get("zoom", 3)

    @property
    def street_tiles(self) -> str:
        """Get street tile URL template."""
        map_cfg = self.data.get("map", {})
        default_tiles = "https://tile.openstreetmap.org/{z}/{x}/{y}.png"
        return map_cfg.get("street_tiles", default_tiles)

    @property
    def street_attribution(self) -> str:
        map_cfg = self.data.get("map", {})
        default_attr = "&copy; OpenStreetMap contributors"
        return map_cfg.get("street_attribution", default_attr)

    @property
    def terrain_tiles(self) -> str:
        """Get terrain tile URL template."""
        map_cfg = self.data.get("map", {})
        default_tiles = "https://tile.opentopomap.org/{z}/{x}/{y}.png"
        return map_cfg.get("terrain_tiles", default_tiles)

    @property
    def terrain_attribution(self) -> str:
        map_cfg = self.data.get("map", {})
        default_attr = (
            "Map data: &copy; OpenStreetMap contributors, SRTM | "
            "Map style: &copy; OpenTopoMap"
        )
        return map_cfg.get("terrain_attribution", default_attr)

    # Server properties
    @property
    def dev_host(self) -> str:
        """Get development server host."""
        return self.data.get("server", {}).get("dev_host", "127.0.0.1")

    @property
    def dev_port(self) -> int:
        """Get development server port."""
        return self.data.get("server", {}).get("dev_port", 8000)

    @property
    def run_tracker(self) -> bool:
        """Whether this process polls the upstream API."""
        return self.data.get("server", {}).get("run_tracker", True)

    @property
    def run_viewer(self) -> bool:
        """Whether this process runs the map trail poller."""
        return self.data.get("server", {}).get("run_viewer", True)


# Global configuration instance
CONFIG = Config()
