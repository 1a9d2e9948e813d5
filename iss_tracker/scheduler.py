"""
Background tasks for periodic position updates.
Runs the upstream tracking loop and the map trail poller.
"""

import copy
import sqlite3
import threading
import time
from typing import Any, Dict, Optional

from iss_tracker.api_clients import APIError, OpenNotifyClient, TrackerClient
from iss_tracker.config import CONFIG
from iss_tracker.database import Database, db
from iss_tracker.trail import PathTrail, PayloadError, Position
from iss_tracker.utils import format_time, log

STATUS_CONNECTED = "Connected"
STATUS_DISCONNECTED = "Disconnected - Retrying..."


class TrackingTask:
    """Polls the upstream API and stores each position."""

    def __init__(
        self,
        client: Optional[OpenNotifyClient] = None,
        database: Optional[Database] = None,
        poll_interval: Optional[float] = None,
    ):
        self.client = client or OpenNotifyClient()
        self.db = database or db
        self.poll_interval = (
            poll_interval if poll_interval is not None else CONFIG.poll_interval
        )
        self.running = False
        self._db_ready = False

    def _ensure_db(self) -> bool:
        """Create the schema once; retried on later ticks if it fails."""
        if not self._db_ready:
            try:
                self.db.init_db()
                self._db_ready = True
            except (sqlite3.Error, OSError) as e:
                log("DB", f"Database init failed: {e}")
        return self._db_ready

    def tick(self) -> Optional[Position]:
        """Fetch one position and store it."""
        position = self.client.fetch_position()
        if position is not None and self._ensure_db():
            self.db.add_position(position)
        return position

    def run_forever(self):
        """Run the tracking loop until stopped."""
        self._ensure_db()
        log("TRACKER", "ISS position tracking task started")
        self.running = True

        while self.running:
            self.tick()
            time.sleep(self.poll_interval)

    def stop(self):
        """Stop the tracking loop."""
        self.running = False


class ConnectionStatus:
    """Two-state connection indicator with a failure counter."""

    def __init__(self, max_retries: int = 3):
        self.max_retries = max_retries
        self.connected = True
        self.retries = 0

    def mark_connected(self):
        self.connected = True
        self.retries = 0

    def mark_disconnected(self):
        self.connected = False

    def record_failure(self):
        """Count a failed poll; flip to disconnected past ``max_retries``."""
        self.retries += 1
        if self.retries > self.max_retries:
            self.mark_disconnected()

    def as_dict(self) -> Dict[str, str]:
        if self.connected:
            return {"text": STATUS_CONNECTED, "class": "connected"}
        return {"text": STATUS_DISCONNECTED, "class": "disconnected"}


class TrailPoller:
    """Thread-safe map trail fed from the tracker REST API."""

    def __init__(
        self,
        client: Optional[TrackerClient] = None,
        max_segments: Optional[int] = None,
        max_retries: Optional[int] = None,
        update_interval_ms: Optional[int] = None,
    ):
        self.client = client or TrackerClient()
        if max_segments is None:
            max_segments = CONFIG.max_path_segments
        if max_retries is None:
            max_retries = CONFIG.max_retries
        if update_interval_ms is None:
            update_interval_ms = CONFIG.update_interval_ms
        self.update_interval = update_interval_ms / 1000
        self._lock = threading.Lock()
        self.trail = PathTrail(max_segments=max_segments)
        self.connection = ConnectionStatus(max_retries)
        self.marker = None
        self.last_position: Optional[Position] = None
        self.positions_count = 0
        self.running = False

    def load_history(self) -> bool:
        """
        Rebuild the trail from the stored history.

        An empty history leaves the trail and the status panel as they are.

        Returns:
            True if the history was fetched, False if the request failed
        """
        try:
            positions = self.client.fetch_history()
        except (APIError, PayloadError) as e:
            log("VIEWER", f"Error loading position history: {e}")
            with self._lock:
                self.connection.mark_disconnected()
            return False

        with self._lock:
            if not self.trail.load(positions):
                return True
            latest = positions[-1]
            self.marker = latest.point
            self.last_position = latest
            self.positions_count = len(positions)
            self.connection.mark_connected()
            segments = self.trail.segment_count

        log(
            "VIEWER",
            f"Loaded {len(positions)} positions from server "
            f"({segments} historical segments + current)",
        )
        return True

    def poll_latest(self) -> bool:
        """
        Add the newest stored position to the trail.

        Returns:
            True if a position was received
        """
        try:
            position = self.client.fetch_latest()
        except (APIError, PayloadError) as e:
            log("VIEWER", f"Error fetching ISS position: {e}")
            with self._lock:
                self.connection.record_failure()
            return False

        if position is None:
            return False

        with self._lock:
            self.marker = position.point
            outcome = self.trail.add_point(position.point)
            self.last_position = position
            self.positions_count = self.trail.visible_points()
            self.connection.mark_connected()
            segments = self.trail.segment_count

        if outcome == "crossing":
            log("VIEWER", "Date line crossing detected in real-time update")
        elif outcome == "duplicate":
            log("VIEWER", f"Skipping duplicate point: {position.point}")
        log(
            "VIEWER",
            f"ISS Position: {position.latitude}, {position.longitude} "
            f"(Segments: {segments} + current)",
        )
        return True

    def snapshot(self) -> Dict[str, Any]:
        """
        Get a consistent copy of the trail and status panel values.

        Returns:
            Dict with 'polylines', 'marker' and 'panel' keys
        """
        with self._lock:
            polylines = copy.deepcopy(self.trail.polylines())
            marker = self.marker
            panel = {
                "connection": self.connection.as_dict(),
                "positions_count": self.positions_count,
                "segments_count": self.trail.segment_count,
                "max_segments": self.trail.max_segments,
                "lat": None,
                "lon": None,
                "timestamp": None,
            }
            if self.last_position is not None:
                panel["lat"] = f"{self.last_position.latitude:.4f}"
                panel["lon"] = f"{self.last_position.longitude:.4f}"
                panel["timestamp"] = format_time(self.last_position.datetime)

        return {"polylines": polylines, "marker": marker, "panel": panel}

    def run_forever(self):
        """Load history once, then poll the latest position forever.

        The history load is retried each tick until one request succeeds,
        so the poller can start before the API server is listening.
        """
        log("VIEWER", f"Trail poller started against {self.client.base_url}")
        history_loaded = self.load_history()
        self.running = True

        while self.running:
            time.sleep(self.update_interval)
            if not history_loaded:
                history_loaded = self.load_history()
            else:
                self.poll_latest()

    def stop(self):
        """Stop the poller."""
        self.running = False


# Global tasks
tracking_task = TrackingTask()
trail_poller = TrailPoller()
