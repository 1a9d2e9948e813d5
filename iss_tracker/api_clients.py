"""
API clients for fetching ISS positions.
Handles the upstream Open Notify feed and the tracker's own REST API.
"""

from typing import List, Optional

import requests

from iss_tracker import __version__
from iss_tracker.config import CONFIG
from iss_tracker.trail import PayloadError, Position
from iss_tracker.utils import log, rfc3339_from_timestamp

USER_AGENT = f"iss-trail-tracker/{__version__}"


class APIError(Exception):
    """Raised when the position API cannot be reached or answers non-2xx."""


class OpenNotifyClient:
    """Fetch the live ISS position from the Open Notify API."""

    def __init__(self, url: Optional[str] = None, timeout: Optional[int] = None):
        self.url = url or CONFIG.source_url
        self.timeout = timeout if timeout is not None else CONFIG.timeout
        self.session = requests.Session()
        self.session.headers["User-Agent"] = USER_AGENT

    def fetch_position(self) -> Optional[Position]:
        """
        Fetch the current ISS position.

        Returns:
            Position, or None if the request failed or the answer was unusable
        """
        try:
            r = self.session.get(self.url, timeout=self.timeout)
        except requests.RequestException as e:
            log("API", f"Error fetching ISS position: {e}")
            return None

        if r.status_code != 200:
            log("API", f"Error response from API {r.status_code}: {r.text[:50]}")
            return None

        try:
            data = r.json()
            if data.get("message") != "success":
                log("API", "API error: message not 'success'")
                return None
            timestamp = int(data["timestamp"])
            coords = data["iss_position"]
            latitude = float(coords["latitude"])
            longitude = float(coords["longitude"])
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            log("API", f"Error parsing response: {e}")
            return None

        position = Position(
            latitude=latitude,
            longitude=longitude,
            datetime=rfc3339_from_timestamp(timestamp),
            timestamp=timestamp,
        )
        log(
            "API",
            f"Position at {position.datetime}: "
            f"{position.latitude}, {position.longitude}",
        )
        return position


class TrackerClient:
    """Read stored positions from the tracker REST API."""

    def __init__(
        self, base_url: Optional[str] = None, timeout: Optional[int] = None
    ):
        self.base_url = (base_url or CONFIG.api_base_url).rstrip("/")
        self.timeout = (
            timeout if timeout is not None else CONFIG.request_timeout
        )

    def _get_json(self, path: str) -> dict:
        """
        GET an API path and decode its JSON body.

        Raises:
            APIError: On network failure or a non-2xx status
            PayloadError: If the body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        try:
            r = requests.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise APIError(f"Request to {url} failed: {e}") from e

        if not r.ok:
            raise APIError(f"Server returned {r.status_code}")

        try:
            data = r.json()
        except ValueError as e:
            raise PayloadError(f"Invalid JSON from {url}: {e}") from e
        if not isinstance(data, dict):
            raise PayloadError(f"Unexpected payload from {url}: {data!r}")
        return data

    def fetch_history(self) -> List[Position]:
        """Fetch the full stored position history, oldest first."""
        data = self._get_json("/api/positions")
        raw = data.get("positions") or []
        if not isinstance(raw, list):
            raise PayloadError(f"'positions' is not a list: {raw!r}")
        return [Position.from_dict(p) for p in raw]

    def fetch_latest(self) -> Optional[Position]:
        """Fetch the newest stored position (None if nothing is stored yet)."""
        data = self._get_json("/api/latest")
        raw = data.get("position")
        if not raw:
            return None
        return Position.from_dict(raw)
