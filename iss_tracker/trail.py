"""
Path trail calculations.
Splits position tracks at antimeridian crossings and ages segment colors.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

# Trail fade, brightest first
PATH_COLOR_CURRENT = "rgb(255, 0, 0)"
PATH_COLOR_75PCT = "rgb(191, 0, 0)"
PATH_COLOR_50PCT = "rgb(128, 0, 0)"
PATH_COLOR_25PCT = "rgb(64, 0, 0)"
PATH_COLOR_0PCT = "rgb(0, 0, 0)"

AGED_COLORS = (PATH_COLOR_75PCT, PATH_COLOR_50PCT, PATH_COLOR_25PCT)

# Longitude jump that marks a date line crossing
CROSSING_THRESHOLD_DEG = 180.0

Point = Tuple[float, float]


class PayloadError(ValueError):
    """Raised when a position payload is missing fields or malformed."""


@dataclass(frozen=True)
class Position:
    """A single ISS position sample."""

    latitude: float
    longitude: float
    datetime: str
    timestamp: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Position":
        """
        Build a position from an API payload.

        Coordinates may arrive as numbers or numeric strings.

        Raises:
            PayloadError: If a required field is missing or not numeric
        """
        try:
            latitude = float(data["latitude"])
            longitude = float(data["longitude"])
            stamp = data.get("datetime", "")
            ts = data.get("timestamp")
            timestamp = int(ts) if ts is not None else None
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise PayloadError(f"Malformed position {data!r}: {e}") from e
        return cls(latitude, longitude, str(stamp), timestamp)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "datetime": self.datetime,
            "latitude": self.latitude,
            "longitude": self.longitude,
        }

    @property
    def point(self) -> Point:
        return (self.latitude, self.longitude)


def crosses_antimeridian(lon_a: float, lon_b: float) -> bool:
    """Check whether a step between two longitudes wraps the date line."""
    return abs(lon_a - lon_b) > CROSSING_THRESHOLD_DEG


def age_color(rank: int) -> str:
    """
    Map a historical segment's recency rank to its trail color.

    Args:
        rank: 0 for the newest historical segment, increasing with age

    Returns:
        CSS rgb() color string
    """
    if 0 <= rank < len(AGED_COLORS):
        return AGED_COLORS[rank]
    return PATH_COLOR_0PCT


def split_segments(positions: Sequence[Position]) -> List[List[Point]]:
    """
    Partition a position track into segments at date line crossings.

    Args:
        positions: Positions, oldest first

    Returns:
        List of point lists; consecutive points inside one list never
        differ by more than 180 degrees of longitude
    """
    if not positions:
        return []

    points = [p.point for p in positions]
    lons = np.array([p.longitude for p in positions], dtype=float)
    breaks = np.flatnonzero(np.abs(np.diff(lons)) > CROSSING_THRESHOLD_DEG) + 1

    segments = []
    start = 0
    for stop in breaks.tolist() + [len(points)]:
        segments.append(points[start:stop])
        start = stop
    return segments


@dataclass
class Segment:
    """A closed stretch of trail drawn as one polyline."""

    points: Tuple[Point, ...]
    color: str = PATH_COLOR_75PCT


@dataclass
class PathTrail:
    """
    Bounded trail of historical segments plus the open current segment.

    Historical segments are kept oldest first. At most ``max_segments`` of
    them are retained.
    """

    max_segments: int = 4
    segments: List[Segment] = field(default_factory=list)
    current: List[Point] = field(default_factory=list)

    def load(self, positions: Sequence[Position]) -> bool:
        """
        Replace the trail with a stored position history.

        Keeps only the newest ``max_segments + 1`` segments; the last one
        becomes the current segment. An empty history leaves the trail
        untouched.

        Returns:
            True if the trail was replaced
        """
        if not positions:
            return False

        parts = split_segments(positions)
        keep = self.max_segments + 1
        if len(parts) > keep:
            parts = parts[len(parts) - keep:]

        self.current = list(parts.pop())
        self.segments = [Segment(tuple(p)) for p in parts]
        self.recolor()
        return True

    def add_point(self, point: Point) -> str:
        """
        Extend the trail with a live point.

        Returns:
            "started" if the point opened an empty trail, "crossing" if it
            closed the current segment at the date line, "duplicate" if it
            repeated the last point and was dropped, otherwise "appended"
        """
        if not self.current:
            self.current.append(point)
            return "started"

        last = self.current[-1]
        if crosses_antimeridian(last[1], point[1]):
            self.segments.append(Segment(tuple(self.current)))
            if len(self.segments) > self.max_segments:
                self.segments.pop(0)
            self.current = [point]
            self.recolor()
            return "crossing"

        if last[0] == point[0] and last[1] == point[1]:
            return "duplicate"

        self.current.append(point)
        return "appended"

    def recolor(self):
        """Re-apply age colors so ranks follow recency."""
        newest = len(self.segments) - 1
        for i, segment in enumerate(self.segments):
            segment.color = age_color(newest - i)

    @property
    def segment_count(self) -> int:
        return len(self.segments)

    def visible_points(self) -> int:
        """Count points drawn across the current and historical segments."""
        return len(self.current) + sum(len(s.points) for s in self.segments)

    def polylines(self) -> List[Dict[str, Any]]:
        """
        Get drawable polylines, oldest first, current segment last.

        Returns:
            List of dicts with 'points', 'color' and 'current' keys
        """
        lines = [
            {"points": list(s.points), "color": s.color, "current": False}
            for s in self.segments
        ]
        lines.append(
            {
                "points": list(self.current),
                "color": PATH_COLOR_CURRENT,
                "current": True,
            }
        )
        return lines
