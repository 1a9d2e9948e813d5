"""
Map rendering for the ISS trail.
Builds plotly map figures and holds the view controls.
"""

import threading
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional

import plotly.graph_objects as go  # type: ignore

from iss_tracker.config import CONFIG

TERRAIN_LABEL_OFF = "Show Terrain"
TERRAIN_LABEL_ON = "Show Street Map"


def tile_layer(terrain: bool) -> Dict[str, Any]:
    """Get the street or terrain raster tile layer for the plotly map."""
    if terrain:
        source = CONFIG.terrain_tiles
        attribution = CONFIG.terrain_attribution
    else:
        source = CONFIG.street_tiles
        attribution = CONFIG.street_attribution
    return {
        "below": "traces",
        "sourcetype": "raster",
        "sourceattribution": attribution,
        "source": [source],
    }


class MapView:
    """View state of the map: center, zoom and active tile layer."""

    def __init__(
        self,
        center: Optional[List[float]] = None,
        zoom: Optional[float] = None,
    ):
        self._lock = threading.Lock()
        self.home = list(center) if center is not None else CONFIG.map_center
        self.center = list(self.home)
        self.zoom = zoom if zoom is not None else CONFIG.map_zoom
        self.terrain = False
        self.revision = 0

    def reset(self, zoom: Optional[float] = None) -> Dict[str, Any]:
        """
        Recenter on the home coordinate, keeping the current zoom.

        Args:
            zoom: Zoom the browser is currently showing, if known
        """
        with self._lock:
            if zoom is not None:
                self.zoom = zoom
            self.center = list(self.home)
            self.revision += 1
        return self.as_dict()

    def toggle_terrain(self) -> Dict[str, Any]:
        """Switch between the street and terrain tile layers."""
        with self._lock:
            self.terrain = not self.terrain
        return self.as_dict()

    @property
    def button_label(self) -> str:
        return TERRAIN_LABEL_ON if self.terrain else TERRAIN_LABEL_OFF

    def as_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "center": list(self.center),
                "zoom": self.zoom,
                "terrain": self.terrain,
                "revision": self.revision,
                "button_label": self.button_label,
            }

    def figure(self, snapshot: Dict[str, Any]) -> go.Figure:
        """
        Build the map figure for a trail snapshot.

        Args:
            snapshot: Output of ``TrailPoller.snapshot()``

        Returns:
            plotly Figure with one line trace per segment and the marker
        """
        fig = go.Figure()

        for line in snapshot["polylines"]:
            points = line["points"]
            fig.add_trace(
                go.Scattermap(
                    lat=[p[0] for p in points],
                    lon=[p[1] for p in points],
                    mode="lines",
                    line={"color": line["color"], "width": 2},
                    name="Current path" if line["current"] else "Past path",
                    hoverinfo="skip",
                    showlegend=False,
                )
            )

        marker = snapshot.get("marker")
        if marker is not None:
            fig.add_trace(
                go.Scattermap(
                    lat=[marker[0]],
                    lon=[marker[1]],
                    mode="markers",
                    marker={"size": 14, "color": "#1e90ff"},
                    name="ISS",
                    text=["ISS"],
                    showlegend=False,
                )
            )

        # Everything below comes from one locked read of the view
        view = self.as_dict()
        fig.update_layout(
            map={
                "style": "white-bg",
                "center": {"lat": view["center"][0], "lon": view["center"][1]},
                "zoom": view["zoom"],
                "layers": [tile_layer(view["terrain"])],
            },
            margin={"t": 0, "b": 0, "l": 0, "r": 0},
            uirevision=view["revision"],
        )
        return fig


class ViewRegistry:
    """
    Map views keyed by page.

    Each page load gets its own view id, so resetting or switching tiles in
    one browser tab leaves the others alone. The oldest views are dropped
    once ``max_views`` is reached.
    """

    def __init__(
        self,
        max_views: int = 256,
        center: Optional[List[float]] = None,
        zoom: Optional[float] = None,
    ):
        self.max_views = max_views
        self.center = center
        self.zoom = zoom
        self._lock = threading.Lock()
        self._views: "OrderedDict[str, MapView]" = OrderedDict()

    def _new_view(self) -> MapView:
        return MapView(center=self.center, zoom=self.zoom)

    def create(self) -> str:
        """Register a fresh view and return its id."""
        view_id = uuid.uuid4().hex
        with self._lock:
            self._views[view_id] = self._new_view()
            while len(self._views) > self.max_views:
                self._views.popitem(last=False)
        return view_id

    def get(self, view_id: Optional[str]) -> MapView:
        """
        Look up a page's view.

        Unknown or expired ids get a new view registered under the same id,
        so a long-open tab keeps working after eviction.
        """
        if not view_id:
            return self._new_view()
        with self._lock:
            view = self._views.get(view_id)
            if view is None:
                view = self._new_view()
                self._views[view_id] = view
                while len(self._views) > self.max_views:
                    self._views.popitem(last=False)
            else:
                self._views.move_to_end(view_id)
            return view

    def __len__(self) -> int:
        with self._lock:
            return len(self._views)


# Global view registry
map_views = ViewRegistry()
