"""
ISS Trail Tracker
"""

import json
import os
import threading

from flask import Flask, jsonify, render_template, request

from iss_tracker.config import CONFIG
from iss_tracker.database import db
from iss_tracker.renderer import map_views
from iss_tracker.scheduler import trail_poller, tracking_task
from iss_tracker.utils import log

# Initialize Flask app with templates from the project root; no static files
_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
app = Flask(
    __name__,
    template_folder=os.path.join(_project_root, "templates"),
    static_folder=None,
)


def start_background_tasks():
    """Start the tracking and trail poller threads."""
    db.init_db()

    if CONFIG.run_tracker:
        tracker_thread = threading.Thread(target=tracking_task.run_forever)
        tracker_thread.daemon = True
        tracker_thread.start()
        log("SYSTEM", "Background tracking task started")

    if CONFIG.run_viewer:
        viewer_thread = threading.Thread(target=trail_poller.run_forever)
        viewer_thread.daemon = True
        viewer_thread.start()
        log("SYSTEM", "Background trail poller started")


# ---------------------------------------------------------
# POSITION API
# ---------------------------------------------------------


@app.route("/api/positions")
def api_positions():
    """Get the full stored position history."""
    positions = db.get_positions()
    last_update = positions[-1].datetime if positions else None
    return jsonify(
        {
            "count": len(positions),
            "last_update": last_update,
            "positions": [p.to_dict() for p in positions],
        }
    )


@app.route("/api/latest")
def api_latest():
    """Get the newest stored position."""
    latest = db.get_latest()
    return jsonify(
        {
            "last_update": latest.datetime if latest else None,
            "position": latest.to_dict() if latest else None,
        }
    )


@app.route("/api/status")
def api_status():
    """Get tracker status."""
    latest = db.get_latest()
    return jsonify(
        {
            "positions_stored": db.count(),
            "max_positions": db.max_positions,
            "update_interval": CONFIG.poll_interval,
            "last_update": latest.datetime if latest else None,
        }
    )


# ---------------------------------------------------------
# MAP VIEW
# ---------------------------------------------------------


@app.route("/api/trail")
def api_trail():
    """Get the current map figure and status panel."""
    map_view = map_views.get(request.args.get("view"))
    snapshot = trail_poller.snapshot()
    fig = map_view.figure(snapshot)
    return jsonify(
        {
            "figure": json.loads(fig.to_json()),
            "panel": snapshot["panel"],
            "view": map_view.as_dict(),
        }
    )


@app.route("/api/view/reset", methods=["POST"])
def api_view_reset():
    """Recenter the map at the current zoom."""
    zoom = None
    body = request.get_json(silent=True) if request.is_json else None
    if isinstance(body, dict):
        zoom = body.get("zoom")
    try:
        zoom = float(zoom) if zoom is not None else None
    except (TypeError, ValueError):
        return jsonify({"error": f"Invalid zoom: {zoom!r}"}), 400
    map_view = map_views.get(request.args.get("view"))
    return jsonify(map_view.reset(zoom=zoom))


@app.route("/api/view/terrain", methods=["POST"])
def api_view_terrain():
    """Toggle between street and terrain tiles."""
    view = map_views.get(request.args.get("view")).toggle_terrain()
    log("VIEW", f"Terrain view {'on' if view['terrain'] else 'off'}")
    return jsonify(view)


# ---------------------------------------------------------
# MAIN PAGE
# ---------------------------------------------------------


@app.route("/")
def index():
    """Render main page with the initial map."""
    view_id = map_views.create()
    map_view = map_views.get(view_id)
    snapshot = trail_poller.snapshot()
    fig = map_view.figure(snapshot)
    return render_template(
        "index.html",
        fig_json=fig.to_json(),
        panel=snapshot["panel"],
        view=map_view.as_dict(),
        view_id=view_id,
        update_interval_ms=CONFIG.update_interval_ms,
    )
