"""
Development server for ISS Trail Tracker.

Run:
    python server.py --max-positions 15000 --poll-interval 2 --timeout 3
"""

import argparse

from iss_tracker.app import app, start_background_tasks
from iss_tracker.config import CONFIG
from iss_tracker.scheduler import trail_poller, tracking_task
from iss_tracker.utils import log


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Track the ISS and map its trail")
    p.add_argument(
        "-m",
        "--max-positions",
        type=int,
        help="How many ISS positions to keep stored",
    )
    p.add_argument(
        "-p",
        "--poll-interval",
        type=int,
        help="Seconds between ISS position checks",
    )
    p.add_argument(
        "-t",
        "--timeout",
        type=int,
        help="Seconds to wait before timing out a position check",
    )
    p.add_argument("--host", help="Address to bind")
    p.add_argument("--port", type=int, help="Port to bind")
    return p


def apply_overrides(args: argparse.Namespace):
    """Push command-line values into the config and the running tasks."""
    CONFIG.override("tracker", "max_positions", args.max_positions)
    CONFIG.override("tracker", "poll_interval", args.poll_interval)
    CONFIG.override("tracker", "timeout", args.timeout)
    CONFIG.override("server", "dev_host", args.host)
    CONFIG.override("server", "dev_port", args.port)

    tracking_task.poll_interval = CONFIG.poll_interval
    tracking_task.client.timeout = CONFIG.timeout
    trail_poller.client.base_url = CONFIG.api_base_url


def main(argv=None):
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    host = CONFIG.dev_host
    port = CONFIG.dev_port

    log(
        "SYSTEM",
        f"ISS Tracker starting with {CONFIG.max_positions} position history",
    )
    start_background_tasks()
    log("SYSTEM", f"Server running: http://{host}:{port}")

    app.run(host=host, port=port, debug=False, use_reloader=False)


if __name__ == "__main__":
    main()
