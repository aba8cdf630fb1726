#!/usr/bin/env python3
"""
Watch a BFS on a running visualizer server.

Starts a search through the server's JSON API and prints its events as
they arrive, so the animation can be followed from a terminal.

Usage:
    python -m ui.flask_app &
    python scripts/watch.py --start A --end D
    python scripts/watch.py --start A --end D --url http://localhost:7860
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import requests

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from routeviz.config import HTTP_TIMEOUT, POLL_INTERVAL, SERVER_URL  # noqa: E402


class WatchError(Exception):
    """The server rejected a request."""


def start_run(session: requests.Session, base_url: str, start: str, end: str) -> int:
    """Start a search and return its run id."""
    response = session.post(
        f"{base_url}/api/bfs",
        json={"start": start, "end": end},
        timeout=HTTP_TIMEOUT,
    )
    if response.status_code != 202:
        raise WatchError(response.json().get("error", response.reason))
    return response.json()["run_id"]


def follow_run(session: requests.Session, base_url: str, run_id: int):
    """Yield event dicts for a run until it finishes."""
    while True:
        response = session.get(
            f"{base_url}/api/bfs/events",
            params={"run_id": run_id},
            timeout=HTTP_TIMEOUT,
        )
        if response.status_code == 404:
            raise WatchError(f"Run {run_id} was replaced by another run or a reset")
        response.raise_for_status()

        data = response.json()
        yield from data["events"]
        if data["done"]:
            return
        time.sleep(POLL_INTERVAL)


def format_event(event: dict) -> str:
    kind = event["type"]
    if kind == "visit":
        return f"visit     {event['node']}"
    if kind == "discover":
        return f"discover  {event['node']} (via {event['parent']})"
    if kind == "path":
        return f"path      {event['source']} -> {event['target']}"
    if event.get("cancelled"):
        return "finished  cancelled"
    return "finished  " + ("path found" if event["found"] else "no path")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Watch a BFS on a running visualizer server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--start", type=str, required=True, help="Start node label")
    parser.add_argument("--end", type=str, required=True, help="End node label")
    parser.add_argument("--url", type=str, default=SERVER_URL, help=f"Server URL (default: {SERVER_URL})")
    args = parser.parse_args()

    base_url = args.url.rstrip("/")
    with requests.Session() as session:
        try:
            run_id = start_run(session, base_url, args.start, args.end)
            print(f"Run {run_id}: {args.start} -> {args.end}")
            for event in follow_run(session, base_url, run_id):
                print(f"[{event['seq']:>3}] {format_event(event)}")
        except WatchError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        except requests.RequestException as e:
            print(f"Could not reach {base_url}: {e}", file=sys.stderr)
            return 2

    return 0


if __name__ == "__main__":
    sys.exit(main())
