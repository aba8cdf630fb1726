"""
Configuration constants for the BFS Routing Visualizer.

All defaults, tunable timings, and server settings are defined here.
Values that change between deployments are read from environment variables.
"""

import os

from dotenv import load_dotenv

# Pick up a local .env before reading any settings
load_dotenv()

# =============================================================================
# Default Graph
# =============================================================================

# Nodes created at startup and on every reset
DEFAULT_NODES = ("A", "B", "C", "D", "E", "F")

# Two parallel routes between hubs A and D: A-B-D and A-C-E-F-D
DEFAULT_EDGES = (
    ("A", "B"),
    ("A", "C"),
    ("C", "E"),
    ("E", "F"),
    ("F", "D"),
    ("B", "D"),
)

# =============================================================================
# Traversal Configuration
# =============================================================================

# Seconds to wait after each discovery event so a renderer can animate it
PACING_DELAY_SECONDS = float(os.environ.get("BFS_PACING_DELAY", "0.4"))

# Event channel buffer size (0 = unbounded)
EVENT_CHANNEL_MAXSIZE = int(os.environ.get("EVENT_CHANNEL_MAXSIZE", "0"))

# How long a blocked publisher waits per attempt before re-checking cancellation
CHANNEL_PUBLISH_SLICE = 0.05

# Seconds to wait for a cancelled worker to exit before moving on
CANCEL_JOIN_TIMEOUT = 2.0

# =============================================================================
# Layout Configuration (renderer only)
# =============================================================================

# Screen positions for the default nodes, keyed by label
DEFAULT_POSITIONS = {
    "A": (200, 300),
    "B": (300, 200),
    "C": (300, 400),
    "D": (400, 150),
    "E": (400, 450),
    "F": (500, 300),
}

# New nodes are placed on a row: x = NEW_NODE_X0 + (count % NEW_NODE_PER_ROW) * NEW_NODE_DX
NEW_NODE_X0 = 150
NEW_NODE_DX = 100
NEW_NODE_PER_ROW = 5
NEW_NODE_Y = 500

# =============================================================================
# Server Configuration
# =============================================================================

HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "7860"))
SECRET_KEY = os.environ.get("SECRET_KEY", "routeviz-dev-key")

# Base URL used by scripts/watch.py to reach a running server
SERVER_URL = os.environ.get("ROUTEVIZ_URL", f"http://{HOST}:{PORT}")

# HTTP timeout for the watcher script, in seconds
HTTP_TIMEOUT = 10

# Seconds between event polls in the watcher script
POLL_INTERVAL = 0.2

# =============================================================================
# Logging Configuration
# =============================================================================

# Log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
