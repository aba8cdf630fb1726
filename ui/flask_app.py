"""
Flask front end for the BFS Routing Visualizer.

Draws the graph as SVG, exposes the graph edits and search runs as JSON
endpoints, and animates a search by polling its event stream.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field

from flask import Flask, current_app, jsonify, render_template_string, request

from routeviz.config import (
    DEFAULT_POSITIONS,
    HOST,
    LOG_FORMAT,
    LOG_LEVEL,
    NEW_NODE_DX,
    NEW_NODE_PER_ROW,
    NEW_NODE_X0,
    NEW_NODE_Y,
    PACING_DELAY_SECONDS,
    PORT,
    SECRET_KEY,
)
from routeviz.graph import DuplicateNode, GraphStore, InvalidNodeId, UnknownNode
from routeviz.traversal import TraversalEngine

logger = logging.getLogger(__name__)

# ====================
# Layout State
# ====================


@dataclass
class Visualizer:
    """Graph, search engine, and the screen positions the renderer owns."""

    store: GraphStore
    engine: TraversalEngine
    positions: dict[str, tuple[int, int]] = field(default_factory=lambda: dict(DEFAULT_POSITIONS))
    added_count: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def place_new_node(self, label: str) -> tuple[int, int]:
        with self._lock:
            x = NEW_NODE_X0 + (self.added_count % NEW_NODE_PER_ROW) * NEW_NODE_DX
            self.positions[label] = (x, NEW_NODE_Y)
            self.added_count += 1
            return self.positions[label]

    def forget_node(self, label: str) -> None:
        with self._lock:
            self.positions.pop(label, None)

    def reset_layout(self) -> None:
        with self._lock:
            self.positions = dict(DEFAULT_POSITIONS)
            self.added_count = 0

    def graph_payload(self) -> dict:
        with self._lock:
            positions = dict(self.positions)
        nodes = []
        for label in self.store.nodes():
            x, y = positions.get(label, (0, 0))
            nodes.append({"label": label, "x": x, "y": y})
        return {
            "nodes": nodes,
            "edges": [list(edge) for edge in self.store.edges()],
            "generation": self.store.generation,
        }


def get_visualizer() -> Visualizer:
    return current_app.extensions["routeviz"]


def normalize_label(value: object) -> str:
    """Labels typed by users are trimmed and upper-cased."""
    if not isinstance(value, str):
        return ""
    return value.strip().upper()


# ====================
# HTML Template
# ====================

PAGE_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>BFS Routing Visualizer</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body { font-family: Consolas, monospace; background: #0d0d0d; color: #eee; display: flex; }
        svg { background: #0d0d0d; }
        .panel { display: flex; flex-direction: column; gap: 10px; padding: 20px; width: 260px; }
        select, input, button { background: #222; color: #fff; border: 1px solid #00ffcc; padding: 8px; font-family: inherit; }
        button { cursor: pointer; }
        button:hover { background: #333; }
        .status { color: #00ffcc; min-height: 1.5em; font-size: 13px; }
        circle.node { fill: #3c9aff; stroke: #00ffe1; stroke-width: 2; filter: drop-shadow(0 0 8px #00ffe1); }
        circle.visited { fill: lime; }
        circle.discovered { fill: orange; }
        line.edge { stroke: darkgray; stroke-width: 2; }
        line.path { stroke: #00ffcc; stroke-width: 4; }
        text { fill: white; font-size: 14px; pointer-events: none; }
    </style>
</head>
<body>
    <svg id="canvas" width="{{ width }}" height="{{ height }}"></svg>
    <div class="panel">
        <select id="start"></select>
        <select id="end"></select>
        <button onclick="runBfs()">Run BFS</button>
        <button onclick="addEdge('A', 'F')">Add Edge A-F</button>
        <input id="label" placeholder="Node Label">
        <select id="connect"><option value="">(no connection)</option></select>
        <button onclick="addNode()">Add Node</button>
        <select id="remove"></select>
        <button onclick="removeNode()">Remove Node</button>
        <button onclick="resetGraph()">Reset Graph</button>
        <div class="status" id="status"></div>
    </div>
    <script>
        const svg = document.getElementById('canvas');
        const NS = 'http://www.w3.org/2000/svg';
        let graph = {nodes: [], edges: []};
        let runId = null;
        let pollDelay = {{ poll_ms }};

        function status(msg) { document.getElementById('status').textContent = msg; }

        async function api(method, url, body) {
            const r = await fetch(url, {
                method, headers: {'Content-Type': 'application/json'},
                body: body ? JSON.stringify(body) : undefined,
            });
            const data = r.status === 204 ? {} : await r.json();
            if (!r.ok) throw new Error(data.error || r.statusText);
            return data;
        }

        function position(label) { return graph.nodes.find(n => n.label === label); }

        function draw() {
            svg.innerHTML = '';
            for (const [a, b] of graph.edges) drawLine(a, b, 'edge');
            for (const n of graph.nodes) {
                const c = document.createElementNS(NS, 'circle');
                c.setAttribute('cx', n.x); c.setAttribute('cy', n.y); c.setAttribute('r', 20);
                c.setAttribute('class', 'node'); c.id = 'node-' + n.label;
                svg.appendChild(c);
                const t = document.createElementNS(NS, 'text');
                t.setAttribute('x', n.x - 5); t.setAttribute('y', n.y + 5); t.textContent = n.label;
                svg.appendChild(t);
            }
            const labels = graph.nodes.map(n => n.label);
            for (const id of ['start', 'end', 'remove']) fill(id, labels, false);
            fill('connect', labels, true);
        }

        function fill(id, labels, blank) {
            const el = document.getElementById(id);
            const keep = el.value;
            el.innerHTML = blank ? '<option value="">(no connection)</option>' : '';
            for (const l of labels) el.add(new Option(l, l));
            if (labels.includes(keep)) el.value = keep;
        }

        function drawLine(a, b, cls) {
            const p = position(a), q = position(b);
            if (!p || !q) return;
            const l = document.createElementNS(NS, 'line');
            l.setAttribute('x1', p.x); l.setAttribute('y1', p.y);
            l.setAttribute('x2', q.x); l.setAttribute('y2', q.y);
            l.setAttribute('class', cls);
            svg.insertBefore(l, svg.querySelector('circle'));
        }

        function mark(label, cls) {
            const c = document.getElementById('node-' + label);
            if (c) c.setAttribute('class', 'node ' + cls);
        }

        async function refresh() { graph = await api('GET', '/api/graph'); draw(); }

        async function poll(id) {
            if (id !== runId) return;
            const data = await api('GET', '/api/bfs/events?run_id=' + id).catch(() => null);
            if (!data) return;
            for (const e of data.events) {
                if (e.type === 'visit') mark(e.node, 'visited');
                else if (e.type === 'discover') mark(e.node, 'discovered');
                else if (e.type === 'path') drawLine(e.source, e.target, 'path');
                else if (e.type === 'finished') status(e.cancelled ? 'Cancelled' : (e.found ? 'Path found' : 'No path'));
            }
            if (!data.done) setTimeout(() => poll(id), pollDelay);
        }

        async function runBfs() {
            try {
                await refresh();
                const data = await api('POST', '/api/bfs', {
                    start: document.getElementById('start').value,
                    end: document.getElementById('end').value,
                });
                runId = data.run_id;
                status('Searching...');
                poll(runId);
            } catch (err) { status(err.message); }
        }

        async function addEdge(a, b) {
            try { await api('POST', '/api/edges', {a, b}); await refresh(); } catch (err) { status(err.message); }
        }

        async function addNode() {
            const connect = document.getElementById('connect').value;
            try {
                await api('POST', '/api/nodes', {label: document.getElementById('label').value, connect_to: connect || null});
                document.getElementById('label').value = '';
                await refresh();
            } catch (err) { status(err.message); }
        }

        async function removeNode() {
            try {
                await api('DELETE', '/api/nodes/' + encodeURIComponent(document.getElementById('remove').value));
                await refresh();
            } catch (err) { status(err.message); }
        }

        async function resetGraph() {
            runId = null;
            try { await api('POST', '/api/reset'); await refresh(); status(''); } catch (err) { status(err.message); }
        }

        refresh();
    </script>
</body>
</html>
"""


# ====================
# App Factory
# ====================


def create_app(
    store: GraphStore | None = None,
    engine: TraversalEngine | None = None,
    pacing_delay: float | None = None,
) -> Flask:
    """
    Build the Flask app.

    Args:
        store: Graph to edit (default: a fresh default graph)
        engine: Search engine (default: one bound to store)
        pacing_delay: Seconds between discovery events for the default engine
    """
    app = Flask(__name__)
    app.secret_key = SECRET_KEY

    if store is None:
        store = engine.store if engine is not None else GraphStore()
    if engine is None:
        engine = TraversalEngine(
            store,
            pacing_delay=PACING_DELAY_SECONDS if pacing_delay is None else pacing_delay,
        )
    app.extensions["routeviz"] = Visualizer(store=store, engine=engine)

    @app.errorhandler(UnknownNode)
    def handle_unknown(e: UnknownNode):
        return jsonify({"error": str(e), "node": e.node}), 404

    @app.errorhandler(InvalidNodeId)
    def handle_invalid(e: InvalidNodeId):
        return jsonify({"error": str(e)}), 400

    @app.errorhandler(DuplicateNode)
    def handle_duplicate(e: DuplicateNode):
        return jsonify({"error": str(e), "node": e.node}), 409

    @app.route("/")
    def index():
        return render_template_string(PAGE_TEMPLATE, width=600, height=600, poll_ms=100)

    @app.route("/api/graph")
    def graph():
        return jsonify(get_visualizer().graph_payload())

    @app.route("/api/nodes", methods=["POST"])
    def add_node():
        viz = get_visualizer()
        data = request.get_json(silent=True) or {}
        label = normalize_label(data.get("label"))
        connect_to = normalize_label(data.get("connect_to")) or None

        viz.store.add_node(label, connect_to=connect_to)
        x, y = viz.place_new_node(label)
        logger.info(f"Node {label!r} added at ({x}, {y})")
        return jsonify({"label": label, "x": x, "y": y, "connect_to": connect_to}), 201

    @app.route("/api/nodes/<label>", methods=["DELETE"])
    def remove_node(label: str):
        viz = get_visualizer()
        label = normalize_label(label)
        viz.store.remove_node(label)
        viz.forget_node(label)
        logger.info(f"Node {label!r} removed")
        return "", 204

    @app.route("/api/edges", methods=["POST"])
    def add_edge():
        viz = get_visualizer()
        data = request.get_json(silent=True) or {}
        a = normalize_label(data.get("a"))
        b = normalize_label(data.get("b"))
        if not a or not b:
            return jsonify({"error": "Both 'a' and 'b' are required"}), 400

        added = viz.store.add_edge(a, b)
        return jsonify({"a": a, "b": b, "added": added}), 201 if added else 200

    @app.route("/api/reset", methods=["POST"])
    def reset():
        viz = get_visualizer()
        viz.engine.cancel()
        viz.store.reset()
        viz.reset_layout()
        return jsonify(viz.graph_payload())

    @app.route("/api/bfs", methods=["POST"])
    def start_bfs():
        viz = get_visualizer()
        data = request.get_json(silent=True) or {}
        start = normalize_label(data.get("start"))
        end = normalize_label(data.get("end"))
        if not start or not end:
            return jsonify({"error": "Both 'start' and 'end' are required"}), 400

        run = viz.engine.run(start, end)
        return jsonify({"run_id": run.run_id, "start": start, "end": end}), 202

    @app.route("/api/bfs/events")
    def bfs_events():
        viz = get_visualizer()
        run = viz.engine.current
        run_id = request.args.get("run_id", type=int)
        if run is None or run_id != run.run_id:
            return jsonify({"error": f"No active run with id {run_id}"}), 404

        events = run.channel.drain()
        return jsonify({
            "run_id": run.run_id,
            "events": [event.to_dict() for event in events],
            "done": run.channel.finished,
        })

    @app.route("/api/bfs/cancel", methods=["POST"])
    def cancel_bfs():
        viz = get_visualizer()
        run = viz.engine.current
        viz.engine.cancel()
        return jsonify({"run_id": run.run_id if run else None})

    return app


app = create_app()


# ====================
# Main
# ====================

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)

    print("\n=== BFS Routing Visualizer ===")
    print(f"Open http://{HOST}:{PORT} in your browser\n")

    app.run(host=HOST, port=PORT, debug=False)
