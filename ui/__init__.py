"""
Web UI module.

Provides the Flask front end for the BFS Routing Visualizer:
- Graph editing (add/remove nodes, add edges, reset)
- Animated BFS runs driven by the traversal event stream
"""
