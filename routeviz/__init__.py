"""
BFS Routing Visualizer.

An interactive graph editor that animates a breadth-first search between
two nodes. The core is a synchronized graph store plus a traversal engine
that streams discrete events to a renderer.
"""

__version__ = "0.1.0"
