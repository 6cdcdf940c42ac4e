"""
LogicGraph - Region graph extraction from declarative game logic.

Turns boolean requirement expressions over named terms into a directed
graph of regions, transitions and locations. Provides:
- Term registration and macro expansion
- DNF normalization of requirement expressions
- Region graph construction, merging, rebasing and pruning
- Exporters for JSON, generated Python data and DOT graphs
"""

__version__ = "0.1.0"
