"""Graph module providing topology and scheduling.

This module contains:
- Topology: In/out-edge adjacency rebuilt fresh for every pass
- kahn_schedule: Kahn's algorithm, isolating nodes in or behind cycles
- topological_sort: Strict variant that raises on cycles
"""

from ._algorithms import Schedule, kahn_schedule, topological_sort
from ._topology import Topology

__all__ = ["Schedule", "Topology", "kahn_schedule", "topological_sort"]
