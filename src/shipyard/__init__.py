"""
Shipyard

Progressive delivery of releases across multiple clusters: a strategy
executor deciding step completion and the patches needed to reach it, a
reconcile driver applying them, and fleet maintenance tooling.
"""

__version__ = "1.0.0"

from .strategy import (
    CapacityTargetSpecUpdate,
    ExecutorResult,
    ReleaseInfo,
    ReleaseStatusUpdate,
    TrafficTargetSpecUpdate,
    execute,
)

__all__ = [
    "__version__",
    # Strategy execution - easy access from top level
    "execute",
    "ReleaseInfo",
    "ExecutorResult",
    "ReleaseStatusUpdate",
    "CapacityTargetSpecUpdate",
    "TrafficTargetSpecUpdate",
]
