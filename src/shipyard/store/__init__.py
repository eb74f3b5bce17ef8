"""
Object Store Package

The CRUD collaborator the reconcile driver and the fleet tooling talk to, and
an in-memory implementation that reads and writes YAML fleet snapshots.
"""

from .base import ReleaseStore
from .memory import InMemoryReleaseStore

__all__ = ["ReleaseStore", "InMemoryReleaseStore"]
