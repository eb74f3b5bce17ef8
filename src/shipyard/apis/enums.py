"""
Release API Enums

Core enumeration types for release phases and per-cluster object status.
"""

from enum import Enum


class ReleasePhase(Enum):
    """Release lifecycle phases."""

    WAITING_FOR_SCHEDULING = "WaitingForScheduling"
    WAITING_FOR_STRATEGY = "WaitingForStrategy"
    WAITING_FOR_COMMAND = "WaitingForCommand"
    INSTALLED = "Installed"
    SUPERSEDED = "Superseded"


class ClusterStatus(Enum):
    """Per-cluster status reported by the cluster-sync controllers."""

    INSTALLED = "Installed"
    PENDING = "Pending"
    FAILED = "Failed"
    READY = "Ready"
