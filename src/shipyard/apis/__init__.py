"""
Release API Package

Object definitions read by the strategy executor and written by the reconcile
driver: releases, strategies and the per-cluster installation, capacity and
traffic targets.
"""

from .enums import ClusterStatus, ReleasePhase
from .models import (
    APP_LABEL,
    RELEASE_CLUSTERS_ANNOTATION,
    RELEASE_GENERATION_ANNOTATION,
    CapacityTarget,
    CapacityTargetSpec,
    Chart,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterInstallationStatus,
    ClusterTrafficStatus,
    ClusterTrafficTarget,
    InstallationTarget,
    ObjectMeta,
    Release,
    ReleaseEnvironment,
    ReleaseSpec,
    ReleaseStatus,
    Strategy,
    StrategyStep,
    TrafficTarget,
    TrafficTargetSpec,
)

__all__ = [
    # Enums
    "ClusterStatus",
    "ReleasePhase",
    # Labels and annotations
    "APP_LABEL",
    "RELEASE_CLUSTERS_ANNOTATION",
    "RELEASE_GENERATION_ANNOTATION",
    # Models
    "ObjectMeta",
    "Chart",
    "Release",
    "ReleaseEnvironment",
    "ReleaseSpec",
    "ReleaseStatus",
    "Strategy",
    "StrategyStep",
    "InstallationTarget",
    "ClusterInstallationStatus",
    "CapacityTarget",
    "CapacityTargetSpec",
    "ClusterCapacityTarget",
    "ClusterCapacityStatus",
    "TrafficTarget",
    "TrafficTargetSpec",
    "ClusterTrafficTarget",
    "ClusterTrafficStatus",
]
