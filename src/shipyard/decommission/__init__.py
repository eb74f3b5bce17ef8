"""
Fleet Decommission Package

Planning and applying the cleanup of releases scheduled on clusters that are
being taken out of the fleet.
"""

from .planner import (
    ActionType,
    DecommissionPlan,
    ReleaseAction,
    apply_actions,
    collect_releases,
    filter_selected_clusters,
    is_contender,
)

__all__ = [
    "ActionType",
    "DecommissionPlan",
    "ReleaseAction",
    "apply_actions",
    "collect_releases",
    "filter_selected_clusters",
    "is_contender",
]
