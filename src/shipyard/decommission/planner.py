"""
Cleanup of releases scheduled on decommissioned clusters.

Releases scheduled only on decommissioned clusters are deleted unless they are
their application's contender. Releases scheduled partially on them keep
running on the remaining clusters: their clusters annotation is rewritten.
This runs outside the strategy state machine and never touches step progress.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from shipyard.apis import RELEASE_CLUSTERS_ANNOTATION, Release
from shipyard.config import DecommissionConfig
from shipyard.errors import ErrorList, ShipyardError
from shipyard.store import ReleaseStore

logger = logging.getLogger(__name__)


class ActionType(Enum):
    """What happens to a release."""

    DELETE = "DELETE"
    UPDATE = "UPDATE"


@dataclass
class ReleaseAction:
    """A planned change to one release."""

    namespace: str
    name: str
    action: ActionType
    old_clusters: str
    new_clusters: str
    resource_version: int = 0

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"


@dataclass
class DecommissionPlan:
    """Everything a cleanup run would change, and what it failed to inspect."""

    delete: list[ReleaseAction] = field(default_factory=list)
    update: list[ReleaseAction] = field(default_factory=list)
    errors: ErrorList = field(default_factory=ErrorList)

    @property
    def actions(self) -> list[ReleaseAction]:
        return [*self.delete, *self.update]


def filter_selected_clusters(selected: list[str], decommissioned: list[str]) -> list[str]:
    """Clusters in ``selected`` that are still in service."""
    gone = set(decommissioned)
    return [cluster for cluster in selected if cluster not in gone]


def is_contender(release: Release, namespace_releases: list[Release]) -> bool:
    """Whether ``release`` is the latest release of its application."""
    if release.app is None:
        return True
    siblings = [other for other in namespace_releases if other.app == release.app]
    return all(other.generation <= release.generation for other in siblings)


def collect_releases(store: ReleaseStore, config: DecommissionConfig) -> DecommissionPlan:
    """Plan the cleanup of every release touching a decommissioned cluster.

    Failures to inspect a namespace or a release are collected in the plan
    and do not stop the scan.
    """
    plan = DecommissionPlan()

    for namespace in store.list_namespaces():
        try:
            releases = store.list_releases(namespace)
        except ShipyardError as e:
            plan.errors.append(e)
            continue

        for release in releases:
            try:
                selected = release.scheduled_clusters
                filtered = filter_selected_clusters(selected, config.clusters)
                old_clusters = ",".join(selected)

                if filtered:
                    filtered = sorted(filtered)
                    if filtered == sorted(selected):
                        continue
                    plan.update.append(
                        ReleaseAction(
                            namespace=release.namespace,
                            name=release.name,
                            action=ActionType.UPDATE,
                            old_clusters=old_clusters,
                            new_clusters=",".join(filtered),
                            resource_version=release.metadata.resource_version,
                        )
                    )
                    continue

                if not is_contender(release, releases):
                    plan.delete.append(
                        ReleaseAction(
                            namespace=release.namespace,
                            name=release.name,
                            action=ActionType.DELETE,
                            old_clusters=old_clusters,
                            new_clusters="",
                            resource_version=release.metadata.resource_version,
                        )
                    )
                else:
                    logger.warning(
                        f"Release {release.key} runs only on decommissioned clusters "
                        f"but is a contender, leaving it in place"
                    )
            except (ShipyardError, ValueError) as e:
                plan.errors.append(e)

    logger.info(
        f"Planned {len(plan.update)} release updates and {len(plan.delete)} release deletions"
    )
    return plan


def apply_actions(
    store: ReleaseStore, plan: DecommissionPlan, dry_run: bool = False
) -> list[ReleaseAction]:
    """Carry out a plan, returning the actions that were applied.

    Raises ``AggregateError`` listing every action that failed once all
    actions were attempted.
    """
    errors = ErrorList()
    applied: list[ReleaseAction] = []

    for action in plan.actions:
        if dry_run:
            logger.info(f"[dry-run] {action.action.value} release {action.key}")
            continue
        try:
            if action.action is ActionType.DELETE:
                store.delete_release(action.namespace, action.name)
            else:
                store.update_release_annotations(
                    action.namespace,
                    action.name,
                    {RELEASE_CLUSTERS_ANNOTATION: action.new_clusters},
                    action.resource_version,
                )
            applied.append(action)
        except ShipyardError as e:
            logger.error(f"Failed to {action.action.value.lower()} release {action.key}: {e}")
            errors.append(e)

    errors.raise_if_any()
    return applied
