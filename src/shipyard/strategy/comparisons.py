"""Achievement predicates and retargeting for installation, capacity and traffic."""

import re
from enum import Enum

from shipyard.apis import (
    CapacityTarget,
    CapacityTargetSpec,
    ClusterCapacityTarget,
    ClusterStatus,
    ClusterTrafficTarget,
    InstallationTarget,
    StrategyStep,
    TrafficTarget,
    TrafficTargetSpec,
)
from shipyard.errors import InvalidStepValueError

_PERCENTAGE = re.compile(r"^[+]?[0-9]+$")


class ComparisonPolicy(Enum):
    """Direction an actor's achieved values move in during a step."""

    ASCENDING = "ascending"  # contender scales up toward the step
    DESCENDING = "descending"  # incumbent hands over and scales down

    def aggregate(self, values: list[int]) -> int:
        """Fleet-wide achieved value: the cluster furthest from done."""
        return min(values) if self is ComparisonPolicy.ASCENDING else max(values)

    def satisfied(self, achieved: int, target: int) -> bool:
        if self is ComparisonPolicy.ASCENDING:
            return achieved >= target
        return achieved <= target

    def achieved(self, observed: dict[str, int], clusters: list[str], target: int) -> bool:
        """Whether every cluster in ``clusters`` reports a value past ``target``.

        A cluster without an observed value has not achieved anything yet.
        """
        values = []
        for cluster in clusters:
            if cluster not in observed:
                return False
            values.append(observed[cluster])
        if not values:
            return True
        return self.satisfied(self.aggregate(values), target)


class CheckOrder(Enum):
    """Which sub-resource an actor has to converge first."""

    CAPACITY_FIRST = "capacity_first"
    TRAFFIC_FIRST = "traffic_first"


def parse_percentage(value: str, *, release: str, step: int, field_name: str) -> int:
    if not isinstance(value, str) or not _PERCENTAGE.match(value.strip()):
        raise InvalidStepValueError(release, step, field_name, str(value))
    parsed = int(value.strip())
    if parsed > 100:
        raise InvalidStepValueError(release, step, field_name, value)
    return parsed


def parse_actor_step(step: StrategyStep, role: str, *, release: str, index: int) -> tuple[int, int]:
    """Parse the capacity and traffic percentages ``role`` is held to in ``step``."""
    capacity_field, traffic_field = f"{role}_capacity", f"{role}_traffic"
    capacity = parse_percentage(
        getattr(step, capacity_field), release=release, step=index, field_name=capacity_field
    )
    traffic = parse_percentage(
        getattr(step, traffic_field), release=release, step=index, field_name=traffic_field
    )
    return capacity, traffic


def check_installation(installation_target: InstallationTarget) -> bool:
    """Installation is complete once every cluster reports Installed."""
    statuses = {entry.name: entry.status for entry in installation_target.status}
    return all(
        statuses.get(cluster) == ClusterStatus.INSTALLED.value
        for cluster in installation_target.clusters
    )


def check_capacity(
    capacity_target: CapacityTarget, target: int, policy: ComparisonPolicy
) -> tuple[bool, CapacityTargetSpec | None]:
    """Compare achieved capacity against ``target``.

    Returns ``(achieved, new_spec)``. ``new_spec`` is only set when the
    capacity target is not achieved and its spec is not already asking for
    ``target`` on every cluster.
    """
    clusters = [entry.name for entry in capacity_target.spec.clusters]
    observed = {entry.name: entry.achieved_replicas for entry in capacity_target.status}

    if policy.achieved(observed, clusters, target):
        return True, None

    if all(entry.replicas == target for entry in capacity_target.spec.clusters):
        return False, None

    return False, CapacityTargetSpec(
        clusters=[ClusterCapacityTarget(name=name, replicas=target) for name in clusters]
    )


def check_traffic(
    traffic_target: TrafficTarget, target: int, policy: ComparisonPolicy
) -> tuple[bool, TrafficTargetSpec | None]:
    """Compare achieved traffic weight against ``target``; see check_capacity."""
    clusters = [entry.name for entry in traffic_target.spec.clusters]
    observed = {entry.name: entry.achieved_traffic for entry in traffic_target.status}

    if policy.achieved(observed, clusters, target):
        return True, None

    if all(entry.target_traffic == target for entry in traffic_target.spec.clusters):
        return False, None

    return False, TrafficTargetSpec(
        clusters=[ClusterTrafficTarget(name=name, target_traffic=target) for name in clusters]
    )
