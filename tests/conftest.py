"""
Global pytest configuration and fixtures for Shipyard testing.

Builders for releases, strategies and target objects shared by the unit,
controller and CLI tests.
"""

from typing import Any

import pytest

from shipyard.apis import (
    APP_LABEL,
    RELEASE_GENERATION_ANNOTATION,
    CapacityTarget,
    CapacityTargetSpec,
    ClusterCapacityStatus,
    ClusterCapacityTarget,
    ClusterInstallationStatus,
    ClusterStatus,
    ClusterTrafficStatus,
    ClusterTrafficTarget,
    InstallationTarget,
    ObjectMeta,
    Release,
    ReleaseEnvironment,
    ReleasePhase,
    ReleaseSpec,
    ReleaseStatus,
    Strategy,
    StrategyStep,
    TrafficTarget,
    TrafficTargetSpec,
)
from shipyard.store import InMemoryReleaseStore
from shipyard.strategy import ReleaseInfo

TEST_NAMESPACE = "test"
TEST_CLUSTERS = ["kind-eu", "kind-us"]
STRATEGY_NAME = "vanguard"


def build_strategy(*steps: tuple[Any, Any, Any, Any], name: str = STRATEGY_NAME) -> Strategy:
    """Strategy from (contender capacity, contender traffic, incumbent capacity, incumbent traffic)."""
    return Strategy(
        metadata=ObjectMeta(name=name, namespace=TEST_NAMESPACE),
        steps=[
            StrategyStep(
                contender_capacity=str(cc),
                contender_traffic=str(ct),
                incumbent_capacity=str(ic),
                incumbent_traffic=str(it),
            )
            for cc, ct, ic, it in steps
        ],
    )


def build_release_info(
    name: str,
    *,
    target_step: int = 0,
    achieved_step: int = 0,
    phase: ReleasePhase = ReleasePhase.WAITING_FOR_STRATEGY,
    generation: int = 1,
    clusters: list[str] | None = None,
    installed: bool = True,
    capacity: tuple[int, int] = (0, 0),
    traffic: tuple[int, int] = (0, 0),
) -> ReleaseInfo:
    """A release with its three targets.

    ``capacity`` and ``traffic`` are ``(desired, achieved)`` on every cluster.
    """
    clusters = list(clusters or TEST_CLUSTERS)

    def meta() -> ObjectMeta:
        return ObjectMeta(name=name, namespace=TEST_NAMESPACE)

    release = Release(
        metadata=ObjectMeta(
            name=name,
            namespace=TEST_NAMESPACE,
            labels={APP_LABEL: "test-app"},
            annotations={RELEASE_GENERATION_ANNOTATION: str(generation)},
        ),
        environment=ReleaseEnvironment(clusters=clusters, strategy=STRATEGY_NAME),
        spec=ReleaseSpec(target_step=target_step),
        status=ReleaseStatus(achieved_step=achieved_step, phase=phase),
    )
    install_status = ClusterStatus.INSTALLED if installed else ClusterStatus.PENDING
    return ReleaseInfo(
        release=release,
        installation_target=InstallationTarget(
            metadata=meta(),
            clusters=clusters,
            status=[ClusterInstallationStatus(name=c, status=install_status.value) for c in clusters],
        ),
        capacity_target=CapacityTarget(
            metadata=meta(),
            spec=CapacityTargetSpec(
                clusters=[ClusterCapacityTarget(name=c, replicas=capacity[0]) for c in clusters]
            ),
            status=[
                ClusterCapacityStatus(name=c, achieved_replicas=capacity[1], status="Ready")
                for c in clusters
            ],
        ),
        traffic_target=TrafficTarget(
            metadata=meta(),
            spec=TrafficTargetSpec(
                clusters=[ClusterTrafficTarget(name=c, target_traffic=traffic[0]) for c in clusters]
            ),
            status=[
                ClusterTrafficStatus(name=c, achieved_traffic=traffic[1], status="Ready")
                for c in clusters
            ],
        ),
    )


def build_store(strategy: Strategy, *infos: ReleaseInfo) -> InMemoryReleaseStore:
    store = InMemoryReleaseStore()
    store.add(strategy)
    for info in infos:
        for obj in (
            info.release,
            info.installation_target,
            info.capacity_target,
            info.traffic_target,
        ):
            if obj is not None:
                store.add(obj)
    return store


@pytest.fixture
def two_step_strategy() -> Strategy:
    """Half the capacity and traffic first, everything second."""
    return build_strategy((50, 50, 50, 50), (100, 100, 0, 0))


@pytest.fixture
def three_step_strategy() -> Strategy:
    return build_strategy((1, 1, 100, 100), (50, 50, 50, 50), (100, 100, 0, 0))


@pytest.fixture
def release_info():
    """Factory for release snapshots."""
    return build_release_info


@pytest.fixture
def store_factory():
    """Factory for stores holding a strategy and release snapshots."""
    return build_store


@pytest.fixture(name="build_strategy")
def build_strategy_fixture():
    """Factory for strategies from percentage tuples."""
    return build_strategy
