"""
Tests for the release and target object models.
"""

from shipyard.apis import (
    APP_LABEL,
    RELEASE_CLUSTERS_ANNOTATION,
    RELEASE_GENERATION_ANNOTATION,
    CapacityTarget,
    ObjectMeta,
    Release,
    ReleaseEnvironment,
    ReleasePhase,
    Strategy,
)


def test_release_from_dict():
    release = Release.from_dict(
        {
            "metadata": {
                "name": "v2",
                "namespace": "test",
                "labels": {APP_LABEL: "web"},
                "annotations": {RELEASE_GENERATION_ANNOTATION: "7"},
                "resource_version": 3,
            },
            "environment": {
                "clusters": ["kind-eu"],
                "chart": {"name": "web", "version": 1.2},
                "strategy": "vanguard",
            },
            "spec": {"target_step": 2},
            "status": {"achieved_step": 1, "phase": "WaitingForCommand"},
        }
    )

    assert release.key == "test/v2"
    assert release.app == "web"
    assert release.generation == 7
    assert release.environment.chart.version == "1.2"
    assert release.spec.target_step == 2
    assert release.status.phase is ReleasePhase.WAITING_FOR_COMMAND
    assert release.metadata.resource_version == 3


def test_release_defaults():
    release = Release.from_dict({"metadata": {"name": "v1"}})

    assert release.namespace == "default"
    assert release.app is None
    assert release.generation == 0
    assert release.status.phase is ReleasePhase.WAITING_FOR_SCHEDULING


def test_scheduled_clusters_prefer_the_annotation():
    release = Release(
        metadata=ObjectMeta(
            name="v1", annotations={RELEASE_CLUSTERS_ANNOTATION: "kind-eu,kind-us"}
        ),
        environment=ReleaseEnvironment(clusters=["kind-asia"]),
    )

    assert release.scheduled_clusters == ["kind-eu", "kind-us"]

    del release.metadata.annotations[RELEASE_CLUSTERS_ANNOTATION]
    assert release.scheduled_clusters == ["kind-asia"]


def test_to_dict_round_trips_through_from_dict(release_info):
    info = release_info("v2", target_step=1, phase=ReleasePhase.INSTALLED, capacity=(3, 2))

    data = info.release.to_dict()
    assert data["status"]["phase"] == "Installed"
    assert Release.from_dict(data) == info.release

    assert CapacityTarget.from_dict(info.capacity_target.to_dict()) == info.capacity_target


def test_strategy_steps_are_strings():
    strategy = Strategy.from_dict(
        {
            "metadata": {"name": "vanguard"},
            "steps": [
                {
                    "contender_capacity": 1,
                    "contender_traffic": 1,
                    "incumbent_capacity": 100,
                    "incumbent_traffic": 100,
                }
            ],
        }
    )

    assert strategy.steps[0].contender_capacity == "1"
    assert strategy.steps[0].incumbent_traffic == "100"
