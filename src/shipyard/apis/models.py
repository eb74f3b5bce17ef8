"""Data models for releases, strategies and their per-cluster target objects."""

import builtins
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .enums import ReleasePhase

APP_LABEL = "shipyard.io/app"
RELEASE_GENERATION_ANNOTATION = "shipyard.io/release.generation"
RELEASE_CLUSTERS_ANNOTATION = "shipyard.io/release.clusters"


def _dict_factory(items: builtins.list[tuple[str, Any]]) -> builtins.dict[str, Any]:
    return {key: value.value if isinstance(value, Enum) else value for key, value in items}


class _Serializable:
    """Mixin dumping dataclass models to plain mappings."""

    def to_dict(self) -> builtins.dict[str, Any]:
        return asdict(self, dict_factory=_dict_factory)  # type: ignore[call-overload]


@dataclass
class ObjectMeta(_Serializable):
    """Identity and bookkeeping metadata shared by every object."""

    name: str
    namespace: str = "default"
    labels: builtins.dict[str, str] = field(default_factory=dict)
    annotations: builtins.dict[str, str] = field(default_factory=dict)
    resource_version: int = 0

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "ObjectMeta":
        return cls(
            name=data["name"],
            namespace=data.get("namespace", "default"),
            labels=dict(data.get("labels") or {}),
            annotations=dict(data.get("annotations") or {}),
            resource_version=int(data.get("resource_version", 0)),
        )


# ==================== Release ==================== #


@dataclass
class Chart:
    """Chart name and version a release installs."""

    name: str
    version: str


@dataclass
class ReleaseEnvironment:
    """Everything a release needs to get installed."""

    clusters: builtins.list[str] = field(default_factory=list)
    chart: Chart | None = None
    strategy: str = ""


@dataclass
class ReleaseSpec:
    """Desired state of a release."""

    target_step: int = 0


@dataclass
class ReleaseStatus(_Serializable):
    """Most recently achieved state of a release."""

    achieved_step: int = 0
    phase: ReleasePhase = ReleasePhase.WAITING_FOR_SCHEDULING

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "ReleaseStatus":
        return cls(
            achieved_step=int(data.get("achieved_step", 0)),
            phase=ReleasePhase(data.get("phase", ReleasePhase.WAITING_FOR_SCHEDULING.value)),
        )


@dataclass
class Release(_Serializable):
    """One deployed version of an application."""

    metadata: ObjectMeta
    environment: ReleaseEnvironment = field(default_factory=ReleaseEnvironment)
    spec: ReleaseSpec = field(default_factory=ReleaseSpec)
    status: ReleaseStatus = field(default_factory=ReleaseStatus)

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def key(self) -> str:
        return self.metadata.key

    @property
    def app(self) -> str | None:
        return self.metadata.labels.get(APP_LABEL)

    @property
    def generation(self) -> int:
        """Position of this release in its application's history."""
        raw = self.metadata.annotations.get(RELEASE_GENERATION_ANNOTATION)
        if raw is None:
            return 0
        return int(raw)

    @property
    def scheduled_clusters(self) -> builtins.list[str]:
        """Clusters the release is scheduled on.

        The clusters annotation wins over the environment once the release has
        been scheduled.
        """
        raw = self.metadata.annotations.get(RELEASE_CLUSTERS_ANNOTATION)
        if raw is None:
            return list(self.environment.clusters)
        return [cluster for cluster in raw.split(",") if cluster]

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "Release":
        environment = data.get("environment") or {}
        chart = environment.get("chart")
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            environment=ReleaseEnvironment(
                clusters=list(environment.get("clusters") or []),
                chart=Chart(name=chart["name"], version=str(chart["version"])) if chart else None,
                strategy=environment.get("strategy", ""),
            ),
            spec=ReleaseSpec(target_step=int((data.get("spec") or {}).get("target_step", 0))),
            status=ReleaseStatus.from_dict(data.get("status") or {}),
        )


# ==================== Strategy ==================== #


@dataclass
class StrategyStep:
    """One capacity/traffic split, stored as decimal percentage strings."""

    contender_capacity: str
    contender_traffic: str
    incumbent_capacity: str
    incumbent_traffic: str

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "StrategyStep":
        return cls(
            contender_capacity=str(data["contender_capacity"]),
            contender_traffic=str(data["contender_traffic"]),
            incumbent_capacity=str(data["incumbent_capacity"]),
            incumbent_traffic=str(data["incumbent_traffic"]),
        )


@dataclass
class Strategy(_Serializable):
    """Ordered sequence of steps to safely deliver a change."""

    metadata: ObjectMeta
    steps: builtins.list[StrategyStep] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "Strategy":
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            steps=[StrategyStep.from_dict(step) for step in data.get("steps") or []],
        )


# ==================== Installation ==================== #


@dataclass
class ClusterInstallationStatus:
    """Installation status of a release on one cluster."""

    name: str
    status: str


@dataclass
class InstallationTarget(_Serializable):
    """Clusters a release must be installed on, and where it already is."""

    metadata: ObjectMeta
    clusters: builtins.list[str] = field(default_factory=list)
    status: builtins.list[ClusterInstallationStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "InstallationTarget":
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            clusters=list(data.get("clusters") or []),
            status=[ClusterInstallationStatus(**entry) for entry in data.get("status") or []],
        )


# ==================== Capacity ==================== #


@dataclass
class ClusterCapacityTarget:
    """Desired capacity on one cluster."""

    name: str
    replicas: int


@dataclass
class ClusterCapacityStatus:
    """Observed capacity on one cluster."""

    name: str
    achieved_replicas: int
    status: str = ""


@dataclass
class CapacityTargetSpec(_Serializable):
    """Desired capacity across clusters."""

    clusters: builtins.list[ClusterCapacityTarget] = field(default_factory=list)


@dataclass
class CapacityTarget(_Serializable):
    """Desired vs. achieved capacity of a release on every cluster."""

    metadata: ObjectMeta
    spec: CapacityTargetSpec = field(default_factory=CapacityTargetSpec)
    status: builtins.list[ClusterCapacityStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "CapacityTarget":
        spec = data.get("spec") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            spec=CapacityTargetSpec(
                clusters=[ClusterCapacityTarget(**entry) for entry in spec.get("clusters") or []]
            ),
            status=[ClusterCapacityStatus(**entry) for entry in data.get("status") or []],
        )


# ==================== Traffic ==================== #


@dataclass
class ClusterTrafficTarget:
    """Desired traffic weight on one cluster."""

    name: str
    target_traffic: int


@dataclass
class ClusterTrafficStatus:
    """Observed traffic weight on one cluster."""

    name: str
    achieved_traffic: int
    status: str = ""


@dataclass
class TrafficTargetSpec(_Serializable):
    """Desired traffic weights across clusters."""

    clusters: builtins.list[ClusterTrafficTarget] = field(default_factory=list)


@dataclass
class TrafficTarget(_Serializable):
    """Desired vs. achieved traffic of a release on every cluster."""

    metadata: ObjectMeta
    spec: TrafficTargetSpec = field(default_factory=TrafficTargetSpec)
    status: builtins.list[ClusterTrafficStatus] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: builtins.dict[str, Any]) -> "TrafficTarget":
        spec = data.get("spec") or {}
        return cls(
            metadata=ObjectMeta.from_dict(data["metadata"]),
            spec=TrafficTargetSpec(
                clusters=[ClusterTrafficTarget(**entry) for entry in spec.get("clusters") or []]
            ),
            status=[ClusterTrafficStatus(**entry) for entry in data.get("status") or []],
        )
