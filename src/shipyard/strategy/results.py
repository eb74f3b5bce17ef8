"""Patches produced by the strategy executor.

The executor never mutates objects. It returns one of the three variants
below for every object that has to change; the driver turns each one into a
versioned write.
"""

from dataclasses import dataclass
from typing import ClassVar, Union

from shipyard.apis import CapacityTargetSpec, ReleaseStatus, TrafficTargetSpec


@dataclass(frozen=True)
class ReleaseStatusUpdate:
    """Set the status of a release."""

    kind: ClassVar[str] = "Release"

    name: str
    namespace: str
    new_status: ReleaseStatus

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def describe(self) -> str:
        return f"step={self.new_status.achieved_step} phase={self.new_status.phase.value}"


@dataclass(frozen=True)
class CapacityTargetSpecUpdate:
    """Retarget the capacity of a release on its clusters."""

    kind: ClassVar[str] = "CapacityTarget"

    name: str
    namespace: str
    new_spec: CapacityTargetSpec

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def describe(self) -> str:
        return ", ".join(f"{c.name}={c.replicas}" for c in self.new_spec.clusters)


@dataclass(frozen=True)
class TrafficTargetSpecUpdate:
    """Retarget the traffic weight of a release on its clusters."""

    kind: ClassVar[str] = "TrafficTarget"

    name: str
    namespace: str
    new_spec: TrafficTargetSpec

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    def describe(self) -> str:
        return ", ".join(f"{c.name}={c.target_traffic}" for c in self.new_spec.clusters)


ExecutorResult = Union[ReleaseStatusUpdate, CapacityTargetSpecUpdate, TrafficTargetSpecUpdate]

EXECUTOR_RESULT_TYPES = (ReleaseStatusUpdate, CapacityTargetSpecUpdate, TrafficTargetSpecUpdate)
