"""Abstract object store interface used by the controller and fleet tooling."""

from abc import ABC, abstractmethod

from shipyard.apis import (
    CapacityTarget,
    CapacityTargetSpec,
    InstallationTarget,
    Release,
    ReleaseStatus,
    Strategy,
    TrafficTarget,
    TrafficTargetSpec,
)


class ReleaseStore(ABC):
    """CRUD access to releases and their target objects.

    Every write takes the resource version the caller last read and fails with
    ``ConflictError`` if the object changed since. Reads of missing objects
    raise ``ObjectNotFoundError``.
    """

    @abstractmethod
    def list_namespaces(self) -> list[str]:
        """List namespaces holding releases."""

    @abstractmethod
    def list_releases(self, namespace: str | None = None) -> list[Release]:
        """List releases, optionally restricted to one namespace."""

    @abstractmethod
    def get_release(self, namespace: str, name: str) -> Release:
        """Get a release."""

    @abstractmethod
    def get_strategy(self, namespace: str, name: str) -> Strategy:
        """Get a strategy."""

    @abstractmethod
    def get_installation_target(self, namespace: str, name: str) -> InstallationTarget:
        """Get the installation target of a release."""

    @abstractmethod
    def get_capacity_target(self, namespace: str, name: str) -> CapacityTarget:
        """Get the capacity target of a release."""

    @abstractmethod
    def get_traffic_target(self, namespace: str, name: str) -> TrafficTarget:
        """Get the traffic target of a release."""

    @abstractmethod
    def update_release_status(
        self, namespace: str, name: str, status: ReleaseStatus, expected_version: int
    ) -> Release:
        """Replace the status of a release."""

    @abstractmethod
    def update_capacity_spec(
        self, namespace: str, name: str, spec: CapacityTargetSpec, expected_version: int
    ) -> CapacityTarget:
        """Replace the spec of a capacity target."""

    @abstractmethod
    def update_traffic_spec(
        self, namespace: str, name: str, spec: TrafficTargetSpec, expected_version: int
    ) -> TrafficTarget:
        """Replace the spec of a traffic target."""

    @abstractmethod
    def update_release_annotations(
        self, namespace: str, name: str, annotations: dict[str, str], expected_version: int
    ) -> Release:
        """Merge ``annotations`` into a release's annotations."""

    @abstractmethod
    def delete_release(self, namespace: str, name: str) -> None:
        """Delete a release and its target objects."""
