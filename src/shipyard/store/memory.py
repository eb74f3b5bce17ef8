"""In-memory object store backed by plain dictionaries.

Used by the CLI to operate on a fleet snapshot file and by tests in place of
a cluster API client.
"""

import copy
import logging
import threading
from pathlib import Path
from typing import Any, TypeVar

import yaml

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
from shipyard.errors import ConflictError, ObjectNotFoundError

from .base import ReleaseStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# snapshot section -> model class
SECTIONS: dict[str, type] = {
    "strategies": Strategy,
    "releases": Release,
    "installation_targets": InstallationTarget,
    "capacity_targets": CapacityTarget,
    "traffic_targets": TrafficTarget,
}


class InMemoryReleaseStore(ReleaseStore):
    """Thread-safe dictionary store with optimistic concurrency."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._objects: dict[type, dict[str, Any]] = {cls: {} for cls in SECTIONS.values()}

    # ---------------------------------------------------------------- helpers

    @staticmethod
    def _key(namespace: str, name: str) -> str:
        return f"{namespace}/{name}"

    def _get(self, cls: type[T], namespace: str, name: str) -> T:
        key = self._key(namespace, name)
        with self._lock:
            obj = self._objects[cls].get(key)
            if obj is None:
                raise ObjectNotFoundError(cls.__name__, key)
            return copy.deepcopy(obj)

    def _stored(self, cls: type, namespace: str, name: str, expected_version: int) -> Any:
        """The stored object itself, after checking ``expected_version``.

        Caller must hold the lock.
        """
        key = self._key(namespace, name)
        obj = self._objects[cls].get(key)
        if obj is None:
            raise ObjectNotFoundError(cls.__name__, key)
        if obj.metadata.resource_version != expected_version:
            raise ConflictError(cls.__name__, key, expected_version, obj.metadata.resource_version)
        return obj

    def add(self, obj: Any) -> Any:
        """Create or replace an object, returning a copy of the stored version."""
        cls = type(obj)
        if cls not in self._objects:
            raise TypeError(f"cannot store {cls.__name__}")
        with self._lock:
            stored = copy.deepcopy(obj)
            previous = self._objects[cls].get(stored.metadata.key)
            if previous is not None:
                stored.metadata.resource_version = previous.metadata.resource_version + 1
            self._objects[cls][stored.metadata.key] = stored
            return copy.deepcopy(stored)

    # ------------------------------------------------------------------ reads

    def list_namespaces(self) -> list[str]:
        with self._lock:
            return sorted({release.namespace for release in self._objects[Release].values()})

    def list_releases(self, namespace: str | None = None) -> list[Release]:
        with self._lock:
            releases = [
                copy.deepcopy(release)
                for key, release in sorted(self._objects[Release].items())
                if namespace is None or release.namespace == namespace
            ]
        return releases

    def get_release(self, namespace: str, name: str) -> Release:
        return self._get(Release, namespace, name)

    def get_strategy(self, namespace: str, name: str) -> Strategy:
        return self._get(Strategy, namespace, name)

    def get_installation_target(self, namespace: str, name: str) -> InstallationTarget:
        return self._get(InstallationTarget, namespace, name)

    def get_capacity_target(self, namespace: str, name: str) -> CapacityTarget:
        return self._get(CapacityTarget, namespace, name)

    def get_traffic_target(self, namespace: str, name: str) -> TrafficTarget:
        return self._get(TrafficTarget, namespace, name)

    # ----------------------------------------------------------------- writes

    def update_release_status(
        self, namespace: str, name: str, status: ReleaseStatus, expected_version: int
    ) -> Release:
        with self._lock:
            release = self._stored(Release, namespace, name, expected_version)
            release.status = copy.deepcopy(status)
            release.metadata.resource_version += 1
            return copy.deepcopy(release)

    def update_capacity_spec(
        self, namespace: str, name: str, spec: CapacityTargetSpec, expected_version: int
    ) -> CapacityTarget:
        with self._lock:
            target = self._stored(CapacityTarget, namespace, name, expected_version)
            target.spec = copy.deepcopy(spec)
            target.metadata.resource_version += 1
            return copy.deepcopy(target)

    def update_traffic_spec(
        self, namespace: str, name: str, spec: TrafficTargetSpec, expected_version: int
    ) -> TrafficTarget:
        with self._lock:
            target = self._stored(TrafficTarget, namespace, name, expected_version)
            target.spec = copy.deepcopy(spec)
            target.metadata.resource_version += 1
            return copy.deepcopy(target)

    def update_release_annotations(
        self, namespace: str, name: str, annotations: dict[str, str], expected_version: int
    ) -> Release:
        with self._lock:
            release = self._stored(Release, namespace, name, expected_version)
            release.metadata.annotations.update(annotations)
            release.metadata.resource_version += 1
            return copy.deepcopy(release)

    def delete_release(self, namespace: str, name: str) -> None:
        key = self._key(namespace, name)
        with self._lock:
            if key not in self._objects[Release]:
                raise ObjectNotFoundError(Release.__name__, key)
            # target objects are owned by their release
            for cls in (Release, InstallationTarget, CapacityTarget, TrafficTarget):
                self._objects[cls].pop(key, None)
        logger.info(f"Deleted release {key}")

    # -------------------------------------------------------------- snapshots

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "InMemoryReleaseStore":
        store = cls()
        for section, model in SECTIONS.items():
            for entry in data.get(section) or []:
                store.add(model.from_dict(entry))
        return store

    def to_mapping(self) -> dict[str, Any]:
        with self._lock:
            return {
                section: [obj.to_dict() for _, obj in sorted(self._objects[model].items())]
                for section, model in SECTIONS.items()
            }

    @classmethod
    def load(cls, path: Path | str) -> "InMemoryReleaseStore":
        """Load a fleet snapshot from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"snapshot {path} must contain a mapping")
        store = cls.from_mapping(data)
        logger.debug(f"Loaded fleet snapshot from {path}")
        return store

    def dump(self, path: Path | str) -> None:
        """Write the store back as a YAML snapshot."""
        with open(path, "w") as f:
            yaml.safe_dump(self.to_mapping(), f, default_flow_style=False, sort_keys=False)
