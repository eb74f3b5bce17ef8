"""
Strategy controller.

Drives releases through their strategies: loads a fresh snapshot of a
contender, its incumbent and their target objects, runs the strategy executor
and applies the patches it returns with resource version preconditions.
Releases are reconciled concurrently by a pool of asyncio workers, one
reconciliation per release key at a time.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

from opentelemetry import trace
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from shipyard.apis import Release, Strategy
from shipyard.config import ShipyardSettings
from shipyard.errors import (
    ConflictError,
    MissingTargetError,
    ObjectNotFoundError,
    ShipyardError,
    StrategyConfigurationError,
)
from shipyard.store import ReleaseStore
from shipyard.strategy import (
    CapacityTargetSpecUpdate,
    ExecutorResult,
    ReleaseInfo,
    ReleaseStatusUpdate,
    TrafficTargetSpecUpdate,
    execute,
)

from .events import EVENT_TYPE_WARNING, EventRecorder

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

RETRYABLE_ERRORS = (ConflictError, ObjectNotFoundError)


@dataclass
class SyncResult:
    """Outcome of reconciling one release."""

    key: str
    patches: list[ExecutorResult] = field(default_factory=list)
    attempts: int = 0
    error: Exception | None = None

    @property
    def success(self) -> bool:
        return self.error is None


def split_key(key: str) -> tuple[str, str]:
    namespace, sep, name = key.partition("/")
    if not sep or not namespace or not name:
        raise ValueError(f"release key {key!r} is not of the form namespace/name")
    return namespace, name


class StrategyController:
    """Reconciles releases against their strategies."""

    def __init__(
        self,
        store: ReleaseStore,
        settings: ShipyardSettings | None = None,
        recorder: EventRecorder | None = None,
    ):
        self.store = store
        self.settings = settings or ShipyardSettings()
        self.recorder = recorder or EventRecorder(self.settings.event_buffer_size)
        self._key_locks: dict[str, asyncio.Lock] = {}
        self._key_lock_users: dict[str, int] = {}

    # ------------------------------------------------------------- snapshot

    def build_release_info(self, release: Release) -> ReleaseInfo:
        """Bundle a release with whichever target objects exist for it."""
        ns, name = release.namespace, release.name

        def _optional(getter):
            try:
                return getter(ns, name)
            except ObjectNotFoundError:
                return None

        return ReleaseInfo(
            release=release,
            installation_target=_optional(self.store.get_installation_target),
            capacity_target=_optional(self.store.get_capacity_target),
            traffic_target=_optional(self.store.get_traffic_target),
        )

    def find_incumbent(self, release: Release) -> Release | None:
        """The latest release of the same app older than ``release``."""
        if release.app is None:
            return None
        candidates = [
            other
            for other in self.store.list_releases(release.namespace)
            if other.app == release.app
            and other.name != release.name
            and other.generation < release.generation
        ]
        if not candidates:
            return None
        return max(candidates, key=lambda other: other.generation)

    def load_snapshot(self, key: str) -> tuple[ReleaseInfo, ReleaseInfo | None, Strategy]:
        """Read the contender at ``key``, its incumbent and its strategy."""
        namespace, name = split_key(key)
        release = self.store.get_release(namespace, name)
        strategy = self.store.get_strategy(namespace, release.environment.strategy)
        contender = self.build_release_info(release)

        incumbent_release = self.find_incumbent(release)
        incumbent = (
            self.build_release_info(incumbent_release) if incumbent_release is not None else None
        )
        return contender, incumbent, strategy

    # ---------------------------------------------------------------- sync

    def plan_release(self, key: str) -> list[ExecutorResult]:
        """The patches the next reconcile cycle would apply, without applying them."""
        return execute(*self.load_snapshot(key))

    def sync_release(self, key: str) -> list[ExecutorResult]:
        """Run one reconcile cycle for the release at ``key``.

        Returns the patches that were applied. A ``StrategyApplied`` event is
        recorded only when the contender's status actually changes; a cycle
        over an already finalized step records nothing.
        """
        with tracer.start_as_current_span("strategy.sync_release") as span:
            span.set_attribute("release.key", key)

            contender, incumbent, strategy = self.load_snapshot(key)
            patches = execute(contender, incumbent, strategy)
            span.set_attribute("strategy.patches", len(patches))

            versions = self._snapshot_versions(contender, incumbent)
            for patch in patches:
                self.apply_patch(patch, versions)

            if any(isinstance(p, ReleaseStatusUpdate) and p.key == key for p in patches):
                self.recorder.record(
                    key,
                    "StrategyApplied",
                    f"step {contender.release.spec.target_step} finished",
                )
            return patches

    @staticmethod
    def _snapshot_versions(
        contender: ReleaseInfo, incumbent: ReleaseInfo | None
    ) -> dict[tuple[str, str], int]:
        versions: dict[tuple[str, str], int] = {}
        for info in (contender, incumbent):
            if info is None:
                continue
            for obj in (info.release, info.capacity_target, info.traffic_target):
                if obj is not None:
                    versions[(type(obj).__name__, obj.metadata.key)] = obj.metadata.resource_version
        return versions

    def apply_patch(self, patch: ExecutorResult, versions: dict[tuple[str, str], int]) -> None:
        """Write one executor result to the store.

        ``versions`` maps ``(kind, key)`` to the resource version read in the
        snapshot the patch was computed from.
        """
        if isinstance(patch, ReleaseStatusUpdate):
            self.store.update_release_status(
                patch.namespace, patch.name, patch.new_status, versions[(patch.kind, patch.key)]
            )
        elif isinstance(patch, CapacityTargetSpecUpdate):
            self.store.update_capacity_spec(
                patch.namespace, patch.name, patch.new_spec, versions[(patch.kind, patch.key)]
            )
        elif isinstance(patch, TrafficTargetSpecUpdate):
            self.store.update_traffic_spec(
                patch.namespace, patch.name, patch.new_spec, versions[(patch.kind, patch.key)]
            )
        else:
            raise TypeError(f"unhandled executor result {patch!r}")
        logger.info(f"Patched {patch.kind} {patch.key}: {patch.describe()}")

    # ------------------------------------------------------------- workers

    async def reconcile(self, key: str, executor: ThreadPoolExecutor | None = None) -> SyncResult:
        """Reconcile one release, retrying conflicts and missing objects."""
        result = SyncResult(key=key)
        lock = self._key_locks.setdefault(key, asyncio.Lock())
        self._key_lock_users[key] = self._key_lock_users.get(key, 0) + 1

        try:
            async with lock:
                await self._reconcile_locked(key, executor, result)
        finally:
            self._key_lock_users[key] -= 1
            if self._key_lock_users[key] == 0:
                del self._key_lock_users[key]
                del self._key_locks[key]

        return result

    def _retrying(self) -> AsyncRetrying:
        return AsyncRetrying(
            stop=stop_after_attempt(self.settings.max_retries + 1),
            wait=wait_exponential(multiplier=self.settings.retry_backoff_seconds),
            retry=retry_if_exception_type(RETRYABLE_ERRORS),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )

    async def _reconcile_locked(
        self, key: str, executor: ThreadPoolExecutor | None, result: SyncResult
    ) -> None:
        loop = asyncio.get_running_loop()
        try:
            async for attempt in self._retrying():
                with attempt:
                    result.attempts = attempt.retry_state.attempt_number
                    result.patches = await loop.run_in_executor(executor, self.sync_release, key)
            result.error = None
        except RETRYABLE_ERRORS as e:
            logger.error(f"Release {key}: giving up after {result.attempts} attempts: {e}")
            result.error = e
        except StrategyConfigurationError as e:
            logger.error(f"Release {key}: invalid strategy configuration: {e}")
            self.recorder.record(key, "StrategyInvalid", str(e), EVENT_TYPE_WARNING)
            result.error = e
        except MissingTargetError as e:
            logger.info(f"Release {key}: {e}, waiting for it to be created")
            result.error = e
        except (ShipyardError, ValueError) as e:
            logger.error(f"Release {key}: reconcile failed: {e}")
            result.error = e

    async def run(self, keys: list[str]) -> dict[str, SyncResult]:
        """Reconcile every release in ``keys`` once with a pool of workers."""
        queue: asyncio.Queue[str] = asyncio.Queue()
        for key in dict.fromkeys(keys):
            queue.put_nowait(key)

        results: dict[str, SyncResult] = {}

        with ThreadPoolExecutor(
            max_workers=self.settings.workers, thread_name_prefix="reconcile"
        ) as executor:

            async def worker() -> None:
                while True:
                    try:
                        key = queue.get_nowait()
                    except asyncio.QueueEmpty:
                        return
                    try:
                        results[key] = await self.reconcile(key, executor)
                    finally:
                        queue.task_done()

            await asyncio.gather(*(worker() for _ in range(self.settings.workers)))

        return results
