"""
Strategy executor.

Given the contender release, the optional incumbent release and the strategy,
decide whether the contender's target step has been achieved on every cluster
and which patches move the fleet closer to it. Gates run in a fixed order and
the first unmet one short-circuits:

1. installation of the contender,
2. contender capacity then traffic (scaling up),
3. incumbent traffic then capacity (scaling down),
4. release status finalization.

The executor performs no I/O and keeps no state between calls, so running it
again on the same snapshot yields the same patches.
"""

import logging
from dataclasses import dataclass

from shipyard.apis import (
    CapacityTarget,
    InstallationTarget,
    Release,
    Strategy,
    StrategyStep,
    TrafficTarget,
)
from shipyard.errors import MissingTargetError, OutOfRangeStepError

from .comparisons import (
    CheckOrder,
    ComparisonPolicy,
    check_capacity,
    check_installation,
    check_traffic,
    parse_actor_step,
)
from .phases import finalize_release
from .results import CapacityTargetSpecUpdate, ExecutorResult, TrafficTargetSpecUpdate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReleaseInfo:
    """A release together with the target objects the executor reads."""

    release: Release
    installation_target: InstallationTarget | None = None
    capacity_target: CapacityTarget | None = None
    traffic_target: TrafficTarget | None = None

    def require_installation_target(self) -> InstallationTarget:
        if self.installation_target is None:
            raise MissingTargetError(self.release.key, "InstallationTarget")
        return self.installation_target

    def require_capacity_target(self) -> CapacityTarget:
        if self.capacity_target is None:
            raise MissingTargetError(self.release.key, "CapacityTarget")
        return self.capacity_target

    def require_traffic_target(self) -> TrafficTarget:
        if self.traffic_target is None:
            raise MissingTargetError(self.release.key, "TrafficTarget")
        return self.traffic_target


@dataclass(frozen=True)
class ActorCheck:
    """How one side of the rollout is checked against a step."""

    role: str
    policy: ComparisonPolicy
    order: CheckOrder


CONTENDER_CHECK = ActorCheck("contender", ComparisonPolicy.ASCENDING, CheckOrder.CAPACITY_FIRST)
INCUMBENT_CHECK = ActorCheck("incumbent", ComparisonPolicy.DESCENDING, CheckOrder.TRAFFIC_FIRST)


def check_actor(
    info: ReleaseInfo, capacity: int, traffic: int, check: ActorCheck
) -> tuple[bool, list[ExecutorResult]]:
    """Check one release against its share of a step.

    Sub-resources are checked in ``check.order``; the first one not achieved
    stops the check and yields at most one retargeting patch.
    """
    release = info.release

    def _capacity() -> tuple[bool, list[ExecutorResult]]:
        achieved, new_spec = check_capacity(info.require_capacity_target(), capacity, check.policy)
        if achieved:
            logger.debug(f"Release {release.key}: {check.role} has achieved capacity {capacity}")
            return True, []
        logger.info(f"Release {release.key}: {check.role} hasn't achieved capacity {capacity} yet")
        if new_spec is None:
            return False, []
        return False, [
            CapacityTargetSpecUpdate(name=release.name, namespace=release.namespace, new_spec=new_spec)
        ]

    def _traffic() -> tuple[bool, list[ExecutorResult]]:
        achieved, new_spec = check_traffic(info.require_traffic_target(), traffic, check.policy)
        if achieved:
            logger.debug(f"Release {release.key}: {check.role} has achieved traffic {traffic}")
            return True, []
        logger.info(f"Release {release.key}: {check.role} hasn't achieved traffic {traffic} yet")
        if new_spec is None:
            return False, []
        return False, [
            TrafficTargetSpecUpdate(name=release.name, namespace=release.namespace, new_spec=new_spec)
        ]

    if check.order is CheckOrder.CAPACITY_FIRST:
        checks = (_capacity, _traffic)
    else:
        checks = (_traffic, _capacity)

    for run_check in checks:
        achieved, patches = run_check()
        if not achieved:
            return False, patches
    return True, []


class Executor:
    """Runs one strategy step for a contender and its incumbent."""

    def __init__(self, contender: ReleaseInfo, incumbent: ReleaseInfo | None, strategy: Strategy):
        self.contender = contender
        self.incumbent = incumbent
        self.strategy = strategy

    def _info(self, message: str) -> None:
        logger.info(f"Release {self.contender.release.key}: {message}")

    def resolve_step(self) -> tuple[int, StrategyStep]:
        """The contender's target step and its strategy entry."""
        release = self.contender.release
        target_step = release.spec.target_step
        steps = self.strategy.steps
        if target_step < 0 or target_step >= len(steps):
            raise OutOfRangeStepError(release.key, target_step, len(steps))
        return target_step, steps[target_step]

    def _step_values(self, step: StrategyStep, index: int, check: ActorCheck) -> tuple[int, int]:
        return parse_actor_step(step, check.role, release=self.contender.release.key, index=index)

    def execute(self) -> list[ExecutorResult]:
        """Compute the patches for the contender's current target step.

        Returns an empty list when nothing can be done yet or nothing needs to
        change. Raises a ``ShipyardError`` for configuration and missing-data
        problems, in which case no patches are produced. Each actor's
        percentages are only parsed once its gate is reached.
        """
        target_step, step = self.resolve_step()

        if not check_installation(self.contender.require_installation_target()):
            self._info("installation pending")
            return []
        self._info("installation finished")

        capacity, traffic = self._step_values(step, target_step, CONTENDER_CHECK)
        ready, patches = check_actor(self.contender, capacity, traffic, CONTENDER_CHECK)
        if not ready:
            self._info(f"contender is not yet ready for step {target_step}")
            return patches
        self._info(f"contender is ready for step {target_step}")

        if self.incumbent is not None:
            capacity, traffic = self._step_values(step, target_step, INCUMBENT_CHECK)
            ready, patches = check_actor(self.incumbent, capacity, traffic, INCUMBENT_CHECK)
            if not ready:
                self._info(
                    f"incumbent {self.incumbent.release.key} is not yet ready for step {target_step}"
                )
                return patches
            self._info(f"incumbent {self.incumbent.release.key} is ready for step {target_step}")
        else:
            self._info("no incumbent, must be a new app")

        is_last_step = target_step == len(self.strategy.steps) - 1
        return finalize_release(self.contender, self.incumbent, target_step, is_last_step)


def execute(
    contender: ReleaseInfo, incumbent: ReleaseInfo | None, strategy: Strategy
) -> list[ExecutorResult]:
    """Run the strategy executor once over a snapshot."""
    return Executor(contender, incumbent, strategy).execute()
