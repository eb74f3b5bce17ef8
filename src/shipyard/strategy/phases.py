"""Release phase state machine and step finalization."""

import logging

from shipyard.apis import ReleasePhase, ReleaseStatus

from .results import ExecutorResult, ReleaseStatusUpdate

logger = logging.getLogger(__name__)

# WaitingForScheduling -> WaitingForStrategy/WaitingForCommand <-> Installed -> Superseded
PHASE_TRANSITIONS: dict[ReleasePhase, frozenset[ReleasePhase]] = {
    ReleasePhase.WAITING_FOR_SCHEDULING: frozenset(
        {ReleasePhase.WAITING_FOR_STRATEGY, ReleasePhase.WAITING_FOR_COMMAND}
    ),
    ReleasePhase.WAITING_FOR_STRATEGY: frozenset(
        {ReleasePhase.WAITING_FOR_COMMAND, ReleasePhase.INSTALLED}
    ),
    ReleasePhase.WAITING_FOR_COMMAND: frozenset(
        {ReleasePhase.WAITING_FOR_STRATEGY, ReleasePhase.INSTALLED}
    ),
    ReleasePhase.INSTALLED: frozenset(
        {
            ReleasePhase.WAITING_FOR_STRATEGY,
            ReleasePhase.WAITING_FOR_COMMAND,
            ReleasePhase.SUPERSEDED,
        }
    ),
    ReleasePhase.SUPERSEDED: frozenset(),
}


def can_transition(current: ReleasePhase, target: ReleasePhase) -> bool:
    """Whether a release may move from ``current`` to ``target``."""
    return current == target or target in PHASE_TRANSITIONS[current]


def contender_phase(is_last_step: bool) -> ReleasePhase:
    return ReleasePhase.INSTALLED if is_last_step else ReleasePhase.WAITING_FOR_COMMAND


def incumbent_phase(is_last_step: bool) -> ReleasePhase:
    return ReleasePhase.SUPERSEDED if is_last_step else ReleasePhase.INSTALLED


def finalize_release(contender, incumbent, target_step: int, is_last_step: bool) -> list[ExecutorResult]:
    """Status patches recording that ``target_step`` has been achieved.

    Only runs once both the contender and the incumbent met the step, so it
    never looks at capacity or traffic again. Patches that would not change
    anything are not emitted.
    """
    patches: list[ExecutorResult] = []

    release = contender.release
    phase = contender_phase(is_last_step)
    # AchievedStep never goes backwards, even if the target step was lowered.
    achieved_step = max(target_step, release.status.achieved_step)
    if achieved_step != release.status.achieved_step or phase != release.status.phase:
        if not can_transition(release.status.phase, phase):
            logger.warning(
                f"Release {release.key}: unexpected phase transition "
                f"{release.status.phase.value} -> {phase.value}"
            )
        patches.append(
            ReleaseStatusUpdate(
                name=release.name,
                namespace=release.namespace,
                new_status=ReleaseStatus(achieved_step=achieved_step, phase=phase),
            )
        )

    if incumbent is not None:
        release = incumbent.release
        phase = incumbent_phase(is_last_step)
        if phase != release.status.phase:
            patches.append(
                ReleaseStatusUpdate(
                    name=release.name,
                    namespace=release.namespace,
                    new_status=ReleaseStatus(
                        achieved_step=release.status.achieved_step, phase=phase
                    ),
                )
            )

    return patches
