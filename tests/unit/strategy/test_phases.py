"""
Tests for the release phase state machine and step finalization.
"""

import logging

import pytest

from shipyard.apis import ReleasePhase, ReleaseStatus
from shipyard.strategy import ReleaseStatusUpdate
from shipyard.strategy.phases import (
    can_transition,
    contender_phase,
    finalize_release,
    incumbent_phase,
)


class TestTransitions:
    @pytest.mark.parametrize(
        "current,target",
        [
            (ReleasePhase.WAITING_FOR_SCHEDULING, ReleasePhase.WAITING_FOR_STRATEGY),
            (ReleasePhase.WAITING_FOR_STRATEGY, ReleasePhase.WAITING_FOR_COMMAND),
            (ReleasePhase.WAITING_FOR_COMMAND, ReleasePhase.INSTALLED),
            (ReleasePhase.INSTALLED, ReleasePhase.SUPERSEDED),
            (ReleasePhase.INSTALLED, ReleasePhase.INSTALLED),
        ],
    )
    def test_allowed(self, current, target):
        assert can_transition(current, target)

    @pytest.mark.parametrize(
        "current,target",
        [
            (ReleasePhase.SUPERSEDED, ReleasePhase.INSTALLED),
            (ReleasePhase.WAITING_FOR_SCHEDULING, ReleasePhase.SUPERSEDED),
            (ReleasePhase.WAITING_FOR_COMMAND, ReleasePhase.SUPERSEDED),
        ],
    )
    def test_rejected(self, current, target):
        assert not can_transition(current, target)

    def test_phase_for_step_position(self):
        assert contender_phase(is_last_step=False) is ReleasePhase.WAITING_FOR_COMMAND
        assert contender_phase(is_last_step=True) is ReleasePhase.INSTALLED
        assert incumbent_phase(is_last_step=False) is ReleasePhase.INSTALLED
        assert incumbent_phase(is_last_step=True) is ReleasePhase.SUPERSEDED


class TestFinalizeRelease:
    def test_contender_only(self, release_info):
        contender = release_info("v2")

        patches = finalize_release(contender, None, target_step=0, is_last_step=False)

        assert patches == [
            ReleaseStatusUpdate(
                name="v2",
                namespace="test",
                new_status=ReleaseStatus(achieved_step=0, phase=ReleasePhase.WAITING_FOR_COMMAND),
            )
        ]

    def test_incumbent_keeps_its_achieved_step(self, release_info):
        contender = release_info("v2", generation=2, target_step=1)
        incumbent = release_info("v1", achieved_step=4, phase=ReleasePhase.INSTALLED)

        patches = finalize_release(contender, incumbent, target_step=1, is_last_step=True)

        assert [p.name for p in patches] == ["v2", "v1"]
        assert patches[1].new_status == ReleaseStatus(
            achieved_step=4, phase=ReleasePhase.SUPERSEDED
        )

    def test_unchanged_statuses_are_not_patched(self, release_info):
        contender = release_info("v2", generation=2, phase=ReleasePhase.WAITING_FOR_COMMAND)
        incumbent = release_info("v1", phase=ReleasePhase.INSTALLED)

        assert finalize_release(contender, incumbent, target_step=0, is_last_step=False) == []

    def test_achieved_step_never_decreases(self, release_info):
        contender = release_info("v2", achieved_step=2, phase=ReleasePhase.WAITING_FOR_COMMAND)

        patches = finalize_release(contender, None, target_step=1, is_last_step=False)

        assert patches == []

    def test_unexpected_transition_is_logged(self, release_info, caplog):
        contender = release_info("v2", phase=ReleasePhase.SUPERSEDED)

        with caplog.at_level(logging.WARNING, logger="shipyard"):
            patches = finalize_release(contender, None, target_step=0, is_last_step=False)

        assert len(patches) == 1
        assert "unexpected phase transition" in caplog.text
