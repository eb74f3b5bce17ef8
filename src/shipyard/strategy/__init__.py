"""
Strategy Execution Package

Decision logic that moves a contender release and its incumbent through the
steps of a delivery strategy: gate checks, capacity/traffic comparisons,
patch variants and release phase finalization.
"""

from .comparisons import (
    CheckOrder,
    ComparisonPolicy,
    check_capacity,
    check_installation,
    check_traffic,
    parse_actor_step,
    parse_percentage,
)
from .executor import (
    CONTENDER_CHECK,
    INCUMBENT_CHECK,
    ActorCheck,
    Executor,
    ReleaseInfo,
    check_actor,
    execute,
)
from .phases import (
    PHASE_TRANSITIONS,
    can_transition,
    contender_phase,
    finalize_release,
    incumbent_phase,
)
from .results import (
    EXECUTOR_RESULT_TYPES,
    CapacityTargetSpecUpdate,
    ExecutorResult,
    ReleaseStatusUpdate,
    TrafficTargetSpecUpdate,
)

__all__ = [
    # Executor
    "Executor",
    "ReleaseInfo",
    "execute",
    "ActorCheck",
    "CONTENDER_CHECK",
    "INCUMBENT_CHECK",
    "check_actor",
    # Comparisons
    "ComparisonPolicy",
    "CheckOrder",
    "check_capacity",
    "check_installation",
    "check_traffic",
    "parse_actor_step",
    "parse_percentage",
    # Phases
    "PHASE_TRANSITIONS",
    "can_transition",
    "contender_phase",
    "incumbent_phase",
    "finalize_release",
    # Results
    "ExecutorResult",
    "EXECUTOR_RESULT_TYPES",
    "ReleaseStatusUpdate",
    "CapacityTargetSpecUpdate",
    "TrafficTargetSpecUpdate",
]
