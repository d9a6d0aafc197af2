"""Fuel Points progression and eligibility engine.

Levels from FP, burn streaks, cooldown windows, the contest/boost eligibility
gate, and the timezone-anchored daily streak reset.
"""

from .config import EngineConfig, validate_config
from .coordinator import ActionOutcome, ProgressionCoordinator
from .engines import EligibilityDecision, LevelInfo, ResetSchedule, StreakResult
from .exceptions import (
    FuelPointsError,
    InvalidInputError,
    ScheduleMissed,
    TransientExternalFailure,
    UnknownPlayerError,
)
from .intents import (
    RegisterContest,
    StartBoost,
    StartChallenge,
    StartQuest,
    SubmitHealthAssessment,
    parse_intent,
)
from .store import InMemoryEligibilityOracle, InMemoryProgressStore
from .type_defs import ActionCompletion, CooldownWindow

__all__ = [
    "ActionCompletion",
    "ActionOutcome",
    "CooldownWindow",
    "EligibilityDecision",
    "EngineConfig",
    "FuelPointsError",
    "InMemoryEligibilityOracle",
    "InMemoryProgressStore",
    "InvalidInputError",
    "LevelInfo",
    "ProgressionCoordinator",
    "RegisterContest",
    "ResetSchedule",
    "ScheduleMissed",
    "StartBoost",
    "StartChallenge",
    "StartQuest",
    "StreakResult",
    "SubmitHealthAssessment",
    "TransientExternalFailure",
    "UnknownPlayerError",
    "parse_intent",
    "validate_config",
]
