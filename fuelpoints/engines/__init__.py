"""Engine modules for the Fuel Points engine.

Contains stateless computation engines:
- leveling_engine: FP thresholds and level derivation
- streak_engine: Burn streaks and milestone bonuses
- cooldown_engine: Cooldown windows and availability
- schedule_engine: Daily reset boundaries in the reference timezone
- eligibility_engine: Admit/deny decisions for player intents
"""

from .cooldown_engine import CooldownEngine
from .eligibility_engine import EligibilityDecision, EligibilityEngine
from .leveling_engine import LevelInfo, LevelingEngine
from .schedule_engine import ResetSchedule, ResetScheduleEngine
from .streak_engine import StreakEngine, StreakResult

__all__ = [
    "CooldownEngine",
    "EligibilityDecision",
    "EligibilityEngine",
    "LevelInfo",
    "LevelingEngine",
    "ResetSchedule",
    "ResetScheduleEngine",
    "StreakEngine",
    "StreakResult",
]
