"""Managers for the Fuel Points engine.

Managers own state and side effects and delegate all math to engines.
"""

from .base_manager import BaseManager
from .cooldown_manager import CooldownManager
from .eligibility_manager import EligibilityManager
from .reset_manager import ResetManager

__all__ = [
    "BaseManager",
    "CooldownManager",
    "EligibilityManager",
    "ResetManager",
]
