# File: config.py
"""Engine configuration.

Raw configuration arrives as a plain dict (from environment, a settings file
or the hosting web app). It is validated with a voluptuous schema, defaults
are filled in from const.py, and the result is frozen into an EngineConfig.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import voluptuous as vol

from . import const
from .exceptions import InvalidInputError


def _timezone(value: Any) -> ZoneInfo:
    """Validate an IANA timezone name (or ZoneInfo) into a ZoneInfo."""
    if isinstance(value, ZoneInfo):
        return value
    if not isinstance(value, str) or not value:
        raise vol.Invalid("timezone must be an IANA name such as America/New_York")
    try:
        return ZoneInfo(value)
    except (ZoneInfoNotFoundError, ValueError) as err:
        raise vol.Invalid(f"unknown timezone: {value}") from err


_POSITIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=1))
_NON_NEGATIVE_INT = vol.All(vol.Coerce(int), vol.Range(min=0))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Optional(
            const.CONF_REFERENCE_TIMEZONE, default=const.DEFAULT_REFERENCE_TIMEZONE
        ): _timezone,
        vol.Optional(
            const.CONF_LEVEL_BASE_THRESHOLD, default=const.DEFAULT_LEVEL_BASE_THRESHOLD
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_LEVEL_GROWTH_FACTOR, default=const.DEFAULT_LEVEL_GROWTH_FACTOR
        ): vol.All(vol.Coerce(float), vol.Range(min=1.0, min_included=False)),
        vol.Optional(
            const.CONF_RESET_SAFETY_MARGIN_SECONDS,
            default=const.DEFAULT_RESET_SAFETY_MARGIN_SECONDS,
        ): _NON_NEGATIVE_INT,
        vol.Optional(
            const.CONF_RESET_MAX_SLEEP_SECONDS,
            default=const.DEFAULT_RESET_MAX_SLEEP_SECONDS,
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_CATCH_UP_MISSED_RESET,
            default=const.DEFAULT_CATCH_UP_MISSED_RESET,
        ): vol.Boolean(),
        vol.Optional(
            const.CONF_EXTERNAL_TIMEOUT_SECONDS,
            default=const.DEFAULT_EXTERNAL_TIMEOUT_SECONDS,
        ): vol.All(vol.Coerce(float), vol.Range(min=0.0, min_included=False)),
        vol.Optional(
            const.CONF_BOOST_COOLDOWN_DAYS, default=const.DEFAULT_BOOST_COOLDOWN_DAYS
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_ASSESSMENT_COOLDOWN_DAYS,
            default=const.DEFAULT_ASSESSMENT_COOLDOWN_DAYS,
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_MAX_DAILY_BOOSTS, default=const.DEFAULT_MAX_DAILY_BOOSTS
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_MAX_ACTIVE_CHALLENGES,
            default=const.DEFAULT_MAX_ACTIVE_CHALLENGES,
        ): _POSITIVE_INT,
        vol.Optional(
            const.CONF_CHALLENGE_STREAK_REQUIRED,
            default=const.DEFAULT_CHALLENGE_STREAK_REQUIRED,
        ): _NON_NEGATIVE_INT,
        vol.Optional(
            const.CONF_QUEST_CHALLENGES_REQUIRED,
            default=const.DEFAULT_QUEST_CHALLENGES_REQUIRED,
        ): _NON_NEGATIVE_INT,
        vol.Optional(
            const.CONF_PRO_PLAN_MIN_TIER, default=const.DEFAULT_PRO_PLAN_MIN_TIER
        ): _POSITIVE_INT,
    }
)


@dataclass(frozen=True)
class EngineConfig:
    """Validated, immutable engine configuration."""

    reference_timezone: ZoneInfo = field(
        default_factory=lambda: ZoneInfo(const.DEFAULT_REFERENCE_TIMEZONE)
    )
    level_base_threshold: int = const.DEFAULT_LEVEL_BASE_THRESHOLD
    level_growth_factor: float = const.DEFAULT_LEVEL_GROWTH_FACTOR
    reset_safety_margin_seconds: int = const.DEFAULT_RESET_SAFETY_MARGIN_SECONDS
    reset_max_sleep_seconds: int = const.DEFAULT_RESET_MAX_SLEEP_SECONDS
    catch_up_missed_reset: bool = const.DEFAULT_CATCH_UP_MISSED_RESET
    external_timeout_seconds: float = const.DEFAULT_EXTERNAL_TIMEOUT_SECONDS
    boost_cooldown_days: int = const.DEFAULT_BOOST_COOLDOWN_DAYS
    assessment_cooldown_days: int = const.DEFAULT_ASSESSMENT_COOLDOWN_DAYS
    max_daily_boosts: int = const.DEFAULT_MAX_DAILY_BOOSTS
    max_active_challenges: int = const.DEFAULT_MAX_ACTIVE_CHALLENGES
    challenge_streak_required: int = const.DEFAULT_CHALLENGE_STREAK_REQUIRED
    quest_challenges_required: int = const.DEFAULT_QUEST_CHALLENGES_REQUIRED
    pro_plan_min_tier: int = const.DEFAULT_PRO_PLAN_MIN_TIER

    @property
    def reset_safety_margin(self) -> timedelta:
        """Safety margin past local midnight as a timedelta."""
        return timedelta(seconds=self.reset_safety_margin_seconds)

    @property
    def cooldown_durations(self) -> dict[str, timedelta]:
        """Time-based cooldown per action kind; kinds not listed have none."""
        return {
            const.ACTION_KIND_BOOST: timedelta(days=self.boost_cooldown_days),
            const.ACTION_KIND_ASSESSMENT: timedelta(
                days=self.assessment_cooldown_days
            ),
        }


def validate_config(user_input: dict[str, Any] | None = None) -> EngineConfig:
    """Validate a raw configuration dict and build an EngineConfig.

    Args:
        user_input: Raw settings keyed by const.CONF_* names; None for defaults

    Returns:
        Frozen EngineConfig

    Raises:
        InvalidInputError: The dict has unknown keys or invalid values
    """
    try:
        validated = CONFIG_SCHEMA(dict(user_input or {}))
    except vol.Invalid as err:
        raise InvalidInputError(f"Invalid engine configuration: {err}") from err

    const.LOGGER.debug(
        "Engine configuration validated (timezone=%s)",
        validated[const.CONF_REFERENCE_TIMEZONE],
    )
    return EngineConfig(**validated)
