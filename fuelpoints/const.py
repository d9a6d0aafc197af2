# File: const.py
"""Constants for the Fuel Points progression engine.

This file centralizes configuration keys, defaults, action kinds, denial
reasons and display strings so engines, managers and request handlers agree
on a single vocabulary.
"""

import logging

# ------------------------------------------------------------------------------------------------
# General
# ------------------------------------------------------------------------------------------------
ENGINE_TITLE = "Fuel Points"

# Logger
LOGGER = logging.getLogger(__package__)

# ------------------------------------------------------------------------------------------------
# Configuration Keys
# ------------------------------------------------------------------------------------------------
CONF_REFERENCE_TIMEZONE = "reference_timezone"
CONF_LEVEL_BASE_THRESHOLD = "level_base_threshold"
CONF_LEVEL_GROWTH_FACTOR = "level_growth_factor"
CONF_RESET_SAFETY_MARGIN_SECONDS = "reset_safety_margin_seconds"
CONF_RESET_MAX_SLEEP_SECONDS = "reset_max_sleep_seconds"
CONF_CATCH_UP_MISSED_RESET = "catch_up_missed_reset"
CONF_EXTERNAL_TIMEOUT_SECONDS = "external_timeout_seconds"
CONF_BOOST_COOLDOWN_DAYS = "boost_cooldown_days"
CONF_ASSESSMENT_COOLDOWN_DAYS = "assessment_cooldown_days"
CONF_MAX_DAILY_BOOSTS = "max_daily_boosts"
CONF_MAX_ACTIVE_CHALLENGES = "max_active_challenges"
CONF_CHALLENGE_STREAK_REQUIRED = "challenge_streak_required"
CONF_QUEST_CHALLENGES_REQUIRED = "quest_challenges_required"
CONF_PRO_PLAN_MIN_TIER = "pro_plan_min_tier"

# ------------------------------------------------------------------------------------------------
# Defaults
# ------------------------------------------------------------------------------------------------
DEFAULT_REFERENCE_TIMEZONE = "America/New_York"

# Level 2 needs 20 FP, each later level needs 41.4% more
DEFAULT_LEVEL_BASE_THRESHOLD = 20
DEFAULT_LEVEL_GROWTH_FACTOR = 1.414

DEFAULT_RESET_SAFETY_MARGIN_SECONDS = 60
DEFAULT_RESET_MAX_SLEEP_SECONDS = 300
DEFAULT_CATCH_UP_MISSED_RESET = False
DEFAULT_EXTERNAL_TIMEOUT_SECONDS = 10.0

DEFAULT_BOOST_COOLDOWN_DAYS = 7
DEFAULT_ASSESSMENT_COOLDOWN_DAYS = 30
DEFAULT_MAX_DAILY_BOOSTS = 3
DEFAULT_MAX_ACTIVE_CHALLENGES = 2
DEFAULT_CHALLENGE_STREAK_REQUIRED = 3

# Quests open after 2 related challenges; Tier 2 and above needs the Pro Plan
DEFAULT_QUEST_CHALLENGES_REQUIRED = 2
DEFAULT_PRO_PLAN_MIN_TIER = 2
DEFAULT_CONTENT_TIER = 1

# Health assessment bonus is 10% of the next level requirement
HEALTH_ASSESSMENT_BONUS_RATIO = "0.1"

# ------------------------------------------------------------------------------------------------
# Action Kinds
# ------------------------------------------------------------------------------------------------
ACTION_KIND_BOOST = "boost"
ACTION_KIND_CHALLENGE = "challenge"
ACTION_KIND_QUEST = "quest"
ACTION_KIND_ASSESSMENT = "assessment"
ACTION_KIND_STREAK_BONUS = "streak_bonus"

ACTION_KINDS = (
    ACTION_KIND_BOOST,
    ACTION_KIND_CHALLENGE,
    ACTION_KIND_QUEST,
    ACTION_KIND_ASSESSMENT,
    ACTION_KIND_STREAK_BONUS,
)

# Single assessment slot per player
HEALTH_ASSESSMENT_ACTION_ID = "health_assessment"

# FP award ranges per action kind (inclusive min, inclusive max)
FP_AWARD_RANGES: dict[str, tuple[int, int]] = {
    ACTION_KIND_BOOST: (1, 9),
    ACTION_KIND_CHALLENGE: (50, 50),
    ACTION_KIND_QUEST: (150, 150),
}

# ------------------------------------------------------------------------------------------------
# Burn Streak Bonuses
# ------------------------------------------------------------------------------------------------
# Streak length (days) -> one-time FP bonus on the day the length is reached
STREAK_BONUS_SCHEDULE: dict[int, int] = {
    3: 5,
    7: 10,
    21: 100,
}

# ------------------------------------------------------------------------------------------------
# Contest Registration
# ------------------------------------------------------------------------------------------------
REGISTRATION_STATUS_REGISTERED = "registered"

# ------------------------------------------------------------------------------------------------
# Intents
# ------------------------------------------------------------------------------------------------
INTENT_START_BOOST = "start_boost"
INTENT_START_CHALLENGE = "start_challenge"
INTENT_START_QUEST = "start_quest"
INTENT_REGISTER_CONTEST = "register_contest"
INTENT_SUBMIT_HEALTH_ASSESSMENT = "submit_health_assessment"

# Intent payload fields
FIELD_INTENT = "intent"
FIELD_ACTION_ID = "action_id"
FIELD_TIER = "tier"
FIELD_PRO_PLAN = "pro_plan"
FIELD_ACTIVE_CHALLENGES = "active_challenges"
FIELD_COMPLETED_CHALLENGES = "completed_challenges"
FIELD_CONTEST_ID = "contest_id"
FIELD_CONTEST_NAME = "name"
FIELD_ENTRY_FEE = "entry_fee"
FIELD_REQUIRED_DEVICE = "required_device"
FIELD_FUEL_POINTS = "fuel_points"

# ------------------------------------------------------------------------------------------------
# Denial Reasons
# ------------------------------------------------------------------------------------------------
REASON_COOLDOWN_ACTIVE = "cooldown_active"
REASON_SLOT_LIMIT_REACHED = "slot_limit_reached"
REASON_DEVICE_NOT_CONNECTED = "device_not_connected"
REASON_ALREADY_REGISTERED = "already_registered"
REASON_STREAK_REQUIRED = "streak_required"
REASON_PLAN_REQUIRED = "plan_required"
REASON_PREREQUISITE_REQUIRED = "prerequisite_required"

# Admit tags
TAG_CREDIT = "credit"
TAG_PAYMENT_REQUIRED = "payment_required"
TAG_FREE = "free"

# Display strings; formatted with the decision details
DISPLAY_MESSAGES: dict[str, str] = {
    REASON_COOLDOWN_ACTIVE: "{days_remaining} Days Until Available",
    REASON_SLOT_LIMIT_REACHED: "You can only have {limit} active at a time",
    REASON_DEVICE_NOT_CONNECTED: "Required device not connected: {device_name}",
    REASON_ALREADY_REGISTERED: "You are already registered for this contest",
    REASON_STREAK_REQUIRED: "Reach a {required}-day burn streak to unlock challenges",
    REASON_PLAN_REQUIRED: "Pro Plan unlocks Tier {tier} content",
    REASON_PREREQUISITE_REQUIRED: "Complete {required} related challenges to unlock this quest",
    TAG_CREDIT: "Registered with a free entry credit",
    TAG_PAYMENT_REQUIRED: "Entry fee of ${entry_fee} required",
    TAG_FREE: "Available Now!",
}

DISPLAY_TRANSIENT_FAILURE = "Something went wrong. Please try again."
DISPLAY_UNKNOWN = "Unknown"

# ------------------------------------------------------------------------------------------------
# Signals (in-process events emitted by managers and the coordinator)
# ------------------------------------------------------------------------------------------------
SIGNAL_FP_AWARDED = "fp_awarded"
SIGNAL_RESET_COMPLETED = "reset_completed"
SIGNAL_RESET_FAILED = "reset_failed"
SIGNAL_RESET_MISSED = "reset_missed"
