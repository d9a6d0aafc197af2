# File: intents.py
"""Player intents checked by the Eligibility Gate.

Request handlers either build intents directly or parse a request payload
with parse_intent(), which validates it against the voluptuous schema for
the intent type.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import voluptuous as vol

from . import const
from .exceptions import InvalidInputError
from .type_defs import ContestData


@dataclass(frozen=True)
class StartBoost:
    """Complete a daily boost.

    tier is the content tier of the boost; pro_plan says whether the player
    holds the Pro Plan that unlocks higher tiers.
    """

    action_id: str
    tier: int = const.DEFAULT_CONTENT_TIER
    pro_plan: bool = False


@dataclass(frozen=True)
class StartChallenge:
    """Start a challenge; active_challenges is the player's current count."""

    action_id: str
    active_challenges: int = 0
    tier: int = const.DEFAULT_CONTENT_TIER
    pro_plan: bool = False


@dataclass(frozen=True)
class StartQuest:
    """Start a quest; completed_challenges counts finished related challenges."""

    action_id: str
    completed_challenges: int = 0
    tier: int = const.DEFAULT_CONTENT_TIER
    pro_plan: bool = False


@dataclass(frozen=True)
class RegisterContest:
    """Register for a contest."""

    contest: ContestData = field(hash=False)

    @property
    def contest_id(self) -> str:
        """Id of the contest being registered for."""
        return self.contest[const.FIELD_CONTEST_ID]

    @property
    def entry_fee(self) -> float:
        """Entry fee in dollars; 0 for free contests."""
        return float(self.contest.get(const.FIELD_ENTRY_FEE, 0) or 0)


@dataclass(frozen=True)
class SubmitHealthAssessment:
    """Submit the monthly health assessment."""


Intent = (
    StartBoost | StartChallenge | StartQuest | RegisterContest | SubmitHealthAssessment
)


# --- Payload Schemas ---
_NON_EMPTY_STRING = vol.All(str, vol.Length(min=1))
_COUNT = vol.All(vol.Coerce(int), vol.Range(min=0))

# Tier and plan fields shared by boosts, challenges and quests
_CONTENT_ACCESS = {
    vol.Optional(const.FIELD_TIER, default=const.DEFAULT_CONTENT_TIER): vol.All(
        vol.Coerce(int), vol.Range(min=1)
    ),
    vol.Optional(const.FIELD_PRO_PLAN, default=False): vol.Boolean(),
}

START_BOOST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_INTENT): const.INTENT_START_BOOST,
        vol.Required(const.FIELD_ACTION_ID): _NON_EMPTY_STRING,
        **_CONTENT_ACCESS,
    }
)

START_CHALLENGE_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_INTENT): const.INTENT_START_CHALLENGE,
        vol.Required(const.FIELD_ACTION_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_ACTIVE_CHALLENGES, default=0): _COUNT,
        **_CONTENT_ACCESS,
    }
)

START_QUEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_INTENT): const.INTENT_START_QUEST,
        vol.Required(const.FIELD_ACTION_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_COMPLETED_CHALLENGES, default=0): _COUNT,
        **_CONTENT_ACCESS,
    }
)

CONTEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_CONTEST_ID): _NON_EMPTY_STRING,
        vol.Optional(const.FIELD_CONTEST_NAME, default=""): str,
        vol.Optional(const.FIELD_ENTRY_FEE, default=0.0): vol.All(
            vol.Coerce(float), vol.Range(min=0.0)
        ),
        vol.Optional(const.FIELD_REQUIRED_DEVICE, default=None): vol.Any(
            None, _NON_EMPTY_STRING
        ),
        vol.Optional(const.FIELD_FUEL_POINTS, default=0): _COUNT,
    }
)

REGISTER_CONTEST_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_INTENT): const.INTENT_REGISTER_CONTEST,
        vol.Required("contest"): CONTEST_SCHEMA,
    }
)

SUBMIT_HEALTH_ASSESSMENT_SCHEMA = vol.Schema(
    {
        vol.Required(const.FIELD_INTENT): const.INTENT_SUBMIT_HEALTH_ASSESSMENT,
    }
)

_SCHEMAS: dict[str, vol.Schema] = {
    const.INTENT_START_BOOST: START_BOOST_SCHEMA,
    const.INTENT_START_CHALLENGE: START_CHALLENGE_SCHEMA,
    const.INTENT_START_QUEST: START_QUEST_SCHEMA,
    const.INTENT_REGISTER_CONTEST: REGISTER_CONTEST_SCHEMA,
    const.INTENT_SUBMIT_HEALTH_ASSESSMENT: SUBMIT_HEALTH_ASSESSMENT_SCHEMA,
}


def parse_intent(payload: dict[str, Any]) -> Intent:
    """Validate a request payload and build the matching intent.

    Args:
        payload: Dict with an "intent" key plus intent-specific fields

    Returns:
        The intent dataclass

    Raises:
        InvalidInputError: Unknown intent type or invalid fields

    Example:
        parse_intent({"intent": "start_boost", "action_id": "cold-plunge"})
        → StartBoost(action_id="cold-plunge")
    """
    intent_type = payload.get(const.FIELD_INTENT) if isinstance(payload, dict) else None
    schema = _SCHEMAS.get(intent_type) if isinstance(intent_type, str) else None
    if schema is None:
        raise InvalidInputError(f"Unknown intent: {intent_type!r}")

    try:
        data = schema(payload)
    except vol.Invalid as err:
        raise InvalidInputError(f"Invalid {intent_type} payload: {err}") from err

    if intent_type == const.INTENT_START_BOOST:
        return StartBoost(
            action_id=data[const.FIELD_ACTION_ID],
            tier=data[const.FIELD_TIER],
            pro_plan=data[const.FIELD_PRO_PLAN],
        )
    if intent_type == const.INTENT_START_CHALLENGE:
        return StartChallenge(
            action_id=data[const.FIELD_ACTION_ID],
            active_challenges=data[const.FIELD_ACTIVE_CHALLENGES],
            tier=data[const.FIELD_TIER],
            pro_plan=data[const.FIELD_PRO_PLAN],
        )
    if intent_type == const.INTENT_START_QUEST:
        return StartQuest(
            action_id=data[const.FIELD_ACTION_ID],
            completed_challenges=data[const.FIELD_COMPLETED_CHALLENGES],
            tier=data[const.FIELD_TIER],
            pro_plan=data[const.FIELD_PRO_PLAN],
        )
    if intent_type == const.INTENT_REGISTER_CONTEST:
        return RegisterContest(contest=data["contest"])
    return SubmitHealthAssessment()
