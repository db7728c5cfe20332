"""
schemas.py — USSD Pydantic v2 data contracts.

Defines:
  - MenuLevel, PromptKind enums
  - AwaitPhone, AwaitPin, AuthFailed, AwaitText  (SessionProgress tagged union)
  - UssdSession   (one in-progress dialog, persisted between turns)
  - UssdRequest   (gateway callback body, camelCase on the wire)
  - UssdResponse  (engine output, camelCase on the wire)

SessionProgress replaces a free-form context dict: each multi-turn sub-flow
gets its own variant, so e.g. a PIN step without a captured phone number
cannot be represented.
"""
from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

# Nigerian MSISDN: optional +234 / 234 / 0 prefix, then a 7/8/9 network digit,
# a 0/1 operator digit and eight subscriber digits.
PHONE_PATTERN = r"^(\+234|234|0)?[789][01]\d{8}$"


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class MenuLevel(str, Enum):
    main = "main"
    auth = "auth"
    dashboard = "dashboard"
    groups = "groups"
    savings = "savings"
    loans = "loans"
    contributions = "contributions"
    escrow = "escrow"
    complaints = "complaints"


class PromptKind(str, Enum):
    join_group = "join_group"
    create_group = "create_group"


# ---------------------------------------------------------------------------
# SessionProgress — per-sub-flow memory between turns
# ---------------------------------------------------------------------------

class AwaitPhone(BaseModel):
    """Login step 1: waiting for the member's registered phone number."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    step: Literal["await_phone"] = "await_phone"
    attempts: int = Field(default=0, ge=0, description="Failed PIN attempts carried over from earlier tries.")


class AwaitPin(BaseModel):
    """Login step 2: phone captured, waiting for the 6-digit PIN."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    step: Literal["await_pin"] = "await_pin"
    phone: str
    attempts: int = Field(default=0, ge=0, description="Failed PIN attempts so far in this dialog.")


class AuthFailed(BaseModel):
    """Login rejected; waiting for Login / Register / Back."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    step: Literal["auth_failed"] = "auth_failed"
    attempts: int = Field(default=1, ge=1)


class AwaitText(BaseModel):
    """A free-text prompt is open; the next input answers it."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    step: Literal["await_text"] = "await_text"
    prompt: PromptKind


SessionProgress = Annotated[
    Union[AwaitPhone, AwaitPin, AuthFailed, AwaitText],
    Field(discriminator="step"),
]


# ---------------------------------------------------------------------------
# UssdSession — the stored dialog record
# ---------------------------------------------------------------------------

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UssdSession(BaseModel):
    """
    One USSD dialog.

    Created with menu_level=main on first contact for a session_id and
    overwritten in place on every later turn (no history is kept).
    """
    model_config = ConfigDict(from_attributes=True)

    session_id: str = Field(..., min_length=1)
    phone_number: str
    menu_level: MenuLevel = MenuLevel.main
    user_input: str = ""
    is_authenticated: bool = False
    user_id: Optional[str] = None
    group_id: Optional[str] = None
    context: Optional[SessionProgress] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def _authenticated_requires_user(self) -> "UssdSession":
        if self.is_authenticated and not self.user_id:
            raise ValueError("is_authenticated=True requires user_id")
        return self


# ---------------------------------------------------------------------------
# Wire contracts
# ---------------------------------------------------------------------------

class UssdRequest(BaseModel):
    """Gateway callback body: {sessionId, phoneNumber, userInput}."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    session_id: str = Field(..., min_length=1, description="Session ID is required")
    phone_number: str = Field(..., pattern=PHONE_PATTERN, description="Nigerian phone number")
    user_input: str = Field(..., min_length=1, description="User input is required")


class UssdResponse(BaseModel):
    """Engine output: {message, shouldEnd, nextMenu?}."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    message: str
    should_end: bool = False
    next_menu: Optional[MenuLevel] = None

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
