"""
User schemas - Pydantic models for user records and their sub-records.

Records are stored with camelCase keys (the same shape the client apps
read), so every model here uses a camelCase alias generator while keeping
snake_case attribute names in Python:

    User(is_premium=True).model_dump(by_alias=True)  ->  {"isPremium": True, ...}

Handlers work on plain dicts read from the store and only use these models
to build new sub-records, to project summaries and to type-check partial
updates (see tutor_admin.schemas.patch).
"""

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Sentinel written as a history entry's endDate for LIFETIME grants
LIFETIME_END = "LIFETIME"


class InboxMessage(BaseModel):
    """One message in a user's inbox (newest first)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    text: str
    date: str
    read: bool = False
    type: str = "TEXT"


class SubscriptionHistoryEntry(BaseModel):
    """
    Immutable record of one subscription grant.

    Administrative grants are zero-cost: price and originalPrice are 0,
    isFree is True and grantSource is "ADMIN". endDate is an ISO timestamp
    or LIFETIME_END.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    tier: str
    level: str
    start_date: str
    end_date: str
    duration_hours: float = 0
    price: float = 0
    original_price: float = 0
    is_free: bool = False
    grant_source: Optional[str] = None
    granted_by: Optional[str] = None


class User(BaseModel):
    """
    A user record as kept in the live tree and mirrored to the users collection.

    dailyAiCount only means something together with dailyAiDate: readers
    treat the count as zero when the date is not today.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    # Identity
    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None

    # Balance and subscription
    credits: int = 0
    is_premium: bool = False
    subscription_tier: Optional[str] = None
    subscription_level: Optional[str] = None
    subscription_end_date: Optional[str] = None
    granted_by_admin: Optional[bool] = None
    subscription_history: List[SubscriptionHistoryEntry] = Field(default_factory=list)

    # Moderation
    is_locked: bool = False

    # Messages
    inbox: List[InboxMessage] = Field(default_factory=list)

    # AI usage
    daily_ai_count: int = 0
    daily_ai_date: Optional[str] = None

    # Activity
    last_active_time: Optional[str] = None
    created_at: Optional[str] = None


class UserSummary(BaseModel):
    """Redacted projection returned by scanUsers - never the full record."""

    id: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None
    # Client apps may write fractional balances; whole numbers stay ints
    credits: Optional[Union[int, float]] = None
    tier: Optional[str] = None

    @classmethod
    def from_record(cls, record: dict) -> "UserSummary":
        return cls(
            id=record.get("id"),
            name=record.get("name"),
            email=record.get("email"),
            role=record.get("role"),
            credits=record.get("credits"),
            tier=record.get("subscriptionTier"),
        )
