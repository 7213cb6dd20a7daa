"""
Pydantic schemas for waitlist membership and lottery draws.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class MembershipSet(str, Enum):
    """The five mutually exclusive collections an entrant can occupy for one event."""

    WAITING = "waiting"
    WINNERS = "winners"
    REPLACEMENT_POOL = "replacementPool"
    ACCEPTED = "accepted"
    CANCELLED = "cancelled"

    @property
    def timestamp_field(self) -> str:
        return _TIMESTAMP_FIELDS[self]


_TIMESTAMP_FIELDS = {
    MembershipSet.WAITING: "requestTime",
    MembershipSet.WINNERS: "invitedAt",
    MembershipSet.REPLACEMENT_POOL: "addedToPoolAt",
    MembershipSet.ACCEPTED: "respondedAt",
    MembershipSet.CANCELLED: "respondedAt",
}


class MembershipRecord(BaseModel):
    participant_id: str
    timestamp: datetime
    is_replacement: bool = False


class WaitlistResponse(BaseModel):
    event_id: str
    count: int
    entrants: list[MembershipRecord]


class DrawRequest(BaseModel):
    num_winners: int = Field(..., gt=0)
    replacement_pool_size: Optional[int] = Field(None, ge=0)


class PromoteRequest(BaseModel):
    participant_id: Optional[str] = None


class DispatchReport(BaseModel):
    """Outcome of a notification fan-out, available once every send has resolved."""

    sent: int = 0
    failed: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.sent + self.failed + self.skipped


class DrawResult(BaseModel):
    event_id: str
    winners: list[str]
    replacements: list[str]
    notifications: DispatchReport = Field(default_factory=DispatchReport)


class PromotionResult(BaseModel):
    event_id: str
    participant_id: str
    notified: bool
