"""
Pydantic schemas for participant profiles and their notification inbox.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class Profile(BaseModel):
    participant_id: str
    display_name: str = ""
    email: str = ""
    phone: str = ""
    registered: bool = False
    banned: bool = False
    created_at: Optional[datetime] = None


class ProfileUpdate(BaseModel):
    """Partial profile write. Unset fields keep their stored value."""

    display_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    registered: Optional[bool] = None
    banned: Optional[bool] = None
    created_at: Optional[datetime] = None


class ProfileRegistration(BaseModel):
    display_name: str = Field(..., max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=32)


class NotificationCategory(str, Enum):
    WINNER = "winner"
    CANCELLED = "cancelled"


class InvitationAnswer(str, Enum):
    ACCEPTED = "accepted"
    DECLINED = "declined"


class NotificationEntry(BaseModel):
    id: str
    event_id: str
    message: str
    category: str
    created_at: datetime
    read: bool = False
    response: Optional[InvitationAnswer] = None
    responded_at: Optional[datetime] = None


class InvitationReply(BaseModel):
    accept: bool


class ResponseStatus(str, Enum):
    COMPLETED = "completed"
    NOTIFICATION_UPDATE_FAILED = "notification_update_failed"
    MEMBERSHIP_MOVE_FAILED = "membership_move_failed"


class InvitationResponseResult(BaseModel):
    """
    Two-step outcome of an accept/decline.

    NOTIFICATION_UPDATE_FAILED means the membership move already took effect;
    callers reconcile the inbox entry rather than retrying the move.
    """

    status: ResponseStatus
    event_id: str
    participant_id: str
    response: InvitationAnswer
    error: Optional[str] = None

    @property
    def membership_moved(self) -> bool:
        return self.status != ResponseStatus.MEMBERSHIP_MOVE_FAILED

