from waitlist.schemas.event import Event, EventCreate, EventUpdate
from waitlist.schemas.membership import (
    DispatchReport, DrawRequest, DrawResult, MembershipRecord, MembershipSet,
    PromoteRequest, PromotionResult, WaitlistResponse,
)
from waitlist.schemas.profile import (
    InvitationAnswer, InvitationReply, InvitationResponseResult, NotificationCategory,
    NotificationEntry, Profile, ProfileRegistration, ProfileUpdate, ResponseStatus,
)

__all__ = [
    "Event", "EventCreate", "EventUpdate",
    "DispatchReport", "DrawRequest", "DrawResult", "MembershipRecord", "MembershipSet",
    "PromoteRequest", "PromotionResult", "WaitlistResponse",
    "InvitationAnswer", "InvitationReply", "InvitationResponseResult", "NotificationCategory",
    "NotificationEntry", "Profile", "ProfileRegistration", "ProfileUpdate", "ResponseStatus",
]
