"""
Error taxonomy for waitlist operations.

Every failure carries a short human-readable message and the HTTP status the
API layer responds with. Business-rule rejections are final; only StoreError
is worth retrying, and that decision belongs to the caller.
"""

from typing import Optional


class WaitlistError(Exception):
    """Base class for all errors surfaced to callers."""

    status_code: int = 400
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidArgumentError(WaitlistError):
    status_code = 400
    default_message = "Invalid argument"


class NotFoundError(WaitlistError):
    status_code = 404
    default_message = "Not found"


class InvalidStateError(WaitlistError):
    status_code = 409
    default_message = "Entrant is not in the expected state"


class ForbiddenError(WaitlistError):
    status_code = 403
    default_message = "Not allowed"


class ProfileIncompleteError(WaitlistError):
    """Caller must send the participant through profile registration first."""

    status_code = 428
    default_message = "Profile registration required"
    requires_registration = True


class AlreadyJoinedError(WaitlistError):
    status_code = 409
    default_message = "Already joined"


class NotOnWaitlistError(WaitlistError):
    status_code = 409
    default_message = "You are not registered for this event"


class RegistrationClosedError(WaitlistError):
    status_code = 409
    default_message = "Registration window is closed"


class EventFullError(WaitlistError):
    status_code = 409
    default_message = "Event is full"


class NoEntrantsError(WaitlistError):
    status_code = 409
    default_message = "No entrants found"


class EmptyPoolError(WaitlistError):
    status_code = 409
    default_message = "Replacement pool is empty"


class DrawInProgressError(WaitlistError):
    status_code = 409
    default_message = "A draw is already running for this event"


class StoreError(WaitlistError):
    """Opaque pass-through of a persistence failure."""

    status_code = 503
    default_message = "Storage is unavailable. Please try again."
