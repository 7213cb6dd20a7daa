"""
Invitation response endpoint for drawn winners.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from waitlist.api.deps import get_invitation_service, get_participant_id
from waitlist.schemas.profile import InvitationReply, InvitationResponseResult, ResponseStatus
from waitlist.services.invitation_service import InvitationResponseService

router = APIRouter(prefix="/events/{event_id}/invitations", tags=["Invitations"])


@router.post("/{notification_id}", response_model=InvitationResponseResult)
async def respond_to_invitation(
    event_id: str,
    notification_id: str,
    reply: InvitationReply,
    participant_id: str = Depends(get_participant_id),
    service: InvitationResponseService = Depends(get_invitation_service),
):
    """
    Accept or decline a winner invitation.

    200 completed, 207 when the enrollment change took effect but the
    notification could not be marked, 503 when nothing changed.
    """
    result = await service.respond(event_id, participant_id, notification_id, reply.accept)
    if result.status == ResponseStatus.COMPLETED:
        return result
    status_code = 207 if result.status == ResponseStatus.NOTIFICATION_UPDATE_FAILED else 503
    return JSONResponse(status_code=status_code, content=result.model_dump(mode="json"))
