"""
Waitlist endpoints: entrants join and leave, organizers inspect the sets.
"""

from fastapi import APIRouter, Depends, status

from waitlist.api.deps import (
    get_event_store,
    get_join_service,
    get_organized_event,
    get_participant_id,
    get_waitlist_store,
)
from waitlist.schemas.event import Event
from waitlist.schemas.membership import MembershipRecord, MembershipSet, WaitlistResponse
from waitlist.services.event_store import EventStore
from waitlist.services.join_service import JoinLeaveService
from waitlist.services.waitlist_store import WaitlistStore

router = APIRouter(prefix="/events/{event_id}", tags=["Waitlist"])


@router.post("/waitlist", status_code=status.HTTP_201_CREATED)
async def join_waitlist(
    event_id: str,
    participant_id: str = Depends(get_participant_id),
    events: EventStore = Depends(get_event_store),
    service: JoinLeaveService = Depends(get_join_service),
):
    """
    Join the event's waitlist.

    428 means the caller must complete profile registration first.
    """
    event = await events.get_event(event_id)
    await service.join(event, participant_id)
    return {"message": "Joined successfully", "event_id": event_id}


@router.delete("/waitlist")
async def leave_waitlist(
    event_id: str,
    participant_id: str = Depends(get_participant_id),
    events: EventStore = Depends(get_event_store),
    service: JoinLeaveService = Depends(get_join_service),
):
    event = await events.get_event(event_id)
    await service.leave(event, participant_id)
    return {"message": "You have left this event", "event_id": event_id}


@router.get("/waitlist", response_model=WaitlistResponse)
async def get_waitlist(
    event: Event = Depends(get_organized_event),
    waitlists: WaitlistStore = Depends(get_waitlist_store),
):
    entrants = await waitlists.list_waiting(event.id)
    return WaitlistResponse(event_id=event.id, count=len(entrants), entrants=entrants)


@router.get("/entrants/{set_name}", response_model=list[MembershipRecord])
async def list_entrants(
    set_name: MembershipSet,
    event: Event = Depends(get_organized_event),
    waitlists: WaitlistStore = Depends(get_waitlist_store),
):
    """Entrants in one of waiting, winners, replacementPool, accepted, cancelled."""
    return await waitlists.list_set(event.id, set_name)
