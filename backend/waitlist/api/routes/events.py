"""
Event endpoints: organizer creation/editing and public browsing.
"""

from fastapi import APIRouter, Depends, status

from waitlist.api.deps import get_event_store, get_participant_id
from waitlist.schemas.event import Event, EventCreate, EventUpdate
from waitlist.services.event_service import create_event, update_event
from waitlist.services.event_store import EventStore

router = APIRouter(prefix="/events", tags=["Events"])


@router.post("/", response_model=Event, status_code=status.HTTP_201_CREATED)
async def create_event_endpoint(
    event_data: EventCreate,
    participant_id: str = Depends(get_participant_id),
    events: EventStore = Depends(get_event_store),
):
    """Create a new event. The caller becomes its organizer."""
    return await create_event(events, participant_id, event_data)


@router.get("/", response_model=list[Event])
async def list_events_endpoint(events: EventStore = Depends(get_event_store)):
    return await events.list_events()


@router.get("/{event_id}", response_model=Event)
async def get_event_endpoint(event_id: str, events: EventStore = Depends(get_event_store)):
    return await events.get_event(event_id)


@router.patch("/{event_id}", response_model=Event)
async def update_event_endpoint(
    event_id: str,
    changes: EventUpdate,
    participant_id: str = Depends(get_participant_id),
    events: EventStore = Depends(get_event_store),
):
    """Edit an event. Organizer only."""
    return await update_event(events, event_id, participant_id, changes)
