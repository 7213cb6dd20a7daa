"""
Lottery endpoints. Organizer only.
"""

from typing import Optional

from fastapi import APIRouter, Depends

from waitlist.api.deps import get_draw_engine, get_organized_event
from waitlist.schemas.event import Event
from waitlist.schemas.membership import DispatchReport, DrawRequest, DrawResult, PromoteRequest, PromotionResult
from waitlist.services.draw_service import DrawEngine

router = APIRouter(prefix="/events/{event_id}", tags=["Draws"])


@router.post("/draw", response_model=DrawResult)
async def run_draw(
    draw: DrawRequest,
    event: Event = Depends(get_organized_event),
    engine: DrawEngine = Depends(get_draw_engine),
):
    """
    Randomly select winners and a replacement pool from the waiting list.

    Winners are notified after the draw commits; the notification counts are
    reported but never fail the request. 409 if a draw is already running.
    """
    return await engine.run_draw(event.id, draw.num_winners, draw.replacement_pool_size)


@router.post("/replacements", response_model=PromotionResult)
async def promote_replacement(
    promote: Optional[PromoteRequest] = None,
    event: Event = Depends(get_organized_event),
    engine: DrawEngine = Depends(get_draw_engine),
):
    """Promote a replacement to winner; the first pool entry when none is named."""
    participant_id = promote.participant_id if promote else None
    return await engine.promote_from_cancelled(event.id, participant_id)


@router.post("/cancelled/notify", response_model=DispatchReport)
async def notify_cancelled(
    event: Event = Depends(get_organized_event),
    engine: DrawEngine = Depends(get_draw_engine),
):
    return await engine.notify_cancelled(event.id)
