"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from waitlist.api.routes import draws, events, invitations, profiles, waitlist

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(events.router)
api_router.include_router(waitlist.router)
api_router.include_router(draws.router)
api_router.include_router(invitations.router)
api_router.include_router(profiles.router)
