"""
Membership module: members, locations, rooms, presenters, meeting topics
and suggestions.
"""
from fastapi import APIRouter

from clubdesk.api.v1.membership import members, locations, rooms, presenters, topics, suggestions

membership_router = APIRouter(prefix="/membership", tags=["membership"])

membership_router.include_router(members.router)
membership_router.include_router(locations.router)
membership_router.include_router(rooms.router)
membership_router.include_router(presenters.router)
membership_router.include_router(topics.router)
membership_router.include_router(suggestions.router)
