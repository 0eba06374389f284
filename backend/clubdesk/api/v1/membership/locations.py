"""
Location endpoints.
"""
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from clubdesk.db.base import get_db
from clubdesk.core.deps import get_current_member, require_admin
from clubdesk.models.member import Member
from clubdesk.schemas.location import LocationCreate, LocationUpdate, LocationResponse
from clubdesk.services import locations as location_service

router = APIRouter()


@router.get("/locations", response_model=list[LocationResponse])
async def list_locations(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    current_member: Member = Depends(get_current_member)
):
    locations = await location_service.list_locations(db, include_inactive=include_inactive)
    return [LocationResponse.model_validate(loc) for loc in locations]


@router.post("/locations", response_model=LocationResponse, status_code=status.HTTP_201_CREATED)
async def create_location(
    location_data: LocationCreate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    location = await location_service.create_location(db, **location_data.model_dump())
    return LocationResponse.model_validate(location)


@router.patch("/locations/{location_id}", response_model=LocationResponse)
async def update_location(
    location_id: str,
    location_data: LocationUpdate,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    location = await location_service.update_location(
        db, location_id, **location_data.model_dump(exclude_unset=True)
    )
    return LocationResponse.model_validate(location)


@router.delete("/locations/{location_id}", response_model=LocationResponse)
async def deactivate_location(
    location_id: str,
    db: AsyncSession = Depends(get_db),
    admin: Member = Depends(require_admin)
):
    """Locations are deactivated, never removed."""
    location = await location_service.deactivate_location(db, location_id)
    return LocationResponse.model_validate(location)
