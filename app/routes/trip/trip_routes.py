from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, List
from uuid import UUID
from app.schemas.trip.trip_schema import TripCreate, TripUpdate, TripResponse, TripDetail
from app.schemas.expense.expense import ExpenseResponse
from app.schemas.trip.collaborator import MessageResponse
from app.models.user.user import User
from app.core.database import get_db
from app.core.redis_lifecyle import get_cache
from app.dependencies.auth import get_current_user
from app.services.trips.trip_service import TripService

router = APIRouter(prefix="/trips", tags=['Trips'])

async def get_trip_service(
    cache=Depends(get_cache)
) -> TripService:
    return TripService(cache)

@router.post("", response_model=TripResponse, status_code=201)
async def create_trip_route(
    trip: TripCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.create_trip(db, trip, current_user)

@router.get("", response_model=list[TripResponse])
async def get_my_trips(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.list_trips(session, current_user)

@router.get("/active", response_model=list[TripResponse])
async def get_active_trips(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.list_active_trips(session, current_user)

@router.get("/all-expenses", response_model=Dict[UUID, List[ExpenseResponse]])
async def get_all_trip_expenses(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    """Expenses of all the caller's trips, keyed by trip id."""
    return await trip_service.list_all_trip_expenses(session, current_user)

@router.get("/{trip_id}", response_model=TripDetail)
async def get_trip(
    trip_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.get_trip_detail(session, trip_id, current_user)

@router.put("/{trip_id}", response_model=TripResponse)
async def update_trip_route(
    trip_id: UUID,
    trip_update: TripUpdate,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.update_trip(session, trip_id, trip_update, current_user)

@router.delete("/{trip_id}", response_model=MessageResponse)
async def delete_trip_route(
    trip_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.delete_trip(session, trip_id, current_user)

@router.get("/{trip_id}/expenses", response_model=list[ExpenseResponse])
async def get_trip_expenses(
    trip_id: UUID,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    trip_service: TripService = Depends(get_trip_service)
):
    return await trip_service.list_trip_expenses(session, trip_id, current_user)
