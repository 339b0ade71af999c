from datetime import date
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy.orm.exc import StaleDataError
from typing import Dict, Optional, List
from uuid import UUID
from app.core.logger import logger
from app.core.cache import RedisCache
from app.core.config import settings
from app.core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.models.expense.expense_models import Expense
from app.models.trips.trip_model import Trip
from app.models.trips.trip_collaborator import TripCollaborator, CollaborationStatus
from app.models.user.user import User
from app.schemas.trip.trip_schema import TripCreate, TripUpdate, TripDetail
from app.services.expense import expense_service


async def fetch_trip(db: AsyncSession, trip_id, populate: bool = True) -> Trip:
    """Load a trip with its collaborator list, or raise ``NotFoundError``.

    Always reads from the database: authorization decisions must not be taken
    on cached collaborator state.
    """
    query = select(Trip).where(Trip.id == trip_id)
    if populate:
        query = query.options(
            selectinload(Trip.owner),
            selectinload(Trip.collaborators).selectinload(TripCollaborator.user),
        )
    result = await db.execute(query)
    trip = result.scalar_one_or_none()
    if not trip:
        raise NotFoundError("Trip", resource_id=trip_id)
    return trip


def check_version(trip: Trip, expected_version: Optional[int]) -> None:
    if expected_version is not None and expected_version != trip.version:
        raise ConflictError(
            "Trip was modified by another request",
            details={"expected_version": expected_version, "current_version": trip.version},
        )


async def commit_trip(db: AsyncSession, trip: Trip) -> None:
    """Commit pending trip changes, turning a lost version race into a conflict."""
    try:
        await db.commit()
    except StaleDataError:
        await db.rollback()
        logger.warning(f"Concurrent modification rejected for trip {trip.id}")
        raise ConflictError("Trip was modified by another request")


async def invalidate_trip_cache(cache: RedisCache, trip_id) -> None:
    await cache.delete(cache.build_key("trips", "id", trip_id))


class TripService:
    def __init__(self, cache: RedisCache):
        self.cache = cache

    async def create_trip(self, db: AsyncSession, trip_data: TripCreate, user: User) -> Trip:
        new_trip = Trip(**trip_data.model_dump(), owner=user)
        db.add(new_trip)
        await db.commit()

        logger.info(f"Trip {new_trip.id} created by user {user.id}")
        return new_trip

    async def _visible_trips(self, db: AsyncSession, user_id, *conditions) -> List[Trip]:
        owned = await db.execute(
            select(Trip).where(Trip.owner_id == user_id, *conditions)
        )
        collaborative = await db.execute(
            select(Trip)
            .join(TripCollaborator, TripCollaborator.trip_id == Trip.id)
            .where(
                TripCollaborator.user_id == user_id,
                TripCollaborator.status == CollaborationStatus.accepted,
                *conditions
            )
        )
        return list(owned.scalars().all()) + list(collaborative.scalars().all())

    async def list_trips(self, db: AsyncSession, user: User) -> List[Trip]:
        """Trips the user owns or has joined, latest start first."""
        trips = await self._visible_trips(db, user.id)
        trips.sort(key=lambda trip: trip.start_date, reverse=True)
        logger.info(f"Retrieved {len(trips)} trips for user {user.id}")
        return trips

    async def list_active_trips(self, db: AsyncSession, user: User) -> List[Trip]:
        trips = await self._visible_trips(db, user.id, Trip.end_date >= date.today())
        trips.sort(key=lambda trip: trip.start_date)
        return trips

    async def get_trip_detail(self, db: AsyncSession, trip_id, user: User) -> TripDetail:
        cache_key = self.cache.build_key("trips", "id", trip_id)
        cached_trip = await self.cache.get(cache_key)

        if cached_trip:
            detail = TripDetail.model_validate(cached_trip)
            if not self._can_view_detail(detail, user.id):
                logger.warning(f"Unauthorized access attempt: trip {trip_id} by user {user.id}")
                raise ForbiddenError("You don't have permission to view this trip")
            logger.info(f"Trip {trip_id} retrieved from cache")
            return detail

        trip = await fetch_trip(db, trip_id)
        if not trip.can_view(user.id):
            logger.warning(f"Unauthorized access attempt: trip {trip_id} by user {user.id}")
            raise ForbiddenError("You don't have permission to view this trip")

        detail = TripDetail.model_validate(trip)
        await self.cache.set(
            cache_key,
            detail.model_dump(mode="json"),
            expire=settings.CACHE_TTL_SECONDS
        )

        logger.info(f"Trip {trip_id} retrieved from database")
        return detail

    @staticmethod
    def _can_view_detail(detail: TripDetail, user_id) -> bool:
        if detail.owner_id == user_id:
            return True
        return any(
            c.user_id == user_id and c.status == CollaborationStatus.accepted
            for c in detail.collaborators
        )

    async def update_trip(self, db: AsyncSession, trip_id, trip_data: TripUpdate, user: User) -> Trip:
        trip = await fetch_trip(db, trip_id, populate=False)

        if not trip.is_owner(user.id):
            logger.warning(f"Unauthorized update attempt: trip {trip_id} by user {user.id}")
            raise ForbiddenError("Only the trip owner can update trip details")

        check_version(trip, trip_data.expected_version)
        update_data = trip_data.model_dump(exclude_unset=True, exclude={"expected_version"})

        for field in ("destination", "purpose", "start_date", "end_date", "budget"):
            if field in update_data and update_data[field] is None:
                raise InvalidInputError(f"{field} cannot be empty")

        start_date = update_data.get("start_date", trip.start_date)
        end_date = update_data.get("end_date", trip.end_date)
        if end_date < start_date:
            raise InvalidInputError("End date cannot be before start date")

        for key, value in update_data.items():
            setattr(trip, key, value)
        trip.touch()

        await commit_trip(db, trip)
        await invalidate_trip_cache(self.cache, trip_id)

        logger.info(f"Trip {trip_id} updated by user {user.id}")
        return trip

    async def delete_trip(self, db: AsyncSession, trip_id, user: User) -> dict:
        trip = await fetch_trip(db, trip_id)

        if not trip.is_owner(user.id):
            logger.warning(f"Unauthorized delete attempt: trip {trip_id} by user {user.id}")
            raise ForbiddenError("Only the trip owner can delete this trip")

        removed = await expense_service.delete_trip_expenses(db, trip.id)
        await db.delete(trip)
        await commit_trip(db, trip)

        await invalidate_trip_cache(self.cache, trip_id)

        logger.info(f"Trip {trip_id} deleted by user {user.id} along with {removed} expenses")
        return {"message": "Trip deleted successfully"}

    async def list_trip_expenses(self, db: AsyncSession, trip_id, user: User):
        trip = await fetch_trip(db, trip_id)
        if not trip.can_view(user.id):
            raise ForbiddenError("You don't have permission to view this trip's expenses")
        return await expense_service.get_trip_expenses(db, trip.id)

    async def list_all_trip_expenses(self, db: AsyncSession, user: User) -> Dict[UUID, List[Expense]]:
        """Expenses of every trip the user owns or has joined, grouped by trip id.

        Trips without expenses are left out.
        """
        trips = await self._visible_trips(db, user.id)
        expenses = await expense_service.get_expenses_for_trips(db, [trip.id for trip in trips])

        grouped: Dict[UUID, List[Expense]] = {}
        for expense in expenses:
            grouped.setdefault(expense.trip_id, []).append(expense)

        logger.info(f"Retrieved {len(expenses)} expenses across {len(grouped)} trips for user {user.id}")
        return grouped
