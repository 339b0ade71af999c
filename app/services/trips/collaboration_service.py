from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload
from sqlalchemy.exc import IntegrityError
from typing import List, Optional
from app.core.logger import logger
from app.core.cache import RedisCache
from app.core.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from app.models.trips.trip_model import Trip
from app.models.trips.trip_collaborator import TripCollaborator, CollaborationStatus
from app.models.user.user import User
from app.schemas.trip.collaborator import CollaboratorInvite, CollaborationReply
from app.schemas.trip.invitation import PendingInvitation
from app.schemas.trip.trip_schema import TripResponse
from app.schemas.user.user import UserBrief
from app.schemas.trip.collaborator import CollaboratorOut
from app.services.auth.profile_service import ProfileService
from app.services.trips.trip_service import fetch_trip, check_version, commit_trip, invalidate_trip_cache

REPLY_STATUSES = (CollaborationStatus.accepted.value, CollaborationStatus.declined.value)


class CollaborationService:
    """Invitations and membership of the collaborator list embedded in a trip."""

    def __init__(self, cache: RedisCache):
        self.cache = cache

    async def invite(
        self,
        db: AsyncSession,
        trip_id,
        invite_data: CollaboratorInvite,
        current_user: User
    ) -> TripCollaborator:
        trip = await fetch_trip(db, trip_id)

        if not trip.is_owner(current_user.id):
            logger.warning(f"User {current_user.id} tried to invite to trip {trip_id} they do not own")
            raise ForbiddenError("Only the trip owner can send collaboration invites")

        check_version(trip, invite_data.expected_version)

        invitee = await ProfileService.get_user_by_email(invite_data.email, db)

        if invitee.id == current_user.id:
            raise InvalidInputError("You cannot collaborate with yourself")

        existing = trip.find_collaborator(invitee.id)
        if existing:
            raise ConflictError(
                f"User is already a collaborator with status: {existing.status.value}",
                details={"status": existing.status.value}
            )

        collaborator = TripCollaborator(
            user=invitee,
            budget_contribution=invite_data.budget_contribution,
            status=CollaborationStatus.pending,
            has_paid=False,
            invited_at=datetime.utcnow()
        )
        trip.collaborators.append(collaborator)
        trip.touch()

        try:
            await commit_trip(db, trip)
        except IntegrityError:
            # Another request inserted the same (trip, user) pair first
            await db.rollback()
            raise ConflictError("User is already a collaborator on this trip")

        await invalidate_trip_cache(self.cache, trip.id)
        logger.info(
            f"User {current_user.id} invited {invitee.id} to trip {trip.id} "
            f"with contribution {collaborator.budget_contribution}"
        )
        return collaborator

    async def respond(
        self,
        db: AsyncSession,
        trip_id,
        reply: CollaborationReply,
        current_user: User
    ) -> TripCollaborator:
        if reply.status not in REPLY_STATUSES:
            raise InvalidInputError("Invalid status. Must be 'accepted' or 'declined'")

        trip = await fetch_trip(db, trip_id)
        check_version(trip, reply.expected_version)

        collaborator = trip.find_collaborator(current_user.id)
        if not collaborator:
            raise NotFoundError("Collaboration", message="No collaboration request found for this user")

        if collaborator.status != CollaborationStatus.pending:
            raise ConflictError(
                f"Collaboration request was already {collaborator.status.value}",
                details={"status": collaborator.status.value}
            )

        collaborator.status = CollaborationStatus(reply.status)
        collaborator.responded_at = datetime.utcnow()
        trip.touch()

        await commit_trip(db, trip)
        await invalidate_trip_cache(self.cache, trip.id)

        logger.info(f"User {current_user.id} {reply.status} collaboration on trip {trip.id}")
        return collaborator

    async def remove(
        self,
        db: AsyncSession,
        trip_id,
        user_id,
        current_user: User,
        expected_version: Optional[int] = None
    ) -> dict:
        trip = await fetch_trip(db, trip_id)

        if not trip.is_owner(current_user.id):
            logger.warning(f"User {current_user.id} tried to remove a collaborator from trip {trip_id}")
            raise ForbiddenError("Only the trip owner can remove collaborators")

        check_version(trip, expected_version)

        collaborator = trip.find_collaborator(user_id)
        if not collaborator:
            raise NotFoundError("Collaborator", resource_id=user_id)

        # Recorded expenses stay; only the membership entry goes
        trip.collaborators.remove(collaborator)
        trip.touch()

        await commit_trip(db, trip)
        await invalidate_trip_cache(self.cache, trip.id)

        logger.info(f"User {current_user.id} removed collaborator {user_id} from trip {trip.id}")
        return {"message": "Collaborator removed successfully"}

    async def list_pending_for_user(self, db: AsyncSession, current_user: User) -> List[PendingInvitation]:
        result = await db.execute(
            select(TripCollaborator)
            .join(Trip, Trip.id == TripCollaborator.trip_id)
            .options(
                selectinload(TripCollaborator.trip).selectinload(Trip.owner),
                selectinload(TripCollaborator.user)
            )
            .where(
                TripCollaborator.user_id == current_user.id,
                TripCollaborator.status == CollaborationStatus.pending
            )
            .order_by(TripCollaborator.invited_at.desc())
        )
        entries = result.scalars().all()

        return [
            PendingInvitation(
                trip=TripResponse.model_validate(entry.trip),
                owner=UserBrief.model_validate(entry.trip.owner),
                collaboration=CollaboratorOut.model_validate(entry)
            )
            for entry in entries
        ]

    async def list_collaborators(self, db: AsyncSession, trip_id, current_user: User) -> List[TripCollaborator]:
        trip = await fetch_trip(db, trip_id)

        if not trip.can_view(current_user.id):
            logger.warning(f"User {current_user.id} denied collaborator list of trip {trip_id}")
            raise ForbiddenError("You don't have permission to view this trip's collaborators")

        return list(trip.collaborators)
