from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from uuid import UUID
from app.schemas.trip.collaborator import (
    CollaboratorInvite, CollaborationReply, CollaboratorOut, InviteResult, ReplyResult, MessageResponse
)
from app.schemas.trip.invitation import PendingInvitation
from app.services.trips.collaboration_service import CollaborationService
from app.dependencies.auth import get_current_user
from app.models.user.user import User
from app.core.database import get_db
from app.core.redis_lifecyle import get_cache

router = APIRouter(prefix="/collaborations", tags=["Trip Collaboration"])

async def get_collaboration_service(
    cache=Depends(get_cache)
) -> CollaborationService:
    return CollaborationService(cache)

@router.get("/requests", response_model=list[PendingInvitation])
async def view_pending_requests(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service)
):
    return await service.list_pending_for_user(db, current_user)

@router.post("/{trip_id}/invite", response_model=InviteResult)
async def invite_collaborator(
    trip_id: UUID,
    invite_data: CollaboratorInvite,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service)
):
    collaborator = await service.invite(db, trip_id, invite_data, current_user)
    return InviteResult(
        message="Collaboration invitation sent",
        collaborator=CollaboratorOut.model_validate(collaborator),
        trip_version=collaborator.trip.version
    )

@router.patch("/{trip_id}/respond", response_model=ReplyResult)
async def respond_to_invitation(
    trip_id: UUID,
    reply: CollaborationReply,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service)
):
    collaborator = await service.respond(db, trip_id, reply, current_user)
    return ReplyResult(
        message=f"Collaboration request {collaborator.status.value}",
        trip_id=trip_id,
        status=collaborator.status
    )

@router.delete("/{trip_id}/collaborators/{user_id}", response_model=MessageResponse)
async def remove_collaborator(
    trip_id: UUID,
    user_id: UUID,
    expected_version: Optional[int] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service)
):
    return await service.remove(db, trip_id, user_id, current_user, expected_version)

@router.get("/{trip_id}/collaborators", response_model=list[CollaboratorOut])
async def list_collaborators(
    trip_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    service: CollaborationService = Depends(get_collaboration_service)
):
    return await service.list_collaborators(db, trip_id, current_user)
