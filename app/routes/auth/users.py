from fastapi import APIRouter, Depends, Query
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies.auth import get_current_user
from app.core.database import get_db
from app.models.user.user import User
from app.schemas.user.user import UserOut, UserBrief
from app.services.auth.profile_service import ProfileService

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/profile", response_model=UserOut)
async def get_my_profile(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.get_user_by_id(current_user.id, db)


@router.get("/search", response_model=UserBrief)
async def find_user_by_email(
    email: EmailStr = Query(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService.get_user_by_email(email, db)
