from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas.user.user import UserCreate, UserLogin, UserOut, TokenResponse
from app.services.auth import auth as auth_service
from app.core.database import get_db
from app.models.user.user import User
from app.dependencies.auth import get_current_user

router = APIRouter(prefix="/auth", tags=["Auth"])

@router.post("/signup", response_model=UserOut, status_code=201)
async def signup(
    user: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    return await auth_service.register_user(user, db)

@router.post("/login", response_model=TokenResponse)
async def login_route(
    user_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    return await auth_service.login_user(user_data.username, user_data.password, db)

@router.get("/verify", response_model=UserOut)
async def verify_token(current_user: User = Depends(get_current_user)):
    return current_user
