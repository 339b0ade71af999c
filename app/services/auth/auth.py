from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import IntegrityError
from app.models.user.user import User
from app.schemas.user.user import UserCreate, UserOut, TokenResponse
from app.core.security import hash_password, verify_password, create_access_token
from app.core.exceptions import ConflictError, UnauthorizedError
from app.core.logger import logger


async def register_user(user_data: UserCreate, db: AsyncSession) -> User:
    result = await db.execute(select(User).where(User.username == user_data.username))
    if result.scalar():
        raise ConflictError("Username already exists")

    # Check for duplicate email
    result = await db.execute(select(User).where(User.email == user_data.email))
    if result.scalar():
        raise ConflictError("Email already exists")

    new_user = User(
        email=user_data.email,
        username=user_data.username,
        hashed_password=hash_password(user_data.password),
        phone=user_data.phone
    )

    db.add(new_user)
    try:
        await db.commit()
        await db.refresh(new_user)
    except IntegrityError:
        # Fallback in case of race condition between the two queries above
        await db.rollback()
        raise ConflictError("Email or username already exists")

    logger.info(f"User {new_user.id} registered")
    return new_user


async def login_user(username: str, password: str, db: AsyncSession) -> TokenResponse:
    result = await db.execute(select(User).where(User.username == username))
    user = result.scalar()

    if not user or not verify_password(password, user.hashed_password):
        logger.warning(f"Failed login attempt for username {username}")
        raise UnauthorizedError("Invalid username or password")

    access_token = create_access_token({"sub": str(user.id), "username": user.username})
    logger.info(f"User {user.id} logged in")
    return TokenResponse(access_token=access_token, user=UserOut.model_validate(user))
