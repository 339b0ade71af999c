from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from app.core.exceptions import NotFoundError
from app.models.user.user import User

# User directory
class ProfileService:
    @staticmethod
    async def get_user_by_id(user_id, db: AsyncSession) -> User:
        result = await db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", resource_id=user_id)
        return user

    @staticmethod
    async def get_user_by_email(email: str, db: AsyncSession) -> User:
        result = await db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("User", message="User not found with this email")
        return user
