from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional
from uuid import UUID
from app.models.user.user import User
from app.core.database import get_db
from app.core.security import decode_access_token
from app.core.exceptions import UnauthorizedError

# Missing credentials are reported as 401 by get_current_user
security = HTTPBearer(auto_error=False)

async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    if credentials is None:
        raise UnauthorizedError("Authentication required")

    try:
        payload = decode_access_token(credentials.credentials)
        user_id = UUID(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise UnauthorizedError()

    stmt = select(User).filter(User.id == user_id)
    result = await db.scalar(stmt)
    if result is None:
        raise UnauthorizedError()

    return result
