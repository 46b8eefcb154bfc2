"""FastAPI dependencies resolving the staff user behind a bearer token."""

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from concierge.auth.jwt import ACCESS_TOKEN_TYPE, decode_token
from concierge.database import get_db
from concierge.models.user import User
from concierge.services.errors import AuthorizationError

# Raises 403 automatically when the Authorization header is missing
_bearer_scheme = HTTPBearer()


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Decode the bearer token and load the user it was issued for.

    Raises:
        HTTPException 401: Invalid or expired token, wrong token type, or unknown user.
    """
    try:
        payload = decode_token(credentials.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials") from None

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise _unauthorized("Invalid token type")

    try:
        user_id = uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise _unauthorized("Could not validate credentials") from None

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _unauthorized("Could not validate credentials")
    return user


async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Return the current user unless their account has been deactivated.

    Raises:
        HTTPException 403: If the account is inactive.
    """
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is inactive")
    return user


async def get_current_admin(user: User = Depends(get_current_active_user)) -> User:
    """Return the current user if they may manage reservations.

    Dependencies resolve before the request body is validated, so a
    non-admin is refused with 403 whatever the payload looks like.

    Raises:
        HTTPException 403: If the user is not an administrator.
    """
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=AuthorizationError().message)
    return user
