import logging

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.models import User
from schooldesk.auth.schemas import Principal
from schooldesk.auth.security import decode_access_token
from schooldesk.core.enums import Role
from schooldesk.db.session import get_db

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login")


async def get_current_principal(
    request: Request,
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    """Resolve the caller from the bearer token.

    The token only carries the user id. Role and school are re-read from the
    users table so that a demotion or school move takes effect immediately.
    A deleted account is reported as an authentication failure, not a 404.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token, request.app.state.settings)
    except JWTError:
        raise credentials_exception

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None:
        logger.info("Token subject %s no longer exists", user_id)
        raise credentials_exception

    try:
        role = Role(user.role)
    except ValueError:
        logger.warning("User %s has unknown role %r", user.id, user.role)
        raise credentials_exception

    return Principal(
        user_id=user.id,
        role=role,
        # Admin is unscoped even if a stale school_id is left on the row
        home_school_id=None if role is Role.ADMIN else user.school_id,
        username=user.username,
    )
