import logging
from typing import Optional

from fastapi import status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize
from schooldesk.auth.models import User
from schooldesk.auth.rbac import Action, EntityKind
from schooldesk.auth.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    MeResponse,
    Principal,
    ResetPasswordRequest,
)
from schooldesk.auth.security import create_access_token, hash_password, verify_password
from schooldesk.core.config import Settings
from schooldesk.core.exceptions import NotFoundError, ServiceError, ValidationError

logger = logging.getLogger(__name__)


async def login_user(
    db: AsyncSession, payload: LoginRequest, app_settings: Optional[Settings] = None
) -> LoginResponse:
    stmt = select(User).where(User.username == payload.username)
    user = (await db.execute(stmt)).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        logger.info("Failed login for username %r", payload.username)
        raise ServiceError("Invalid credentials", status.HTTP_401_UNAUTHORIZED)

    # Only the subject id goes into the token; role and school are re-read per request
    token = create_access_token(subject={"sub": str(user.id)}, app_settings=app_settings)
    logger.info("User %s logged in", user.id)
    return LoginResponse(
        token=token,
        role=user.role,
        username=user.username,
        school_id=user.school_id,
    )


def me(principal: Principal) -> MeResponse:
    return MeResponse(
        user_id=principal.user_id,
        username=principal.username,
        role=principal.role,
        school_id=principal.home_school_id,
    )


async def reset_own_password(db: AsyncSession, principal: Principal, payload: ResetPasswordRequest) -> None:
    user = await db.get(User, principal.user_id)
    if user is None:
        raise NotFoundError("User not found")
    if not verify_password(payload.current_password, user.password_hash):
        raise ValidationError("Current password is incorrect")
    user.password_hash = hash_password(payload.new_password)
    await db.commit()
    logger.info("User %s changed their password", user.id)


async def change_user_password(
    db: AsyncSession,
    principal: Principal,
    user_id: int,
    payload: ChangePasswordRequest,
) -> None:
    """Admin may reset anyone; a School only accounts of its own school (Admin accounts have none)."""
    await authorize(db, principal, EntityKind.USER, Action.UPDATE, user_id)
    user = await db.get(User, user_id)
    user.password_hash = hash_password(payload.new_password)
    await db.commit()
    logger.info("User %s reset the password of user %s", principal.user_id, user_id)
