import logging
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.access import authorize, authorize_create, check, school_filter
from schooldesk.auth.models import User
from schooldesk.auth.rbac import Action, EntityKind, Scope
from schooldesk.auth.schemas import Principal
from schooldesk.auth.security import hash_password
from schooldesk.core.enums import DenyReason, Role
from schooldesk.core.exceptions import ConflictError, ForbiddenError, ValidationError
from schooldesk.core.models import StaffMember, Student, Teacher

from .schemas import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

# Accounts a School principal may create or edit
SCHOOL_MANAGED_ROLES = (Role.TEACHER, Role.STUDENT, Role.STAFF)


def _check_role_school_pair(role: Role, school_id: Optional[int]) -> None:
    if role is Role.ADMIN and school_id is not None:
        raise ValidationError("Admins cannot be associated with a school")
    if role is not Role.ADMIN and school_id is None:
        raise ValidationError("School ID is required for School, Teacher, Student and Staff accounts")


def _check_school_may_manage(principal: Principal, role: Role) -> None:
    if principal.role is Role.SCHOOL and role not in SCHOOL_MANAGED_ROLES:
        raise ForbiddenError(
            DenyReason.INSUFFICIENT_ROLE,
            "Access denied: Schools can only manage Teachers, Students, or Staff",
        )


async def _ensure_unique(
    db: AsyncSession,
    username: Optional[str],
    email: Optional[str],
    exclude_id: Optional[int] = None,
) -> None:
    clauses = []
    if username is not None:
        clauses.append(User.username == username)
    if email is not None:
        clauses.append(User.email == email)
    if not clauses:
        return
    stmt = select(User.id).where(or_(*clauses))
    if exclude_id is not None:
        stmt = stmt.where(User.id != exclude_id)
    if (await db.execute(stmt.limit(1))).scalar_one_or_none() is not None:
        raise ConflictError("Username or email already exists")


async def list_users(db: AsyncSession, principal: Principal, school_id: Optional[int] = None) -> List[UserResponse]:
    target = school_filter(principal, EntityKind.USER, school_id)
    stmt = select(User).order_by(User.id)
    if target is not None:
        stmt = stmt.where(User.school_id == target)
    rows = (await db.execute(stmt)).scalars().all()
    return [UserResponse.model_validate(u) for u in rows]


async def get_user(db: AsyncSession, principal: Principal, user_id: int) -> UserResponse:
    await authorize(db, principal, EntityKind.USER, Action.READ, user_id)
    return UserResponse.model_validate(await db.get(User, user_id))


async def create_user(db: AsyncSession, principal: Principal, payload: UserCreate) -> UserResponse:
    _check_school_may_manage(principal, payload.role)
    school_id = payload.school_id
    if school_id is None and principal.role is Role.SCHOOL:
        school_id = principal.home_school_id
    _check_role_school_pair(payload.role, school_id)

    if school_id is not None:
        await authorize_create(db, principal, EntityKind.USER, EntityKind.SCHOOL, school_id)
    else:
        # Only Admin reaches here (creating another Admin)
        check(principal, EntityKind.USER, Action.CREATE, Scope(owner_school_id=None))

    await _ensure_unique(db, payload.username, payload.email)
    user = User(
        username=payload.username,
        email=payload.email,
        password_hash=hash_password(payload.password),
        role=payload.role.value,
        school_id=school_id,
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info("User %s created account %s (%s)", principal.user_id, user.id, user.role)
    return UserResponse.model_validate(user)


async def update_user(db: AsyncSession, principal: Principal, user_id: int, payload: UserUpdate) -> UserResponse:
    await authorize(db, principal, EntityKind.USER, Action.UPDATE, user_id)
    user = await db.get(User, user_id)
    _check_school_may_manage(principal, Role(user.role))

    role = payload.role or Role(user.role)
    _check_school_may_manage(principal, role)
    school_id = user.school_id
    if "school_id" in payload.model_fields_set:
        school_id = payload.school_id
    if role is Role.ADMIN:
        school_id = None
    _check_role_school_pair(role, school_id)
    if school_id is not None and school_id != user.school_id:
        # Moving an account is a write into the destination school as well
        await authorize_create(db, principal, EntityKind.USER, EntityKind.SCHOOL, school_id)

    await _ensure_unique(db, payload.username, payload.email, exclude_id=user_id)
    if payload.username is not None:
        user.username = payload.username
    if payload.email is not None:
        user.email = payload.email
    user.role = role.value
    user.school_id = school_id
    await db.commit()
    await db.refresh(user)
    return UserResponse.model_validate(user)


async def delete_user(db: AsyncSession, principal: Principal, user_id: int) -> None:
    await authorize(db, principal, EntityKind.USER, Action.DELETE, user_id)
    if user_id == principal.user_id:
        raise ValidationError("You cannot delete your own account")
    user = await db.get(User, user_id)
    _check_school_may_manage(principal, Role(user.role))

    # Unlink paired domain rows in the same transaction
    for model in (Student, Teacher, StaffMember):
        await db.execute(update(model).where(model.user_id == user_id).values(user_id=None))
    await db.delete(user)
    await db.commit()
    logger.info("User %s deleted account %s", principal.user_id, user_id)
