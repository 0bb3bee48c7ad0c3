"""
Per-request authorization glue used by every service.

Order is fixed: resolve the scope first (a dangling reference is a 404),
then evaluate the policy (a deny is a 403). Nothing is written before both
steps pass.
"""
import logging
from dataclasses import replace
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.rbac import Action, EntityKind, Scope, evaluate, policy_for
from schooldesk.auth.schemas import Principal
from schooldesk.auth.scope import resolve_scope
from schooldesk.core.enums import Role
from schooldesk.core.exceptions import ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


def check(principal: Principal, kind: EntityKind, action: Action, scope: Scope) -> None:
    decision = evaluate(principal, kind, action, scope)
    if not decision.allowed:
        logger.info(
            "Denied %s on %s for user %s (%s): %s",
            action.value,
            kind.value,
            principal.user_id,
            principal.role.value,
            decision.reason.value,
        )
        raise ForbiddenError(decision.reason)


async def authorize(
    db: AsyncSession,
    principal: Principal,
    kind: EntityKind,
    action: Action,
    entity_id: int,
    *,
    via: Optional[EntityKind] = None,
) -> Scope:
    """Resolve the scope of entity_id and check action on kind against it.

    ``via`` names the table entity_id belongs to when it differs from kind,
    e.g. a student's attendance listing is keyed by the student id.
    """
    scope = await resolve_scope(db, via or kind, entity_id)
    if not policy_for(kind).scope_class.has_owner:
        scope = replace(scope, owner_user_id=None)
    check(principal, kind, action, scope)
    return scope


async def authorize_create(
    db: AsyncSession,
    principal: Principal,
    kind: EntityKind,
    parent_kind: EntityKind,
    parent_id: int,
) -> Scope:
    """Scope admissibility for a create: the claimed parent must exist and the caller may write inside it."""
    scope = await resolve_scope(db, parent_kind, parent_id)
    check(principal, kind, Action.CREATE, scope)
    return scope


def school_filter(principal: Principal, kind: EntityKind, school_id: Optional[int] = None) -> Optional[int]:
    """School a listing is restricted to. None means every school and is only returned for Admin."""
    if principal.role is Role.ADMIN:
        return school_id
    target = school_id if school_id is not None else principal.home_school_id
    check(principal, kind, Action.READ, Scope(owner_school_id=target))
    return target


async def class_in_reach(db: AsyncSession, principal: Principal, kind: EntityKind, class_id: int) -> Scope:
    """Look up a class for a class-keyed listing.

    Listings are school-filtered, so a class outside the caller's school is
    reported as not found rather than forbidden.
    """
    scope = await resolve_scope(db, EntityKind.CLASS, class_id)
    if principal.role is not Role.ADMIN and scope.owner_school_id != principal.home_school_id:
        raise NotFoundError("Class not found")
    check(principal, kind, Action.READ, scope)
    return scope
