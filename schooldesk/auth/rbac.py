"""
Tenant-scoped authorization policy.

Every entity kind has a fixed classification (tenant, self, or both) and a
per-role grant for reading and for writing. The evaluator is a pure function
of (principal, kind, action, scope); it never touches storage. Resolving the
scope, and reporting a missing row as 404 before a 403, is the caller's job
(schooldesk.auth.scope and schooldesk.auth.access).
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional

from schooldesk.auth.schemas import Principal
from schooldesk.core.enums import DenyReason, Role


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"

    @property
    def is_write(self) -> bool:
        return self is not Action.READ


class EntityKind(str, Enum):
    SCHOOL = "school"
    USER = "user"
    CLASS = "class"
    STUDENT = "student"
    TEACHER = "teacher"
    STAFF = "staff"
    SUBJECT = "subject"
    TIMETABLE = "timetable"
    STUDENT_ATTENDANCE = "student_attendance"
    TEACHER_ATTENDANCE = "teacher_attendance"
    FEE = "fee"
    STUDENT_FEE = "student_fee"
    SALARY = "salary"
    TEACHER_SALARY = "teacher_salary"
    REPORT = "report"
    NOTICE = "notice"
    EVENT = "event"
    HOLIDAY = "holiday"
    DASHBOARD = "dashboard"


class ScopeClass(str, Enum):
    TENANT = "tenant"
    SELF = "self"
    TENANT_AND_SELF = "tenant_and_self"

    @property
    def has_owner(self) -> bool:
        return self is not ScopeClass.TENANT


class Access(str, Enum):
    TENANT = "tenant"  # scope.owner_school_id == principal.home_school_id
    SELF = "self"  # scope.owner_user_id == principal.user_id


@dataclass(frozen=True)
class Scope:
    """Where an entity lives: its owning school and, for self-scoped kinds, its owning user."""

    owner_school_id: Optional[int]
    owner_user_id: Optional[int] = None


@dataclass(frozen=True)
class Grant:
    read: Optional[Access] = None
    write: Optional[Access] = None

    def for_action(self, action: Action) -> Optional[Access]:
        return self.write if action.is_write else self.read


@dataclass(frozen=True)
class EntityPolicy:
    scope_class: ScopeClass
    grants: Dict[Role, Grant] = field(default_factory=dict)


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: Optional[DenyReason] = None

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenyReason) -> "Decision":
        return cls(allowed=False, reason=reason)


_T = Access.TENANT
_S = Access.SELF

# School principals manage everything inside their own school
_SCHOOL_MANAGES = Grant(read=_T, write=_T)

# Everyone attached to a school may read its bulletin
_BULLETIN = EntityPolicy(
    ScopeClass.TENANT,
    {
        Role.SCHOOL: _SCHOOL_MANAGES,
        Role.TEACHER: Grant(read=_T),
        Role.STUDENT: Grant(read=_T),
        Role.STAFF: Grant(read=_T),
    },
)

# Admin is absent on purpose: it bypasses the table.
POLICY_TABLE: Dict[EntityKind, EntityPolicy] = {
    EntityKind.SCHOOL: EntityPolicy(ScopeClass.TENANT, {Role.SCHOOL: Grant(read=_T)}),
    EntityKind.USER: EntityPolicy(ScopeClass.TENANT, {Role.SCHOOL: _SCHOOL_MANAGES}),
    EntityKind.CLASS: EntityPolicy(
        ScopeClass.TENANT,
        {Role.SCHOOL: _SCHOOL_MANAGES, Role.TEACHER: Grant(read=_T)},
    ),
    EntityKind.STUDENT: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {
            Role.SCHOOL: _SCHOOL_MANAGES,
            Role.TEACHER: Grant(read=_T),
            Role.STUDENT: Grant(read=_S),
        },
    ),
    EntityKind.TEACHER: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {Role.SCHOOL: _SCHOOL_MANAGES, Role.TEACHER: Grant(read=_S)},
    ),
    EntityKind.STAFF: EntityPolicy(ScopeClass.TENANT, {Role.SCHOOL: _SCHOOL_MANAGES}),
    EntityKind.SUBJECT: EntityPolicy(
        ScopeClass.TENANT,
        {Role.SCHOOL: _SCHOOL_MANAGES, Role.TEACHER: Grant(read=_T)},
    ),
    EntityKind.TIMETABLE: EntityPolicy(
        ScopeClass.TENANT,
        {Role.SCHOOL: _SCHOOL_MANAGES, Role.TEACHER: Grant(read=_T)},
    ),
    # Teachers mark attendance for the students of their school
    EntityKind.STUDENT_ATTENDANCE: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {
            Role.SCHOOL: _SCHOOL_MANAGES,
            Role.TEACHER: Grant(read=_T, write=_T),
            Role.STUDENT: Grant(read=_S),
        },
    ),
    EntityKind.TEACHER_ATTENDANCE: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {Role.SCHOOL: _SCHOOL_MANAGES, Role.TEACHER: Grant(read=_S)},
    ),
    EntityKind.FEE: EntityPolicy(ScopeClass.TENANT, {Role.SCHOOL: _SCHOOL_MANAGES}),
    # Read-only view of one student's fees
    EntityKind.STUDENT_FEE: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {Role.SCHOOL: Grant(read=_T), Role.STUDENT: Grant(read=_S)},
    ),
    EntityKind.SALARY: EntityPolicy(ScopeClass.TENANT, {Role.SCHOOL: _SCHOOL_MANAGES}),
    # Read-only view of one teacher's salaries
    EntityKind.TEACHER_SALARY: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {Role.SCHOOL: Grant(read=_T), Role.TEACHER: Grant(read=_S)},
    ),
    EntityKind.REPORT: EntityPolicy(
        ScopeClass.TENANT_AND_SELF,
        {
            Role.SCHOOL: _SCHOOL_MANAGES,
            Role.TEACHER: Grant(read=_T, write=_T),
            Role.STUDENT: Grant(read=_S),
        },
    ),
    EntityKind.NOTICE: _BULLETIN,
    EntityKind.EVENT: _BULLETIN,
    EntityKind.HOLIDAY: _BULLETIN,
    # Aggregate counters of one school; the id is the school id
    EntityKind.DASHBOARD: EntityPolicy(
        ScopeClass.TENANT,
        {
            Role.SCHOOL: Grant(read=_T),
            Role.TEACHER: Grant(read=_T),
            Role.STUDENT: Grant(read=_T),
            Role.STAFF: Grant(read=_T),
        },
    ),
}


def policy_for(kind: EntityKind) -> EntityPolicy:
    return POLICY_TABLE[kind]


def evaluate(principal: Principal, kind: EntityKind, action: Action, scope: Scope) -> Decision:
    """Decide whether principal may perform action on an entity of kind living in scope."""
    role = principal.role
    if role is Role.ADMIN:
        return Decision.allow()
    if role not in (Role.SCHOOL, Role.TEACHER, Role.STUDENT, Role.STAFF):
        raise ValueError(f"Unhandled role: {role!r}")

    grant = POLICY_TABLE[kind].grants.get(role)
    access = grant.for_action(action) if grant else None
    if access is None:
        return Decision.deny(DenyReason.INSUFFICIENT_ROLE)

    if access is Access.SELF:
        if scope.owner_user_id is not None and scope.owner_user_id == principal.user_id:
            return Decision.allow()
        return Decision.deny(DenyReason.NOT_OWNER)

    if principal.home_school_id is not None and scope.owner_school_id == principal.home_school_id:
        return Decision.allow()
    return Decision.deny(DenyReason.CROSS_TENANT)
