import pytest

from schooldesk.auth.rbac import (
    POLICY_TABLE,
    Access,
    Action,
    EntityKind,
    Scope,
    ScopeClass,
    evaluate,
    policy_for,
)
from schooldesk.auth.schemas import Principal
from schooldesk.core.enums import DenyReason, Role

ALL_ACTIONS = list(Action)


def _principal(role: Role, user_id: int = 1, school_id=1) -> Principal:
    return Principal(
        user_id=user_id,
        role=role,
        home_school_id=None if role is Role.ADMIN else school_id,
        username=f"{role.value.lower()}{user_id}",
    )


def test_every_kind_has_a_policy() -> None:
    assert set(POLICY_TABLE) == set(EntityKind)


def test_admin_is_not_in_the_table() -> None:
    for policy in POLICY_TABLE.values():
        assert Role.ADMIN not in policy.grants


def test_self_grants_only_on_kinds_with_an_owner() -> None:
    for kind, policy in POLICY_TABLE.items():
        uses_self = any(
            grant.read is Access.SELF or grant.write is Access.SELF for grant in policy.grants.values()
        )
        if uses_self:
            assert policy.scope_class.has_owner, kind


@pytest.mark.parametrize("kind", list(EntityKind))
@pytest.mark.parametrize("action", ALL_ACTIONS)
def test_admin_bypass(kind: EntityKind, action: Action) -> None:
    admin = _principal(Role.ADMIN)
    for scope in (Scope(owner_school_id=1), Scope(owner_school_id=99, owner_user_id=42), Scope(None)):
        assert evaluate(admin, kind, action, scope).allowed


@pytest.mark.parametrize("kind", list(EntityKind))
@pytest.mark.parametrize("action", ALL_ACTIONS)
def test_school_principal_never_crosses_tenants(kind: EntityKind, action: Action) -> None:
    school = _principal(Role.SCHOOL, school_id=2)
    decision = evaluate(school, kind, action, Scope(owner_school_id=1, owner_user_id=5))
    assert not decision.allowed
    assert decision.reason in (DenyReason.CROSS_TENANT, DenyReason.INSUFFICIENT_ROLE)


@pytest.mark.parametrize("role", [Role.SCHOOL, Role.TEACHER, Role.STUDENT, Role.STAFF])
@pytest.mark.parametrize("kind", list(EntityKind))
@pytest.mark.parametrize("action", ALL_ACTIONS)
def test_table_is_followed(role: Role, kind: EntityKind, action: Action) -> None:
    principal = _principal(role, user_id=7, school_id=1)
    own = Scope(owner_school_id=1, owner_user_id=7)
    grant = policy_for(kind).grants.get(role)
    access = grant.for_action(action) if grant else None

    decision = evaluate(principal, kind, action, own)
    if access is None:
        assert decision.reason is DenyReason.INSUFFICIENT_ROLE
    else:
        assert decision.allowed


def test_school_manages_its_own_school_only() -> None:
    school = _principal(Role.SCHOOL, school_id=1)
    assert evaluate(school, EntityKind.CLASS, Action.CREATE, Scope(1)).allowed
    assert evaluate(school, EntityKind.CLASS, Action.CREATE, Scope(2)).reason is DenyReason.CROSS_TENANT
    # Schools cannot edit their own school row
    assert evaluate(school, EntityKind.SCHOOL, Action.UPDATE, Scope(1)).reason is DenyReason.INSUFFICIENT_ROLE


def test_student_reads_own_attendance_and_report() -> None:
    me = _principal(Role.STUDENT, user_id=10, school_id=1)
    mine = Scope(owner_school_id=1, owner_user_id=10)
    theirs = Scope(owner_school_id=1, owner_user_id=11)

    for kind in (EntityKind.STUDENT_ATTENDANCE, EntityKind.REPORT, EntityKind.STUDENT_FEE, EntityKind.STUDENT):
        assert evaluate(me, kind, Action.READ, mine).allowed
        decision = evaluate(me, kind, Action.READ, theirs)
        assert not decision.allowed
        assert decision.reason is DenyReason.NOT_OWNER


def test_self_scope_needs_a_linked_owner() -> None:
    me = _principal(Role.STUDENT, user_id=10, school_id=1)
    unlinked = Scope(owner_school_id=1, owner_user_id=None)
    assert evaluate(me, EntityKind.REPORT, Action.READ, unlinked).reason is DenyReason.NOT_OWNER


def test_student_cannot_write_own_records() -> None:
    me = _principal(Role.STUDENT, user_id=10, school_id=1)
    mine = Scope(owner_school_id=1, owner_user_id=10)
    decision = evaluate(me, EntityKind.REPORT, Action.UPDATE, mine)
    assert decision.reason is DenyReason.INSUFFICIENT_ROLE


def test_teacher_reads_only_own_attendance_and_salary() -> None:
    teacher = _principal(Role.TEACHER, user_id=7, school_id=1)
    assert evaluate(teacher, EntityKind.TEACHER_ATTENDANCE, Action.READ, Scope(1, 7)).allowed
    assert evaluate(teacher, EntityKind.TEACHER_ATTENDANCE, Action.READ, Scope(1, 9)).reason is DenyReason.NOT_OWNER
    assert evaluate(teacher, EntityKind.TEACHER_SALARY, Action.READ, Scope(1, 9)).reason is DenyReason.NOT_OWNER
    assert evaluate(teacher, EntityKind.SALARY, Action.READ, Scope(1)).reason is DenyReason.INSUFFICIENT_ROLE


def test_teacher_marks_student_attendance_in_own_school() -> None:
    teacher = _principal(Role.TEACHER, user_id=7, school_id=1)
    assert evaluate(teacher, EntityKind.STUDENT_ATTENDANCE, Action.CREATE, Scope(1, 50)).allowed
    assert (
        evaluate(teacher, EntityKind.STUDENT_ATTENDANCE, Action.CREATE, Scope(2, 50)).reason
        is DenyReason.CROSS_TENANT
    )


@pytest.mark.parametrize("kind", [EntityKind.NOTICE, EntityKind.EVENT, EntityKind.HOLIDAY])
def test_bulletin_is_readable_school_wide(kind: EntityKind) -> None:
    for role in (Role.TEACHER, Role.STUDENT, Role.STAFF):
        principal = _principal(role, school_id=1)
        assert evaluate(principal, kind, Action.READ, Scope(1)).allowed
        assert evaluate(principal, kind, Action.READ, Scope(2)).reason is DenyReason.CROSS_TENANT
        assert evaluate(principal, kind, Action.CREATE, Scope(1)).reason is DenyReason.INSUFFICIENT_ROLE


def test_dashboard_is_readable_by_every_school_role() -> None:
    for role in (Role.SCHOOL, Role.TEACHER, Role.STUDENT, Role.STAFF):
        principal = _principal(role, school_id=1)
        assert evaluate(principal, EntityKind.DASHBOARD, Action.READ, Scope(1)).allowed
        assert evaluate(principal, EntityKind.DASHBOARD, Action.READ, Scope(2)).reason is DenyReason.CROSS_TENANT


def test_principal_without_school_is_denied_tenant_access() -> None:
    orphan = Principal(user_id=3, role=Role.SCHOOL, home_school_id=None, username="orphan")
    assert evaluate(orphan, EntityKind.CLASS, Action.READ, Scope(None)).reason is DenyReason.CROSS_TENANT


def test_scope_classes() -> None:
    assert policy_for(EntityKind.SCHOOL).scope_class is ScopeClass.TENANT
    assert policy_for(EntityKind.REPORT).scope_class is ScopeClass.TENANT_AND_SELF
    assert not ScopeClass.TENANT.has_owner
    assert ScopeClass.TENANT_AND_SELF.has_owner
