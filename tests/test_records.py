import pytest
from httpx import AsyncClient
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.api.subjects.service import TEACHER_OTHER_SCHOOL
from schooldesk.core.enums import Role
from schooldesk.core.models import Fee, SchoolClass, StaffMember, Student, Subject


async def _count(db: AsyncSession, model, *where) -> int:
    return (await db.execute(select(func.count()).select_from(model).where(*where))).scalar_one()


async def _create_fee(client: AsyncClient, headers, student_id: int, **extra) -> dict:
    response = await client.post(
        "/api/fees",
        json={"studentId": student_id, "amount": 500, "dueDate": "2025-07-01", **extra},
        headers=headers,
    )
    assert response.status_code == 201
    return response.json()


# Accounts


@pytest.mark.asyncio
async def test_school_creates_accounts_in_own_school(client: AsyncClient, world, headers_for) -> None:
    headers = headers_for(world.oak.school_user)
    created = await client.post(
        "/api/users",
        json={"username": "new_teacher", "email": "new.teacher@example.com", "password": "password123", "role": "Teacher"},
        headers=headers,
    )
    assert created.status_code == 201
    assert created.json()["schoolId"] == world.oak.school.id

    office = await client.post(
        "/api/users",
        json={"username": "second_office", "email": "office2@example.com", "password": "password123", "role": "School"},
        headers=headers,
    )
    assert office.status_code == 403
    assert office.json() == {"message": "Access denied: Schools can only manage Teachers, Students, or Staff"}

    duplicate = await client.post(
        "/api/users",
        json={"username": "oak_teacher", "email": "other@example.com", "password": "password123", "role": "Teacher"},
        headers=headers,
    )
    assert duplicate.status_code == 400
    assert duplicate.json() == {"message": "Username or email already exists"}


@pytest.mark.asyncio
async def test_school_cannot_edit_peer_school_accounts(
    client: AsyncClient, world, make_user, headers_for
) -> None:
    peer = await make_user("oak_office_2", Role.SCHOOL, world.oak.school.id)
    response = await client.put(
        f"/api/users/{peer.id}", json={"role": "Teacher"}, headers=headers_for(world.oak.school_user)
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_accounts_routes_alias_the_user_routes(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    headers = headers_for(world.oak.school_user)
    listed = await client.get("/api/accounts", headers=headers)
    assert listed.status_code == 200
    assert [u["username"] for u in listed.json()] == ["oak_office", "oak_teacher", "oak_student", "oak_staff"]

    foreign = await client.get(f"/api/accounts?schoolId={world.elm.school.id}", headers=headers)
    assert foreign.status_code == 403

    renamed = await client.put(
        f"/api/accounts/{world.oak.staff_user.id}", json={"email": "clerk@example.com"}, headers=headers
    )
    assert renamed.status_code == 200
    assert renamed.json()["email"] == "clerk@example.com"

    removed = await client.delete(f"/api/accounts/{world.oak.staff_user.id}", headers=headers)
    assert removed.status_code == 204
    linked = (StaffMember.user_id.is_not(None), StaffMember.school_id == world.oak.school.id)
    assert await _count(db_session, StaffMember, *linked) == 0


@pytest.mark.asyncio
async def test_admin_account_needs_no_school(client: AsyncClient, world, headers_for) -> None:
    response = await client.post(
        "/api/users",
        json={
            "username": "second_admin",
            "email": "admin2@example.com",
            "password": "password123",
            "role": "Admin",
            "schoolId": world.oak.school.id,
        },
        headers=headers_for(world.admin),
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Admins cannot be associated with a school"}


@pytest.mark.asyncio
async def test_user_cannot_delete_own_account(client: AsyncClient, world, headers_for) -> None:
    user = world.oak.school_user
    response = await client.delete(f"/api/users/{user.id}", headers=headers_for(user))
    assert response.status_code == 400
    assert response.json() == {"message": "You cannot delete your own account"}


@pytest.mark.asyncio
async def test_deleting_an_account_unlinks_the_student(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    oak = world.oak
    response = await client.delete(f"/api/users/{oak.student_user.id}", headers=headers_for(world.admin))
    assert response.status_code == 204
    linked = (await db_session.execute(select(Student.user_id).where(Student.id == oak.student.id))).scalar_one()
    assert linked is None


@pytest.mark.asyncio
async def test_change_password_across_schools_is_forbidden(client: AsyncClient, world, headers_for) -> None:
    response = await client.put(
        f"/api/users/{world.elm.teacher_user.id}/change-password",
        json={"newPassword": "another-password"},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 403

    own = await client.put(
        f"/api/users/{world.oak.teacher_user.id}/change-password",
        json={"newPassword": "another-password"},
        headers=headers_for(world.oak.school_user),
    )
    assert own.status_code == 200


# Schools


@pytest.mark.asyncio
async def test_school_with_classes_cannot_be_deleted(client: AsyncClient, world, headers_for) -> None:
    response = await client.delete(f"/api/schools/{world.oak.school.id}", headers=headers_for(world.admin))
    assert response.status_code == 400
    assert response.json() == {"message": "Cannot delete school: it still has classes"}


@pytest.mark.asyncio
async def test_school_names_are_admin_only(client: AsyncClient, world, headers_for) -> None:
    names = await client.get("/api/schools/names", headers=headers_for(world.admin))
    assert names.status_code == 200
    assert sorted(s["name"] for s in names.json()) == ["elm School", "oak School"]

    denied = await client.get("/api/schools/names", headers=headers_for(world.oak.school_user))
    assert denied.status_code == 403


@pytest.mark.asyncio
async def test_staff_cannot_list_classes(client: AsyncClient, world, headers_for) -> None:
    response = await client.get("/api/classes", headers=headers_for(world.oak.staff_user))
    assert response.status_code == 403
    assert response.json() == {"message": "Access denied: your role cannot perform this action"}


# Subjects and reports


@pytest.mark.asyncio
async def test_subject_teacher_must_share_the_school(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    headers = headers_for(world.oak.school_user)
    body = {"classId": world.oak.klass.id, "name": "Maths"}

    foreign = await client.post("/api/subjects", json={**body, "teacherId": world.elm.teacher.id}, headers=headers)
    assert foreign.status_code == 400
    assert foreign.json() == {"message": TEACHER_OTHER_SCHOOL}
    assert await _count(db_session, Subject) == 0

    local = await client.post("/api/subjects", json={**body, "teacherId": world.oak.teacher.id}, headers=headers)
    assert local.status_code == 201
    assert local.json()["teacherId"] == world.oak.teacher.id


# Moving records between schools


@pytest.mark.asyncio
async def test_teacher_with_subjects_cannot_change_school(client: AsyncClient, world, headers_for) -> None:
    admin = headers_for(world.admin)
    subject = await client.post(
        "/api/subjects",
        json={"classId": world.oak.klass.id, "name": "Maths", "teacherId": world.oak.teacher.id},
        headers=admin,
    )
    assert subject.status_code == 201

    response = await client.put(
        f"/api/teachers/{world.oak.teacher.id}", json={"schoolId": world.elm.school.id}, headers=admin
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Cannot move teacher to another school: still assigned to subjects"}


@pytest.mark.asyncio
async def test_teacher_account_must_follow_the_move(client: AsyncClient, world, headers_for) -> None:
    # The oak teacher has no subjects but is still linked to an oak account
    response = await client.put(
        f"/api/teachers/{world.oak.teacher.id}",
        json={"schoolId": world.elm.school.id},
        headers=headers_for(world.admin),
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Linked account belongs to another school"}


@pytest.mark.asyncio
async def test_class_cannot_move_away_from_its_teachers(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    admin = headers_for(world.admin)
    await client.post(
        "/api/subjects",
        json={"classId": world.oak.klass.id, "name": "Maths", "teacherId": world.oak.teacher.id},
        headers=admin,
    )

    response = await client.put(
        f"/api/classes/{world.oak.klass.id}", json={"schoolId": world.elm.school.id}, headers=admin
    )
    assert response.status_code == 400
    assert response.json() == {
        "message": "Cannot move class to another school: its subjects have teachers of the old school"
    }
    assert await _count(db_session, SchoolClass, SchoolClass.school_id == world.oak.school.id) == 1


@pytest.mark.asyncio
async def test_class_cannot_move_away_from_student_accounts(client: AsyncClient, world, headers_for) -> None:
    response = await client.put(
        f"/api/classes/{world.oak.klass.id}",
        json={"schoolId": world.elm.school.id},
        headers=headers_for(world.admin),
    )
    assert response.status_code == 400
    assert response.json() == {
        "message": "Cannot move class to another school: its students have accounts of the old school"
    }


@pytest.mark.asyncio
async def test_empty_class_moves_school(client: AsyncClient, world, headers_for) -> None:
    admin = headers_for(world.admin)
    created = await client.post(
        "/api/classes", json={"schoolId": world.oak.school.id, "name": "6", "section": "B"}, headers=admin
    )
    assert created.status_code == 201

    moved = await client.put(
        f"/api/classes/{created.json()['id']}", json={"schoolId": world.elm.school.id}, headers=admin
    )
    assert moved.status_code == 200
    assert moved.json()["schoolId"] == world.elm.school.id


@pytest.mark.asyncio
async def test_teacher_records_marks_and_student_reads_them(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    oak = world.oak
    subject = Subject(class_id=oak.klass.id, name="Science")
    db_session.add(subject)
    await db_session.commit()

    created = await client.post(
        "/api/reports",
        json={"studentId": oak.student.id, "subjectId": subject.id, "marks": 88.5},
        headers=headers_for(oak.teacher_user),
    )
    assert created.status_code == 201
    assert created.json()["subjectName"] == "Science"

    out_of_range = await client.post(
        "/api/reports",
        json={"studentId": oak.student.id, "subjectId": subject.id, "marks": 101},
        headers=headers_for(oak.teacher_user),
    )
    assert out_of_range.status_code == 400

    own = await client.get("/api/reports", params={"studentId": oak.student.id}, headers=headers_for(oak.student_user))
    assert own.status_code == 200
    assert [r["marks"] for r in own.json()] == [88.5]

    elm_student = await client.get(
        "/api/reports", params={"studentId": oak.student.id}, headers=headers_for(world.elm.student_user)
    )
    assert elm_student.status_code == 403


# Attendance


@pytest.mark.asyncio
async def test_one_attendance_record_per_day(client: AsyncClient, world, headers_for) -> None:
    headers = headers_for(world.oak.teacher_user)
    body = {"studentId": world.oak.student.id, "date": "2025-06-04", "status": "Present"}
    first = await client.post("/api/attendance", json=body, headers=headers)
    assert first.status_code == 201

    second = await client.post("/api/attendance", json={**body, "status": "Absent"}, headers=headers)
    assert second.status_code == 400
    assert second.json() == {"message": "Attendance record already exists for this student on this date"}


@pytest.mark.asyncio
async def test_teacher_cannot_mark_another_school(client: AsyncClient, world, headers_for) -> None:
    response = await client.post(
        "/api/attendance",
        json={"studentId": world.elm.student.id, "date": "2025-06-04", "status": "Present"},
        headers=headers_for(world.oak.teacher_user),
    )
    assert response.status_code == 403


# Fees, salaries and the school ledger


@pytest.mark.asyncio
async def test_fee_update_recomputes_balance(client: AsyncClient, world, headers_for) -> None:
    headers = headers_for(world.oak.school_user)
    fee = await _create_fee(client, headers, world.oak.student.id, fine=20)
    assert fee["balance"] == 520.0

    updated = await client.put(f"/api/fees/{fee['id']}", json={"submitted": 200}, headers=headers)
    assert updated.status_code == 200
    assert updated.json()["balance"] == 320.0

    over = await client.put(f"/api/fees/{fee['id']}", json={"submitted": 600}, headers=headers)
    assert over.status_code == 400
    assert over.json() == {"message": "Submitted amount cannot exceed the fee amount"}


@pytest.mark.asyncio
async def test_student_sees_own_fees_only(client: AsyncClient, world, headers_for) -> None:
    await _create_fee(client, headers_for(world.oak.school_user), world.oak.student.id)
    student = headers_for(world.oak.student_user)

    own = await client.get(f"/api/fees/student/{world.oak.student.id}", headers=student)
    assert own.status_code == 200
    assert len(own.json()) == 1

    other = await client.get(f"/api/fees/student/{world.elm.student.id}", headers=student)
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_school_ledger_is_tenant_scoped(client: AsyncClient, world, headers_for) -> None:
    oak = world.oak
    await _create_fee(client, headers_for(oak.school_user), oak.student.id)
    path = f"/api/accounts/school/{oak.school.id}/fees"

    own = await client.get(path, headers=headers_for(oak.school_user))
    assert own.status_code == 200
    assert [f["studentName"] for f in own.json()] == ["oak Student"]

    assert (await client.get(path, headers=headers_for(world.elm.school_user))).status_code == 403
    assert (await client.get(path, headers=headers_for(oak.teacher_user))).status_code == 403


@pytest.mark.asyncio
async def test_ledger_splits_teacher_and_staff_salaries(client: AsyncClient, world, headers_for) -> None:
    oak = world.oak
    headers = headers_for(oak.school_user)
    for payee in ({"teacherId": oak.teacher.id}, {"staffId": oak.staff.id}):
        response = await client.post(
            "/api/accounts/salaries", json={**payee, "amount": 900, "month": "2025-06"}, headers=headers
        )
        assert response.status_code == 201

    teachers = await client.get(f"/api/accounts/school/{oak.school.id}/teacher-salaries", headers=headers)
    staff = await client.get(f"/api/accounts/school/{oak.school.id}/staff-salaries", headers=headers)
    assert [s["payeeName"] for s in teachers.json()] == ["oak Teacher"]
    assert [s["payeeName"] for s in staff.json()] == ["oak Clerk"]


@pytest.mark.asyncio
async def test_teacher_reads_own_salary_only(client: AsyncClient, world, headers_for) -> None:
    for campus in (world.oak, world.elm):
        response = await client.post(
            "/api/salaries",
            json={"teacherId": campus.teacher.id, "amount": 1200, "month": "2025-06"},
            headers=headers_for(campus.school_user),
        )
        assert response.status_code == 201

    teacher = headers_for(world.oak.teacher_user)
    own = await client.get(f"/api/salaries/teacher/{world.oak.teacher.id}", headers=teacher)
    assert own.status_code == 200
    assert [s["status"] for s in own.json()] == ["Not Credited"]

    other = await client.get(f"/api/salaries/teacher/{world.elm.teacher.id}", headers=teacher)
    assert other.status_code == 403


@pytest.mark.asyncio
async def test_net_salary_may_go_negative(client: AsyncClient, world, headers_for) -> None:
    response = await client.post(
        "/api/salaries",
        json={"staffId": world.oak.staff.id, "amount": 100, "tax": 200, "month": "2025-06"},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 201
    assert response.json()["netSalary"] == -100.0


# Cascades


@pytest.mark.asyncio
async def test_deleting_a_student_removes_their_fees(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    headers = headers_for(world.oak.school_user)
    await _create_fee(client, headers, world.oak.student.id)

    response = await client.delete(f"/api/students/{world.oak.student.id}", headers=headers)
    assert response.status_code == 204
    assert await _count(db_session, Fee) == 0
    assert await _count(db_session, Student, Student.id == world.oak.student.id) == 0


@pytest.mark.asyncio
async def test_class_with_students_cannot_be_deleted(client: AsyncClient, world, headers_for) -> None:
    response = await client.delete(f"/api/classes/{world.oak.klass.id}", headers=headers_for(world.oak.school_user))
    assert response.status_code == 400
    assert response.json() == {"message": "Cannot delete class: it still has students"}
