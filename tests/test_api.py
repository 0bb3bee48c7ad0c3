import datetime

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from schooldesk.auth.models import User
from schooldesk.auth.security import create_access_token
from schooldesk.core.config import Settings
from schooldesk.core.enums import Role
from schooldesk.core.models import Attendance, Fee, Holiday, Salary, SchoolClass, Teacher
from schooldesk.db.session import get_db
from schooldesk.main import create_app

PASSWORD = "password123"


async def _count(db: AsyncSession, model, *where) -> int:
    return (await db.execute(select(func.count()).select_from(model).where(*where))).scalar_one()


# Login and principal resolution


@pytest.mark.asyncio
async def test_login_returns_token_and_role(client: AsyncClient, make_user) -> None:
    await make_user("oak_admin", Role.ADMIN)
    response = await client.post("/api/login", json={"username": "oak_admin", "password": PASSWORD})
    assert response.status_code == 200
    body = response.json()
    assert body["token"]
    assert body["role"] == "Admin"
    assert body["schoolId"] is None

    me = await client.get("/api/users/me", headers={"Authorization": f"Bearer {body['token']}"})
    assert me.status_code == 200
    assert me.json()["username"] == "oak_admin"


@pytest.mark.asyncio
async def test_login_with_wrong_password(client: AsyncClient, make_user) -> None:
    await make_user("someone", Role.ADMIN)
    response = await client.post("/api/login", json={"username": "someone", "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json() == {"message": "Invalid credentials"}


@pytest.mark.asyncio
async def test_missing_or_bad_token_is_unauthenticated(client: AsyncClient) -> None:
    assert (await client.get("/api/classes")).status_code == 401
    response = await client.get("/api/classes", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json() == {"message": "Could not validate credentials"}


@pytest.mark.asyncio
async def test_token_of_deleted_user_is_unauthenticated(
    client: AsyncClient, db_session: AsyncSession, make_user, headers_for
) -> None:
    user = await make_user("gone", Role.ADMIN)
    headers = headers_for(user)
    await db_session.execute(delete(User).where(User.id == user.id))
    await db_session.commit()
    assert (await client.get("/api/users/me", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_expired_token_is_unauthenticated(client: AsyncClient, world) -> None:
    token = create_access_token(subject={"sub": str(world.admin.id)}, expires_minutes=-1)
    response = await client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json() == {"message": "Could not validate credentials"}


@pytest.mark.asyncio
async def test_role_claim_in_token_is_ignored(client: AsyncClient, world) -> None:
    # Role and school always come from the users table
    token = create_access_token(subject={"sub": str(world.oak.school_user.id), "role": "Admin"})
    headers = {"Authorization": f"Bearer {token}"}
    response = await client.get(f"/api/schools/{world.elm.school.id}", headers=headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_app_settings_sign_and_verify_tokens(sessionmaker, make_user, headers_for) -> None:
    app = create_app(Settings(DATABASE_URL="sqlite+aiosqlite:///:memory:", JWT_SECRET_KEY="another-secret"))

    async def override_get_db():
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    user = await make_user("rotated", Role.ADMIN)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        login = await ac.post("/api/login", json={"username": "rotated", "password": PASSWORD})
        assert login.status_code == 200
        token = login.json()["token"]
        own = await ac.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
        assert own.status_code == 200

        # Signed with the process-wide secret, which this app does not use
        stale = await ac.get("/api/users/me", headers=headers_for(user))
        assert stale.status_code == 401


@pytest.mark.asyncio
async def test_reset_password_checks_current_password(client: AsyncClient, world, headers_for) -> None:
    headers = headers_for(world.oak.teacher_user)
    wrong = await client.post(
        "/api/users/reset-password",
        json={"currentPassword": "nope", "newPassword": "new-password-1"},
        headers=headers,
    )
    assert wrong.status_code == 400
    assert wrong.json()["message"] == "Current password is incorrect"

    ok = await client.post(
        "/api/users/reset-password",
        json={"currentPassword": PASSWORD, "newPassword": "new-password-1"},
        headers=headers,
    )
    assert ok.status_code == 200
    login = await client.post("/api/login", json={"username": "oak_teacher", "password": "new-password-1"})
    assert login.status_code == 200


# Scenarios


@pytest.mark.asyncio
async def test_class_roster_is_school_filtered(client: AsyncClient, make_user, headers_for) -> None:
    admin = headers_for(await make_user("root", Role.ADMIN))

    school = await client.post("/api/schools", json={"name": "Oak Elementary"}, headers=admin)
    assert school.status_code == 201
    school_id = school.json()["id"]
    other = await client.post("/api/schools", json={"name": "Elm Middle"}, headers=admin)
    other_id = other.json()["id"]

    klass = await client.post(
        "/api/classes", json={"schoolId": school_id, "name": "5", "section": "A"}, headers=admin
    )
    assert klass.status_code == 201
    class_id = klass.json()["id"]

    ana = await client.post(
        "/api/students",
        json={"name": "Ana", "rollNo": "1", "email": "ana@example.com", "classId": class_id},
        headers=admin,
    )
    assert ana.status_code == 201

    own = headers_for(await make_user("oak_office", Role.SCHOOL, school_id))
    roster = await client.get(f"/api/students/class/{class_id}", headers=own)
    assert roster.status_code == 200
    assert [s["name"] for s in roster.json()] == ["Ana"]
    assert roster.json()[0]["className"]

    outsider = headers_for(await make_user("elm_office", Role.SCHOOL, other_id))
    hidden = await client.get(f"/api/students/class/{class_id}", headers=outsider)
    assert hidden.status_code == 404


@pytest.mark.asyncio
async def test_school_cannot_create_class_in_another_school(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    before = await _count(db_session, SchoolClass)
    response = await client.post(
        "/api/classes",
        json={"schoolId": world.elm.school.id, "name": "6", "section": "B"},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 403
    assert response.json() == {"message": "Access denied: resource belongs to another school"}
    assert await _count(db_session, SchoolClass) == before


@pytest.mark.asyncio
async def test_teacher_reads_only_own_attendance(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    oak = world.oak
    colleague = Teacher(school_id=oak.school.id, name="Colleague", email="colleague@example.com")
    db_session.add(colleague)
    await db_session.flush()
    db_session.add_all(
        [
            Attendance(teacher_id=oak.teacher.id, date=datetime.date(2025, 6, 2), status="Present"),
            Attendance(teacher_id=colleague.id, date=datetime.date(2025, 6, 2), status="Absent"),
        ]
    )
    await db_session.commit()

    teacher = headers_for(oak.teacher_user)
    own = await client.get(f"/api/attendance/teacher/{oak.teacher.id}", headers=teacher)
    assert own.status_code == 200
    assert [r["status"] for r in own.json()] == ["Present"]

    theirs = await client.get(f"/api/attendance/teacher/{colleague.id}", headers=teacher)
    assert theirs.status_code == 403
    assert theirs.json() == {"message": "Access denied: you can only access your own records"}

    office = await client.get(f"/api/attendance/teacher/{colleague.id}", headers=headers_for(oak.school_user))
    assert office.status_code == 200


@pytest.mark.asyncio
async def test_holiday_ending_before_it_starts(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    response = await client.post(
        "/api/holidays",
        json={"name": "Summer", "startDate": "2025-06-10", "endDate": "2025-06-01"},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 400
    assert response.json() == {"message": "End date cannot be before start date"}
    assert await _count(db_session, Holiday) == 0


# Properties


@pytest.mark.asyncio
async def test_broken_parent_chain_is_not_found_before_forbidden(
    client: AsyncClient, db_session: AsyncSession, world, headers_for
) -> None:
    oak = world.oak
    await db_session.execute(delete(SchoolClass).where(SchoolClass.id == oak.klass.id))
    await db_session.commit()

    response = await client.delete(f"/api/students/{oak.student.id}", headers=headers_for(world.elm.school_user))
    assert response.status_code == 404
    assert response.json() == {"message": "Class not found"}


@pytest.mark.asyncio
async def test_cross_school_delete_is_forbidden_and_keeps_the_row(
    client: AsyncClient, world, headers_for
) -> None:
    oak = world.oak
    response = await client.delete(f"/api/students/{oak.student.id}", headers=headers_for(world.elm.school_user))
    assert response.status_code == 403
    still_there = await client.get(f"/api/students/{oak.student.id}", headers=headers_for(oak.school_user))
    assert still_there.status_code == 200


@pytest.mark.asyncio
@pytest.mark.parametrize("both", [True, False])
async def test_attendance_subject_is_exclusive(
    client: AsyncClient, db_session: AsyncSession, world, headers_for, both: bool
) -> None:
    body = {"date": "2025-06-03", "status": "Present"}
    if both:
        body.update(studentId=world.oak.student.id, teacherId=world.oak.teacher.id)
    response = await client.post("/api/attendance", json=body, headers=headers_for(world.oak.school_user))
    assert response.status_code == 400
    assert response.json() == {"message": "Exactly one of studentId or teacherId must be provided"}
    assert await _count(db_session, Attendance) == 0


@pytest.mark.asyncio
async def test_salary_payee_is_exclusive(client: AsyncClient, db_session: AsyncSession, world, headers_for) -> None:
    headers = headers_for(world.oak.school_user)
    both = await client.post(
        "/api/salaries",
        json={"teacherId": world.oak.teacher.id, "staffId": world.oak.staff.id, "amount": 1000, "month": "2025-06"},
        headers=headers,
    )
    neither = await client.post("/api/salaries", json={"amount": 1000, "month": "2025-06"}, headers=headers)
    assert both.status_code == neither.status_code == 400
    assert await _count(db_session, Salary) == 0


@pytest.mark.asyncio
async def test_salary_net_is_computed_on_write(client: AsyncClient, world, headers_for) -> None:
    response = await client.post(
        "/api/salaries",
        json={"staffId": world.oak.staff.id, "amount": 1000, "tax": 100, "pf": 50, "bonus": 20, "month": "2025-06"},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 201
    assert response.json()["netSalary"] == 870.0


@pytest.mark.asyncio
async def test_fee_amount_bounds(client: AsyncClient, db_session: AsyncSession, world, headers_for) -> None:
    headers = headers_for(world.oak.school_user)
    body = {"studentId": world.oak.student.id, "amount": 500, "dueDate": "2025-07-01"}

    too_much = await client.post("/api/fees", json={**body, "submitted": 501}, headers=headers)
    assert too_much.status_code == 400
    assert too_much.json() == {"message": "Submitted amount cannot exceed the fee amount"}

    negative = await client.post("/api/fees", json={**body, "amount": -5}, headers=headers)
    assert negative.status_code == 400
    assert negative.json()["message"].startswith("amount:")
    assert await _count(db_session, Fee) == 0

    paid = await client.post("/api/fees", json={**body, "submitted": 500, "status": "Paid"}, headers=headers)
    assert paid.status_code == 201
    assert paid.json()["balance"] == 0


@pytest.mark.asyncio
async def test_repeated_reads_are_identical(client: AsyncClient, world, headers_for) -> None:
    headers = headers_for(world.oak.school_user)
    first = await client.get(f"/api/students/{world.oak.student.id}", headers=headers)
    second = await client.get(f"/api/students/{world.oak.student.id}", headers=headers)
    assert first.status_code == 200
    assert first.json() == second.json()


@pytest.mark.asyncio
async def test_student_reads_only_own_records(client: AsyncClient, db_session: AsyncSession, world, headers_for) -> None:
    oak = world.oak
    db_session.add(Attendance(student_id=oak.student.id, date=datetime.date(2025, 6, 2), status="Late"))
    await db_session.commit()

    student = headers_for(oak.student_user)
    own = await client.get(f"/api/attendance/student/{oak.student.id}", headers=student)
    assert own.status_code == 200
    assert len(own.json()) == 1

    other = await client.get(f"/api/attendance/student/{world.elm.student.id}", headers=student)
    assert other.status_code == 403

    write = await client.post(
        "/api/attendance",
        json={"studentId": oak.student.id, "date": "2025-06-03", "status": "Present"},
        headers=student,
    )
    assert write.status_code == 403


@pytest.mark.asyncio
async def test_admin_reaches_every_school(client: AsyncClient, world, headers_for) -> None:
    admin = headers_for(world.admin)
    for campus in (world.oak, world.elm):
        response = await client.get(f"/api/students/{campus.student.id}", headers=admin)
        assert response.status_code == 200
    listing = await client.get("/api/classes", headers=admin)
    assert len(listing.json()) == 2


@pytest.mark.asyncio
async def test_listing_is_restricted_to_home_school(client: AsyncClient, world, headers_for) -> None:
    response = await client.get("/api/classes", headers=headers_for(world.oak.school_user))
    assert response.status_code == 200
    assert {c["schoolId"] for c in response.json()} == {world.oak.school.id}

    foreign = await client.get(
        "/api/classes", params={"schoolId": world.elm.school.id}, headers=headers_for(world.oak.school_user)
    )
    assert foreign.status_code == 403


@pytest.mark.asyncio
async def test_missing_entity_is_not_found(client: AsyncClient, world, headers_for) -> None:
    response = await client.get("/api/students/9999", headers=headers_for(world.oak.school_user))
    assert response.status_code == 404
    assert response.json() == {"message": "Student not found"}


@pytest.mark.asyncio
async def test_validation_error_names_the_field(client: AsyncClient, world, headers_for) -> None:
    response = await client.post("/api/schools", json={}, headers=headers_for(world.admin))
    assert response.status_code == 400
    assert response.json()["message"].startswith("name:")


@pytest.mark.asyncio
async def test_duplicate_roll_number(client: AsyncClient, world, headers_for) -> None:
    response = await client.post(
        "/api/students",
        json={"name": "Twin", "rollNo": "1", "email": "twin@example.com", "classId": world.oak.klass.id},
        headers=headers_for(world.oak.school_user),
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Roll number already exists in this class"}


@pytest.mark.asyncio
async def test_bulletin_is_readable_by_the_school(client: AsyncClient, world, headers_for) -> None:
    created = await client.post(
        "/api/notices",
        json={"title": "Sports day", "description": "Friday on the field", "date": "2025-06-20"},
        headers=headers_for(world.oak.school_user),
    )
    assert created.status_code == 201

    for user in (world.oak.teacher_user, world.oak.student_user, world.oak.staff_user):
        listing = await client.get("/api/notices", headers=headers_for(user))
        assert [n["title"] for n in listing.json()] == ["Sports day"]

    elm = await client.get("/api/notices", headers=headers_for(world.elm.student_user))
    assert elm.json() == []


@pytest.mark.asyncio
async def test_dashboard_counts_own_school(client: AsyncClient, world, headers_for) -> None:
    stats = await client.get("/api/dashboard/stats", headers=headers_for(world.oak.school_user))
    assert stats.status_code == 200
    assert stats.json()["totalStudents"] == 1
    assert stats.json()["totalTeachers"] == 1

    everyone = await client.get("/api/dashboard/stats", headers=headers_for(world.admin))
    assert everyone.json()["totalStudents"] == 2

    gender = await client.get("/api/dashboard/gender-data", headers=headers_for(world.oak.school_user))
    assert gender.json() == {"boys": 0, "girls": 1}
