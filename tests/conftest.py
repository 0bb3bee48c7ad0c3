import os
from types import SimpleNamespace
from typing import AsyncGenerator, Callable, Dict, Optional

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from schooldesk.auth.models import User
from schooldesk.auth.schemas import Principal
from schooldesk.auth.security import create_access_token, hash_password
from schooldesk.core.enums import Role
from schooldesk.core.models import School, SchoolClass, StaffMember, Student, Teacher
from schooldesk.db.session import Base, get_db
from schooldesk.main import app

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
TEST_PASSWORD = "password123"


@pytest.fixture()
async def sessionmaker() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory database per test. StaticPool keeps every session on the same connection."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, future=True, poolclass=StaticPool)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(sessionmaker: async_sessionmaker) -> AsyncGenerator[AsyncSession, None]:
    """Session for test setup and assertions. Requests get their own sessions."""
    async with sessionmaker() as session:
        yield session


@pytest.fixture()
async def client(sessionmaker: async_sessionmaker) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client bound to the FastAPI app."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with sessionmaker() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture()
def headers_for() -> Callable[[User], Dict[str, str]]:
    def _headers(user: User) -> Dict[str, str]:
        token = create_access_token(subject={"sub": str(user.id)})
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture()
def make_user(db_session: AsyncSession):
    async def _make(username: str, role: Role, school_id: Optional[int] = None) -> User:
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash=hash_password(TEST_PASSWORD),
            role=role.value,
            school_id=school_id,
        )
        db_session.add(user)
        await db_session.commit()
        await db_session.refresh(user)
        return user

    return _make


async def _seed_school(db: AsyncSession, make_user, tag: str) -> SimpleNamespace:
    school = School(name=f"{tag} School")
    db.add(school)
    await db.flush()

    klass = SchoolClass(school_id=school.id, name="5", section="A")
    db.add(klass)
    await db.commit()

    school_user = await make_user(f"{tag}_office", Role.SCHOOL, school.id)
    teacher_user = await make_user(f"{tag}_teacher", Role.TEACHER, school.id)
    student_user = await make_user(f"{tag}_student", Role.STUDENT, school.id)
    staff_user = await make_user(f"{tag}_staff", Role.STAFF, school.id)

    teacher = Teacher(school_id=school.id, user_id=teacher_user.id, name=f"{tag} Teacher", email=f"{tag}.t@example.com")
    student = Student(
        class_id=klass.id,
        user_id=student_user.id,
        name=f"{tag} Student",
        roll_no="1",
        email=f"{tag}.s@example.com",
        gender="Female",
    )
    staff = StaffMember(school_id=school.id, user_id=staff_user.id, name=f"{tag} Clerk", email=f"{tag}.c@example.com")
    db.add_all([teacher, student, staff])
    await db.commit()

    return SimpleNamespace(
        school=school,
        klass=klass,
        teacher=teacher,
        student=student,
        staff=staff,
        school_user=school_user,
        teacher_user=teacher_user,
        student_user=student_user,
        staff_user=staff_user,
    )


@pytest.fixture()
async def world(db_session: AsyncSession, make_user) -> SimpleNamespace:
    """Two schools with one of everything each, plus an Admin account."""
    admin = await make_user("admin", Role.ADMIN)
    oak = await _seed_school(db_session, make_user, "oak")
    elm = await _seed_school(db_session, make_user, "elm")
    return SimpleNamespace(admin=admin, oak=oak, elm=elm)


def principal_of(user: User) -> Principal:
    role = Role(user.role)
    return Principal(
        user_id=user.id,
        role=role,
        home_school_id=None if role is Role.ADMIN else user.school_id,
        username=user.username,
    )


@pytest.fixture()
def as_principal() -> Callable[[User], Principal]:
    return principal_of
