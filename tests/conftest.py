import os

# Must be set before any app module reads settings
os.environ["ENVIRONMENT"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["AUTO_CREATE_TABLES"] = "false"

from typing import AsyncGenerator, Callable, Dict, Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.db.models import Base
from app.db.session import get_async_session
from app.main import app
from app.repositories.student_repository import StudentRepository
from app.schemas.student_schemas import StudentResponse
from app.services.student_service import StudentService

# Test database setup
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def test_engine():
    """Create a fresh in-memory database for each test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine
    await engine.dispose()


@pytest.fixture
def session_maker(test_engine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def student_repository(db_session: AsyncSession) -> StudentRepository:
    return StudentRepository(db_session)


@pytest.fixture
def student_service(student_repository: StudentRepository) -> StudentService:
    return StudentService(student_repository)


# Test data factories
@pytest.fixture
def make_student_data() -> Callable[..., Dict[str, Any]]:
    """Build a raw, valid student record as a client would send it."""

    def _make(**overrides: Any) -> Dict[str, Any]:
        data = {
            "studentId": "AB1234",
            "name": "张三",
            "gender": "MALE",
            "age": 20,
            "major": "计算机科学与技术",
            "grade": "大二",
            "email": "ZhangSan@Example.com",
            "phone": "13800138001",
        }
        data.update(overrides)
        return data

    return _make


@pytest_asyncio.fixture
async def existing_student(
    student_service: StudentService, make_student_data
) -> StudentResponse:
    """A student already stored in the database."""
    return await student_service.create(
        make_student_data(studentId="EXIST001", name="李四", gender="女")
    )


@pytest_asyncio.fixture
async def client(session_maker) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client bound to the app, with sessions from the test database."""

    async def override_get_async_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_get_async_session
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as async_client:
        yield async_client
    app.dependency_overrides.clear()
