from __future__ import annotations

from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import date

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub import models  # noqa: F401  - registers table metadata
from taskhub.core.config import Settings, get_settings
from taskhub.core.security import clear_token_blacklist
from taskhub.deps import get_db_session
from taskhub.main import create_app
from taskhub.models import MemberRole, Project, TaskPriority, User
from taskhub.services import Actor, AuthService, MembershipService, ProjectService, UserService

UserFactory = Callable[..., Awaitable[User]]


@pytest.fixture()
def settings() -> Settings:
    return Settings(
        environment="test",
        jwt_secret_key="test-access-secret",
        jwt_refresh_secret_key="test-refresh-secret",
        access_token_expire_minutes=5,
        refresh_token_expire_minutes=60,
    )


@pytest.fixture(autouse=True)
def _reset_token_blacklist() -> None:
    clear_token_blacklist()


@pytest_asyncio.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    engine: AsyncEngine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as connection:
        await connection.run_sync(SQLModel.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        try:
            yield session
        finally:
            if session.in_transaction():
                await session.rollback()


@pytest_asyncio.fixture
async def app(session: AsyncSession, settings: Settings) -> AsyncIterator[FastAPI]:
    application = create_app(settings)

    async def _override_db_session() -> AsyncIterator[AsyncSession]:
        yield session

    application.dependency_overrides[get_db_session] = _override_db_session
    application.dependency_overrides[get_settings] = lambda: settings
    try:
        yield application
    finally:
        application.dependency_overrides.clear()


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


@pytest.fixture()
def make_user(session: AsyncSession) -> UserFactory:
    counter = {"value": 0}

    async def _factory(*, name: str | None = None, is_admin: bool = False, password: str = "secret-pass") -> User:
        counter["value"] += 1
        label = name or f"user{counter['value']}"
        return await UserService(session).create_user(
            name=label,
            email=f"{label.lower()}@example.com",
            password=password,
            is_admin=is_admin,
        )

    return _factory


@pytest_asyncio.fixture
async def admin(make_user: UserFactory) -> User:
    return await make_user(name="Admin", is_admin=True)


@pytest_asyncio.fixture
async def project(session: AsyncSession, admin: User) -> Project:
    return await ProjectService(session).create_project(Actor.from_user(admin), name="Alpha")


@pytest.fixture()
def add_member(session: AsyncSession, admin: User) -> Callable[[Project, User, MemberRole], Awaitable[None]]:
    async def _add(project: Project, user: User, role: MemberRole) -> None:
        await MembershipService(session).add_member(Actor.from_user(admin), project.id, user.id, role)

    return _add


@pytest.fixture()
def auth_headers(session: AsyncSession, settings: Settings) -> Callable[[User], dict[str, str]]:
    def _headers(user: User) -> dict[str, str]:
        tokens = AuthService(session, settings).build_token_pair(user)
        return {"Authorization": f"Bearer {tokens.access.token}"}

    return _headers


@pytest.fixture()
def task_fields() -> dict[str, object]:
    return {"title": "T1", "priority": TaskPriority.HIGH, "due_date": date(2025, 1, 1)}
