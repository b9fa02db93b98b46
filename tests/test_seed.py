from __future__ import annotations

from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.core.config import Settings
from taskhub.core.security import verify_password
from taskhub.db.seed import ensure_admin
from taskhub.services import UserService


async def test_ensure_admin_is_idempotent(session: AsyncSession) -> None:
    settings = Settings(
        environment="test",
        admin_email="boss@example.com",
        admin_password="bootstrap-pass",
        admin_name="Boss",
    )

    created = await ensure_admin(session, settings)
    again = await ensure_admin(session, settings)

    assert created.id == again.id
    assert created.is_admin is True
    assert created.name == "Boss"
    assert verify_password("bootstrap-pass", created.hashed_password)
    assert len(await UserService(session).list_users()) == 1
