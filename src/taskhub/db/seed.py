"""Bootstrap the administrator account configured in settings."""

from __future__ import annotations

import asyncio
import logging

from sqlmodel.ext.asyncio.session import AsyncSession

from ..core.config import Settings, get_settings
from ..core.logging import configure_logging
from ..models import User
from ..services import UserService
from .session import get_session_maker

logger = logging.getLogger(__name__)


async def ensure_admin(session: AsyncSession, settings: Settings) -> User:
    """Create the bootstrap admin unless an account with its email exists."""
    service = UserService(session)
    user = await service.get_user_by_email(settings.admin_email)
    if user is not None:
        logger.info("Admin account already present", extra={"user_id": user.id})
        return user
    user = await service.create_user(
        name=settings.admin_name,
        email=settings.admin_email,
        password=settings.admin_password,
        is_admin=True,
    )
    logger.info("Admin account created", extra={"user_id": user.id})
    return user


async def seed() -> None:
    settings = get_settings()
    async with get_session_maker()() as session:
        await ensure_admin(session, settings)


def main() -> None:
    """Entry-point hook for ``python -m`` execution."""
    configure_logging(get_settings())
    asyncio.run(seed())


if __name__ == "__main__":  # pragma: no cover - manual execution entry-point
    main()
