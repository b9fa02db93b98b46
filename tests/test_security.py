from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from taskhub.core.security import (
    TokenBlacklist,
    TokenType,
    create_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from taskhub.errors import UnauthorizedError
from taskhub.services import AuthService


def test_password_hash_round_trip() -> None:
    hashed = get_password_hash("secret-pass")
    assert hashed != "secret-pass"
    assert verify_password("secret-pass", hashed)
    assert not verify_password("other-pass", hashed)


def test_tokens_carry_admin_flag_and_type(settings) -> None:
    generated = create_token(subject=7, is_admin=True, settings=settings, token_type=TokenType.ACCESS)
    payload = decode_token(token=generated.token, token_type=TokenType.ACCESS, settings=settings)

    assert payload["sub"] == "7"
    assert payload["admin"] is True
    assert payload["type"] == "access"
    assert payload["jti"] == generated.jti


async def test_refresh_token_cannot_authenticate_requests(session, settings) -> None:
    refresh = create_token(subject=1, is_admin=False, settings=settings, token_type=TokenType.REFRESH)
    service = AuthService(session, settings)

    with pytest.raises(UnauthorizedError):
        service.decode(refresh.token, TokenType.ACCESS)


async def test_expired_token_is_rejected(session, settings) -> None:
    expired = create_token(
        subject=1,
        is_admin=False,
        settings=settings,
        token_type=TokenType.ACCESS,
        expires_delta=timedelta(seconds=-5),
    )

    with pytest.raises(UnauthorizedError, match="expired"):
        AuthService(session, settings).decode(expired.token, TokenType.ACCESS)


def test_blacklist_purges_expired_entries() -> None:
    blacklist = TokenBlacklist()
    now = datetime.now(timezone.utc)
    blacklist.add("live", now + timedelta(minutes=5))
    blacklist.add("stale", now - timedelta(seconds=1))

    assert blacklist.is_revoked("live")
    assert not blacklist.is_revoked("stale")
