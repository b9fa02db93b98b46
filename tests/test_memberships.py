from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel.ext.asyncio.session import AsyncSession

from taskhub.errors import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    NotLoggedInError,
    NotMemberError,
)
from taskhub.models import MemberRole, ensure_utc
from taskhub.services import Actor, MembershipService
from taskhub.services.memberships import elapsed_minutes

T0 = datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta: float) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture()
def ledger(session: AsyncSession, clock: FakeClock) -> MembershipService:
    return MembershipService(session, clock=clock)


def test_elapsed_minutes_truncates_and_clamps() -> None:
    assert elapsed_minutes(T0, T0 + timedelta(seconds=125)) == 2
    assert elapsed_minutes(T0, T0 + timedelta(seconds=59)) == 0
    assert elapsed_minutes(T0, T0 - timedelta(minutes=5)) == 0
    assert elapsed_minutes(T0.replace(tzinfo=None), T0 + timedelta(minutes=3)) == 3


async def test_add_member_records_role_and_zero_minutes(ledger, admin, project, make_user) -> None:
    user = await make_user()
    membership = await ledger.add_member(Actor.from_user(admin), project.id, user.id, "tester")

    assert membership.role is MemberRole.TESTER
    assert membership.contribution_minutes == 0
    assert membership.login_at is None
    assert membership.logout_at is None
    assert await ledger.find_role(project.id, user.id) is MemberRole.TESTER


async def test_add_member_twice_conflicts(ledger, admin, project, make_user) -> None:
    user = await make_user()
    actor = Actor.from_user(admin)
    await ledger.add_member(actor, project.id, user.id, MemberRole.DEVELOPER)

    with pytest.raises(ConflictError):
        await ledger.add_member(actor, project.id, user.id, MemberRole.MANAGER)

    assert await ledger.find_role(project.id, user.id) is MemberRole.DEVELOPER


async def test_add_member_requires_admin_and_existing_entities(ledger, admin, project, make_user) -> None:
    manager = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, manager.id, MemberRole.MANAGER)
    newcomer = await make_user()

    with pytest.raises(ForbiddenError):
        await ledger.add_member(Actor.from_user(manager), project.id, newcomer.id, MemberRole.TESTER)
    with pytest.raises(NotFoundError):
        await ledger.add_member(Actor.from_user(admin), project.id + 100, newcomer.id, MemberRole.TESTER)
    with pytest.raises(NotFoundError):
        await ledger.add_member(Actor.from_user(admin), project.id, newcomer.id + 100, MemberRole.TESTER)


async def test_session_accrues_whole_minutes(ledger, clock, admin, project, make_user) -> None:
    user = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, user.id, MemberRole.DEVELOPER)
    actor = Actor.from_user(user)

    membership = await ledger.record_login(actor, project.id)
    assert ensure_utc(membership.login_at) == T0

    clock.advance(seconds=125)
    membership = await ledger.record_logout(actor, project.id)

    assert membership.contribution_minutes == 2
    assert membership.login_at is None
    assert ensure_utc(membership.logout_at) == T0 + timedelta(seconds=125)

    clock.advance(minutes=10)
    await ledger.record_login(actor, project.id)
    clock.advance(minutes=30, seconds=59)
    membership = await ledger.record_logout(actor, project.id)
    assert membership.contribution_minutes == 32


async def test_logout_without_login_fails(ledger, admin, project, make_user) -> None:
    user = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, user.id, MemberRole.TESTER)
    actor = Actor.from_user(user)

    with pytest.raises(NotLoggedInError):
        await ledger.record_logout(actor, project.id)

    await ledger.record_login(actor, project.id)
    await ledger.record_logout(actor, project.id)
    with pytest.raises(NotLoggedInError):
        await ledger.record_logout(actor, project.id)


async def test_relogin_restarts_the_clock(ledger, clock, admin, project, make_user) -> None:
    user = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, user.id, MemberRole.MANAGER)
    actor = Actor.from_user(user)

    await ledger.record_login(actor, project.id)
    clock.advance(minutes=45)
    await ledger.record_login(actor, project.id)
    clock.advance(minutes=5)
    membership = await ledger.record_logout(actor, project.id)

    assert membership.contribution_minutes == 5


async def test_session_requires_membership(ledger, project, make_user) -> None:
    outsider = Actor.from_user(await make_user())

    with pytest.raises(NotMemberError):
        await ledger.record_login(outsider, project.id)
    with pytest.raises(NotMemberError):
        await ledger.record_logout(outsider, project.id)
    with pytest.raises(NotFoundError):
        await ledger.record_login(outsider, project.id + 100)


async def test_remove_member(ledger, admin, project, make_user) -> None:
    user = await make_user()
    actor = Actor.from_user(admin)
    await ledger.add_member(actor, project.id, user.id, MemberRole.DEVELOPER)

    await ledger.remove_member(actor, project.id, user.id)

    assert await ledger.find_role(project.id, user.id) is None
    with pytest.raises(NotMemberError):
        await ledger.remove_member(actor, project.id, user.id)
    with pytest.raises(NotFoundError):
        await ledger.remove_member(actor, project.id + 100, user.id)


async def test_list_members_visible_to_members_only(ledger, admin, project, make_user) -> None:
    member = await make_user()
    outsider = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, member.id, MemberRole.TESTER)

    roster = await ledger.list_members(Actor.from_user(member), project.id)
    assert [entry.user_id for entry in roster] == [member.id]
    with pytest.raises(ForbiddenError):
        await ledger.list_members(Actor.from_user(outsider), project.id)


async def test_rejected_session_calls_end_the_locking_transaction(
    ledger, session: AsyncSession, admin, project, make_user
) -> None:
    member = await make_user()
    outsider = await make_user()
    await ledger.add_member(Actor.from_user(admin), project.id, member.id, MemberRole.DEVELOPER)

    with pytest.raises(NotLoggedInError):
        await ledger.record_logout(Actor.from_user(member), project.id)
    assert not session.in_transaction()

    with pytest.raises(NotMemberError):
        await ledger.record_login(Actor.from_user(outsider), project.id)
    assert not session.in_transaction()

    membership = await ledger.record_login(Actor.from_user(member), project.id)
    assert membership.is_logged_in
