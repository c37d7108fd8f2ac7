import datetime as dt
import pytest
from unittest.mock import MagicMock, AsyncMock, patch

from conftest import USER_ID
from core import member_tracking


GUILD_ID = 1


@pytest.fixture(autouse=True)
def clear_invites():
    member_tracking.invite_cache.clear()
    yield
    member_tracking.invite_cache.clear()


@pytest.fixture
def mock_db():
    with patch('core.member_tracking.db') as db:
        yield db


def _invite(code, uses, inviter_id):
    invite = MagicMock()
    invite.code = code
    invite.uses = uses
    invite.inviter.id = inviter_id
    return invite


def _role(role_id, default=False, managed=False):
    role = MagicMock()
    role.id = role_id
    role.is_default = MagicMock(return_value=default)
    role.managed = managed
    return role


def _member(roles=(), invites=()):
    guild = MagicMock()
    guild.id = GUILD_ID
    guild.invites = AsyncMock(return_value=list(invites))
    known_roles = {role.id: role for role in roles}
    guild.get_role = MagicMock(side_effect=lambda rid: known_roles.get(rid))

    member = MagicMock()
    member.id = USER_ID
    member.bot = False
    member.guild = guild
    member.roles = [_role(GUILD_ID, default=True)]
    member.add_roles = AsyncMock()
    return member


@pytest.mark.asyncio
async def test_first_join_records_inviter(mock_db):
    member_tracking.invite_cache[GUILD_ID] = {"abc": (3, 77)}
    member = _member(invites=[_invite("abc", 4, 77)])
    mock_db.get_user_data.return_value = None

    await member_tracking.handle_member_join(member)

    user_id, _, inviter_id = mock_db.create_user_data.call_args.args
    assert (user_id, inviter_id) == (USER_ID, 77)
    mock_db.increment_user_field.assert_not_called()


@pytest.mark.asyncio
async def test_returning_member_gets_roles_back(mock_db):
    gamer, managed = _role(10), _role(11, managed=True)
    member = _member(roles=[gamer, managed])
    mock_db.get_user_data.return_value = {'roles': ["10", "11", "12"]}

    await member_tracking.handle_member_join(member)

    mock_db.increment_user_field.assert_called_once_with(USER_ID, 'connections')
    member.add_roles.assert_awaited_once()
    assert member.add_roles.call_args.args == (gamer,)


@pytest.mark.asyncio
async def test_leave_saves_roles_without_everyone(mock_db):
    member = _member()
    member.roles.append(_role(10))

    with patch('core.member_tracking.was_kicked', new_callable=AsyncMock, return_value=False):
        await member_tracking.handle_member_remove(member)

    mock_db.save_user_roles.assert_called_once_with(USER_ID, [10])
    mock_db.increment_user_field.assert_not_called()


@pytest.mark.asyncio
async def test_kick_is_counted(mock_db):
    with patch('core.member_tracking.was_kicked', new_callable=AsyncMock, return_value=True):
        await member_tracking.handle_member_remove(_member())

    mock_db.increment_user_field.assert_called_once_with(USER_ID, 'kicks')


@pytest.mark.asyncio
async def test_was_kicked_respects_audit_window():
    now = dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc)
    member = _member()
    entry = MagicMock()
    entry.target.id = USER_ID

    async def audit_logs(**kwargs):
        yield entry

    member.guild.audit_logs = audit_logs

    entry.created_at = now - dt.timedelta(seconds=30)
    assert await member_tracking.was_kicked(member, now) is True

    entry.created_at = now - dt.timedelta(minutes=10)
    assert await member_tracking.was_kicked(member, now) is False


@pytest.mark.asyncio
async def test_ban_increments_counter(mock_db):
    guild = MagicMock()
    user = MagicMock(id=USER_ID)
    await member_tracking.handle_member_ban(guild, user)
    mock_db.increment_user_field.assert_called_once_with(USER_ID, 'bans')


@pytest.mark.asyncio
async def test_role_change_is_saved(mock_db):
    before = _member()
    after = _member()
    after.roles.append(_role(10))

    await member_tracking.handle_member_update(before, after)
    mock_db.save_user_roles.assert_called_once_with(USER_ID, [10])

    mock_db.save_user_roles.reset_mock()
    await member_tracking.handle_member_update(after, after)
    mock_db.save_user_roles.assert_not_called()


@pytest.mark.asyncio
async def test_join_without_invite_baseline_has_unknown_inviter(mock_db):
    member = _member(invites=[_invite("abc", 4, 77)])
    mock_db.get_user_data.return_value = None

    await member_tracking.handle_member_join(member)

    _, _, inviter_id = mock_db.create_user_data.call_args.args
    assert inviter_id == 0
    assert member_tracking.invite_cache[GUILD_ID] == {"abc": (4, 77)}
