import pytest
from unittest.mock import MagicMock

from conftest import ADMIN_ID, USER_ID
from utils.permissions import NotAdmin, admin_only, is_admin
from commands.movie_commands import MovieCommands
from commands.moderation_commands import ModerationCommands
from commands.timer_commands import TimerCommands


def _ctx(user_id):
    ctx = MagicMock()
    ctx.author.id = user_id
    return ctx


def test_is_admin_uses_configured_ids():
    assert is_admin(ADMIN_ID)
    assert not is_admin(USER_ID)


def test_is_admin_follows_settings_changes(settings):
    settings.admin_ids = frozenset({USER_ID})
    assert is_admin(USER_ID)
    assert not is_admin(ADMIN_ID)


@pytest.mark.asyncio
async def test_admin_only_predicate():
    check = admin_only()

    @check
    async def command(ctx):
        pass

    predicate = command.__commands_checks__[0]
    assert await predicate(_ctx(ADMIN_ID)) is True
    with pytest.raises(NotAdmin):
        await predicate(_ctx(USER_ID))


@pytest.mark.asyncio
async def test_admin_commands_carry_the_check():
    for command in (MovieCommands.watched, ModerationCommands.remove, TimerCommands.timer):
        assert command.checks, command.name
        with pytest.raises(NotAdmin):
            await command.checks[0](_ctx(USER_ID))


def test_regular_commands_are_open():
    assert MovieCommands.movie_list.checks == []
    assert MovieCommands.random_movie.checks == []
