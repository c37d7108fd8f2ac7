import pytest
from unittest.mock import MagicMock, AsyncMock, patch

from discord.ext import commands

import main
from conftest import CLIP_CHANNEL_ID, USER_ID, make_message
from utils.permissions import NotAdmin


def _context(valid, command_name=None, usage=None):
    ctx = MagicMock()
    ctx.valid = valid
    if command_name:
        ctx.command.name = command_name
        ctx.command.usage = usage
    else:
        ctx.command = None
    ctx.invoked_with = command_name
    return ctx


@pytest.fixture
def handlers():
    with patch('main.record_message', new_callable=AsyncMock) as record, \
            patch('main.handle_clip_message', new_callable=AsyncMock) as clip, \
            patch.object(main.bot, 'invoke', new_callable=AsyncMock) as invoke, \
            patch.object(main.bot, 'get_context', new_callable=AsyncMock) as get_context:
        yield record, clip, invoke, get_context


class TestOnMessage:
    @pytest.mark.asyncio
    async def test_command_messages_are_counted_and_invoked(self, handlers):
        record, clip, invoke, get_context = handlers
        ctx = _context(True, "movieadd")
        get_context.return_value = ctx
        message = make_message(content="!movieadd Heat")

        await main.on_message(message)

        record.assert_awaited_once_with(message)
        invoke.assert_awaited_once_with(ctx)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("command_name", ["stat", "allstat"])
    async def test_stat_queries_are_not_counted(self, handlers, command_name):
        record, clip, invoke, get_context = handlers
        get_context.return_value = _context(True, command_name)

        await main.on_message(make_message(content=f"!{command_name}"))

        record.assert_not_awaited()
        invoke.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_plain_messages_are_counted_not_invoked(self, handlers):
        record, clip, invoke, get_context = handlers
        get_context.return_value = _context(False)

        await main.on_message(make_message(content="hello there"))

        record.assert_awaited_once()
        invoke.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_commands_in_clip_channel_still_get_clip_handling(self, handlers):
        record, clip, invoke, get_context = handlers
        get_context.return_value = _context(True, "rmovie")
        message = make_message(channel_id=CLIP_CHANNEL_ID, content="!rmovie")

        await main.on_message(message)

        clip.assert_awaited_once_with(main.bot, message)
        invoke.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_bot_messages_are_ignored(self, handlers):
        record, clip, invoke, get_context = handlers

        await main.on_message(make_message(author_bot=True))

        get_context.assert_not_awaited()
        record.assert_not_awaited()
        clip.assert_not_awaited()


class TestOnCommandError:
    @pytest.fixture
    def send_error(self):
        with patch('main.send_error', new_callable=AsyncMock) as send_error:
            yield send_error

    @pytest.mark.asyncio
    async def test_non_admin_gets_rejection_reply(self, send_error):
        ctx = _context(True, "watched", "!watched <id>")

        await main.on_command_error(ctx, NotAdmin(USER_ID))

        send_error.assert_awaited_once_with(ctx, "Only admins can use this command.")

    @pytest.mark.asyncio
    async def test_missing_argument_replies_with_usage(self, send_error):
        ctx = _context(True, "watched", "!watched <id>")
        param = MagicMock()
        param.name = "movie_id"

        await main.on_command_error(ctx, commands.MissingRequiredArgument(param))

        send_error.assert_awaited_once_with(ctx, "Usage: `!watched <id>`")

    @pytest.mark.asyncio
    async def test_bad_argument_without_usage_falls_back_to_name(self, send_error):
        ctx = _context(True, "rmovie")

        await main.on_command_error(ctx, commands.BadArgument("not a number"))

        send_error.assert_awaited_once_with(ctx, "Usage: `!rmovie`")

    @pytest.mark.asyncio
    async def test_unknown_command_is_ignored(self, send_error):
        await main.on_command_error(_context(False), commands.CommandNotFound("nope"))
        send_error.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_error_is_reported(self, send_error):
        ctx = _context(True, "movielist")

        with patch('main.send_debug', new_callable=AsyncMock) as send_debug:
            await main.on_command_error(ctx, commands.CommandInvokeError(RuntimeError("db down")))

        assert "db down" in send_debug.await_args.args[1]
        send_error.assert_awaited_once_with(ctx, "Something went wrong. Please try again later.")
