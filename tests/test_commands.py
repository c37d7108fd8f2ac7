import datetime as dt
import pytest
from unittest.mock import MagicMock, AsyncMock, patch

import discord

from conftest import ADMIN_ID, DEBUG_CHANNEL_ID, USER_ID, make_bot, make_channel, make_http_error, make_message
from commands.moderation_commands import ModerationCommands
from commands.timer_commands import TimerCommands
from commands.replies import reply_expiring, send_error
from commands.stats_commands import StatsCommands


def _ctx(author_id=ADMIN_ID):
    ctx = MagicMock()
    ctx.author.id = author_id
    ctx.author.name = "admin"
    ctx.message = make_message(100, author_id=author_id)
    ctx.channel.purge = AsyncMock(return_value=[MagicMock()] * 3)
    ctx.reply = AsyncMock(return_value=make_message(101))
    ctx.send = AsyncMock(return_value=make_message(102))
    return ctx


@pytest.mark.asyncio
async def test_reply_expiring_schedules_command_and_reply():
    ctx = _ctx()
    with patch('commands.replies.schedule_messages') as schedule:
        sent = await reply_expiring(ctx, "hello", delay=45)

    ctx.reply.assert_awaited_once_with("hello", embed=None, mention_author=False)
    schedule.assert_called_once_with(45, ctx.message, sent)


@pytest.mark.asyncio
async def test_send_error_prefixes_once():
    ctx = _ctx()
    with patch('commands.replies.schedule_messages'):
        await send_error(ctx, "nope")
        await send_error(ctx, "❌ already")

    assert ctx.reply.await_args_list[0].args[0] == "❌ nope"
    assert ctx.reply.await_args_list[1].args[0] == "❌ already"


class TestRemove:
    @pytest.fixture
    def mock_db(self):
        with patch('commands.moderation_commands.db') as db:
            db.get_total_removed_messages.return_value = 50
            db.get_user_removed_messages.return_value = 12
            yield db

    @pytest.mark.asyncio
    async def test_removes_messages_and_logs_embed(self, mock_db):
        log_channel = make_channel(DEBUG_CHANNEL_ID)
        cog = ModerationCommands(make_bot({DEBUG_CHANNEL_ID: log_channel}))
        ctx = _ctx()

        await ModerationCommands.remove.callback(cog, ctx, 3)

        ctx.channel.purge.assert_awaited_once_with(limit=3, before=ctx.message)
        ctx.message.delete.assert_awaited_once()
        mock_db.update_removal_stats.assert_called_once_with(ADMIN_ID, 4)
        embed = log_channel.send.call_args.kwargs['embed']
        assert embed.title.startswith("4 messages removed by admin")
        ctx.send.assert_awaited_once_with("Messages removed ✅", delete_after=2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("count", [0, 101])
    async def test_out_of_range_count(self, mock_db, count):
        cog = ModerationCommands(make_bot())
        ctx = _ctx()

        with patch('commands.moderation_commands.send_error', new_callable=AsyncMock) as error:
            await ModerationCommands.remove.callback(cog, ctx, count)

        error.assert_awaited_once()
        ctx.channel.purge.assert_not_awaited()
        mock_db.update_removal_stats.assert_not_called()

    @pytest.mark.asyncio
    async def test_purge_failure_reports_error(self, mock_db):
        cog = ModerationCommands(make_bot())
        ctx = _ctx()
        ctx.channel.purge.side_effect = make_http_error(discord.Forbidden, 403, "Missing Permissions")

        with patch('commands.moderation_commands.send_error', new_callable=AsyncMock) as error:
            await ModerationCommands.remove.callback(cog, ctx, 3)

        error.assert_awaited_once()
        mock_db.update_removal_stats.assert_not_called()


class TestTimer:
    @pytest.mark.asyncio
    async def test_countdown_expires_an_hour_after_it_ends(self):
        cog = TimerCommands(make_bot())
        ctx = _ctx()

        with patch('commands.timer_commands.schedule_messages') as schedule_messages, \
                patch('commands.timer_commands.schedule_deletion') as schedule_deletion:
            await TimerCommands.timer.callback(cog, ctx, arguments="30m Break over")

        schedule_messages.assert_called_once_with(1, ctx.message)
        assert ctx.send.await_args.args[0].startswith("Break over <t:")
        channel_id, message_id, delay = schedule_deletion.call_args.args
        assert message_id == 102
        assert delay == pytest.approx(1800 + 3600, abs=1)

    @pytest.mark.asyncio
    async def test_invalid_timer_replies_with_error(self):
        cog = TimerCommands(make_bot())
        ctx = _ctx()

        with patch('commands.timer_commands.schedule_messages') as schedule_messages, \
                patch('commands.timer_commands.schedule_deletion') as schedule_deletion:
            await TimerCommands.timer.callback(cog, ctx, arguments="0m")

        ctx.reply.assert_awaited_once()
        ctx.send.assert_not_awaited()
        schedule_deletion.assert_not_called()
        assert schedule_messages.call_args_list[-1].args[0] == 30


class TestStats:
    @pytest.mark.asyncio
    async def test_invalid_user_argument(self):
        cog = StatsCommands(make_bot())
        ctx = _ctx(USER_ID)

        with patch('commands.stats_commands.db') as db, \
                patch('commands.stats_commands.send_error', new_callable=AsyncMock) as error:
            await StatsCommands.stat.callback(cog, ctx, "not-a-user")

        error.assert_awaited_once()
        db.get_user_stats.assert_not_called()

    @pytest.mark.asyncio
    async def test_own_stats_embed(self):
        bot = make_bot()
        bot.fetch_user = AsyncMock(return_value="Tester#0001")
        cog = StatsCommands(bot)
        ctx = _ctx(USER_ID)
        stats = {
            'user_id': USER_ID, 'nickname': "Tester", 'total_messages': 4, 'total_words': 10,
            'messages_removed': 0, 'messages_edited': 1, 'total_swears': 2, 'reactions_given': 3,
            'reactions_received': 5, 'voice_time': 3600, 'streaming_time': 0,
            'last_updated': dt.datetime(2025, 1, 1, tzinfo=dt.timezone.utc),
        }

        with patch('commands.stats_commands.db') as db, \
                patch('commands.stats_commands.send_embed', new_callable=AsyncMock) as send_embed:
            db.get_user_stats.return_value = stats
            await StatsCommands.stat.callback(cog, ctx, None)

        db.get_user_stats.assert_called_once_with(USER_ID)
        embed = send_embed.await_args.args[1]
        assert "Tester#0001" in embed.title
        assert "**Words per Message**: 2.50" in embed.description
        assert "**Voice Time**: 1h 0m" in embed.description
