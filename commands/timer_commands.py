"""
Countdown timer command
"""
import discord
from discord.ext import commands
import datetime as dt

import config
from core.tasks import schedule_deletion, schedule_messages
from utils.logger import logger
from utils.permissions import admin_only
from utils.timestamp_helpers import DurationError, parse_duration_parts, discord_timestamp


class TimerError(ValueError):
    """A timer request that cannot be scheduled. The message is shown to the user."""


def build_timer(arguments: str, now: dt.datetime) -> tuple[str, dt.datetime]:
    """
    Turn ``1h 30m [message]`` into the countdown text and its end time.

    Raises:
        TimerError: for missing, zero or out-of-range durations
    """
    tokens = arguments.split()
    try:
        total_seconds, consumed = parse_duration_parts(tokens)
    except DurationError:
        raise TimerError("Each duration part must be greater than zero. For example, `1s`, `1m`, etc.")
    if consumed == 0:
        raise TimerError("Please provide at least one valid duration, e.g., `!timer 30m` or `!timer 1h 30m`.")
    if total_seconds < config.TIMER_MIN_SECONDS or total_seconds > config.TIMER_MAX_SECONDS:
        raise TimerError("Timer must be between 5 seconds and 32 days.")

    ends_at = now + dt.timedelta(seconds=total_seconds)
    countdown = discord_timestamp(ends_at)
    text = " ".join(tokens[consumed:])
    return (f"{text} {countdown}" if text else countdown), ends_at


class TimerCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="timer", usage="!timer 1h 30m [message]")
    @admin_only()
    async def timer(self, ctx: commands.Context, *, arguments: str):
        """Post a relative countdown that cleans itself up an hour after it ends"""
        now = dt.datetime.now(dt.timezone.utc)
        schedule_messages(config.TIMER_COMMAND_DELETE_DELAY, ctx.message)

        try:
            response, ends_at = build_timer(arguments, now)
        except TimerError as e:
            error_message = await ctx.reply(str(e), mention_author=False)
            schedule_messages(config.EXPIRE_SHORT, error_message)
            return

        try:
            countdown_message = await ctx.send(response)
        except discord.HTTPException as e:
            logger.error(f"[TIMER] Error sending countdown: {e}")
            return
        delay = (ends_at - now).total_seconds() + config.TIMER_GRACE_SECONDS
        schedule_deletion(countdown_message.channel.id, countdown_message.id, delay)
        logger.info(f"[TIMER] Countdown {countdown_message.id} ends {ends_at.isoformat()}")
