"""
Statistics commands: per-user and aggregate counters, swear list upkeep
"""
import discord
from discord.ext import commands
from typing import Optional

import config
from database import db
from core import activity_stats
from utils.helpers import parse_user_id
from utils.logger import logger
from utils.permissions import admin_only
from utils.response_helpers import build_embed
from utils.timestamp_helpers import format_duration, format_date
from .replies import reply_expiring, send_error, send_embed


def words_per_message(total_words: int, total_messages: int) -> str:
    if not total_messages:
        return "0"
    return f"{total_words / total_messages:.2f}"


def format_stats(stats: dict) -> str:
    return "\n".join([
        f"**Total Messages**: {stats['total_messages']}",
        f"**Total Words**: {stats['total_words']}",
        f"**Words per Message**: {words_per_message(stats['total_words'], stats['total_messages'])}",
        f"**Messages Removed**: {stats['messages_removed']}",
        f"**Messages Edited**: {stats['messages_edited']}",
        f"**Total Swear Words**: {stats['total_swears']}",
        f"**Reactions Given**: {stats['reactions_given']}",
        f"**Reactions Received**: {stats['reactions_received']}",
        f"**Voice Time**: {format_duration(stats['voice_time'])}",
        f"**Streaming Time**: {format_duration(stats['streaming_time'])}",
    ])


class StatsCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="stat", usage="!stat [userID|@user]")
    async def stat(self, ctx: commands.Context, user: Optional[str] = None):
        """Show a user's statistics (yours if no user is given)"""
        user_id = ctx.author.id if user is None else parse_user_id(user)
        if user_id is None:
            await send_error(ctx, "Invalid user ID or mention. Use a valid ID or @user.", delay=config.EXPIRE_DEFAULT)
            return

        stats = db.get_user_stats(user_id)
        if not stats:
            await reply_expiring(ctx, "No stats found for this user.", delay=config.EXPIRE_DEFAULT)
            return

        try:
            fetched = await self.bot.fetch_user(user_id)
            name = str(fetched)
        except discord.HTTPException:
            name = stats['nickname'] or "Unknown User"

        description = f"**ID**: {user_id}\n{format_stats(stats)}\n**Last Updated**: {format_date(stats['last_updated'], '-')}"
        embed = build_embed(f"📊 User Stats: {name}", description)
        embed.timestamp = discord.utils.utcnow()
        await send_embed(ctx, embed)

    @commands.command(name="allstat")
    async def all_stat(self, ctx: commands.Context):
        """Show counters summed over every user"""
        totals = db.get_aggregate_user_stats()
        if not totals['total_users']:
            await reply_expiring(ctx, "No user stats found.", delay=config.EXPIRE_DEFAULT)
            return

        description = f"**Total Users**: {totals['total_users']}\n{format_stats(totals)}"
        embed = build_embed("📊 Aggregated Stats for All Users", description)
        embed.timestamp = discord.utils.utcnow()
        await send_embed(ctx, embed, delay=config.EXPIRE_LIST)

    @commands.command(name="swear", usage="!swear <word>")
    @admin_only()
    async def swear(self, ctx: commands.Context, word: str):
        """Add a word to the swear list"""
        if activity_stats.add_swear_word(word, ctx.author.id):
            logger.info(f"[STATS] {ctx.author} added swear word")
            await reply_expiring(ctx, f"Added `{word.lower()}` to the swear list.")
        else:
            await reply_expiring(ctx, f"`{word.lower()}` is already on the swear list.")
