"""
Bulk message removal
"""
import discord
from discord.ext import commands

import config
from database import db
from utils.logger import logger
from utils.permissions import admin_only
from utils.response_helpers import get_debug_channel
from .replies import send_error


class ModerationCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="remove", usage="!remove <1-100>")
    @admin_only()
    async def remove(self, ctx: commands.Context, count: int):
        """Delete the last <count> messages before the command, then the command itself"""
        if count < config.REMOVE_MIN or count > config.REMOVE_MAX:
            await send_error(ctx, "Please provide a number between 1 and 100, e.g., `!remove 4`.")
            return

        try:
            deleted = await ctx.channel.purge(limit=count, before=ctx.message)
            await ctx.message.delete()
        except discord.HTTPException as e:
            logger.error(f"[REMOVE] Error removing messages for {ctx.author.id}: {e}")
            await send_error(ctx, "Error removing messages. Check my permissions or try again.")
            return

        total_deleted = len(deleted) + 1
        db.update_removal_stats(ctx.author.id, total_deleted)
        total_removed = db.get_total_removed_messages()
        user_removed = db.get_user_removed_messages(ctx.author.id)
        logger.info(f"[REMOVE] {ctx.author} removed {total_deleted} messages in #{ctx.channel}")

        embed = discord.Embed(
            title=f"{total_deleted} messages removed by {ctx.author.name} in #{ctx.channel}",
            color=discord.Color.red(),
            timestamp=discord.utils.utcnow()
        )
        embed.add_field(name="Total Removed Messages", value=str(total_removed), inline=True)
        embed.add_field(name=f"Total Removed by {ctx.author.name}", value=str(user_removed), inline=True)

        log_channel = await get_debug_channel(self.bot)
        if log_channel is not None:
            await log_channel.send(embed=embed)
        else:
            logger.warning("[REMOVE] Debug channel not found")

        await ctx.send("Messages removed ✅", delete_after=config.REMOVE_CONFIRMATION_DELAY)
