"""
Game activity commands
"""
from discord.ext import commands
from typing import Optional

from database import db
from utils.helpers import parse_quoted, parse_user_id, normalize_game_name
from utils.logger import logger
from utils.permissions import admin_only
from utils.response_helpers import build_embed
from utils.timestamp_helpers import format_duration
from .replies import send_error, send_success, send_embed


def format_game_stats(rows: list[dict]) -> str:
    if not rows:
        return "No activities recorded."
    return "\n".join(
        f"**{row['activity_name']}**: {row['session_count']} sessions, {format_duration(row['total_playtime'])}"
        for row in rows
    )


class GameCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="game", usage="!game [userID|@user]")
    async def game(self, ctx: commands.Context, user: Optional[str] = None):
        """Show play sessions and total playtime per game"""
        user_id = ctx.author.id if user is None else parse_user_id(user)
        if user_id is None:
            await send_error(ctx, "Invalid user ID or mention. Use a valid ID or @user.")
            return

        try:
            rows = db.get_game_stats(user_id)
        except Exception as e:
            logger.error(f"[GAMES] Error fetching stats for {user_id}: {e}")
            await send_error(ctx, "Failed to fetch stats. Please try again later.")
            return

        member = ctx.guild.get_member(user_id) if ctx.guild else None
        embed = build_embed(f"🎮 Activity Stats for {member.display_name if member else 'Unknown'}")
        embed.add_field(name="All Time", value=format_game_stats(rows)[:1024], inline=False)
        await send_embed(ctx, embed)

    @commands.command(name="galias", usage="!galias \"standardName\" \"aliasName\"")
    @admin_only()
    async def game_alias(self, ctx: commands.Context, *, arguments: str):
        """Map an alternative game name onto a standard one"""
        quoted = parse_quoted(arguments)
        if len(quoted) < 2:
            await send_error(ctx, "Usage: !galias \"standardName\" \"aliasName\"")
            return

        standard_name = normalize_game_name(quoted[0])
        alias_name = normalize_game_name(quoted[1])
        try:
            db.add_game_alias(standard_name, alias_name)
        except Exception as e:
            logger.error(f"[GAMES] Error adding alias \"{alias_name}\" -> \"{standard_name}\": {e}")
            await send_error(ctx, "Failed to add alias. Please try again later.")
            return
        await send_success(ctx, f"Alias added: \"{alias_name}\" -> \"{standard_name}\"")
