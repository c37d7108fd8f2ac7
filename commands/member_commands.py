"""
Member history lookup
"""
import discord
from discord.ext import commands

import config
from database import db
from utils.helpers import parse_user_id
from utils.permissions import admin_only
from utils.response_helpers import build_embed
from utils.timestamp_helpers import format_date
from .replies import send_error, send_embed


def format_user_record(user_id: int, record: dict) -> str:
    inviter = "Unknown" if not record['inviter_id'] else f"<@{record['inviter_id']}>"
    roles = ", ".join(f"<@&{role_id}>" for role_id in record['roles']) or "None"
    return "\n".join([
        f"**ID**: {user_id}",
        f"**First Join Date**: {format_date(record['first_join_date'], 'Unknown')}",
        f"**Connections**: {record['connections']}",
        f"**Kicks**: {record['kicks']}",
        f"**Bans**: {record['bans']}",
        f"**Inviter**: {inviter}",
        f"**Roles**: {roles}",
    ])


class MemberCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="user", usage="!user <userID|@user>")
    @admin_only()
    async def user(self, ctx: commands.Context, user: str):
        """Show a member's join history and saved roles"""
        user_id = parse_user_id(user)
        if user_id is None:
            await send_error(ctx, "Invalid user ID or mention. Use a valid ID or @user.", delay=config.EXPIRE_USER_INFO)
            return

        record = db.get_user_data(user_id)
        if not record:
            await send_error(ctx, "User not found in the database.", delay=config.EXPIRE_USER_INFO)
            return

        try:
            name = str(await self.bot.fetch_user(user_id))
        except discord.HTTPException:
            name = "Unknown User"
        embed = build_embed(f"User Info: {name}", format_user_record(user_id, record))
        await send_embed(ctx, embed, delay=config.EXPIRE_USER_INFO)
