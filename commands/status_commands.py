"""
Bot presence commands: activity, status and custom description
"""
import discord
from discord.ext import commands
from typing import Optional

import config
from database import db
from utils.logger import logger
from utils.permissions import admin_only
from utils.response_helpers import build_embed, send_debug
from .replies import send_error, send_success, send_embed


ACTIVITY_TYPE_MAP = {
    "playing": discord.ActivityType.playing,
    "streaming": discord.ActivityType.streaming,
    "listening": discord.ActivityType.listening,
    "watching": discord.ActivityType.watching,
    "custom": discord.ActivityType.custom,
    "competing": discord.ActivityType.competing,
}

STATUS_MAP = {
    "online": discord.Status.online,
    "idle": discord.Status.idle,
    "dnd": discord.Status.dnd,
    "invisible": discord.Status.invisible,
}


def build_activity(activity_type: Optional[str], text: Optional[str]) -> Optional[discord.BaseActivity]:
    """Build the presence activity for a stored type/text pair"""
    if not activity_type or not text:
        return None
    activity_type = activity_type.lower()
    if activity_type not in ACTIVITY_TYPE_MAP:
        return None
    if activity_type == "custom":
        return discord.CustomActivity(name=text)
    return discord.Activity(type=ACTIVITY_TYPE_MAP[activity_type], name=text)


def build_status(status: Optional[str]) -> discord.Status:
    return STATUS_MAP.get((status or "online").lower(), discord.Status.online)


async def restore_presence(bot: commands.Bot):
    """Apply the saved activity and status at startup"""
    try:
        saved = db.get_bot_settings()
        if not saved:
            logger.info("[STATUS] No saved settings found in database")
            return
        activity = build_activity(saved['activity_type'], saved['activity_text'])
        await bot.change_presence(activity=activity, status=build_status(saved['status']))
        logger.info(f"[STATUS] Restored {saved['activity_type']} {saved['activity_text']} ({saved['status']})")
    except Exception as e:
        logger.error(f"[STATUS] Failed to restore bot settings: {e}")
        await send_debug(bot, f"[botStatus] Initialization error: {e}")


class StatusCommands(commands.Cog):
    """Admin-only presence controls"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot

    async def _apply(self, ctx: commands.Context, activity_type: Optional[str], text: Optional[str],
                     status: Optional[str], confirmation: str):
        try:
            await self.bot.change_presence(activity=build_activity(activity_type, text), status=build_status(status))
            db.set_bot_settings(activity_type, text, status)
        except Exception as e:
            logger.error(f"[STATUS] Failed to update presence: {e}")
            await send_debug(self.bot, f"[botStatus] Presence update error: {e}")
            await send_error(ctx, "Failed to update the bot presence. Check logs for details!", delay=config.EXPIRE_DEFAULT)
            return
        await send_debug(self.bot, confirmation)
        await send_success(ctx, confirmation, delay=config.EXPIRE_DEFAULT)

    def _saved(self) -> dict:
        return db.get_bot_settings() or {'activity_type': None, 'activity_text': None, 'status': 'online'}

    @commands.command(name="bothelp")
    @admin_only()
    async def presence_help(self, ctx: commands.Context):
        embed = build_embed(
            "🤖 Bot Status Commands Help",
            "All commands are admin-only and messages will be deleted after 2 minutes."
        )
        embed.add_field(
            name="🔧 !botActivity <type> <activity>",
            value="Sets the bot's activity.\n**Usage:** `!botActivity watching movies`\n"
                  f"**Available types:** {', '.join(config.ACTIVITY_TYPES)}",
            inline=False
        )
        embed.add_field(
            name="⚙️ !botStatus <status>",
            value=f"Sets the bot's status.\n**Usage:** `!botStatus idle`\n"
                  f"**Available statuses:** {', '.join(config.STATUS_OPTIONS)}",
            inline=False
        )
        embed.add_field(
            name="📝 !botDesc <description>",
            value="Sets a custom activity description.\n**Usage:** `!botDesc Playing with friends`",
            inline=False
        )
        await send_embed(ctx, embed, delay=config.EXPIRE_DEFAULT)

    @commands.command(name="botactivity", usage="!botActivity <type> <activity>")
    @admin_only()
    async def presence_activity(self, ctx: commands.Context, activity_type: str, *, text: str):
        activity_type = activity_type.lower()
        if activity_type not in ACTIVITY_TYPE_MAP:
            await send_error(
                ctx, f"Invalid activity type. Use one of: {', '.join(config.ACTIVITY_TYPES)}", delay=config.EXPIRE_DEFAULT
            )
            return
        saved = self._saved()
        await self._apply(ctx, activity_type, text, saved['status'], f"Bot activity set to {activity_type} {text}")

    @commands.command(name="botstatus", usage="!botStatus <online|idle|dnd|invisible>")
    @admin_only()
    async def presence_status(self, ctx: commands.Context, status: str):
        status = status.lower()
        if status not in STATUS_MAP:
            await send_error(
                ctx, f"Invalid status. Use one of: {', '.join(config.STATUS_OPTIONS)}", delay=config.EXPIRE_DEFAULT
            )
            return
        saved = self._saved()
        await self._apply(ctx, saved['activity_type'], saved['activity_text'], status, f"Bot status set to {status}")

    @commands.command(name="botdesc", usage="!botDesc <description>")
    @admin_only()
    async def presence_desc(self, ctx: commands.Context, *, description: str):
        saved = self._saved()
        await self._apply(
            ctx, "custom", description, saved['status'],
            f"Bot description set to \"{description}\" (as custom activity)"
        )
