"""
Debug-channel reporting and embed helpers shared by handlers and commands
"""
import discord
from typing import Optional

import config
from .helpers import truncate
from .logger import logger


async def get_debug_channel(bot) -> Optional[discord.abc.Messageable]:
    """Resolve the configured debug/log channel, falling back to an API fetch"""
    channel_id = config.settings.debug_channel_id
    if not channel_id:
        return None

    channel = bot.get_channel(channel_id)
    if channel is not None:
        return channel
    try:
        return await bot.fetch_channel(channel_id)
    except discord.HTTPException as e:
        logger.warning(f"[DEBUG] Could not fetch debug channel {channel_id}: {e}")
        return None


async def send_debug(bot, content: str) -> Optional[discord.Message]:
    """
    Post a message to the debug channel.

    Args:
        bot: The running bot
        content: Message text (truncated to Discord's 2000 character limit)

    Returns:
        The sent message, or None if the channel is unavailable or the send failed
    """
    channel = await get_debug_channel(bot)
    if channel is None:
        logger.debug(f"[DEBUG] No debug channel, dropping: {content}")
        return None
    try:
        return await channel.send(truncate(content))
    except discord.HTTPException as e:
        logger.error(f"[DEBUG] Failed to send debug message: {e}")
        return None


def build_embed(title: str, description: str = None, color: int = config.EMBED_COLOR) -> discord.Embed:
    """Create an embed in the bot's standard color"""
    return discord.Embed(title=title, description=description, color=discord.Color(color))
