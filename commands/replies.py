"""
Common reply helpers for prefix commands
Every reply, and the command that triggered it, is scheduled for deletion
"""
import discord
from discord.ext import commands
from typing import Optional

import config
from core.tasks import schedule_messages


async def reply_expiring(
    ctx: commands.Context,
    content: Optional[str] = None,
    *,
    embed: Optional[discord.Embed] = None,
    delay: float = config.EXPIRE_SHORT,
    as_reply: bool = True
) -> discord.Message:
    """
    Answer a command and schedule both messages for deletion

    Args:
        ctx: The command context
        content: Message text
        embed: Optional embed
        delay: Seconds until both messages are removed
        as_reply: Reply to the command instead of a plain channel send
    """
    if as_reply:
        sent = await ctx.reply(content, embed=embed, mention_author=False)
    else:
        sent = await ctx.send(content, embed=embed)
    schedule_messages(delay, ctx.message, sent)
    return sent


async def send_error(
    ctx: commands.Context,
    message: str,
    delay: float = config.EXPIRE_SHORT
) -> discord.Message:
    """
    Send an error reply

    Args:
        ctx: The command context
        message: Error message (will be prefixed with ❌)
        delay: Seconds until the command and reply are removed
    """
    if not message.startswith("❌"):
        message = f"❌ {message}"
    return await reply_expiring(ctx, message, delay=delay)


async def send_success(
    ctx: commands.Context,
    message: str,
    delay: float = config.EXPIRE_SHORT
) -> discord.Message:
    """
    Send a success reply

    Args:
        ctx: The command context
        message: Success message (will be prefixed with ✅)
        delay: Seconds until the command and reply are removed
    """
    if not message.startswith("✅"):
        message = f"✅ {message}"
    return await reply_expiring(ctx, message, delay=delay)


async def send_embed(
    ctx: commands.Context,
    embed: discord.Embed,
    delay: float = config.EXPIRE_DEFAULT
) -> discord.Message:
    """Post an embed in the command's channel"""
    return await reply_expiring(ctx, embed=embed, delay=delay, as_reply=False)
