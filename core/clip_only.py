"""
Clip-only channel: media posts get a ✅, everything else expires after 6 hours
"""
import discord
import datetime as dt

import config
from database import db, DeletionStatus
from utils.helpers import has_media, message_link
from utils.logger import logger
from utils.response_helpers import send_debug
from utils.timestamp_helpers import discord_timestamp
from .tasks import schedule_deletion


def is_clip_channel(channel_id: int) -> bool:
    return bool(config.settings.clip_channel_id) and channel_id == config.settings.clip_channel_id


async def handle_clip_message(bot, message: discord.Message):
    """React to media posts and schedule deletion of the rest"""
    if not is_clip_channel(message.channel.id) or message.author.bot:
        return

    if has_media(message.attachments):
        try:
            await message.add_reaction(config.APPROVE_EMOJI)
            logger.debug(f"[CLIPS] Added ✅ to message {message.id}")
        except discord.HTTPException as e:
            logger.error(f"[CLIPS] Failed to react to {message.id}: {e}")
            await send_debug(bot, f"Failed to react to {message.id}: {e}")
        return

    delete_at = dt.datetime.now(dt.timezone.utc) + dt.timedelta(seconds=config.CLIP_DELETION_DELAY)
    link = message_link(message.guild.id, message.channel.id, message.id)
    log_message = await send_debug(bot, f"Message {link} will be removed {discord_timestamp(delete_at)}")
    row_id = schedule_deletion(
        message.channel.id,
        message.id,
        config.CLIP_DELETION_DELAY,
        log_message.id if log_message else None
    )
    if row_id is None:
        await send_debug(bot, f"Failed to schedule deletion for {message.id}")
        return
    logger.info(f"[CLIPS] Scheduled deletion for {message.id} with log message {log_message.id if log_message else 'none'}")


async def handle_clip_message_delete(bot, payload: discord.RawMessageDeleteEvent):
    """When a scheduled clip-channel message is deleted by hand, drop its log message and close the row"""
    if not is_clip_channel(payload.channel_id):
        return

    try:
        record = db.get_message_record_by_message_id(payload.message_id)
    except Exception as e:
        logger.error(f"[CLIPS] Failed to look up deletion record for {payload.message_id}: {e}")
        return

    if not record or record['status'] != DeletionStatus.PENDING:
        return

    if record['log_message_id']:
        channel = bot.get_channel(config.settings.debug_channel_id)
        if channel is not None:
            try:
                log_message = await channel.fetch_message(record['log_message_id'])
                await log_message.delete()
                logger.info(f"[CLIPS] Deleted log message {record['log_message_id']} after manual deletion of {payload.message_id}")
            except discord.HTTPException as e:
                logger.warning(f"[CLIPS] Could not delete log message {record['log_message_id']}: {e}")

    db.mark_message_completed(record['id'])
