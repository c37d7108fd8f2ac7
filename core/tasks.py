"""
Deferred message deletion for ReelBot

Transient messages are recorded in main.messages_to_delete with the time they
must disappear. The sweep loop removes overdue rows and stores the outcome.
"""
import discord
import datetime as dt
import asyncio
from typing import Optional

import config
from database import db
from utils.logger import logger
from utils.response_helpers import send_debug


# ============================================================================
# SCHEDULING
# ============================================================================

def schedule_deletion(channel_id: int, message_id: int, delay_seconds: float,
                      log_message_id: Optional[int] = None) -> Optional[int]:
    """
    Record a message for deletion after delay_seconds.

    Returns:
        The new row id, or None if the row could not be written
    """
    delete_at = dt.datetime.now(dt.timezone.utc) + dt.timedelta(seconds=delay_seconds)
    try:
        return db.insert_message_to_delete(channel_id, message_id, delete_at, log_message_id)
    except Exception as e:
        logger.error(f"[SWEEP] Failed to schedule message {message_id} for deletion: {e}")
        return None


def schedule_messages(delay_seconds: float, *messages: Optional[discord.Message]) -> None:
    """Schedule every given message (typically a command and its reply) for deletion"""
    for message in messages:
        if message is None:
            continue
        schedule_deletion(message.channel.id, message.id, delay_seconds)


# ============================================================================
# SWEEP
# ============================================================================

async def _delete_log_message(bot, log_message_id: Optional[int]):
    """Remove the debug-channel companion of a scheduled message. Failures are only logged."""
    if not log_message_id:
        return
    channel = bot.get_channel(config.settings.debug_channel_id)
    if channel is None:
        logger.warning(f"[SWEEP] Debug channel unavailable, leaving log message {log_message_id}")
        return
    try:
        log_message = await channel.fetch_message(log_message_id)
        await log_message.delete()
    except discord.HTTPException as e:
        logger.warning(f"[SWEEP] Could not delete log message {log_message_id}: {e}")


def _count_bot_removal(bot):
    """Add one to the bot's removal stats; a failure never changes the row outcome"""
    try:
        db.update_removal_stats(bot.user.id, 1)
    except Exception as e:
        logger.error(f"[SWEEP] Failed to update removal stats: {e}")


async def process_overdue_deletions(bot) -> int:
    """
    Run one sweep over every pending row whose delete_at has passed.

    Each row ends either removed (status 1) or errored (status 3). A message
    that is already gone counts as removed. Errored rows are not retried.

    Returns:
        Number of rows processed
    """
    rows = db.get_overdue_messages()
    for row in rows:
        channel = bot.get_channel(row['channel_id'])
        if channel is None:
            db.mark_message_errored(row['id'], "Channel inaccessible")
            logger.warning(f"[SWEEP] Channel {row['channel_id']} inaccessible for row {row['id']}")
            continue

        try:
            message = await channel.fetch_message(row['message_id'])
            await message.delete()
            _count_bot_removal(bot)
            await _delete_log_message(bot, row['log_message_id'])
            db.mark_message_completed(row['id'])
            logger.debug(f"[SWEEP] Deleted message {row['message_id']}")
        except discord.NotFound:
            db.mark_message_completed(row['id'])
            await _delete_log_message(bot, row['log_message_id'])
            logger.debug(f"[SWEEP] Message {row['message_id']} was already gone")
        except Exception as e:
            db.mark_message_errored(row['id'], str(e))
            logger.error(f"[SWEEP] Failed to delete message {row['message_id']}: {e}")
            await send_debug(bot, f"Error deleting message ID {row['message_id']}: {e}")
    return len(rows)


async def deletion_sweep(bot):
    """Background task: sweep immediately, then every DELETION_SWEEP_INTERVAL seconds"""
    await bot.wait_until_ready()

    while not bot.is_closed():
        try:
            processed = await process_overdue_deletions(bot)
            if processed:
                logger.info(f"[SWEEP] Processed {processed} overdue message(s)")
        except Exception as e:
            logger.error(f"[SWEEP] Error in deletion sweep: {e}")
        await asyncio.sleep(config.DELETION_SWEEP_INTERVAL)
