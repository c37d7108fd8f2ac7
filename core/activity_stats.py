"""
Per-user activity counters: messages, words, swears, edits, removals,
reactions, and time spent in voice or streaming
"""
import discord
import datetime as dt
import json

import config
from database import db
from utils.helpers import count_words, count_swears
from utils.logger import logger


# In-memory copy of main.swear_words
_swear_words: set[str] = set()

# user id -> session start, for members currently in voice / streaming
voice_sessions: dict[int, dt.datetime] = {}
stream_sessions: dict[int, dt.datetime] = {}


# ============================================================================
# SWEAR WORD LIST
# ============================================================================

def load_seed_words(path: str = config.SWEAR_WORDS_FILE) -> list[str]:
    """Read the bundled seed list, lowercased"""
    try:
        with open(path, encoding="utf-8") as f:
            return [word.strip().lower() for word in json.load(f) if word and word.strip()]
    except (OSError, ValueError) as e:
        logger.warning(f"[STATS] Could not read swear word seed {path}: {e}")
        return []


def load_swear_words():
    """Fill the cache from the database, seeding the table on first run"""
    global _swear_words
    words = db.get_swear_words()
    if not words:
        seed = load_seed_words()
        if seed:
            db.seed_swear_words(seed)
            logger.info(f"[STATS] Seeded {len(seed)} swear words")
        words = set(seed)
    _swear_words = set(words)
    logger.info(f"[STATS] Loaded {len(_swear_words)} swear words")


def get_swear_words() -> set[str]:
    return _swear_words


def add_swear_word(word: str, added_by: int) -> bool:
    """Add a word to the database and the cache. Returns False if already listed."""
    word = word.strip().lower()
    inserted = db.add_swear_word(word, added_by)
    _swear_words.add(word)
    return inserted


# ============================================================================
# MESSAGE / REACTION COUNTERS
# ============================================================================

def _nickname(author) -> str:
    return getattr(author, "display_name", None) or author.name


async def record_message(message: discord.Message):
    """Count a regular (non-command) message"""
    if message.author.bot:
        return
    try:
        db.upsert_user_stats(
            message.author.id,
            nickname=_nickname(message.author),
            total_messages=1,
            total_words=count_words(message.content),
            total_swears=count_swears(message.content, _swear_words),
        )
    except Exception as e:
        logger.error(f"[STATS] Failed to record message {message.id}: {e}")


async def record_message_edit(before: discord.Message, after: discord.Message):
    """Count an edit. Only the increase in swears is added."""
    if after.author.bot or before.content == after.content:
        return
    added_swears = max(0, count_swears(after.content, _swear_words) - count_swears(before.content, _swear_words))
    try:
        db.upsert_user_stats(after.author.id, messages_edited=1, total_swears=added_swears)
    except Exception as e:
        logger.error(f"[STATS] Failed to record edit of {after.id}: {e}")


async def record_message_delete(message: discord.Message):
    if message.author.bot:
        return
    try:
        db.upsert_user_stats(message.author.id, messages_removed=1)
    except Exception as e:
        logger.error(f"[STATS] Failed to record deletion of {message.id}: {e}")


async def record_reaction(reaction: discord.Reaction, user, delta: int):
    """
    Apply delta to the reactor's reactions_given and the author's reactions_received.

    Reactions on bot messages only count for the reactor.
    """
    if user.bot:
        return
    author = reaction.message.author
    try:
        db.upsert_user_stats(user.id, reactions_given=delta)
        if not author.bot:
            db.upsert_user_stats(author.id, reactions_received=delta)
    except Exception as e:
        logger.error(f"[STATS] Failed to record reaction by {user.id}: {e}")


# ============================================================================
# VOICE / STREAMING TIME
# ============================================================================

def _close_session(sessions: dict[int, dt.datetime], user_id: int, now: dt.datetime) -> int:
    started = sessions.pop(user_id, None)
    if started is None:
        return 0
    return max(0, int((now - started).total_seconds()))


async def handle_voice_state_update(member: discord.Member, before: discord.VoiceState,
                                    after: discord.VoiceState, now: dt.datetime = None):
    """Track voice and streaming sessions and add their length when they end"""
    if member.bot:
        return
    now = now or dt.datetime.now(dt.timezone.utc)

    voice_seconds = 0
    stream_seconds = 0

    if before.channel is None and after.channel is not None:
        voice_sessions[member.id] = now
    elif before.channel is not None and after.channel is None:
        voice_seconds = _close_session(voice_sessions, member.id, now)

    was_streaming = before.channel is not None and bool(before.self_stream)
    is_streaming = after.channel is not None and bool(after.self_stream)
    if is_streaming and not was_streaming:
        stream_sessions[member.id] = now
    elif was_streaming and not is_streaming:
        stream_seconds = _close_session(stream_sessions, member.id, now)

    if not voice_seconds and not stream_seconds:
        return
    try:
        db.upsert_user_stats(
            member.id,
            nickname=member.display_name,
            voice_time=voice_seconds,
            streaming_time=stream_seconds,
        )
        logger.debug(f"[STATS] {member} voice +{voice_seconds}s, streaming +{stream_seconds}s")
    except Exception as e:
        logger.error(f"[STATS] Failed to record voice time for {member.id}: {e}")
