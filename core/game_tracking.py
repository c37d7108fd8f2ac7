"""
Game session tracking from presence updates
"""
import discord
import datetime as dt
from typing import Optional

from database import db
from utils.helpers import normalize_game_name
from utils.logger import logger


# user id -> standard name of the game currently being played
active_sessions: dict[int, str] = {}


def get_playing_name(activities) -> Optional[str]:
    """Name of the first "Playing" activity, if any"""
    for activity in activities or ():
        if activity.type == discord.ActivityType.playing and activity.name:
            return activity.name
    return None


def resolve_game_name(raw_name: str) -> str:
    """Normalize a game name and map it through main.game_aliases"""
    normalized = normalize_game_name(raw_name)
    return db.get_standard_game_name(normalized) or normalized


async def handle_presence_update(before: discord.Member, after: discord.Member, now: dt.datetime = None):
    """Open, switch or close the member's game session"""
    if after.bot:
        return
    now = now or dt.datetime.now(dt.timezone.utc)
    user_id = after.id

    try:
        raw_name = get_playing_name(after.activities)
        game = resolve_game_name(raw_name) if raw_name else None
        current = active_sessions.get(user_id)

        if game:
            if current == game:
                return
            if current:
                db.end_activity_session(user_id, current, now)
            db.start_activity_session(user_id, after.display_name, game, now)
            active_sessions[user_id] = game
            logger.info(f"[GAMES] Started session for user {user_id}: {game}")
        elif current:
            db.end_activity_session(user_id, current, now)
            del active_sessions[user_id]
            logger.info(f"[GAMES] Ended session for user {user_id}: {current}")
    except Exception as e:
        logger.error(f"[GAMES] Error handling presence update for user {user_id}: {e}")
