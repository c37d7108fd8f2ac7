"""
Configuration constants for ReelBot
Centralizes intervals, delays, channel/role ids and environment settings
"""
import os
from dataclasses import dataclass, field

# Database Configuration
DB_SCHEMA = "main"
DB_CONNECTION_POOL_MIN = 1
DB_CONNECTION_POOL_MAX = 10
DB_CONNECTION_TIMEOUT = 10

# Bot Configuration
BOT_PREFIX = "!"

# Task Check Intervals (in seconds)
DELETION_SWEEP_INTERVAL = 10

# Auto-delete delays (in seconds)
EXPIRE_SHORT = 30             # errors, confirmations
EXPIRE_USER_INFO = 60         # !user
EXPIRE_DEFAULT = 120          # help, stats, series replies
EXPIRE_LIST = 300             # !movieList, !allstat
EXPIRE_SERIES_EMBED = 86400   # !series tracker embed
CLIP_DELETION_DELAY = 6 * 3600
REMOVE_CONFIRMATION_DELAY = 2

# Timer limits
TIMER_MIN_SECONDS = 5
TIMER_MAX_SECONDS = 32 * 86400
TIMER_COMMAND_DELETE_DELAY = 1
TIMER_GRACE_SECONDS = 3600    # countdown message lingers 1h after it ends

# Bulk remove limits
REMOVE_MIN = 1
REMOVE_MAX = 100

# Movies
WATCHED_COOLDOWN_DAYS = 182
APPROVE_EMOJI = "✅"
REJECT_EMOJI = "❎"

# Kick detection window for audit log lookups (seconds)
KICK_AUDIT_WINDOW = 60

# Clip channel attachment types
VIDEO_EXTENSIONS = ("mp4", "mov", "webm", "avi", "mkv")
IMAGE_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "bmp", "webp", "tiff")

# Embed colour used across all cogs
EMBED_COLOR = 0x00B7FF

# Swear word seed list, read once when the swear_words table is empty
SWEAR_WORDS_FILE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "swear_words.json")

# Role-by-reaction table: key -> (role id, emoji id)
ROLE_MAPPING = {
    "diablo4": {"role_id": 1345560992188465212, "emoji_id": 1345563858437275658, "label": "Diablo IV"},
    "wow": {"role_id": 1345560960848625726, "emoji_id": 1345564812570001418, "label": "WoWHead (World of Warcraft News)"},
    "wowhead": {"role_id": 1345560929152139397, "emoji_id": 1345564053703102475, "label": "World of Warcraft"},
    "lastepo": {"role_id": 1345560881005854762, "emoji_id": 1345563725431574528, "label": "Last Epoch"},
    "poe2": {"role_id": 1345560855202369576, "emoji_id": 1345564198058332280, "label": "Path of Exile 2"},
    "poe1": {"role_id": 1345560818963714058, "emoji_id": 1345565345297207409, "label": "Path of Exile"},
    "valheim": {"role_id": 1345560783072792667, "emoji_id": 1345563991736451122, "label": "Valheim"},
    "enshrouded": {"role_id": 1345560739535912980, "emoji_id": 1345563785892724838, "label": "Enshrouded"},
    "rust": {"role_id": 1345560708779081841, "emoji_id": 1345563958505115758, "label": "Rust"},
    "cs2": {"role_id": 1345560668258041999, "emoji_id": 1345563832235331684, "label": "Counter-Strike 2"},
    "minecraft": {"role_id": 1345560413001220219, "emoji_id": 1345564126381867089, "label": "Minecraft"},
}

# Bot presence options
ACTIVITY_TYPES = ("playing", "streaming", "listening", "watching", "custom", "competing")
STATUS_OPTIONS = ("online", "idle", "dnd", "invisible")


def _parse_id(value: str | None) -> int | None:
    if not value:
        return None
    try:
        return int(value.strip())
    except ValueError:
        return None


def _parse_id_list(value: str | None) -> frozenset[int]:
    if not value:
        return frozenset()
    ids = set()
    for part in value.split(","):
        parsed = _parse_id(part)
        if parsed is not None:
            ids.add(parsed)
    return frozenset(ids)


@dataclass
class Settings:
    """Process settings read from the environment at startup"""
    token: str | None = None
    admin_ids: frozenset[int] = field(default_factory=frozenset)
    debug_channel_id: int | None = None
    clip_channel_id: int | None = None
    roles_channel_id: int | None = None
    roles_message_id: int | None = None
    log_level: str = "INFO"


def load_settings() -> Settings:
    """
    Build Settings from environment variables.

    Call after load_dotenv()/load_secret_env() so values from .env files and
    Secrets Manager are visible.
    """
    return Settings(
        token=os.getenv("DISCORD_TOKEN"),
        admin_ids=_parse_id_list(os.getenv("ADMIN_IDS")),
        debug_channel_id=_parse_id(os.getenv("DEBUG_CHANNEL_ID")),
        clip_channel_id=_parse_id(os.getenv("CLIP_CHANNEL_ID")),
        roles_channel_id=_parse_id(os.getenv("ROLES_CHANNEL_ID")),
        roles_message_id=_parse_id(os.getenv("ROLES_MESSAGE_ID")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )


# Module-level settings, replaced by main.py once the environment is loaded
settings = Settings()
