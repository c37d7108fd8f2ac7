"""
Logging for ReelBot
All modules log through the "reelbot" logger with a [TAG] prefix, e.g. "[SWEEP] ..."
"""
import logging
import sys
from typing import Optional

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

logger = logging.getLogger('reelbot')
logger.setLevel(logging.INFO)

console_handler = logging.StreamHandler(sys.stdout)
console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
logger.addHandler(console_handler)
logger.propagate = False


def setup_logging(level: Optional[int | str] = None, discord_level: int = logging.WARNING):
    """
    Apply the configured level and route discord.py's own logs to the same handler.

    The bot is started with log_handler=None, so discord.py output would otherwise
    go unformatted through the root logger.

    Args:
        level: Level for the reelbot logger (e.g. logging.DEBUG or "DEBUG")
        discord_level: Level for the discord.py library loggers
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            logger.warning(f"Unknown log level {level}, keeping {logging.getLevelName(logger.level)}")
            resolved = None
        level = resolved
    if level:
        logger.setLevel(level)

    discord_logger = logging.getLogger('discord')
    discord_logger.setLevel(discord_level)
    if console_handler not in discord_logger.handlers:
        discord_logger.addHandler(console_handler)
