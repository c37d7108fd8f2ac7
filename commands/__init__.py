"""
Command modules for ReelBot
"""
from .movie_commands import MovieCommands
from .series_commands import SeriesCommands
from .stats_commands import StatsCommands
from .member_commands import MemberCommands
from .game_commands import GameCommands
from .timer_commands import TimerCommands
from .moderation_commands import ModerationCommands
from .help_commands import HelpCommands
from .status_commands import StatusCommands, restore_presence

ALL_COGS = (
    MovieCommands,
    SeriesCommands,
    StatsCommands,
    MemberCommands,
    GameCommands,
    TimerCommands,
    ModerationCommands,
    HelpCommands,
    StatusCommands,
)

__all__ = [
    'MovieCommands',
    'SeriesCommands',
    'StatsCommands',
    'MemberCommands',
    'GameCommands',
    'TimerCommands',
    'ModerationCommands',
    'HelpCommands',
    'StatusCommands',
    'restore_presence',
    'ALL_COGS',
]
