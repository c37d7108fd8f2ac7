"""
TV series watch tracking: seasons, episodes and a live "next episode" embed
"""
import discord
from discord.ext import commands
from dataclasses import dataclass
from typing import Optional

import config
from database import db
from core.tasks import schedule_messages
from utils.helpers import parse_quoted
from utils.logger import logger
from utils.permissions import admin_only, is_admin
from utils.response_helpers import build_embed, send_debug
from utils.timestamp_helpers import format_date
from .replies import reply_expiring, send_error, send_embed


SERIES_HELP = (
    "**Admin Commands:**\n"
    "`!serialadd \"<Series Title>\" <episodes_per_season>` - Add a new series with comma-separated episode counts.\n"
    "`!addseason <series_id> <number_of_episodes>` - Add a new season.\n"
    "`!addepisode <series_id> <season_number>` - Add an episode to a season.\n"
    "`!editseason <series_id> <season_number> <new_episode_count>` - Edit episode count.\n"
    "`!watchedepisode <series_id> <season_number> <episode_number>` - Manually mark an episode as watched.\n"
    "`!endseries <series_id>` - Hide a finished series from the list.\n"
    "\n**User Commands:**\n"
    "`!series <series_id>` - View series and mark episodes as watched with ✅ reaction.\n"
    "`!serieslist` - List all series.\n"
    "`!seriesstatus <series_id>` - Show series progress.\n"
    "`!seasonstatus <series_id> <season_number>` - Show season details.\n"
    "`!serialhelp` - Show this help."
)


@dataclass
class TrackedEmbed:
    series_id: int
    season_number: int
    episode_number: int


def parse_episode_counts(text: str) -> list[int]:
    """
    Parse ``7,13,13`` into per-season episode counts.

    Raises:
        ValueError: on an empty list, a non-number or a count below 1
    """
    counts = [int(part) for part in text.replace(" ", "").split(",") if part]
    if not counts or any(count < 1 for count in counts):
        raise ValueError(text)
    return counts


def summarize_seasons(episodes: list[dict]) -> dict[int, tuple[int, int]]:
    """season -> (watched, total)"""
    seasons: dict[int, tuple[int, int]] = {}
    for episode in episodes:
        watched, total = seasons.get(episode['season_number'], (0, 0))
        seasons[episode['season_number']] = (watched + (1 if episode['watched'] else 0), total + 1)
    return seasons


def build_series_embed(series: dict, next_episode: Optional[dict]) -> discord.Embed:
    if next_episode:
        description = f"Current episode: Season {next_episode['season_number']}, Episode {next_episode['episode_number']}"
    else:
        description = "All episodes have been watched."
    return build_embed(f"**{series['title']} (ID: {series['id']})**", description)


class SeriesCommands(commands.Cog):
    """Series, seasons and episode progress"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        # embed message id -> episode it currently shows
        self.series_embeds: dict[int, TrackedEmbed] = {}

    async def log_action(self, action: str, series_title: str, details: str):
        text = f"Admin {action} \"{series_title}\" {details}"
        logger.info(f"[SERIES] {text}")
        await send_debug(self.bot, text)

    async def _get_series_or_reply(self, ctx: commands.Context, series_id: int) -> Optional[dict]:
        series = db.get_series_by_id(series_id)
        if not series:
            await send_error(ctx, "Series not found.", delay=config.EXPIRE_DEFAULT)
        return series

    # ========================================================================
    # Admin commands
    # ========================================================================

    @commands.command(name="serialadd", usage="!serialadd \"<Series Title>\" 7,13,13")
    @admin_only()
    async def serial_add(self, ctx: commands.Context, *, arguments: str):
        quoted = parse_quoted(arguments)
        if not quoted:
            await send_error(
                ctx,
                "Please provide a series title in quotes, e.g., `!serialadd \"Breaking Bad\" 7,13,13,13,16`.",
                delay=config.EXPIRE_DEFAULT
            )
            return
        title = quoted[0].strip()
        remainder = arguments.split('"', 2)[-1]
        try:
            counts = parse_episode_counts(remainder)
        except ValueError:
            await send_error(ctx, "Episode counts must be positive numbers, e.g., `7,13,13`.", delay=config.EXPIRE_DEFAULT)
            return

        series_id = db.add_series(title, ctx.author.id, counts)
        await self.log_action("added", title, f"with seasons: {', '.join(str(c) for c in counts)}")
        await reply_expiring(ctx, f"Added series \"{title}\" with ID {series_id}.", delay=config.EXPIRE_DEFAULT)

    @commands.command(name="addseason", usage="!addseason <series_id> <number_of_episodes>")
    @admin_only()
    async def add_season(self, ctx: commands.Context, series_id: int, number_of_episodes: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        if number_of_episodes < 1:
            await send_error(ctx, "A season needs at least one episode.", delay=config.EXPIRE_DEFAULT)
            return
        season_number = db.add_season(series_id, number_of_episodes)
        await self.log_action("added", series['title'], f"season {season_number} with {number_of_episodes} episodes")
        await reply_expiring(
            ctx,
            f"Added season {season_number} with {number_of_episodes} episodes to \"{series['title']}\".",
            delay=config.EXPIRE_DEFAULT
        )

    @commands.command(name="addepisode", usage="!addepisode <series_id> <season_number>")
    @admin_only()
    async def add_episode(self, ctx: commands.Context, series_id: int, season_number: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        episode_number = db.add_episode(series_id, season_number)
        await self.log_action("added", series['title'], f"episode {episode_number} to season {season_number}")
        await reply_expiring(
            ctx,
            f"Added episode {episode_number} to season {season_number} of \"{series['title']}\".",
            delay=config.EXPIRE_DEFAULT
        )

    @commands.command(name="editseason", usage="!editseason <series_id> <season_number> <new_episode_count>")
    @admin_only()
    async def edit_season(self, ctx: commands.Context, series_id: int, season_number: int, new_episode_count: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        if new_episode_count < 0:
            await send_error(ctx, "Episode count cannot be negative.", delay=config.EXPIRE_DEFAULT)
            return
        db.edit_season_episodes(series_id, season_number, new_episode_count)
        await self.log_action("updated", series['title'], f"season {season_number} to have {new_episode_count} episodes")
        await reply_expiring(
            ctx,
            f"Updated season {season_number} of \"{series['title']}\" to have {new_episode_count} episodes.",
            delay=config.EXPIRE_DEFAULT
        )

    @commands.command(name="watchedepisode", usage="!watchedepisode <series_id> <season_number> <episode_number>")
    @admin_only()
    async def watched_episode(self, ctx: commands.Context, series_id: int, season_number: int, episode_number: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        if not db.mark_episode_watched(series_id, season_number, episode_number):
            await send_error(ctx, "Episode not found.", delay=config.EXPIRE_DEFAULT)
            return
        await self.log_action("marked", series['title'], f"S{season_number}E{episode_number} as watched manually")
        await reply_expiring(
            ctx,
            f"Marked \"{series['title']}\" S{season_number}E{episode_number} as watched.",
            delay=config.EXPIRE_DEFAULT
        )

    @commands.command(name="endseries", usage="!endseries <series_id>")
    @admin_only()
    async def end_series(self, ctx: commands.Context, series_id: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        db.end_series(series_id)
        await self.log_action("ended", series['title'], "(hidden from !serieslist)")
        await reply_expiring(ctx, f"\"{series['title']}\" marked as ended.", delay=config.EXPIRE_DEFAULT)

    # ========================================================================
    # User commands
    # ========================================================================

    @commands.command(name="serieslist")
    async def series_list(self, ctx: commands.Context):
        series = db.get_series()
        if not series:
            await reply_expiring(ctx, "No series available.", delay=config.EXPIRE_DEFAULT, as_reply=False)
            return
        description = "\n".join(f"ID {s['id']}. {s['title']}" for s in series)
        await send_embed(ctx, build_embed("📺 Series List", description[:4096]))

    @commands.command(name="seriesstatus", usage="!seriesstatus <series_id>")
    async def series_status(self, ctx: commands.Context, series_id: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        seasons = summarize_seasons(db.get_episodes_by_series(series_id))
        description = "\n".join(
            f"Season {season}: {watched}/{total} watched"
            for season, (watched, total) in sorted(seasons.items())
        ) or "No episodes yet."
        await send_embed(ctx, build_embed(f"**{series['title']} (ID: {series_id})**", description))

    @commands.command(name="seasonstatus", usage="!seasonstatus <series_id> <season_number>")
    async def season_status(self, ctx: commands.Context, series_id: int, season_number: int):
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        episodes = db.get_episodes_by_season(series_id, season_number)
        if not episodes:
            await send_error(ctx, "Season not found.", delay=config.EXPIRE_DEFAULT)
            return
        description = "\n".join(
            f"Episode {ep['episode_number']}: "
            + (f"Watched on {format_date(ep['watched_at'])}" if ep['watched'] else "Not watched")
            for ep in episodes
        )
        await send_embed(ctx, build_embed(f"**{series['title']} - Season {season_number}**", description[:4096]))

    @commands.command(name="series", usage="!series <series_id>")
    async def series(self, ctx: commands.Context, series_id: int):
        """Post the next-episode tracker. An admin ✅ marks it watched and advances."""
        series = await self._get_series_or_reply(ctx, series_id)
        if not series:
            return
        next_episode = db.get_next_unwatched_episode(series_id)
        embed_message = await ctx.send(embed=build_series_embed(series, next_episode))
        schedule_messages(config.EXPIRE_DEFAULT, ctx.message)
        schedule_messages(config.EXPIRE_SERIES_EMBED, embed_message)
        if next_episode:
            await embed_message.add_reaction(config.APPROVE_EMOJI)
            self.series_embeds[embed_message.id] = TrackedEmbed(
                series_id, next_episode['season_number'], next_episode['episode_number']
            )

    @commands.command(name="serialhelp")
    async def serial_help(self, ctx: commands.Context):
        await send_embed(ctx, build_embed("📺 Series Commands Help", SERIES_HELP))

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        tracked = self.series_embeds.get(payload.message_id)
        if tracked is None or payload.member is None or payload.member.bot:
            return
        if str(payload.emoji) != config.APPROVE_EMOJI or not is_admin(payload.user_id):
            return

        channel = self.bot.get_channel(payload.channel_id)
        if channel is None:
            return
        try:
            db.mark_episode_watched(tracked.series_id, tracked.season_number, tracked.episode_number)
            series = db.get_series_by_id(tracked.series_id)
            await self.log_action(
                "marked", series['title'],
                f"S{tracked.season_number}E{tracked.episode_number} as watched via reaction"
            )
            next_episode = db.get_next_unwatched_episode(tracked.series_id)
            message = await channel.fetch_message(payload.message_id)
            await message.edit(embed=build_series_embed(series, next_episode))
            if next_episode:
                tracked.season_number = next_episode['season_number']
                tracked.episode_number = next_episode['episode_number']
            else:
                del self.series_embeds[payload.message_id]
            await message.remove_reaction(payload.emoji, payload.member)
        except discord.HTTPException as e:
            logger.error(f"[SERIES] Error advancing series embed {payload.message_id}: {e}")
