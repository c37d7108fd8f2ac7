"""
Movie list: suggestions with admin approval, random picks with a watch cooldown
"""
import discord
from discord.ext import commands
import datetime as dt
import random
from dataclasses import dataclass
from typing import Optional

import config
from database import db
from core.tasks import schedule_messages
from utils.logger import logger
from utils.permissions import admin_only, is_admin
from utils.response_helpers import build_embed, send_debug
from utils.timestamp_helpers import format_date
from .replies import reply_expiring, send_error, send_embed


@dataclass
class PendingSuggestion:
    """A suggestion or random pick waiting for an admin reaction in the log channel"""
    user_id: int
    movie_id: int
    original_message: discord.Message
    is_random: bool = False


def pick_random_movie(movies: list[dict], now: dt.datetime, cooldown_days: int = config.WATCHED_COOLDOWN_DAYS,
                      rng: random.Random = None) -> Optional[dict]:
    """
    Choose a movie that is in the pool and was not watched within cooldown_days.

    Returns None when nothing is eligible.
    """
    cutoff = now - dt.timedelta(days=cooldown_days)
    eligible = [
        movie for movie in movies
        if not movie['is_removed_from_pool']
        and (movie['last_watched'] is None or movie['last_watched'] < cutoff)
    ]
    if not eligible:
        return None
    return (rng or random).choice(eligible)


def format_movie_list(movies: list[dict]) -> str:
    lines = []
    for movie in sorted(movies, key=lambda m: m['title'].lower()):
        title = f"~~{movie['title']}~~" if movie['is_removed_from_pool'] else movie['title']
        lines.append(f"ID {movie['id']}. {title} - {format_date(movie['last_watched'])}")
    return "\n".join(lines)


class MovieCommands(commands.Cog):
    """Movie suggestions, the movie list and random picks"""

    def __init__(self, bot: commands.Bot):
        self.bot = bot
        # log message id -> pending suggestion
        self.suggestions: dict[int, PendingSuggestion] = {}

    async def _post_for_approval(self, ctx: commands.Context, text: str, movie_id: int, is_random: bool):
        log_message = await send_debug(self.bot, text)
        if log_message is None:
            await send_error(ctx, "Log channel is unavailable, try again later.")
            return
        await log_message.add_reaction(config.APPROVE_EMOJI)
        await log_message.add_reaction(config.REJECT_EMOJI)
        self.suggestions[log_message.id] = PendingSuggestion(ctx.author.id, movie_id, ctx.message, is_random)

    @commands.command(name="movieadd", usage="!movieAdd <title>")
    async def movie_add(self, ctx: commands.Context, *, title: str):
        """Suggest a movie for the list"""
        title = title.strip()
        existing = db.get_movie_by_title(title)
        if existing:
            await send_debug(self.bot, f"Movie \"{title}\" already exists in the list (ID: {existing['id']}).")
            schedule_messages(config.EXPIRE_SHORT, ctx.message)
            return

        movie_id = db.add_movie(title, ctx.author.id)
        await self._post_for_approval(
            ctx, f"{ctx.author} suggests adding \"{title}\" to the movie list.", movie_id, is_random=False
        )
        schedule_messages(config.EXPIRE_SHORT, ctx.message)
        logger.info(f"[MOVIES] {ctx.author} suggested \"{title}\" (ID {movie_id})")

    @commands.command(name="movielist")
    async def movie_list(self, ctx: commands.Context):
        """Show all movies alphabetically"""
        movies = db.get_movies()
        if not movies:
            await reply_expiring(ctx, "No movies in the list yet.", delay=config.EXPIRE_LIST, as_reply=False)
            return

        embed = build_embed("📽️ Movie List", format_movie_list(movies)[:4096])
        embed.set_footer(text="Use !watched <id> to mark as watched (admins only). Sorted alphabetically.")
        await send_embed(ctx, embed, delay=config.EXPIRE_LIST)

    @commands.command(name="watched", usage="!watched <id>")
    @admin_only()
    async def watched(self, ctx: commands.Context, movie_id: int):
        """Mark a movie as watched today"""
        movie = db.get_movie_by_id(movie_id)
        if not movie:
            await send_error(ctx, "Movie not found. Check the ID with !movieList.")
            return
        db.mark_movie_watched(movie_id)
        today = dt.datetime.now(dt.timezone.utc).strftime("%Y-%m-%d")
        await reply_expiring(ctx, f"Marked \"{movie['title']}\" as watched on {today}.")
        logger.info(f"[MOVIES] {movie['title']} marked watched by {ctx.author}")

    @commands.command(name="rmovie")
    async def random_movie(self, ctx: commands.Context):
        """Pick a random eligible movie and ask admins to confirm"""
        movie = pick_random_movie(db.get_movies(), dt.datetime.now(dt.timezone.utc))
        if not movie:
            await reply_expiring(ctx, "No available movies to pick randomly at this time.")
            return
        await self._post_for_approval(
            ctx,
            f"Random movie suggestion: \"{movie['title']}\" (ID: {movie['id']}). Approve or reject?",
            movie['id'],
            is_random=True
        )
        schedule_messages(config.EXPIRE_SHORT, ctx.message)

    @commands.command(name="removemovie", usage="!removeMovie <id>")
    @admin_only()
    async def remove_movie(self, ctx: commands.Context, movie_id: int):
        """Take a movie out of the random pool"""
        movie = db.get_movie_by_id(movie_id)
        if not movie:
            await send_error(ctx, "Movie not found. Check the ID with !movieList.")
            return
        db.remove_movie_from_pool(movie_id)
        await reply_expiring(ctx, f"\"{movie['title']}\" has been removed from the random movie pool.")

    @commands.command(name="editmovie", usage="!editMovie <id> <new title>")
    @admin_only()
    async def edit_movie(self, ctx: commands.Context, movie_id: int, *, new_title: str):
        movie = db.get_movie_by_id(movie_id)
        if not movie:
            await send_error(ctx, "Movie not found. Check the ID with !movieList.")
            return
        db.edit_movie_title(movie_id, new_title.strip())
        await reply_expiring(ctx, f"Updated movie title from \"{movie['title']}\" to \"{new_title.strip()}\".")

    @commands.command(name="moviehelp")
    async def movie_help(self, ctx: commands.Context):
        embed = build_embed(
            "🎬 Movie Commands",
            "**!movieAdd <name>** - Suggest a movie to add to the list.\n"
            "**!movieList** - Show all movies with their IDs.\n"
            "**!watched <id>** - Mark a movie as watched (admin only).\n"
            "**!rmovie** - Pick a random movie for approval.\n"
            "**!removeMovie <id>** - Remove a movie from the random pool (admin only).\n"
            "**!editMovie <id> <newTitle>** - Edit a movie's title (admin only).\n"
            "**!movieHelp** - Show this help message."
        )
        await send_embed(ctx, embed, delay=config.EXPIRE_SHORT)

    # ========================================================================
    # Approval reactions in the log channel
    # ========================================================================

    @commands.Cog.listener()
    async def on_raw_reaction_add(self, payload: discord.RawReactionActionEvent):
        if payload.channel_id != config.settings.debug_channel_id:
            return
        if payload.member is None or payload.member.bot:
            return

        channel = self.bot.get_channel(payload.channel_id)
        if channel is None:
            return

        try:
            if not is_admin(payload.user_id):
                message = await channel.fetch_message(payload.message_id)
                await message.remove_reaction(payload.emoji, payload.member)
                return

            suggestion = self.suggestions.get(payload.message_id)
            if suggestion is None:
                return
            emoji = str(payload.emoji)
            if emoji not in (config.APPROVE_EMOJI, config.REJECT_EMOJI):
                return

            message = await channel.fetch_message(payload.message_id)
            await self.resolve_suggestion(message, suggestion, approved=emoji == config.APPROVE_EMOJI)
            del self.suggestions[payload.message_id]
        except discord.HTTPException as e:
            logger.error(f"[MOVIES] Error handling approval reaction: {e}")

    async def resolve_suggestion(self, log_message: discord.Message, suggestion: PendingSuggestion, approved: bool):
        """Apply an admin decision to a suggestion or a random pick"""
        movie = db.get_movie_by_id(suggestion.movie_id)
        if movie is None:
            logger.warning(f"[MOVIES] Movie {suggestion.movie_id} no longer exists")
            return

        if suggestion.is_random:
            if approved:
                db.mark_movie_watched(suggestion.movie_id)
                text = f"Random movie \"{movie['title']}\" approved and marked as watched."
            else:
                text = f"Random movie \"{movie['title']}\" rejected. It can be picked again."
            try:
                reply = await suggestion.original_message.reply(text, mention_author=False)
                schedule_messages(config.EXPIRE_SHORT, reply)
            except discord.HTTPException as e:
                logger.warning(f"[MOVIES] Could not reply to requester: {e}")
            return

        if approved:
            db.approve_movie(suggestion.movie_id)
            emoji, suffix = config.APPROVE_EMOJI, "Approved"
        else:
            db.delete_movie(suggestion.movie_id)
            emoji, suffix = config.REJECT_EMOJI, "Rejected"
        logger.info(f"[MOVIES] \"{movie['title']}\" {suffix.lower()}")

        try:
            await suggestion.original_message.add_reaction(emoji)
        except discord.HTTPException as e:
            logger.debug(f"[MOVIES] Original suggestion message gone: {e}")
        await log_message.edit(content=f"{log_message.content} - {suffix}")
