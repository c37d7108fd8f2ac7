import discord
from discord.ext import commands
from dotenv import load_dotenv

import config

# Import database
from database import db

# Import command cogs
from commands import ALL_COGS, restore_presence
from commands.replies import send_error

# Import core functionality
from core import (
    deletion_sweep,
    ensure_role_embed,
    handle_role_reaction_add,
    handle_role_reaction_remove,
    handle_clip_message,
    handle_clip_message_delete,
    load_swear_words,
    record_message,
    record_message_edit,
    record_message_delete,
    record_reaction,
    handle_voice_state_update,
    refresh_invites,
    handle_member_join,
    handle_member_remove,
    handle_member_ban,
    handle_member_update,
    handle_presence_update,
)
from utils.logger import logger, setup_logging
from utils.permissions import NotAdmin
from utils.response_helpers import send_debug
from utils.secrets_manager import load_secret_env

# Load environment variables from .env file
load_dotenv()
load_secret_env()
config.settings = config.load_settings()
setup_logging(config.settings.log_level)

intents = discord.Intents.default()
intents.message_content = True
intents.members = True
intents.presences = True

bot = commands.Bot(
    command_prefix=config.BOT_PREFIX,
    intents=intents,
    case_insensitive=True,
    help_command=None
)

# Set once the database and cogs are ready
bot_initialized = False

UNCOUNTED_COMMANDS = ("stat", "allstat")


# ============================================================================
# STARTUP
# ============================================================================

@bot.event
async def on_ready():
    global bot_initialized
    logger.info(f'{bot.user} has logged in!')

    if bot_initialized:
        return

    # Initialize database connection pool
    try:
        db.init_pool()
        db.init_tables()
        logger.info("✅ Database connected successfully")
    except Exception as e:
        logger.error(f"❌ Database initialization failed: {e}")
        await send_debug(bot, f"Database initialization failed, commands are disabled: {e}")
        return

    try:
        load_swear_words()
    except Exception as e:
        logger.error(f"⚠️  Failed to load swear words: {e}")

    for cog in ALL_COGS:
        await bot.add_cog(cog(bot))
    logger.info(f"✅ Loaded {len(ALL_COGS)} command cogs")
    bot_initialized = True

    await restore_presence(bot)

    try:
        await ensure_role_embed(bot)
    except Exception as e:
        logger.error(f"⚠️  Failed to set up role embed: {e}")

    for guild in bot.guilds:
        await refresh_invites(guild)

    # Start deletion sweep task
    bot.loop.create_task(deletion_sweep(bot))


# ============================================================================
# COMMAND ERRORS
# ============================================================================

@bot.event
async def on_command_error(ctx: commands.Context, error: commands.CommandError):
    """Reply to rejected or malformed commands; unknown commands are ignored"""
    if isinstance(error, commands.CommandNotFound):
        return
    if isinstance(error, NotAdmin):
        await send_error(ctx, str(error))
        return
    if isinstance(error, (commands.MissingRequiredArgument, commands.BadArgument, commands.TooManyArguments)):
        usage = ctx.command.usage if ctx.command and ctx.command.usage else f"!{ctx.invoked_with}"
        await send_error(ctx, f"Usage: `{usage}`")
        return

    original = getattr(error, 'original', error)
    logger.error(f"Error in command {ctx.command}: {original}")
    await send_debug(bot, f"Error in command `{ctx.command}` from {ctx.author}: {original}")
    try:
        await send_error(ctx, "Something went wrong. Please try again later.")
    except discord.HTTPException as reply_error:
        logger.debug(f"Could not send error reply: {reply_error}")


# ============================================================================
# EVENT HANDLERS
# ============================================================================

@bot.event
async def on_message(message: discord.Message):
    """Count the message, police the clip channel, then dispatch any command"""
    if message.author.bot:
        return

    ctx = await bot.get_context(message)
    # Stat queries are not counted so they don't change the numbers they show
    if not (ctx.valid and ctx.command.name in UNCOUNTED_COMMANDS):
        await record_message(message)
    await handle_clip_message(bot, message)

    if ctx.valid:
        await bot.invoke(ctx)


@bot.event
async def on_message_edit(before: discord.Message, after: discord.Message):
    await record_message_edit(before, after)


@bot.event
async def on_message_delete(message: discord.Message):
    await record_message_delete(message)


@bot.event
async def on_raw_message_delete(payload: discord.RawMessageDeleteEvent):
    """Uncached deletions still need their clip-channel log message cleaned up"""
    await handle_clip_message_delete(bot, payload)


@bot.event
async def on_reaction_add(reaction: discord.Reaction, user):
    await record_reaction(reaction, user, 1)


@bot.event
async def on_reaction_remove(reaction: discord.Reaction, user):
    await record_reaction(reaction, user, -1)


@bot.event
async def on_raw_reaction_add(payload: discord.RawReactionActionEvent):
    await handle_role_reaction_add(bot, payload)


@bot.event
async def on_raw_reaction_remove(payload: discord.RawReactionActionEvent):
    await handle_role_reaction_remove(bot, payload)


@bot.event
async def on_voice_state_update(member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):
    await handle_voice_state_update(member, before, after)


@bot.event
async def on_presence_update(before: discord.Member, after: discord.Member):
    await handle_presence_update(before, after)


@bot.event
async def on_member_join(member: discord.Member):
    await handle_member_join(member)


@bot.event
async def on_member_remove(member: discord.Member):
    await handle_member_remove(member)


@bot.event
async def on_member_ban(guild: discord.Guild, user):
    await handle_member_ban(guild, user)


@bot.event
async def on_member_update(before: discord.Member, after: discord.Member):
    await handle_member_update(before, after)


@bot.event
async def on_invite_create(invite: discord.Invite):
    guild = bot.get_guild(invite.guild.id) if invite.guild else None
    if guild:
        await refresh_invites(guild)


@bot.event
async def on_invite_delete(invite: discord.Invite):
    guild = bot.get_guild(invite.guild.id) if invite.guild else None
    if guild:
        await refresh_invites(guild)


# ============================================================================
# RUN BOT
# ============================================================================

def run():
    if not config.settings.token:
        raise SystemExit("DISCORD_TOKEN is not set")
    bot.run(config.settings.token, log_handler=None)


if __name__ == "__main__":
    run()
