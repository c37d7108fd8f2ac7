"""
!help command
"""
from discord.ext import commands

import config
from utils.response_helpers import build_embed
from .replies import send_embed


REGULAR_COMMANDS = [
    "`!movieAdd <name>`: Suggest a movie to add to the list.",
    "`!movieList`: Show all movies with their IDs.",
    "`!rmovie`: Pick a random movie for approval.",
    "`!movieHelp`: Show help for movie commands.",
    "`!serialhelp`: Show help for series commands.",
    "`!stat [user]`: Show user statistics (yours if no user specified).",
    "`!allstat`: Show aggregated statistics for all users.",
    "`!game [userID|@user]`: Show gaming activity stats for a user.",
    "`!help`: Show this help message.",
]

ADMIN_COMMANDS = [
    "`!watched <id>`: Mark a movie as watched.",
    "`!removeMovie <id>`: Remove a movie from the random pool.",
    "`!editMovie <id> <newTitle>`: Edit a movie's title.",
    "`!remove <count>`: Remove a specified number of messages (1-100).",
    "`!timer <duration> [optional message]`: Set a countdown timer (e.g., `!timer 30m`).",
    "`!user <userid> or !user @user`: Show user information.",
    "`!swear <word>`: Add a swear word to the list.",
    "`!galias \"standard\" \"alias\"`: Map a game alias.",
    "`!bothelp`: Bot status commands.",
]


class HelpCommands(commands.Cog):
    def __init__(self, bot: commands.Bot):
        self.bot = bot

    @commands.command(name="help")
    async def help_command(self, ctx: commands.Context):
        embed = build_embed("Bot Commands", "A list of all available commands. Admin commands are marked accordingly.")
        embed.add_field(name="Regular Commands", value="\n".join(REGULAR_COMMANDS), inline=False)
        embed.add_field(name="Admin Commands", value="\n".join(ADMIN_COMMANDS), inline=False)
        embed.set_footer(text="Messages will be deleted after 2 minutes.")
        await send_embed(ctx, embed, delay=config.EXPIRE_DEFAULT)
