"""
Admin allow-list checks for prefix commands
"""
from discord.ext import commands

import config


class NotAdmin(commands.CheckFailure):
    """Raised when a non-admin invokes an admin-gated command"""

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__("Only admins can use this command.")


def is_admin(user_id: int) -> bool:
    """Check whether a user id is in the configured admin allow-list"""
    return user_id in config.settings.admin_ids


def admin_only():
    """Command check restricting a command to ADMIN_IDS"""
    async def predicate(ctx: commands.Context) -> bool:
        if not is_admin(ctx.author.id):
            raise NotAdmin(ctx.author.id)
        return True
    return commands.check(predicate)
