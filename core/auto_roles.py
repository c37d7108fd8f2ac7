"""
Role-by-reaction: members pick game-update roles by reacting on one embed
"""
import discord
from typing import Optional

import config
from utils.logger import logger
from utils.response_helpers import build_embed


# Message id that carries the role reactions. Starts from ROLES_MESSAGE_ID and
# is replaced when a fresh embed has to be posted.
_role_message_id: Optional[int] = None


def get_role_message_id() -> Optional[int]:
    return _role_message_id or config.settings.roles_message_id


def set_role_message_id(message_id: Optional[int]):
    global _role_message_id
    _role_message_id = message_id


def find_role_key(emoji_id: Optional[int]) -> Optional[str]:
    """Look up the ROLE_MAPPING key for a custom emoji id"""
    if emoji_id is None:
        return None
    for key, entry in config.ROLE_MAPPING.items():
        if entry["emoji_id"] == emoji_id:
            return key
    return None


def build_role_embed() -> discord.Embed:
    lines = [
        "React to the appropriate icon to receive notifications about updates for selected games!",
        "",
    ]
    for key, entry in config.ROLE_MAPPING.items():
        lines.append(f"<:{key}:{entry['emoji_id']}> **Updates for {entry['label']}**")
    lines.append("")
    lines.append("*React with the appropriate emoji below to receive notifications!*")

    embed = build_embed("📰 Roles: Game Updates", "\n".join(lines))
    embed.set_footer(text="Automatic notification system | React to join!")
    return embed


async def ensure_role_embed(bot):
    """
    Edit the configured role message, or post a new one with every mapped reaction.
    """
    channel_id = config.settings.roles_channel_id
    if not channel_id:
        logger.info("[ROLES] ROLES_CHANNEL_ID not set, skipping role embed")
        return

    try:
        channel = bot.get_channel(channel_id) or await bot.fetch_channel(channel_id)
    except discord.HTTPException as e:
        logger.error(f"[ROLES] Channel {channel_id} not found: {e}")
        return

    embed = build_role_embed()
    message_id = get_role_message_id()
    if message_id:
        try:
            message = await channel.fetch_message(message_id)
            await message.edit(embed=embed)
            logger.info(f"[ROLES] Role embed {message_id} updated")
            return
        except discord.HTTPException as e:
            logger.info(f"[ROLES] Could not fetch role message {message_id} ({e}), sending a new one")

    new_message = await channel.send(embed=embed)
    set_role_message_id(new_message.id)
    logger.info(f"[ROLES] New role embed sent. ID: {new_message.id} (set ROLES_MESSAGE_ID to keep it)")

    for key, entry in config.ROLE_MAPPING.items():
        emoji = bot.get_emoji(entry["emoji_id"])
        if emoji is None:
            logger.warning(f"[ROLES] Emoji {entry['emoji_id']} for {key} not found")
            continue
        try:
            await new_message.add_reaction(emoji)
        except discord.HTTPException as e:
            logger.warning(f"[ROLES] Could not add reaction for {key}: {e}")


async def _resolve_mapping(bot, payload: discord.RawReactionActionEvent):
    """Return (member, role, key) for a reaction on the role message, or None"""
    if payload.message_id != get_role_message_id() or payload.guild_id is None:
        return None

    key = find_role_key(payload.emoji.id)
    if key is None:
        return None

    guild = bot.get_guild(payload.guild_id)
    if guild is None:
        return None

    member = payload.member or guild.get_member(payload.user_id)
    if member is None or member.bot:
        return None

    role = guild.get_role(config.ROLE_MAPPING[key]["role_id"])
    if role is None:
        logger.warning(f"[ROLES] Role for {key} not found in {guild.name}")
        return None
    return member, role, key


async def handle_role_reaction_add(bot, payload: discord.RawReactionActionEvent):
    """Grant the mapped role if the member does not have it yet"""
    resolved = await _resolve_mapping(bot, payload)
    if resolved is None:
        return
    member, role, key = resolved
    if role in member.roles:
        return
    try:
        await member.add_roles(role, reason="Role-by-reaction")
        logger.info(f"[ROLES] Assigned role {key} to {member}")
    except discord.HTTPException as e:
        logger.error(f"[ROLES] Error adding {role.name} to {member}: {e}")


async def handle_role_reaction_remove(bot, payload: discord.RawReactionActionEvent):
    """Revoke the mapped role if the member has it"""
    resolved = await _resolve_mapping(bot, payload)
    if resolved is None:
        return
    member, role, key = resolved
    if role not in member.roles:
        return
    try:
        await member.remove_roles(role, reason="Role-by-reaction removed")
        logger.info(f"[ROLES] Removed role {key} from {member}")
    except discord.HTTPException as e:
        logger.error(f"[ROLES] Error removing {role.name} from {member}: {e}")
