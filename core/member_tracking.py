"""
Membership history: joins, leaves, kicks, bans, saved roles and inviters
"""
import discord
import datetime as dt

import config
from database import db
from utils.logger import logger


# guild id -> {invite code: (uses, inviter id)}
invite_cache: dict[int, dict[str, tuple[int, int]]] = {}


def _snapshot(invites) -> dict[str, tuple[int, int]]:
    return {
        invite.code: (invite.uses or 0, invite.inviter.id if invite.inviter else 0)
        for invite in invites
    }


async def refresh_invites(guild: discord.Guild):
    """Cache current invite use counts for a guild"""
    try:
        invite_cache[guild.id] = _snapshot(await guild.invites())
    except discord.HTTPException as e:
        logger.warning(f"[MEMBERS] Cannot read invites for {guild.name}: {e}")


def diff_inviter(before: dict[str, tuple[int, int]], after: dict[str, tuple[int, int]]) -> int:
    """
    Find the inviter whose invite gained a use between two snapshots.

    Returns 0 when no single invite can be identified.
    """
    candidates = []
    for code, (uses, inviter_id) in after.items():
        previous_uses = before.get(code, (0, inviter_id))[0]
        if uses > previous_uses:
            candidates.append(inviter_id)
    # One-use invites disappear once used
    if not candidates:
        candidates = [inviter_id for code, (uses, inviter_id) in before.items() if code not in after]
    return candidates[0] if len(candidates) == 1 else 0


async def find_inviter(guild: discord.Guild) -> int:
    """Inviter id for a join, or 0 when it cannot be attributed"""
    if guild.id not in invite_cache:
        # No baseline to diff against, so only start one
        await refresh_invites(guild)
        return 0
    before = invite_cache[guild.id]
    try:
        after = _snapshot(await guild.invites())
    except discord.HTTPException as e:
        logger.warning(f"[MEMBERS] Cannot read invites for {guild.name}: {e}")
        return 0
    invite_cache[guild.id] = after
    return diff_inviter(before, after)


def member_role_ids(member: discord.Member) -> list[int]:
    """Role ids without @everyone"""
    return [role.id for role in member.roles if not role.is_default()]


async def handle_member_join(member: discord.Member):
    """Create a record for first-time members, or restore roles of returning ones"""
    if member.bot:
        return
    inviter_id = await find_inviter(member.guild)
    try:
        record = db.get_user_data(member.id)
        if not record:
            db.create_user_data(member.id, dt.datetime.now(dt.timezone.utc), inviter_id)
            logger.info(f"[MEMBERS] New member {member} (invited by {inviter_id or 'unknown'})")
            return

        db.increment_user_field(member.id, 'connections')
        roles = []
        for role_id in record['roles']:
            role = member.guild.get_role(int(role_id))
            if role and not role.is_default() and not role.managed and role not in member.roles:
                roles.append(role)
        if roles:
            await member.add_roles(*roles, reason="Restoring roles of returning member")
        logger.info(f"[MEMBERS] Returning member {member}, restored {len(roles)} role(s)")
    except discord.HTTPException as e:
        logger.error(f"[MEMBERS] Error restoring roles for {member}: {e}")
    except Exception as e:
        logger.error(f"[MEMBERS] Error handling join of {member}: {e}")


async def was_kicked(member: discord.Member, now: dt.datetime = None) -> bool:
    """Check the audit log for a kick of this member within KICK_AUDIT_WINDOW"""
    now = now or dt.datetime.now(dt.timezone.utc)
    try:
        async for entry in member.guild.audit_logs(limit=5, action=discord.AuditLogAction.kick):
            if entry.target and entry.target.id == member.id:
                return (now - entry.created_at).total_seconds() <= config.KICK_AUDIT_WINDOW
    except discord.HTTPException as e:
        logger.warning(f"[MEMBERS] Cannot read audit log in {member.guild.name}: {e}")
    return False


async def handle_member_remove(member: discord.Member):
    """Save the departing member's roles and count a kick if the audit log shows one"""
    if member.bot:
        return
    try:
        db.save_user_roles(member.id, member_role_ids(member))
        if await was_kicked(member):
            db.increment_user_field(member.id, 'kicks')
            logger.info(f"[MEMBERS] {member} was kicked")
    except Exception as e:
        logger.error(f"[MEMBERS] Error handling removal of {member}: {e}")


async def handle_member_ban(guild: discord.Guild, user):
    try:
        if db.increment_user_field(user.id, 'bans'):
            logger.info(f"[MEMBERS] {user} was banned from {guild.name}")
    except Exception as e:
        logger.error(f"[MEMBERS] Error recording ban of {user}: {e}")


async def handle_member_update(before: discord.Member, after: discord.Member):
    """Save the role list whenever it changes"""
    if after.bot:
        return
    new_roles = member_role_ids(after)
    if set(member_role_ids(before)) == set(new_roles):
        return
    try:
        db.save_user_roles(after.id, new_roles)
    except Exception as e:
        logger.error(f"[MEMBERS] Error saving roles for {after}: {e}")
