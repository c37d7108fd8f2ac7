"""
Core bot infrastructure modules
"""
from .tasks import schedule_deletion, schedule_messages, process_overdue_deletions, deletion_sweep
from .auto_roles import ensure_role_embed, handle_role_reaction_add, handle_role_reaction_remove
from .clip_only import handle_clip_message, handle_clip_message_delete
from .activity_stats import (
    load_swear_words,
    record_message,
    record_message_edit,
    record_message_delete,
    record_reaction,
    handle_voice_state_update,
)
from .member_tracking import (
    refresh_invites,
    handle_member_join,
    handle_member_remove,
    handle_member_ban,
    handle_member_update,
)
from .game_tracking import handle_presence_update

__all__ = [
    'schedule_deletion',
    'schedule_messages',
    'process_overdue_deletions',
    'deletion_sweep',
    'ensure_role_embed',
    'handle_role_reaction_add',
    'handle_role_reaction_remove',
    'handle_clip_message',
    'handle_clip_message_delete',
    'load_swear_words',
    'record_message',
    'record_message_edit',
    'record_message_delete',
    'record_reaction',
    'handle_voice_state_update',
    'refresh_invites',
    'handle_member_join',
    'handle_member_remove',
    'handle_member_ban',
    'handle_member_update',
    'handle_presence_update',
]
