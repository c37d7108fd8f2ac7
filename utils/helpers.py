"""
Helper utility functions for message processing
"""
import re
from typing import Iterable, Optional

import discord

from config import VIDEO_EXTENSIONS, IMAGE_EXTENSIONS


USER_ID_RE = re.compile(r"^\d{17,20}$")
MENTION_RE = re.compile(r"^<@!?(\d{17,20})>$")
NON_LETTER_RE = re.compile(r"[^a-zA-Z]")
QUOTED_RE = re.compile(r'"([^"]+)"')


def count_words(content: str) -> int:
    """Count whitespace-separated words in a message"""
    return len(content.split())


def count_swears(content: str, swear_words: set[str] | frozenset[str]) -> int:
    """
    Count swear words in a message.

    Each word is lowercased and stripped of non-letters before the lookup,
    so "Damn!" matches "damn".
    """
    if not swear_words:
        return 0
    count = 0
    for word in content.lower().split():
        if NON_LETTER_RE.sub("", word) in swear_words:
            count += 1
    return count


def parse_user_id(argument: str | None) -> Optional[int]:
    """
    Parse a raw Discord user id or a ``<@id>`` mention.

    Returns:
        The user id, or None if the argument is not a valid id/mention
    """
    if not argument:
        return None
    argument = argument.strip()
    match = MENTION_RE.match(argument)
    if match:
        return int(match.group(1))
    if USER_ID_RE.match(argument):
        return int(argument)
    return None


def parse_quoted(content: str) -> list[str]:
    """Return every double-quoted segment of a message, in order"""
    return QUOTED_RE.findall(content)


def normalize_game_name(name: str) -> str:
    """Strip trademark symbols and whitespace, keep capitalization"""
    return name.replace("™", "").replace("®", "").strip()


def get_extension(url: str) -> str:
    """Extract the lowercase file extension from an attachment URL"""
    path = url.split("?")[0]
    filename = path.rsplit("/", 1)[-1]
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_media_attachment(attachment: discord.Attachment) -> bool:
    """
    Check whether an attachment is an image or a video.

    Matches on URL extension, content type or filename, any of which is enough.
    """
    extension = get_extension(attachment.url or "")
    if extension in VIDEO_EXTENSIONS or extension in IMAGE_EXTENSIONS:
        return True

    content_type = attachment.content_type or ""
    if content_type.startswith("video/") or content_type.startswith("image/"):
        return True

    name = (attachment.filename or "").lower()
    return any(name.endswith(f".{ext}") for ext in VIDEO_EXTENSIONS + IMAGE_EXTENSIONS)


def has_media(attachments: Iterable[discord.Attachment]) -> bool:
    return any(is_media_attachment(att) for att in attachments)


def message_link(guild_id: int, channel_id: int, message_id: int) -> str:
    return f"https://discord.com/channels/{guild_id}/{channel_id}/{message_id}"


def truncate(text: str, limit: int = 2000) -> str:
    """Trim text to Discord's message length limit"""
    if len(text) <= limit:
        return text
    return text[:limit - 1] + "…"
