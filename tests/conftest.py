import os
import sys
import pytest
from unittest.mock import MagicMock, AsyncMock

# Ensure repo root on sys.path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import discord

import config

ADMIN_ID = 111111111111111111
USER_ID = 222222222222222222
DEBUG_CHANNEL_ID = 900000000000000001
CLIP_CHANNEL_ID = 900000000000000002
ROLES_CHANNEL_ID = 900000000000000003
ROLES_MESSAGE_ID = 900000000000000004


@pytest.fixture(autouse=True)
def settings():
    """Known settings for every test, restored afterwards"""
    previous = config.settings
    config.settings = config.Settings(
        token="test-token",
        admin_ids=frozenset({ADMIN_ID}),
        debug_channel_id=DEBUG_CHANNEL_ID,
        clip_channel_id=CLIP_CHANNEL_ID,
        roles_channel_id=ROLES_CHANNEL_ID,
        roles_message_id=ROLES_MESSAGE_ID,
    )
    yield config.settings
    config.settings = previous


def make_http_error(cls, status: int, message: str):
    """Build a discord.HTTPException subclass without a real response"""
    return cls(MagicMock(status=status, reason=message), {"code": 0, "message": message})


def make_message(message_id: int = 1, channel_id: int = 10, author_id: int = USER_ID, content: str = "",
                 author_bot: bool = False):
    message = MagicMock()
    message.id = message_id
    message.channel.id = channel_id
    message.guild.id = 1
    message.author.id = author_id
    message.author.bot = author_bot
    message.author.display_name = "Tester"
    message.content = content
    message.attachments = []
    message.delete = AsyncMock()
    message.add_reaction = AsyncMock()
    message.remove_reaction = AsyncMock()
    message.edit = AsyncMock()
    message.reply = AsyncMock(return_value=MagicMock(id=message_id + 1000, channel=message.channel))
    return message


def make_channel(channel_id: int, messages: dict = None):
    """Channel mock whose fetch_message serves from a dict or raises NotFound"""
    channel = MagicMock()
    channel.id = channel_id
    messages = messages if messages is not None else {}

    async def fetch_message(message_id):
        if message_id in messages:
            result = messages[message_id]
            if isinstance(result, Exception):
                raise result
            return result
        raise make_http_error(discord.NotFound, 404, "Unknown Message")

    channel.fetch_message = AsyncMock(side_effect=fetch_message)
    channel.send = AsyncMock()
    return channel


def make_bot(channels: dict = None, user_id: int = 999):
    bot = MagicMock()
    bot.user.id = user_id
    channels = channels or {}
    bot.get_channel = MagicMock(side_effect=lambda cid: channels.get(cid))

    async def fetch_channel(channel_id):
        if channel_id in channels:
            return channels[channel_id]
        raise make_http_error(discord.NotFound, 404, "Unknown Channel")

    bot.fetch_channel = AsyncMock(side_effect=fetch_channel)
    return bot


@pytest.fixture
def mock_bot():
    return make_bot()
