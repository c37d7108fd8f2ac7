import pytest
from unittest.mock import MagicMock, AsyncMock, patch

from conftest import CLIP_CHANNEL_ID, DEBUG_CHANNEL_ID, make_bot, make_channel, make_message
from core import clip_only
from database import DeletionStatus


def _clip_message(attachments=(), author_bot=False, channel_id=CLIP_CHANNEL_ID):
    message = make_message(500, channel_id=channel_id, author_bot=author_bot, content="look at this")
    message.attachments = list(attachments)
    return message


def _video():
    attachment = MagicMock()
    attachment.url = "https://cdn.discordapp.com/attachments/1/2/clip.mp4?ex=abc"
    attachment.content_type = "video/mp4"
    attachment.filename = "clip.mp4"
    return attachment


@pytest.fixture
def mock_schedule():
    with patch('core.clip_only.schedule_deletion', return_value=1) as schedule:
        yield schedule


@pytest.fixture
def mock_send_debug():
    with patch('core.clip_only.send_debug', new_callable=AsyncMock) as send_debug:
        send_debug.return_value = MagicMock(id=700)
        yield send_debug


@pytest.mark.asyncio
async def test_media_post_gets_checkmark(mock_schedule, mock_send_debug):
    message = _clip_message([_video()])

    await clip_only.handle_clip_message(make_bot(), message)

    message.add_reaction.assert_awaited_once_with("✅")
    mock_schedule.assert_not_called()


@pytest.mark.asyncio
async def test_text_post_is_scheduled_with_log_message(mock_schedule, mock_send_debug):
    message = _clip_message()

    await clip_only.handle_clip_message(make_bot(), message)

    mock_schedule.assert_called_once_with(CLIP_CHANNEL_ID, 500, 6 * 3600, 700)
    text = mock_send_debug.call_args.args[1]
    assert "will be removed <t:" in text
    assert f"/{CLIP_CHANNEL_ID}/500" in text
    message.add_reaction.assert_not_awaited()


@pytest.mark.asyncio
async def test_text_post_without_log_channel_is_still_scheduled(mock_schedule, mock_send_debug):
    mock_send_debug.return_value = None

    await clip_only.handle_clip_message(make_bot(), _clip_message())

    mock_schedule.assert_called_once_with(CLIP_CHANNEL_ID, 500, 6 * 3600, None)


@pytest.mark.asyncio
async def test_other_channels_and_bots_are_ignored(mock_schedule, mock_send_debug):
    await clip_only.handle_clip_message(make_bot(), _clip_message(channel_id=10))
    await clip_only.handle_clip_message(make_bot(), _clip_message(author_bot=True))

    mock_schedule.assert_not_called()
    mock_send_debug.assert_not_awaited()


@pytest.mark.asyncio
async def test_manual_delete_cleans_up_pending_record():
    log_message = make_message(700, channel_id=DEBUG_CHANNEL_ID)
    bot = make_bot({DEBUG_CHANNEL_ID: make_channel(DEBUG_CHANNEL_ID, {700: log_message})})
    payload = MagicMock(channel_id=CLIP_CHANNEL_ID, message_id=500)

    with patch('core.clip_only.db') as db:
        db.get_message_record_by_message_id.return_value = {
            'id': 3, 'log_message_id': 700, 'status': int(DeletionStatus.PENDING)
        }
        await clip_only.handle_clip_message_delete(bot, payload)

    log_message.delete.assert_awaited_once()
    db.mark_message_completed.assert_called_once_with(3)


@pytest.mark.asyncio
async def test_manual_delete_ignores_finished_records():
    bot = make_bot()
    payload = MagicMock(channel_id=CLIP_CHANNEL_ID, message_id=500)

    with patch('core.clip_only.db') as db:
        db.get_message_record_by_message_id.return_value = {
            'id': 3, 'log_message_id': 700, 'status': int(DeletionStatus.REMOVED)
        }
        await clip_only.handle_clip_message_delete(bot, payload)

    db.mark_message_completed.assert_not_called()
