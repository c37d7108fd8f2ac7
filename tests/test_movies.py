import datetime as dt
import random
import pytest
from unittest.mock import MagicMock, AsyncMock, patch

from conftest import ADMIN_ID, DEBUG_CHANNEL_ID, USER_ID, make_bot, make_channel, make_message
from commands.movie_commands import MovieCommands, PendingSuggestion, pick_random_movie, format_movie_list


NOW = dt.datetime(2025, 6, 1, tzinfo=dt.timezone.utc)


def _movie(movie_id, title="Movie", last_watched=None, removed=False):
    return {
        'id': movie_id,
        'title': title,
        'last_watched': last_watched,
        'is_removed_from_pool': removed,
        'added_by': USER_ID,
    }


def test_random_pick_skips_removed_and_cooldown():
    movies = [
        _movie(1, removed=True),
        _movie(2, last_watched=NOW - dt.timedelta(days=10)),
        _movie(3, last_watched=NOW - dt.timedelta(days=181)),
        _movie(4, last_watched=NOW - dt.timedelta(days=200)),
        _movie(5),
    ]
    rng = random.Random(0)
    picks = {pick_random_movie(movies, NOW, 182, rng)['id'] for _ in range(200)}
    assert picks == {4, 5}


def test_random_pick_returns_none_when_nothing_is_eligible():
    movies = [_movie(1, removed=True), _movie(2, last_watched=NOW)]
    assert pick_random_movie(movies, NOW, 182) is None
    assert pick_random_movie([], NOW, 182) is None


def test_movie_list_is_alphabetical_with_struck_removed_titles():
    text = format_movie_list([
        _movie(2, "zodiac"),
        _movie(1, "Alien", last_watched=NOW),
        _movie(3, "Brazil", removed=True),
    ])
    lines = text.splitlines()
    assert lines[0] == "ID 1. Alien - 2025-06-01"
    assert lines[1] == "ID 3. ~~Brazil~~ - Not watched"
    assert lines[2].startswith("ID 2. zodiac")


@pytest.fixture
def mock_db():
    with patch('commands.movie_commands.db') as db:
        yield db


@pytest.mark.asyncio
async def test_approving_a_suggestion_clears_watch_state(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())
    original = make_message(1)
    log_message = make_message(2, channel_id=DEBUG_CHANNEL_ID, content="x suggests adding \"Heat\"")

    await cog.resolve_suggestion(log_message, PendingSuggestion(USER_ID, 7, original), approved=True)

    mock_db.approve_movie.assert_called_once_with(7)
    original.add_reaction.assert_awaited_once_with("✅")
    assert log_message.edit.call_args.kwargs['content'].endswith(" - Approved")


@pytest.mark.asyncio
async def test_rejecting_a_suggestion_deletes_the_movie(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())
    log_message = make_message(2, channel_id=DEBUG_CHANNEL_ID, content="suggestion")

    await cog.resolve_suggestion(log_message, PendingSuggestion(USER_ID, 7, make_message(1)), approved=False)

    mock_db.delete_movie.assert_called_once_with(7)
    assert log_message.edit.call_args.kwargs['content'].endswith(" - Rejected")


@pytest.mark.asyncio
async def test_approving_a_random_pick_marks_it_watched(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())
    original = make_message(1)

    with patch('commands.movie_commands.schedule_messages') as schedule:
        await cog.resolve_suggestion(make_message(2), PendingSuggestion(USER_ID, 7, original, True), approved=True)

    mock_db.mark_movie_watched.assert_called_once_with(7)
    original.reply.assert_awaited_once()
    schedule.assert_called_once()


@pytest.mark.asyncio
async def test_rejecting_a_random_pick_keeps_it_eligible(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())

    with patch('commands.movie_commands.schedule_messages'):
        await cog.resolve_suggestion(make_message(2), PendingSuggestion(USER_ID, 7, make_message(1), True), approved=False)

    mock_db.mark_movie_watched.assert_not_called()
    mock_db.delete_movie.assert_not_called()


@pytest.mark.asyncio
async def test_non_admin_reaction_in_log_channel_is_removed(mock_db):
    log_message = make_message(2, channel_id=DEBUG_CHANNEL_ID)
    bot = make_bot({DEBUG_CHANNEL_ID: make_channel(DEBUG_CHANNEL_ID, {2: log_message})})
    cog = MovieCommands(bot)
    cog.suggestions[2] = PendingSuggestion(USER_ID, 7, make_message(1))

    payload = MagicMock()
    payload.channel_id = DEBUG_CHANNEL_ID
    payload.message_id = 2
    payload.user_id = USER_ID
    payload.member.bot = False

    await cog.on_raw_reaction_add(payload)

    log_message.remove_reaction.assert_awaited_once_with(payload.emoji, payload.member)
    assert 2 in cog.suggestions
    mock_db.approve_movie.assert_not_called()


@pytest.mark.asyncio
async def test_admin_reaction_resolves_and_forgets_suggestion(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    log_message = make_message(2, channel_id=DEBUG_CHANNEL_ID, content="suggestion")
    bot = make_bot({DEBUG_CHANNEL_ID: make_channel(DEBUG_CHANNEL_ID, {2: log_message})})
    cog = MovieCommands(bot)
    cog.suggestions[2] = PendingSuggestion(USER_ID, 7, make_message(1))

    payload = MagicMock()
    payload.channel_id = DEBUG_CHANNEL_ID
    payload.message_id = 2
    payload.user_id = ADMIN_ID
    payload.member.bot = False
    payload.emoji.__str__ = MagicMock(return_value="✅")

    await cog.on_raw_reaction_add(payload)

    mock_db.approve_movie.assert_called_once_with(7)
    assert 2 not in cog.suggestions


@pytest.mark.asyncio
async def test_watched_command_marks_movie(mock_db):
    mock_db.get_movie_by_id.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())
    ctx = MagicMock()

    with patch('commands.movie_commands.reply_expiring', new_callable=AsyncMock) as reply:
        await MovieCommands.watched.callback(cog, ctx, 7)

    mock_db.mark_movie_watched.assert_called_once_with(7)
    assert "Heat" in reply.call_args.args[1]


@pytest.mark.asyncio
async def test_duplicate_suggestion_is_reported_not_inserted(mock_db):
    mock_db.get_movie_by_title.return_value = _movie(7, "Heat")
    cog = MovieCommands(make_bot())
    ctx = MagicMock()

    with patch('commands.movie_commands.send_debug', new_callable=AsyncMock) as send_debug, \
            patch('commands.movie_commands.schedule_messages'):
        await MovieCommands.movie_add.callback(cog, ctx, title="heat")

    mock_db.add_movie.assert_not_called()
    assert "already exists" in send_debug.call_args.args[1]
