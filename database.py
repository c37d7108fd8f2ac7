"""
Database connection and utilities for ReelBot
PostgreSQL via a psycopg2 connection pool, with optional RDS IAM authentication
"""
import os
import json
import datetime as dt
import enum
import boto3
import psycopg2
from psycopg2 import pool
from psycopg2.extras import execute_values
from typing import Optional

import config
from utils.logger import logger


class DeletionStatus(enum.IntEnum):
    """Status values stored in main.messages_to_delete.status"""
    REMOVED = 1
    PENDING = 2
    ERROR = 3


USER_STAT_COLUMNS = (
    'total_messages',
    'total_words',
    'messages_removed',
    'messages_edited',
    'total_swears',
    'reactions_given',
    'reactions_received',
    'voice_time',
    'streaming_time',
)

# Counters on main.user_data that may be bumped with increment_user_field
USER_DATA_COUNTERS = ('connections', 'kicks', 'bans')

MOVIE_COLUMNS = ('id', 'title', 'last_watched', 'is_removed_from_pool', 'added_by')
SERIES_COLUMNS = ('id', 'title', 'added_by', 'added_at', 'ended')
EPISODE_COLUMNS = ('id', 'series_id', 'season_number', 'episode_number', 'watched', 'watched_at')
DELETION_COLUMNS = ('id', 'channel_id', 'message_id', 'delete_at', 'log_message_id', 'status', 'error_log')
USER_DATA_COLUMNS = ('user_id', 'roles', 'connections', 'first_join_date', 'kicks', 'bans', 'inviter_id')


def _to_dicts(columns: tuple, rows) -> list[dict]:
    return [dict(zip(columns, row)) for row in rows or []]


def _to_dict(columns: tuple, rows) -> Optional[dict]:
    if not rows:
        return None
    return dict(zip(columns, rows[0]))


class Database:
    """Database connection manager for ReelBot"""

    def __init__(self):
        self.connection_pool: Optional[pool.SimpleConnectionPool] = None

    def _get_iam_token(self, host: str, port: int, user: str, region: str) -> str:
        """Generate an RDS IAM authentication token"""
        session = boto3.Session(region_name=region)
        rds_client = session.client('rds', region_name=region)
        return rds_client.generate_db_auth_token(
            DBHostname=host,
            Port=port,
            DBUsername=user,
            Region=region
        )

    def get_connection_params(self) -> dict:
        """Get connection parameters for database from the environment"""
        host = os.getenv('DB_HOST')
        if not host:
            raise ValueError("DB_HOST must be set")

        params = {
            'host': host,
            'port': int(os.getenv('DB_PORT', '5432')),
            'database': os.getenv('DB_NAME', 'postgres'),
            'user': os.getenv('DB_USER', 'reelbot'),
            'connect_timeout': config.DB_CONNECTION_TIMEOUT
        }

        if os.getenv('USE_IAM_AUTH', 'false').lower() == 'true':
            region = os.getenv('AWS_REGION', 'us-east-1')
            params['password'] = self._get_iam_token(params['host'], params['port'], params['user'], region)
            params['sslmode'] = 'require'
        else:
            password = os.getenv('DB_PASSWORD')
            if not password:
                raise ValueError("DB_PASSWORD must be set when USE_IAM_AUTH=false")
            params['password'] = password
            params['sslmode'] = os.getenv('DB_SSLMODE', 'prefer')

        return params

    def init_pool(self, minconn=config.DB_CONNECTION_POOL_MIN, maxconn=config.DB_CONNECTION_POOL_MAX):
        """Initialize connection pool"""
        if self.connection_pool:
            return

        params = self.get_connection_params()
        self.connection_pool = pool.SimpleConnectionPool(
            minconn,
            maxconn,
            **params
        )

    def get_connection(self):
        """Get a connection from the pool, rebuilding the pool once if connections went stale"""
        if not self.connection_pool:
            self.init_pool()

        max_retries = 2
        for attempt in range(max_retries):
            try:
                conn = self.connection_pool.getconn()
                with conn.cursor() as cursor:
                    cursor.execute("SELECT 1")
                return conn
            except (psycopg2.OperationalError, psycopg2.InterfaceError) as e:
                logger.warning(f"[DB] Connection error (attempt {attempt + 1}/{max_retries}): {e}")
                try:
                    self.close_pool()
                except Exception as close_error:
                    logger.debug(f"[DB] Error closing pool: {close_error}")
                if attempt < max_retries - 1:
                    self.init_pool()
                else:
                    raise

    def release_connection(self, conn):
        """Release a connection back to the pool"""
        if self.connection_pool:
            try:
                self.connection_pool.putconn(conn)
            except Exception:
                conn.close()

    def close_pool(self):
        """Close all connections in the pool"""
        if self.connection_pool:
            self.connection_pool.closeall()
            self.connection_pool = None

    def execute_query(self, query: str, params: tuple = None, fetch: bool = True):
        """
        Execute a single statement and commit.

        Returns all rows when fetch is True, otherwise the affected row count.
        """
        conn = None
        try:
            conn = self.get_connection()
            with conn.cursor() as cursor:
                cursor.execute(query, params)
                if fetch:
                    result = cursor.fetchall()
                    conn.commit()
                    return result
                rowcount = cursor.rowcount
                conn.commit()
                return rowcount
        except Exception:
            if conn:
                try:
                    conn.rollback()
                except psycopg2.Error as rollback_error:
                    logger.debug(f"[DB] Rollback failed: {rollback_error}")
            raise
        finally:
            if conn:
                self.release_connection(conn)

    def execute_many(self, query: str, params_list: list):
        """Insert many rows with one statement (psycopg2 execute_values)"""
        if not params_list:
            return
        conn = None
        try:
            conn = self.get_connection()
            with conn.cursor() as cursor:
                execute_values(cursor, query, params_list)
                conn.commit()
        except Exception:
            if conn:
                try:
                    conn.rollback()
                except psycopg2.Error as rollback_error:
                    logger.debug(f"[DB] Rollback failed: {rollback_error}")
            raise
        finally:
            if conn:
                self.release_connection(conn)

    # ============================================================================
    # Schema
    # ============================================================================

    def init_tables(self):
        """Create all tables if missing and add columns introduced after the first release."""
        statements = [
            "CREATE SCHEMA IF NOT EXISTS main",
            """
            CREATE TABLE IF NOT EXISTS main.messages_to_delete (
                id BIGSERIAL PRIMARY KEY,
                channel_id BIGINT NOT NULL,
                message_id BIGINT NOT NULL,
                delete_at TIMESTAMPTZ NOT NULL,
                log_message_id BIGINT,
                created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
            )
            """,
            # status: 1 removed, 2 to be removed, 3 error
            "ALTER TABLE main.messages_to_delete ADD COLUMN IF NOT EXISTS status SMALLINT DEFAULT 2",
            "ALTER TABLE main.messages_to_delete ADD COLUMN IF NOT EXISTS error_log TEXT DEFAULT NULL",
            """
            CREATE INDEX IF NOT EXISTS idx_messages_to_delete_pending
            ON main.messages_to_delete (status, delete_at)
            """,
            """
            CREATE INDEX IF NOT EXISTS idx_messages_to_delete_message
            ON main.messages_to_delete (message_id)
            """,
            """
            CREATE TABLE IF NOT EXISTS main.movies (
                id SERIAL PRIMARY KEY,
                title VARCHAR(255) NOT NULL,
                last_watched TIMESTAMPTZ NULL,
                is_removed_from_pool BOOLEAN DEFAULT FALSE,
                added_by BIGINT,
                created_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
            )
            """,
            "CREATE INDEX IF NOT EXISTS idx_movies_title ON main.movies (LOWER(title))",
            """
            CREATE TABLE IF NOT EXISTS main.series (
                id SERIAL PRIMARY KEY,
                title VARCHAR(255) NOT NULL,
                added_by BIGINT,
                added_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                ended BOOLEAN DEFAULT FALSE
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.episodes (
                id SERIAL PRIMARY KEY,
                series_id INTEGER REFERENCES main.series(id) ON DELETE CASCADE,
                season_number INTEGER NOT NULL,
                episode_number INTEGER NOT NULL,
                watched BOOLEAN DEFAULT FALSE,
                watched_at TIMESTAMPTZ NULL,
                UNIQUE (series_id, season_number, episode_number)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.user_data (
                user_id BIGINT PRIMARY KEY,
                roles TEXT,
                connections INTEGER DEFAULT 0,
                first_join_date TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                kicks INTEGER DEFAULT 0,
                bans INTEGER DEFAULT 0,
                inviter_id BIGINT DEFAULT 0
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.message_removal_stats (
                user_id BIGINT PRIMARY KEY,
                total_removed INTEGER DEFAULT 0,
                last_updated TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.user_stats (
                user_id BIGINT PRIMARY KEY,
                nickname VARCHAR(100),
                total_messages INTEGER DEFAULT 0,
                total_words INTEGER DEFAULT 0,
                messages_removed INTEGER DEFAULT 0,
                messages_edited INTEGER DEFAULT 0,
                total_swears INTEGER DEFAULT 0,
                reactions_given INTEGER DEFAULT 0,
                reactions_received INTEGER DEFAULT 0,
                last_updated TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
            )
            """,
            "ALTER TABLE main.user_stats ADD COLUMN IF NOT EXISTS voice_time BIGINT DEFAULT 0",
            "ALTER TABLE main.user_stats ADD COLUMN IF NOT EXISTS streaming_time BIGINT DEFAULT 0",
            """
            CREATE TABLE IF NOT EXISTS main.activities (
                id BIGSERIAL PRIMARY KEY,
                user_id BIGINT NOT NULL,
                nickname VARCHAR(100),
                activity_name VARCHAR(255) NOT NULL,
                session_start TIMESTAMPTZ NOT NULL,
                session_end TIMESTAMPTZ NULL
            )
            """,
            """
            CREATE INDEX IF NOT EXISTS idx_activities_user
            ON main.activities (user_id, activity_name)
            """,
            """
            CREATE TABLE IF NOT EXISTS main.game_aliases (
                alias_name VARCHAR(255) PRIMARY KEY,
                standard_name VARCHAR(255) NOT NULL
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.bot_settings (
                id SMALLINT PRIMARY KEY DEFAULT 1,
                activity_type VARCHAR(20),
                activity_text VARCHAR(128),
                status VARCHAR(20) DEFAULT 'online',
                updated_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP,
                CHECK (id = 1)
            )
            """,
            """
            CREATE TABLE IF NOT EXISTS main.swear_words (
                word VARCHAR(100) PRIMARY KEY,
                added_by BIGINT,
                added_at TIMESTAMPTZ DEFAULT CURRENT_TIMESTAMP
            )
            """,
        ]
        for statement in statements:
            self.execute_query(statement, fetch=False)
        logger.info("[DB] Tables initialized")

    # ============================================================================
    # Scheduled deletions
    # ============================================================================

    def insert_message_to_delete(self, channel_id: int, message_id: int, delete_at: dt.datetime,
                                 log_message_id: Optional[int] = None) -> int:
        """Schedule a message for deletion. Returns the row id."""
        query = """
        INSERT INTO main.messages_to_delete (channel_id, message_id, delete_at, log_message_id, status)
        VALUES (%s, %s, %s, %s, %s)
        RETURNING id
        """
        result = self.execute_query(
            query, (channel_id, message_id, delete_at, log_message_id, int(DeletionStatus.PENDING))
        )
        return result[0][0]

    def get_overdue_messages(self) -> list[dict]:
        """Pending rows whose delete_at has passed, oldest first"""
        query = """
        SELECT id, channel_id, message_id, delete_at, log_message_id, status, error_log
        FROM main.messages_to_delete
        WHERE delete_at <= NOW() AND status = %s
        ORDER BY delete_at ASC
        """
        return _to_dicts(DELETION_COLUMNS, self.execute_query(query, (int(DeletionStatus.PENDING),)))

    def mark_message_completed(self, row_id: int):
        query = "UPDATE main.messages_to_delete SET status = %s WHERE id = %s"
        self.execute_query(query, (int(DeletionStatus.REMOVED), row_id), fetch=False)

    def mark_message_errored(self, row_id: int, error_message: str):
        query = "UPDATE main.messages_to_delete SET status = %s, error_log = %s WHERE id = %s"
        self.execute_query(query, (int(DeletionStatus.ERROR), error_message, row_id), fetch=False)

    def get_message_record_by_message_id(self, message_id: int) -> Optional[dict]:
        """Most recent deletion record for a message"""
        query = """
        SELECT id, channel_id, message_id, delete_at, log_message_id, status, error_log
        FROM main.messages_to_delete
        WHERE message_id = %s
        ORDER BY id DESC
        LIMIT 1
        """
        return _to_dict(DELETION_COLUMNS, self.execute_query(query, (message_id,)))

    # ============================================================================
    # Movies
    # ============================================================================

    def add_movie(self, title: str, added_by: Optional[int] = None) -> int:
        query = "INSERT INTO main.movies (title, added_by) VALUES (%s, %s) RETURNING id"
        return self.execute_query(query, (title, added_by))[0][0]

    def approve_movie(self, movie_id: int):
        """Make a suggested movie eligible for the random pick"""
        query = "UPDATE main.movies SET last_watched = NULL, is_removed_from_pool = FALSE WHERE id = %s"
        self.execute_query(query, (movie_id,), fetch=False)

    def delete_movie(self, movie_id: int):
        self.execute_query("DELETE FROM main.movies WHERE id = %s", (movie_id,), fetch=False)

    def get_movies(self) -> list[dict]:
        query = "SELECT id, title, last_watched, is_removed_from_pool, added_by FROM main.movies ORDER BY id ASC"
        return _to_dicts(MOVIE_COLUMNS, self.execute_query(query))

    def get_movie_by_id(self, movie_id: int) -> Optional[dict]:
        query = "SELECT id, title, last_watched, is_removed_from_pool, added_by FROM main.movies WHERE id = %s"
        return _to_dict(MOVIE_COLUMNS, self.execute_query(query, (movie_id,)))

    def get_movie_by_title(self, title: str) -> Optional[dict]:
        """Case-insensitive title lookup"""
        query = """
        SELECT id, title, last_watched, is_removed_from_pool, added_by
        FROM main.movies
        WHERE LOWER(title) = LOWER(%s)
        LIMIT 1
        """
        return _to_dict(MOVIE_COLUMNS, self.execute_query(query, (title,)))

    def mark_movie_watched(self, movie_id: int, watched_at: Optional[dt.datetime] = None):
        watched_at = watched_at or dt.datetime.now(dt.timezone.utc)
        query = "UPDATE main.movies SET last_watched = %s, is_removed_from_pool = FALSE WHERE id = %s"
        self.execute_query(query, (watched_at, movie_id), fetch=False)

    def remove_movie_from_pool(self, movie_id: int):
        query = "UPDATE main.movies SET is_removed_from_pool = TRUE WHERE id = %s"
        self.execute_query(query, (movie_id,), fetch=False)

    def edit_movie_title(self, movie_id: int, new_title: str):
        query = "UPDATE main.movies SET title = %s WHERE id = %s"
        self.execute_query(query, (new_title, movie_id), fetch=False)

    # ============================================================================
    # Series / episodes
    # ============================================================================

    def add_series(self, title: str, added_by: int, episodes_per_season: list[int]) -> int:
        """Create a series and its episode rows. Returns the series id."""
        query = "INSERT INTO main.series (title, added_by) VALUES (%s, %s) RETURNING id"
        series_id = self.execute_query(query, (title, added_by))[0][0]

        rows = [
            (series_id, season, episode)
            for season, count in enumerate(episodes_per_season, start=1)
            for episode in range(1, count + 1)
        ]
        self.execute_many(
            "INSERT INTO main.episodes (series_id, season_number, episode_number) VALUES %s",
            rows
        )
        logger.info(f"[DB] Added series \"{title}\" with ID {series_id}")
        return series_id

    def add_season(self, series_id: int, number_of_episodes: int) -> int:
        """Append a season after the highest existing one. Returns its number."""
        query = "SELECT COALESCE(MAX(season_number), 0) FROM main.episodes WHERE series_id = %s"
        next_season = self.execute_query(query, (series_id,))[0][0] + 1
        rows = [(series_id, next_season, episode) for episode in range(1, number_of_episodes + 1)]
        self.execute_many(
            "INSERT INTO main.episodes (series_id, season_number, episode_number) VALUES %s",
            rows
        )
        return next_season

    def add_episode(self, series_id: int, season_number: int) -> int:
        """Append one episode to a season. Returns its number."""
        query = """
        SELECT COALESCE(MAX(episode_number), 0)
        FROM main.episodes
        WHERE series_id = %s AND season_number = %s
        """
        next_episode = self.execute_query(query, (series_id, season_number))[0][0] + 1
        self.execute_query(
            "INSERT INTO main.episodes (series_id, season_number, episode_number) VALUES (%s, %s, %s)",
            (series_id, season_number, next_episode),
            fetch=False
        )
        return next_episode

    def mark_episode_watched(self, series_id: int, season_number: int, episode_number: int,
                             watched_at: Optional[dt.datetime] = None) -> bool:
        """Mark one episode watched. Returns False if no such episode exists."""
        watched_at = watched_at or dt.datetime.now(dt.timezone.utc)
        query = """
        UPDATE main.episodes SET watched = TRUE, watched_at = %s
        WHERE series_id = %s AND season_number = %s AND episode_number = %s
        """
        return self.execute_query(query, (watched_at, series_id, season_number, episode_number), fetch=False) > 0

    def get_series(self) -> list[dict]:
        """Active (not ended) series, alphabetically"""
        query = "SELECT id, title, added_by, added_at, ended FROM main.series WHERE ended = FALSE ORDER BY title ASC"
        return _to_dicts(SERIES_COLUMNS, self.execute_query(query))

    def get_series_by_id(self, series_id: int) -> Optional[dict]:
        query = "SELECT id, title, added_by, added_at, ended FROM main.series WHERE id = %s"
        return _to_dict(SERIES_COLUMNS, self.execute_query(query, (series_id,)))

    def get_episodes_by_series(self, series_id: int) -> list[dict]:
        query = """
        SELECT id, series_id, season_number, episode_number, watched, watched_at
        FROM main.episodes
        WHERE series_id = %s
        ORDER BY season_number, episode_number
        """
        return _to_dicts(EPISODE_COLUMNS, self.execute_query(query, (series_id,)))

    def get_episodes_by_season(self, series_id: int, season_number: int) -> list[dict]:
        query = """
        SELECT id, series_id, season_number, episode_number, watched, watched_at
        FROM main.episodes
        WHERE series_id = %s AND season_number = %s
        ORDER BY episode_number
        """
        return _to_dicts(EPISODE_COLUMNS, self.execute_query(query, (series_id, season_number)))

    def get_next_unwatched_episode(self, series_id: int) -> Optional[dict]:
        query = """
        SELECT id, series_id, season_number, episode_number, watched, watched_at
        FROM main.episodes
        WHERE series_id = %s AND watched = FALSE
        ORDER BY season_number, episode_number
        LIMIT 1
        """
        return _to_dict(EPISODE_COLUMNS, self.execute_query(query, (series_id,)))

    def edit_season_episodes(self, series_id: int, season_number: int, new_episode_count: int):
        """Grow or shrink a season to exactly new_episode_count episodes"""
        current_count = len(self.get_episodes_by_season(series_id, season_number))
        if new_episode_count > current_count:
            rows = [
                (series_id, season_number, episode)
                for episode in range(current_count + 1, new_episode_count + 1)
            ]
            self.execute_many(
                "INSERT INTO main.episodes (series_id, season_number, episode_number) VALUES %s",
                rows
            )
        elif new_episode_count < current_count:
            query = """
            DELETE FROM main.episodes
            WHERE series_id = %s AND season_number = %s AND episode_number > %s
            """
            self.execute_query(query, (series_id, season_number, new_episode_count), fetch=False)

    def end_series(self, series_id: int):
        self.execute_query("UPDATE main.series SET ended = TRUE WHERE id = %s", (series_id,), fetch=False)

    # ============================================================================
    # Removal stats
    # ============================================================================

    def update_removal_stats(self, user_id: int, count: int):
        """Add count to a user's removed-message total"""
        query = """
        INSERT INTO main.message_removal_stats (user_id, total_removed, last_updated)
        VALUES (%s, %s, CURRENT_TIMESTAMP)
        ON CONFLICT (user_id) DO UPDATE SET
            total_removed = COALESCE(main.message_removal_stats.total_removed, 0) + EXCLUDED.total_removed,
            last_updated = CURRENT_TIMESTAMP
        """
        self.execute_query(query, (user_id, count), fetch=False)

    def get_total_removed_messages(self) -> int:
        result = self.execute_query("SELECT COALESCE(SUM(total_removed), 0) FROM main.message_removal_stats")
        return int(result[0][0]) if result else 0

    def get_user_removed_messages(self, user_id: int) -> int:
        query = "SELECT total_removed FROM main.message_removal_stats WHERE user_id = %s"
        result = self.execute_query(query, (user_id,))
        return int(result[0][0]) if result else 0

    # ============================================================================
    # User activity stats
    # ============================================================================

    def upsert_user_stats(self, user_id: int, nickname: Optional[str] = None, **increments: int):
        """
        Add increments to a user's counters, creating the row if needed.

        Keyword arguments must be names from USER_STAT_COLUMNS. Values are added
        to the stored counters, never assigned, so replaying a call doubles it.
        """
        unknown = set(increments) - set(USER_STAT_COLUMNS)
        if unknown:
            raise ValueError(f"Unknown stat columns: {', '.join(sorted(unknown))}")

        values = [int(increments.get(column, 0)) for column in USER_STAT_COLUMNS]
        columns_sql = ", ".join(USER_STAT_COLUMNS)
        placeholders = ", ".join(["%s"] * len(USER_STAT_COLUMNS))
        updates_sql = ",\n            ".join(
            f"{column} = COALESCE(main.user_stats.{column}, 0) + EXCLUDED.{column}"
            for column in USER_STAT_COLUMNS
        )
        query = f"""
        INSERT INTO main.user_stats (user_id, nickname, {columns_sql}, last_updated)
        VALUES (%s, %s, {placeholders}, CURRENT_TIMESTAMP)
        ON CONFLICT (user_id) DO UPDATE SET
            nickname = COALESCE(EXCLUDED.nickname, main.user_stats.nickname),
            {updates_sql},
            last_updated = CURRENT_TIMESTAMP
        """
        self.execute_query(query, (user_id, nickname, *values), fetch=False)

    def get_user_stats(self, user_id: int) -> Optional[dict]:
        columns = ('user_id', 'nickname') + USER_STAT_COLUMNS + ('last_updated',)
        query = f"SELECT {', '.join(columns)} FROM main.user_stats WHERE user_id = %s"
        return _to_dict(columns, self.execute_query(query, (user_id,)))

    def get_aggregate_user_stats(self) -> dict:
        """Sum of every counter across all users, plus the user count"""
        sums = ", ".join(f"COALESCE(SUM({column}), 0)" for column in USER_STAT_COLUMNS)
        result = self.execute_query(f"SELECT COUNT(*), {sums} FROM main.user_stats")
        row = result[0] if result else (0,) + (0,) * len(USER_STAT_COLUMNS)
        aggregate = {'total_users': int(row[0])}
        aggregate.update({column: int(value) for column, value in zip(USER_STAT_COLUMNS, row[1:])})
        return aggregate

    # ============================================================================
    # User membership data
    # ============================================================================

    def get_user_data(self, user_id: int) -> Optional[dict]:
        query = f"SELECT {', '.join(USER_DATA_COLUMNS)} FROM main.user_data WHERE user_id = %s"
        record = _to_dict(USER_DATA_COLUMNS, self.execute_query(query, (user_id,)))
        if record:
            record['roles'] = json.loads(record['roles']) if record['roles'] else []
        return record

    def create_user_data(self, user_id: int, first_join_date: dt.datetime, inviter_id: int = 0):
        """Create a membership record for a first-time member"""
        query = """
        INSERT INTO main.user_data (user_id, roles, connections, first_join_date, kicks, bans, inviter_id)
        VALUES (%s, %s, 1, %s, 0, 0, %s)
        ON CONFLICT (user_id) DO NOTHING
        """
        self.execute_query(query, (user_id, json.dumps([]), first_join_date, inviter_id), fetch=False)

    def save_user_roles(self, user_id: int, role_ids: list[int]):
        """Store a member's role ids, creating the record if it does not exist"""
        query = """
        INSERT INTO main.user_data (user_id, roles)
        VALUES (%s, %s)
        ON CONFLICT (user_id) DO UPDATE SET roles = EXCLUDED.roles
        """
        self.execute_query(query, (user_id, json.dumps([str(role_id) for role_id in role_ids])), fetch=False)

    def increment_user_field(self, user_id: int, field: str) -> bool:
        """Add one to a user_data counter. Returns False if the user has no record."""
        if field not in USER_DATA_COUNTERS:
            raise ValueError(f"Unknown user_data counter: {field}")
        query = f"UPDATE main.user_data SET {field} = COALESCE({field}, 0) + 1 WHERE user_id = %s"
        return self.execute_query(query, (user_id,), fetch=False) > 0

    # ============================================================================
    # Game activity
    # ============================================================================

    def start_activity_session(self, user_id: int, nickname: str, activity_name: str, started_at: dt.datetime) -> int:
        query = """
        INSERT INTO main.activities (user_id, nickname, activity_name, session_start)
        VALUES (%s, %s, %s, %s)
        RETURNING id
        """
        return self.execute_query(query, (user_id, nickname, activity_name, started_at))[0][0]

    def end_activity_session(self, user_id: int, activity_name: str, ended_at: dt.datetime) -> bool:
        """Close the newest open session of a game for a user"""
        query = """
        UPDATE main.activities SET session_end = %s
        WHERE id = (
            SELECT id FROM main.activities
            WHERE user_id = %s AND activity_name = %s AND session_end IS NULL
            ORDER BY session_start DESC
            LIMIT 1
        )
        """
        return self.execute_query(query, (ended_at, user_id, activity_name), fetch=False) > 0

    def get_game_stats(self, user_id: int) -> list[dict]:
        """Closed sessions per game with total playtime in seconds"""
        query = """
        SELECT activity_name,
               COUNT(*) AS session_count,
               COALESCE(SUM(EXTRACT(EPOCH FROM (session_end - session_start))), 0) AS total_playtime
        FROM main.activities
        WHERE user_id = %s AND session_end IS NOT NULL
        GROUP BY activity_name
        ORDER BY total_playtime DESC
        """
        rows = self.execute_query(query, (user_id,))
        return [
            {'activity_name': row[0], 'session_count': int(row[1]), 'total_playtime': int(row[2])}
            for row in rows or []
        ]

    def get_standard_game_name(self, alias_name: str) -> Optional[str]:
        query = "SELECT standard_name FROM main.game_aliases WHERE alias_name = %s"
        result = self.execute_query(query, (alias_name,))
        return result[0][0] if result else None

    def add_game_alias(self, standard_name: str, alias_name: str):
        query = """
        INSERT INTO main.game_aliases (alias_name, standard_name)
        VALUES (%s, %s)
        ON CONFLICT (alias_name) DO UPDATE SET standard_name = EXCLUDED.standard_name
        """
        self.execute_query(query, (alias_name, standard_name), fetch=False)

    # ============================================================================
    # Bot presence settings
    # ============================================================================

    def get_bot_settings(self) -> Optional[dict]:
        query = "SELECT activity_type, activity_text, status FROM main.bot_settings WHERE id = 1"
        return _to_dict(('activity_type', 'activity_text', 'status'), self.execute_query(query))

    def set_bot_settings(self, activity_type: Optional[str], activity_text: Optional[str], status: Optional[str]):
        query = """
        INSERT INTO main.bot_settings (id, activity_type, activity_text, status, updated_at)
        VALUES (1, %s, %s, %s, CURRENT_TIMESTAMP)
        ON CONFLICT (id) DO UPDATE SET
            activity_type = EXCLUDED.activity_type,
            activity_text = EXCLUDED.activity_text,
            status = EXCLUDED.status,
            updated_at = CURRENT_TIMESTAMP
        """
        self.execute_query(query, (activity_type, activity_text, status), fetch=False)

    # ============================================================================
    # Swear words
    # ============================================================================

    def get_swear_words(self) -> set[str]:
        result = self.execute_query("SELECT word FROM main.swear_words")
        return {row[0] for row in result or []}

    def add_swear_word(self, word: str, added_by: Optional[int] = None) -> bool:
        """Insert a word. Returns False if it was already listed."""
        query = """
        INSERT INTO main.swear_words (word, added_by)
        VALUES (%s, %s)
        ON CONFLICT (word) DO NOTHING
        """
        return self.execute_query(query, (word, added_by), fetch=False) > 0

    def seed_swear_words(self, words: list[str]):
        """Bulk-insert the seed list, skipping words already present"""
        self.execute_many(
            "INSERT INTO main.swear_words (word) VALUES %s ON CONFLICT (word) DO NOTHING",
            [(word,) for word in words]
        )


# Global database instance
db = Database()
