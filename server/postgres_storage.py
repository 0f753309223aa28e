"""PostgreSQL storage implementation."""

import json
import logging
import os
import psycopg2
from psycopg2.extras import RealDictCursor

from core.config import SUBMISSION_HISTORY_SIZE
from core.interfaces import Storage

logger = logging.getLogger(__name__)


class PostgresStorage(Storage):
    """PostgreSQL-based storage implementation.

    Records are kept as JSONB documents next to the columns used for lookups.
    """

    def __init__(self, config_file: str = None, db_url: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/vocabin/config.json')
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/vocabin'
        )
        self._conn = None
        self._initialized = False

    @property
    def conn(self):
        """Lazy connection initialization."""
        if self._conn is None or self._conn.closed:
            self._conn = psycopg2.connect(self.db_url)
            if not self._initialized:
                self._init_db()
                self._initialized = True
        return self._conn

    def _init_db(self):
        """Create tables if they don't exist."""
        with self._conn.cursor() as cur:
            cur.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    user_id VARCHAR(255) PRIMARY KEY,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS user_dictionaries (
                    user_id VARCHAR(255) NOT NULL,
                    dictionary_id VARCHAR(255) NOT NULL,
                    data JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, dictionary_id)
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS word_progress (
                    user_id VARCHAR(255) NOT NULL,
                    dictionary_id VARCHAR(255) NOT NULL,
                    word VARCHAR(255) NOT NULL,
                    data JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, dictionary_id, word)
                )
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS wrong_words (
                    id VARCHAR(64) PRIMARY KEY,
                    user_id VARCHAR(255) NOT NULL,
                    dictionary_id VARCHAR(255) NOT NULL,
                    word VARCHAR(255) NOT NULL,
                    is_resolved BOOLEAN NOT NULL DEFAULT FALSE,
                    data JSONB NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    UNIQUE (user_id, dictionary_id, word)
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_wrong_words_user ON wrong_words(user_id, is_resolved)
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS submissions (
                    user_id VARCHAR(255) NOT NULL,
                    submission_id VARCHAR(255) NOT NULL,
                    result JSONB NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (user_id, submission_id)
                )
            """)
            # Events log table
            cur.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    id SERIAL PRIMARY KEY,
                    timestamp TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    event VARCHAR(50) NOT NULL,
                    user_id VARCHAR(255) NOT NULL,
                    dictionary_id VARCHAR(255),
                    data JSONB
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_user_id ON events(user_id)
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_event ON events(event)
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_timestamp ON events(timestamp)
            """)
        self._conn.commit()

    def close(self):
        """Close the database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()

    def load_config(self) -> dict:
        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                f"Config file not found at {self.config_file}\n"
                f'Please create it with: {{"gemini_api_key": "YOUR_API_KEY_HERE"}}'
            )
        with open(self.config_file, 'r') as f:
            return json.load(f)

    def _fetch_one(self, query: str, params: tuple, column: str = 'data') -> dict | None:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                row = cur.fetchone()
                return row[column] if row else None
        except psycopg2.Error as e:
            logger.error(f"Error loading record: {e}")
            self.conn.rollback()
            return None

    def _fetch_all(self, query: str, params: tuple) -> list[dict]:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(query, params)
                return [row['data'] for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error listing records: {e}")
            self.conn.rollback()
            return []

    def _write(self, query: str, params: tuple) -> int:
        try:
            with self.conn.cursor() as cur:
                cur.execute(query, params)
                affected = cur.rowcount
            self.conn.commit()
            return affected
        except psycopg2.Error as e:
            logger.error(f"Error writing record: {e}")
            self.conn.rollback()
            raise

    # Users

    def create_user(self, user_id: str) -> bool:
        return self._write(
            "INSERT INTO users (user_id) VALUES (%s) ON CONFLICT (user_id) DO NOTHING",
            (user_id,)
        ) > 0

    def user_exists(self, user_id: str) -> bool:
        """Check if a user exists."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT 1 FROM users WHERE user_id = %s", (user_id,))
                return cur.fetchone() is not None
        except psycopg2.Error as e:
            logger.error(f"Error checking user: {e}")
            self.conn.rollback()
            return False

    def list_users(self) -> list[str]:
        """List all existing user IDs."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("SELECT user_id FROM users ORDER BY user_id")
                return [row[0] for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error listing users: {e}")
            self.conn.rollback()
            return []

    def delete_user(self, user_id: str) -> bool:
        """Delete a user and all of their progress."""
        try:
            with self.conn.cursor() as cur:
                for table in ('user_dictionaries', 'word_progress', 'wrong_words', 'submissions'):
                    cur.execute(f"DELETE FROM {table} WHERE user_id = %s", (user_id,))
                cur.execute("DELETE FROM users WHERE user_id = %s", (user_id,))
                deleted = cur.rowcount > 0
            self.conn.commit()
            return deleted
        except psycopg2.Error as e:
            logger.error(f"Error deleting user: {e}")
            self.conn.rollback()
            raise

    # Dictionary progress

    def load_user_dictionary(self, user_id: str, dictionary_id: str) -> dict | None:
        return self._fetch_one(
            "SELECT data FROM user_dictionaries WHERE user_id = %s AND dictionary_id = %s",
            (user_id, dictionary_id)
        )

    def save_user_dictionary(self, data: dict) -> None:
        self._write("""
            INSERT INTO user_dictionaries (user_id, dictionary_id, data, updated_at)
            VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id, dictionary_id)
            DO UPDATE SET data = EXCLUDED.data, updated_at = CURRENT_TIMESTAMP
        """, (data['user_id'], data['dictionary_id'], json.dumps(data)))

    def list_user_dictionaries(self, user_id: str) -> list[dict]:
        return self._fetch_all(
            "SELECT data FROM user_dictionaries WHERE user_id = %s ORDER BY dictionary_id",
            (user_id,)
        )

    # Word progress

    def load_word_progress(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        return self._fetch_one(
            "SELECT data FROM word_progress WHERE user_id = %s AND dictionary_id = %s AND word = %s",
            (user_id, dictionary_id, word)
        )

    def save_word_progress(self, data: dict) -> None:
        self._write("""
            INSERT INTO word_progress (user_id, dictionary_id, word, data, updated_at)
            VALUES (%s, %s, %s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (user_id, dictionary_id, word)
            DO UPDATE SET data = EXCLUDED.data, updated_at = CURRENT_TIMESTAMP
        """, (data['user_id'], data['dictionary_id'], data['word'], json.dumps(data)))

    def list_word_progress(self, user_id: str, dictionary_id: str | None = None) -> list[dict]:
        if dictionary_id is not None:
            return self._fetch_all(
                "SELECT data FROM word_progress WHERE user_id = %s AND dictionary_id = %s",
                (user_id, dictionary_id)
            )
        return self._fetch_all("SELECT data FROM word_progress WHERE user_id = %s", (user_id,))

    # Wrong words

    def load_wrong_word(self, user_id: str, dictionary_id: str, word: str) -> dict | None:
        return self._fetch_one(
            "SELECT data FROM wrong_words WHERE user_id = %s AND dictionary_id = %s AND word = %s",
            (user_id, dictionary_id, word)
        )

    def load_wrong_word_by_id(self, user_id: str, wrong_word_id: str) -> dict | None:
        return self._fetch_one(
            "SELECT data FROM wrong_words WHERE user_id = %s AND id = %s",
            (user_id, wrong_word_id)
        )

    def save_wrong_word(self, data: dict) -> None:
        self._write("""
            INSERT INTO wrong_words (id, user_id, dictionary_id, word, is_resolved, data, updated_at)
            VALUES (%s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (id)
            DO UPDATE SET is_resolved = EXCLUDED.is_resolved, data = EXCLUDED.data,
                          updated_at = CURRENT_TIMESTAMP
        """, (data['id'], data['user_id'], data['dictionary_id'], data['word'],
              data['is_resolved'], json.dumps(data)))

    def delete_wrong_word(self, user_id: str, wrong_word_id: str) -> bool:
        return self._write(
            "DELETE FROM wrong_words WHERE user_id = %s AND id = %s",
            (user_id, wrong_word_id)
        ) > 0

    def list_wrong_words(self, user_id: str, dictionary_id: str | None = None,
                         include_resolved: bool = False) -> list[dict]:
        query = "SELECT data FROM wrong_words WHERE user_id = %s"
        params = [user_id]
        if dictionary_id is not None:
            query += " AND dictionary_id = %s"
            params.append(dictionary_id)
        if not include_resolved:
            query += " AND is_resolved = FALSE"
        return self._fetch_all(query, tuple(params))

    # Answer submissions

    def load_submission(self, user_id: str, submission_id: str) -> dict | None:
        return self._fetch_one(
            "SELECT result FROM submissions WHERE user_id = %s AND submission_id = %s",
            (user_id, submission_id),
            column='result'
        )

    def save_submission(self, user_id: str, submission_id: str, result: dict) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO submissions (user_id, submission_id, result)
                    VALUES (%s, %s, %s)
                    ON CONFLICT (user_id, submission_id) DO NOTHING
                """, (user_id, submission_id, json.dumps(result)))
                # Keep only the most recent submissions per user
                cur.execute("""
                    DELETE FROM submissions
                    WHERE user_id = %s AND submission_id NOT IN (
                        SELECT submission_id FROM submissions
                        WHERE user_id = %s
                        ORDER BY created_at DESC LIMIT %s
                    )
                """, (user_id, user_id, SUBMISSION_HISTORY_SIZE))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving submission: {e}")
            self.conn.rollback()
            raise

    # Event logging methods
    def log_event(self, event: str, user_id: str, dictionary_id: str = None, **data) -> None:
        """Log an event to the database."""
        try:
            with self.conn.cursor() as cur:
                cur.execute("""
                    INSERT INTO events (event, user_id, dictionary_id, data)
                    VALUES (%s, %s, %s, %s)
                """, (event, user_id, dictionary_id, json.dumps(data) if data else None))
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error logging event: {e}")
            self.conn.rollback()

    def get_user_events(self, user_id: str, event_type: str = None,
                        limit: int = 100) -> list[dict]:
        """Get recent events for a user."""
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                if event_type:
                    cur.execute("""
                        SELECT * FROM events
                        WHERE user_id = %s AND event = %s
                        ORDER BY timestamp DESC LIMIT %s
                    """, (user_id, event_type, limit))
                else:
                    cur.execute("""
                        SELECT * FROM events
                        WHERE user_id = %s
                        ORDER BY timestamp DESC LIMIT %s
                    """, (user_id, limit))
                return [dict(row) for row in cur.fetchall()]
        except psycopg2.Error as e:
            logger.error(f"Error getting user events: {e}")
            self.conn.rollback()
            return []
