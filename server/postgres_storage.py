"""PostgreSQL storage implementation."""

import json
import logging
import os
import psycopg2
from psycopg2.extras import RealDictCursor

from core.config import INITIAL_LEVEL
from core.errors import PersistenceError, ProfileLoadError
from core.interfaces import ProfileStore
from core.models import ProfileData, SessionLogEntry, WordRecord

logger = logging.getLogger(__name__)


class PostgresStorage(ProfileStore):
    """PostgreSQL-based storage implementation."""

    def __init__(self, config_file: str = None, db_url: str = None):
        self.config_file = config_file or os.path.expanduser('~/.config/wordbank/config.json')
        self.db_url = db_url or os.environ.get(
            'DATABASE_URL',
            'postgresql://localhost:5432/wordbank'
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
            # Word records keyed by word id; cleared words keep their row
            cur.execute("""
                CREATE TABLE IF NOT EXISTS word_records (
                    profile_id VARCHAR(255) NOT NULL,
                    language VARCHAR(64) NOT NULL,
                    word_id VARCHAR(255) NOT NULL,
                    record JSONB NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (profile_id, language, word_id)
                )
            """)
            # Append-only session log
            cur.execute("""
                CREATE TABLE IF NOT EXISTS session_logs (
                    id SERIAL PRIMARY KEY,
                    profile_id VARCHAR(255) NOT NULL,
                    language VARCHAR(64) NOT NULL,
                    timestamp BIGINT NOT NULL,
                    entry JSONB NOT NULL
                )
            """)
            cur.execute("""
                CREATE INDEX IF NOT EXISTS idx_session_logs_profile
                ON session_logs(profile_id, language, timestamp)
            """)
            cur.execute("""
                CREATE TABLE IF NOT EXISTS profile_levels (
                    profile_id VARCHAR(255) NOT NULL,
                    language VARCHAR(64) NOT NULL,
                    level VARCHAR(8) NOT NULL,
                    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                    PRIMARY KEY (profile_id, language)
                )
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

    def read_all(self, profile_id: str, language: str) -> ProfileData:
        try:
            with self.conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute("""
                    SELECT record FROM word_records
                    WHERE profile_id = %s AND language = %s
                    ORDER BY created_at, word_id
                """, (profile_id, language))
                records = [WordRecord.from_dict(row['record']) for row in cur.fetchall()]
                cur.execute("""
                    SELECT entry FROM session_logs
                    WHERE profile_id = %s AND language = %s
                    ORDER BY timestamp ASC, id ASC
                """, (profile_id, language))
                logs = [SessionLogEntry.from_dict(row['entry']) for row in cur.fetchall()]
                cur.execute(
                    "SELECT level FROM profile_levels WHERE profile_id = %s AND language = %s",
                    (profile_id, language)
                )
                row = cur.fetchone()
                level = row['level'] if row else INITIAL_LEVEL
            return ProfileData(records, logs, level)
        except psycopg2.Error as e:
            logger.error(f"Error loading state for {profile_id}/{language}: {e}")
            self._rollback()
            raise ProfileLoadError(str(e)) from e
        except (KeyError, ValueError, TypeError) as e:
            logger.error(f"Malformed state for {profile_id}/{language}: {e!r}")
            self._rollback()
            raise ProfileLoadError(str(e)) from e

    def upsert_record(self, profile_id: str, language: str, record: WordRecord) -> None:
        self._write("""
            INSERT INTO word_records (profile_id, language, word_id, record, updated_at)
            VALUES (%s, %s, %s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (profile_id, language, word_id)
            DO UPDATE SET record = EXCLUDED.record, updated_at = CURRENT_TIMESTAMP
        """, (profile_id, language, record.id, json.dumps(record.to_dict())))

    def append_log(self, profile_id: str, language: str, entry: SessionLogEntry) -> None:
        self._write("""
            INSERT INTO session_logs (profile_id, language, timestamp, entry)
            VALUES (%s, %s, %s, %s)
        """, (profile_id, language, entry.timestamp, json.dumps(entry.to_dict())))

    def set_level(self, profile_id: str, language: str, level: str) -> None:
        self._write("""
            INSERT INTO profile_levels (profile_id, language, level, updated_at)
            VALUES (%s, %s, %s, CURRENT_TIMESTAMP)
            ON CONFLICT (profile_id, language)
            DO UPDATE SET level = EXCLUDED.level, updated_at = CURRENT_TIMESTAMP
        """, (profile_id, language, level))

    def _write(self, sql: str, params: tuple) -> None:
        try:
            with self.conn.cursor() as cur:
                cur.execute(sql, params)
            self.conn.commit()
        except psycopg2.Error as e:
            logger.error(f"Error saving state: {e}")
            self._rollback()
            raise PersistenceError(str(e)) from e

    def _rollback(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.rollback()
