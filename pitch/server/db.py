"""Room persistence: a key-value store with expiry."""
import json
import logging
import threading
import time
from contextlib import contextmanager
from typing import Callable, Optional

import psycopg2
from psycopg2.extras import RealDictCursor, Json

import config
from config import DATABASE_CONFIG

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store cannot be reached or fails."""
    pass


class RoomStore:
    """get/set/delete by key, values are JSON-compatible dicts."""

    def get(self, key: str) -> Optional[dict]:
        raise NotImplementedError

    def set(self, key: str, room: dict, ttl_seconds: int):
        raise NotImplementedError

    def delete(self, key: str):
        raise NotImplementedError


class MemoryRoomStore(RoomStore):
    """In-process store. Values are kept as JSON text so callers never share objects."""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self._rooms = {}   # {key: (expires_at, json_text)}
        self._lock = threading.Lock()
        self._clock = clock or time.time

    def get(self, key):
        with self._lock:
            entry = self._rooms.get(key)
            if entry is None:
                return None
            expires_at, text = entry
            if expires_at <= self._clock():
                del self._rooms[key]
                return None
            return json.loads(text)

    def set(self, key, room, ttl_seconds):
        text = json.dumps(room)
        with self._lock:
            self._rooms[key] = (self._clock() + ttl_seconds, text)

    def delete(self, key):
        with self._lock:
            self._rooms.pop(key, None)


# Postgres

CREATE_ROOMS_TABLE = '''
    CREATE TABLE IF NOT EXISTS rooms (
        key TEXT PRIMARY KEY,
        state JSONB NOT NULL,
        expires_at TIMESTAMPTZ NOT NULL
    )
'''


@contextmanager
def get_db_connection():
    """Get a database connection context manager."""
    try:
        conn = psycopg2.connect(**DATABASE_CONFIG)
    except psycopg2.Error as e:
        raise StoreError(f"Database unavailable: {e}") from e
    try:
        yield conn
    finally:
        conn.close()


@contextmanager
def get_db_cursor(commit=False):
    """Get a database cursor context manager."""
    with get_db_connection() as conn:
        cursor = conn.cursor(cursor_factory=RealDictCursor)
        try:
            yield cursor
            if commit:
                conn.commit()
        except psycopg2.Error as e:
            conn.rollback()
            raise StoreError(str(e)) from e
        finally:
            cursor.close()


class PostgresRoomStore(RoomStore):
    """Rooms stored as JSONB rows with an expiry timestamp."""

    def get(self, key):
        with get_db_cursor() as cur:
            cur.execute(
                'SELECT state FROM rooms WHERE key = %s AND expires_at > now()',
                (key,)
            )
            row = cur.fetchone()
            return row['state'] if row else None

    def set(self, key, room, ttl_seconds):
        with get_db_cursor(commit=True) as cur:
            cur.execute('''
                INSERT INTO rooms (key, state, expires_at)
                VALUES (%s, %s, now() + make_interval(secs => %s))
                ON CONFLICT (key) DO UPDATE SET
                    state = EXCLUDED.state,
                    expires_at = EXCLUDED.expires_at
            ''', (key, Json(room), ttl_seconds))

    def delete(self, key):
        with get_db_cursor(commit=True) as cur:
            cur.execute('DELETE FROM rooms WHERE key = %s', (key,))


def create_rooms_table():
    """Create the rooms table if missing."""
    with get_db_cursor(commit=True) as cur:
        cur.execute(CREATE_ROOMS_TABLE)


def purge_expired_rooms() -> int:
    """Delete expired rooms and return how many were removed."""
    with get_db_cursor(commit=True) as cur:
        cur.execute('DELETE FROM rooms WHERE expires_at <= now()')
        return cur.rowcount


def create_store(kind: Optional[str] = None) -> RoomStore:
    """Build the store selected by ROOM_STORE."""
    kind = kind or config.ROOM_STORE
    if kind == 'postgres':
        logger.info("using postgres room store at %s", DATABASE_CONFIG['host'])
        return PostgresRoomStore()
    if kind == 'memory':
        return MemoryRoomStore()
    raise ValueError(f"Unknown room store: {kind}")
