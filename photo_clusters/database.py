import json
import sqlite3
from typing import Any, Dict, Optional

from photo_clusters.error_handling import CacheError

DATABASE_PATH = "photo_clusters.db"

class CacheStore:
    """Key-value store of JSON values in a single SQLite table."""

    def __init__(self, db_path: str = DATABASE_PATH):
        self.db_path = db_path
        self.init_db()

    def get_connection(self):
        return sqlite3.connect(self.db_path)

    def init_db(self):
        """Initialize the cache table"""
        try:
            with self.get_connection() as conn:
                conn.execute('''
                    CREATE TABLE IF NOT EXISTS cache (
                        key TEXT PRIMARY KEY,
                        value TEXT NOT NULL
                    )
                ''')
                conn.commit()
        except sqlite3.Error as e:
            raise CacheError(f"Could not open cache at {self.db_path}: {e}") from e

    def load(self, key: str) -> Optional[Any]:
        try:
            with self.get_connection() as conn:
                row = conn.execute('SELECT value FROM cache WHERE key = ?', (key,)).fetchone()
        except sqlite3.Error as e:
            raise CacheError(f"Could not read '{key}': {e}") from e
        if row is None:
            return None
        return json.loads(row[0])

    def save(self, key: str, value: Any):
        self.save_many({key: value})

    def save_many(self, values: Dict[str, Any]):
        """Write several keys in one transaction."""
        rows = [(key, json.dumps(value)) for key, value in values.items()]
        try:
            with self.get_connection() as conn:
                conn.executemany('INSERT OR REPLACE INTO cache (key, value) VALUES (?, ?)', rows)
                conn.commit()
        except sqlite3.Error as e:
            raise CacheError(f"Could not write {', '.join(values)}: {e}") from e

    def keys(self):
        try:
            with self.get_connection() as conn:
                return [row[0] for row in conn.execute('SELECT key FROM cache ORDER BY key')]
        except sqlite3.Error as e:
            raise CacheError(f"Could not list keys: {e}") from e

class MemoryStore:
    """In-process store with the same interface as CacheStore."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        return None if raw is None else json.loads(raw)

    def save(self, key: str, value: Any):
        self.save_many({key: value})

    def save_many(self, values: Dict[str, Any]):
        # Serialize like CacheStore so callers get copies, not shared objects
        self._data.update({key: json.dumps(value) for key, value in values.items()})

    def keys(self):
        return sorted(self._data)
