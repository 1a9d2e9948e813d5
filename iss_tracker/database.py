"""
Database operations for ISS Trail Tracker.
Handles SQLite initialization and the bounded position history.
"""

import os
import sqlite3
from typing import List, Optional

from iss_tracker.config import CONFIG
from iss_tracker.trail import Position
from iss_tracker.utils import log


class Database:
    """Handles all database operations."""

    def __init__(
        self, db_name: Optional[str] = None, max_positions: Optional[int] = None
    ):
        self.db_name = db_name or CONFIG.db_name
        self._max_positions = max_positions

    @property
    def max_positions(self) -> int:
        """Number of newest positions kept."""
        if self._max_positions is not None:
            return self._max_positions
        return CONFIG.max_positions

    def init_db(self):
        """Initialize database schema with optimizations."""
        db_dir = os.path.dirname(self.db_name)
        if db_dir:
            os.makedirs(db_dir, exist_ok=True)

        conn = sqlite3.connect(self.db_name)
        try:
            c = conn.cursor()

            # Enable optimizations
            c.execute("PRAGMA journal_mode = WAL")
            c.execute("PRAGMA synchronous = NORMAL")

            c.execute(
                """CREATE TABLE IF NOT EXISTS positions
                         (id INTEGER PRIMARY KEY AUTOINCREMENT,
                          timestamp INTEGER,
                          datetime TEXT,
                          latitude REAL,
                          longitude REAL)"""
            )

            conn.commit()
        finally:
            conn.close()
        log("DB", "Database initialized")

    def add_position(self, position: Position) -> Optional[int]:
        """
        Store a position and trim the history to ``max_positions`` rows.

        Args:
            position: Position to append

        Returns:
            Row ID of the stored position, or None if the write failed
        """
        try:
            conn = sqlite3.connect(self.db_name)
        except sqlite3.Error as e:
            log("DB", f"Position write failed: {e}")
            return None

        try:
            c = conn.cursor()
            c.execute("BEGIN TRANSACTION")
            insert_sql = (
                "INSERT INTO positions "
                "(timestamp, datetime, latitude, longitude) "
                "VALUES (?, ?, ?, ?)"
            )
            c.execute(
                insert_sql,
                (
                    position.timestamp,
                    position.datetime,
                    position.latitude,
                    position.longitude,
                ),
            )
            row_id = c.lastrowid

            # Keep only the newest rows
            trim_sql = (
                "DELETE FROM positions WHERE id NOT IN "
                "(SELECT id FROM positions ORDER BY id DESC LIMIT ?)"
            )
            c.execute(trim_sql, (self.max_positions,))

            conn.commit()
            return row_id

        except sqlite3.Error as e:
            log("DB", f"Position write failed: {e}")
            conn.rollback()
            return None
        finally:
            conn.close()

    def get_positions(self) -> List[Position]:
        """
        Get the stored position history.

        Returns:
            List of positions, oldest first
        """
        conn = sqlite3.connect(self.db_name)
        conn.row_factory = sqlite3.Row
        c = conn.cursor()
        c.execute(
            "SELECT timestamp, datetime, latitude, longitude "
            "FROM positions ORDER BY id ASC"
        )
        rows = c.fetchall()
        conn.close()

        return [self._row_to_position(r) for r in rows]

    def get_latest(self) -> Optional[Position]:
        """Get the newest stored position."""
        conn = sqlite3.connect(self.db_name)
        conn.row_factory = sqlite3.Row
        c = conn.cursor()
        c.execute(
            "SELECT timestamp, datetime, latitude, longitude "
            "FROM positions ORDER BY id DESC LIMIT 1"
        )
        row = c.fetchone()
        conn.close()
        return self._row_to_position(row) if row else None

    def count(self) -> int:
        """Get number of stored positions."""
        conn = sqlite3.connect(self.db_name)
        c = conn.cursor()
        c.execute("SELECT COUNT(*) FROM positions")
        (total,) = c.fetchone()
        conn.close()
        return total

    @staticmethod
    def _row_to_position(row) -> Position:
        return Position(
            latitude=row["latitude"],
            longitude=row["longitude"],
            datetime=row["datetime"],
            timestamp=row["timestamp"],
        )


# Global database instance
db = Database()
