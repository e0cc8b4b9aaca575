# db_utils.py
import json
import logging
import os
import sqlite3
from contextlib import contextmanager

logger = logging.getLogger(__name__)

# Use relative path for deployment
DB_NAME = os.environ.get('FOCUSPART_DB', 'focus_part.db')


def get_db_connection():
    """Open a new connection to the records database.

    Raises ConnectionError when the database file cannot be opened.
    """
    try:
        conn = sqlite3.connect(DB_NAME, check_same_thread=False)
    except sqlite3.Error as e:
        logger.error("Failed to connect to the database %s: %s", DB_NAME, e)
        raise ConnectionError(f"Database connection not available: {e}") from e
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def get_db_connection_ctx():
    """Context manager for database connections"""
    conn = get_db_connection()
    try:
        yield conn
    finally:
        conn.close()


def create_tables():
    """Create database tables if they don't exist"""
    try:
        with get_db_connection_ctx() as conn:
            conn.execute('''
                CREATE TABLE IF NOT EXISTS records (
                    id TEXT PRIMARY KEY DEFAULT (lower(hex(randomblob(16)))),
                    vin_number TEXT UNIQUE NOT NULL,
                    license_plate TEXT,
                    client_name TEXT NOT NULL,
                    notes TEXT,
                    parts_bought TEXT NOT NULL DEFAULT '[]',
                    part_serial_numbers TEXT NOT NULL DEFAULT '[]',
                    part_prices TEXT NOT NULL DEFAULT '[]',
                    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
                    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
                )
            ''')
            conn.execute("CREATE INDEX IF NOT EXISTS idx_records_license_plate ON records(license_plate)")
            conn.commit()
    except sqlite3.Error as e:
        logger.error("Error creating tables: %s", e)
        raise


def migrate_schema():
    """Bring records tables created by older releases up to date.

    Older tables lack the plate, notes and price columns. Existing rows get
    one null price per stored part so the three part lists stay aligned.
    """
    try:
        with get_db_connection_ctx() as conn:
            columns = [col[1] for col in conn.execute("PRAGMA table_info(records)").fetchall()]

            if 'license_plate' not in columns:
                conn.execute("ALTER TABLE records ADD COLUMN license_plate TEXT")
            if 'notes' not in columns:
                conn.execute("ALTER TABLE records ADD COLUMN notes TEXT")
            if 'updated_at' not in columns:
                conn.execute("ALTER TABLE records ADD COLUMN updated_at TEXT")
            if 'part_prices' not in columns:
                conn.execute("ALTER TABLE records ADD COLUMN part_prices TEXT")
                rows = conn.execute("SELECT id, parts_bought FROM records").fetchall()
                for row in rows:
                    try:
                        count = len(json.loads(row['parts_bought'] or '[]'))
                    except ValueError:
                        count = 0
                    conn.execute(
                        "UPDATE records SET part_prices = ? WHERE id = ?",
                        (json.dumps([None] * count), row['id']),
                    )
                logger.info("Backfilled part_prices for %d records", len(rows))

            conn.commit()
    except sqlite3.Error as e:
        logger.error("Migration error: %s", e)
        raise


