import sqlite3
import os
from contextlib import contextmanager
import logging

import config

logger = logging.getLogger(__name__)


def get_db_path():
    """Get the database path and ensure the directory exists."""
    db_path = config.DATABASE_PATH
    db_dir = os.path.dirname(db_path)
    if db_dir and not os.path.exists(db_dir):
        os.makedirs(db_dir)
    return db_path


@contextmanager
def get_db():
    """Context manager for database connections."""
    conn = None
    try:
        conn = sqlite3.connect(get_db_path())
        conn.row_factory = sqlite3.Row
        yield conn
        conn.commit()
    except Exception as e:
        if conn:
            conn.rollback()
        logger.error(f"Database error: {e}")
        raise
    finally:
        if conn:
            conn.close()


def init_db():
    """Initialize the database with the snapshot table."""
    with get_db() as conn:
        cursor = conn.cursor()

        # One row per student response, denormalized with every grouping dimension
        cursor.execute('''
            CREATE TABLE IF NOT EXISTS feedback_snapshots (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                student_id TEXT,
                faculty_id TEXT NOT NULL,
                faculty_name TEXT NOT NULL,
                subject_id TEXT NOT NULL,
                subject_name TEXT NOT NULL,
                subject_abbreviation TEXT,
                department_id TEXT NOT NULL,
                department_name TEXT NOT NULL,
                department_abbreviation TEXT,
                division_id TEXT NOT NULL,
                division_name TEXT NOT NULL,
                batch TEXT,
                academic_year_id TEXT NOT NULL,
                academic_year_string TEXT NOT NULL,
                semester_number INTEGER NOT NULL,
                question_category_name TEXT,
                question_batch TEXT,
                response_value TEXT,
                is_deleted INTEGER NOT NULL DEFAULT 0,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_snapshots_year_dept
            ON feedback_snapshots(academic_year_id, department_id)
        ''')

        cursor.execute('''
            CREATE INDEX IF NOT EXISTS idx_snapshots_subject
            ON feedback_snapshots(subject_id)
        ''')

        conn.commit()
        logger.info("Database initialized successfully")

