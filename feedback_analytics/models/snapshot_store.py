import json
import logging

from .database import get_db
from .response import classify_response
from .snapshot import FeedbackSnapshot

logger = logging.getLogger(__name__)

_COLUMNS = [
    'student_id', 'faculty_id', 'faculty_name', 'subject_id', 'subject_name',
    'subject_abbreviation', 'department_id', 'department_name',
    'department_abbreviation', 'division_id', 'division_name', 'batch',
    'academic_year_id', 'academic_year_string', 'semester_number',
    'question_category_name', 'question_batch', 'response_value', 'is_deleted',
]


def _to_row(snapshot):
    values = []
    for column in _COLUMNS:
        if column == 'response_value':
            values.append(json.dumps(snapshot.response.to_raw()))
        elif column == 'is_deleted':
            values.append(1 if snapshot.is_deleted else 0)
        else:
            values.append(getattr(snapshot, column))
    return tuple(values)


def _from_row(row):
    data = {column: row[column] for column in _COLUMNS}
    raw_response = data.pop('response_value')
    data['response'] = classify_response(json.loads(raw_response) if raw_response is not None else None)
    data['is_deleted'] = bool(data['is_deleted'])
    return FeedbackSnapshot(id=row['id'], **data)


class SnapshotStore:
    @staticmethod
    def add(snapshot):
        """Add a single snapshot; returns its row id."""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute(f'''
                INSERT INTO feedback_snapshots ({', '.join(_COLUMNS)})
                VALUES ({', '.join(['?'] * len(_COLUMNS))})
            ''', _to_row(snapshot))
            return cursor.lastrowid

    @staticmethod
    def bulk_add(snapshots):
        """Add multiple snapshots at once.
        Returns: number of rows added
        """
        rows = [_to_row(snapshot) for snapshot in snapshots]
        if not rows:
            return 0

        with get_db() as conn:
            cursor = conn.cursor()
            cursor.executemany(f'''
                INSERT INTO feedback_snapshots ({', '.join(_COLUMNS)})
                VALUES ({', '.join(['?'] * len(_COLUMNS))})
            ''', rows)

        logger.info(f"Stored {len(rows)} feedback snapshots")
        return len(rows)

    @staticmethod
    def get_all(include_deleted=False):
        """Get every stored snapshot, oldest first."""
        with get_db() as conn:
            cursor = conn.cursor()
            if include_deleted:
                cursor.execute('SELECT * FROM feedback_snapshots ORDER BY id')
            else:
                cursor.execute('''
                    SELECT * FROM feedback_snapshots
                    WHERE is_deleted = 0
                    ORDER BY id
                ''')
            return [_from_row(row) for row in cursor.fetchall()]

    @staticmethod
    def soft_delete(snapshot_id):
        """Flag a snapshot as deleted; returns False when it does not exist."""
        with get_db() as conn:
            cursor = conn.cursor()
            cursor.execute('''
                UPDATE feedback_snapshots SET is_deleted = 1
                WHERE id = ?
            ''', (snapshot_id,))
            return cursor.rowcount > 0

    @staticmethod
    def count(include_deleted=False):
        """Get total number of stored snapshots."""
        with get_db() as conn:
            cursor = conn.cursor()
            if include_deleted:
                cursor.execute('SELECT COUNT(*) FROM feedback_snapshots')
            else:
                cursor.execute('SELECT COUNT(*) FROM feedback_snapshots WHERE is_deleted = 0')
            return cursor.fetchone()[0]
