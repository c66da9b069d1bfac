from .database import init_db, get_db, get_db_path
from .snapshot import FeedbackSnapshot, snapshots_from_records
from .snapshot_store import SnapshotStore

__all__ = ['init_db', 'get_db', 'get_db_path', 'FeedbackSnapshot', 'snapshots_from_records', 'SnapshotStore']
