# Change_Tracker.py
# Description: Pending-operation log for entities changed locally and not yet confirmed synced.
#
"""
Change_Tracker.py
-----------------

Every local write of an exercise template, plan or session leaves one row in the
`sync_queue` table, keyed by `"<entityType>:<entityId>"`. Repeated edits to the
same entity collapse into that one row (its `updated_at` is overwritten), so the
row count is the number of distinct entities waiting to be backed up.

The queue is only cleared after a confirmed push. `clear(pending)` removes just
the rows captured when the pushed snapshot was built and whose `updated_at` has
not moved since, so an edit made while a sync is in flight stays pending.
"""
# Imports
import logging
import sqlite3
from typing import TYPE_CHECKING, Dict, Literal, Mapping, Optional
#
# Third-Party Imports
#
# Local Imports
if TYPE_CHECKING:
    from lifti_sync.DB.Lifti_DB import LiftiDB
#
########################################################################################################################
#
# Functions:

logger = logging.getLogger(__name__)

SyncEntityType = Literal['exercise', 'plan', 'session']


def sync_queue_key(entity_type: SyncEntityType, entity_id: str) -> str:
    return f"{entity_type}:{entity_id}"


def track_sync_change(conn: sqlite3.Connection, entity_type: SyncEntityType, entity_id: str, updated_at: int):
    """Records a pending operation. Must run inside the transaction that wrote the entity."""
    conn.execute(
        """
        INSERT INTO sync_queue (id, entity_type, entity_id, updated_at) VALUES (?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET updated_at = excluded.updated_at
        """,
        (sync_queue_key(entity_type, entity_id), entity_type, entity_id, updated_at),
    )


def fetch_pending(conn: sqlite3.Connection) -> Dict[str, int]:
    """Reads the whole queue as `{key: updated_at}` on an open connection."""
    return {row[0]: row[1] for row in conn.execute("SELECT id, updated_at FROM sync_queue")}


class ChangeTracker:
    """Read/clear access to the pending-operation log of one LiftiDB."""

    def __init__(self, db: 'LiftiDB'):
        self.db = db

    def count(self) -> int:
        return self.db.execute_query("SELECT COUNT(*) FROM sync_queue").fetchone()[0]

    def list_pending(self) -> Dict[str, int]:
        return fetch_pending(self.db.get_connection())

    def clear(self, pending: Optional[Mapping[str, int]] = None) -> int:
        """
        Removes pending operations. Returns the number of rows removed.

        Args:
            pending: If given, only these keys are removed, and only when their
                     stored `updated_at` still equals the captured value.
        """
        with self.db.transaction():
            if pending is None:
                removed = self.db.execute_query("DELETE FROM sync_queue").rowcount
            else:
                removed = 0
                for key, updated_at in pending.items():
                    removed += self.db.execute_query(
                        "DELETE FROM sync_queue WHERE id = ? AND updated_at = ?", (key, updated_at)
                    ).rowcount
        logger.info(f"Cleared {removed} pending sync operations.")
        return removed

#
# End of Change_Tracker.py
########################################################################################################################
