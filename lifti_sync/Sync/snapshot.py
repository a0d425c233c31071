# lifti_sync/Sync/snapshot.py
# Description: Builds a BackupSnapshot from the local store and writes one back.
#
# Imports
from typing import Dict, Mapping, Optional, Tuple
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from lifti_sync.DB.Change_Tracker import fetch_pending
from lifti_sync.DB.Lifti_DB import LiftiDB
from lifti_sync.Sync.schemas import SNAPSHOT_SCHEMA_VERSION, BackupSnapshot
#
########################################################################################################################
#
# Functions:

def build_snapshot_with_pending(db: LiftiDB) -> Tuple[BackupSnapshot, Dict[str, int]]:
    """
    Reads all three collections and the pending-operation log in one transaction.

    The returned pending mapping is exactly what the snapshot covers, which is
    what may be cleared once that snapshot has been pushed.
    """
    with db.transaction() as conn:
        snapshot = BackupSnapshot(
            schema_version=SNAPSHOT_SCHEMA_VERSION,
            exported_at=db.clock(),
            exercises=db.list_exercises(),
            plans=db.list_plans(),
            sessions=db.list_sessions(),
        )
        pending = fetch_pending(conn)
    logger.debug(f"Built local snapshot: {len(snapshot.exercises)} exercises, {len(snapshot.plans)} plans, "
                 f"{len(snapshot.sessions)} sessions, {len(pending)} pending ops.")
    return snapshot, pending


def build_snapshot(db: LiftiDB) -> BackupSnapshot:
    snapshot, _ = build_snapshot_with_pending(db)
    return snapshot


def write_snapshot(db: LiftiDB, snapshot: BackupSnapshot, captured_pending: Optional[Mapping[str, int]] = None) -> int:
    """
    Upserts every entity of the snapshot into the local store in one transaction.

    Local entities absent from the snapshot are kept. No pending operations are
    recorded since this is not a user edit. With `captured_pending`, entities
    edited locally after that capture keep their local row. Returns how many
    entities were skipped that way.
    """
    skipped = db.replace_rows(snapshot.exercises, snapshot.plans, snapshot.sessions, captured_pending)
    logger.debug(f"Wrote snapshot exported at {snapshot.exported_at} to local store.")
    return skipped

#
# End of lifti_sync/Sync/snapshot.py
########################################################################################################################
