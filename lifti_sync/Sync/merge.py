# lifti_sync/Sync/merge.py
# Description: Conflict resolution between a local and a remote BackupSnapshot.
#
"""
Merge rules, per collection:

- Plans and sessions: union by id. When both sides hold an id the one with the
  greater `updatedAt` wins (missing counts as 0); a tie keeps the local copy.
- Exercise templates: union by id, the local copy always wins.

Output order is remote order followed by local-only ids in local order. Inputs
are never modified. The result is a new snapshot stamped with `clock()`.
"""
# Imports
from typing import Callable, Dict, List, Optional, TypeVar
#
# Third-Party Imports
#
# Local Imports
from lifti_sync.DB.Lifti_DB import now_ms
from lifti_sync.Domain.domain_types import ExerciseTemplate, Plan, WorkoutSession
from lifti_sync.Sync.schemas import SNAPSHOT_SCHEMA_VERSION, BackupSnapshot
#
########################################################################################################################
#
# Functions:

T = TypeVar('T', Plan, WorkoutSession)


def _stamp(item) -> int:
    return item.updated_at or 0


def merge_by_updated_at(local_items: List[T], remote_items: List[T]) -> List[T]:
    merged: Dict[str, T] = {item.id: item for item in remote_items}
    for local in local_items:
        remote = merged.get(local.id)
        if remote is None or _stamp(local) >= _stamp(remote):
            merged[local.id] = local
    return list(merged.values())


def merge_local_priority(local_items: List[ExerciseTemplate],
                         remote_items: List[ExerciseTemplate]) -> List[ExerciseTemplate]:
    merged: Dict[str, ExerciseTemplate] = {item.id: item for item in remote_items}
    for local in local_items:
        merged[local.id] = local
    return list(merged.values())


def resolve_conflict(local: BackupSnapshot, remote: BackupSnapshot,
                     clock: Optional[Callable[[], int]] = None) -> BackupSnapshot:
    """Merges two snapshots into a new one. Pure apart from reading the clock."""
    return BackupSnapshot(
        schema_version=SNAPSHOT_SCHEMA_VERSION,
        exported_at=(clock or now_ms)(),
        exercises=merge_local_priority(local.exercises, remote.exercises),
        plans=merge_by_updated_at(local.plans, remote.plans),
        sessions=merge_by_updated_at(local.sessions, remote.sessions),
    )

#
# End of lifti_sync/Sync/merge.py
########################################################################################################################
