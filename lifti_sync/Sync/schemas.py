# lifti_sync/Sync/schemas.py
# Description: Data types exchanged between the store, the backup client and the sync orchestrator.
#
# Imports
from typing import List, Literal, Optional
#
# Third-Party Imports
from pydantic import BaseModel, Field
#
# Local Imports
from lifti_sync.Domain.domain_types import ExerciseTemplate, LiftiModel, Plan, WorkoutSession
#
########################################################################################################################
#
# Functions:

SNAPSHOT_SCHEMA_VERSION = 1

SyncStatus = Literal['idle', 'syncing', 'error', 'out_of_sync']


class BackupSnapshot(LiftiModel):
    """Full-state export of all three collections. Treated as immutable once built."""
    schema_version: Literal[1] = SNAPSHOT_SCHEMA_VERSION
    exported_at: int
    exercises: List[ExerciseTemplate] = Field(default_factory=list)
    plans: List[Plan] = Field(default_factory=list)
    sessions: List[WorkoutSession] = Field(default_factory=list)


class PullResult(BaseModel):
    snapshot: Optional[BackupSnapshot] = None
    revision: Optional[str] = None # Opaque; never parsed or compared


class PushResult(BaseModel):
    revision: Optional[str] = None


class SyncState(BaseModel):
    """What the UI observes about sync."""
    status: SyncStatus = 'idle'
    pending_ops: int = 0
    last_synced_at: Optional[int] = None
    last_error: Optional[str] = None

#
# End of lifti_sync/Sync/schemas.py
########################################################################################################################
