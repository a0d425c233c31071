# lifti_sync/Sync/Sync_Orchestrator.py
# Description: Drives pull / merge / write / push cycles and exposes the observable sync state.
#
"""
Sync_Orchestrator.py
--------------------

State machine over `idle | syncing | out_of_sync | error`.

A sync run builds the local snapshot, pulls the remote one, merges (when the
remote has a snapshot), writes the result locally, pushes it, and only then
clears the pending operations captured with the local snapshot. Any failure
leaves the pending log untouched and the status becomes `out_of_sync` when
there is pending work, `error` otherwise. This class is the single place that
turns remote and store errors into a user-facing message.

Only one run is active at a time. A `sync_now()` issued while a run is in
flight waits for that run instead of starting another. The run itself is
shielded, so cancelling a caller never interrupts a half-finished sync.
"""
# Imports
import asyncio
import uuid
from typing import Callable, List, Optional
#
# Third-Party Imports
from loguru import logger
#
# Local Imports
from lifti_sync.Auth.auth_session import AuthSession
from lifti_sync.backup_api.client import GoogleDriveBackupClient
from lifti_sync.DB.Change_Tracker import ChangeTracker
from lifti_sync.DB.Lifti_DB import LiftiDB, LiftiDBError
from lifti_sync.Sync.schemas import SyncState, SyncStatus
from lifti_sync.Sync.snapshot import build_snapshot_with_pending, write_snapshot
#
########################################################################################################################
#
# Functions:

META_DEVICE_ID = 'deviceId'
META_ACCOUNT_ID = 'accountId'
META_LAST_REMOTE_REVISION = 'lastRemoteRevision'
META_LAST_SYNC_AT = 'lastSyncAt'

StateListener = Callable[[SyncState], None]


def resolve_sync_status(pending_ops: int) -> SyncStatus:
    return 'out_of_sync' if pending_ops > 0 else 'idle'


class SyncOrchestrator:
    def __init__(self, db: LiftiDB, backup_client: GoogleDriveBackupClient, auth: AuthSession,
                 clock: Optional[Callable[[], int]] = None):
        self.db = db
        self.backup_client = backup_client
        self.auth = auth
        self.change_tracker = ChangeTracker(db)
        self.clock = clock or db.clock
        self.state = SyncState()
        self._listeners: List[StateListener] = []
        self._inflight: Optional[asyncio.Task] = None

    # --- Observable state ---
    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Registers a listener called with every new state. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)
        return unsubscribe

    def _set_state(self, **changes):
        self.state = self.state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self.state)
            except Exception as e:
                logger.opt(exception=e).error(f"Sync state listener {listener!r} failed")

    @property
    def is_syncing(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    # --- UI-facing API ---
    async def initialize(self):
        count = self.change_tracker.count()
        last_sync_at = self.db.get_sync_meta(META_LAST_SYNC_AT)
        self._set_state(
            pending_ops=count,
            last_synced_at=int(last_sync_at) if last_sync_at else None,
            status=resolve_sync_status(count),
        )

    async def refresh_pending_ops(self):
        count = self.change_tracker.count()
        status = 'syncing' if self.state.status == 'syncing' else resolve_sync_status(count)
        self._set_state(pending_ops=count, status=status)

    async def sync_now(self):
        if self.is_syncing:
            logger.debug("Sync already in flight, joining it.")
            await asyncio.shield(self._inflight)
            return

        if not self.auth.is_authenticated:
            await self.refresh_pending_ops()
            return

        task = asyncio.ensure_future(self._run_sync(self.auth.access_token, self.auth.user_id))
        self._inflight = task
        task.add_done_callback(self._clear_inflight)
        await asyncio.shield(task)

    def _clear_inflight(self, task: asyncio.Task):
        if self._inflight is task:
            self._inflight = None

    async def _wait_for_inflight(self):
        if self.is_syncing:
            logger.debug("Waiting for the in-flight sync to finish.")
            await asyncio.shield(self._inflight)

    async def _run_sync(self, access_token: str, account_id: str):
        self._set_state(status='syncing', last_error=None)
        try:
            await self.backup_client.connect(access_token)

            local_snapshot, captured_pending = build_snapshot_with_pending(self.db)
            last_revision = self.db.get_sync_meta(META_LAST_REMOTE_REVISION)
            remote = await self.backup_client.pull_changes(last_revision)

            if remote.snapshot is not None:
                merged = self.backup_client.resolve_conflict(local_snapshot, remote.snapshot)
            else:
                merged = local_snapshot

            write_snapshot(self.db, merged, captured_pending)
            pushed = await self.backup_client.push_changes(merged, last_revision)

            now = self.clock()
            with self.db.transaction():
                self.change_tracker.clear(captured_pending)
                self._ensure_device_id()
                self.db.set_sync_meta(META_ACCOUNT_ID, account_id)
                self.db.set_sync_meta(META_LAST_SYNC_AT, str(now))
                self.db.set_sync_meta(META_LAST_REMOTE_REVISION, pushed.revision or remote.revision or str(now))

            count = self.change_tracker.count()
            self._set_state(status=resolve_sync_status(count), last_synced_at=now,
                            pending_ops=count, last_error=None)
            logger.info(f"Sync finished: {len(merged.plans)} plans, {len(merged.sessions)} sessions, "
                        f"{len(merged.exercises)} exercises; {count} ops still pending.")
        except Exception as e:
            try:
                count = self.change_tracker.count()
            except LiftiDBError:
                count = self.state.pending_ops
            logger.warning(f"Sync failed ({type(e).__name__}): {e}")
            self._set_state(
                status='out_of_sync' if count > 0 else 'error',
                pending_ops=count,
                last_error=str(e) or 'Sync failed.',
            )

    def _ensure_device_id(self) -> str:
        device_id = self.db.get_sync_meta(META_DEVICE_ID)
        if not device_id:
            device_id = str(uuid.uuid4())
            self.db.set_sync_meta(META_DEVICE_ID, device_id)
        return device_id

    async def disconnect_cloud(self):
        """Drops the backup credential and the account binding. Local data and pending ops stay."""
        await self._wait_for_inflight()
        await self.backup_client.disconnect()
        with self.db.transaction():
            self.db.remove_sync_meta(META_ACCOUNT_ID)
            self.db.remove_sync_meta(META_LAST_REMOTE_REVISION)
        count = self.change_tracker.count()
        self._set_state(status=resolve_sync_status(count), pending_ops=count, last_error=None)

    async def delete_cloud_backup(self):
        await self._wait_for_inflight()
        if self.auth.state.status != 'authenticated' or not self.auth.access_token:
            self._set_state(last_error='Connect backup before deleting cloud data.')
            return

        try:
            self.backup_client.set_access_token(self.auth.access_token)
            await self.backup_client.delete_remote_backup()
            self.db.remove_sync_meta(META_LAST_REMOTE_REVISION)
            self._set_state(last_error=None)
        except Exception as e:
            logger.warning(f"Deleting cloud backup failed: {e}")
            self._set_state(last_error=str(e) or 'Failed to delete cloud backup.')

    async def run_periodic(self, interval_seconds: float):
        """Syncs every `interval_seconds` until cancelled."""
        logger.info(f"Starting periodic sync every {interval_seconds}s.")
        while True:
            await self.refresh_pending_ops()
            await self.sync_now()
            await asyncio.sleep(interval_seconds)

#
# End of lifti_sync/Sync/Sync_Orchestrator.py
########################################################################################################################
