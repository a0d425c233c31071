# Lifti_DB.py
# Description: DB Library for exercise templates, workout plans, workout sessions and sync bookkeeping.
#
"""
Lifti_DB.py
-----------

SQLite-based local store for the workout data that is backed up to the cloud.

This library provides:
- Schema management with versioning (`db_schema_version` table).
- Thread-safe database connections using `threading.local`.
- Full-object get/put/delete/list operations for the three synced collections:
  exercise templates, plans and workout sessions. Every entity is stored as its
  camelCase JSON document plus a few indexed columns.
- Automatic change tracking: every mutating call writes one row into the
  `sync_queue` table inside the same transaction (see `Change_Tracker.py`).
- A key/value `sync_meta` table for device id, account id, last revision and
  last sync time.
- A transaction context manager for safe and explicit transaction handling.
- Custom exceptions for database-specific errors, schema issues, input validation
  and integrity conflicts.

Deletions are hard deletes. They are recorded as pending operations but are not
carried to the remote backup, so a later pull can bring a deleted entity back.
"""
# Imports
import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Type, Union
#
# Third-Party Libraries
from pydantic import ValidationError
#
# Local Imports
from lifti_sync.DB.Change_Tracker import fetch_pending, sync_queue_key, track_sync_change
from lifti_sync.Domain.domain_types import ExerciseTemplate, LiftiModel, Plan, WorkoutSession
#
########################################################################################################################
#
# Functions:

logger = logging.getLogger(__name__)


# --- Custom Exceptions ---
class LiftiDBError(Exception):
    """Base exception for LiftiDB related errors."""
    pass


class SchemaError(LiftiDBError):
    """Exception for schema version mismatches or migration failures."""
    pass


class InputError(ValueError):
    """Custom exception for input validation errors."""
    pass


class ConflictError(LiftiDBError):
    """
    Indicates an integrity violation while writing a record.

    Attributes:
        entity (Optional[str]): The table involved in the conflict (e.g., "plans").
        entity_id (Any): The ID of the entity involved.
    """

    def __init__(self, message="Conflict detected.", entity: Optional[str] = None, entity_id: Any = None):
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id

    def __str__(self):
        base = super().__str__()
        details = []
        if self.entity:
            details.append(f"Entity: {self.entity}")
        if self.entity_id:
            details.append(f"ID: {self.entity_id}")
        return f"{base} ({', '.join(details)})" if details else base


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch."""
    return int(time.time() * 1000)


# --- Database Class ---
class LiftiDB:
    """
    Manages SQLite connections and operations for the Lifti workout database.

    Attributes:
        db_path (Path): The absolute path to the SQLite database file, or Path(":memory:").
        is_memory_db (bool): True if the database is in-memory.
        db_path_str (str): String representation of the database path for SQLite connection.
        clock (Callable[[], int]): Strictly increasing millisecond stamps for `updatedAt`.

    In-memory databases live on the connection, so each thread sees its own
    empty database. Callers are expected to use one instance from one thread
    (the asyncio event loop thread in the sync engine).
    """
    _CURRENT_SCHEMA_VERSION = 1
    _SCHEMA_NAME = "lifti_schema"

    _FULL_SCHEMA_SQL_V1 = """
/*───────────────────────────────────────────────────────────────
  Lifti Schema  –  Version 1
───────────────────────────────────────────────────────────────*/
CREATE TABLE IF NOT EXISTS db_schema_version(
  schema_name TEXT PRIMARY KEY NOT NULL,
  version     INTEGER NOT NULL
);
INSERT OR IGNORE INTO db_schema_version(schema_name,version)
VALUES('lifti_schema',0);

/*----------------------------------------------------------------
  1. Synced collections (full JSON document in `data`)
----------------------------------------------------------------*/
CREATE TABLE IF NOT EXISTS exercises(
  id         TEXT    PRIMARY KEY NOT NULL,
  name       TEXT    NOT NULL,
  mode       TEXT    NOT NULL,
  is_custom  BOOLEAN NOT NULL DEFAULT 0,
  updated_at INTEGER NOT NULL DEFAULT 0,
  data       TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_exercises_name ON exercises(name);
CREATE INDEX IF NOT EXISTS idx_exercises_mode ON exercises(mode);

CREATE TABLE IF NOT EXISTS plans(
  id         TEXT    PRIMARY KEY NOT NULL,
  updated_at INTEGER NOT NULL DEFAULT 0,
  data       TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_plans_updated_at ON plans(updated_at);

CREATE TABLE IF NOT EXISTS sessions(
  id         TEXT    PRIMARY KEY NOT NULL,
  plan_id    TEXT    NOT NULL,
  started_at INTEGER NOT NULL,
  updated_at INTEGER NOT NULL DEFAULT 0,
  data       TEXT    NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sessions_plan_id ON sessions(plan_id);
CREATE INDEX IF NOT EXISTS idx_sessions_started_at ON sessions(started_at);

/*----------------------------------------------------------------
  2. Sync bookkeeping
----------------------------------------------------------------*/
CREATE TABLE IF NOT EXISTS sync_meta(
  key   TEXT PRIMARY KEY NOT NULL,
  value TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS sync_queue(
  id          TEXT    PRIMARY KEY NOT NULL,
  entity_type TEXT    NOT NULL CHECK(entity_type IN ('exercise','plan','session')),
  entity_id   TEXT    NOT NULL,
  updated_at  INTEGER NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_sync_queue_entity ON sync_queue(entity_type, entity_id);

UPDATE db_schema_version
   SET version = 1
 WHERE schema_name = 'lifti_schema'
   AND version < 1;
"""

    def __init__(self, db_path: Union[str, Path], clock: Optional[Callable[[], int]] = None):
        """
        Initializes the LiftiDB instance and ensures the schema is at the current version.

        Args:
            db_path: Path to the SQLite database file or ":memory:".
            clock: Optional millisecond clock, defaults to wall-clock time.

        Raises:
            LiftiDBError: If the database directory cannot be created or initialization fails.
            SchemaError: If the on-disk schema is newer than this code supports.
        """
        if isinstance(db_path, Path):
            self.is_memory_db = False
            self.db_path = db_path.resolve()
        else:
            self.is_memory_db = (db_path == ':memory:')
            self.db_path = Path(db_path).resolve() if not self.is_memory_db else Path(":memory:")
        self.db_path_str = str(self.db_path) if not self.is_memory_db else ':memory:'
        self._clock_source = clock or now_ms
        self._last_stamp = 0

        if not self.is_memory_db:
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise LiftiDBError(f"Failed to create database directory {self.db_path.parent}: {e}")

        logger.info(f"Initializing LiftiDB for path: {self.db_path_str}")
        self._local = threading.local()
        try:
            self._initialize_schema()
            logger.debug(f"LiftiDB initialization completed successfully for {self.db_path_str}")
        except SchemaError:
            self.close_connection()
            raise
        except (LiftiDBError, sqlite3.Error) as e:
            logger.critical(f"FATAL: DB Initialization failed for {self.db_path_str}: {e}", exc_info=True)
            self.close_connection()
            raise LiftiDBError(f"Database initialization failed: {e}") from e

    def clock(self) -> int:
        """
        Returns the next `updatedAt` stamp.

        Stamps handed out by one instance are strictly increasing, even when the
        underlying clock returns the same millisecond twice or steps backwards.
        """
        stamp = max(int(self._clock_source()), self._last_stamp + 1)
        self._last_stamp = stamp
        return stamp

    # --- Connection Management ---
    def _get_thread_connection(self) -> sqlite3.Connection:
        """
        Retrieves or creates a thread-local SQLite connection.

        Enables WAL mode for file-based databases. If an existing connection is
        closed or unusable, it's reopened.

        Raises:
            LiftiDBError: If connecting to the database fails.
        """
        conn = getattr(self._local, 'conn', None)
        if conn:
            try:
                conn.execute("SELECT 1")
            except (sqlite3.ProgrammingError, sqlite3.OperationalError):
                logger.warning(
                    f"Thread-local connection for {self.db_path_str} was closed or became unusable. Reopening.")
                conn = None

        if not conn:
            try:
                conn = sqlite3.connect(
                    self.db_path_str,
                    check_same_thread=False,
                    timeout=15
                )
                conn.row_factory = sqlite3.Row
                if not self.is_memory_db:
                    conn.execute("PRAGMA journal_mode=WAL;")
                self._local.conn = conn
                logger.debug(f"Opened SQLite connection to {self.db_path_str} for thread {threading.get_ident()}")
            except sqlite3.Error as e:
                logger.error(f"Failed to connect to database {self.db_path_str}: {e}", exc_info=True)
                self._local.conn = None
                raise LiftiDBError(f"Failed to connect to database '{self.db_path_str}': {e}") from e
        return self._local.conn

    def get_connection(self) -> sqlite3.Connection:
        """Public method to get the current thread's database connection."""
        return self._get_thread_connection()

    def close_connection(self):
        """
        Closes the current thread's database connection.

        Rolls back an uncommitted transaction and checkpoints the WAL file
        (TRUNCATE) before closing file-based databases.
        """
        conn = getattr(self._local, 'conn', None)
        if conn is not None:
            try:
                if not self.is_memory_db:
                    if conn.in_transaction:
                        logger.warning(
                            f"Connection to {self.db_path_str} is in an uncommitted transaction during close. Rolling back.")
                        conn.rollback()
                    mode_row = conn.execute("PRAGMA journal_mode;").fetchone()
                    if mode_row and mode_row[0].lower() == 'wal':
                        conn.execute("PRAGMA wal_checkpoint(TRUNCATE);")
                conn.close()
                logger.debug(f"Closed connection for thread {threading.get_ident()} to {self.db_path_str}.")
            except sqlite3.Error as e:
                logger.warning(f"Error during SQLite connection close/checkpoint for {self.db_path_str}: {e}")
            finally:
                self._local.conn = None

    # --- Query Execution ---
    def execute_query(self, query: str, params: Optional[Union[tuple, Dict[str, Any]]] = None, *,
                      commit: bool = False) -> sqlite3.Cursor:
        """
        Executes a single SQL query.

        Args:
            query: The SQL query string.
            params: Optional parameters for the query (tuple or dict).
            commit: If True, and not within an explicit transaction, commits after execution.

        Raises:
            ConflictError: If an SQLite IntegrityError occurs.
            LiftiDBError: For other SQLite errors.
        """
        conn = self.get_connection()
        try:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug(f"Executing SQL: {query[:300]}... Params: {str(params)[:200]}...")
            cursor = conn.execute(query, params or ())
            if commit and conn.in_transaction and not getattr(self._local, 'tx_depth', 0):
                conn.commit()
            return cursor
        except sqlite3.IntegrityError as e:
            logger.warning(f"Integrity constraint violation: {query[:300]}... Error: {e}")
            raise ConflictError(f"Database constraint violation: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Query execution failed: {query[:300]}... Error: {e}", exc_info=True)
            raise LiftiDBError(f"Query execution failed: {e}") from e

    def execute_many(self, query: str, params_list: List[tuple], *, commit: bool = False) -> Optional[sqlite3.Cursor]:
        """Executes a parameterized SQL query once per parameter tuple. Returns None for an empty list."""
        if not params_list:
            logger.debug("execute_many called with empty params_list.")
            return None
        conn = self.get_connection()
        try:
            logger.debug(f"Executing Many: {query[:150]}... with {len(params_list)} sets.")
            cursor = conn.executemany(query, params_list)
            if commit and conn.in_transaction and not getattr(self._local, 'tx_depth', 0):
                conn.commit()
            return cursor
        except sqlite3.IntegrityError as e:
            logger.warning(f"Integrity constraint violation during batch: {query[:150]}... Error: {e}")
            raise ConflictError(f"Database constraint violation during batch: {e}") from e
        except sqlite3.Error as e:
            logger.error(f"Execute Many failed: {query[:150]}... Error: {e}", exc_info=True)
            raise LiftiDBError(f"Execute Many failed: {e}") from e

    # --- Transaction Context ---
    def transaction(self) -> 'TransactionContextManager':
        """
        Returns a context manager for database transactions.

        Usage:
            with db.transaction() as conn:
                conn.execute(...)

        The outermost block commits on success and rolls back on exception;
        nested blocks join the outer transaction.
        """
        return TransactionContextManager(self)

    # --- Schema Initialization ---
    def _get_db_version(self, conn: sqlite3.Connection) -> int:
        try:
            cursor = conn.execute("SELECT version FROM db_schema_version WHERE schema_name = ? LIMIT 1",
                                  (self._SCHEMA_NAME,))
            result = cursor.fetchone()
            return result['version'] if result else 0
        except sqlite3.Error as e:
            if "no such table" in str(e).lower() and "db_schema_version" in str(e).lower():
                return 0
            raise SchemaError(f"Could not determine schema version for '{self._SCHEMA_NAME}': {e}") from e

    def _apply_schema_v1(self, conn: sqlite3.Connection):
        logger.info(f"Applying schema Version {self._CURRENT_SCHEMA_VERSION} for '{self._SCHEMA_NAME}' to DB: {self.db_path_str}...")
        try:
            conn.executescript(self._FULL_SCHEMA_SQL_V1)
        except sqlite3.Error as e:
            logger.error(f"[{self._SCHEMA_NAME} V1] Schema application failed: {e}", exc_info=True)
            raise SchemaError(f"DB schema V1 setup failed for '{self._SCHEMA_NAME}': {e}") from e
        final_version = self._get_db_version(conn)
        if final_version != self._CURRENT_SCHEMA_VERSION:
            raise SchemaError(
                f"[{self._SCHEMA_NAME} V1] Schema version update check failed. Expected {self._CURRENT_SCHEMA_VERSION}, got: {final_version}")

    def _initialize_schema(self):
        """
        Creates the schema on a fresh database, or checks the version of an existing one.

        Raises:
            SchemaError: If the database is newer than this code, or an older
                         version has no migration path.
        """
        conn = self.get_connection()
        current_db_version = self._get_db_version(conn)
        target_version = self._CURRENT_SCHEMA_VERSION
        logger.info(
            f"Checking DB schema '{self._SCHEMA_NAME}'. Current version: {current_db_version}. Code supports: {target_version}")

        if current_db_version == target_version:
            logger.debug(f"Database schema '{self._SCHEMA_NAME}' is up to date (Version {target_version}).")
            return
        if current_db_version > target_version:
            raise SchemaError(
                f"Database schema '{self._SCHEMA_NAME}' version ({current_db_version}) is newer than supported by code ({target_version}). Aborting.")
        if current_db_version == 0:
            self._apply_schema_v1(conn)
            logger.info(f"Database schema '{self._SCHEMA_NAME}' initialized to version {target_version}.")
            return
        raise SchemaError(
            f"Migration path undefined for '{self._SCHEMA_NAME}' from version {current_db_version} to {target_version}.")

    # --- Internal Helpers ---
    @staticmethod
    def _require_id(entity_id: str, what: str):
        if not entity_id or not str(entity_id).strip():
            raise InputError(f"{what} ID cannot be empty.")

    @staticmethod
    def _load(model: Type[LiftiModel], row: Optional[sqlite3.Row]):
        if row is None:
            return None
        try:
            return model.model_validate(json.loads(row['data']))
        except (ValueError, ValidationError) as e:
            raise LiftiDBError(f"Stored {model.__name__} '{row['id']}' could not be decoded: {e}") from e

    def _stamp(self, entity, touch: bool):
        if touch:
            return entity.model_copy(update={'updated_at': self.clock()})
        return entity

    def _write_rows(self, conn: sqlite3.Connection, table: str, columns: List[str], params: Iterable[tuple]):
        placeholders = ", ".join("?" for _ in columns)
        updates = ", ".join(f"{col} = excluded.{col}" for col in columns if col != 'id')
        query = (f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
                 f"ON CONFLICT(id) DO UPDATE SET {updates}")
        conn.executemany(query, list(params))

    @staticmethod
    def _exercise_row(template: ExerciseTemplate) -> tuple:
        return (template.id, template.name, template.mode, int(template.is_custom),
                template.updated_at or 0, json.dumps(template.to_wire()))

    @staticmethod
    def _plan_row(plan: Plan) -> tuple:
        return plan.id, plan.updated_at, json.dumps(plan.to_wire())

    @staticmethod
    def _session_row(session: WorkoutSession) -> tuple:
        return (session.id, session.plan_id, session.started_at, session.updated_at,
                json.dumps(session.to_wire()))

    _EXERCISE_COLUMNS = ['id', 'name', 'mode', 'is_custom', 'updated_at', 'data']
    _PLAN_COLUMNS = ['id', 'updated_at', 'data']
    _SESSION_COLUMNS = ['id', 'plan_id', 'started_at', 'updated_at', 'data']

    def _put(self, table: str, columns: List[str], row: tuple, entity_type: str, entity_id: str, updated_at: int):
        try:
            with self.transaction() as conn:
                self._write_rows(conn, table, columns, [row])
                track_sync_change(conn, entity_type, entity_id, updated_at)
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"Could not write {entity_type}: {e}", entity=table, entity_id=entity_id) from e
        except sqlite3.Error as e:
            logger.error(f"Database error writing {entity_type} '{entity_id}': {e}", exc_info=True)
            raise LiftiDBError(f"Database error writing {entity_type} '{entity_id}': {e}") from e
        logger.debug(f"Stored {entity_type} '{entity_id}' (updatedAt={updated_at}).")

    def _delete(self, table: str, entity_type: str, entity_id: str) -> bool:
        self._require_id(entity_id, entity_type.capitalize())
        try:
            with self.transaction() as conn:
                cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (entity_id,))
                track_sync_change(conn, entity_type, entity_id, self.clock())
        except sqlite3.Error as e:
            logger.error(f"Database error deleting {entity_type} '{entity_id}': {e}", exc_info=True)
            raise LiftiDBError(f"Database error deleting {entity_type} '{entity_id}': {e}") from e
        existed = cursor.rowcount > 0
        logger.info(f"Deleted {entity_type} '{entity_id}' (existed={existed}).")
        return existed

    # --- Exercise Templates ---
    def get_exercise(self, exercise_id: str) -> Optional[ExerciseTemplate]:
        cursor = self.execute_query("SELECT id, data FROM exercises WHERE id = ?", (exercise_id,))
        return self._load(ExerciseTemplate, cursor.fetchone())

    def list_exercises(self) -> List[ExerciseTemplate]:
        cursor = self.execute_query("SELECT id, data FROM exercises ORDER BY rowid")
        return [self._load(ExerciseTemplate, row) for row in cursor.fetchall()]

    def count_exercises(self) -> int:
        return self.execute_query("SELECT COUNT(*) FROM exercises").fetchone()[0]

    def put_exercise(self, template: ExerciseTemplate, touch: bool = True) -> ExerciseTemplate:
        """Upserts a template and records a pending operation. Returns the stored template."""
        if not isinstance(template, ExerciseTemplate):
            raise InputError(f"Expected ExerciseTemplate, got {type(template).__name__}.")
        self._require_id(template.id, "Exercise")
        template = self._stamp(template, touch)
        updated_at = template.updated_at if template.updated_at is not None else self.clock()
        self._put("exercises", self._EXERCISE_COLUMNS, self._exercise_row(template), 'exercise', template.id, updated_at)
        return template

    def bulk_put_exercises(self, templates: List[ExerciseTemplate], track_changes: bool = True) -> int:
        """
        Upserts many templates in one transaction, keeping their timestamps.

        With `track_changes` each template gets a pending operation stamped with
        the current time; catalogue seeding passes False.
        """
        if not templates:
            return 0
        for template in templates:
            self._require_id(template.id, "Exercise")
        updated_at = self.clock()
        try:
            with self.transaction() as conn:
                self._write_rows(conn, "exercises", self._EXERCISE_COLUMNS,
                                 (self._exercise_row(t) for t in templates))
                if track_changes:
                    for template in templates:
                        track_sync_change(conn, 'exercise', template.id, updated_at)
        except sqlite3.Error as e:
            logger.error(f"Database error bulk-writing {len(templates)} exercises: {e}", exc_info=True)
            raise LiftiDBError(f"Database error bulk-writing exercises: {e}") from e
        logger.info(f"Stored {len(templates)} exercise templates (tracked={track_changes}).")
        return len(templates)

    def delete_exercise(self, exercise_id: str) -> bool:
        return self._delete("exercises", 'exercise', exercise_id)

    # --- Plans ---
    def get_plan(self, plan_id: str) -> Optional[Plan]:
        cursor = self.execute_query("SELECT id, data FROM plans WHERE id = ?", (plan_id,))
        return self._load(Plan, cursor.fetchone())

    def list_plans(self) -> List[Plan]:
        cursor = self.execute_query("SELECT id, data FROM plans ORDER BY rowid")
        return [self._load(Plan, row) for row in cursor.fetchall()]

    def put_plan(self, plan: Plan, touch: bool = True) -> Plan:
        """Upserts a plan and records a pending operation. Returns the stored plan."""
        if not isinstance(plan, Plan):
            raise InputError(f"Expected Plan, got {type(plan).__name__}.")
        self._require_id(plan.id, "Plan")
        plan = self._stamp(plan, touch)
        self._put("plans", self._PLAN_COLUMNS, self._plan_row(plan), 'plan', plan.id, plan.updated_at)
        return plan

    def delete_plan(self, plan_id: str) -> bool:
        return self._delete("plans", 'plan', plan_id)

    # --- Workout Sessions ---
    def get_session(self, session_id: str) -> Optional[WorkoutSession]:
        cursor = self.execute_query("SELECT id, data FROM sessions WHERE id = ?", (session_id,))
        return self._load(WorkoutSession, cursor.fetchone())

    def list_sessions(self) -> List[WorkoutSession]:
        cursor = self.execute_query("SELECT id, data FROM sessions ORDER BY rowid")
        return [self._load(WorkoutSession, row) for row in cursor.fetchall()]

    def list_sessions_for_plan(self, plan_id: str) -> List[WorkoutSession]:
        cursor = self.execute_query("SELECT id, data FROM sessions WHERE plan_id = ? ORDER BY started_at DESC",
                                    (plan_id,))
        return [self._load(WorkoutSession, row) for row in cursor.fetchall()]

    def put_session(self, session: WorkoutSession, touch: bool = True) -> WorkoutSession:
        """Upserts a session and records a pending operation. Returns the stored session."""
        if not isinstance(session, WorkoutSession):
            raise InputError(f"Expected WorkoutSession, got {type(session).__name__}.")
        self._require_id(session.id, "Session")
        session = self._stamp(session, touch)
        self._put("sessions", self._SESSION_COLUMNS, self._session_row(session), 'session', session.id,
                  session.updated_at)
        return session

    def delete_session(self, session_id: str) -> bool:
        return self._delete("sessions", 'session', session_id)

    # --- Snapshot support (no change tracking) ---
    def replace_rows(self, exercises: List[ExerciseTemplate], plans: List[Plan], sessions: List[WorkoutSession],
                     captured_pending: Optional[Mapping[str, int]] = None) -> int:
        """
        Upserts every given entity in one transaction without recording pending operations.

        Entities missing from the arguments are left untouched.

        Args:
            captured_pending: The pending log as it was when the written data was
                read. When given, an entity whose pending operation is not in it
                or has a different `updated_at` was edited locally afterwards;
                its row is kept and the incoming copy is skipped.

        Returns:
            The number of incoming entities skipped.
        """
        skipped = 0
        try:
            with self.transaction() as conn:
                if captured_pending is not None:
                    current = fetch_pending(conn)

                    def unchanged(entity_type: str, items: list) -> list:
                        nonlocal skipped
                        kept = []
                        for item in items:
                            key = sync_queue_key(entity_type, item.id)
                            if key in current and captured_pending.get(key) != current[key]:
                                skipped += 1
                                continue
                            kept.append(item)
                        return kept

                    exercises = unchanged('exercise', exercises)
                    plans = unchanged('plan', plans)
                    sessions = unchanged('session', sessions)

                self._write_rows(conn, "exercises", self._EXERCISE_COLUMNS, (self._exercise_row(e) for e in exercises))
                self._write_rows(conn, "plans", self._PLAN_COLUMNS, (self._plan_row(p) for p in plans))
                self._write_rows(conn, "sessions", self._SESSION_COLUMNS, (self._session_row(s) for s in sessions))
        except sqlite3.Error as e:
            logger.error(f"Database error writing snapshot rows: {e}", exc_info=True)
            raise LiftiDBError(f"Database error writing snapshot rows: {e}") from e
        logger.info(f"Wrote {len(exercises)} exercises, {len(plans)} plans, {len(sessions)} sessions "
                    f"({skipped} skipped as edited locally).")
        return skipped

    # --- Sync Metadata ---
    def get_sync_meta(self, key: str) -> Optional[str]:
        row = self.execute_query("SELECT value FROM sync_meta WHERE key = ?", (key,)).fetchone()
        return row['value'] if row else None

    def set_sync_meta(self, key: str, value: str):
        if not key:
            raise InputError("Sync metadata key cannot be empty.")
        with self.transaction():
            self.execute_query(
                "INSERT INTO sync_meta (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value = excluded.value",
                (key, str(value)))

    def remove_sync_meta(self, key: str):
        with self.transaction():
            self.execute_query("DELETE FROM sync_meta WHERE key = ?", (key,))


class TransactionContextManager:
    def __init__(self, db_instance: LiftiDB):
        self.db = db_instance
        self.conn: Optional[sqlite3.Connection] = None
        self.is_outermost_transaction = False

    def __enter__(self) -> sqlite3.Connection:
        self.conn = self.db.get_connection()
        depth = getattr(self.db._local, 'tx_depth', 0)
        if depth == 0:
            if self.conn.in_transaction:
                # Implicit transaction left open by a bare DML statement.
                self.conn.commit()
            self.conn.execute("BEGIN")
            self.is_outermost_transaction = True
            logger.debug(f"Transaction started (outermost) on thread {threading.get_ident()}.")
        self.db._local.tx_depth = depth + 1
        return self.conn

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.db._local.tx_depth -= 1
        if not self.is_outermost_transaction:
            return False

        if exc_type:
            logger.error(
                f"Transaction (outermost) failed, rolling back on thread {threading.get_ident()}: {exc_type.__name__} - {exc_val}")
            try:
                self.conn.rollback()
            except sqlite3.Error as rb_err:
                logger.critical(f"Rollback FAILED on thread {threading.get_ident()}: {rb_err}", exc_info=True)
            return False

        try:
            self.conn.commit()
            logger.debug(f"Transaction (outermost) committed successfully on thread {threading.get_ident()}.")
        except sqlite3.Error as commit_err:
            logger.error(f"Commit FAILED on thread {threading.get_ident()}, attempting rollback: {commit_err}",
                         exc_info=True)
            try:
                self.conn.rollback()
            except sqlite3.Error as rb_err:
                logger.critical(f"Rollback after failed commit also FAILED: {rb_err}", exc_info=True)
            raise LiftiDBError(f"Commit failed: {commit_err}") from commit_err
        return False

#
# End of Lifti_DB.py
#######################################################################################################################
